import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dochub.api import endpoints
from dochub.core.config import settings
from dochub.core.errors import DocHubError
from dochub.core.logging import setup_logging
from dochub.schemas.response import error_content
from dochub.services.storage_service import storage_service

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


async def sweep_expired_files(interval_seconds: float, retention_hours: float) -> None:
    """Delete stored uploads older than the retention window, forever."""
    while True:
        try:
            await run_in_threadpool(storage_service.purge_expired, retention_hours)
        except Exception:
            logger.exception("Stored file sweep failed")
        await asyncio.sleep(interval_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s %s starting, uploads in %s", settings.PROJECT_NAME, settings.VERSION, settings.upload_path)
    sweeper = None
    if settings.FILE_RETENTION_HOURS > 0:
        sweeper = asyncio.create_task(
            sweep_expired_files(settings.CLEANUP_INTERVAL_MINUTES * 60, settings.FILE_RETENTION_HOURS)
        )
    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass
        logger.info("%s shutting down", settings.PROJECT_NAME)


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DocHubError)
async def dochub_error_handler(request: Request, exc: DocHubError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details)
    return JSONResponse(status_code=exc.status_code, content=error_content(exc.message, exc.details))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
    return JSONResponse(status_code=400, content=error_content("Invalid request", problems))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_content("Internal server error", str(exc)))


# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.VERSION}

app.include_router(endpoints.router, prefix=settings.API_PREFIX)
