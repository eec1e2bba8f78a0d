from fastapi import APIRouter

from .process import router as process_router
from .upload import router as upload_router
from .files import router as files_router
from .download import router as download_router

router = APIRouter()
router.include_router(process_router)
router.include_router(upload_router)
router.include_router(files_router)
router.include_router(download_router)
