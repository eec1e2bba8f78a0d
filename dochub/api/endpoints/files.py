import logging
from email.utils import formatdate, parsedate_to_datetime
from fastapi import APIRouter, Request, Response
from fastapi.concurrency import run_in_threadpool
from typing import Dict, Optional

from dochub.core.errors import DocHubError
from dochub.services.storage_service import StoredFileStat, storage_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["File Management"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Range, If-Modified-Since",
}


def validator_headers(stat: StoredFileStat) -> Dict[str, str]:
    return {
        "Last-Modified": formatdate(stat.mtime, usegmt=True),
        "ETag": f'"{int(stat.mtime * 1000)}-{stat.size}"',
    }


def not_modified_since(request: Request, stat: StoredFileStat) -> bool:
    """True when ``If-Modified-Since`` is at or after the file mtime (second precision)."""
    header = request.headers.get("if-modified-since")
    if not header:
        return False
    try:
        since = parsedate_to_datetime(header)
    except (TypeError, ValueError):
        return False
    return int(stat.mtime) <= since.timestamp()


@router.head("/{file_id}")
async def file_info(file_id: str):
    try:
        stat = storage_service.stat(file_id)
    except DocHubError as exc:
        return Response(status_code=exc.status_code)

    headers = {
        **validator_headers(stat),
        **CORS_HEADERS,
        "Content-Type": stat.content_type,
        "Content-Length": str(stat.size),
        "Accept-Ranges": "bytes",
    }
    return Response(status_code=200, headers=headers)


@router.get("/{file_id}")
async def serve_file(file_id: str, request: Request, preview: bool = False, name: Optional[str] = None):
    stat = storage_service.stat(file_id)
    headers = {**validator_headers(stat), **CORS_HEADERS}

    if not_modified_since(request, stat):
        return Response(status_code=304, headers=headers)

    content = await run_in_threadpool(storage_service.read, file_id)
    if preview:
        headers["Content-Disposition"] = "inline"
        headers["Cache-Control"] = "public, max-age=3600"
    else:
        headers["Content-Disposition"] = f'attachment; filename="{name or stat.name}"'
        headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return Response(content=content, media_type=stat.content_type, headers=headers)


@router.options("/{file_id}")
async def file_preflight(file_id: str):
    return Response(status_code=200, headers={**CORS_HEADERS, "Access-Control-Max-Age": "86400"})
