from fastapi import APIRouter, Response
from fastapi.concurrency import run_in_threadpool
from typing import Optional

from dochub.schemas.response import APIResponse
from dochub.services.storage_service import storage_service

router = APIRouter(prefix="/download", tags=["File Management"])


@router.get("/{file_id}")
async def download_file(file_id: str, name: Optional[str] = None):
    stat = storage_service.stat(file_id)
    content = await run_in_threadpool(storage_service.read, file_id)
    return Response(
        content=content,
        media_type=stat.content_type,
        headers={
            "Content-Disposition": f'attachment; filename="{name or stat.name}"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        },
    )


@router.delete("/{file_id}", response_model=dict)
async def delete_file(file_id: str):
    await run_in_threadpool(storage_service.delete, file_id)
    return APIResponse(success=True, message="File deleted successfully").to_content()
