import logging
from fastapi import APIRouter, UploadFile, File as FileParam
from fastapi.concurrency import run_in_threadpool
from typing import List, Optional

from dochub.core.config import settings
from dochub.core.errors import InvalidInputError, StorageError
from dochub.schemas.response import APIResponse
from dochub.services.storage_service import storage_service
from dochub.utils.files import content_type_for, format_file_size

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["File Upload"])


def check_upload(name: str, content_type: str, content: bytes) -> Optional[str]:
    """Reason the file is refused, or None when it may be stored."""
    if len(content) > settings.MAX_UPLOAD_SIZE:
        return f"File {name} is too large. Maximum size is {format_file_size(settings.MAX_UPLOAD_SIZE)}"
    if content_type not in settings.ALLOWED_UPLOAD_TYPES:
        return f"File {name} has unsupported type: {content_type}"
    if not content:
        return f"File {name} is empty"
    return None


@router.post("", response_model=dict)
async def upload_files(files: Optional[List[UploadFile]] = FileParam(None)):
    if not files:
        raise InvalidInputError("No files provided")

    stored = []
    warnings = []
    for upload in files:
        name = upload.filename or "upload"
        content_type = upload.content_type
        if not content_type or content_type == "application/octet-stream":
            content_type = content_type_for(name)
        content = await upload.read()

        problem = check_upload(name, content_type, content)
        if problem:
            logger.warning("Upload rejected: %s", problem)
            warnings.append(problem)
            continue
        try:
            stored.append(await run_in_threadpool(storage_service.save, name, content, content_type))
        except StorageError as exc:
            warnings.append(f"Failed to upload {name}: {exc.details or exc.message}")

    if not stored:
        raise InvalidInputError("No files were uploaded successfully", details="; ".join(warnings) or None)

    return APIResponse(
        success=True,
        data=[item.model_dump(by_alias=True) for item in stored],
        message=f"Successfully uploaded {len(stored)} file(s)",
        warnings=warnings or None,
    ).to_content()


@router.get("", response_model=dict)
async def upload_limits():
    return APIResponse(
        success=True,
        data={
            "maxFileSize": settings.MAX_UPLOAD_SIZE,
            "maxFileSizeFormatted": format_file_size(settings.MAX_UPLOAD_SIZE),
            "allowedTypes": settings.ALLOWED_UPLOAD_TYPES,
            "retentionHours": settings.FILE_RETENTION_HOURS,
        },
    ).to_content()
