from fastapi import APIRouter, Form, UploadFile, File as FileParam
from fastapi.concurrency import run_in_threadpool
from typing import List, Optional

from dochub.schemas.response import APIResponse
from dochub.services.pipeline import UploadedBlob, parse_json_field, pipeline
from dochub.services.processors import registry
from dochub.utils.files import content_type_for

router = APIRouter(prefix="/process", tags=["Processing"])


async def read_uploads(files: Optional[List[UploadFile]], file: Optional[UploadFile]) -> List[UploadedBlob]:
    """Read the ``files`` form field, or the single ``file`` field when ``files`` is empty."""
    uploads = list(files or [])
    if not uploads and file is not None:
        uploads = [file]

    blobs = []
    for upload in uploads:
        name = upload.filename or "document"
        blobs.append(UploadedBlob(
            name=name,
            content_type=upload.content_type or content_type_for(name),
            data=await upload.read(),
        ))
    return blobs


@router.post("", response_model=dict)
async def process_files(
    files: Optional[List[UploadFile]] = FileParam(None),
    file: Optional[UploadFile] = FileParam(None),
    tool_id: Optional[str] = Form(None, alias="toolId"),
    options: Optional[str] = Form("{}"),
    annotations: Optional[str] = Form(None),
):
    blobs = await read_uploads(files, file)
    parsed_options = parse_json_field(options, "options", {})
    parsed_annotations = parse_json_field(annotations, "annotations", None)

    processed = await run_in_threadpool(pipeline.run, tool_id, blobs, parsed_options, parsed_annotations)

    return APIResponse(
        success=True,
        data=[item.model_dump(by_alias=True) for item in processed],
        message=f"Successfully processed {len(processed)} file(s)",
    ).to_content()


@router.get("", response_model=dict)
async def process_status():
    return APIResponse(
        success=True,
        message="PDF Processing API is running",
        data={
            "endpoints": {
                "POST /api/process": "Process files with a tool (multipart: files, toolId, options, annotations)",
            },
            "tools": registry.tool_ids(),
        },
    ).to_content()
