"""Dispatch of one ``/api/process`` request: intake checks, processor calls, packaging."""

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dochub.core.errors import InvalidInputError, ProcessingError
from dochub.schemas.file import ProcessedFile
from dochub.services.processors import (
    AggregateItem,
    AggregateRequest,
    AnnotatedRequest,
    BaseProcessor,
    MergeRequest,
    ProcessorOutput,
    ProcessorRegistry,
    SingleRequest,
    ToolFamily,
    registry,
)
from dochub.utils.files import epoch_millis, utc_now_iso

logger = logging.getLogger(__name__)

FAILURE_MESSAGES = {
    ToolFamily.MERGE: "Failed to merge PDF files",
    ToolFamily.AGGREGATE: "Failed to process images to PDF",
    ToolFamily.ANNOTATED: "Failed to process PDF annotations",
}


@dataclass
class UploadedBlob:
    name: str
    content_type: str
    data: bytes


def parse_json_field(raw: Optional[str], field: str, default: Any) -> Any:
    """Decode a JSON-encoded form field; blank means ``default``."""
    if raw is None or not raw.strip():
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"Invalid JSON in '{field}'", details=str(exc)) from exc


def new_processed_id(index: Optional[int] = None) -> str:
    stamp = epoch_millis()
    suffix = uuid.uuid4().hex[:9]
    if index is None:
        return f"processed_{stamp}_{suffix}"
    return f"processed_{stamp}_{index}_{suffix}"


class ProcessingPipeline:
    def __init__(self, processors: ProcessorRegistry = registry):
        self.processors = processors

    def run(
        self,
        tool_id: Optional[str],
        blobs: Sequence[UploadedBlob],
        options: Optional[Dict[str, Any]] = None,
        annotations: Optional[List[Any]] = None,
    ) -> List[ProcessedFile]:
        """Process every blob with ``tool_id`` and package the results.

        The first failure aborts the whole batch; nothing is returned for the
        files processed before it.
        """
        if not blobs:
            raise InvalidInputError("No files provided")
        if not tool_id:
            raise InvalidInputError("Tool ID is required")
        if options is None:
            options = {}
        if not isinstance(options, dict):
            raise InvalidInputError("Options must be a JSON object")
        for blob in blobs:
            if not blob.data:
                raise InvalidInputError(f"File contains no data: {blob.name}")

        family = self.processors.family(tool_id)
        if family is ToolFamily.ANNOTATED:
            if annotations is None:
                annotations = options.get("annotations", [])
            options = {**options, "annotations": annotations}
        if family is ToolFamily.MERGE and len(blobs) < 2:
            raise InvalidInputError("At least 2 PDF files are required for merging")

        processor = self.processors.create(tool_id, options)
        logger.info("Running %s on %d file(s)", tool_id, len(blobs))

        if family is ToolFamily.SINGLE:
            results: List[Tuple[ProcessorOutput, str]] = []
            for blob in blobs:
                request = SingleRequest(data=blob.data, name=blob.name, content_type=blob.content_type)
                outputs = self._call(processor, request, tool_id, f"Failed to process file: {blob.name}")
                results.extend((output, blob.name) for output in outputs)
        elif family is ToolFamily.MERGE:
            request = MergeRequest(primary=blobs[0].data, additional=[blob.data for blob in blobs[1:]])
            results = [(output, blobs[0].name) for output in self._call(processor, request, tool_id)]
        elif family is ToolFamily.AGGREGATE:
            request = AggregateRequest(items=[AggregateItem(data=b.data, content_type=b.content_type) for b in blobs])
            results = [(output, blobs[0].name) for output in self._call(processor, request, tool_id)]
        else:
            request = AnnotatedRequest(primary=blobs[0].data, name=blobs[0].name)
            results = [(output, blobs[0].name) for output in self._call(processor, request, tool_id)]

        return self._package(results, tool_id)

    def _call(
        self,
        processor: BaseProcessor,
        request: Any,
        tool_id: str,
        failure_message: Optional[str] = None,
    ) -> List[ProcessorOutput]:
        try:
            produced = processor.process(request)
        except InvalidInputError:
            raise
        except Exception as exc:
            message = failure_message or FAILURE_MESSAGES[processor.family]
            logger.error("%s (%s): %s", message, tool_id, exc)
            raise ProcessingError(message, details=str(exc)) from exc
        return produced if isinstance(produced, list) else [produced]

    @staticmethod
    def _package(results: List[Tuple[ProcessorOutput, str]], tool_id: str) -> List[ProcessedFile]:
        multiple = len(results) > 1
        processed_at = utc_now_iso()
        return [
            ProcessedFile(
                id=new_processed_id(index if multiple else None),
                name=output.name,
                original_name=output.original_name or source_name,
                size=len(output.data),
                type=output.mime_type,
                data=list(output.data),
                processed_at=processed_at,
                tool_used=tool_id,
            )
            for index, (output, source_name) in enumerate(results)
        ]

pipeline = ProcessingPipeline()
