from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Type

from pydantic import ValidationError

from dochub.core.errors import InvalidToolError
from dochub.services.processors.base import BaseProcessor, ToolFamily
from dochub.services.processors.conversion_tools import (
    ImageCompressProcessor,
    ImagesToPdfProcessor,
    OcrProcessor,
    PdfToImagesProcessor,
    PdfToWordProcessor,
)
from dochub.services.processors.pdf_tools import (
    AnnotateProcessor,
    CompressProcessor,
    ExtractProcessor,
    MergeProcessor,
    ProtectProcessor,
    RotateProcessor,
    SignatureProcessor,
    SplitProcessor,
    UnlockProcessor,
    WatermarkProcessor,
)


class ToolId(str, Enum):
    PDF_MERGE = "pdf-merge"
    PDF_SPLIT = "pdf-split"
    PDF_EXTRACT = "pdf-extract"
    PDF_COMPRESS = "pdf-compress"
    PDF_WATERMARK = "pdf-watermark"
    PDF_PROTECT = "pdf-protect"
    PDF_UNLOCK = "pdf-unlock"
    PDF_ROTATE = "pdf-rotate"
    PDF_OCR = "pdf-ocr"
    PDF_TO_IMAGES = "pdf-to-images"
    PDF_TO_WORD = "pdf-to-word"
    IMAGES_TO_PDF = "images-to-pdf"
    IMAGE_COMPRESS = "image-compress"
    ADD_SIGNATURE = "add-signature"
    PDF_ANNOTATE = "pdf-annotate"


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


class ProcessorRegistry:
    """Closed mapping of tool ids to processor classes, fixed at construction."""

    def __init__(self, processors: Mapping[ToolId, Type[BaseProcessor]]):
        self._processors = MappingProxyType(dict(processors))

    def resolve(self, tool_id: str) -> ToolId:
        try:
            return ToolId(tool_id)
        except ValueError:
            raise InvalidToolError(f"Invalid tool ID: {tool_id}. Error: unknown tool") from None

    def processor_class(self, tool_id: str) -> Type[BaseProcessor]:
        key = self.resolve(tool_id)
        if key not in self._processors:
            raise InvalidToolError(f"Invalid tool ID: {tool_id}. Error: no processor registered")
        return self._processors[key]

    def family(self, tool_id: str) -> ToolFamily:
        return self.processor_class(tool_id).family

    def create(self, tool_id: str, options: Optional[Dict[str, Any]] = None) -> BaseProcessor:
        processor_cls = self.processor_class(tool_id)
        try:
            return processor_cls(options or {})
        except ValidationError as exc:
            raise InvalidToolError(f"Invalid tool ID: {tool_id}. Error: {_describe(exc)}") from exc

    def tool_ids(self) -> List[str]:
        return [tool.value for tool in self._processors]


registry = ProcessorRegistry({
    ToolId.PDF_MERGE: MergeProcessor,
    ToolId.PDF_SPLIT: SplitProcessor,
    ToolId.PDF_EXTRACT: ExtractProcessor,
    ToolId.PDF_COMPRESS: CompressProcessor,
    ToolId.PDF_WATERMARK: WatermarkProcessor,
    ToolId.PDF_PROTECT: ProtectProcessor,
    ToolId.PDF_UNLOCK: UnlockProcessor,
    ToolId.PDF_ROTATE: RotateProcessor,
    ToolId.PDF_OCR: OcrProcessor,
    ToolId.PDF_TO_IMAGES: PdfToImagesProcessor,
    ToolId.PDF_TO_WORD: PdfToWordProcessor,
    ToolId.IMAGES_TO_PDF: ImagesToPdfProcessor,
    ToolId.IMAGE_COMPRESS: ImageCompressProcessor,
    ToolId.ADD_SIGNATURE: SignatureProcessor,
    ToolId.PDF_ANNOTATE: AnnotateProcessor,
})
