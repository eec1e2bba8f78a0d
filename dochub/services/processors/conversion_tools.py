from typing import List

from dochub.core.config import settings
from dochub.schemas.processing import (
    ImageCompressOptions,
    ImagesToPdfOptions,
    OcrOptions,
    PdfToImagesOptions,
    PdfToWordOptions,
)
from dochub.services.conversion_service import conversion_service
from dochub.services.image_service import image_service
from dochub.services.processors.base import (
    AggregateRequest,
    BaseProcessor,
    ProcessorOutput,
    SingleRequest,
    ToolFamily,
)
from dochub.utils.files import epoch_millis, strip_extension

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class OcrProcessor(BaseProcessor):
    options_model = OcrOptions

    def process(self, request: SingleRequest) -> ProcessorOutput:
        text = conversion_service.pdf_to_text(
            request.data,
            use_ocr=self.options.use_ocr,
            language=self.options.language,
            dpi=self.options.dpi,
        )
        return ProcessorOutput(
            name=f"{strip_extension(request.name)}_ocr.txt",
            mime_type="text/plain",
            data=text.encode("utf-8"),
        )


class PdfToImagesProcessor(BaseProcessor):
    options_model = PdfToImagesOptions

    def process(self, request: SingleRequest) -> List[ProcessorOutput]:
        ext = "jpg" if self.options.output_format in ("jpg", "jpeg") else "png"
        mime_type = "image/jpeg" if ext == "jpg" else "image/png"
        base = strip_extension(request.name)
        pages = conversion_service.pdf_to_images(request.data, self.options, settings.IMAGE_RENDER_MAX_PAGES)
        return [
            ProcessorOutput(name=f"{base}_page_{number:03d}.{ext}", mime_type=mime_type, data=data)
            for number, data in pages
        ]


class PdfToWordProcessor(BaseProcessor):
    options_model = PdfToWordOptions

    def process(self, request: SingleRequest) -> ProcessorOutput:
        return ProcessorOutput(
            name=f"{strip_extension(request.name)}_converted.docx",
            mime_type=DOCX_MIME,
            data=conversion_service.pdf_to_docx(request.data, request.name),
        )


class ImagesToPdfProcessor(BaseProcessor):
    family = ToolFamily.AGGREGATE
    options_model = ImagesToPdfOptions

    def process(self, request: AggregateRequest) -> ProcessorOutput:
        data = conversion_service.images_to_pdf([item.data for item in request.items], self.options.page_size)
        return ProcessorOutput(
            name=f"images_to_pdf_{epoch_millis()}.pdf",
            mime_type="application/pdf",
            data=data,
            original_name=f"{len(request.items)}_images_combined.pdf",
        )


class ImageCompressProcessor(BaseProcessor):
    options_model = ImageCompressOptions

    def process(self, request: SingleRequest) -> ProcessorOutput:
        data, ext, mime_type = image_service.compress(request.data, self.options)
        return ProcessorOutput(
            name=f"{strip_extension(request.name)}_compressed.{ext}",
            mime_type=mime_type,
            data=data,
        )
