from typing import List

from dochub.schemas.processing import (
    AnnotateOptions,
    CompressOptions,
    ExtractOptions,
    MergeOptions,
    ProtectOptions,
    RotateOptions,
    SignatureOptions,
    SplitOptions,
    UnlockOptions,
    WatermarkOptions,
)
from dochub.services.markup_service import markup_service
from dochub.services.pdf_service import pdf_service
from dochub.services.processors.base import (
    AnnotatedRequest,
    BaseProcessor,
    MergeRequest,
    ProcessorOutput,
    SingleRequest,
    ToolFamily,
)
from dochub.utils.files import epoch_millis, strip_extension

PDF_MIME = "application/pdf"


def pdf_output(source_name: str, suffix: str, data: bytes) -> ProcessorOutput:
    return ProcessorOutput(name=f"{strip_extension(source_name)}_{suffix}.pdf", mime_type=PDF_MIME, data=data)


class MergeProcessor(BaseProcessor):
    family = ToolFamily.MERGE
    options_model = MergeOptions

    def process(self, request: MergeRequest) -> ProcessorOutput:
        documents = [request.primary, *request.additional]
        return ProcessorOutput(
            name=f"merged_{epoch_millis()}.pdf",
            mime_type=PDF_MIME,
            data=pdf_service.merge_pdfs(documents),
            original_name=f"merged_{len(documents)}_files.pdf",
        )


class SplitProcessor(BaseProcessor):
    options_model = SplitOptions

    def process(self, request: SingleRequest) -> List[ProcessorOutput]:
        parts = pdf_service.split(request.data, self.options)
        return [pdf_output(request.name, f"split_{n}", data) for n, data in enumerate(parts, start=1)]


class ExtractProcessor(BaseProcessor):
    options_model = ExtractOptions

    def process(self, request: SingleRequest) -> ProcessorOutput:
        return pdf_output(request.name, "extracted", pdf_service.extract(request.data, self.options))


class CompressProcessor(BaseProcessor):
    options_model = CompressOptions

    def process(self, request: SingleRequest) -> ProcessorOutput:
        data = pdf_service.compress(request.data, self.options.compression_level)
        return pdf_output(request.name, "compressed", data)


class WatermarkProcessor(BaseProcessor):
    options_model = WatermarkOptions

    def process(self, request: SingleRequest) -> ProcessorOutput:
        return pdf_output(request.name, "watermarked", markup_service.watermark(request.data, self.options))


class ProtectProcessor(BaseProcessor):
    options_model = ProtectOptions

    def process(self, request: SingleRequest) -> ProcessorOutput:
        data = pdf_service.encrypt(
            request.data,
            user_password=self.options.effective_user_password,
            owner_password=self.options.owner_password,
        )
        return pdf_output(request.name, "protected", data)


class UnlockProcessor(BaseProcessor):
    options_model = UnlockOptions

    def process(self, request: SingleRequest) -> ProcessorOutput:
        return pdf_output(request.name, "unlocked", pdf_service.decrypt(request.data, self.options.password))


class RotateProcessor(BaseProcessor):
    options_model = RotateOptions

    def process(self, request: SingleRequest) -> ProcessorOutput:
        data = pdf_service.rotate(request.data, self.options.rotation, self.options.pages)
        return pdf_output(request.name, "rotated", data)


class SignatureProcessor(BaseProcessor):
    options_model = SignatureOptions

    def process(self, request: SingleRequest) -> ProcessorOutput:
        return pdf_output(request.name, "signed", markup_service.add_signature(request.data, self.options))


class AnnotateProcessor(BaseProcessor):
    """Annotations arrive through the constructor options, never through ``process``."""

    family = ToolFamily.ANNOTATED
    options_model = AnnotateOptions

    def process(self, request: AnnotatedRequest) -> ProcessorOutput:
        data = markup_service.annotate(request.primary, self.options.annotations)
        return pdf_output(request.name, "annotated", data)
