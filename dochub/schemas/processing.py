"""Per-tool option models for ``POST /api/process``.

The browser sends camelCase JSON (``compressionLevel``, ``everyNPages``); every
model accepts both that and the snake_case field names, and ignores keys it does
not recognise.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, List, Literal, Optional

from dochub.utils.pages import parse_page_spec

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class ToolOptions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class MergeOptions(ToolOptions):
    pass


class PageRangeSpec(ToolOptions):
    start: int = Field(..., ge=1)
    end: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_order(self):
        if self.end is not None and self.end < self.start:
            raise ValueError(f"page range end {self.end} is before start {self.start}")
        return self

    def as_tuple(self):
        return (self.start, self.end or 0)


class SplitOptions(ToolOptions):
    split_mode: Literal["range", "pages", "every"] = "range"
    start_page: Optional[int] = Field(None, ge=1)
    end_page: Optional[int] = Field(None, ge=1)
    specific_pages: Optional[List[int]] = None
    every_n_pages: int = Field(1, ge=1)

    @model_validator(mode="after")
    def check_window(self):
        if self.start_page and self.end_page and self.end_page < self.start_page:
            raise ValueError("endPage must not be before startPage")
        return self


class ExtractOptions(ToolOptions):
    extract_mode: Optional[Literal["ranges", "selected", "individual"]] = None
    page_ranges: List[PageRangeSpec] = Field(default_factory=list)
    selected_pages: List[int] = Field(default_factory=list)
    # Legacy single-string form, e.g. "1-3, 5"
    page_range: Optional[str] = None

    @model_validator(mode="after")
    def resolve_mode(self):
        if self.page_range and self.extract_mode is None:
            self.extract_mode = "ranges"
            self.page_ranges = [
                PageRangeSpec(start=start, end=end or None)
                for start, end in parse_page_spec(self.page_range)
            ]
        if self.extract_mode is None and self.page_ranges:
            self.extract_mode = "ranges"
        if self.extract_mode in (None, "selected"):
            self.extract_mode = "individual"

        if self.extract_mode == "ranges" and not self.page_ranges:
            raise ValueError("extractMode 'ranges' needs at least one entry in pageRanges")
        if self.extract_mode == "individual" and not self.selected_pages:
            raise ValueError("extractMode 'individual' needs at least one entry in selectedPages")
        return self


class CompressOptions(ToolOptions):
    compression_level: Literal["low", "medium", "high", "maximum"] = "medium"


WatermarkPosition = Literal[
    "center", "top-left", "top-center", "top-right",
    "bottom-left", "bottom-center", "bottom-right",
]


class WatermarkOptions(ToolOptions):
    watermark_text: str = Field("UPSA DocHub", min_length=1, max_length=200)
    font_size: float = Field(50, gt=0, le=400)
    opacity: float = Field(0.3, ge=0, le=1)
    rotation: float = Field(45, ge=-360, le=360)
    color: str = Field("#808080", pattern=HEX_COLOR)
    position: WatermarkPosition = Field(
        "center", validation_alias=AliasChoices("position", "watermarkPosition")
    )


class ProtectOptions(ToolOptions):
    password: Optional[str] = None
    user_password: Optional[str] = None
    owner_password: Optional[str] = None

    @model_validator(mode="after")
    def require_password(self):
        if not (self.user_password or self.password):
            raise ValueError("a password (or userPassword) is required to protect a PDF")
        return self

    @property
    def effective_user_password(self) -> str:
        return self.user_password or self.password or ""


class UnlockOptions(ToolOptions):
    password: str = ""


class RotateOptions(ToolOptions):
    rotation: int = 90
    pages: Optional[List[int]] = None

    @field_validator("rotation")
    @classmethod
    def right_angles_only(cls, v):
        if v % 90 != 0:
            raise ValueError("rotation must be a multiple of 90 degrees")
        return v


class OcrOptions(ToolOptions):
    use_ocr: bool = True
    language: str = Field("eng", min_length=1, max_length=50)
    dpi: int = Field(300, ge=72, le=600)


class PdfToImagesOptions(ToolOptions):
    output_format: Literal["png", "jpg", "jpeg"] = "png"
    quality: Literal["low", "medium", "high"] = "high"
    page_range: Literal["all", "range", "specific"] = "all"
    start_page: Optional[int] = Field(None, ge=1)
    end_page: Optional[int] = Field(None, ge=1)
    specific_pages: Optional[str] = None

    @model_validator(mode="after")
    def check_selection(self):
        if self.page_range == "specific":
            if not self.specific_pages:
                raise ValueError("pageRange 'specific' needs specificPages, e.g. '1, 3, 5-7'")
            parse_page_spec(self.specific_pages)
        if self.start_page and self.end_page and self.end_page < self.start_page:
            raise ValueError("endPage must not be before startPage")
        return self


class PdfToWordOptions(ToolOptions):
    pass


class ImagesToPdfOptions(ToolOptions):
    page_size: Literal["auto", "a4", "letter"] = "auto"


class ImageCompressOptions(ToolOptions):
    quality: Literal["low", "medium", "high"] = "medium"
    # 1-100, or a 0-1 fraction as sent by older clients
    compression: Optional[float] = Field(None, gt=0, le=100)
    max_width: Optional[int] = Field(None, ge=1)
    max_height: Optional[int] = Field(None, ge=1)
    output_format: Optional[Literal["jpg", "jpeg", "png", "webp"]] = None

    @property
    def jpeg_quality(self) -> int:
        if self.compression is not None:
            value = self.compression * 100 if self.compression <= 1 else self.compression
            return max(1, min(100, int(round(value))))
        return {"low": 40, "medium": 60, "high": 80}[self.quality]


class SignatureData(ToolOptions):
    type: Literal["draw", "type", "upload"]
    text: Optional[str] = None
    font: Optional[str] = None
    color: str = Field("#000000", pattern=HEX_COLOR)
    size: float = Field(24, gt=0, le=200)
    # data URL produced by the drawing canvas
    canvas: Optional[str] = None
    # base64 (or data URL) of an uploaded signature image
    image: Optional[str] = None

    @model_validator(mode="after")
    def check_payload(self):
        required = {"draw": "canvas", "type": "text", "upload": "image"}[self.type]
        if not getattr(self, required):
            raise ValueError(f"signature of type '{self.type}' needs '{required}'")
        return self


class SignaturePosition(ToolOptions):
    x: float = Field(50, ge=0, le=100)
    y: float = Field(80, ge=0, le=100)


class SignatureOptions(ToolOptions):
    signature: SignatureData
    position: SignaturePosition = Field(default_factory=SignaturePosition)


class AnnotationPosition(ToolOptions):
    x: float = Field(..., ge=0)
    y: float = Field(..., ge=0)
    width: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)


class Annotation(ToolOptions):
    id: str
    type: Literal["text", "highlight", "rectangle", "circle", "line", "note"] = "text"
    position: AnnotationPosition
    color: str = Field("#FF0000", pattern=HEX_COLOR)
    page: int = Field(1, ge=1)
    text: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def lift_flat_position(cls, data: Any):
        # the editor also posts {x, y, width, height} at the top level
        if isinstance(data, dict) and "position" not in data and "x" in data:
            data = dict(data)
            data["position"] = {
                key: data.pop(key) for key in ("x", "y", "width", "height") if key in data
            }
        return data


class AnnotateOptions(ToolOptions):
    annotations: List[Annotation] = Field(..., min_length=1)
