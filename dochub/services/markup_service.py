"""Drawing on top of existing PDF pages: watermarks, signatures and annotations.

All coordinates handed to PyMuPDF are in points with the origin at the top-left
corner of the page, which is also how the browser editor reports positions.
"""

import base64
import logging
from io import BytesIO
from typing import Iterable, Tuple

import fitz
from PIL import Image

from dochub.core.errors import ProcessingError
from dochub.schemas.processing import Annotation, SignatureOptions, WatermarkOptions

logger = logging.getLogger(__name__)

WATERMARK_MARGIN = 50
ANNOTATION_FONT_SIZE = 12
HIGHLIGHT_OPACITY = 0.3
DEFAULT_SHAPE_SIZE = (100, 20)

# Scale applied to signature images by source
SIGNATURE_IMAGE_SCALE = {"draw": 0.5, "upload": 0.3}

# Base-14 fonts only, so nothing has to be embedded
SIGNATURE_FONTS = {
    "helvetica": "helv",
    "courier": "cour",
    "times": "tiro",
}
DEFAULT_SIGNATURE_FONT = "tiit"


def hex_to_rgb(color: str) -> Tuple[float, float, float]:
    value = color.lstrip("#")
    return tuple(int(value[i:i + 2], 16) / 255 for i in (0, 2, 4))


def decode_data_url(payload: str) -> bytes:
    """Bytes of a ``data:image/png;base64,...`` URL or of bare base64."""
    if payload.startswith("data:"):
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=False)
    except ValueError as exc:
        raise ProcessingError("Signature image is not valid base64", details=str(exc)) from exc


class MarkupService:
    @staticmethod
    def _open(pdf_content: bytes) -> fitz.Document:
        doc = fitz.open(stream=pdf_content, filetype="pdf")
        if doc.needs_pass:
            doc.close()
            raise ProcessingError("PDF is password protected", details="Unlock the document first")
        return doc

    @staticmethod
    def _save(doc: fitz.Document) -> bytes:
        return doc.tobytes(garbage=3, deflate=True)

    @staticmethod
    def _watermark_origin(page_rect: fitz.Rect, text_width: float, font_size: float, position: str) -> fitz.Point:
        vertical, _, horizontal = position.partition("-")
        if position == "center":
            vertical, horizontal = "center", "center"

        if horizontal == "left":
            x = WATERMARK_MARGIN
        elif horizontal == "right":
            x = page_rect.width - text_width - WATERMARK_MARGIN
        else:
            x = (page_rect.width - text_width) / 2

        if vertical == "top":
            y = WATERMARK_MARGIN + font_size
        elif vertical == "bottom":
            y = page_rect.height - WATERMARK_MARGIN
        else:
            y = page_rect.height / 2
        return fitz.Point(x, y)

    @staticmethod
    def watermark(pdf_content: bytes, options: WatermarkOptions) -> bytes:
        color = hex_to_rgb(options.color)
        with MarkupService._open(pdf_content) as doc:
            text_width = fitz.get_text_length(options.watermark_text, fontname="helv", fontsize=options.font_size)
            for page in doc:
                origin = MarkupService._watermark_origin(page.rect, text_width, options.font_size, options.position)
                pivot = fitz.Point(origin.x + text_width / 2, origin.y)
                page.insert_text(
                    origin,
                    options.watermark_text,
                    fontname="helv",
                    fontsize=options.font_size,
                    color=color,
                    fill_opacity=options.opacity,
                    morph=(pivot, fitz.Matrix(-options.rotation)),
                    overlay=True,
                )
            return MarkupService._save(doc)

    @staticmethod
    def add_signature(pdf_content: bytes, options: SignatureOptions) -> bytes:
        """Stamp the signature on the first page; position is a percentage from the top-left."""
        signature = options.signature
        with MarkupService._open(pdf_content) as doc:
            if doc.page_count == 0:
                raise ProcessingError("PDF has no pages to sign")
            page = doc[0]
            x = page.rect.width * options.position.x / 100
            y = page.rect.height * options.position.y / 100

            if signature.type == "type":
                font = SIGNATURE_FONTS.get((signature.font or "").lower(), DEFAULT_SIGNATURE_FONT)
                page.insert_text(
                    fitz.Point(x, y),
                    signature.text,
                    fontname=font,
                    fontsize=signature.size,
                    color=hex_to_rgb(signature.color),
                )
            else:
                image_bytes = decode_data_url(signature.canvas if signature.type == "draw" else signature.image)
                with Image.open(BytesIO(image_bytes)) as img:
                    width, height = img.size
                scale = SIGNATURE_IMAGE_SCALE[signature.type]
                rect = fitz.Rect(x, y, x + width * scale, y + height * scale)
                page.insert_image(rect, stream=image_bytes, keep_proportion=True)
            return MarkupService._save(doc)

    @staticmethod
    def _draw_annotation(page: fitz.Page, annotation: Annotation) -> None:
        pos = annotation.position
        color = hex_to_rgb(annotation.color)
        width = pos.width or DEFAULT_SHAPE_SIZE[0]
        height = pos.height or DEFAULT_SHAPE_SIZE[1]
        rect = fitz.Rect(pos.x, pos.y, pos.x + width, pos.y + height)

        if annotation.type in ("text", "note"):
            if annotation.text:
                page.insert_text(
                    fitz.Point(pos.x, pos.y + ANNOTATION_FONT_SIZE),
                    annotation.text,
                    fontname="helv",
                    fontsize=ANNOTATION_FONT_SIZE,
                    color=color,
                )
        elif annotation.type == "highlight":
            page.draw_rect(rect, color=None, fill=color, fill_opacity=HIGHLIGHT_OPACITY, overlay=True)
        elif annotation.type == "rectangle":
            page.draw_rect(rect, color=color, width=2)
        elif annotation.type == "circle":
            page.draw_oval(rect, color=color, width=2)
        elif annotation.type == "line":
            page.draw_line(
                fitz.Point(pos.x, pos.y),
                fitz.Point(pos.x + width, pos.y + (pos.height or 0)),
                color=color,
                width=2,
            )

    @staticmethod
    def annotate(pdf_content: bytes, annotations: Iterable[Annotation]) -> bytes:
        with MarkupService._open(pdf_content) as doc:
            for annotation in annotations:
                if annotation.page > doc.page_count:
                    logger.warning(
                        "Annotation %s targets page %d of a %d page document; skipped",
                        annotation.id, annotation.page, doc.page_count,
                    )
                    continue
                MarkupService._draw_annotation(doc[annotation.page - 1], annotation)
            return MarkupService._save(doc)

markup_service = MarkupService()
