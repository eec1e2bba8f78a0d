import logging
from datetime import datetime
from io import BytesIO
from typing import List, Sequence, Tuple

import fitz
import img2pdf
from docx import Document
from docx.shared import Pt
from PIL import Image

from dochub.core.errors import ProcessingError
from dochub.schemas.processing import PdfToImagesOptions
from dochub.utils.pages import expand_page_ranges, page_window, parse_page_spec

logger = logging.getLogger(__name__)


class ConversionService:
    # Formats img2pdf embeds as-is; anything else is re-encoded to PNG first
    PASSTHROUGH_FORMATS = {'JPEG', 'PNG'}

    PAGE_SIZES = {
        'a4': (img2pdf.mm_to_pt(210), img2pdf.mm_to_pt(297)),
        'letter': (img2pdf.in_to_pt(8.5), img2pdf.in_to_pt(11)),
    }

    RENDER_SCALES = {'low': 1.0, 'medium': 1.5, 'high': 2.0}

    @staticmethod
    def _normalize_image(image_bytes: bytes) -> bytes:
        """Return bytes img2pdf accepts: JPEG/PNG without alpha pass through untouched."""
        with Image.open(BytesIO(image_bytes)) as img:
            has_alpha = 'A' in img.getbands() or 'transparency' in img.info
            if img.format in ConversionService.PASSTHROUGH_FORMATS and not has_alpha:
                return image_bytes

            if has_alpha:
                rgba = img.convert('RGBA')
                flattened = Image.new('RGB', rgba.size, (255, 255, 255))
                flattened.paste(rgba, mask=rgba.getchannel('A'))
            else:
                flattened = img.convert('RGB')
            output = BytesIO()
            flattened.save(output, format='PNG')
            return output.getvalue()

    @staticmethod
    def images_to_pdf(images: Sequence[bytes], page_size: str = 'auto') -> bytes:
        """One PDF page per image, in the order given."""
        if not images:
            raise ProcessingError("No images to convert")
        normalized = [ConversionService._normalize_image(data) for data in images]
        if page_size in ConversionService.PAGE_SIZES:
            layout = img2pdf.get_layout_fun(ConversionService.PAGE_SIZES[page_size])
            return img2pdf.convert(normalized, layout_fun=layout)
        return img2pdf.convert(normalized)

    @staticmethod
    def pdf_to_text(pdf_content: bytes, use_ocr: bool = True, language: str = 'eng', dpi: int = 300) -> str:
        """Text of every page; pages without a text layer are OCR'd when ``use_ocr`` is set."""
        sections = []
        with fitz.open(stream=pdf_content, filetype="pdf") as doc:
            for number, page in enumerate(doc, start=1):
                text = page.get_text().strip()
                if not text and use_ocr:
                    logger.info("Page %d has no text layer, running OCR (%s)", number, language)
                    textpage = page.get_textpage_ocr(language=language, dpi=dpi, full=True)
                    text = page.get_text(textpage=textpage).strip()
                sections.append(f"--- Page {number} ---\n{text}")
        return "\n\n".join(sections) + "\n"

    @staticmethod
    def _render_indices(options: PdfToImagesOptions, total: int) -> List[int]:
        if options.page_range == 'range':
            return page_window(options.start_page, options.end_page, total)
        if options.page_range == 'specific':
            return expand_page_ranges(parse_page_spec(options.specific_pages), total)
        return list(range(total))

    @staticmethod
    def pdf_to_images(pdf_content: bytes, options: PdfToImagesOptions, max_pages: int) -> List[Tuple[int, bytes]]:
        """Render the selected pages, returning ``(page_number, image_bytes)`` pairs."""
        scale = ConversionService.RENDER_SCALES[options.quality]
        fmt = 'jpg' if options.output_format in ('jpg', 'jpeg') else 'png'
        rendered = []
        with fitz.open(stream=pdf_content, filetype="pdf") as doc:
            indices = ConversionService._render_indices(options, doc.page_count)
            if not indices:
                raise ProcessingError(f"No valid pages to render ({doc.page_count} pages)")
            if len(indices) > max_pages:
                raise ProcessingError(f"Too many pages to render: {len(indices)} (limit {max_pages})")

            matrix = fitz.Matrix(scale, scale)
            for index in indices:
                pix = doc[index].get_pixmap(matrix=matrix, alpha=False)
                if fmt == 'jpg':
                    rendered.append((index + 1, pix.tobytes('jpg', jpg_quality=90)))
                else:
                    rendered.append((index + 1, pix.tobytes('png')))
        return rendered

    @staticmethod
    def pdf_to_docx(pdf_content: bytes, original_name: str) -> bytes:
        """Word report of the PDF: an info table, then the text of each page under its own heading."""
        with fitz.open(stream=pdf_content, filetype="pdf") as pdf:
            pages = [page.get_text().strip() for page in pdf]

        document = Document()
        document.add_heading('PDF to Word Conversion', level=0)

        table = document.add_table(rows=3, cols=2)
        table.style = 'Table Grid'
        rows = [
            ('Original file', original_name),
            ('Pages', str(len(pages))),
            ('Converted', datetime.now().strftime('%Y-%m-%d %H:%M')),
        ]
        for row, (label, value) in zip(table.rows, rows):
            row.cells[0].text = label
            row.cells[1].text = value

        for number, text in enumerate(pages, start=1):
            document.add_heading(f'Page {number}', level=1)
            if not text:
                empty = document.add_paragraph().add_run('(no extractable text on this page)')
                empty.italic = True
                continue
            for line in text.splitlines():
                if line.strip():
                    document.add_paragraph(line.strip()).runs[0].font.size = Pt(11)

        output = BytesIO()
        document.save(output)
        return output.getvalue()

conversion_service = ConversionService()
