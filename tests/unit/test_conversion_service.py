from io import BytesIO

import fitz
import pytest
from docx import Document
from PIL import Image

from dochub.core.errors import ProcessingError
from dochub.schemas.processing import PdfToImagesOptions
from dochub.services.conversion_service import conversion_service


class TestImagesToPdf:
    def test_one_page_per_image(self, png_bytes: bytes, jpeg_bytes: bytes, rgba_png_bytes: bytes) -> None:
        pdf = conversion_service.images_to_pdf([png_bytes, jpeg_bytes, rgba_png_bytes])
        with fitz.open(stream=pdf, filetype="pdf") as doc:
            assert doc.page_count == 3

    def test_fixed_page_size(self, png_bytes: bytes) -> None:
        pdf = conversion_service.images_to_pdf([png_bytes], page_size="a4")
        with fitz.open(stream=pdf, filetype="pdf") as doc:
            assert doc[0].rect.width == pytest.approx(595.3, abs=0.5)
            assert doc[0].rect.height == pytest.approx(841.9, abs=0.5)

    def test_other_formats_are_normalized(self) -> None:
        buf = BytesIO()
        Image.new("RGB", (40, 40), (0, 0, 0)).save(buf, format="GIF")
        pdf = conversion_service.images_to_pdf([buf.getvalue()])
        assert pdf.startswith(b"%PDF")

    def test_rejects_empty_input(self) -> None:
        with pytest.raises(ProcessingError):
            conversion_service.images_to_pdf([])


class TestPdfToText:
    def test_text_layer_per_page(self, multi_page_pdf_bytes: bytes) -> None:
        text = conversion_service.pdf_to_text(multi_page_pdf_bytes, use_ocr=False)
        assert "--- Page 1 ---" in text
        assert "Page three content" in text

    def test_blank_page_without_ocr(self, empty_pdf_bytes: bytes) -> None:
        text = conversion_service.pdf_to_text(empty_pdf_bytes, use_ocr=False)
        assert text.strip() == "--- Page 1 ---"


class TestPdfToImages:
    def test_png_pages_in_range(self, multi_page_pdf_bytes: bytes) -> None:
        options = PdfToImagesOptions(page_range="range", start_page=2, end_page=3, quality="low")
        pages = conversion_service.pdf_to_images(multi_page_pdf_bytes, options, max_pages=10)
        assert [number for number, _ in pages] == [2, 3]
        image = Image.open(BytesIO(pages[0][1]))
        assert image.format == "PNG"
        assert image.size == (612, 792)

    def test_jpeg_specific_pages(self, multi_page_pdf_bytes: bytes) -> None:
        options = PdfToImagesOptions(output_format="jpg", page_range="specific", specific_pages="1, 3")
        pages = conversion_service.pdf_to_images(multi_page_pdf_bytes, options, max_pages=10)
        assert [number for number, _ in pages] == [1, 3]
        assert pages[0][1][:2] == b"\xff\xd8"

    def test_page_limit(self, multi_page_pdf_bytes: bytes) -> None:
        with pytest.raises(ProcessingError, match="Too many pages"):
            conversion_service.pdf_to_images(multi_page_pdf_bytes, PdfToImagesOptions(), max_pages=2)


class TestPdfToDocx:
    def test_report_contents(self, multi_page_pdf_bytes: bytes) -> None:
        docx_bytes = conversion_service.pdf_to_docx(multi_page_pdf_bytes, "report.pdf")
        document = Document(BytesIO(docx_bytes))
        paragraphs = [p.text for p in document.paragraphs]
        assert "Page 2" in paragraphs
        assert "Page two content" in paragraphs
        info = document.tables[0]
        assert info.cell(0, 1).text == "report.pdf"
        assert info.cell(1, 1).text == "3"
