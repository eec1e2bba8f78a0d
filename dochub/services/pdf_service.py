import logging
from io import BytesIO
from typing import Iterable, List, Optional, Sequence

from pypdf import PdfReader, PdfWriter

from dochub.core.errors import ProcessingError
from dochub.schemas.processing import ExtractOptions, SplitOptions
from dochub.utils.pages import clamp_pages, expand_page_ranges, page_window

logger = logging.getLogger(__name__)

PRODUCER = "UPSA DocHub"

# JPEG quality used when re-encoding embedded images; None leaves images alone
IMAGE_QUALITY = {
    "low": None,
    "medium": None,
    "high": 60,
    "maximum": 35,
}


class PDFService:
    @staticmethod
    def open(pdf_content: bytes, password: str = "") -> PdfReader:
        """Read a PDF, unlocking it with ``password`` (empty by default) when encrypted."""
        reader = PdfReader(BytesIO(pdf_content))
        if reader.is_encrypted and not reader.decrypt(password):
            raise ProcessingError("PDF is password protected", details="Unlock the document first")
        return reader

    @staticmethod
    def _write(writer: PdfWriter) -> bytes:
        output = BytesIO()
        writer.write(output)
        output.seek(0)
        return output.read()

    @staticmethod
    def select_pages(reader: PdfReader, indices: Iterable[int]) -> bytes:
        """New PDF holding the given 0-based pages of ``reader`` in order."""
        writer = PdfWriter()
        for index in indices:
            writer.add_page(reader.pages[index])
        return PDFService._write(writer)

    @staticmethod
    def merge_pdfs(pdf_files: Sequence[bytes]) -> bytes:
        """Merge multiple PDF files into one."""
        merger = PdfWriter()

        for pdf_content in pdf_files:
            reader = PDFService.open(pdf_content)
            for page in reader.pages:
                merger.add_page(page)

        return PDFService._write(merger)

    @staticmethod
    def split(pdf_content: bytes, options: SplitOptions) -> List[bytes]:
        reader = PDFService.open(pdf_content)
        total = len(reader.pages)

        if options.split_mode == "range":
            indices = page_window(options.start_page, options.end_page, total)
            if not indices:
                raise ProcessingError(f"Page range is outside the document ({total} pages)")
            return [PDFService.select_pages(reader, indices)]

        if options.split_mode == "pages":
            pages = clamp_pages(options.specific_pages or range(1, total + 1), total)
            if not pages:
                raise ProcessingError(f"No valid pages to split ({total} pages)")
            return [PDFService.select_pages(reader, [page - 1]) for page in pages]

        step = options.every_n_pages
        return [
            PDFService.select_pages(reader, range(start, min(start + step, total)))
            for start in range(0, total, step)
        ]

    @staticmethod
    def extract(pdf_content: bytes, options: ExtractOptions) -> bytes:
        """One PDF holding the chosen pages.

        Ranges mode keeps each page once in document order; individual mode keeps
        the caller's order.
        """
        reader = PDFService.open(pdf_content)
        total = len(reader.pages)

        if options.extract_mode == "ranges":
            indices = expand_page_ranges([r.as_tuple() for r in options.page_ranges], total)
        else:
            indices = [page - 1 for page in clamp_pages(options.selected_pages, total)]

        if not indices:
            raise ProcessingError(f"No valid pages to extract ({total} pages)")
        return PDFService.select_pages(reader, indices)

    @staticmethod
    def compress(pdf_content: bytes, level: str = "medium") -> bytes:
        """Re-write the document with compressed streams and without its metadata.

        From ``medium`` up identical objects are merged; ``high`` and ``maximum``
        also re-encode embedded RGB and greyscale images as JPEG.
        """
        reader = PDFService.open(pdf_content)
        writer = PdfWriter()
        for page in reader.pages:
            writer.add_page(page)

        quality = IMAGE_QUALITY[level]
        for page in writer.pages:
            if quality is not None:
                for image in page.images:
                    if image.image is None or image.image.mode not in ("RGB", "L"):
                        continue
                    try:
                        image.replace(image.image, quality=quality)
                    except Exception as exc:
                        logger.warning("Could not re-encode image %s: %s", image.name, exc)
            page.compress_content_streams(level=9)

        if level != "low":
            writer.compress_identical_objects(remove_identicals=True, remove_orphans=True)
        writer.add_metadata({"/Producer": PRODUCER})
        return PDFService._write(writer)

    @staticmethod
    def encrypt(pdf_content: bytes, user_password: str, owner_password: Optional[str] = None) -> bytes:
        reader = PDFService.open(pdf_content)
        writer = PdfWriter(clone_from=reader)
        writer.encrypt(
            user_password=user_password,
            owner_password=owner_password or None,
            algorithm="AES-256",
        )
        return PDFService._write(writer)

    @staticmethod
    def decrypt(pdf_content: bytes, password: str) -> bytes:
        reader = PdfReader(BytesIO(pdf_content))
        if reader.is_encrypted and not reader.decrypt(password):
            raise ProcessingError("Incorrect password")
        writer = PdfWriter()
        for page in reader.pages:
            writer.add_page(page)
        return PDFService._write(writer)

    @staticmethod
    def rotate(pdf_content: bytes, degrees: int, pages: Optional[Sequence[int]] = None) -> bytes:
        """Add ``degrees`` to the rotation of every page, or of the 1-based ``pages``."""
        reader = PDFService.open(pdf_content)
        writer = PdfWriter(clone_from=reader)
        total = len(writer.pages)

        targets = clamp_pages(pages, total) if pages else list(range(1, total + 1))
        if not targets:
            raise ProcessingError(f"No valid pages to rotate ({total} pages)")
        for page_number in targets:
            writer.pages[page_number - 1].rotate(degrees)
        return PDFService._write(writer)

pdf_service = PDFService()
