from io import BytesIO

import pytest
from pypdf import PdfReader

from dochub.core.errors import ProcessingError
from dochub.schemas.processing import ExtractOptions, SplitOptions
from dochub.services.pdf_service import pdf_service


def _pages(pdf: bytes) -> int:
    return len(PdfReader(BytesIO(pdf)).pages)


def _text(pdf: bytes) -> str:
    return "\n".join(page.extract_text() for page in PdfReader(BytesIO(pdf)).pages)


class TestMergeAndSplit:
    def test_merge_keeps_order(self, sample_pdf_bytes: bytes, multi_page_pdf_bytes: bytes) -> None:
        merged = pdf_service.merge_pdfs([sample_pdf_bytes, multi_page_pdf_bytes])
        reader = PdfReader(BytesIO(merged))
        assert len(reader.pages) == 4
        assert "Hello PDF World" in reader.pages[0].extract_text()
        assert "Page three content" in reader.pages[3].extract_text()

    def test_split_range(self, multi_page_pdf_bytes: bytes) -> None:
        parts = pdf_service.split(multi_page_pdf_bytes, SplitOptions(start_page=2, end_page=3))
        assert len(parts) == 1
        assert _pages(parts[0]) == 2
        assert "Page one content" not in _text(parts[0])

    def test_split_every_page(self, multi_page_pdf_bytes: bytes) -> None:
        parts = pdf_service.split(multi_page_pdf_bytes, SplitOptions(split_mode="pages"))
        assert [_pages(part) for part in parts] == [1, 1, 1]

    def test_split_specific_pages(self, multi_page_pdf_bytes: bytes) -> None:
        parts = pdf_service.split(multi_page_pdf_bytes, SplitOptions(split_mode="pages", specific_pages=[3, 9]))
        assert len(parts) == 1
        assert "Page three content" in _text(parts[0])

    def test_split_in_chunks(self, multi_page_pdf_bytes: bytes) -> None:
        parts = pdf_service.split(multi_page_pdf_bytes, SplitOptions(split_mode="every", every_n_pages=2))
        assert [_pages(part) for part in parts] == [2, 1]

    def test_split_range_outside_document(self, multi_page_pdf_bytes: bytes) -> None:
        with pytest.raises(ProcessingError):
            pdf_service.split(multi_page_pdf_bytes, SplitOptions(start_page=5, end_page=6))


class TestExtract:
    def test_ranges_make_one_document(self, multi_page_pdf_bytes: bytes) -> None:
        options = ExtractOptions.model_validate({"pageRanges": [{"start": 2, "end": 3}, {"start": 1, "end": 2}]})
        extracted = pdf_service.extract(multi_page_pdf_bytes, options)
        assert _pages(extracted) == 3
        reader = PdfReader(BytesIO(extracted))
        assert "Hello PDF World" in reader.pages[0].extract_text()
        assert "Page three content" in reader.pages[2].extract_text()

    def test_individual_pages(self, multi_page_pdf_bytes: bytes) -> None:
        options = ExtractOptions.model_validate({"extractMode": "individual", "selectedPages": [2, 3]})
        extracted = pdf_service.extract(multi_page_pdf_bytes, options)
        assert _pages(extracted) == 2
        assert "Page two content" in PdfReader(BytesIO(extracted)).pages[0].extract_text()

    def test_no_valid_pages(self, multi_page_pdf_bytes: bytes) -> None:
        options = ExtractOptions.model_validate({"selectedPages": [7]})
        with pytest.raises(ProcessingError, match="No valid pages"):
            pdf_service.extract(multi_page_pdf_bytes, options)


class TestCompress:
    @pytest.mark.parametrize("level", ["low", "medium", "high", "maximum"])
    def test_levels_produce_readable_pdf(self, multi_page_pdf_bytes: bytes, level: str) -> None:
        compressed = pdf_service.compress(multi_page_pdf_bytes, level)
        reader = PdfReader(BytesIO(compressed))
        assert len(reader.pages) == 3
        assert reader.metadata.producer == "UPSA DocHub"
        assert "Page two content" in reader.pages[1].extract_text()


class TestEncryption:
    def test_protect_then_unlock(self, multi_page_pdf_bytes: bytes) -> None:
        protected = pdf_service.encrypt(multi_page_pdf_bytes, "s3cret")
        assert PdfReader(BytesIO(protected)).is_encrypted

        unlocked = pdf_service.decrypt(protected, "s3cret")
        reader = PdfReader(BytesIO(unlocked))
        assert not reader.is_encrypted
        assert len(reader.pages) == 3

    def test_wrong_password(self, sample_pdf_bytes: bytes) -> None:
        protected = pdf_service.encrypt(sample_pdf_bytes, "s3cret")
        with pytest.raises(ProcessingError, match="Incorrect password"):
            pdf_service.decrypt(protected, "guess")

    def test_other_tools_refuse_locked_documents(self, sample_pdf_bytes: bytes) -> None:
        protected = pdf_service.encrypt(sample_pdf_bytes, "s3cret")
        with pytest.raises(ProcessingError, match="password protected"):
            pdf_service.compress(protected)


class TestRotate:
    def test_rotates_selected_pages_only(self, multi_page_pdf_bytes: bytes) -> None:
        rotated = PdfReader(BytesIO(pdf_service.rotate(multi_page_pdf_bytes, 90, [2])))
        assert [page.rotation for page in rotated.pages] == [0, 90, 0]

    def test_rotates_all_pages_by_default(self, sample_pdf_bytes: bytes) -> None:
        rotated = PdfReader(BytesIO(pdf_service.rotate(sample_pdf_bytes, 180)))
        assert rotated.pages[0].rotation == 180

    def test_no_valid_pages(self, sample_pdf_bytes: bytes) -> None:
        with pytest.raises(ProcessingError):
            pdf_service.rotate(sample_pdf_bytes, 90, [4])
