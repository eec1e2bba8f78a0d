import pytest

from dochub.utils.files import format_file_size, generate_file_id, get_file_extension, strip_extension
from dochub.utils.pages import clamp_pages, expand_page_ranges, page_window, parse_page_spec


class TestParsePageSpec:
    def test_parses_ranges_singles_and_open_ends(self) -> None:
        assert parse_page_spec("1-3, 5, 8-") == [(1, 3), (5, 5), (8, 0)]

    def test_ignores_blank_segments(self) -> None:
        assert parse_page_spec("2,,4,") == [(2, 2), (4, 4)]

    @pytest.mark.parametrize("spec", ["3-1", "abc", "", "0", " , "])
    def test_rejects_invalid_specs(self, spec: str) -> None:
        with pytest.raises(ValueError):
            parse_page_spec(spec)


class TestPageSelection:
    def test_expand_merges_overlaps_and_clips_to_document(self) -> None:
        assert expand_page_ranges([(2, 3), (3, 5), (8, 0)], 9) == [1, 2, 3, 4, 7, 8]

    def test_expand_beyond_document_is_empty(self) -> None:
        assert expand_page_ranges([(5, 7)], 3) == []

    def test_clamp_keeps_order_of_valid_pages(self) -> None:
        assert clamp_pages([0, 2, 5, 3], 4) == [2, 3]

    def test_window_defaults_to_whole_document(self) -> None:
        assert page_window(None, None, 3) == [0, 1, 2]

    def test_window_is_clipped(self) -> None:
        assert page_window(2, 10, 3) == [1, 2]
        assert page_window(5, None, 3) == []


class TestFileHelpers:
    def test_extension_is_lower_case_with_dot(self) -> None:
        assert get_file_extension("Report.PDF") == ".pdf"
        assert get_file_extension("README") == ""

    def test_strip_extension_uses_basename(self) -> None:
        assert strip_extension("/tmp/scan.final.pdf") == "scan.final"
        assert strip_extension("") == "document"

    def test_file_ids_are_unique(self) -> None:
        ids = {generate_file_id() for _ in range(50)}
        assert len(ids) == 50

    def test_format_file_size(self) -> None:
        assert format_file_size(0) == "0 Bytes"
        assert format_file_size(50 * 1024 * 1024) == "50 MB"
        assert format_file_size(1536) == "1.5 KB"
