"""Page selection helpers shared by the option schemas and the PDF services.

Page numbers are 1-based and inclusive everywhere outside this module;
``expand_page_ranges`` is the only place that turns them into 0-based indices.
"""

from typing import Iterable, List, Optional, Tuple

PageRange = Tuple[int, int]


def parse_page_spec(spec: str) -> List[PageRange]:
    """Parse ``"1-3, 5, 8-"`` into ``[(1, 3), (5, 5), (8, 0)]``.

    An open upper bound is stored as ``0`` and means "to the last page".
    Raises ``ValueError`` for anything that is not a page number or range.
    """
    ranges: List[PageRange] = []
    for part in spec.split(","):
        token = part.strip()
        if not token:
            continue
        if "-" in token:
            start_raw, _, end_raw = token.partition("-")
            start = int(start_raw.strip()) if start_raw.strip() else 1
            end = int(end_raw.strip()) if end_raw.strip() else 0
        else:
            start = end = int(token)
        if start < 1 or end < 0 or (end and end < start):
            raise ValueError(f"Invalid page range: '{token}'")
        ranges.append((start, end))
    if not ranges:
        raise ValueError(f"No pages found in '{spec}'")
    return ranges


def expand_page_ranges(ranges: Iterable[PageRange], total_pages: int) -> List[int]:
    """Return sorted, de-duplicated 0-based indices that exist in the document."""
    indices = set()
    for start, end in ranges:
        last = total_pages if not end else min(end, total_pages)
        for page_number in range(start, last + 1):
            indices.add(page_number - 1)
    return sorted(indices)


def clamp_pages(pages: Iterable[int], total_pages: int) -> List[int]:
    """Keep the 1-based page numbers that exist, preserving caller order."""
    return [page for page in pages if 1 <= page <= total_pages]


def page_window(start: Optional[int], end: Optional[int], total_pages: int) -> List[int]:
    """0-based indices for an inclusive 1-based window, defaulting to the whole document."""
    first = start or 1
    last = min(end or total_pages, total_pages)
    return list(range(first - 1, last))
