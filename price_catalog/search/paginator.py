"""Fixed-size pagination over a filtered item list."""

import math
from dataclasses import dataclass, field
from typing import Generic, List, Sequence, TypeVar

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of results plus the metadata a page control needs."""

    page_items: List[T] = field(default_factory=list)
    total_pages: int = 1
    total_items: int = 0
    current_page: int = 1
    page_size: int = 10

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def first_item(self) -> int:
        """1-based position of the first item on this page, 0 when empty."""
        if not self.page_items:
            return 0
        return (self.current_page - 1) * self.page_size + 1

    @property
    def last_item(self) -> int:
        """1-based position of the last item on this page, 0 when empty."""
        if not self.page_items:
            return 0
        return self.first_item + len(self.page_items) - 1


def total_pages_for(total_items: int, page_size: int) -> int:
    """Number of pages; an empty result still has one (empty) page."""
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return max(1, math.ceil(total_items / page_size))


def paginate(items: Sequence[T], page_size: int, page_index: int) -> Page[T]:
    """
    Slice `items` into the requested page.

    Args:
        items: Filtered items
        page_size: Items per page (>= 1)
        page_index: 1-based page number; past-the-end pages are empty

    Returns:
        Page with `items[(page_index-1)*page_size : page_index*page_size]`
    """
    if page_index < 1:
        raise ValueError(f"page_index must be >= 1, got {page_index}")
    total_pages = total_pages_for(len(items), page_size)
    start = (page_index - 1) * page_size
    return Page(
        page_items=list(items[start:start + page_size]),
        total_pages=total_pages,
        total_items=len(items),
        current_page=page_index,
        page_size=page_size,
    )


def page_window(current_page: int, total_pages: int, size: int = 5) -> List[int]:
    """
    Page numbers to show in a page-number control.

    At most `size` buttons centered on the current page; near the first or
    last page the window shifts so it stays `size` wide.
    """
    if total_pages <= size:
        return list(range(1, total_pages + 1))

    half = size // 2
    start = current_page - half
    start = max(1, min(start, total_pages - size + 1))
    return list(range(start, start + size))
