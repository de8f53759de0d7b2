"""Windowed rendering math for long price lists.

Only rows inside the viewport (plus a small overscan buffer) are
materialized. Each one is positioned by a vertical offset of
`index * row_height`, so the number of rendered rows stays bounded no matter
how many items the list holds. All computations are O(1) index arithmetic.
"""

import logging
import math
from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, TypeVar

from price_catalog.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class VisibleRange:
    """Half-open index range `[start, end)` of rows to materialize."""

    start: int = 0
    end: int = 0

    @property
    def count(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class VisibleRow(Generic[T]):
    index: int
    item: T
    offset: float  # translateY in pixels


def compute_visible_range(
    item_count: int,
    scroll_offset: float,
    viewport_height: float,
    row_height: float,
    overscan: int = 5,
) -> VisibleRange:
    """
    Compute the contiguous index range to materialize.

    Args:
        item_count: Number of items in the list
        scroll_offset: Current scrollTop of the container
        viewport_height: Visible height of the container
        row_height: Estimated height of one row
        overscan: Extra rows kept on each side of the viewport

    Returns:
        VisibleRange with 0 <= start <= end <= item_count and at most
        ceil(viewport_height / row_height) + 2 * overscan rows
    """
    if row_height <= 0:
        raise ValueError(f"row_height must be > 0, got {row_height}")
    if overscan < 0:
        raise ValueError(f"overscan must be >= 0, got {overscan}")

    item_count = max(0, item_count)
    scroll_offset = max(0.0, scroll_offset)
    viewport_height = max(0.0, viewport_height)

    first_visible = math.floor(scroll_offset / row_height)
    last_visible = math.ceil((scroll_offset + viewport_height) / row_height)

    end = min(item_count, last_visible + overscan)
    start = min(max(0, first_visible - overscan), end)

    # A viewport straddling two partially visible rows spans one row more
    # than ceil(viewport / row_height); that row comes out of the overscan.
    max_rows = math.ceil(viewport_height / row_height) + 2 * overscan
    if overscan and end - start > max_rows:
        end = start + max_rows

    return VisibleRange(start=start, end=end)


class VirtualWindow(Generic[T]):
    """
    Track the visible window of a list across scroll and data changes.

    `update()` is cheap enough to call on every scroll event and skips the
    recomputation when nothing relevant changed since the last call.
    """

    def __init__(
        self,
        items: Optional[Sequence[T]] = None,
        row_height: Optional[float] = None,
        overscan: Optional[int] = None,
    ):
        self.row_height = row_height if row_height is not None else settings.row_height
        self.overscan = overscan if overscan is not None else settings.overscan
        if self.row_height <= 0:
            raise ValueError(f"row_height must be > 0, got {self.row_height}")

        self._items: Sequence[T] = items if items is not None else []
        self.scroll_offset = 0.0
        self.viewport_height = 0.0
        self._range = VisibleRange()
        self._last_inputs: Optional[tuple] = None
        self.recompute_count = 0

    @property
    def items(self) -> Sequence[T]:
        return self._items

    @property
    def total_height(self) -> float:
        """Height of the scrollable area (estimate-based)."""
        return len(self._items) * self.row_height

    @property
    def visible_range(self) -> VisibleRange:
        return self._range

    def set_items(self, items: Sequence[T], reset_scroll: bool = False) -> VisibleRange:
        """Replace the underlying items (e.g. after filtering) and recompute."""
        self._items = items
        self._last_inputs = None
        return self.update(0.0 if reset_scroll else self.scroll_offset, self.viewport_height)

    def update(self, scroll_offset: float, viewport_height: Optional[float] = None) -> VisibleRange:
        """Recompute the window for a new scroll position and/or viewport height."""
        if viewport_height is not None:
            self.viewport_height = viewport_height
        self.scroll_offset = scroll_offset

        inputs = (len(self._items), self.scroll_offset, self.viewport_height)
        if inputs == self._last_inputs:
            return self._range

        self._range = compute_visible_range(
            len(self._items),
            self.scroll_offset,
            self.viewport_height,
            self.row_height,
            self.overscan,
        )
        self._last_inputs = inputs
        self.recompute_count += 1
        return self._range

    def offset_for_index(self, index: int) -> float:
        """Scroll offset that brings row `index` to the top of the viewport."""
        if not self._items:
            return 0.0
        index = max(0, min(index, len(self._items) - 1))
        return index * self.row_height

    def visible_rows(self) -> List[VisibleRow[T]]:
        """Rows to materialize, each with its vertical offset."""
        start, end = self._range.start, self._range.end
        return [
            VisibleRow(index=i, item=self._items[i], offset=i * self.row_height)
            for i in range(start, end)
        ]
