"""HTML price-table extraction.

Turns the table embedded in one category page into typed price items. CMS
markup is not under our control, so extraction is best-effort: malformed
rows degrade to defaults instead of failing the whole table.
"""

import hashlib
import logging
import re
import time
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

from selectolax.lexbor import LexborHTMLParser, LexborNode

from price_catalog import metrics
from price_catalog.config import settings
from price_catalog.models import ServicePriceItem

logger = logging.getLogger(__name__)

# "A/", "1/", "IV/", "A1.2/", "B12/", "1.2/"
SECTION_HEADER_PATTERN = re.compile(
    r"^([A-Z]/|[0-9]+/|[IVX]+/|[A-Z][0-9.]+/|[A-Z][0-9]+/|[0-9]+\.[0-9]+/)$"
)
_DIGITS = re.compile(r"[0-9]+")
_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")

CELL_TAGS = ("td", "th")
REQUIRED_CELLS = 4


def _parse_csv_values(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


def is_section_header(text: str) -> bool:
    """Return True if a first-cell text introduces a section instead of an item."""
    return bool(SECTION_HEADER_PATTERN.match(text.strip()))


def parse_price(text: Optional[str]) -> int:
    """
    Parse a price cell by keeping only its digits.

    "1.500.000 đ" -> 1500000, "" -> 0. Never raises.
    """
    if not text:
        return 0
    digits = "".join(_DIGITS.findall(text))
    return int(digits) if digits else 0


def parse_row_id(text: Optional[str]) -> int:
    """Parse the leading integer of an id cell, 0 when there is none."""
    if not text:
        return 0
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _cell_text(node: LexborNode) -> str:
    # Collapse newlines and &nbsp; runs that CMS editors leave in cells
    return " ".join(node.text(deep=True).split())


class TableExtractor:
    """
    Extract `ServicePriceItem` records from category table markup.

    Features:
    - Section-header rows ("I/", "A1.2/") are skipped
    - Rows with too few cells are skipped
    - Results cached per category and content hash, with TTL and size bound
    """

    def __init__(
        self,
        min_cells: Optional[int] = None,
        emergency_keywords: Optional[List[str]] = None,
        cache_enabled: Optional[bool] = None,
        cache_max_size: Optional[int] = None,
        cache_ttl_seconds: Optional[float] = None,
    ):
        self.min_cells = min_cells if min_cells is not None else settings.min_cells
        if self.min_cells < REQUIRED_CELLS:
            # id, name, description and price are read by position
            raise ValueError(f"min_cells must be >= {REQUIRED_CELLS}, got {self.min_cells}")
        if emergency_keywords is None:
            emergency_keywords = _parse_csv_values(settings.emergency_keywords)
        self.emergency_keywords = [k.lower() for k in emergency_keywords]

        self.cache_enabled = (
            cache_enabled if cache_enabled is not None else settings.parse_cache_enabled
        )
        self.cache_max_size = cache_max_size or settings.parse_cache_max_size
        self.cache_ttl_seconds = (
            cache_ttl_seconds if cache_ttl_seconds is not None else settings.parse_cache_ttl_seconds
        )
        self._cache: "OrderedDict[Tuple[int, str, str], Tuple[float, Tuple[ServicePriceItem, ...]]]" = OrderedDict()
        self.cache_hits = 0
        self.cache_misses = 0

    def extract(
        self,
        html_content: Optional[str],
        category_id: int,
        category_name: str,
    ) -> List[ServicePriceItem]:
        """
        Extract priced items from one category's table markup.

        Args:
            html_content: Raw HTML containing zero or one price table
            category_id: Owning category id
            category_name: Owning category name

        Returns:
            Items in source row order; empty for blank content
        """
        if not html_content or not html_content.strip():
            return []

        cache_key = None
        if self.cache_enabled:
            cache_key = (category_id, category_name, self._content_hash(html_content))
            cached = self._cache_get(cache_key)
            if cached is not None:
                self.cache_hits += 1
                metrics.parse_cache_hits_total.inc()
                return list(cached)
            self.cache_misses += 1
            metrics.parse_cache_misses_total.inc()

        items = self._parse(html_content, category_id, category_name)

        if cache_key is not None:
            self._cache_put(cache_key, tuple(items))

        return items

    def _parse(
        self,
        html_content: str,
        category_id: int,
        category_name: str,
    ) -> List[ServicePriceItem]:
        tree = LexborHTMLParser(html_content)

        rows = tree.css("table tbody tr")
        if not rows:
            rows = tree.css("table tr")

        items: List[ServicePriceItem] = []
        skipped_short = 0
        skipped_headers = 0

        for row_index, row in enumerate(rows):
            cells = [child for child in row.iter() if child.tag in CELL_TAGS]
            if len(cells) < self.min_cells:
                skipped_short += 1
                continue

            id_text = _cell_text(cells[0])
            if is_section_header(id_text):
                skipped_headers += 1
                continue

            name = _cell_text(cells[1])
            description = _cell_text(cells[2])
            price = parse_price(_cell_text(cells[3]))

            items.append(ServicePriceItem(
                id=parse_row_id(id_text),
                name=name,
                description=description,
                price=price,
                category_id=category_id,
                category_name=category_name,
                row_index=row_index,
                is_emergency=self._is_emergency(name, description),
            ))

        if skipped_short:
            metrics.rows_skipped_total.labels(reason="short_row").inc(skipped_short)
        if skipped_headers:
            metrics.rows_skipped_total.labels(reason="section_header").inc(skipped_headers)
        metrics.rows_extracted_total.inc(len(items))

        logger.debug(
            "Category %s: %s items, %s header rows, %s short rows",
            category_id,
            len(items),
            skipped_headers,
            skipped_short,
        )
        return items

    def _is_emergency(self, name: str, description: str) -> bool:
        if not self.emergency_keywords:
            return False
        name_lower = name.lower()
        desc_lower = description.lower()
        return any(k in name_lower or k in desc_lower for k in self.emergency_keywords)

    # ------------------------------------------------------------------
    # Parse cache
    # ------------------------------------------------------------------

    @staticmethod
    def _content_hash(content: str) -> str:
        return hashlib.md5(content.encode("utf-8")).hexdigest()

    def _cache_get(self, key) -> Optional[Tuple[ServicePriceItem, ...]]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        stored_at, items = entry
        if time.monotonic() - stored_at > self.cache_ttl_seconds:
            del self._cache[key]
            return None
        return items

    def _cache_put(self, key, items: Tuple[ServicePriceItem, ...]) -> None:
        self._cache[key] = (time.monotonic(), items)
        self._cache.move_to_end(key)
        if len(self._cache) > self.cache_max_size:
            self._evict()

    def _evict(self) -> None:
        """Drop expired entries, then the oldest ones until under the size bound."""
        now = time.monotonic()
        expired = [
            key for key, (stored_at, _) in self._cache.items()
            if now - stored_at > self.cache_ttl_seconds
        ]
        for key in expired:
            del self._cache[key]

        while len(self._cache) > self.cache_max_size:
            self._cache.popitem(last=False)

    def clear_cache(self) -> None:
        """Clear cached extraction results."""
        self._cache.clear()

    def cache_stats(self) -> Dict[str, float]:
        """Cache statistics for monitoring."""
        return {
            "size": len(self._cache),
            "max_size": self.cache_max_size,
            "ttl_seconds": self.cache_ttl_seconds,
            "hits": self.cache_hits,
            "misses": self.cache_misses,
        }


# Global extractor instance
table_extractor = TableExtractor()
