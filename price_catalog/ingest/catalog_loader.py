"""Build a whole catalog (items + category index) from a category collection."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Union

from pydantic import ValidationError

from price_catalog import metrics
from price_catalog.config import settings
from price_catalog.ingest.category_index import build_category_index
from price_catalog.ingest.table_extractor import TableExtractor, table_extractor
from price_catalog.logging_config import get_logger
from price_catalog.models import Category, CategoryRecord, ServicePriceItem

logger = logging.getLogger(__name__)

RawRecord = Union[CategoryRecord, dict]


@dataclass
class Catalog:
    """Derived catalog for one load cycle. Replaced as a whole, never mutated."""

    items: List[ServicePriceItem] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    parse_time_ms: float = 0.0
    skipped_records: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.categories


def coerce_records(raw_records: Optional[Iterable[Any]]) -> List[CategoryRecord]:
    """
    Validate raw category records, dropping the ones that cannot be used.

    Args:
        raw_records: `CategoryRecord` instances or decoded JSON dicts
            (plain `{id, title, content}` or WordPress page objects)

    Returns:
        Valid records in source order
    """
    records: List[CategoryRecord] = []
    if not raw_records:
        return records

    for raw in raw_records:
        if isinstance(raw, CategoryRecord):
            records.append(raw)
            continue
        try:
            records.append(CategoryRecord.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping invalid category record: {e.error_count()} errors")
    return records


class CatalogLoader:
    """Run the extractor over every category and index the result."""

    def __init__(
        self,
        extractor: Optional[TableExtractor] = None,
        emergency_categories_first: Optional[bool] = None,
    ):
        self.extractor = extractor or table_extractor
        self.emergency_categories_first = (
            emergency_categories_first
            if emergency_categories_first is not None
            else settings.emergency_categories_first
        )

    def build(self, raw_records: Optional[Iterable[Any]]) -> Catalog:
        """
        Build a catalog.

        A missing or empty collection yields an empty catalog, never an error.
        """
        start_time = time.perf_counter()
        raw_list = list(raw_records or [])
        records = coerce_records(raw_list)

        items: List[ServicePriceItem] = []
        for record in records:
            record_logger = get_logger(__name__, category_id=record.id)
            category_items = self.extractor.extract(record.content, record.id, record.title)
            if not category_items:
                record_logger.debug(f"Category '{record.title}' has no priced rows")
            items.extend(category_items)

        categories = build_category_index(
            records, items, emergency_first=self.emergency_categories_first
        )
        elapsed = time.perf_counter() - start_time

        metrics.parse_duration_seconds.observe(elapsed)
        metrics.catalog_items.set(len(items))
        metrics.catalog_categories.set(len(categories))

        logger.info(
            f"Catalog built: {len(items)} items in {len(categories)} categories "
            f"({elapsed * 1000:.1f}ms)"
        )

        return Catalog(
            items=items,
            categories=categories,
            parse_time_ms=elapsed * 1000,
            skipped_records=len(raw_list) - len(records),
        )


# Global loader instance
catalog_loader = CatalogLoader()
