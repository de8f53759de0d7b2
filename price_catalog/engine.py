"""Service price catalog engine.

Holds the inputs of the price list screen and re-derives every downstream
stage when one of them changes:

    category records -> catalog (items + categories)
                     -> filtered items   (effective search term, category)
                     -> current page     (page number)
                     -> visible window   (scroll offset, viewport height)

Each stage is a pure function of its inputs; recomputing from the changed
stage onwards is the only mutation path.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional

from price_catalog import metrics
from price_catalog.config import settings
from price_catalog.ingest.catalog_loader import Catalog, CatalogLoader, catalog_loader
from price_catalog.models import Category, ServicePriceItem
from price_catalog.pricing.formatter import format_price
from price_catalog.render.virtual_window import VirtualWindow, VisibleRange, VisibleRow
from price_catalog.search.debounce import Debouncer
from price_catalog.search.filters import FilterCriteria, filter_items, normalize_query
from price_catalog.search.paginator import Page, page_window, paginate, total_pages_for

logger = logging.getLogger(__name__)

Listener = Callable[["CatalogView"], None]


@dataclass
class PerformanceMetrics:
    parse_time_ms: float = 0.0
    filter_time_ms: float = 0.0
    total_items: int = 0
    cache_hits: int = 0


@dataclass
class CatalogView:
    """Snapshot of everything the presentation layer renders."""

    categories: List[Category] = field(default_factory=list)
    total_items: int = 0
    filtered_count: int = 0
    total_pages: int = 1
    current_page: int = 1
    page_items: List[ServicePriceItem] = field(default_factory=list)
    formatted_prices: List[str] = field(default_factory=list)
    page_window: List[int] = field(default_factory=list)
    has_next: bool = False
    has_previous: bool = False
    first_item: int = 0
    last_item: int = 0
    visible_range: VisibleRange = field(default_factory=VisibleRange)
    visible_rows: List[VisibleRow] = field(default_factory=list)
    total_height: float = 0.0
    search_term: str = ""
    effective_search_term: str = ""
    category_id: Optional[int] = None
    error: Optional[str] = None
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)


class PriceCatalogEngine:
    """Filter, paginate and window the service price catalog."""

    def __init__(
        self,
        loader: Optional[CatalogLoader] = None,
        page_size: Optional[int] = None,
        debounce_ms: Optional[int] = None,
        row_height: Optional[float] = None,
        overscan: Optional[int] = None,
        page_window_size: Optional[int] = None,
        fold_diacritics: Optional[bool] = None,
        ranked_search: Optional[bool] = None,
    ):
        self.loader = loader or catalog_loader
        self.page_size = page_size if page_size is not None else settings.page_size
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")
        self.page_window_size = page_window_size or settings.page_window_size
        self.fold_diacritics = (
            fold_diacritics if fold_diacritics is not None else settings.fold_diacritics
        )
        self.ranked_search = (
            ranked_search if ranked_search is not None else settings.ranked_search
        )
        debounce_ms = debounce_ms if debounce_ms is not None else settings.search_debounce_ms

        self._catalog = Catalog()
        self._search_term = ""
        self._effective_search_term = ""
        self._category_id: Optional[int] = None
        self._current_page = 1
        self._filtered: List[ServicePriceItem] = []
        self._page: Page[ServicePriceItem] = Page(page_size=self.page_size)
        self._window: VirtualWindow[ServicePriceItem] = VirtualWindow(
            row_height=row_height, overscan=overscan
        )
        self._debouncer: Debouncer[str] = Debouncer(
            self._on_search_settled, delay_seconds=debounce_ms / 1000
        )
        self._listeners: List[Listener] = []
        self.error: Optional[str] = None
        self.performance = PerformanceMetrics()
        self.filter_recompute_count = 0

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def load(self, records: Optional[Iterable[Any]]) -> Catalog:
        """
        Replace the category collection and rebuild the whole chain.

        A pending search update is superseded: the latest typed term is
        applied as part of this recompute.
        """
        self._debouncer.cancel()
        self._effective_search_term = self._search_term

        cache_hits_before = self.loader.extractor.cache_hits
        try:
            catalog = self.loader.build(records)
            self.error = None
        except Exception as e:
            logger.error(f"Failed to build service price catalog: {e}", exc_info=True)
            catalog = Catalog()
            self.error = f"Error processing service price data: {e}"

        self._catalog = catalog
        self.performance.parse_time_ms = catalog.parse_time_ms
        self.performance.total_items = len(catalog.items)
        self.performance.cache_hits += self.loader.extractor.cache_hits - cache_hits_before

        if self._category_id is not None and not any(
            c.id == self._category_id for c in catalog.categories
        ):
            self._category_id = None
            self._current_page = 1

        self._recompute_filter()
        return catalog

    def set_search_term(self, term: str) -> None:
        """Record a keystroke; the filter follows after the debounce delay."""
        self._search_term = term or ""
        self._debouncer.push(self._search_term)

    def apply_search_term(self, term: str) -> None:
        """Apply a search term immediately, bypassing the debounce."""
        self._debouncer.cancel()
        self._search_term = term or ""
        self._on_search_settled(self._search_term)

    def flush_search(self) -> bool:
        """Apply a pending search term now. Returns False if none was pending."""
        return self._debouncer.flush()

    def _on_search_settled(self, term: str) -> None:
        if normalize_query(term) == normalize_query(self._effective_search_term):
            return
        self._effective_search_term = term
        self._current_page = 1
        self._recompute_filter()

    def set_category(self, category_id: Optional[int]) -> None:
        """Select a category (None for all). Applied immediately."""
        if category_id == self._category_id:
            return
        self._category_id = category_id
        self._current_page = 1
        self._recompute_filter()

    def set_page(self, page: int) -> bool:
        """Go to a page. Out-of-range requests are ignored."""
        if page < 1 or page > self._page.total_pages or page == self._current_page:
            return False
        self._current_page = page
        self._recompute_page()
        return True

    def next_page(self) -> bool:
        return self.set_page(self._current_page + 1)

    def previous_page(self) -> bool:
        return self.set_page(self._current_page - 1)

    def reset_filters(self) -> None:
        """Clear search and category and go back to page 1."""
        self._debouncer.cancel()
        self._search_term = ""
        self._effective_search_term = ""
        self._category_id = None
        self._current_page = 1
        self._recompute_filter()

    def scroll(self, scroll_offset: float, viewport_height: Optional[float] = None) -> VisibleRange:
        """Update the visible window for a scroll or resize event."""
        return self._window.update(scroll_offset, viewport_height)

    # ------------------------------------------------------------------
    # Recompute chain
    # ------------------------------------------------------------------

    def _recompute_filter(self) -> None:
        start_time = time.perf_counter()
        criteria = FilterCriteria(
            search_term=self._effective_search_term,
            category_id=self._category_id,
        )
        self._filtered = filter_items(
            self._catalog.items,
            criteria,
            fold_diacritics=self.fold_diacritics,
            ranked=self.ranked_search,
        )
        elapsed = time.perf_counter() - start_time

        self.filter_recompute_count += 1
        self.performance.filter_time_ms = elapsed * 1000
        metrics.filter_recomputes_total.inc()
        metrics.filter_duration_seconds.observe(elapsed)

        self._recompute_page()

    def _recompute_page(self) -> None:
        total_pages = total_pages_for(len(self._filtered), self.page_size)
        self._current_page = min(max(1, self._current_page), total_pages)
        self._page = paginate(self._filtered, self.page_size, self._current_page)
        self._window.set_items(self._page.page_items, reset_scroll=True)
        self._notify()

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def categories(self) -> List[Category]:
        return self._catalog.categories

    @property
    def filtered_items(self) -> List[ServicePriceItem]:
        return self._filtered

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def total_pages(self) -> int:
        return self._page.total_pages

    @property
    def current_page_items(self) -> List[ServicePriceItem]:
        return self._page.page_items

    @property
    def effective_search_term(self) -> str:
        return self._effective_search_term

    @property
    def window(self) -> VirtualWindow[ServicePriceItem]:
        return self._window

    def view(self) -> CatalogView:
        """Build a snapshot of the current state."""
        page = self._page
        return CatalogView(
            categories=list(self._catalog.categories),
            total_items=len(self._catalog.items),
            filtered_count=len(self._filtered),
            total_pages=page.total_pages,
            current_page=page.current_page,
            page_items=list(page.page_items),
            formatted_prices=[format_price(item.price) for item in page.page_items],
            page_window=page_window(page.current_page, page.total_pages, self.page_window_size),
            has_next=page.has_next,
            has_previous=page.has_previous,
            first_item=page.first_item,
            last_item=page.last_item,
            visible_range=self._window.visible_range,
            visible_rows=self._window.visible_rows(),
            total_height=self._window.total_height,
            search_term=self._search_term,
            effective_search_term=self._effective_search_term,
            category_id=self._category_id,
            error=self.error,
            performance=PerformanceMetrics(**vars(self.performance)),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with a fresh view after every recompute."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.view()
        for listener in list(self._listeners):
            listener(snapshot)

    def close(self) -> None:
        """Tear down: cancel the pending debounce timer and drop listeners."""
        self._debouncer.close()
        self._listeners.clear()
