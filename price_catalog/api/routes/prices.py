"""
Service price list API endpoints.

Stateless views over the current catalog: every request runs the filter,
pagination and windowing stages on the catalog snapshot it was given.
Search debouncing is a client-side concern and does not apply here.
"""

import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from price_catalog.api.deps import get_catalog, get_refresher
from price_catalog.config import settings
from price_catalog.ingest.catalog_loader import Catalog
from price_catalog.models import ServicePriceItem
from price_catalog.pricing.formatter import format_price
from price_catalog.render.virtual_window import VirtualWindow
from price_catalog.search.filters import FilterCriteria, filter_items, normalize_query
from price_catalog.search.paginator import page_window, paginate, total_pages_for
from price_catalog.worker.tasks import CatalogRefresher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/prices", tags=["prices"])


# ============================================================================
# Request/Response Models
# ============================================================================


class PriceItemResponse(BaseModel):
    """One priced procedure."""

    key: str = Field(..., description="Stable identity: '<category_id>:<row_index>'")
    id: int
    name: str
    description: str
    price: int
    formatted_price: str
    category_id: int
    category_name: str
    is_emergency: bool = False

    @classmethod
    def from_item(cls, item: ServicePriceItem) -> "PriceItemResponse":
        return cls(
            key=f"{item.category_id}:{item.row_index}",
            id=item.id,
            name=item.name,
            description=item.description,
            price=item.price,
            formatted_price=format_price(item.price),
            category_id=item.category_id,
            category_name=item.category_name,
            is_emergency=item.is_emergency,
        )


class PaginationInfo(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    page_size: int
    has_next: bool
    has_previous: bool
    first_item: int
    last_item: int
    page_window: List[int]


class QueryInfo(BaseModel):
    query: str
    category_id: Optional[int]
    response_time_ms: int


class PriceListResponse(BaseModel):
    items: List[PriceItemResponse]
    pagination: PaginationInfo
    query_info: QueryInfo


class CategoryResponse(BaseModel):
    id: int
    name: str
    item_count: Optional[int] = None


class WindowRow(BaseModel):
    index: int
    offset: float
    item: PriceItemResponse


class WindowResponse(BaseModel):
    start: int
    end: int
    total_height: float
    row_height: float
    rows: List[WindowRow]


class ReloadResponse(BaseModel):
    categories: int
    items: int
    parse_time_ms: float


# ============================================================================
# Helpers
# ============================================================================


def _current_page_items(
    catalog: Catalog,
    q: Optional[str],
    category_id: Optional[int],
    page: int,
    page_size: int,
    ranked: bool = False,
):
    criteria = FilterCriteria(search_term=q or "", category_id=category_id)
    filtered = filter_items(catalog.items, criteria, ranked=ranked)
    # Past-the-end pages fall back to the last page
    page = min(page, total_pages_for(len(filtered), page_size))
    return paginate(filtered, page_size, page)


# ============================================================================
# Endpoints
# ============================================================================


@router.get("", response_model=PriceListResponse)
async def list_prices(
    q: Optional[str] = Query(None, max_length=500, description="Search name or description"),
    category_id: Optional[int] = Query(None, description="Restrict to one category"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.page_size, ge=1, le=100),
    ranked: bool = Query(settings.ranked_search, description="Order matches by relevance"),
    catalog: Catalog = Depends(get_catalog),
):
    """Search, filter and paginate the price list."""
    start_time = time.time()
    result = _current_page_items(catalog, q, category_id, page, page_size, ranked=ranked)

    return PriceListResponse(
        items=[PriceItemResponse.from_item(item) for item in result.page_items],
        pagination=PaginationInfo(
            current_page=result.current_page,
            total_pages=result.total_pages,
            total_items=result.total_items,
            page_size=page_size,
            has_next=result.has_next,
            has_previous=result.has_previous,
            first_item=result.first_item,
            last_item=result.last_item,
            page_window=page_window(
                result.current_page, result.total_pages, settings.page_window_size
            ),
        ),
        query_info=QueryInfo(
            query=normalize_query(q),
            category_id=category_id,
            response_time_ms=int((time.time() - start_time) * 1000),
        ),
    )


@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(
    with_counts: bool = False,
    emergency_first: bool = False,
    catalog: Catalog = Depends(get_catalog),
):
    """List categories for the category filter control."""
    categories = catalog.categories
    if emergency_first:
        emergency_ids = {item.category_id for item in catalog.items if item.is_emergency}
        # Stable sort keeps name order within each group
        categories = sorted(categories, key=lambda c: c.id not in emergency_ids)

    return [
        CategoryResponse(
            id=c.id,
            name=c.name,
            item_count=c.item_count if with_counts else None,
        )
        for c in categories
    ]


@router.get("/window", response_model=WindowResponse)
async def price_window(
    q: Optional[str] = Query(None, max_length=500),
    category_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.page_size, ge=1, le=100),
    scroll_offset: float = Query(0.0, ge=0),
    viewport_height: float = Query(600.0, ge=0),
    row_height: float = Query(float(settings.row_height), gt=0),
    ranked: bool = Query(settings.ranked_search),
    catalog: Catalog = Depends(get_catalog),
):
    """Rows of the current page that are visible at a scroll position."""
    result = _current_page_items(catalog, q, category_id, page, page_size, ranked=ranked)

    window = VirtualWindow(result.page_items, row_height=row_height)
    visible = window.update(scroll_offset, viewport_height)

    return WindowResponse(
        start=visible.start,
        end=visible.end,
        total_height=window.total_height,
        row_height=window.row_height,
        rows=[
            WindowRow(index=row.index, offset=row.offset, item=PriceItemResponse.from_item(row.item))
            for row in window.visible_rows()
        ],
    )


@router.post("/reload", response_model=ReloadResponse)
async def reload_catalog(refresher: CatalogRefresher = Depends(get_refresher)):
    """Refetch the price pages from the content service and rebuild the catalog."""
    catalog = await refresher.refresh()
    logger.info(f"Catalog reloaded on request: {len(catalog.items)} items")
    return ReloadResponse(
        categories=len(catalog.categories),
        items=len(catalog.items),
        parse_time_ms=round(catalog.parse_time_ms, 2),
    )
