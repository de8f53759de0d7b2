"""WordPress content service client for service price pages."""

import logging
from typing import List, Optional

import httpx

from price_catalog import metrics
from price_catalog.config import settings
from price_catalog.ingest.catalog_loader import coerce_records
from price_catalog.models import CategoryRecord

logger = logging.getLogger(__name__)

PAGES_ENDPOINT = "/wp-json/wp/v2/pages"


class ContentClient:
    """Fetch the service price category pages (one child page per category)."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        parent_id: Optional[int] = None,
        per_page: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize content client.

        Args:
            base_url: Site root of the WordPress installation
            parent_id: Parent page id of the price category pages
            per_page: Page size requested from the REST API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = (base_url or settings.content_base_url).rstrip("/")
        self.parent_id = parent_id if parent_id is not None else settings.service_price_parent_id
        self.per_page = per_page or settings.content_per_page
        self.timeout = timeout or settings.content_request_timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch_price_pages(self) -> List[CategoryRecord]:
        """
        Fetch every price category page.

        Returns:
            Category records; an empty list when the service is unreachable
            or answers with something that is not a page list
        """
        client = await self._get_client()
        records: List[CategoryRecord] = []
        page = 1
        total_pages = 1

        try:
            while page <= total_pages:
                response = await client.get(
                    PAGES_ENDPOINT,
                    params={
                        "parent": self.parent_id,
                        "per_page": self.per_page,
                        "page": page,
                        "orderby": "menu_order",
                        "order": "asc",
                    },
                )
                response.raise_for_status()
                payload = response.json()
                if not isinstance(payload, list):
                    raise ValueError(f"Expected a list of pages, got {type(payload).__name__}")

                records.extend(coerce_records(payload))
                total_pages = int(response.headers.get("X-WP-TotalPages", "1") or 1)
                page += 1

        except (httpx.HTTPError, ValueError) as e:
            metrics.content_fetches_total.labels(status="error").inc()
            logger.error(f"Failed to fetch service price pages: {e}")
            return []

        metrics.content_fetches_total.labels(status="success").inc()
        logger.info(f"Fetched {len(records)} service price pages")
        return records


# Global client instance
content_client = ContentClient()
