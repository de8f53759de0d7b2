"""Background tasks keeping the served catalog in sync with the content service."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from price_catalog.ingest.catalog_loader import Catalog, CatalogLoader, catalog_loader
from price_catalog.ingest.content_client import ContentClient, content_client

logger = logging.getLogger(__name__)


class CatalogRefresher:
    """
    Owner of the catalog served by the HTTP API.

    The catalog is replaced as a whole on every refresh; readers always see
    either the previous or the new catalog, never a partial one.
    """

    def __init__(
        self,
        client: Optional[ContentClient] = None,
        loader: Optional[CatalogLoader] = None,
    ):
        self.client = client or content_client
        self.loader = loader or catalog_loader
        self.catalog = Catalog()
        self.last_refresh: Optional[datetime] = None
        self._lock = asyncio.Lock()

    async def refresh(self) -> Catalog:
        """Fetch the price pages and rebuild the catalog."""
        async with self._lock:
            records = await self.client.fetch_price_pages()
            if not records:
                logger.warning("Content service returned no price categories; serving an empty catalog")

            self.replace(self.loader.build(records))
            return self.catalog

    def replace(self, catalog: Catalog) -> None:
        """Swap in an already-built catalog in one assignment."""
        self.catalog = catalog
        self.last_refresh = datetime.now(timezone.utc)

    async def close(self):
        """Clean up resources."""
        await self.client.close()


catalog_refresher = CatalogRefresher()
