"""FastAPI dependencies."""

from price_catalog.ingest.catalog_loader import Catalog
from price_catalog.worker.tasks import CatalogRefresher, catalog_refresher


def get_refresher() -> CatalogRefresher:
    """Dependency for the catalog owner."""
    return catalog_refresher


def get_catalog() -> Catalog:
    """Dependency for the current catalog snapshot."""
    return catalog_refresher.catalog
