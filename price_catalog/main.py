"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Response
from prometheus_fastapi_instrumentator import Instrumentator

from price_catalog.api.routes import prices
from price_catalog.config import settings
from price_catalog.logging_config import setup_logging
from price_catalog.worker.scheduler import setup_scheduler
from price_catalog.worker.tasks import catalog_refresher

setup_logging()
logger = logging.getLogger(__name__)

# Global scheduler
scheduler = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global scheduler

    # Startup
    logger.info("Starting service price catalog...")

    catalog = await catalog_refresher.refresh()
    logger.info(f"Loaded {len(catalog.items)} priced items in {len(catalog.categories)} categories")

    scheduler = setup_scheduler()
    scheduler.start()
    logger.info("Scheduler started")

    yield

    # Shutdown
    logger.info("Shutting down...")

    if scheduler:
        scheduler.shutdown()

    await catalog_refresher.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Service Price Catalog",
    description="Searchable hospital service price list built from CMS price tables",
    version="0.1.0",
    lifespan=lifespan,
)

instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/metrics", "/health", "/favicon.ico"],
)
instrumentator.instrument(app).expose(app, include_in_schema=True, tags=["monitoring"])

app.include_router(prices.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "categories": len(catalog_refresher.catalog.categories),
        "last_refresh": (
            catalog_refresher.last_refresh.isoformat() if catalog_refresher.last_refresh else None
        ),
    }


@app.get("/favicon.ico")
async def favicon():
    """Return empty favicon response to avoid 404 noise."""
    return Response(status_code=204)


if __name__ == "__main__":
    uvicorn.run(
        "price_catalog.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
