"""APScheduler job definitions."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from price_catalog.config import settings
from price_catalog.worker.tasks import catalog_refresher

logger = logging.getLogger(__name__)


def setup_scheduler() -> AsyncIOScheduler:
    """
    Setup and configure APScheduler.

    The catalog is rebuilt every `catalog_refresh_minutes` so CMS edits to the
    price tables show up without a restart.

    Returns:
        Configured scheduler instance
    """
    scheduler = AsyncIOScheduler()
    refresh_interval = max(1, int(settings.catalog_refresh_minutes))

    scheduler.add_job(
        catalog_refresher.refresh,
        IntervalTrigger(minutes=refresh_interval),
        id="catalog_refresh",
        name="Refresh service price catalog",
        max_instances=1,  # Prevent overlapping runs
        coalesce=True,
        misfire_grace_time=300,
        replace_existing=True,
    )

    logger.info(f"Catalog refresh scheduled every {refresh_interval} minutes")
    return scheduler
