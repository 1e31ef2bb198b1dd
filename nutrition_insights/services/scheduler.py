"""Background job scheduler.

APScheduler jobs that keep the insight engine tidy between requests:
expired alert dismissals are swept, and the daily snapshot is refreshed
once its TTL or the calendar day rolls over.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from nutrition_insights.config import settings
from nutrition_insights.logging_config import get_logger
from nutrition_insights.services.insight_engine import get_insight_engine

logger = get_logger(__name__)

# Global scheduler instance
scheduler: AsyncIOScheduler | None = None


async def sweep_expired_dismissals() -> None:
    """Remove alert dismissals whose window has passed."""
    try:
        removed = await get_insight_engine().sweep_expired_dismissals()
    except Exception as e:
        logger.error("Scheduled dismissal sweep failed", error=str(e))
        return
    logger.info("Scheduled dismissal sweep completed", removed=removed)


async def refresh_daily_insights() -> None:
    """Refresh today's snapshot when it has gone stale."""
    try:
        refreshed = await get_insight_engine().refresh_if_stale()
    except Exception as e:
        logger.error("Scheduled insight refresh failed", error=str(e))
        return
    if refreshed:
        logger.info("Scheduled insight refresh completed")


def start_scheduler() -> AsyncIOScheduler:
    """Start the background job scheduler.

    Returns:
        The started scheduler instance
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already running")
        return scheduler

    scheduler = AsyncIOScheduler()

    if settings.dismissal_sweep_enabled:
        scheduler.add_job(
            sweep_expired_dismissals,
            trigger=IntervalTrigger(minutes=settings.dismissal_sweep_interval_minutes),
            id="dismissal_sweep",
            name="Expired Alert Dismissal Sweep",
            replace_existing=True,
        )
        logger.info(
            "Scheduled dismissal sweep job",
            interval_minutes=settings.dismissal_sweep_interval_minutes,
        )

    if settings.insight_refresh_enabled:
        scheduler.add_job(
            refresh_daily_insights,
            trigger=IntervalTrigger(minutes=settings.insight_refresh_interval_minutes),
            id="insight_refresh",
            name="Daily Insight Refresh",
            replace_existing=True,
        )
        logger.info(
            "Scheduled insight refresh job",
            interval_minutes=settings.insight_refresh_interval_minutes,
        )

    scheduler.start()
    logger.info("Background scheduler started")
    return scheduler


def stop_scheduler() -> None:
    """Stop the background job scheduler."""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("Background scheduler stopped")


def get_scheduler() -> AsyncIOScheduler | None:
    """Get the current scheduler instance."""
    return scheduler
