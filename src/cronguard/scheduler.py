"""
APScheduler integration — runs the pause sweep and rate limiter cleanup.
"""
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from cronguard.config import get_settings
from cronguard.database import get_session_factory
from cronguard.pauses import sweep_expired_pauses
from cronguard.rate_limit import RateLimiter

logger = logging.getLogger("cronguard.scheduler")
settings = get_settings()

scheduler = AsyncIOScheduler()


async def run_pause_sweep() -> list[str]:
    """Resume monitors whose timed pause has expired."""
    async with get_session_factory()() as db:
        resumed = await sweep_expired_pauses(db, datetime.now(timezone.utc))
    for monitor_id in resumed:
        logger.info(f"Pause expired, resumed monitor {monitor_id}")
    return resumed


def prune_rate_limits(limiter: RateLimiter) -> None:
    removed = limiter.prune()
    if removed:
        logger.debug(f"Pruned {removed} expired rate limit window(s)")


def start_scheduler(limiter: RateLimiter) -> None:
    """Register the periodic jobs and start the scheduler."""
    scheduler.add_job(
        run_pause_sweep,
        trigger=IntervalTrigger(seconds=settings.pause_sweep_interval_seconds),
        id="sweep_expired_pauses",
        replace_existing=True,
        max_instances=1,
    )
    scheduler.add_job(
        prune_rate_limits,
        trigger=IntervalTrigger(seconds=settings.rate_limit_prune_interval_seconds),
        id="prune_rate_limits",
        args=[limiter],
        replace_existing=True,
    )

    scheduler.start()
    logger.info(
        f"Scheduler started (pause sweep every {settings.pause_sweep_interval_seconds}s)"
    )


def stop_scheduler() -> None:
    """Shut down the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
