"""
Pause controller: pause/resume transitions and the sweep that ends timed
pauses once their resume time has passed.
"""
import logging
from datetime import datetime

from sqlalchemy import update, and_
from sqlalchemy.ext.asyncio import AsyncSession

from cronguard.models.monitor import Monitor
from cronguard.status import ensure_utc
from cronguard.storage import get_monitor

logger = logging.getLogger("cronguard.pauses")

_CLEARED_PAUSE = {
    "paused": False,
    "paused_at": None,
    "paused_until": None,
    "pause_reason": None,
}


async def pause_monitor(
    db: AsyncSession,
    monitor_id: str,
    now: datetime,
    reason: str | None = None,
    until: datetime | None = None,
) -> Monitor | None:
    """Pause a monitor. Pausing again overwrites the reason and resume time."""
    monitor = await get_monitor(db, monitor_id)
    if not monitor:
        return None

    monitor.paused = True
    monitor.paused_at = ensure_utc(now)
    monitor.paused_until = ensure_utc(until)
    monitor.pause_reason = reason
    await db.commit()
    await db.refresh(monitor)

    logger.info(
        f"Paused monitor '{monitor.name}' ({monitor.id})"
        + (f" until {monitor.paused_until.isoformat()}" if until else "")
        + (f": {reason}" if reason else "")
    )
    return monitor


async def resume_monitor(db: AsyncSession, monitor_id: str) -> Monitor | None:
    """Resume a monitor. Resuming an active monitor changes nothing."""
    monitor = await get_monitor(db, monitor_id)
    if not monitor:
        return None

    if monitor.paused:
        for field, value in _CLEARED_PAUSE.items():
            setattr(monitor, field, value)
        await db.commit()
        await db.refresh(monitor)
        logger.info(f"Resumed monitor '{monitor.name}' ({monitor.id})")

    return monitor


def _pause_expired(now: datetime):
    return and_(
        Monitor.paused == True,  # noqa: E712
        Monitor.paused_until.isnot(None),
        Monitor.paused_until <= now,
    )


async def sweep_expired_pauses(db: AsyncSession, now: datetime) -> list[str]:
    """Resume every monitor whose timed pause ended at or before ``now``.

    Returns the ids of the rows the UPDATE actually changed. All pause fields
    are cleared by that one statement, so a concurrent pause or resume is never
    half-overwritten.
    """
    now = ensure_utc(now)
    result = await db.execute(
        update(Monitor)
        .where(_pause_expired(now))
        .values(**_CLEARED_PAUSE)
        .returning(Monitor.id)
        .execution_options(synchronize_session=False)
    )
    monitor_ids = list(result.scalars().all())
    await db.commit()
    if not monitor_ids:
        return []

    logger.info(f"Auto-resumed {len(monitor_ids)} monitor(s) with expired pauses")
    return monitor_ids
