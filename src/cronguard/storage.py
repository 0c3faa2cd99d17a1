"""
Monitor persistence: CRUD, recent ping queries and aggregate stats.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from cronguard.models.monitor import Monitor
from cronguard.models.ping import Ping
from cronguard.schedule import parse_schedule
from cronguard.status import STATUSES, compute_status

logger = logging.getLogger("cronguard.storage")

DEFAULT_PING_LIMIT = 75


async def create_monitor(
    db: AsyncSession,
    name: str,
    schedule: str,
    grace_minutes: int = 15,
    now: datetime | None = None,
) -> Monitor:
    monitor = Monitor(
        name=name,
        schedule=schedule,
        interval_minutes=parse_schedule(schedule),
        grace_minutes=grace_minutes,
        paused=False,
        created_at=now or datetime.now(timezone.utc),
    )
    db.add(monitor)
    await db.commit()
    await db.refresh(monitor)
    logger.info(
        f"Created monitor '{monitor.name}' ({monitor.id}), "
        f"every {monitor.interval_minutes}m with {monitor.grace_minutes}m grace"
    )
    return monitor


async def get_monitor(db: AsyncSession, monitor_id: str) -> Monitor | None:
    result = await db.execute(select(Monitor).where(Monitor.id == monitor_id))
    return result.scalar_one_or_none()


async def list_monitors(db: AsyncSession) -> list[Monitor]:
    result = await db.execute(select(Monitor).order_by(Monitor.created_at.desc()))
    return list(result.scalars().all())


async def update_monitor(db: AsyncSession, monitor: Monitor, **changes) -> Monitor:
    """Apply ``changes`` to ``monitor``, re-deriving the interval if the schedule changed."""
    for field, value in changes.items():
        setattr(monitor, field, value)
    if "schedule" in changes:
        monitor.interval_minutes = parse_schedule(monitor.schedule)

    await db.commit()
    await db.refresh(monitor)
    return monitor


async def delete_monitor(db: AsyncSession, monitor_id: str) -> bool:
    monitor = await get_monitor(db, monitor_id)
    if not monitor:
        return False

    await db.execute(delete(Ping).where(Ping.monitor_id == monitor_id))
    await db.delete(monitor)
    await db.commit()
    logger.info(f"Deleted monitor '{monitor.name}' ({monitor_id})")
    return True


async def get_recent_pings(
    db: AsyncSession, monitor_id: str, limit: int = DEFAULT_PING_LIMIT
) -> list[Ping]:
    """The most recent pings for a monitor, newest first."""
    result = await db.execute(
        select(Ping)
        .where(Ping.monitor_id == monitor_id)
        .order_by(Ping.timestamp.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def count_pings(db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Ping.id)))
    return result.scalar() or 0


async def get_stats(db: AsyncSession, now: datetime) -> dict:
    monitors = await list_monitors(db)

    counts = {status: 0 for status in STATUSES}
    for monitor in monitors:
        counts[compute_status(monitor, now)] += 1

    return {
        "total": len(monitors),
        **counts,
        "total_pings": await count_pings(db),
    }
