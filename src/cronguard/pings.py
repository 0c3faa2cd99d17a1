"""
Ping recording. Stores an execution signal and advances the monitor's
last ping in a single transaction.
"""
import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from cronguard.models.ping import Ping
from cronguard.status import ensure_utc
from cronguard.storage import get_monitor

logger = logging.getLogger("cronguard.pings")

SUCCESS = "success"
FAILURE = "failure"


async def record_ping(
    db: AsyncSession,
    monitor_id: str,
    now: datetime,
    success: bool = True,
    duration: float | None = None,
    message: str | None = None,
    ip: str | None = None,
) -> Ping | None:
    """Record a ping for ``monitor_id`` at server time ``now``.

    Returns None when the monitor does not exist. The ping row and the
    monitor's ``last_ping`` are committed together or not at all.
    """
    monitor = await get_monitor(db, monitor_id)
    if not monitor:
        return None

    timestamp = ensure_utc(now)
    ping = Ping(
        monitor_id=monitor.id,
        timestamp=timestamp,
        status=SUCCESS if success else FAILURE,
        duration=duration,
        message=message,
        ip=ip,
    )

    try:
        db.add(ping)
        monitor.last_ping = timestamp
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to record ping for monitor {monitor_id}: {e}")
        raise

    logger.debug(f"Ping {ping.id} ({ping.status}) recorded for '{monitor.name}'")
    return ping
