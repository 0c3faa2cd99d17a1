"""
Status engine. Derives a monitor's health from its last ping, cadence,
grace period and pause state. Status is never stored; callers pass ``now``.
"""
from datetime import datetime, timedelta, timezone

from cronguard.schedule import parse_schedule

HEALTHY = "healthy"
LATE = "late"
DOWN = "down"
PAUSED = "paused"

STATUSES = (HEALTHY, LATE, DOWN, PAUSED)


def ensure_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_interval(monitor) -> timedelta:
    minutes = monitor.interval_minutes or parse_schedule(monitor.schedule)
    return timedelta(minutes=minutes)


def get_grace(monitor) -> timedelta:
    return timedelta(minutes=monitor.grace_minutes)


def next_expected_ping(monitor) -> datetime | None:
    """When the next ping is due, or None if the monitor has never pinged."""
    last_ping = ensure_utc(monitor.last_ping)
    if last_ping is None:
        return None
    return last_ping + get_interval(monitor)


def compute_status(monitor, now: datetime) -> str:
    # A pause whose paused_until has passed still reports paused; only the
    # sweep in cronguard.pauses ends it.
    if monitor.paused:
        return PAUSED

    expected_next = next_expected_ping(monitor)
    if expected_next is None:
        return DOWN

    overrun = ensure_utc(now) - expected_next

    if overrun > get_grace(monitor):
        return DOWN
    if overrun > timedelta(0):
        return LATE
    return HEALTHY
