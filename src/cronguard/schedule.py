"""
Schedule parsing. Turns a human-readable cadence ("Every 5 minutes", "Daily")
into an interval length in minutes.
"""
import re

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR
MINUTES_PER_WEEK = 7 * MINUTES_PER_DAY

DEFAULT_INTERVAL_MINUTES = MINUTES_PER_DAY

_EVERY_N_MINUTES = re.compile(r"every\s+(0*[1-9]\d*)\s*min")
_EVERY_N_HOURS = re.compile(r"every\s+(0*[1-9]\d*)\s*hour")


def parse_schedule(schedule: str) -> int:
    """Return the interval in minutes described by ``schedule``.

    Patterns are matched case-insensitively, first match wins. Anything
    unrecognised, including a zero count, is treated as daily rather than
    rejected.
    """
    text = schedule.lower()

    match = _EVERY_N_MINUTES.search(text)
    if match:
        return int(match.group(1))

    if "every minute" in text:
        return 1

    match = _EVERY_N_HOURS.search(text)
    if match:
        return int(match.group(1)) * MINUTES_PER_HOUR

    if "every hour" in text:
        return MINUTES_PER_HOUR

    if "every day" in text or "daily" in text:
        return MINUTES_PER_DAY

    if "every week" in text or "weekly" in text:
        return MINUTES_PER_WEEK

    return DEFAULT_INTERVAL_MINUTES
