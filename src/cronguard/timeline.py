"""
Timeline reconstruction: the ping history shown per monitor, with synthetic
"late" and "missed" markers inferred from gaps in the recorded pings.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from cronguard.models.ping import Ping
from cronguard.status import ensure_utc, get_grace, get_interval

PING = "ping"
LATE = "late"
MISSED = "missed"

DEFAULT_TIMELINE_LIMIT = 75


@dataclass(frozen=True)
class TimelineMarker:
    type: str  # ping, late, missed
    timestamp: datetime
    ping: Optional[Ping] = None


def build_timeline(
    monitor,
    pings: Sequence[Ping],
    now: datetime,
    limit: int = DEFAULT_TIMELINE_LIMIT,
) -> list[TimelineMarker]:
    """Build display markers for ``monitor``.

    ``pings`` must be ordered newest first. Markers relative to ``now`` lead,
    followed by the recorded pings with inferred misses placed after the
    newer ping of each oversized gap. The result holds at most ``limit``
    markers.
    """
    interval = get_interval(monitor)
    grace = get_grace(monitor)
    now = ensure_utc(now)
    markers: list[TimelineMarker] = []

    last_ping = ensure_utc(monitor.last_ping)
    if last_ping is not None:
        since_last = now - last_ping
        if interval < since_last <= interval + grace:
            markers.append(TimelineMarker(LATE, now))
        elif since_last > interval + grace:
            missed_count = (since_last - grace) // interval
            for i in range(min(missed_count, limit)):
                markers.append(TimelineMarker(MISSED, now - i * interval))

    for index, ping in enumerate(pings):
        markers.append(TimelineMarker(PING, ensure_utc(ping.timestamp), ping))

        if index == len(pings) - 1:
            break

        current = ensure_utc(ping.timestamp)
        gap = current - ensure_utc(pings[index + 1].timestamp)
        if gap > interval + grace:
            missed_count = math.ceil(gap / interval) - 1
            for j in range(min(missed_count, limit)):
                markers.append(TimelineMarker(MISSED, current - (j + 1) * interval))

        if len(markers) >= limit:
            break

    return markers[:limit]
