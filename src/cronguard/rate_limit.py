"""
Per-monitor ping rate limiting using fixed windows.
"""
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, MutableMapping, Optional

logger = logging.getLogger("cronguard.rate_limit")


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float  # epoch seconds


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float
    retry_after: int  # whole seconds until the window resets


class RateLimiter:
    """Counts requests per key within a window opened by the key's first request.

    The store is supplied by the owner so separate limiters never share
    counters.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 60,
        store: Optional[MutableMapping[str, RateLimitEntry]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.store = store if store is not None else {}
        self.clock = clock
        self._lock = threading.Lock()

    def check(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and report whether it is allowed."""
        with self._lock:
            now = self.clock()
            entry = self.store.get(key)

            if entry is None or now >= entry.reset_at:
                entry = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
                self.store[key] = entry
                return self._result(True, entry, now)

            if entry.count >= self.max_requests:
                logger.debug(f"Rate limit exceeded for {key}")
                return self._result(False, entry, now)

            entry.count += 1
            return self._result(True, entry, now)

    def prune(self) -> int:
        """Drop expired windows. Returns how many were removed."""
        with self._lock:
            now = self.clock()
            expired = [key for key, entry in self.store.items() if now >= entry.reset_at]
            for key in expired:
                del self.store[key]
        return len(expired)

    def _result(self, allowed: bool, entry: RateLimitEntry, now: float) -> RateLimitResult:
        return RateLimitResult(
            allowed=allowed,
            remaining=max(self.max_requests - entry.count, 0),
            reset_at=entry.reset_at,
            retry_after=max(math.ceil(entry.reset_at - now), 0),
        )
