from datetime import datetime, timezone

from fastapi import Request

from cronguard.rate_limit import RateLimiter


def get_now() -> datetime:
    """Current UTC time. Overridden in tests to control the clock."""
    return datetime.now(timezone.utc)


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter
