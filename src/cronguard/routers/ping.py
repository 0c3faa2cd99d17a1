from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from cronguard.database import get_db
from cronguard.dependencies import get_now, get_rate_limiter
from cronguard.pings import record_ping
from cronguard.rate_limit import RateLimiter, RateLimitResult
from cronguard.schemas import PingMonitorSummary, PingRecordedResponse, PingRequest
from cronguard.status import compute_status
from cronguard.storage import get_monitor

router = APIRouter(prefix="/api/ping", tags=["ping"])


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else None


def _rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(int(result.reset_at)),
    }


def _rejected_headers(result: RateLimitResult) -> dict[str, str]:
    return {"Retry-After": str(result.retry_after), **_rate_limit_headers(result)}


@router.get("/{monitor_id}", response_class=PlainTextResponse)
async def ping_get(
    monitor_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    rate_limit = limiter.check(monitor_id)
    if not rate_limit.allowed:
        return PlainTextResponse(
            "Rate limit exceeded",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            headers=_rejected_headers(rate_limit),
        )

    ping = await record_ping(db, monitor_id, now, ip=_client_ip(request))
    if not ping:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Monitor not found",
        )

    return PlainTextResponse(
        "OK",
        headers={"X-Ping-ID": ping.id, **_rate_limit_headers(rate_limit)},
    )


@router.post("/{monitor_id}", response_model=PingRecordedResponse)
async def ping_post(
    monitor_id: str,
    request: Request,
    response: Response,
    body: Optional[PingRequest] = None,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    rate_limit = limiter.check(monitor_id)
    if not rate_limit.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded",
            headers=_rejected_headers(rate_limit),
        )

    body = body or PingRequest()
    ping = await record_ping(
        db,
        monitor_id,
        now,
        success=body.success,
        duration=body.duration,
        message=body.message,
        ip=_client_ip(request),
    )
    if not ping:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Monitor not found",
        )

    monitor = await get_monitor(db, monitor_id)
    response.headers.update(_rate_limit_headers(rate_limit))
    return PingRecordedResponse(
        ping_id=ping.id,
        monitor=PingMonitorSummary(
            id=monitor.id,
            name=monitor.name,
            status=compute_status(monitor, now),
        ),
    )
