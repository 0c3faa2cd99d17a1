from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cronguard.config import get_settings
from cronguard.database import get_db
from cronguard.dependencies import get_now
from cronguard.schemas import (
    MonitorCreate,
    MonitorCreatedResponse,
    MonitorResponse,
    MonitorUpdate,
    PingResponse,
    StatsResponse,
    TimelineMarkerResponse,
)
from cronguard import storage
from cronguard.timeline import build_timeline

router = APIRouter(prefix="/api/monitors", tags=["monitors"])
settings = get_settings()


async def _get_monitor_or_404(db: AsyncSession, monitor_id: str):
    monitor = await storage.get_monitor(db, monitor_id)
    if not monitor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Monitor not found",
        )
    return monitor


@router.get("", response_model=None)
async def list_monitors(
    stats: bool = False,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> list[MonitorResponse] | StatsResponse:
    if stats:
        return StatsResponse(**await storage.get_stats(db, now))

    monitors = await storage.list_monitors(db)
    responses = []
    for monitor in monitors:
        pings = await storage.get_recent_pings(db, monitor.id, settings.ping_history_limit)
        responses.append(MonitorResponse.from_monitor(monitor, now, pings))
    return responses


@router.post("", response_model=MonitorCreatedResponse, status_code=201)
async def create_monitor(
    body: MonitorCreate,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    monitor = await storage.create_monitor(
        db, body.name, body.schedule, body.grace_minutes, now=now
    )
    response = MonitorResponse.from_monitor(monitor, now)
    return MonitorCreatedResponse(
        **response.model_dump(), ping_url=f"/api/ping/{monitor.id}"
    )


@router.get("/{monitor_id}", response_model=MonitorResponse)
async def get_monitor(
    monitor_id: str,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    monitor = await _get_monitor_or_404(db, monitor_id)
    pings = await storage.get_recent_pings(db, monitor.id, settings.ping_history_limit)
    return MonitorResponse.from_monitor(monitor, now, pings)


@router.get("/{monitor_id}/timeline", response_model=list[TimelineMarkerResponse])
async def get_timeline(
    monitor_id: str,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    monitor = await _get_monitor_or_404(db, monitor_id)
    pings = await storage.get_recent_pings(db, monitor.id, settings.ping_history_limit)

    markers = build_timeline(monitor, pings, now, limit=settings.timeline_limit)
    return [
        TimelineMarkerResponse(
            type=marker.type,
            timestamp=marker.timestamp,
            ping=PingResponse.model_validate(marker.ping) if marker.ping else None,
        )
        for marker in markers
    ]


@router.patch("/{monitor_id}", response_model=MonitorResponse)
async def update_monitor(
    monitor_id: str,
    body: MonitorUpdate,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    monitor = await _get_monitor_or_404(db, monitor_id)

    update_data = body.model_dump(exclude_unset=True, exclude_none=True)
    monitor = await storage.update_monitor(db, monitor, **update_data)

    pings = await storage.get_recent_pings(db, monitor.id, settings.ping_history_limit)
    return MonitorResponse.from_monitor(monitor, now, pings)


@router.delete("/{monitor_id}", status_code=204)
async def delete_monitor(
    monitor_id: str,
    db: AsyncSession = Depends(get_db),
):
    deleted = await storage.delete_monitor(db, monitor_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Monitor not found",
        )
