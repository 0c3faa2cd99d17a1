from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cronguard.config import get_settings
from cronguard.database import get_db
from cronguard.dependencies import get_now
from cronguard.pauses import pause_monitor, resume_monitor
from cronguard.schemas import MonitorResponse, PauseRequest, ResumeRequest
from cronguard.storage import get_recent_pings

router = APIRouter(prefix="/api", tags=["pauses"])
settings = get_settings()


@router.post("/pause", response_model=MonitorResponse)
async def pause(
    body: PauseRequest,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    monitor = await pause_monitor(db, str(body.id), now, reason=body.reason, until=body.until)
    if not monitor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Monitor not found",
        )
    pings = await get_recent_pings(db, monitor.id, settings.ping_history_limit)
    return MonitorResponse.from_monitor(monitor, now, pings)


@router.post("/resume", response_model=MonitorResponse)
async def resume(
    body: ResumeRequest,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    monitor = await resume_monitor(db, str(body.id))
    if not monitor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Monitor not found",
        )
    pings = await get_recent_pings(db, monitor.id, settings.ping_history_limit)
    return MonitorResponse.from_monitor(monitor, now, pings)
