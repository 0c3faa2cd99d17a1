import re
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from cronguard.status import compute_status, ensure_utc, next_expected_ping

# Cadences the schedule parser understands
SCHEDULE_PATTERN = re.compile(
    r"^(every\s+0*[1-9]\d*\s*(min(ute)?s?|hours?)|every\s+(minute|hour|day|week)|daily|weekly)$",
    re.IGNORECASE,
)


def _validate_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name is required")
    if len(v) > 100:
        raise ValueError("Name must be 100 characters or less")
    return v


def _validate_schedule(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Schedule is required")
    if len(v) > 50:
        raise ValueError("Schedule must be 50 characters or less")
    if not SCHEDULE_PATTERN.match(v):
        raise ValueError(
            'Invalid schedule format. Examples: "Every 5 minutes", "Every hour", "Daily"'
        )
    return v


def _validate_grace(v: int) -> int:
    if v < 1:
        raise ValueError("Grace period must be at least 1 minute")
    if v > 1440:
        raise ValueError("Grace period must be 24 hours or less")
    return v


# --- Monitor Schemas ---

class MonitorCreate(BaseModel):
    name: str
    schedule: str
    grace_minutes: int = 15

    @field_validator("name")
    @classmethod
    def name_valid(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("schedule")
    @classmethod
    def schedule_valid(cls, v: str) -> str:
        return _validate_schedule(v)

    @field_validator("grace_minutes")
    @classmethod
    def grace_valid(cls, v: int) -> int:
        return _validate_grace(v)


class MonitorUpdate(BaseModel):
    name: Optional[str] = None
    schedule: Optional[str] = None
    grace_minutes: Optional[int] = None

    @field_validator("name")
    @classmethod
    def name_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = _validate_name(v)
        return v

    @field_validator("schedule")
    @classmethod
    def schedule_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = _validate_schedule(v)
        return v

    @field_validator("grace_minutes")
    @classmethod
    def grace_valid(cls, v: Optional[int]) -> Optional[int]:
        if v is not None:
            v = _validate_grace(v)
        return v


class PingResponse(BaseModel):
    id: str
    timestamp: datetime
    status: str
    duration: Optional[float] = None
    message: Optional[str] = None
    ip: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("timestamp")
    @classmethod
    def timestamp_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class MonitorResponse(BaseModel):
    id: str
    name: str
    schedule: str
    interval_minutes: int
    grace_minutes: int
    status: str
    last_ping: Optional[datetime] = None
    next_expected: Optional[datetime] = None
    paused: bool
    paused_at: Optional[datetime] = None
    paused_until: Optional[datetime] = None
    pause_reason: Optional[str] = None
    created_at: datetime
    pings: list[PingResponse] = []

    @classmethod
    def from_monitor(cls, monitor, now: datetime, pings: Sequence = ()) -> "MonitorResponse":
        """Serialize a monitor with its status derived at ``now``."""
        return cls(
            id=monitor.id,
            name=monitor.name,
            schedule=monitor.schedule,
            interval_minutes=monitor.interval_minutes,
            grace_minutes=monitor.grace_minutes,
            status=compute_status(monitor, now),
            last_ping=ensure_utc(monitor.last_ping),
            next_expected=next_expected_ping(monitor),
            paused=bool(monitor.paused),
            paused_at=ensure_utc(monitor.paused_at),
            paused_until=ensure_utc(monitor.paused_until),
            pause_reason=monitor.pause_reason,
            created_at=ensure_utc(monitor.created_at),
            pings=[PingResponse.model_validate(p) for p in pings],
        )


class MonitorCreatedResponse(MonitorResponse):
    ping_url: str


class StatsResponse(BaseModel):
    total: int
    healthy: int
    late: int
    down: int
    paused: int
    total_pings: int = Field(serialization_alias="totalPings")


class TimelineMarkerResponse(BaseModel):
    type: str  # ping, late, missed
    timestamp: datetime
    ping: Optional[PingResponse] = None


# --- Ping Schemas ---

class PingRequest(BaseModel):
    success: bool = True
    duration: Optional[float] = None  # milliseconds
    message: Optional[str] = None

    @field_validator("duration")
    @classmethod
    def duration_valid(cls, v: Optional[float]) -> Optional[float]:
        if v is not None:
            if v < 0:
                raise ValueError("Duration cannot be negative")
            if v > 86_400_000:
                raise ValueError("Duration cannot exceed 24 hours")
        return v

    @field_validator("message")
    @classmethod
    def message_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > 500:
            raise ValueError("Message must be 500 characters or less")
        return v


class PingMonitorSummary(BaseModel):
    id: str
    name: str
    status: str


class PingRecordedResponse(BaseModel):
    status: str = "ok"
    ping_id: str
    monitor: PingMonitorSummary


# --- Pause Schemas ---

class PauseRequest(BaseModel):
    id: UUID
    reason: Optional[str] = None
    until: Optional[datetime] = None


class ResumeRequest(BaseModel):
    id: UUID
