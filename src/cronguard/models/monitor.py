import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cronguard.database import Base


class Monitor(Base):
    __tablename__ = "monitors"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    schedule: Mapped[str] = mapped_column(String(100), nullable=False)
    interval_minutes: Mapped[int] = mapped_column(Integer, nullable=False)  # derived from schedule
    grace_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    last_ping: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    paused: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    paused_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    paused_until: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)
    pause_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(timezone.utc)
    )

    pings: Mapped[list["Ping"]] = relationship(  # noqa: F821
        back_populates="monitor",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Ping.timestamp.desc()",
    )
