import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Float, ForeignKey, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cronguard.database import Base


class Ping(Base):
    __tablename__ = "pings"
    __table_args__ = (
        Index("ix_pings_monitor_timestamp", "monitor_id", "timestamp"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    monitor_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("monitors.id", ondelete="CASCADE"), nullable=False
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="success")  # success, failure
    duration: Mapped[float | None] = mapped_column(Float, nullable=True)  # milliseconds
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip: Mapped[str | None] = mapped_column(String(45), nullable=True)

    monitor: Mapped["Monitor"] = relationship(back_populates="pings")  # noqa: F821
