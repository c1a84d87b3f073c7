from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Text, Float, Index, Uuid, Enum as SAEnum
from sqlalchemy import DateTime as SADateTime
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------- Enums ----------
class BookingStatus(str, PyEnum):
    confirmed = "confirmed"
    canceled = "canceled"
    completed = "completed"


# ---------- Models ----------
class Booking(Base):
    __tablename__ = "bookings"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    worker_id: Mapped[str] = mapped_column(Text)
    schedule: Mapped[str] = mapped_column(Text)
    problem_summary: Mapped[str] = mapped_column(Text, default="")
    estimated_cost: Mapped[Optional[float]] = mapped_column(Float)
    status: Mapped[BookingStatus] = mapped_column(
        SAEnum(BookingStatus, name="booking_status", create_constraint=False), default=BookingStatus.confirmed
    )
    created_at: Mapped[datetime] = mapped_column(SADateTime(timezone=True), default=utcnow)


Index("ix_bookings_worker", Booking.worker_id)


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    "Base",
    "Booking",
    "BookingStatus",
    "init_db",
    "utcnow",
]
