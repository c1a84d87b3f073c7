"""
Booking store (async)
---------------------
Functions:
  - BookingStore.create(worker_id, schedule, problem_summary, estimated_cost)
  - BookingStore.get(booking_id)

Notes:
  - Used only after the matching pipeline has produced a quote.
  - Timestamps are UTC-aware; responses are BookingRecord models.
"""
from __future__ import annotations

import uuid
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from common.models import BookingRecord
from db.models import Booking
from db.session import Session


def _record(b: Booking) -> BookingRecord:
    return BookingRecord(
        id=str(b.id),
        worker_id=b.worker_id,
        schedule=b.schedule,
        problem_summary=b.problem_summary or "",
        estimated_cost=b.estimated_cost,
        status=b.status.value if hasattr(b.status, "value") else str(b.status),
        created_at=b.created_at,
    )


class BookingStore:
    def __init__(self, session_factory: Callable[[], AsyncSession] = Session):
        self._session_factory = session_factory

    async def create(
        self,
        worker_id: str,
        schedule: str,
        problem_summary: str,
        estimated_cost: Optional[float],
    ) -> BookingRecord:
        if not worker_id or not schedule:
            raise ValueError("worker_id and schedule are required")
        async with self._session_factory() as db:
            b = Booking(
                worker_id=worker_id,
                schedule=schedule.strip(),
                problem_summary=(problem_summary or "").strip(),
                estimated_cost=estimated_cost,
            )
            db.add(b)
            await db.commit()
            await db.refresh(b)
            return _record(b)

    async def get(self, booking_id: str) -> Optional[BookingRecord]:
        try:
            key = uuid.UUID(booking_id)
        except ValueError:
            return None
        async with self._session_factory() as db:
            b = await db.get(Booking, key)
            return _record(b) if b else None
