# backend/tourhub/models/availability.py
"""
Per-day availability for a tour.

Each row is one tour on one date. ``slots`` holds the day's departures:

    [{time, capacity, booked, blocked, price, extra_capacity}]

``stop_sale`` blocks the whole day regardless of slot capacity.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String, Text, UniqueConstraint
import ulid

from ..core.enums import AvailabilityStatus
from ..database import Base
from .types import json_type

DEFAULT_SLOT_CAPACITY = 10
LIMITED_THRESHOLD = 0.2


def _slot_capacity(slot: Dict[str, Any]) -> int:
    return int(slot.get("capacity", DEFAULT_SLOT_CAPACITY) or 0) + int(slot.get("extra_capacity") or 0)


class Availability(Base):
    __tablename__ = "availabilities"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tour_id = Column(String(26), ForeignKey("tours.id", ondelete="CASCADE"), nullable=False, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False)
    slots = Column(json_type, nullable=False, default=list)
    stop_sale = Column(Boolean, nullable=False, default=False)
    stop_sale_reason = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (UniqueConstraint("tour_id", "date", name="uq_availability_tour_date"),)

    def _open_slots(self) -> List[Dict[str, Any]]:
        return [slot for slot in (self.slots or []) if not slot.get("blocked")]

    @property
    def total_capacity(self) -> int:
        return sum(_slot_capacity(slot) for slot in (self.slots or []))

    @property
    def booked(self) -> int:
        return sum(int(slot.get("booked") or 0) for slot in self._open_slots())

    @property
    def available(self) -> int:
        return sum(
            max(0, _slot_capacity(slot) - int(slot.get("booked") or 0)) for slot in self._open_slots()
        )

    def get_availability_status(self) -> str:
        if self.stop_sale:
            return AvailabilityStatus.BLOCKED.value
        available = self.available
        if available <= 0:
            return AvailabilityStatus.SOLD_OUT.value
        if available <= self.total_capacity * LIMITED_THRESHOLD:
            return AvailabilityStatus.LIMITED.value
        return AvailabilityStatus.AVAILABLE.value
