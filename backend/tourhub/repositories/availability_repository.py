# backend/tourhub/repositories/availability_repository.py
"""
Availability Repository for Tourhub

Per-day availability rows keyed by (tour, date).
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..models.availability import Availability
from .base_repository import BaseRepository


class AvailabilityRepository(BaseRepository[Availability]):
    def __init__(self, db: Session):
        super().__init__(db, Availability)

    def get_for_day(self, tour_id: str, day: date) -> Optional[Availability]:
        return self.find_one_by(tour_id=tour_id, date=day)

    def list_range(self, tour_id: str, start: date, end: date, tenant_id: Optional[str] = None) -> List[Availability]:
        query = self._build_query().filter(
            Availability.tour_id == tour_id,
            Availability.date >= start,
            Availability.date <= end,
        )
        if tenant_id:
            query = query.filter(Availability.tenant_id == tenant_id)
        return self._execute_query(query.order_by(Availability.date.asc()))

    def upsert(self, tour_id: str, day: date, values: Dict[str, Any]) -> Tuple[Availability, bool]:
        """Create or update the row for (tour, day). Returns (row, created)."""
        row = self.get_for_day(tour_id, day)
        if row is None:
            return self.create(tour_id=tour_id, date=day, **values), True
        for key, value in values.items():
            setattr(row, key, value)
        self.flush()
        return row, False
