# backend/tourhub/repositories/booking_repository.py
"""
Booking Repository for Tourhub

Implements booking data access:
- Reference uniqueness checks (per tenant)
- Customer and payment lookups
- Admin list queries driven by criteria dictionaries
- Manifest and reporting aggregates
"""

from datetime import datetime
import logging
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def get_with_details(self, booking_id: str) -> Optional[Booking]:
        """Booking with tour and customer eagerly loaded."""
        try:
            return (
                self.db.query(Booking)
                .options(joinedload(Booking.tour), joinedload(Booking.user))
                .filter(Booking.id == booking_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error("Error getting booking %s: %s", booking_id, e)
            raise RepositoryException(f"Failed to get booking: {e}")

    def reference_exists(self, tenant_id: str, reference: str) -> bool:
        return self.exists(tenant_id=tenant_id, booking_reference=reference)

    def get_by_reference(self, reference: str, tenant_ids: Sequence[str]) -> Optional[Booking]:
        """Booking with this reference, taken from the first of ``tenant_ids`` that has one."""
        try:
            matches = (
                self.db.query(Booking)
                .options(joinedload(Booking.tour), joinedload(Booking.user))
                .filter(Booking.booking_reference == reference, Booking.tenant_id.in_(list(tenant_ids)))
                .all()
            )
            by_tenant = {booking.tenant_id: booking for booking in matches}
            return next((by_tenant[tenant_id] for tenant_id in tenant_ids if tenant_id in by_tenant), None)
        except SQLAlchemyError as e:
            self.logger.error("Error getting booking by reference: %s", e)
            raise RepositoryException(f"Failed to get booking by reference: {e}")

    def list_for_user(self, user_id: str) -> List[Booking]:
        query = (
            self.db.query(Booking)
            .options(joinedload(Booking.tour))
            .filter(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc())
        )
        return self._execute_query(query)

    def find_by_payment_id(self, payment_id: str) -> List[Booking]:
        return self.find_by(payment_id=payment_id)

    def find_page(
        self,
        criteria: Mapping[str, Any],
        *,
        order_by: Sequence[Any],
        skip: int,
        limit: int,
    ) -> Tuple[List[Booking], int]:
        """
        One page of bookings plus the total match count.

        Bookings whose tour has been deleted are never returned.
        """
        base = self.apply_criteria(self._build_query(), criteria).filter(Booking.tour_id.isnot(None))
        try:
            total = base.count()
            rows = (
                base.options(joinedload(Booking.tour), joinedload(Booking.user))
                .order_by(*order_by)
                .offset(skip)
                .limit(limit)
                .all()
            )
            return rows, total
        except SQLAlchemyError as e:
            self.logger.error("Error running booking page query: %s", e)
            raise RepositoryException(f"Failed to list bookings: {e}")

    def find_for_manifest(self, tour_id: str, start: datetime, end: datetime) -> List[Booking]:
        query = (
            self.db.query(Booking)
            .options(joinedload(Booking.user))
            .filter(Booking.tour_id == tour_id, Booking.date >= start, Booking.date <= end)
            .order_by(Booking.time.asc())
        )
        return self._execute_query(query)

    # Reporting

    def sum_revenue(self, criteria: Mapping[str, Any]) -> float:
        query = self.apply_criteria(self.db.query(func.coalesce(func.sum(Booking.total_price), 0)), criteria)
        return float(self._execute_scalar(query) or 0)

    def latest(self, criteria: Mapping[str, Any], limit: int) -> List[Booking]:
        query = (
            self.apply_criteria(self._build_query(), criteria)
            .options(joinedload(Booking.tour), joinedload(Booking.user))
            .order_by(Booking.created_at.desc())
            .limit(limit)
        )
        return self._execute_query(query)

    def revenue_rows(self, criteria: Mapping[str, Any]) -> List[Tuple[datetime, float]]:
        """(created_at, total_price) pairs for monthly bucketing."""
        query = self.apply_criteria(self.db.query(Booking.created_at, Booking.total_price), criteria)
        return [(row[0], float(row[1] or 0)) for row in self._execute_query(query)]

    def top_tours(self, criteria: Mapping[str, Any], limit: int) -> List[Tuple[Optional[str], int, float]]:
        """(tour_id, booking count, revenue) ordered by booking count."""
        booking_count = func.count(Booking.id).label("booking_count")
        query = self.apply_criteria(
            self.db.query(Booking.tour_id, booking_count, func.coalesce(func.sum(Booking.total_price), 0)),
            criteria,
        )
        query = query.group_by(Booking.tour_id).order_by(booking_count.desc()).limit(limit)
        return [(row[0], int(row[1]), float(row[2] or 0)) for row in self._execute_query(query)]
