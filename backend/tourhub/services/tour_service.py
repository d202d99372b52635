# backend/tourhub/services/tour_service.py
"""Storefront catalogue reads and booking option housekeeping."""

from typing import Any, Dict, List

from sqlalchemy.orm import Session
import ulid

from ..core.exceptions import NotFoundException
from ..models.tour import Tour
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .tenant_service import build_tenant_query


class TourService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_tour_repository(db)

    @BaseService.measure_operation("list_tours")
    def list_tours(self, tenant_id: str) -> List[Tour]:
        """Published tours of the tenant plus the shared default catalogue."""
        return self.repository.list_by_criteria(build_tenant_query({"is_published": True}, tenant_id))

    def get_tour(self, tour_id: str) -> Tour:
        tour = self.repository.get_by_id(tour_id)
        if tour is None:
            raise NotFoundException("Tour not found", details={"tour_id": tour_id})
        return tour

    def get_booking_options(self, tour_id: str) -> Dict[str, Any]:
        tour = self.ensure_option_ids(self.get_tour(tour_id))
        return {
            "tourId": tour.id,
            "options": list(tour.booking_options or []),
            "addOns": list(tour.add_ons or []),
        }

    def ensure_option_ids(self, tour: Tour) -> Tour:
        """
        Give every booking option an id.

        Stop-sales and offers reference options by id, so ids must exist
        and never change once assigned.
        """
        options = list(tour.booking_options or [])
        changed = False
        normalized: List[Dict[str, Any]] = []
        for option in options:
            if isinstance(option, dict) and not option.get("id"):
                option = {**option, "id": str(ulid.ULID())}
                changed = True
            normalized.append(option)

        if changed:
            # Reassign so SQLAlchemy sees the JSON column change
            tour.booking_options = normalized
            self.repository.flush()
            self.logger.info("Assigned booking option ids for tour %s", tour.id)
        return tour
