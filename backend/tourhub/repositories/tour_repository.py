# backend/tourhub/repositories/tour_repository.py
"""Data access for the tour catalogue."""

from typing import Any, Dict, List, Mapping, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.tour import Tour
from .base_repository import BaseRepository


class TourRepository(BaseRepository[Tour]):
    def __init__(self, db: Session):
        super().__init__(db, Tour)

    def list_by_criteria(self, criteria: Mapping[str, Any]) -> List[Tour]:
        return self.find_by_criteria(
            criteria, order_by=[Tour.is_featured.desc(), Tour.created_at.desc()]
        )

    def get_many(self, tour_ids: Sequence[str]) -> Dict[str, Tour]:
        if not tour_ids:
            return {}
        try:
            tours = self.db.query(Tour).filter(Tour.id.in_(list(tour_ids))).all()
            return {tour.id: tour for tour in tours}
        except SQLAlchemyError as e:
            self.logger.error("Error loading tours: %s", e)
            raise RepositoryException(f"Failed to load tours: {e}")

    def set_rating(self, tour: Tour, rating: float, review_count: int) -> Tour:
        tour.rating = rating
        tour.review_count = review_count
        self.db.flush()
        return tour
