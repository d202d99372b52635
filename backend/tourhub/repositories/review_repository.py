# backend/tourhub/repositories/review_repository.py
"""
Repository for tour reviews.

Follows repository pattern: no business logic, DB-only operations.
"""

from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.review import Review
from .base_repository import BaseRepository


class ReviewRepository(BaseRepository[Review]):
    """Data access for `Review`."""

    def __init__(self, db: Session):
        super().__init__(db, Review)

    def list_for_tour(self, tour_id: str) -> List[Review]:
        query = self._build_query().filter(Review.tour_id == tour_id).order_by(Review.created_at.desc())
        return self._execute_query(query)

    def has_reviewed(self, tenant_id: str, tour_id: str, user_id: str) -> bool:
        return self.exists(tenant_id=tenant_id, tour_id=tour_id, user_id=user_id)

    def aggregate_for_tour(self, tour_id: str) -> Tuple[int, float]:
        """(review count, raw average rating) for a tour."""
        row = (
            self.db.query(func.count(Review.id), func.avg(Review.rating * 1.0))
            .filter(Review.tour_id == tour_id)
            .first()
        )
        if not row:
            return 0, 0.0
        return int(row[0] or 0), float(row[1] or 0.0)
