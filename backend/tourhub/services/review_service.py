# backend/tourhub/services/review_service.py
"""
Review Service for Tourhub

Customers review tours they have seen; each review keeps the tour's
denormalized ``rating`` and ``review_count`` in step.
"""

from typing import List

from sqlalchemy.orm import Session

from ..core.exceptions import DuplicateReviewException, NotFoundException
from ..models.review import Review
from ..models.tour import Tour
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.review import ReviewCreate
from .base import BaseService


class ReviewService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.repository = RepositoryFactory.create_review_repository(db)
        self.tour_repository = RepositoryFactory.create_tour_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    def _get_tour(self, tour_id: str) -> Tour:
        tour = self.tour_repository.get_by_id(tour_id)
        if tour is None:
            raise NotFoundException("Tour not found", details={"tour_id": tour_id})
        return tour

    def _refresh_rating(self, tour: Tour) -> None:
        count, average = self.repository.aggregate_for_tour(tour.id)
        self.tour_repository.set_rating(tour, round(average, 1) if count else 0.0, count)

    @BaseService.measure_operation("create_review")
    def create_review(self, tour_id: str, user: User, data: ReviewCreate) -> Review:
        tour = self._get_tour(tour_id)
        if self.repository.has_reviewed(tour.tenant_id, tour.id, user.id):
            raise DuplicateReviewException(tour.id)

        with self.transaction():
            review = self.repository.create(
                tenant_id=tour.tenant_id,
                tour_id=tour.id,
                user_id=user.id,
                user_name=user.name or user.email,
                rating=data.rating,
                title=data.title,
                comment=data.comment,
                is_verified=self.booking_repository.exists(tour_id=tour.id, user_id=user.id),
            )
            self._refresh_rating(tour)

        self.log_operation("create_review", review_id=review.id, tour_id=tour.id, rating=data.rating)
        return review

    def list_reviews(self, tour_id: str) -> List[Review]:
        return self.repository.list_for_tour(self._get_tour(tour_id).id)

    def has_reviewed(self, tour_id: str, user: User) -> bool:
        tour = self._get_tour(tour_id)
        return self.repository.has_reviewed(tour.tenant_id, tour.id, user.id)

    def delete_review(self, review_id: str) -> None:
        review = self.repository.get_by_id(review_id)
        if review is None:
            raise NotFoundException("Review not found", details={"review_id": review_id})
        tour = self.tour_repository.get_by_id(review.tour_id)

        with self.transaction():
            self.repository.delete(review.id)
            if tour is not None:
                self._refresh_rating(tour)
        self.log_operation("delete_review", review_id=review_id)
