# backend/tourhub/routes/v1/reviews.py
"""
Reviews routes - API v1

Mounted under /api/v1/tours next to the catalogue routes.
All business logic delegated to ReviewService.

Endpoints:
    GET /{tour_id}/reviews        → Reviews for a tour, newest first (public)
    GET /{tour_id}/reviews/check  → Whether the caller reviewed the tour
    POST /{tour_id}/reviews       → Submit a review (authenticated)
"""

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_review_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.review import ReviewCheckResponse, ReviewCreate, ReviewListResponse, ReviewResponse
from ...services.review_service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reviews-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


# Static suffix first so "check" never reads as a review id
@router.get("/{tour_id}/reviews/check", response_model=ReviewCheckResponse)
def check_reviewed(
    tour_id: str,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
) -> ReviewCheckResponse:
    try:
        return ReviewCheckResponse(has_reviewed=service.has_reviewed(tour_id, current_user))
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{tour_id}/reviews", response_model=ReviewListResponse)
def list_reviews(tour_id: str, service: ReviewService = Depends(get_review_service)) -> ReviewListResponse:
    try:
        reviews = service.list_reviews(tour_id)
    except DomainException as e:
        handle_domain_exception(e)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(review) for review in reviews],
        total=len(reviews),
    )


@router.post("/{tour_id}/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    tour_id: str,
    payload: ReviewCreate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    """
    Submit a review.

    Returns 404 for an unknown tour and 409 when the caller already
    reviewed it. The tour rating is recomputed in the same transaction.
    """
    try:
        review = service.create_review(tour_id, current_user, payload)
    except DomainException as e:
        handle_domain_exception(e)
    return ReviewResponse.model_validate(review)
