# backend/tourhub/routes/v1/admin/reviews.py
"""
Admin review moderation - API v1

Endpoints:
    DELETE /{review_id} → Delete a review and recompute the tour rating
"""

from typing import NoReturn

from fastapi import APIRouter, Depends

from ....api.dependencies.auth import require_admin
from ....api.dependencies.services import get_review_service
from ....core.enums import AdminPermission
from ....core.exceptions import DomainException
from ....models.user import User
from ....schemas.base import MessageResponse
from ....services.review_service import ReviewService

router = APIRouter(tags=["admin-reviews-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.delete("/{review_id}", response_model=MessageResponse)
def delete_review(
    review_id: str,
    admin: User = Depends(require_admin(AdminPermission.MANAGE_REVIEWS.value)),
    service: ReviewService = Depends(get_review_service),
) -> MessageResponse:
    try:
        service.delete_review(review_id)
    except DomainException as e:
        handle_domain_exception(e)
    return MessageResponse(message="Review deleted")
