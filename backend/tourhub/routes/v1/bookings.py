# backend/tourhub/routes/v1/bookings.py
"""
Bookings routes - API v1

Customer-facing booking endpoints. Owners only, except the public
confirmation lookup by reference.

Endpoints:
    GET /verify/{reference}  → Public confirmation summary
    GET /{booking_id}        → Booking details (owner)
    POST /{booking_id}/cancel → Cancel with the refund policy applied (owner)
"""

import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, Request

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_booking_service
from ...core.exceptions import DomainException
from ...middleware.tenant import get_request_tenant_id
from ...models.user import User
from ...schemas.booking import BookingResponse, BookingVerifyResponse, CancelBookingRequest, CancelBookingResponse
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


# =============================================================================
# Static routes first (before dynamic routes with path parameters)
# =============================================================================


@router.get("/verify/{reference}", response_model=BookingVerifyResponse)
def verify_booking(
    reference: str, request: Request, service: BookingService = Depends(get_booking_service)
) -> BookingVerifyResponse:
    """Looked up within the request tenant, falling back to the default tenant."""
    try:
        return BookingVerifyResponse.model_validate(
            service.verify_reference(reference, get_request_tenant_id(request))
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        return BookingResponse.model_validate(service.get_user_booking(booking_id, current_user))
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/cancel", response_model=CancelBookingResponse)
def cancel_booking(
    booking_id: str,
    payload: Optional[CancelBookingRequest] = Body(None),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> CancelBookingResponse:
    """
    Cancel a booking.

    Refund: 100% at 7+ days before the tour, 50% at 3+ days, none after.
    """
    reason = payload.reason if payload else None
    try:
        result = service.cancel_booking(booking_id, current_user, reason=reason)
    except DomainException as e:
        handle_domain_exception(e)
    return CancelBookingResponse.model_validate(result)
