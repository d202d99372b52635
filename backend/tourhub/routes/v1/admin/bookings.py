# backend/tourhub/routes/v1/admin/bookings.py
"""
Admin bookings routes - API v1

All endpoints require the manageBookings permission.

Endpoints:
    GET /                   → Filtered, sorted, paginated booking list
    POST /bulk-delete       → Delete bookings by id
    POST /manual            → Record a phone or walk-in booking
    GET /{booking_id}       → Booking details
    PATCH /{booking_id}     → Change status
    POST /{booking_id}/cancel → Cancel with the refund policy applied
"""

import logging
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ....api.dependencies.auth import check_booking_access, check_tenant_access, require_admin, scope_admin_tenant
from ....api.dependencies.services import get_admin_booking_service
from ....core.enums import AdminPermission
from ....core.exceptions import DomainException
from ....models.user import User
from ....schemas.booking import (
    AdminBookingListResponse,
    AdminStatusUpdate,
    BookingResponse,
    BulkDeleteRequest,
    BulkDeleteResponse,
    CancelBookingRequest,
    CancelBookingResponse,
    ManualBookingRequest,
)
from ....services.admin_booking_service import AdminBookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin-bookings-v1"])

manage_bookings = require_admin(AdminPermission.MANAGE_BOOKINGS.value)


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


# =============================================================================
# Static routes first (before dynamic routes with path parameters)
# =============================================================================


@router.get("", response_model=AdminBookingListResponse)
def list_bookings(
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    booking_status: Optional[str] = Query(None, alias="status"),
    tour_id: Optional[str] = Query(None, alias="tourId"),
    purchase_from: Optional[str] = Query(None, alias="purchaseFrom"),
    purchase_to: Optional[str] = Query(None, alias="purchaseTo"),
    activity_from: Optional[str] = Query(None, alias="activityFrom"),
    activity_to: Optional[str] = Query(None, alias="activityTo"),
    sort: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    admin: User = Depends(manage_bookings),
    service: AdminBookingService = Depends(get_admin_booking_service),
) -> Dict[str, Any]:
    """
    Booking list for the back office.

    Malformed filters are ignored rather than rejected; page and limit
    fall back to 1 and 10.
    """
    tenant_id = scope_admin_tenant(admin, tenant_id)
    return service.list_bookings(
        tenant_id=tenant_id,
        status=booking_status,
        tour_id=tour_id,
        purchase_from=purchase_from,
        purchase_to=purchase_to,
        activity_from=activity_from,
        activity_to=activity_to,
        sort=sort,
        page=page,
        limit=limit,
    )


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
def bulk_delete_bookings(
    payload: BulkDeleteRequest,
    admin: User = Depends(manage_bookings),
    service: AdminBookingService = Depends(get_admin_booking_service),
) -> BulkDeleteResponse:
    try:
        deleted = service.bulk_delete(payload.ids)
    except DomainException as e:
        handle_domain_exception(e)
    logger.info("Admin %s deleted %d bookings", admin.id, deleted)
    return BulkDeleteResponse(deleted_count=deleted)


@router.post("/manual", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_manual_booking(
    payload: ManualBookingRequest,
    admin: User = Depends(manage_bookings),
    service: AdminBookingService = Depends(get_admin_booking_service),
) -> BookingResponse:
    check_tenant_access(admin, payload.tenant_id)
    try:
        booking = service.create_manual_booking(payload, admin)
    except DomainException as e:
        handle_domain_exception(e)
    return BookingResponse.model_validate(booking)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: str,
    admin: User = Depends(manage_bookings),
    service: AdminBookingService = Depends(get_admin_booking_service),
) -> BookingResponse:
    try:
        booking = service.get_booking(booking_id)
    except DomainException as e:
        handle_domain_exception(e)
    check_booking_access(admin, booking)
    return BookingResponse.model_validate(booking)


@router.patch("/{booking_id}", response_model=BookingResponse)
def update_booking_status(
    booking_id: str,
    payload: AdminStatusUpdate,
    admin: User = Depends(manage_bookings),
    service: AdminBookingService = Depends(get_admin_booking_service),
) -> BookingResponse:
    """Accepts status codes ("partial_refunded") or labels ("Partial Refunded")."""
    try:
        check_booking_access(admin, service.get_booking(booking_id))
        return BookingResponse.model_validate(service.update_status(booking_id, payload.status))
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/cancel", response_model=CancelBookingResponse)
def cancel_booking(
    booking_id: str,
    payload: Optional[CancelBookingRequest] = Body(None),
    admin: User = Depends(manage_bookings),
    service: AdminBookingService = Depends(get_admin_booking_service),
) -> CancelBookingResponse:
    try:
        check_booking_access(admin, service.get_booking(booking_id))
        result = service.cancel_booking(booking_id, admin, reason=payload.reason if payload else None)
    except DomainException as e:
        handle_domain_exception(e)
    return CancelBookingResponse.model_validate(result)
