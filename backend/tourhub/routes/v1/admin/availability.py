# backend/tourhub/routes/v1/admin/availability.py
"""
Admin availability routes - API v1

Day-level slots and stop-sales. Requires manageTours.

Endpoints:
    GET /?tourId&month&year&tenantId → One month of availability rows
    POST /                          → Upsert one day
    PUT /                           → Bulk action over a list of dates
"""

from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, Query

from ....api.dependencies.auth import check_tenant_access, require_admin, scope_admin_tenant
from ....api.dependencies.services import get_availability_service
from ....core.enums import AdminPermission
from ....core.exceptions import DomainException
from ....models.user import User
from ....schemas.availability import (
    AvailabilityBulkAction,
    AvailabilityMonthResponse,
    AvailabilityResponse,
    AvailabilityUpsert,
    BulkResult,
)
from ....services.availability_service import AvailabilityService, serialize_availability

router = APIRouter(tags=["admin-availability-v1"])

manage_tours = require_admin(AdminPermission.MANAGE_TOURS.value)


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.get("", response_model=AvailabilityMonthResponse)
def list_availability(
    tour_id: Optional[str] = Query(None, alias="tourId"),
    month: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    admin: User = Depends(manage_tours),
    service: AvailabilityService = Depends(get_availability_service),
) -> Dict[str, Any]:
    tenant_id = scope_admin_tenant(admin, tenant_id)
    try:
        return service.list_month(tour_id, month, year, tenant_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=AvailabilityResponse)
def upsert_availability(
    payload: AvailabilityUpsert,
    admin: User = Depends(manage_tours),
    service: AvailabilityService = Depends(get_availability_service),
) -> Dict[str, Any]:
    check_tenant_access(admin, payload.tenant_id)
    try:
        return serialize_availability(service.upsert_day(payload))
    except DomainException as e:
        handle_domain_exception(e)


@router.put("", response_model=BulkResult)
def bulk_update_availability(
    payload: AvailabilityBulkAction,
    admin: User = Depends(manage_tours),
    service: AvailabilityService = Depends(get_availability_service),
) -> Dict[str, int]:
    """block, unblock, updateSlots or setStopSale over every listed date."""
    check_tenant_access(admin, payload.tenant_id)
    try:
        return service.bulk_update(payload)
    except DomainException as e:
        handle_domain_exception(e)
