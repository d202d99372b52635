# backend/tourhub/routes/v1/admin/manifests.py
"""
Admin manifests routes - API v1

Endpoints:
    GET /?tourId&date → Guest list for one tour departure, sorted by time
"""

from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, Query

from ....api.dependencies.auth import require_admin, scope_admin_tenant
from ....api.dependencies.services import get_admin_booking_service
from ....core.enums import AdminPermission
from ....core.exceptions import DomainException
from ....models.user import User
from ....schemas.booking import ManifestResponse
from ....services.admin_booking_service import AdminBookingService

router = APIRouter(tags=["admin-manifests-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.get("", response_model=ManifestResponse)
def get_manifest(
    tour_id: Optional[str] = Query(None, alias="tourId"),
    date: Optional[str] = Query(None),
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    admin: User = Depends(require_admin(AdminPermission.MANAGE_BOOKINGS.value)),
    service: AdminBookingService = Depends(get_admin_booking_service),
) -> Dict[str, Any]:
    tenant_id = scope_admin_tenant(admin, tenant_id)
    try:
        return service.get_manifest(tour_id, date, tenant_id)
    except DomainException as e:
        handle_domain_exception(e)
