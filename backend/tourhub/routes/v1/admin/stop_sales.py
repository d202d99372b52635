# backend/tourhub/routes/v1/admin/stop_sales.py
"""
Admin stop-sale routes - API v1

Requires manageTours.

Endpoints (stop-sales):
    PUT /     → Stop selling options (or the whole tour) for a date range
    DELETE /  → Lift matching stop-sales

Endpoints (stop-sale logs, separate router):
    GET /?tourId&status&page&limit → Audit log, newest first
"""

import logging
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, Query, Request

from ....api.dependencies.auth import check_tenant_access, require_admin, scope_admin_tenant
from ....api.dependencies.services import get_stop_sale_service
from ....core.enums import AdminPermission
from ....core.exceptions import DomainException
from ....middleware.tenant import get_request_tenant_id
from ....models.user import User
from ....schemas.availability import (
    StopSaleDeleteResult,
    StopSaleLogPage,
    StopSaleRequest,
    StopSaleUpsertResult,
)
from ....services.stop_sale_service import StopSaleService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin-stop-sales-v1"])
logs_router = APIRouter(tags=["admin-stop-sales-v1"])

manage_tours = require_admin(AdminPermission.MANAGE_TOURS.value)


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.put("", response_model=StopSaleUpsertResult)
def apply_stop_sale(
    payload: StopSaleRequest,
    request: Request,
    admin: User = Depends(manage_tours),
    service: StopSaleService = Depends(get_stop_sale_service),
) -> Dict[str, int]:
    """
    Upsert one stop-sale per option id, or a single all-options row
    when ``optionIds`` is empty, and log each as active.
    """
    check_tenant_access(admin, payload.tenant_id)
    try:
        return service.apply(payload, admin, request_tenant=get_request_tenant_id(request))
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("", response_model=StopSaleDeleteResult)
def remove_stop_sale(
    payload: StopSaleRequest,
    request: Request,
    admin: User = Depends(manage_tours),
    service: StopSaleService = Depends(get_stop_sale_service),
) -> Dict[str, int]:
    check_tenant_access(admin, payload.tenant_id)
    try:
        return service.remove(payload, admin, request_tenant=get_request_tenant_id(request))
    except DomainException as e:
        handle_domain_exception(e)


@logs_router.get("", response_model=StopSaleLogPage)
def list_stop_sale_logs(
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    tour_id: Optional[str] = Query(None, alias="tourId"),
    log_status: Optional[str] = Query(None, alias="status"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    admin: User = Depends(manage_tours),
    service: StopSaleService = Depends(get_stop_sale_service),
) -> Dict[str, Any]:
    tenant_id = scope_admin_tenant(admin, tenant_id)
    return service.list_logs(tenant_id=tenant_id, tour_id=tour_id, status=log_status, page=page, limit=limit)
