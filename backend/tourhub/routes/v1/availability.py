# backend/tourhub/routes/v1/availability.py
"""
Availability routes - API v1

Endpoints:
    GET /{tour_id}?date=YYYY-MM-DD      → Stop-sale status of one day
    GET /{tour_id}?month=MM&year=YYYY   → Stop-sale calendar for a month
"""

import logging
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, Query, Request

from ...api.dependencies.services import get_availability_service
from ...core.exceptions import DomainException
from ...middleware.tenant import get_request_tenant_id
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.get("/{tour_id}")
def get_stop_sale_status(
    tour_id: str,
    request: Request,
    date: Optional[str] = Query(None),
    month: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    service: AvailabilityService = Depends(get_availability_service),
) -> Dict[str, Any]:
    """
    Per-option stop-sale status.

    Each day is "none", "partial" or "full" with the stopped option ids
    and their reasons; an all-options stop-sale is keyed "all".
    """
    try:
        return service.get_stop_sale_status(
            tour_id,
            tenant_id=tenant_id or get_request_tenant_id(request),
            day=date,
            month=month,
            year=year,
        )
    except DomainException as e:
        handle_domain_exception(e)
