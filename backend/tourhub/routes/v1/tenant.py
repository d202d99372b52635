# backend/tourhub/routes/v1/tenant.py
"""
Tenant routes - API v1

Endpoints:
    GET /current → Public configuration of the tenant resolved for this request
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from ...api.dependencies.services import get_tenant_service
from ...middleware.tenant import get_request_tenant_id
from ...services.tenant_service import TenantService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tenant-v1"])


@router.get("/current")
def get_current_tenant(
    request: Request,
    service: TenantService = Depends(get_tenant_service),
) -> Dict[str, Any]:
    """Branding, features and CSS variables for the storefront."""
    tenant_id = get_request_tenant_id(request)
    return service.get_current_config(tenant_id)
