# backend/tourhub/routes/v1/admin/dashboard.py
"""
Admin dashboard and reports routes - API v1

Both endpoints require viewReports. ``tenantId=all`` (or none) reports
across every tenant.

Endpoints:
    GET /dashboard → Headline counts and recent activity
    GET /reports   → Six months of revenue, top tours and KPIs
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ....api.dependencies.auth import require_admin, scope_admin_tenant
from ....api.dependencies.services import get_dashboard_service
from ....core.enums import AdminPermission
from ....models.user import User
from ....schemas.dashboard import DashboardResponse, ReportsResponse
from ....services.dashboard_service import DashboardService

router = APIRouter(tags=["admin-dashboard-v1"])

view_reports = require_admin(AdminPermission.VIEW_REPORTS.value)


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    admin: User = Depends(view_reports),
    service: DashboardService = Depends(get_dashboard_service),
) -> Dict[str, Any]:
    tenant_id = scope_admin_tenant(admin, tenant_id)
    return service.get_dashboard(tenant_id)


@router.get("/reports", response_model=ReportsResponse)
def get_reports(
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    admin: User = Depends(view_reports),
    service: DashboardService = Depends(get_dashboard_service),
) -> Dict[str, Any]:
    tenant_id = scope_admin_tenant(admin, tenant_id)
    return service.get_reports(tenant_id)
