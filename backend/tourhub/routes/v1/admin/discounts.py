# backend/tourhub/routes/v1/admin/discounts.py
"""
Admin discount (coupon) routes - API v1

Requires manageDiscounts.

Endpoints:
    GET /?tenantId       → Coupons
    POST /               → Create a coupon
    PUT /{discount_id}   → Update a coupon
    DELETE /{discount_id} → Delete a coupon
"""

from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, Query, status

from ....api.dependencies.auth import check_tenant_access, require_admin, scope_admin_tenant
from ....api.dependencies.services import get_discount_service
from ....core.enums import AdminPermission
from ....core.exceptions import DomainException
from ....models.user import User
from ....schemas.base import MessageResponse
from ....schemas.discount import DiscountCreate, DiscountResponse, DiscountUpdate
from ....services.discount_service import DiscountService

router = APIRouter(tags=["admin-discounts-v1"])

manage_discounts = require_admin(AdminPermission.MANAGE_DISCOUNTS.value)


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.get("", response_model=List[DiscountResponse])
def list_discounts(
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    admin: User = Depends(manage_discounts),
    service: DiscountService = Depends(get_discount_service),
) -> List[DiscountResponse]:
    tenant_id = scope_admin_tenant(admin, tenant_id)
    return [DiscountResponse.model_validate(discount) for discount in service.list_discounts(tenant_id)]


@router.post("", response_model=DiscountResponse, status_code=status.HTTP_201_CREATED)
def create_discount(
    payload: DiscountCreate,
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    admin: User = Depends(manage_discounts),
    service: DiscountService = Depends(get_discount_service),
) -> DiscountResponse:
    """The tenant comes from the body, else the query string; "all" is rejected."""
    target = payload.tenant_id or tenant_id
    check_tenant_access(admin, target)
    try:
        discount = service.create_discount(target, payload.model_dump(exclude={"tenant_id"}))
    except DomainException as e:
        handle_domain_exception(e)
    return DiscountResponse.model_validate(discount)


@router.put("/{discount_id}", response_model=DiscountResponse)
def update_discount(
    discount_id: str,
    payload: DiscountUpdate,
    admin: User = Depends(manage_discounts),
    service: DiscountService = Depends(get_discount_service),
) -> DiscountResponse:
    try:
        discount = service.update_discount(discount_id, payload.model_dump(exclude_unset=True))
    except DomainException as e:
        handle_domain_exception(e)
    return DiscountResponse.model_validate(discount)


@router.delete("/{discount_id}", response_model=MessageResponse)
def delete_discount(
    discount_id: str,
    admin: User = Depends(manage_discounts),
    service: DiscountService = Depends(get_discount_service),
) -> MessageResponse:
    try:
        service.delete_discount(discount_id)
    except DomainException as e:
        handle_domain_exception(e)
    return MessageResponse(message="Discount deleted")
