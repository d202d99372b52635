# backend/tourhub/routes/v1/admin/special_offers.py
"""
Admin special-offer routes - API v1

Requires manageDiscounts.

Endpoints:
    GET /?tenantId&isActive&type → Offers, highest priority first
    POST /                       → Create an offer
    PUT /{offer_id}              → Update an offer
    DELETE /{offer_id}           → Delete an offer
"""

from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, Query, status

from ....api.dependencies.auth import check_tenant_access, require_admin, scope_admin_tenant
from ....api.dependencies.services import get_offer_service
from ....core.enums import AdminPermission
from ....core.exceptions import DomainException
from ....models.user import User
from ....schemas.base import MessageResponse
from ....schemas.special_offer import SpecialOfferCreate, SpecialOfferResponse, SpecialOfferUpdate
from ....services.offers.offer_service import OfferService

router = APIRouter(tags=["admin-special-offers-v1"])

manage_discounts = require_admin(AdminPermission.MANAGE_DISCOUNTS.value)


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.get("", response_model=List[SpecialOfferResponse])
def list_offers(
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    offer_type: Optional[str] = Query(None, alias="type"),
    admin: User = Depends(manage_discounts),
    service: OfferService = Depends(get_offer_service),
) -> List[SpecialOfferResponse]:
    tenant_id = scope_admin_tenant(admin, tenant_id)
    offers = service.list_offers(tenant_id, is_active=is_active, offer_type=offer_type)
    return [SpecialOfferResponse.model_validate(offer) for offer in offers]


@router.post("", response_model=SpecialOfferResponse, status_code=status.HTTP_201_CREATED)
def create_offer(
    payload: SpecialOfferCreate,
    admin: User = Depends(manage_discounts),
    service: OfferService = Depends(get_offer_service),
) -> SpecialOfferResponse:
    """Codes are stored upper-cased and must be unique per tenant (409)."""
    check_tenant_access(admin, payload.tenant_id)
    try:
        offer = service.create_offer(payload.model_dump(), created_by_id=admin.id)
    except DomainException as e:
        handle_domain_exception(e)
    return SpecialOfferResponse.model_validate(offer)


@router.put("/{offer_id}", response_model=SpecialOfferResponse)
def update_offer(
    offer_id: str,
    payload: SpecialOfferUpdate,
    admin: User = Depends(manage_discounts),
    service: OfferService = Depends(get_offer_service),
) -> SpecialOfferResponse:
    try:
        offer = service.update_offer(offer_id, payload.model_dump(exclude_unset=True))
    except DomainException as e:
        handle_domain_exception(e)
    return SpecialOfferResponse.model_validate(offer)


@router.delete("/{offer_id}", response_model=MessageResponse)
def delete_offer(
    offer_id: str,
    admin: User = Depends(manage_discounts),
    service: OfferService = Depends(get_offer_service),
) -> MessageResponse:
    try:
        service.delete_offer(offer_id)
    except DomainException as e:
        handle_domain_exception(e)
    return MessageResponse(message="Offer deleted")
