# backend/tourhub/routes/v1/discounts.py
"""
Discount routes - API v1

Endpoints:
    POST /verify → Check a coupon code before checkout
"""

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, Request

from ...api.dependencies.services import get_discount_service
from ...core.exceptions import DomainException
from ...middleware.tenant import get_request_tenant_id
from ...schemas.discount import DiscountVerifyRequest, DiscountVerifyResponse
from ...services.discount_service import DiscountService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["discounts-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.post("/verify", response_model=DiscountVerifyResponse)
def verify_discount(
    payload: DiscountVerifyRequest,
    request: Request,
    service: DiscountService = Depends(get_discount_service),
) -> DiscountVerifyResponse:
    """
    Validate a coupon for the tenant in the body, or the request tenant.

    404 for an unknown code; 400 when inactive, expired or used up.
    """
    tenant_id = payload.tenant_id or get_request_tenant_id(request)
    try:
        return DiscountVerifyResponse.model_validate(service.verify_code(tenant_id, payload.code))
    except DomainException as e:
        handle_domain_exception(e)
