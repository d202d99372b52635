# backend/tourhub/routes/v1/checkout.py
"""
Checkout routes - API v1

Prices are always recomputed on the server from tour data; client
totals are never trusted.

Endpoints:
    POST /payment-intent → Create a Stripe PaymentIntent for the cart
    POST /               → Turn a paid (or bank-transfer) cart into bookings
"""

import logging
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, Request, status

from ...api.dependencies.auth import get_current_user_optional
from ...api.dependencies.services import get_checkout_service
from ...core.exceptions import DomainException
from ...middleware.tenant import get_request_tenant_id
from ...models.user import User
from ...schemas.checkout import CheckoutRequest, CheckoutResponse, PaymentIntentRequest, PaymentIntentResponse
from ...services.checkout_service import CheckoutService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["checkout-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.post("/payment-intent", response_model=PaymentIntentResponse)
def create_payment_intent(
    payload: PaymentIntentRequest,
    request: Request,
    service: CheckoutService = Depends(get_checkout_service),
) -> Dict[str, Any]:
    try:
        return service.create_payment_intent(get_request_tenant_id(request), payload)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
def checkout(
    payload: CheckoutRequest,
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: CheckoutService = Depends(get_checkout_service),
) -> Dict[str, Any]:
    """
    Create one booking per cart item.

    Card payments must reference a succeeded PaymentIntent whose amount
    matches the recomputed total (402 otherwise). Guests get an account
    keyed by their email.
    """
    try:
        return service.checkout(get_request_tenant_id(request), payload, user=current_user)
    except DomainException as e:
        logger.info("Checkout rejected: %s", e.message)
        handle_domain_exception(e)
