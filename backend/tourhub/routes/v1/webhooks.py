# backend/tourhub/routes/v1/webhooks.py
"""
Webhook routes - API v1

Endpoints:
    POST /stripe → Stripe events (signature verified with the webhook secret)

Once the signature checks out the endpoint always answers 200, so Stripe
does not retry events we failed to process; failures are logged.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from starlette.concurrency import run_in_threadpool

from ...api.dependencies.services import get_stripe_webhook_service
from ...core.exceptions import DomainException, RepositoryException
from ...schemas.checkout import WebhookResponse
from ...services.stripe_webhook_service import StripeWebhookService, construct_event

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks-v1"])


@router.post("/stripe", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
    service: StripeWebhookService = Depends(get_stripe_webhook_service),
) -> WebhookResponse:
    payload = await request.body()
    try:
        event = construct_event(payload, stripe_signature)
    except DomainException as e:
        logger.warning("Rejected Stripe webhook: %s", e.message)
        raise e.to_http_exception()

    try:
        outcome = await run_in_threadpool(service.handle_event, event)
    except (DomainException, RepositoryException) as e:
        logger.error("Error processing Stripe event %s: %s", event.get("type"), e, exc_info=True)
        return WebhookResponse(received=True, outcome={"error": "processing_failed"})
    return WebhookResponse(received=True, outcome=outcome)
