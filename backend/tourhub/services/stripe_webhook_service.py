# backend/tourhub/services/stripe_webhook_service.py
"""
Stripe webhook processing.

The route verifies the signature and hands the parsed event here. Every
handler returns an outcome dict ({"created": ..., "reason": ...}) that is
echoed in the webhook response; Stripe only needs the 200.
"""

import json
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import stripe

from ..core.booking_status import BookingStatus
from ..core.config import settings
from ..core.enums import BookingSource, PaymentMethod
from ..core.exceptions import RepositoryException, ServiceException, ValidationException
from ..models.booking import Booking
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..utils.money import round_money
from ..utils.time_utils import parse_date_only
from .auth_service import AuthService
from .base import BaseService
from .booking_service import BookingService
from .checkout_service import CheckoutService, PricedItem, join_metadata
from .pricing import item_subtotal, item_total
from .tenant_service import TenantService


def _float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def construct_event(payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
    """
    Verify and parse a webhook payload.

    Raises ValidationException for a missing or bad signature.
    """
    if not signature:
        raise ValidationException("Missing stripe-signature header", code="MISSING_SIGNATURE")
    secret = settings.stripe_webhook_secret
    if not secret or not secret.get_secret_value():
        raise ServiceException("Webhook secret not configured")
    try:
        stripe.Webhook.construct_event(payload, signature, secret.get_secret_value())
    except ValueError:
        raise ValidationException("Invalid payload", code="INVALID_PAYLOAD")
    except stripe.SignatureVerificationError:
        raise ValidationException("Invalid signature", code="INVALID_SIGNATURE")
    # Signature checked; work with plain dicts from here on
    return json.loads(payload)


class StripeWebhookService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.tour_repository = RepositoryFactory.create_tour_repository(db)

    @BaseService.measure_operation("stripe_handle_webhook")
    def handle_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        event_type = event.get("type", "")
        obj = (event.get("data") or {}).get("object") or {}
        self.logger.info("Processing webhook event: %s", event_type)

        if event_type == "payment_intent.succeeded":
            outcome = self.process_successful_payment(obj)
        elif event_type == "charge.refunded":
            outcome = self.handle_refund(obj)
        elif event_type == "payment_intent.payment_failed":
            error = obj.get("last_payment_error") or {}
            self.logger.warning("Payment failed for %s: %s", obj.get("id"), error.get("message"))
            outcome = {"handled": False, "reason": "payment_failed"}
        else:
            self.logger.info("Unhandled webhook event type: %s", event_type)
            outcome = {"handled": False, "reason": "ignored"}

        prometheus_metrics.inc_webhook_event(event_type or "unknown", str(outcome.get("reason") or "ok"))
        return outcome

    def _confirm_existing(self, existing: List[Booking]) -> Dict[str, Any]:
        first = existing[0]
        if first.status != BookingStatus.PENDING.value:
            return {"created": False, "reason": "already_confirmed", "bookingId": first.id}

        with self.transaction():
            for booking in existing:
                if booking.status == BookingStatus.PENDING.value:
                    booking.status = BookingStatus.CONFIRMED.value
            self.booking_repository.flush()
        return {"created": False, "reason": "updated_to_confirmed", "bookingId": first.id}

    def _item_from_compact(self, raw: Dict[str, Any]) -> Optional[PricedItem]:
        tour = self.tour_repository.get_by_id(str(raw.get("t") or ""))
        if tour is None:
            self.logger.warning("Webhook cart references unknown tour %s", raw.get("t"))
            return None
        day = parse_date_only(raw.get("d"))
        if day is None:
            self.logger.warning("Webhook cart item for tour %s has no valid date", tour.id)
            return None

        option = None
        if raw.get("bo"):
            option = {"id": raw.get("bo"), "label": raw.get("bot") or raw.get("bo"), "price": raw.get("bp")}
        add_ons = [
            {
                "id": str(a.get("id")),
                "title": a.get("n") or "",
                "price": _float(a.get("p")),
                "per_guest": bool(a.get("pg")),
                "quantity": int(a.get("q") or 0),
            }
            for a in (raw.get("ao") or [])
            if a.get("id") and int(a.get("q") or 0) > 0
        ]
        priced = PricedItem(
            tour=tour,
            day=day,
            time=raw.get("tm") or "10:00",
            adults=int(raw.get("a", 1) or 0),
            children=int(raw.get("c") or 0),
            infants=int(raw.get("n") or 0),
            base=_float(raw.get("bp")),
            option=option,
            add_ons=add_ons,
        )
        priced.subtotal = item_subtotal(priced.base, priced.adults, priced.children, priced.add_ons)
        return priced

    @BaseService.measure_operation("process_successful_payment")
    def process_successful_payment(self, intent: Dict[str, Any]) -> Dict[str, Any]:
        """
        Confirm or create the bookings behind a succeeded PaymentIntent.

        Bookings created by /checkout are Pending (or already Confirmed);
        when the browser never reached /checkout, they are rebuilt from
        the cart copy in the intent metadata.
        """
        metadata = intent.get("metadata") or {}
        payment_id = intent.get("id")
        if metadata.get("has_booking_data") != "true":
            return {"created": False, "reason": "no_booking_data"}

        existing = self.booking_repository.find_by_payment_id(payment_id)
        if existing:
            return self._confirm_existing(existing)

        email = (metadata.get("customer_email") or "").strip().lower()
        first_name = metadata.get("customer_first_name") or ""
        last_name = metadata.get("customer_last_name") or ""
        if not (email and first_name):
            return {"created": False, "reason": "missing_customer_data"}

        try:
            raw_items = json.loads(join_metadata(metadata))
        except ValueError:
            self.logger.error("Invalid cart data in payment intent %s", payment_id)
            return {"created": False, "reason": "invalid_cart_data"}

        items = [priced for priced in (self._item_from_compact(raw) for raw in raw_items) if priced]

        pricing_subtotal = _float(metadata.get("pricing_subtotal"))
        discount = _float(metadata.get("pricing_discount"))
        currency = (metadata.get("pricing_currency") or intent.get("currency") or "USD").upper()
        discount_code = metadata.get("discount_code")
        if discount_code == "none":
            discount_code = None

        pickup_location = None
        if metadata.get("hotel_pickup_location"):
            try:
                pickup_location = json.loads(metadata["hotel_pickup_location"])
            except ValueError:
                pickup_location = None
        customer = {
            "phone": metadata.get("customer_phone"),
            "special_requests": metadata.get("special_requests"),
            "hotel_pickup_details": metadata.get("hotel_pickup_details"),
            "hotel_pickup_location": pickup_location,
        }

        checkout = CheckoutService(self.db)
        created: List[Booking] = []
        try:
            with self.transaction():
                user = AuthService(self.db).find_or_create_customer(
                    email, first_name, last_name, metadata.get("customer_phone") or None
                )
                tenant_service = TenantService(self.db)
                booking_service = BookingService(self.db)
                for priced in items:
                    tenant_id = priced.tour.tenant_id
                    if len(items) == 1:
                        share = round_money(discount)
                    elif pricing_subtotal > 0:
                        share = round_money(priced.subtotal / pricing_subtotal * discount)
                    else:
                        share = 0.0
                    values = checkout.build_booking_values(
                        priced,
                        tenant_id=tenant_id,
                        user=user,
                        payment_id=payment_id,
                        payment_method=PaymentMethod.CARD.value,
                        status=BookingStatus.CONFIRMED.value,
                        total_price=item_total(priced.subtotal, share),
                        currency=currency,
                        customer=customer,
                        discount_code=discount_code,
                        discount_share=share,
                    )
                    values["booking_reference"] = booking_service.new_reference(
                        tenant_id, tenant_service.get_tenant_name(tenant_id)
                    )
                    created.append(self.booking_repository.create(**values))
        except RepositoryException as exc:
            if not isinstance(exc.__cause__, IntegrityError):
                raise
            # /checkout committed the same payment between our lookup and insert
            self.logger.info("Bookings for %s were created concurrently", payment_id)
            return {"created": False, "reason": "already_exists_concurrent"}

        if not created:
            return {"created": False, "reason": "no_bookings_created"}

        prometheus_metrics.inc_bookings_created(created[0].tenant_id, BookingSource.ONLINE.value, len(created))
        self.log_operation("webhook_bookings_created", payment_id=payment_id, count=len(created))
        return {"created": True, "count": len(created), "bookingIds": [booking.id for booking in created]}

    @BaseService.measure_operation("handle_refund")
    def handle_refund(self, charge: Dict[str, Any]) -> Dict[str, Any]:
        payment_intent_id = charge.get("payment_intent")
        if not payment_intent_id:
            return {"updated": 0, "reason": "no_payment_intent"}

        bookings = self.booking_repository.find_by_payment_id(payment_intent_id)
        if not bookings:
            return {"updated": 0, "reason": "no_bookings"}

        amount = int(charge.get("amount") or 0)
        refunded = int(charge.get("amount_refunded") or 0)
        status = (
            BookingStatus.REFUNDED.value if refunded >= amount else BookingStatus.PARTIAL_REFUNDED.value
        )
        with self.transaction():
            for booking in bookings:
                booking.status = status
                if status == BookingStatus.REFUNDED.value:
                    booking.refund_amount = booking.total_price
            self.booking_repository.flush()

        self.log_operation("handle_refund", payment_intent_id=payment_intent_id, status=status)
        return {"updated": len(bookings), "reason": status}
