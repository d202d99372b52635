# backend/tourhub/services/checkout_service.py
"""
Checkout Service for Tourhub

Turns a cart into bookings:

1. ``price_cart`` prices every item from tour data (option price, add-ons
   from the tour, discount code) so client totals are never trusted.
2. ``create_payment_intent`` opens a Stripe PaymentIntent for card
   payments, carrying a compact copy of the cart in its metadata so the
   webhook can create bookings if the browser never comes back.
3. ``checkout`` verifies the payment (or issues a bank transfer id) and
   creates one booking per cart item.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
import json
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session
import stripe

from ..core.booking_status import BookingStatus
from ..core.config import settings
from ..core.constants import STRIPE_METADATA_CHUNK
from ..core.enums import BookingSource, PaymentMethod
from ..core.exceptions import (
    NotFoundException,
    PaymentVerificationException,
    ServiceException,
    ValidationException,
)
from ..models.booking import Booking
from ..models.tour import Tour
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.checkout import CartItem, CheckoutRequest, CustomerInfo, PaymentIntentRequest
from ..utils.money import to_cents
from ..utils.time_utils import parse_date_only, utc_midnight
from .auth_service import AuthService
from .base import BaseService
from .booking_reference import random_base36
from .booking_service import BookingService
from .discount_service import DiscountService
from .pricing import CartPricing, base_price, item_subtotal, item_total, price_cart, prorate_discount
from .tenant_service import TenantService

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
TOUR_UNAVAILABLE = "One or more tours in your cart are no longer available"
METADATA_CART_KEYS = ("cart_data", "cart_data_2")


@dataclass
class PricedItem:
    """A cart item resolved against its tour."""

    tour: Tour
    day: date
    time: str
    adults: int
    children: int
    infants: int
    base: float
    option: Optional[Dict[str, Any]]
    add_ons: List[Dict[str, Any]] = field(default_factory=list)
    subtotal: float = 0.0

    @property
    def guests(self) -> int:
        return self.adults + self.children + self.infants

    def selected_option_snapshot(self) -> Optional[Dict[str, Any]]:
        if not self.option:
            return None
        return {
            "id": self.option.get("id") or self.option.get("type"),
            "title": self.option.get("label") or self.option.get("type"),
            "price": self.base,
        }

    def add_on_quantities(self) -> Dict[str, int]:
        return {add_on["id"]: add_on["quantity"] for add_on in self.add_ons}

    def add_on_details(self) -> Dict[str, Dict[str, Any]]:
        return {
            add_on["id"]: {
                "id": add_on["id"],
                "title": add_on["title"],
                "price": add_on["price"],
                "category": "add-on",
                "perGuest": add_on["per_guest"],
            }
            for add_on in self.add_ons
        }

    def compact(self) -> Dict[str, Any]:
        """Short-key form stored in Stripe metadata."""
        option = self.selected_option_snapshot() or {}
        payload: Dict[str, Any] = {
            "t": self.tour.id,
            "d": self.day.isoformat(),
            "tm": self.time,
            "a": self.adults,
            "c": self.children,
            "n": self.infants,
            "bp": self.base,
        }
        if option:
            payload["bo"] = option["id"]
            payload["bot"] = option["title"]
        if self.add_ons:
            payload["ao"] = [
                {"id": a["id"], "q": a["quantity"], "p": a["price"], "pg": a["per_guest"], "n": a["title"]}
                for a in self.add_ons
            ]
        return payload


def validate_customer(customer: CustomerInfo) -> None:
    if not (customer.first_name.strip() and customer.last_name.strip() and customer.email.strip()):
        raise ValidationException("Customer information is incomplete", code="INCOMPLETE_CUSTOMER")
    if not EMAIL_RE.match(customer.email.strip()):
        raise ValidationException("Invalid email address", code="INVALID_EMAIL")


def split_metadata(payload: str, keys: Sequence[str] = METADATA_CART_KEYS) -> Dict[str, str]:
    """Spread a JSON string over metadata keys, one chunk per key."""
    chunks = [payload[i : i + STRIPE_METADATA_CHUNK] for i in range(0, len(payload), STRIPE_METADATA_CHUNK)]
    if len(chunks) > len(keys):
        raise ValidationException(
            "Cart is too large to pay by card in one payment", code="CART_TOO_LARGE"
        )
    return {key: chunk for key, chunk in zip(keys, chunks)}


def join_metadata(metadata: Dict[str, Any], keys: Sequence[str] = METADATA_CART_KEYS) -> str:
    return "".join(str(metadata.get(key) or "") for key in keys)


def bank_payment_id(now: Optional[datetime] = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return f"BANK-{int(moment.timestamp() * 1000)}-{random_base36(6)}"


def configure_stripe() -> None:
    if not settings.stripe_configured:
        raise ServiceException("Stripe service not configured. Please check STRIPE_SECRET_KEY.")
    stripe.api_key = settings.stripe_secret_key.get_secret_value()
    stripe.max_network_retries = 1


class CheckoutService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.tour_repository = RepositoryFactory.create_tour_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.discount_service = DiscountService(db)

    # Pricing

    def _resolve_add_ons(self, tour: Tour, selected: Dict[str, int]) -> List[Dict[str, Any]]:
        catalogue = {str(a.get("id")): a for a in (tour.add_ons or []) if a.get("id")}
        resolved = []
        for add_on_id, quantity in (selected or {}).items():
            add_on = catalogue.get(str(add_on_id))
            if add_on is None or not quantity or quantity <= 0:
                continue
            resolved.append(
                {
                    "id": str(add_on_id),
                    "title": add_on.get("name") or add_on.get("title") or "",
                    "price": float(add_on.get("price") or 0),
                    "per_guest": bool(add_on.get("perGuest", add_on.get("per_guest", False))),
                    "quantity": int(quantity),
                }
            )
        return resolved

    def _price_item(self, item: CartItem, tour: Tour) -> PricedItem:
        day = parse_date_only(item.selected_date)
        if day is None:
            raise ValidationException("Invalid tour date in cart", code="INVALID_DATE")

        option = None
        if item.selected_booking_option is not None:
            option = tour.get_option(item.selected_booking_option.id or item.selected_booking_option.type)
        base = base_price(option.get("price") if option else None, tour.discount_price, tour.price)

        priced = PricedItem(
            tour=tour,
            day=day,
            time=item.selected_time or "10:00",
            adults=item.quantity,
            children=item.child_quantity,
            infants=item.infant_quantity,
            base=base,
            option=option,
            add_ons=self._resolve_add_ons(tour, item.selected_add_ons),
        )
        if priced.guests < 1:
            raise ValidationException("At least 1 participant is required.", code="NO_GUESTS")
        priced.subtotal = item_subtotal(base, priced.adults, priced.children, priced.add_ons)
        return priced

    @BaseService.measure_operation("price_cart")
    def price_cart(
        self, tenant_id: str, cart: Sequence[CartItem], discount_code: Optional[str] = None
    ) -> Tuple[List[PricedItem], CartPricing]:
        if not cart:
            raise ValidationException("Missing required booking information", code="EMPTY_CART")

        tours = self.tour_repository.get_many([item.tour_id for item in cart])
        items = []
        for item in cart:
            tour = tours.get(item.tour_id)
            if tour is None:
                raise NotFoundException(TOUR_UNAVAILABLE, code="TOUR_UNAVAILABLE")
            items.append(self._price_item(item, tour))

        subtotal = sum(priced.subtotal for priced in items)
        discount = self.discount_service.discount_amount(tenant_id, discount_code, subtotal)
        currency = (settings.stripe_currency or "usd").upper()
        return items, price_cart([priced.subtotal for priced in items], discount, currency)

    # Stripe

    @BaseService.measure_operation("create_payment_intent")
    def create_payment_intent(self, tenant_id: str, request: PaymentIntentRequest) -> Dict[str, Any]:
        validate_customer(request.customer)
        items, pricing = self.price_cart(tenant_id, request.cart, request.discount_code)
        if pricing.total <= 0:
            raise ValidationException("Invalid payment amount", code="INVALID_AMOUNT")

        customer = request.customer
        metadata: Dict[str, str] = {
            "customer_first_name": customer.first_name,
            "customer_last_name": customer.last_name,
            "customer_email": customer.email.strip().lower(),
            "customer_phone": customer.phone or "",
            "hotel_pickup_details": customer.hotel_pickup_details or "",
            "hotel_pickup_location": json.dumps(customer.hotel_pickup_location)
            if customer.hotel_pickup_location
            else "",
            "special_requests": (customer.special_requests or "")[:STRIPE_METADATA_CHUNK],
            "tenant_id": tenant_id,
            "discount_code": request.discount_code.strip().upper() if request.discount_code else "none",
            "pricing_subtotal": str(pricing.subtotal),
            "pricing_service_fee": str(pricing.service_fee),
            "pricing_tax": str(pricing.tax),
            "pricing_discount": str(pricing.discount),
            "pricing_total": str(pricing.total),
            "pricing_currency": pricing.currency,
            "has_booking_data": "true",
        }
        cart_json = json.dumps([priced.compact() for priced in items], separators=(",", ":"))
        metadata.update(split_metadata(cart_json))

        configure_stripe()
        try:
            intent = stripe.PaymentIntent.create(
                amount=to_cents(pricing.total),
                currency=pricing.currency.lower(),
                automatic_payment_methods={"enabled": True},
                description=f"Booking for {len(items)} tour{'s' if len(items) > 1 else ''}",
                receipt_email=metadata["customer_email"],
                metadata=metadata,
            )
        except stripe.StripeError as e:
            prometheus_metrics.inc_checkout_failure("stripe_create_intent")
            self.logger.error("Failed to create payment intent: %s", e)
            raise ServiceException(f"Failed to create payment intent: {e}")

        self.log_operation("create_payment_intent", payment_intent_id=intent.id, amount=pricing.total)
        return {
            "clientSecret": intent.client_secret,
            "paymentIntentId": intent.id,
            "pricing": pricing.to_dict(),
        }

    def verify_card_payment(self, payment_intent_id: Optional[str], pricing: CartPricing) -> str:
        if not payment_intent_id:
            raise PaymentVerificationException(
                "Payment has not been completed. Please complete the payment and try again."
            )

        configure_stripe()
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            self.logger.error("Failed to retrieve payment intent %s: %s", payment_intent_id, e)
            raise PaymentVerificationException(
                "Payment could not be verified. Please try again.", details={"payment_intent_id": payment_intent_id}
            )

        if intent.status != "succeeded":
            raise PaymentVerificationException(
                "Payment has not been completed. Please complete the payment and try again.",
                details={"status": intent.status},
            )
        expected = to_cents(pricing.total)
        if intent.amount != expected:
            self.logger.warning(
                "Payment amount mismatch for %s: expected %s, got %s", intent.id, expected, intent.amount
            )
            raise PaymentVerificationException(
                "Payment amount mismatch. Please contact support.",
                details={"expected": expected, "received": intent.amount},
            )
        return intent.id

    # Bookings

    def build_booking_values(
        self,
        priced: PricedItem,
        *,
        tenant_id: str,
        user: User,
        payment_id: str,
        payment_method: str,
        status: str,
        total_price: float,
        currency: str,
        customer: Dict[str, Any],
        discount_code: Optional[str] = None,
        discount_share: float = 0.0,
    ) -> Dict[str, Any]:
        return {
            "tenant_id": tenant_id,
            "tour_id": priced.tour.id,
            "user_id": user.id,
            "source": BookingSource.ONLINE.value,
            "customer_phone": customer.get("phone") or None,
            "customer_country": customer.get("country") or None,
            "date": utc_midnight(priced.day),
            "date_string": priced.day.isoformat(),
            "time": priced.time,
            "guests": priced.guests,
            "adult_guests": priced.adults,
            "child_guests": priced.children,
            "infant_guests": priced.infants,
            "total_price": total_price,
            "currency": currency.upper(),
            "status": status,
            "payment_id": payment_id,
            "payment_method": payment_method,
            "special_requests": customer.get("special_requests") or None,
            "emergency_contact": customer.get("emergency_contact") or None,
            "hotel_pickup_details": customer.get("hotel_pickup_details") or None,
            "hotel_pickup_location": customer.get("hotel_pickup_location") or None,
            "discount_code": discount_code.strip().upper() if discount_code else None,
            "discount_amount": discount_share if discount_share > 0 else None,
            "selected_booking_option": priced.selected_option_snapshot(),
            "selected_add_ons": priced.add_on_quantities(),
            "selected_add_on_details": priced.add_on_details(),
        }

    @BaseService.measure_operation("checkout")
    def checkout(self, tenant_id: str, request: CheckoutRequest, user: Optional[User] = None) -> Dict[str, Any]:
        validate_customer(request.customer)
        items, pricing = self.price_cart(tenant_id, request.cart, request.discount_code)

        is_bank = request.payment_method == PaymentMethod.BANK.value
        if is_bank:
            payment_id = bank_payment_id()
            status = BookingStatus.PENDING.value
        else:
            details = request.payment_details
            try:
                payment_id = self.verify_card_payment(details.payment_intent_id if details else None, pricing)
            except PaymentVerificationException:
                prometheus_metrics.inc_checkout_failure("payment_verification")
                raise
            status = BookingStatus.CONFIRMED.value

        customer = request.customer
        shares = prorate_discount([priced.subtotal for priced in items], pricing.discount)
        customer_fields = customer.model_dump()
        created: List[Booking] = []

        with self.transaction():
            guest_account = user is None
            if user is None:
                user = AuthService(self.db).find_or_create_customer(
                    customer.email, customer.first_name, customer.last_name, customer.phone
                )
            if request.discount_code and pricing.discount > 0:
                self.discount_service.increment_usage(tenant_id, request.discount_code)

            tenant_name = TenantService(self.db).get_tenant_name(tenant_id)
            booking_service = BookingService(self.db)
            for priced, share in zip(items, shares):
                values = self.build_booking_values(
                    priced,
                    tenant_id=tenant_id,
                    user=user,
                    payment_id=payment_id,
                    payment_method=request.payment_method,
                    status=status,
                    total_price=item_total(priced.subtotal, share),
                    currency=pricing.currency,
                    customer=customer_fields,
                    discount_code=request.discount_code if pricing.discount > 0 else None,
                    discount_share=share,
                )
                values["booking_reference"] = booking_service.new_reference(tenant_id, tenant_name)
                created.append(self.booking_repository.create(**values))

        prometheus_metrics.inc_bookings_created(tenant_id, BookingSource.ONLINE.value, len(created))
        self.log_operation(
            "checkout", tenant_id=tenant_id, payment_id=payment_id, bookings=len(created), bank=is_bank
        )

        references = [booking.booking_reference for booking in created]
        millis = int(datetime.now(timezone.utc).timestamp() * 1000)
        return {
            "success": True,
            "bookingId": references[0] if len(created) == 1 else f"MULTI-{millis}",
            "bookingReferences": references,
            "bookings": [booking.id for booking in created],
            "paymentId": payment_id,
            "pricing": pricing.to_dict(),
            "guestAccount": guest_account,
        }
