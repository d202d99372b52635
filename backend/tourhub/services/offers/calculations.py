"""
Special offer rules.

Pure functions over offer objects (``SpecialOffer`` rows or anything with
the same attributes). Nothing here touches the database, so the storefront,
checkout and admin manual bookings all evaluate offers identically.

    result = calculate_discounted_price(120.0, offer, travel_date=when, group_size=3)
    best = get_best_offer(offers, 120.0, travel_date=when, group_size=3)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from ...core.enums import OfferType
from ...utils.money import format_amount, round_half_up, round_money
from ...utils.time_utils import ensure_utc

SECONDS_PER_DAY = 24 * 60 * 60

BADGE_COLORS: Dict[str, Dict[str, str]] = {
    OfferType.PERCENTAGE.value: {"bg": "bg-rose-500", "text": "text-white"},
    OfferType.FIXED.value: {"bg": "bg-amber-500", "text": "text-white"},
    OfferType.EARLY_BIRD.value: {"bg": "bg-emerald-500", "text": "text-white"},
    OfferType.LAST_MINUTE.value: {"bg": "bg-red-600", "text": "text-white"},
    OfferType.GROUP.value: {"bg": "bg-blue-500", "text": "text-white"},
    OfferType.BUNDLE.value: {"bg": "bg-purple-500", "text": "text-white"},
    OfferType.PROMO_CODE.value: {"bg": "bg-slate-700", "text": "text-white"},
}
DEFAULT_BADGE_COLOR = {"bg": "bg-amber-500", "text": "text-white"}

DEFAULT_MIN_DAYS_IN_ADVANCE = 7
DEFAULT_MAX_DAYS_BEFORE_TOUR = 2
DEFAULT_MIN_GROUP_SIZE = 2


@dataclass
class DiscountResult:
    original_price: float
    discounted_price: float
    discount_amount: float
    discount_percentage: int
    offer: Any
    is_applicable: bool = False
    reason: Optional[str] = None

    def to_dict(self, offer_payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "originalPrice": self.original_price,
            "discountedPrice": self.discounted_price,
            "discountAmount": self.discount_amount,
            "discountPercentage": self.discount_percentage,
            "isApplicable": self.is_applicable,
        }
        if offer_payload is not None:
            payload["offer"] = offer_payload
        if self.reason is not None:
            payload["reason"] = self.reason
        return payload


def _now(now: Optional[datetime]) -> datetime:
    return ensure_utc(now) if now is not None else datetime.now(timezone.utc)


def days_between(a: datetime, b: datetime) -> int:
    """Whole days between two instants, rounded to the nearest day."""
    seconds = abs((ensure_utc(a) - ensure_utc(b)).total_seconds())
    return round_half_up(seconds / SECONDS_PER_DAY)


def is_offer_valid(offer: Any, now: Optional[datetime] = None) -> bool:
    """Active, inside the booking window and under the usage limit."""
    moment = _now(now)
    if not offer.is_active:
        return False
    if moment < ensure_utc(offer.start_date) or moment > ensure_utc(offer.end_date):
        return False
    if offer.usage_limit and (offer.used_count or 0) >= offer.usage_limit:
        return False
    return True


def is_offer_applicable_to_tour(offer: Any, tour_id: str, option_type: Optional[str] = None) -> bool:
    if tour_id in (offer.excluded_tours or []):
        return False

    applicable = offer.applicable_tours or []
    if not applicable:
        return True
    if tour_id not in applicable:
        return False

    selections = offer.tour_option_selections or []
    if option_type and selections:
        selection = next((s for s in selections if s.get("tourId") == tour_id), None)
        if selection:
            if selection.get("allOptions", True):
                return True
            selected = selection.get("selectedOptions") or []
            if selected:
                return option_type in selected
    return True


def is_offer_applicable_by_travel_date(offer: Any, travel_date: Optional[datetime]) -> bool:
    if travel_date is None:
        return True
    travel = ensure_utc(travel_date)
    if offer.travel_start_date and travel < ensure_utc(offer.travel_start_date):
        return False
    if offer.travel_end_date and travel > ensure_utc(offer.travel_end_date):
        return False
    return True


def calculate_discounted_price(
    original_price: float,
    offer: Any,
    travel_date: Optional[datetime] = None,
    group_size: int = 1,
    booking_date: Optional[datetime] = None,
) -> DiscountResult:
    """
    Evaluate one offer against a price.

    The first failing check wins and the result carries its reason; the
    price is then returned unchanged.
    """
    original = float(original_price)
    booked_at = _now(booking_date)
    result = DiscountResult(
        original_price=original,
        discounted_price=original,
        discount_amount=0.0,
        discount_percentage=0,
        offer=offer,
    )

    if not is_offer_valid(offer, booked_at):
        result.reason = "Offer is not currently active"
        return result

    if not is_offer_applicable_by_travel_date(offer, travel_date):
        result.reason = "Offer not valid for selected travel date"
        return result

    min_value = offer.min_booking_value
    if min_value and original < float(min_value):
        result.reason = f"Minimum booking value of ${format_amount(min_value)} required"
        return result

    value = float(offer.discount_value or 0)
    percentage_amount = original * (value / 100)
    offer_type = offer.type

    if offer_type in (OfferType.PERCENTAGE.value, OfferType.BUNDLE.value):
        amount = percentage_amount
    elif offer_type == OfferType.FIXED.value:
        amount = value
    elif offer_type == OfferType.EARLY_BIRD.value:
        if travel_date is None:
            result.reason = "Travel date required for early bird discount"
            return result
        min_days = offer.min_days_in_advance or DEFAULT_MIN_DAYS_IN_ADVANCE
        if days_between(booked_at, travel_date) < min_days:
            result.reason = f"Book at least {min_days} days in advance to qualify"
            return result
        amount = percentage_amount
    elif offer_type == OfferType.LAST_MINUTE.value:
        if travel_date is None:
            result.reason = "Travel date required for last minute discount"
            return result
        max_days = offer.max_days_before_tour or DEFAULT_MAX_DAYS_BEFORE_TOUR
        days = days_between(booked_at, travel_date)
        if not 0 <= days <= max_days:
            result.reason = f"Only valid when booking within {max_days} days of tour"
            return result
        amount = percentage_amount
    elif offer_type == OfferType.GROUP.value:
        min_size = offer.min_group_size or DEFAULT_MIN_GROUP_SIZE
        if group_size < min_size:
            result.reason = f"Minimum group size of {min_size} required"
            return result
        amount = percentage_amount
    elif offer_type == OfferType.PROMO_CODE.value:
        amount = percentage_amount
        result.reason = "Enter promo code at checkout"
    else:
        result.reason = "Unknown offer type"
        return result

    result.is_applicable = True

    cap = offer.max_discount
    if cap and amount > float(cap):
        amount = float(cap)
    if amount > original:
        amount = original

    result.discount_amount = round_money(amount)
    result.discounted_price = round_money(original - amount)
    result.discount_percentage = round_half_up(amount / original * 100) if original else 0
    return result


def get_best_offer(
    offers: Iterable[Any],
    original_price: float,
    travel_date: Optional[datetime] = None,
    group_size: int = 1,
    now: Optional[datetime] = None,
) -> Optional[DiscountResult]:
    """
    Largest applicable discount, trying offers by priority.

    Promo codes need the customer to enter them, so they never win here.
    Ties keep the earlier (higher priority) offer.
    """
    best: Optional[DiscountResult] = None
    ordered = sorted(offers or [], key=lambda o: o.priority or 0, reverse=True)
    for offer in ordered:
        if offer.type == OfferType.PROMO_CODE.value:
            continue
        result = calculate_discounted_price(original_price, offer, travel_date, group_size, now)
        if result.is_applicable and (best is None or result.discount_amount > best.discount_amount):
            best = result
    return best


def get_offer_display_text(offer: Any) -> str:
    value = format_amount(offer.discount_value or 0)
    labels = {
        OfferType.PERCENTAGE.value: f"{value}% OFF",
        OfferType.FIXED.value: f"${value} OFF",
        OfferType.EARLY_BIRD.value: f"EARLY BIRD {value}% OFF",
        OfferType.LAST_MINUTE.value: f"LAST MINUTE {value}% OFF",
        OfferType.GROUP.value: f"GROUP {value}% OFF",
        OfferType.BUNDLE.value: f"BUNDLE {value}% OFF",
        OfferType.PROMO_CODE.value: "USE CODE",
    }
    return labels.get(offer.type, "SPECIAL OFFER")


def get_offer_badge_color(offer_type: Optional[str]) -> Dict[str, str]:
    return dict(BADGE_COLORS.get(offer_type or "", DEFAULT_BADGE_COLOR))


def format_offer_time_remaining(end_date: datetime, now: Optional[datetime] = None) -> str:
    diff = (ensure_utc(end_date) - _now(now)).total_seconds()
    if diff <= 0:
        return "Expired"

    days = int(diff // SECONDS_PER_DAY)
    hours = int((diff % SECONDS_PER_DAY) // 3600)
    if days > 30:
        return f"{days // 30} months left"
    if days > 0:
        return f"{days} day{'s' if days > 1 else ''} left"
    if hours > 0:
        return f"{hours} hour{'s' if hours > 1 else ''} left"
    return "Ends soon"


def should_show_urgency(end_date: datetime, now: Optional[datetime] = None) -> bool:
    """True when the offer ends within the week."""
    diff = (ensure_utc(end_date) - _now(now)).total_seconds()
    return diff > 0 and diff // SECONDS_PER_DAY <= 7
