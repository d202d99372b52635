"""
Server-side price calculation.

Everything the customer pays is derived here from tour data; totals sent
by the client are never trusted.

    base = base_price(option_price, tour.discount_price, tour.price)
    subtotal = item_subtotal(base, adults=2, children=1, add_ons=[...])
    pricing = price_cart([subtotal], discount=10.0, currency="USD")

Children pay ``child_price_ratio`` of the adult price; infants are free.
Service fee and tax are charged on the (rounded) subtotal; a cart-level
discount is split across items in proportion to their subtotals.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..core.config import settings
from ..core.constants import REFUND_POLICY
from ..utils.money import round_money
from ..utils.time_utils import ensure_utc

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class CartPricing:
    subtotal: float
    service_fee: float
    tax: float
    discount: float
    total: float
    currency: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subtotal": self.subtotal,
            "serviceFee": self.service_fee,
            "tax": self.tax,
            "discount": self.discount,
            "total": self.total,
            "currency": self.currency,
        }


def base_price(option_price: Any, discount_price: Any, price: Any) -> float:
    """First positive value of option price, tour discount price, tour price."""
    for candidate in (option_price, discount_price, price):
        try:
            value = float(candidate or 0)
        except (TypeError, ValueError):
            continue
        if value > 0:
            return value
    return 0.0


def add_ons_total(add_ons: Iterable[Mapping[str, Any]], adults: int, children: int) -> float:
    """
    Sum of selected add-ons.

    Each entry carries ``price``, ``per_guest`` and ``quantity``; per-guest
    add-ons are charged for every paying guest.
    """
    total = 0.0
    paying_guests = (adults or 0) + (children or 0)
    for add_on in add_ons:
        quantity = add_on.get("quantity") or 0
        if quantity <= 0:
            continue
        multiplier = paying_guests if add_on.get("per_guest") else 1
        total += float(add_on.get("price") or 0) * multiplier * quantity
    return total


def item_subtotal(
    base: float,
    adults: int,
    children: int,
    add_ons: Iterable[Mapping[str, Any]] = (),
    child_ratio: Optional[float] = None,
) -> float:
    ratio = settings.child_price_ratio if child_ratio is None else child_ratio
    tickets = base * (adults or 0) + base * ratio * (children or 0)
    return round_money(tickets + add_ons_total(add_ons, adults, children))


def service_fee_and_tax(subtotal: float) -> Tuple[float, float]:
    return subtotal * settings.service_fee_rate, subtotal * settings.tax_rate


def prorate_discount(item_subtotals: Sequence[float], discount: float) -> List[float]:
    """Split a cart discount across items by subtotal share."""
    if not item_subtotals:
        return []
    if len(item_subtotals) == 1:
        return [round_money(discount)]
    cart_subtotal = sum(item_subtotals)
    if cart_subtotal <= 0:
        return [0.0 for _ in item_subtotals]
    return [round_money(subtotal / cart_subtotal * discount) for subtotal in item_subtotals]


def item_total(subtotal: float, discount_share: float = 0.0) -> float:
    fee, tax = service_fee_and_tax(subtotal)
    return round_money(max(0.0, subtotal + fee + tax - discount_share))


def price_cart(item_subtotals: Sequence[float], discount: float = 0.0, currency: str = "USD") -> CartPricing:
    subtotal = round_money(sum(item_subtotals))
    fee, tax = service_fee_and_tax(subtotal)
    discount = round_money(min(max(discount, 0.0), subtotal))
    total = round_money(max(0.0, subtotal + fee + tax - discount))
    return CartPricing(
        subtotal=subtotal,
        service_fee=round_money(fee),
        tax=round_money(tax),
        discount=discount,
        total=total,
        currency=(currency or "USD").upper(),
    )


def cancellation_refund(total_price: float, tour_date: datetime, now: datetime) -> Tuple[float, int]:
    """
    Refund owed when a booking is cancelled.

    Days until the tour are rounded up; 7+ days refunds in full, 3+ days
    refunds half, anything later refunds nothing.
    """
    seconds = (ensure_utc(tour_date) - ensure_utc(now)).total_seconds()
    days = math.ceil(seconds / SECONDS_PER_DAY)
    percentage = 0
    for min_days, refund_percentage in REFUND_POLICY:
        if days >= min_days:
            percentage = refund_percentage
            break
    return round_money(float(total_price or 0) * percentage / 100), percentage
