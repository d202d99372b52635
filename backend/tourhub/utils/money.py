"""Rounding helpers for prices (half-up, as shown on receipts)."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, Decimal]

_CENT = Decimal("0.01")


def round_money(value: Number) -> float:
    """Round to cents, halves away from zero."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def round_half_up(value: Number) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_cents(value: Number) -> int:
    """Amount in the smallest currency unit, as Stripe expects."""
    return round_half_up(Decimal(str(value)) * 100)


def format_amount(value: Number) -> str:
    """Integral amounts print without a decimal point (10 -> "10", 12.5 -> "12.5")."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)
