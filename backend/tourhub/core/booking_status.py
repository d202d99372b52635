"""
Booking status vocabulary.

Bookings store the human label ("Confirmed", "Partial Refunded"); the API
and admin filters accept either that label or the snake_case code.
"""

import re
from enum import Enum
from typing import Dict, Optional, Tuple


class BookingStatus(str, Enum):
    """Status labels as stored on bookings."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"
    PARTIAL_REFUNDED = "Partial Refunded"


BOOKING_STATUS_CODES: Tuple[str, ...] = (
    "pending",
    "confirmed",
    "completed",
    "cancelled",
    "refunded",
    "partial_refunded",
)

_CODE_TO_LABEL: Dict[str, str] = {
    "pending": BookingStatus.PENDING.value,
    "confirmed": BookingStatus.CONFIRMED.value,
    "completed": BookingStatus.COMPLETED.value,
    "cancelled": BookingStatus.CANCELLED.value,
    "refunded": BookingStatus.REFUNDED.value,
    "partial_refunded": BookingStatus.PARTIAL_REFUNDED.value,
}

BOOKING_STATUS_LABELS: Tuple[str, ...] = tuple(_CODE_TO_LABEL.values())

# Everything a stored status may legitimately hold
BOOKING_STATUSES_DB: Tuple[str, ...] = BOOKING_STATUS_LABELS + BOOKING_STATUS_CODES

_WHITESPACE = re.compile(r"\s+")


def to_booking_status_code(value: Optional[str]) -> Optional[str]:
    """Normalize a label or code to its snake_case code, or None if unknown."""
    if not isinstance(value, str):
        return None
    normalized = _WHITESPACE.sub("_", value.strip().lower())
    if not normalized:
        return None
    if normalized == "partial-refunded":
        normalized = "partial_refunded"
    return normalized if normalized in _CODE_TO_LABEL else None


def to_booking_status_db(value: Optional[str]) -> Optional[str]:
    """Normalize a label or code to the stored label, or None if unknown."""
    code = to_booking_status_code(value)
    if code is None:
        return None
    return _CODE_TO_LABEL[code]
