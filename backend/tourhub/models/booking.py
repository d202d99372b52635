# backend/tourhub/models/booking.py
"""
Booking model for Tourhub.

A booking is one cart item turned into a reservation: a tour, a date and
time, and a guest mix. Prices are frozen at booking time so later tour
edits never change what the customer paid.

The activity date is stored as UTC midnight in ``date`` together with the
original ``YYYY-MM-DD`` text in ``date_string``.
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
import ulid

from ..core.booking_status import BookingStatus
from ..core.constants import MAX_SPECIAL_REQUESTS_LENGTH
from ..core.enums import BookingSource
from ..database import Base
from .types import json_type, money_type


def _pluralize(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False, index=True)
    booking_reference = Column(String(40), nullable=False)

    # Parties
    tour_id = Column(String(26), ForeignKey("tours.id", ondelete="SET NULL"), nullable=True, index=True)
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    source = Column(String(20), nullable=False, default=BookingSource.ONLINE.value)
    created_by_id = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Customer contact captured at checkout
    customer_phone = Column(String(40), nullable=True)
    customer_country = Column(String(100), nullable=True)

    # Schedule
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    date_string = Column(String(10), nullable=True)
    time = Column(String(20), nullable=False)

    # Guests
    guests = Column(Integer, nullable=False, default=1)
    adult_guests = Column(Integer, nullable=False, default=1)
    child_guests = Column(Integer, nullable=False, default=0)
    infant_guests = Column(Integer, nullable=False, default=0)

    # Money and status
    total_price = Column(money_type, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value, index=True)
    payment_id = Column(String(255), nullable=True, index=True)
    payment_method = Column(String(20), nullable=True)
    payment_status = Column(String(20), nullable=True)
    amount_paid = Column(money_type, nullable=True)

    # Requests and logistics
    special_requests = Column(Text, nullable=True)
    emergency_contact = Column(String(255), nullable=True)
    hotel_pickup_details = Column(Text, nullable=True)
    hotel_pickup_location = Column(json_type, nullable=True)
    pickup_location = Column(String(255), nullable=True)
    pickup_address = Column(String(500), nullable=True)
    internal_notes = Column(Text, nullable=True)

    # Discounts
    discount_code = Column(String(64), nullable=True)
    discount_amount = Column(money_type, nullable=True)
    applied_offer = Column(json_type, nullable=True)

    # Selections frozen at booking time
    selected_booking_option = Column(json_type, nullable=True)
    selected_add_ons = Column(json_type, nullable=True)
    selected_add_on_details = Column(json_type, nullable=True)

    # Cancellation / refund
    refund_amount = Column(money_type, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(String(500), nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, index=True, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    tour = relationship("Tour", back_populates="bookings")
    user = relationship("User", back_populates="bookings", foreign_keys=[user_id])
    created_by = relationship("User", foreign_keys=[created_by_id])

    __table_args__ = (
        UniqueConstraint("tenant_id", "booking_reference", name="uq_bookings_tenant_reference"),
        CheckConstraint("guests >= 1", name="ck_bookings_guests_positive"),
        CheckConstraint("total_price >= 0", name="ck_bookings_total_non_negative"),
        CheckConstraint(
            f"(special_requests IS NULL) OR (length(special_requests) <= {MAX_SPECIAL_REQUESTS_LENGTH})",
            name="ck_bookings_special_requests_length",
        ),
        Index("idx_bookings_tenant_created", "tenant_id", "created_at"),
        Index("idx_bookings_tour_date", "tour_id", "date"),
    )

    @property
    def guest_breakdown(self) -> str:
        """Human readable guest mix, e.g. "2 adults, 1 child"."""
        parts: List[str] = []
        if self.adult_guests:
            parts.append(_pluralize(self.adult_guests, "adult", "adults"))
        if self.child_guests:
            parts.append(_pluralize(self.child_guests, "child", "children"))
        if self.infant_guests:
            parts.append(_pluralize(self.infant_guests, "infant", "infants"))
        return ", ".join(parts)

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED.value

    def __repr__(self) -> str:
        return f"<Booking {self.booking_reference} {self.status}>"
