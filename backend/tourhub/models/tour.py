# backend/tourhub/models/tour.py
"""
Tour catalogue model.

Booking options, add-ons and the slot template live in JSON columns:

    booking_options: [{id, type, label, price, original_price, description, duration}]
    add_ons:         [{id, name, description, price, category, per_guest}]
    availability:    {slots: [{time: "HH:MM", capacity}]}
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import json_type, money_type


class Tour(Base):
    __tablename__ = "tours"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Pricing
    price = Column(money_type, nullable=False, default=0)
    discount_price = Column(money_type, nullable=True)
    original_price = Column(money_type, nullable=True)

    duration = Column(String(100), nullable=True)
    image = Column(String(1024), nullable=True)
    location = Column(String(255), nullable=True)
    meeting_point = Column(String(500), nullable=True)
    max_group_size = Column(Integer, nullable=True)
    category_ids = Column(json_type, nullable=False, default=list)

    rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)

    booking_options = Column(json_type, nullable=False, default=list)
    add_ons = Column(json_type, nullable=False, default=list)
    availability = Column(json_type, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    bookings = relationship("Booking", back_populates="tour", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "slug", name="uq_tours_tenant_slug"),
        CheckConstraint("price >= 0", name="ck_tours_price_non_negative"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_tours_rating_range"),
    )

    def get_option(self, option_id_or_type: Optional[str]) -> Optional[Dict[str, Any]]:
        """Find a booking option by id, falling back to its type."""
        if not option_id_or_type:
            return None
        options: List[Dict[str, Any]] = list(self.booking_options or [])
        for option in options:
            if option.get("id") == option_id_or_type:
                return option
        for option in options:
            if option.get("type") == option_id_or_type:
                return option
        return None

    @property
    def option_ids(self) -> List[str]:
        return [str(opt["id"]) for opt in (self.booking_options or []) if opt.get("id")]

    @property
    def display_price(self) -> float:
        """Price shown on cards: the discount price when set, else the list price."""
        return float(self.discount_price or self.price or 0)

    def __repr__(self) -> str:
        return f"<Tour {self.slug} ({self.tenant_id})>"
