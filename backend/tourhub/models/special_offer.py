# backend/tourhub/models/special_offer.py
"""
Special offer model.

Offers are tenant-scoped promotions evaluated by
``tourhub.services.offers.calculations``. Targeting is expressed through
JSON lists of tour ids / category ids, plus per-tour option selections:

    tour_option_selections: [{tourId, selectedOptions: [...], allOptions: bool}]
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
import ulid

from ..core.enums import OfferType
from ..database import Base
from .types import json_type, money_type


class SpecialOffer(Base):
    __tablename__ = "special_offers"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    type = Column(String(20), nullable=False, default=OfferType.PERCENTAGE.value)
    discount_value = Column(money_type, nullable=False, default=0)
    code = Column(String(64), nullable=True)

    # Type specific parameters
    min_days_in_advance = Column(Integer, nullable=True, default=7)
    max_days_before_tour = Column(Integer, nullable=True, default=2)
    min_booking_value = Column(money_type, nullable=True)
    max_discount = Column(money_type, nullable=True)
    min_group_size = Column(Integer, nullable=True, default=2)

    # Booking window, then travel window
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    travel_start_date = Column(DateTime(timezone=True), nullable=True)
    travel_end_date = Column(DateTime(timezone=True), nullable=True)

    applicable_tours = Column(json_type, nullable=False, default=list)
    tour_option_selections = Column(json_type, nullable=False, default=list)
    applicable_categories = Column(json_type, nullable=False, default=list)
    excluded_tours = Column(json_type, nullable=False, default=list)

    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)
    per_user_limit = Column(Integer, nullable=True, default=1)

    is_active = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    featured_badge_text = Column(String(50), nullable=True, default="Special Offer")
    priority = Column(Integer, nullable=False, default=0)
    terms = Column(json_type, nullable=False, default=list)

    created_by_id = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_special_offers_tenant_code"),
        CheckConstraint("discount_value >= 0", name="ck_special_offers_value_non_negative"),
        CheckConstraint("min_group_size IS NULL OR min_group_size >= 2", name="ck_special_offers_group_size"),
    )

    def __repr__(self) -> str:
        return f"<SpecialOffer {self.name} ({self.type})>"
