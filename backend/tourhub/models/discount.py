# backend/tourhub/models/discount.py
"""Discount (coupon) codes redeemed at checkout."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint
import ulid

from ..core.enums import DiscountType
from ..database import Base
from .types import money_type


class Discount(Base):
    __tablename__ = "discounts"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False, index=True)
    code = Column(String(64), nullable=False)
    discount_type = Column(String(20), nullable=False, default=DiscountType.PERCENTAGE.value)
    value = Column(money_type, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    usage_limit = Column(Integer, nullable=True)
    times_used = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (UniqueConstraint("tenant_id", "code", name="uq_discounts_tenant_code"),)
