# backend/tourhub/models/review.py
"""
Tour review model.

One review per (tenant, tour, user), enforced by a unique constraint.
Tour ``rating`` and ``review_count`` are denormalized aggregates kept in
sync by the review service.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False, index=True)
    tour_id = Column(String(26), ForeignKey("tours.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_name = Column(String(200), nullable=False)

    rating = Column(Integer, nullable=False)
    title = Column(String(200), nullable=True)
    comment = Column(Text, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False, comment="Reviewer has a booking for the tour")

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    tour = relationship("Tour")

    __table_args__ = (
        UniqueConstraint("tenant_id", "tour_id", "user_id", name="uq_reviews_tenant_tour_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        Index("idx_reviews_tour_created", "tour_id", "created_at"),
    )
