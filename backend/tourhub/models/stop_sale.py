# backend/tourhub/models/stop_sale.py
"""
Stop-sale windows and their audit log.

A StopSale with an empty ``option_ids`` list stops every booking option of
the tour for the date range. StopSaleLog keeps one row per applied
(tour, option, range), with ``option_id`` None standing for all options.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import StopSaleLogStatus
from ..database import Base
from .types import json_type


class StopSale(Base):
    __tablename__ = "stop_sales"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False, index=True)
    tour_id = Column(String(26), ForeignKey("tours.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    option_ids = Column(json_type, nullable=False, default=list)
    reason = Column(String(500), nullable=True)
    created_by_id = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (Index("idx_stop_sales_tour_range", "tour_id", "start_date", "end_date"),)

    @property
    def covers_all_options(self) -> bool:
        return not self.option_ids


class StopSaleLog(Base):
    __tablename__ = "stop_sale_logs"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False, index=True)
    tour_id = Column(String(26), ForeignKey("tours.id", ondelete="CASCADE"), nullable=False, index=True)
    option_id = Column(String(64), nullable=True)
    date_from = Column(Date, nullable=False)
    date_to = Column(Date, nullable=False)
    reason = Column(String(500), nullable=True)
    applied_by_id = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    applied_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    status = Column(String(20), nullable=False, default=StopSaleLogStatus.ACTIVE.value, index=True)
    removed_by_id = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    removed_at = Column(DateTime(timezone=True), nullable=True)

    tour = relationship("Tour")
    applied_by = relationship("User", foreign_keys=[applied_by_id])
    removed_by = relationship("User", foreign_keys=[removed_by_id])
