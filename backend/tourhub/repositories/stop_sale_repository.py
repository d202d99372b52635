# backend/tourhub/repositories/stop_sale_repository.py
"""Data access for stop-sale windows and the stop-sale log."""

from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session, joinedload

from ..core.enums import StopSaleLogStatus
from ..models.stop_sale import StopSale, StopSaleLog
from .base_repository import BaseRepository


class StopSaleRepository(BaseRepository[StopSale]):
    def __init__(self, db: Session):
        super().__init__(db, StopSale)

    def list_overlapping(self, tour_id: str, start: date, end: date) -> List[StopSale]:
        """Stop-sales for the tour whose range intersects [start, end]."""
        query = self._build_query().filter(
            StopSale.tour_id == tour_id,
            StopSale.start_date <= end,
            StopSale.end_date >= start,
        )
        return self._execute_query(query.order_by(StopSale.start_date.asc()))

    def find_exact(self, tenant_id: str, tour_id: str, start: date, end: date) -> List[StopSale]:
        """Stop-sales stored for exactly this tenant, tour and range."""
        query = self._build_query().filter(
            StopSale.tenant_id == tenant_id,
            StopSale.tour_id == tour_id,
            StopSale.start_date == start,
            StopSale.end_date == end,
        )
        return self._execute_query(query)


class StopSaleLogRepository(BaseRepository[StopSaleLog]):
    def __init__(self, db: Session):
        super().__init__(db, StopSaleLog)

    def mark_removed(
        self,
        *,
        tenant_id: str,
        tour_id: str,
        option_ids: Sequence[str],
        date_from: date,
        date_to: date,
        removed_by_id: Optional[str],
        removed_at: datetime,
    ) -> int:
        """
        Flag matching active log rows as removed.

        An empty ``option_ids`` targets the all-options rows (option_id NULL).
        """
        query = self._build_query().filter(
            StopSaleLog.tenant_id == tenant_id,
            StopSaleLog.tour_id == tour_id,
            StopSaleLog.date_from == date_from,
            StopSaleLog.date_to == date_to,
            StopSaleLog.status == StopSaleLogStatus.ACTIVE.value,
        )
        if option_ids:
            query = query.filter(StopSaleLog.option_id.in_(list(option_ids)))
        else:
            query = query.filter(StopSaleLog.option_id.is_(None))

        rows = self._execute_query(query)
        for row in rows:
            row.status = StopSaleLogStatus.REMOVED.value
            row.removed_by_id = removed_by_id
            row.removed_at = removed_at
        self.flush()
        return len(rows)

    def page(
        self,
        *,
        tenant_id: Optional[str],
        tour_id: Optional[str],
        status: Optional[str],
        skip: int,
        limit: int,
    ) -> Tuple[List[StopSaleLog], int]:
        query = self._build_query()
        if tenant_id:
            query = query.filter(StopSaleLog.tenant_id == tenant_id)
        if tour_id:
            query = query.filter(StopSaleLog.tour_id == tour_id)
        if status:
            query = query.filter(StopSaleLog.status == status)
        total = query.count()
        rows = self._execute_query(
            query.options(
                joinedload(StopSaleLog.tour),
                joinedload(StopSaleLog.applied_by),
                joinedload(StopSaleLog.removed_by),
            )
            .order_by(StopSaleLog.applied_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return rows, total
