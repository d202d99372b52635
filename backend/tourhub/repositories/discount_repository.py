# backend/tourhub/repositories/discount_repository.py
"""Data access for discount codes."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.discount import Discount
from .base_repository import BaseRepository


class DiscountRepository(BaseRepository[Discount]):
    def __init__(self, db: Session):
        super().__init__(db, Discount)

    def get_by_code(self, tenant_id: str, code: str) -> Optional[Discount]:
        return self.find_one_by(tenant_id=tenant_id, code=code.strip().upper())

    def list_for_tenant(self, tenant_id: Optional[str]) -> List[Discount]:
        query = self._build_query()
        if tenant_id:
            query = query.filter(Discount.tenant_id == tenant_id)
        return self._execute_query(query.order_by(Discount.created_at.desc()))

    def increment_usage(self, discount: Discount) -> Discount:
        discount.times_used = int(discount.times_used or 0) + 1
        self.flush()
        return discount
