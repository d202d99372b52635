# backend/tourhub/repositories/special_offer_repository.py
"""
Special offer repository.

Window and usage checks run in SQL. Tour and category targeting live in
JSON lists, which are matched in Python so the same code works on
Postgres and SQLite.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models.special_offer import SpecialOffer
from .base_repository import BaseRepository


class SpecialOfferRepository(BaseRepository[SpecialOffer]):
    def __init__(self, db: Session):
        super().__init__(db, SpecialOffer)

    def find_active_offers(
        self,
        tenant_id: str,
        tour_id: Optional[str] = None,
        category_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[SpecialOffer]:
        """
        Offers that are active, inside their booking window and under their
        usage limit, then narrowed to the tour / category when given.

        Ordered by priority, then discount value, both descending.
        """
        moment = now or datetime.now().astimezone()
        query = (
            self._build_query()
            .filter(
                SpecialOffer.tenant_id == tenant_id,
                SpecialOffer.is_active.is_(True),
                SpecialOffer.start_date <= moment,
                SpecialOffer.end_date >= moment,
                or_(
                    SpecialOffer.usage_limit.is_(None),
                    SpecialOffer.used_count < SpecialOffer.usage_limit,
                ),
            )
            .order_by(SpecialOffer.priority.desc(), SpecialOffer.discount_value.desc())
        )
        offers = self._execute_query(query)

        if tour_id:
            offers = [
                offer
                for offer in offers
                if (not offer.applicable_tours or tour_id in offer.applicable_tours)
                and tour_id not in (offer.excluded_tours or [])
            ]
        if category_id:
            offers = [
                offer
                for offer in offers
                if not offer.applicable_categories or category_id in offer.applicable_categories
            ]
        return offers

    def list_for_tenant(self, tenant_id: Optional[str]) -> List[SpecialOffer]:
        query = self._build_query()
        if tenant_id:
            query = query.filter(SpecialOffer.tenant_id == tenant_id)
        return self._execute_query(query.order_by(SpecialOffer.priority.desc(), SpecialOffer.created_at.desc()))

    def code_taken(self, tenant_id: str, code: str, exclude_id: Optional[str] = None) -> bool:
        query = self._build_query().filter(SpecialOffer.tenant_id == tenant_id, SpecialOffer.code == code)
        if exclude_id:
            query = query.filter(SpecialOffer.id != exclude_id)
        return query.first() is not None
