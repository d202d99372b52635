# backend/tourhub/repositories/tenant_repository.py
"""Data access for tenants."""

from typing import Optional

from sqlalchemy.orm import Session

from ..models.tenant import Tenant
from .base_repository import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    def __init__(self, db: Session):
        super().__init__(db, Tenant)

    def get_active(self, tenant_id: str) -> Optional[Tenant]:
        return self.find_one_by(tenant_id=tenant_id, is_active=True)
