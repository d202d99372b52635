# backend/tourhub/models/tenant.py
"""
Tenant model.

A tenant is a white-label brand served from the shared deployment. The
``tenant_id`` slug is what every other table stores; branding, SEO,
contact, feature flags, payment and localization settings are kept as
JSON documents.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String
import ulid

from ..database import Base
from .types import json_type


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    domain = Column(String(255), nullable=False)
    domains = Column(json_type, nullable=False, default=list)

    branding = Column(json_type, nullable=False, default=dict)
    seo = Column(json_type, nullable=False, default=dict)
    contact = Column(json_type, nullable=False, default=dict)
    features = Column(json_type, nullable=False, default=dict)
    payments = Column(json_type, nullable=False, default=dict)
    localization = Column(json_type, nullable=False, default=dict)

    is_active = Column(Boolean, nullable=False, default=True)
    is_default = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Tenant {self.tenant_id}>"
