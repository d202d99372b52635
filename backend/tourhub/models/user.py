# backend/tourhub/models/user.py
"""
User model for Tourhub.

One table holds storefront customers and back-office staff. The ``role``
column separates them; staff permissions are stored per account and fall
back to the role defaults when empty.

Classes:
    User: Account used for authentication, bookings and admin access
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import AdminRole, get_default_permissions
from ..database import Base
from .types import json_type


class User(Base):
    """
    Account model.

    Attributes:
        id: ULID primary key
        email: Unique login email (stored lower-cased)
        hashed_password: Bcrypt hash, empty for guest checkouts
        role: One of AdminRole; ``customer`` for storefront users
        permissions: Explicit admin permissions (camelCase names)
        tenant_ids: Tenants a staff member may manage; empty means all
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    phone = Column(String(40), nullable=True)
    role = Column(String(20), nullable=False, default=AdminRole.CUSTOMER.value)
    permissions = Column(json_type, nullable=False, default=list)
    tenant_ids = Column(json_type, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    bookings = relationship("Booking", back_populates="user", foreign_keys="Booking.user_id")

    @property
    def name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def is_staff(self) -> bool:
        return self.role != AdminRole.CUSTOMER.value

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.SUPER_ADMIN.value

    @property
    def effective_permissions(self) -> List[str]:
        """Stored permissions, or the role defaults when none are stored."""
        if self.permissions:
            return list(self.permissions)
        return get_default_permissions(self.role)

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
