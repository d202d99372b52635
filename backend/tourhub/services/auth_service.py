# backend/tourhub/services/auth_service.py
"""
Authentication Service for Tourhub

Handles customer signup and login, staff (admin) login with the one-time
bootstrap of the configured super admin, and the find-or-create of guest
customers used by checkout and manual bookings.
"""

from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from ..auth import ADMIN_SCOPE, USER_SCOPE, create_access_token, get_password_hash, verify_password
from ..core.config import settings
from ..core.enums import AdminRole
from ..core.exceptions import ConflictException, ForbiddenException, UnauthorizedException
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService


def split_name(full_name: Optional[str]) -> Tuple[str, str]:
    """"Jane van Dyke" -> ("Jane", "van Dyke")."""
    parts = (full_name or "").strip().split(" ", 1)
    first = parts[0]
    last = parts[1].strip() if len(parts) > 1 else ""
    return first, last


class AuthService(BaseService):
    def __init__(self, db: Session, cache=None):
        super().__init__(db, cache)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("signup")
    def register_user(
        self, email: str, password: str, first_name: str, last_name: str, phone: Optional[str] = None
    ) -> Tuple[User, str]:
        email = email.strip().lower()
        existing = self.user_repository.get_by_email(email)
        if existing is not None and existing.hashed_password:
            raise ConflictException("An account with this email already exists", code="EMAIL_TAKEN")

        with self.transaction():
            if existing is not None:
                # Guest checkout created the row; claim it
                existing.hashed_password = get_password_hash(password)
                existing.first_name = first_name
                existing.last_name = last_name
                existing.phone = phone or existing.phone
                user = existing
            else:
                user = self.user_repository.create(
                    email=email,
                    hashed_password=get_password_hash(password),
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone,
                    role=AdminRole.CUSTOMER.value,
                )
        self.log_operation("register_user", user_id=user.id)
        return user, create_access_token(user, USER_SCOPE)

    def authenticate(self, email: str, password: str) -> Optional[User]:
        user = self.user_repository.get_by_email(email)
        if user is None:
            verify_password(password, None)
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    @BaseService.measure_operation("login")
    def login(self, email: str, password: str) -> Tuple[User, str]:
        user = self.authenticate(email, password)
        if user is None or not user.is_active:
            raise UnauthorizedException("Invalid email or password", code="INVALID_CREDENTIALS")
        with self.transaction():
            self.user_repository.touch_last_login(user, datetime.now(timezone.utc))
        return user, create_access_token(user, USER_SCOPE)

    def ensure_bootstrap_admin(self) -> Optional[User]:
        """Create the super admin from settings if that account does not exist yet."""
        if not settings.admin_email or not settings.admin_password:
            return None
        existing = self.user_repository.get_by_email(settings.admin_email)
        if existing is not None:
            return existing
        with self.transaction():
            user = self.user_repository.create(
                email=settings.admin_email.strip().lower(),
                hashed_password=get_password_hash(settings.admin_password.get_secret_value()),
                first_name="Admin",
                last_name="",
                role=AdminRole.SUPER_ADMIN.value,
            )
        self.logger.info("Bootstrapped super admin %s", user.email)
        return user

    @BaseService.measure_operation("admin_login")
    def admin_login(self, email: str, password: str) -> Tuple[User, str]:
        if settings.admin_email and email.strip().lower() == settings.admin_email.strip().lower():
            self.ensure_bootstrap_admin()

        user = self.authenticate(email, password)
        if user is None:
            raise UnauthorizedException("Invalid email or password", code="INVALID_CREDENTIALS")
        if not user.is_active or not user.is_staff:
            raise ForbiddenException("Admin access required", code="ADMIN_REQUIRED")

        with self.transaction():
            self.user_repository.touch_last_login(user, datetime.now(timezone.utc))
        return user, create_access_token(user, ADMIN_SCOPE)

    def find_or_create_customer(
        self, email: str, first_name: str, last_name: str, phone: Optional[str] = None
    ) -> User:
        """
        Customer account for a checkout email.

        Guests get an account without a password; they can claim it later
        by signing up with the same email. Flushes only.
        """
        user = self.user_repository.get_by_email(email)
        if user is not None:
            return user
        user = self.user_repository.create(
            email=email.strip().lower(),
            hashed_password=None,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            role=AdminRole.CUSTOMER.value,
        )
        self.logger.info("Created guest customer %s", user.id)
        return user