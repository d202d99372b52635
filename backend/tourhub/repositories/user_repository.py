# backend/tourhub/repositories/user_repository.py
"""
User Repository for Tourhub

Email lookups are case-insensitive; emails are stored lower-cased.
"""

from datetime import datetime, timedelta
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        if not email:
            return None
        try:
            return self.db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()
        except SQLAlchemyError as e:
            self.logger.error("Error getting user by email: %s", e)
            raise RepositoryException(f"Failed to get user by email: {e}")

    def count_for_tenant(self, tenant_id: Optional[str]) -> int:
        """
        Count users. A tenant narrows the count to users who booked with it.
        """
        try:
            if not tenant_id:
                return self.db.query(func.count(User.id)).scalar() or 0
            return (
                self.db.query(func.count(func.distinct(Booking.user_id)))
                .filter(Booking.tenant_id == tenant_id)
                .scalar()
                or 0
            )
        except SQLAlchemyError as e:
            self.logger.error("Error counting users: %s", e)
            raise RepositoryException(f"Failed to count users: {e}")

    def touch_last_login(self, user: User, now: datetime) -> None:
        # Skip writes for repeat logins within a minute
        last = user.last_login_at
        if last is not None and last.tzinfo is None:
            last = last.replace(tzinfo=now.tzinfo)
        if last is None or now - last > timedelta(minutes=1):
            user.last_login_at = now
            self.db.flush()
