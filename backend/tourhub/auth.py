# backend/tourhub/auth.py
"""
Password hashing and JWT helpers.

Tokens carry ``sub`` (user id), ``email``, ``scope`` ("user" or "admin"),
``role`` and ``permissions``. Admin tokens are only minted for staff.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

import jwt
from passlib.context import CryptContext

from .core.config import settings
from .models.user import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Verified against when the account does not exist, so response time does
# not reveal which emails are registered
DUMMY_HASH_FOR_TIMING_ATTACK = "$2b$12$LQv3c1yqBWVHxkd0LHAkCOYz6TtxMQJqhN8/X4.V4ferVKnNaOuJi"

USER_SCOPE = "user"
ADMIN_SCOPE = "admin"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        pwd_context.verify(plain_password, DUMMY_HASH_FOR_TIMING_ATTACK)
        return False
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except ValueError as e:
        logger.error("Error verifying password: %s", e)
        return False


def get_password_hash(password: str) -> str:
    return str(pwd_context.hash(password))


def create_access_token(user: User, scope: str = USER_SCOPE, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims: Dict[str, Any] = {
        "sub": user.id,
        "email": user.email,
        "scope": scope,
        "role": user.role,
        "exp": expire,
    }
    if scope == ADMIN_SCOPE:
        claims["permissions"] = user.effective_permissions

    encoded = cast(
        str,
        jwt.encode(claims, settings.secret_key.get_secret_value(), algorithm=settings.algorithm),
    )
    logger.info("Created %s access token for user: %s", scope, user.id)
    return encoded


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a token; raises ``jwt.PyJWTError`` when invalid or expired."""
    payload = jwt.decode(token, settings.secret_key.get_secret_value(), algorithms=[settings.algorithm])
    return cast(Dict[str, Any], payload)
