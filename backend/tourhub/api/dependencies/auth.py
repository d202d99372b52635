# backend/tourhub/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

Storefront routes read a user-scope bearer token. Admin routes accept
an admin-scope token from the Authorization header or from the
``admin-auth-token`` cookie the back office sets after login.
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
import jwt
from sqlalchemy.orm import Session

from ...auth import ADMIN_SCOPE, decode_access_token
from ...core.constants import ADMIN_TOKEN_COOKIE
from ...database import get_db
from ...models.booking import Booking
from ...models.user import User
from ...repositories.factory import RepositoryFactory
from ...services.tenant_service import can_access_tenant

logger = logging.getLogger(__name__)

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

_CREDENTIALS_ERROR = "Could not validate credentials"


def _unauthorized(detail: str = _CREDENTIALS_ERROR) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode(token: str) -> Optional[Dict[str, Any]]:
    try:
        return decode_access_token(token)
    except jwt.PyJWTError as e:
        logger.info("Rejected access token: %s", e)
        return None


def _load_user(db: Session, payload: Optional[Dict[str, Any]]) -> Optional[User]:
    """Active user named by a decoded token, or None."""
    if not payload:
        return None
    user_id = payload.get("sub")
    if not user_id:
        return None
    user = RepositoryFactory.create_user_repository(db).get_by_id(user_id)
    if user is None or not user.is_active:
        return None
    return user


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db),
) -> User:
    """
    Authenticated user for storefront routes.

    Raises:
        HTTPException: 401 when the token is missing, invalid or expired
    """
    if not token:
        raise _unauthorized("Not authenticated")
    user = _load_user(db, _decode(token))
    if user is None:
        raise _unauthorized()
    return user


def get_current_user_optional(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Same as get_current_user, but anonymous callers get None instead of a 401."""
    if not token:
        return None
    return _load_user(db, _decode(token))


def get_current_admin(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db),
) -> User:
    """Staff user holding an admin-scope token (header first, then cookie)."""
    raw = token or request.cookies.get(ADMIN_TOKEN_COOKIE)
    if not raw:
        raise _unauthorized("Not authenticated")
    payload = _decode(raw)
    user = _load_user(db, payload)
    if user is None:
        raise _unauthorized()
    if payload.get("scope") != ADMIN_SCOPE or not user.is_staff:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


def require_admin(*permissions: str) -> Callable[..., User]:
    """
    Dependency factory for admin routes.

    Every listed permission must be granted to the caller; super admins
    pass regardless.

    Usage:
        @router.get("/", dependencies=[Depends(require_admin("manageBookings"))])
    """

    def dependency(user: User = Depends(get_current_admin)) -> User:
        if user.is_super_admin:
            return user
        granted = set(user.effective_permissions)
        missing = [perm for perm in permissions if perm not in granted]
        if missing:
            logger.warning("User %s denied admin access, missing %s", user.id, missing)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "message": "Insufficient permissions",
                    "code": "PERMISSION_DENIED",
                    "details": {"required": list(permissions), "missing": missing},
                },
            )
        return user

    return dependency


def check_tenant_access(user: User, tenant_id: Optional[str]) -> None:
    """403 when a tenant-restricted staff member targets another tenant; "all" is not checked."""
    if not tenant_id or tenant_id == "all":
        return
    if not can_access_tenant(user, tenant_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": "No access to this tenant", "code": "TENANT_FORBIDDEN", "details": {}},
        )


def scope_admin_tenant(user: User, tenant_id: Optional[str]) -> Optional[str]:
    """
    Tenant an admin list should be scoped to.

    An explicit tenant is access-checked and returned. Without one (or with
    "all"), tenant-restricted staff are scoped to their first tenant;
    unrestricted staff keep the cross-tenant view.
    """
    check_tenant_access(user, tenant_id)
    if tenant_id and tenant_id != "all":
        return tenant_id
    if user.is_super_admin or not user.tenant_ids:
        return tenant_id
    return user.tenant_ids[0]


def check_booking_access(user: User, booking: Booking) -> None:
    """403 unless the booking (or its tour) belongs to a tenant the staff member manages."""
    tenants = [booking.tenant_id, booking.tour.tenant_id if booking.tour else None]
    if any(tenant and can_access_tenant(user, tenant) for tenant in tenants):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"message": "No access to this tenant", "code": "TENANT_FORBIDDEN", "details": {}},
    )
