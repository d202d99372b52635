# backend/tourhub/routes/v1/admin/auth.py
"""
Admin authentication - API v1

Endpoints:
    POST /login → Admin-scope token for staff accounts; also set as the
                  ``admin-auth-token`` cookie for the back office
"""

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, Response

from ....api.dependencies.services import get_auth_service
from ....core.config import settings
from ....core.constants import ADMIN_TOKEN_COOKIE
from ....core.exceptions import DomainException
from ....schemas.auth import LoginRequest, TokenResponse, UserResponse
from ....services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin-auth-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.post("/login", response_model=TokenResponse)
def admin_login(
    payload: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """
    401 for bad credentials, 403 for customers and inactive staff.

    The configured bootstrap admin is created on its first login.
    """
    try:
        user, token = service.admin_login(payload.email, payload.password)
    except DomainException as e:
        logger.warning("Admin login failed for %s: %s", payload.email, e.code)
        handle_domain_exception(e)

    response.set_cookie(
        ADMIN_TOKEN_COOKIE,
        token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.environment == "production",
    )
    user_payload = UserResponse.model_validate(user).model_copy(
        update={"permissions": user.effective_permissions}
    )
    return TokenResponse(access_token=token, user=user_payload)
