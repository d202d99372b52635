# backend/tourhub/routes/v1/auth.py
"""
Authentication routes - API v1

Endpoints:
    POST /signup → Create a customer account and return a token
    POST /login  → Exchange email and password for a user-scope token
"""

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, status

from ...api.dependencies.services import get_auth_service
from ...core.exceptions import DomainException
from ...schemas.auth import LoginRequest, SignupRequest, TokenResponse, UserResponse
from ...services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, service: AuthService = Depends(get_auth_service)) -> TokenResponse:
    """409 when the email already belongs to an account with a password."""
    try:
        user, token = service.register_user(
            payload.email, payload.password, payload.first_name, payload.last_name, payload.phone
        )
    except DomainException as e:
        handle_domain_exception(e)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, service: AuthService = Depends(get_auth_service)) -> TokenResponse:
    try:
        user, token = service.login(payload.email, payload.password)
    except DomainException as e:
        logger.info("Failed login for %s", payload.email)
        handle_domain_exception(e)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))
