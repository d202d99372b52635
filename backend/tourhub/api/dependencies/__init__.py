# backend/tourhub/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_admin, get_current_user, get_current_user_optional, require_admin
from .services import (
    get_admin_booking_service,
    get_auth_service,
    get_availability_service,
    get_booking_service,
    get_cache_service_dep,
    get_checkout_service,
    get_dashboard_service,
    get_discount_service,
    get_offer_service,
    get_review_service,
    get_stop_sale_service,
    get_stripe_webhook_service,
    get_tenant_service,
    get_tour_service,
)

__all__ = [
    # Auth
    "get_current_user",
    "get_current_user_optional",
    "get_current_admin",
    "require_admin",
    # Services
    "get_admin_booking_service",
    "get_auth_service",
    "get_availability_service",
    "get_booking_service",
    "get_cache_service_dep",
    "get_checkout_service",
    "get_dashboard_service",
    "get_discount_service",
    "get_offer_service",
    "get_review_service",
    "get_stop_sale_service",
    "get_stripe_webhook_service",
    "get_tenant_service",
    "get_tour_service",
]
