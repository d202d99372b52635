# backend/tourhub/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...services.admin_booking_service import AdminBookingService
from ...services.auth_service import AuthService
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.cache_service import CacheService, get_cache_service
from ...services.checkout_service import CheckoutService
from ...services.dashboard_service import DashboardService
from ...services.discount_service import DiscountService
from ...services.offers.offer_service import OfferService
from ...services.review_service import ReviewService
from ...services.stop_sale_service import StopSaleService
from ...services.stripe_webhook_service import StripeWebhookService
from ...services.tenant_service import TenantService
from ...services.tour_service import TourService


@lru_cache(maxsize=1)
def get_cache_service_singleton() -> CacheService:
    """Get singleton cache service instance."""
    return get_cache_service()


def get_cache_service_dep() -> CacheService:
    """Get cache service instance for dependency injection."""
    return get_cache_service_singleton()


def get_tenant_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> TenantService:
    """Tenant configuration lookups share the process-wide cache."""
    return TenantService(db, cache)


def get_tour_service(
    db: Session = Depends(get_db), cache: CacheService = Depends(get_cache_service_dep)
) -> TourService:
    return TourService(db, cache)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session

    Returns:
        BookingService instance
    """
    return BookingService(db)


def get_admin_booking_service(db: Session = Depends(get_db)) -> AdminBookingService:
    return AdminBookingService(db)


def get_offer_service(db: Session = Depends(get_db)) -> OfferService:
    return OfferService(db)


def get_discount_service(db: Session = Depends(get_db)) -> DiscountService:
    return DiscountService(db)


def get_checkout_service(db: Session = Depends(get_db)) -> CheckoutService:
    """
    Get checkout service instance.

    Args:
        db: Database session

    Returns:
        CheckoutService instance
    """
    return CheckoutService(db)


def get_stripe_webhook_service(db: Session = Depends(get_db)) -> StripeWebhookService:
    return StripeWebhookService(db)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_stop_sale_service(db: Session = Depends(get_db)) -> StopSaleService:
    return StopSaleService(db)


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    """Dashboard and reports aggregate over bookings, tours and users."""
    return DashboardService(db)
