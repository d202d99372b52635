# backend/tourhub/repositories/__init__.py
"""
Repository layer for Tourhub.

Repositories own every SQL query; services own business rules and the
transaction boundary.

Usage:
    from tourhub.repositories import RepositoryFactory

    repository = RepositoryFactory.create_booking_repository(db)
    bookings = repository.list_for_user(user_id)
"""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .discount_repository import DiscountRepository
from .factory import RepositoryFactory
from .review_repository import ReviewRepository
from .special_offer_repository import SpecialOfferRepository
from .stop_sale_repository import StopSaleLogRepository, StopSaleRepository
from .tenant_repository import TenantRepository
from .tour_repository import TourRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "RepositoryFactory",
    "AvailabilityRepository",
    "BookingRepository",
    "DiscountRepository",
    "ReviewRepository",
    "SpecialOfferRepository",
    "StopSaleLogRepository",
    "StopSaleRepository",
    "TenantRepository",
    "TourRepository",
    "UserRepository",
]
