# backend/tourhub/repositories/factory.py
"""
Repository Factory for Tourhub

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .availability_repository import AvailabilityRepository
    from .booking_repository import BookingRepository
    from .discount_repository import DiscountRepository
    from .review_repository import ReviewRepository
    from .special_offer_repository import SpecialOfferRepository
    from .stop_sale_repository import StopSaleLogRepository, StopSaleRepository
    from .tenant_repository import TenantRepository
    from .tour_repository import TourRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_tenant_repository(db: Session) -> "TenantRepository":
        from .tenant_repository import TenantRepository

        return TenantRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_tour_repository(db: Session) -> "TourRepository":
        from .tour_repository import TourRepository

        return TourRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_availability_repository(db: Session) -> "AvailabilityRepository":
        """Create repository for availability operations."""
        from .availability_repository import AvailabilityRepository

        return AvailabilityRepository(db)

    @staticmethod
    def create_stop_sale_repository(db: Session) -> "StopSaleRepository":
        from .stop_sale_repository import StopSaleRepository

        return StopSaleRepository(db)

    @staticmethod
    def create_stop_sale_log_repository(db: Session) -> "StopSaleLogRepository":
        from .stop_sale_repository import StopSaleLogRepository

        return StopSaleLogRepository(db)

    @staticmethod
    def create_special_offer_repository(db: Session) -> "SpecialOfferRepository":
        from .special_offer_repository import SpecialOfferRepository

        return SpecialOfferRepository(db)

    @staticmethod
    def create_discount_repository(db: Session) -> "DiscountRepository":
        from .discount_repository import DiscountRepository

        return DiscountRepository(db)

    @staticmethod
    def create_review_repository(db: Session) -> "ReviewRepository":
        from .review_repository import ReviewRepository

        return ReviewRepository(db)
