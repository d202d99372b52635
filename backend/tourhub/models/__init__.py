"""
Database models for Tourhub.

The models are organized by functionality:
- Tenants and accounts
- Tour catalogue
- Bookings, availability and stop-sales
- Special offers, discount codes and reviews
"""

from .availability import Availability
from .booking import Booking
from .discount import Discount
from .review import Review
from .special_offer import SpecialOffer
from .stop_sale import StopSale, StopSaleLog
from .tenant import Tenant
from .tour import Tour
from .user import User

__all__ = [
    # Tenancy and accounts
    "Tenant",
    "User",
    # Catalogue
    "Tour",
    # Bookings and inventory
    "Booking",
    "Availability",
    "StopSale",
    "StopSaleLog",
    # Promotions and feedback
    "SpecialOffer",
    "Discount",
    "Review",
]
