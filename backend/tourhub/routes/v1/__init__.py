# backend/tourhub/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
All new endpoints should be added here.
"""

from . import (
    admin,
    auth,
    availability,
    bookings,
    checkout,
    discounts,
    offers,
    reviews,
    tenant,
    tours,
    user_bookings,
    webhooks,
)

__all__ = [
    "admin",
    "auth",
    "availability",
    "bookings",
    "checkout",
    "discounts",
    "offers",
    "reviews",
    "tenant",
    "tours",
    "user_bookings",
    "webhooks",
]
