# backend/tourhub/routes/v1/admin/__init__.py
"""
Admin API v1 Routes

Back-office endpoints under /api/v1/admin. Every router here guards its
endpoints with ``require_admin``; login is the only open route.
"""

from . import (
    auth,
    availability,
    bookings,
    dashboard,
    discounts,
    manifests,
    reviews,
    special_offers,
    stop_sales,
)

__all__ = [
    "auth",
    "availability",
    "bookings",
    "dashboard",
    "discounts",
    "manifests",
    "reviews",
    "special_offers",
    "stop_sales",
]
