# backend/tourhub/core/enums.py
"""
Core enums for the Tourhub platform.

Roles and permissions gate the admin API. Stored values are the
lower-case strings; permission names keep the camelCase spelling the
admin frontend sends in tokens.
"""

from enum import Enum
from typing import List


class AdminRole(str, Enum):
    CUSTOMER = "customer"
    VIEWER = "viewer"
    OPERATIONS = "operations"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class AdminPermission(str, Enum):
    MANAGE_BOOKINGS = "manageBookings"
    MANAGE_TOURS = "manageTours"
    MANAGE_DISCOUNTS = "manageDiscounts"
    MANAGE_REVIEWS = "manageReviews"
    MANAGE_USERS = "manageUsers"
    VIEW_REPORTS = "viewReports"
    MANAGE_TENANTS = "manageTenants"


_ROLE_DEFAULT_PERMISSIONS = {
    AdminRole.CUSTOMER: [],
    AdminRole.VIEWER: [AdminPermission.VIEW_REPORTS],
    AdminRole.OPERATIONS: [
        AdminPermission.MANAGE_BOOKINGS,
        AdminPermission.MANAGE_TOURS,
        AdminPermission.VIEW_REPORTS,
    ],
    AdminRole.ADMIN: [
        AdminPermission.MANAGE_BOOKINGS,
        AdminPermission.MANAGE_TOURS,
        AdminPermission.MANAGE_DISCOUNTS,
        AdminPermission.MANAGE_REVIEWS,
        AdminPermission.MANAGE_USERS,
        AdminPermission.VIEW_REPORTS,
    ],
    AdminRole.SUPER_ADMIN: list(AdminPermission),
}


def get_default_permissions(role: str) -> List[str]:
    """Permissions granted to a role when the account has none stored."""
    try:
        resolved = AdminRole(role)
    except ValueError:
        return []
    return [perm.value for perm in _ROLE_DEFAULT_PERMISSIONS[resolved]]


class OfferType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    BUNDLE = "bundle"
    EARLY_BIRD = "early_bird"
    LAST_MINUTE = "last_minute"
    GROUP = "group"
    PROMO_CODE = "promo_code"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class BookingSource(str, Enum):
    ONLINE = "online"
    MANUAL = "manual"


class PaymentMethod(str, Enum):
    CARD = "card"
    PAYPAL = "paypal"
    BANK = "bank"
    CASH = "cash"
    PAY_LATER = "pay_later"
    OTHER = "other"


class PaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    PAY_ON_ARRIVAL = "pay_on_arrival"


class StopSaleLogStatus(str, Enum):
    ACTIVE = "active"
    REMOVED = "removed"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    LIMITED = "limited"
    SOLD_OUT = "sold_out"
    BLOCKED = "blocked"


class StopSaleDayStatus(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"
