"""Application-wide constants for the Tourhub platform."""

from __future__ import annotations

BRAND_NAME = "Tourhub"

API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Multi-tenant tour booking: storefront, checkout and back office"
API_VERSION = "1.0.0"

# Tenant resolution
DEFAULT_TENANT_ID = "default"
SHARED_TENANT_ID = "shared"
TENANT_HEADER = "x-tenant-id"
TENANT_COOKIE = "tenant_id"
TENANT_PREVIEW_PARAM = "tenant"
TENANT_RESET_PARAM = "reset_tenant"
ADMIN_TOKEN_COOKIE = "admin-auth-token"

# Identifiers
ULID_PATTERN = r"^[0-9A-HJKMNP-TV-Za-hjkmnp-tv-z]{26}$"
DATE_ONLY_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# Admin booking list
ALLOWED_PAGE_LIMITS = (10, 20, 50)
DEFAULT_PAGE_LIMIT = 10

# Booking references
BOOKING_REFERENCE_FALLBACK_PREFIX = "BKG"
BOOKING_REFERENCE_MAX_ATTEMPTS = 10

# Cancellation policy: (minimum days before tour, refund percentage)
REFUND_POLICY = ((7, 100), (3, 50))

# Text constraints
MAX_SPECIAL_REQUESTS_LENGTH = 1000
MIN_REVIEW_COMMENT_LENGTH = 10

# Stripe limits each metadata value to 500 characters
STRIPE_METADATA_CHUNK = 500

# Dashboard / reports
RECENT_ACTIVITY_LIMIT = 5
REPORT_MONTHS = 6
TOP_TOURS_LIMIT = 5
REVENUE_STATUSES = ("Confirmed", "Pending")
