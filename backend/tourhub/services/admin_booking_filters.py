"""
Admin booking list filters.

Pure helpers that turn raw query-string values into criteria dictionaries
for ``BookingRepository.find_page``. Anything malformed is dropped rather
than rejected, so a stale bookmark still lists bookings.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from ..core.booking_status import to_booking_status_db
from ..core.constants import ALLOWED_PAGE_LIMITS, DATE_ONLY_PATTERN, DEFAULT_PAGE_LIMIT, ULID_PATTERN
from ..models.booking import Booking
from ..utils.time_utils import parse_date_only, utc_end_of_day, utc_midnight

_DATE_ONLY = re.compile(DATE_ONLY_PATTERN)
_ULID = re.compile(ULID_PATTERN)

SORT_OPTIONS = {
    "createdAt_desc": (Booking.created_at, "desc"),
    "createdAt_asc": (Booking.created_at, "asc"),
    "activityDate_desc": (Booking.date, "desc"),
    "activityDate_asc": (Booking.date, "asc"),
}
DEFAULT_SORT = "createdAt_desc"


def resolve_effective_tenant_id(raw: Optional[str]) -> Optional[str]:
    """None means every tenant."""
    if raw is None:
        return None
    value = raw.strip()
    if not value or value == "all":
        return None
    return value


def _day_range(start_raw: Optional[str], end_raw: Optional[str]) -> Dict[str, Any]:
    bounds: Dict[str, Any] = {}
    if start_raw and _DATE_ONLY.match(start_raw):
        start = parse_date_only(start_raw)
        if start is not None:
            bounds["$gte"] = utc_midnight(start)
    if end_raw and _DATE_ONLY.match(end_raw):
        end = parse_date_only(end_raw)
        if end is not None:
            bounds["$lte"] = utc_end_of_day(end)
    return bounds


def build_base_match(
    status: Optional[str] = None,
    tour_id: Optional[str] = None,
    purchase_from: Optional[str] = None,
    purchase_to: Optional[str] = None,
    activity_from: Optional[str] = None,
    activity_to: Optional[str] = None,
) -> Dict[str, Any]:
    match: Dict[str, Any] = {}

    if status and status != "all":
        match["status"] = to_booking_status_db(status) or status

    if tour_id and _ULID.match(tour_id):
        match["tour_id"] = tour_id

    purchase = _day_range(purchase_from, purchase_to)
    if purchase:
        match["created_at"] = purchase

    activity = _day_range(activity_from, activity_to)
    if activity:
        match["date"] = activity

    return match


def build_tenant_stage(tenant_id: Optional[str]) -> List[Dict[str, Any]]:
    """
    Tenant restriction as a list of criteria to AND in.

    A booking belongs to a tenant directly or through its tour; older
    bookings may only carry the latter.
    """
    if not tenant_id:
        return []
    return [{"$or": [{"tenant_id": tenant_id}, {"tour.tenant_id": tenant_id}]}]


def resolve_pagination(page_raw: Any, limit_raw: Any) -> Tuple[int, int, int]:
    """(page, limit, skip) with the limit restricted to the allowed sizes."""
    try:
        page = int(page_raw or 1)
    except (TypeError, ValueError):
        page = 1
    page = max(1, page)

    try:
        limit = int(limit_raw)
    except (TypeError, ValueError):
        limit = DEFAULT_PAGE_LIMIT
    if limit not in ALLOWED_PAGE_LIMITS:
        limit = DEFAULT_PAGE_LIMIT

    return page, limit, (page - 1) * limit


def resolve_sort(sort: Optional[str]) -> List[Any]:
    column, direction = SORT_OPTIONS.get(sort or DEFAULT_SORT, SORT_OPTIONS[DEFAULT_SORT])
    return [column.desc() if direction == "desc" else column.asc()]


def combine_criteria(base: Dict[str, Any], tenant_stage: List[Dict[str, Any]]) -> Dict[str, Any]:
    if not tenant_stage:
        return dict(base)
    return {**base, "$and": list(tenant_stage)}
