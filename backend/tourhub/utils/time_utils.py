from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
import re
from typing import Optional

_DATE_ONLY = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes.

    SQLite hands back naive values even for timezone-aware columns; every
    timestamp we write is UTC, so a naive value read back is UTC too.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ensure_date_only_string(value: object) -> Optional[str]:
    """Return the leading YYYY-MM-DD of a string, or None when absent."""
    match = _DATE_ONLY.match(str(value or "").strip())
    if not match:
        return None
    return f"{match.group(1)}-{match.group(2)}-{match.group(3)}"


def parse_date_only(value: object) -> Optional[date]:
    """Parse the leading YYYY-MM-DD of a string into a date."""
    text = ensure_date_only_string(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def utc_midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def utc_end_of_day(day: date) -> datetime:
    """23:59:59.999 UTC on the given day."""
    return datetime.combine(day, time(23, 59, 59, 999000), tzinfo=timezone.utc)


def iter_days(start: date, end: date):
    """Yield each day from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    first = date(year, month, 1)
    if month == 12:
        last = date(year + 1, 1, 1) - timedelta(days=1)
    else:
        last = date(year, month + 1, 1) - timedelta(days=1)
    return first, last


def parse_datetime_param(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO date or datetime from a query string.

    Date-only values mean UTC midnight; naive datetimes are taken as UTC.
    Returns None for empty or malformed input.
    """
    if not value:
        return None
    text = value.strip()
    try:
        if len(text) == 10:
            return utc_midnight(date.fromisoformat(text))
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_utc(parsed)
