"""ULID validation helpers."""

from typing import Optional

import ulid


def parse_ulid(ulid_str: str) -> Optional[ulid.ULID]:
    """Parse and validate a ULID string."""
    if not isinstance(ulid_str, str) or len(ulid_str) != 26:
        return None
    try:
        return ulid.ULID.from_str(ulid_str.upper())
    except (ValueError, TypeError):
        return None


def is_valid_ulid(ulid_str: str) -> bool:
    """Check if a string is a valid ULID."""
    return parse_ulid(ulid_str) is not None
