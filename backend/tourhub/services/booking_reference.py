"""
Human friendly booking references.

Format: ``PREFIX-<last 8 digits of epoch ms>-<6 base36 chars>``, e.g.
``ST-84120934-K3Z9QA``. The prefix comes from the tenant name initials,
else from the tenant id, else ``BKG``.
"""

import logging
import secrets
import string
import time
from typing import Callable, Optional

from ..core.constants import BOOKING_REFERENCE_FALLBACK_PREFIX, BOOKING_REFERENCE_MAX_ATTEMPTS

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_uppercase
RETRY_DELAY_SECONDS = 0.05


def reference_prefix(tenant_id: Optional[str], tenant_name: Optional[str] = None) -> str:
    if tenant_name:
        initials = "".join(word[0].upper() for word in tenant_name.split(" ") if word)
        return initials[:4] or BOOKING_REFERENCE_FALLBACK_PREFIX
    if tenant_id:
        return tenant_id.replace("-", "")[:4].upper() or BOOKING_REFERENCE_FALLBACK_PREFIX
    return BOOKING_REFERENCE_FALLBACK_PREFIX


def random_base36(length: int) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def generate_booking_reference(
    tenant_id: str,
    tenant_name: Optional[str] = None,
    *,
    exists: Callable[[str], bool],
    max_attempts: int = BOOKING_REFERENCE_MAX_ATTEMPTS,
) -> str:
    """
    Reference unique within the tenant.

    ``exists`` is asked about each candidate; after ``max_attempts``
    collisions a longer reference using the full timestamp is returned.
    """
    prefix = reference_prefix(tenant_id, tenant_name)
    for attempt in range(max_attempts):
        candidate = f"{prefix}-{str(_epoch_ms())[-8:]}-{random_base36(6)}"
        if not exists(candidate):
            return candidate
        logger.info("Booking reference collision for tenant %s (attempt %d)", tenant_id, attempt + 1)
        time.sleep(RETRY_DELAY_SECONDS)

    logger.warning("Falling back to long booking reference for tenant %s", tenant_id)
    return f"{prefix}-{_epoch_ms()}-{random_base36(10)}"
