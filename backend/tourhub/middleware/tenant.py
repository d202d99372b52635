"""
Tenant resolution middleware.

Detection order:
1. ``?tenant=<id>`` preview parameter (also pins the preview cookie)
2. ``tenant_id`` preview cookie, unless ``?reset_tenant=true``
3. Host name via ``settings.tenant_domains`` (``www.`` and port stripped)
4. ``settings.default_tenant_id``
"""

import logging
import re
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.config import settings
from ..core.constants import TENANT_COOKIE, TENANT_HEADER, TENANT_PREVIEW_PARAM, TENANT_RESET_PARAM

logger = logging.getLogger(__name__)

_TENANT_ID_RE = re.compile(r"^[a-z0-9][a-z0-9_-]{0,63}$")
PREVIEW_COOKIE_MAX_AGE = 60 * 60 * 24


def _clean_tenant_id(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    candidate = value.strip().lower()
    return candidate if _TENANT_ID_RE.match(candidate) else None


def _is_reset(request: Request) -> bool:
    return request.query_params.get(TENANT_RESET_PARAM, "").lower() == "true"


def normalize_host(host: Optional[str]) -> str:
    host = (host or "").strip().lower()
    host = host.split(":", 1)[0]
    if host.startswith("www."):
        host = host[4:]
    return host


def resolve_tenant_id(request: Request) -> str:
    preview = _clean_tenant_id(request.query_params.get(TENANT_PREVIEW_PARAM))
    if preview:
        return preview

    if not _is_reset(request):
        cookie = _clean_tenant_id(request.cookies.get(TENANT_COOKIE))
        if cookie:
            return cookie

    host = normalize_host(request.headers.get("host"))
    mapped = settings.tenant_domains.get(host)
    if mapped:
        return mapped

    return settings.default_tenant_id


def get_request_tenant_id(request: Request) -> str:
    """Tenant resolved by the middleware, resolving on the fly if it did not run."""
    tenant_id = getattr(request.state, "tenant_id", None)
    return tenant_id or resolve_tenant_id(request)


class TenantMiddleware(BaseHTTPMiddleware):
    """Stores the resolved tenant on ``request.state`` and echoes it back."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        tenant_id = resolve_tenant_id(request)
        request.state.tenant_id = tenant_id

        response = await call_next(request)
        response.headers[TENANT_HEADER] = tenant_id

        preview = _clean_tenant_id(request.query_params.get(TENANT_PREVIEW_PARAM))
        if preview:
            response.set_cookie(
                TENANT_COOKIE,
                preview,
                max_age=PREVIEW_COOKIE_MAX_AGE,
                httponly=False,
                samesite="lax",
            )
        elif _is_reset(request):
            response.delete_cookie(TENANT_COOKIE)
        return response
