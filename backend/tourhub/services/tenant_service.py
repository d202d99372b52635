# backend/tourhub/services/tenant_service.py
"""
Tenant configuration and tenant-scoped query helpers.

Query helpers return criteria dictionaries (see ``BaseRepository``), so
the same filters drive tours, offers and bookings.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Mapping, Optional

import pytz
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import DEFAULT_TENANT_ID, SHARED_TENANT_ID, TENANT_PREVIEW_PARAM, TENANT_RESET_PARAM
from ..database import with_db_retry
from ..models.tenant import Tenant
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .cache_service import CacheService

logger = logging.getLogger(__name__)

TENANT_CACHE_PREFIX = "tenant:config:"

DEFAULT_BRANDING = {
    "backgroundColor": "#FFFFFF",
    "textColor": "#1F2937",
    "borderRadius": "8px",
}


# Query builders


def with_tenant_filter(query: Mapping[str, Any], tenant_id: Optional[str]) -> Dict[str, Any]:
    """Add a strict ``tenant_id`` match unless no tenant is given."""
    if not tenant_id:
        return dict(query)
    return {**query, "tenant_id": tenant_id}


def build_tenant_query(
    base: Mapping[str, Any],
    tenant_id: str,
    include_default: bool = True,
    include_shared: bool = False,
) -> Dict[str, Any]:
    """
    Criteria matching the tenant's own rows plus the fallbacks.

    The default tenant's catalogue is visible to every tenant. Shared rows
    (tenant "shared" or no tenant at all) are added with ``include_shared``.
    """
    if not include_default or tenant_id == DEFAULT_TENANT_ID:
        return {**base, "tenant_id": tenant_id}

    candidates: List[Optional[str]] = [tenant_id, DEFAULT_TENANT_ID]
    if include_shared:
        candidates.extend([SHARED_TENANT_ID, None])
    return {**base, "$or": [{"tenant_id": candidate} for candidate in candidates]}


def build_strict_tenant_query(base: Mapping[str, Any], tenant_id: str) -> Dict[str, Any]:
    return {**base, "tenant_id": tenant_id}


# Branding and previews


def generate_css_variables(branding: Optional[Mapping[str, Any]]) -> str:
    """CSS custom properties for a tenant's branding."""
    branding = branding or {}
    font = branding.get("fontFamily") or "Inter"
    heading_font = branding.get("fontFamilyHeading") or font
    return (
        ":root {\n"
        f"  --primary-color: {branding.get('primaryColor', '')};\n"
        f"  --secondary-color: {branding.get('secondaryColor', '')};\n"
        f"  --accent-color: {branding.get('accentColor', '')};\n"
        f"  --background-color: {branding.get('backgroundColor') or DEFAULT_BRANDING['backgroundColor']};\n"
        f"  --text-color: {branding.get('textColor') or DEFAULT_BRANDING['textColor']};\n"
        f"  --font-family: {font}, system-ui, sans-serif;\n"
        f"  --font-family-heading: {heading_font}, system-ui, sans-serif;\n"
        f"  --border-radius: {branding.get('borderRadius') or DEFAULT_BRANDING['borderRadius']};\n"
        "}\n"
    )


def _join_query(path: str, param: str) -> str:
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{param}"


def generate_preview_url(tenant_id: str, path: str = "/", base_url: Optional[str] = None) -> str:
    base = (base_url if base_url is not None else settings.frontend_url).rstrip("/")
    return base + _join_query(path, f"{TENANT_PREVIEW_PARAM}={tenant_id}")


def generate_reset_preview_url(path: str = "/", base_url: Optional[str] = None) -> str:
    base = (base_url if base_url is not None else settings.frontend_url).rstrip("/")
    return base + _join_query(path, f"{TENANT_RESET_PARAM}=true")


def get_default_tenant_config(tenant_id: str, name: str) -> Dict[str, Any]:
    """Starting configuration for a newly created tenant."""
    domain = f"{tenant_id}tours.com"
    return {
        "tenant_id": tenant_id,
        "name": name,
        "domain": domain,
        "domains": [domain, f"www.{domain}"],
        "branding": {
            "logo": "/logo.png",
            "logoAlt": f"{name} Logo",
            "primaryColor": "#E63946",
            "secondaryColor": "#1D3557",
            "accentColor": "#F4A261",
            "backgroundColor": DEFAULT_BRANDING["backgroundColor"],
            "textColor": DEFAULT_BRANDING["textColor"],
            "fontFamily": "Inter",
            "borderRadius": DEFAULT_BRANDING["borderRadius"],
        },
        "seo": {
            "defaultTitle": f"{name} - Tours & Excursions",
            "titleSuffix": name,
            "defaultDescription": f"Discover amazing tours and experiences with {name}. Book your adventure today!",
        },
        "contact": {"email": f"info@{domain}"},
        "features": {"enableBlog": True, "enableReviews": True, "enableWishlist": True},
        "payments": {"currency": "USD", "currencySymbol": "$"},
        "localization": {
            "defaultLanguage": "en",
            "supportedLanguages": ["en", "ar"],
            "defaultTimezone": "Africa/Cairo",
        },
        "is_active": True,
        "is_default": False,
    }


# Access and time


def can_access_tenant(user: User, tenant_id: str) -> bool:
    """Super admins see every tenant; an empty ``tenant_ids`` list means unrestricted."""
    if user.is_super_admin:
        return True
    allowed = list(user.tenant_ids or [])
    return not allowed or tenant_id in allowed


def tenant_local_now(tenant: Optional[Mapping[str, Any]], now: Optional[datetime] = None) -> datetime:
    """Current time in the tenant's default timezone."""
    localization = (tenant or {}).get("localization") or {}
    tz_name = localization.get("defaultTimezone") or "UTC"
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown tenant timezone %s, using UTC", tz_name)
        tz = pytz.utc
    moment = now or datetime.now(pytz.utc)
    return moment.astimezone(tz)


def serialize_tenant(tenant: Tenant) -> Dict[str, Any]:
    return {
        "tenantId": tenant.tenant_id,
        "name": tenant.name,
        "domain": tenant.domain,
        "domains": list(tenant.domains or []),
        "branding": dict(tenant.branding or {}),
        "seo": dict(tenant.seo or {}),
        "contact": dict(tenant.contact or {}),
        "features": dict(tenant.features or {}),
        "payments": dict(tenant.payments or {}),
        "localization": dict(tenant.localization or {}),
        "isActive": bool(tenant.is_active),
        "isDefault": bool(tenant.is_default),
    }


class TenantService(BaseService):
    """Cached tenant configuration lookups."""

    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache if cache is not None else CacheService(db))
        self.repository = RepositoryFactory.create_tenant_repository(db)

    @staticmethod
    def _cache_key(tenant_id: str) -> str:
        return f"{TENANT_CACHE_PREFIX}{tenant_id}"

    @BaseService.measure_operation("get_tenant_config")
    def get_tenant_config(self, tenant_id: str) -> Optional[Dict[str, Any]]:
        """Public tenant configuration, served from cache for five minutes."""
        key = self._cache_key(tenant_id)
        cached = self.cache.get(key) if self.cache else None
        if cached is not None:
            return cached

        tenant = with_db_retry("get_tenant_config", lambda: self.repository.get_active(tenant_id))
        if tenant is None:
            return None

        config = serialize_tenant(tenant)
        if self.cache:
            self.cache.set(key, config, ttl=settings.tenant_cache_ttl_seconds)
        return config

    def get_current_config(self, tenant_id: str) -> Dict[str, Any]:
        """
        Configuration for the resolved tenant.

        Falls back to the default tenant, then to generated defaults, so the
        storefront always has branding to render.
        """
        config = self.get_tenant_config(tenant_id)
        if config is None and tenant_id != settings.default_tenant_id:
            config = self.get_tenant_config(settings.default_tenant_id)
        if config is None:
            defaults = get_default_tenant_config(tenant_id, tenant_id.title())
            config = {
                "tenantId": defaults["tenant_id"],
                "name": defaults["name"],
                "domain": defaults["domain"],
                "domains": defaults["domains"],
                "branding": defaults["branding"],
                "seo": defaults["seo"],
                "contact": defaults["contact"],
                "features": defaults["features"],
                "payments": defaults["payments"],
                "localization": defaults["localization"],
                "isActive": True,
                "isDefault": False,
            }
        return {**config, "cssVariables": generate_css_variables(config.get("branding"))}

    def get_tenant_name(self, tenant_id: str) -> Optional[str]:
        config = self.get_tenant_config(tenant_id)
        return config.get("name") if config else None

    def clear_tenant_cache(self, tenant_id: Optional[str] = None) -> None:
        if not self.cache:
            return
        if tenant_id:
            self.invalidate_cache(self._cache_key(tenant_id))
        else:
            self.cache.delete_pattern(f"{TENANT_CACHE_PREFIX}*")
