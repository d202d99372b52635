from datetime import datetime, timezone

from tourhub.core.enums import AdminRole
from tourhub.models.user import User
from tourhub.services.tenant_service import (
    build_strict_tenant_query,
    build_tenant_query,
    can_access_tenant,
    generate_css_variables,
    generate_preview_url,
    generate_reset_preview_url,
    get_default_tenant_config,
    tenant_local_now,
    with_tenant_filter,
)


class TestQueryBuilders:
    def test_with_tenant_filter(self):
        assert with_tenant_filter({"is_published": True}, "acme") == {"is_published": True, "tenant_id": "acme"}
        assert with_tenant_filter({"is_published": True}, None) == {"is_published": True}

    def test_tenant_query_includes_default_catalogue(self):
        query = build_tenant_query({"is_published": True}, "acme")
        assert query["is_published"] is True
        assert query["$or"] == [{"tenant_id": "acme"}, {"tenant_id": "default"}]

    def test_tenant_query_with_shared_rows(self):
        query = build_tenant_query({}, "acme", include_shared=True)
        assert query["$or"] == [
            {"tenant_id": "acme"},
            {"tenant_id": "default"},
            {"tenant_id": "shared"},
            {"tenant_id": None},
        ]

    def test_default_tenant_is_strict(self):
        assert build_tenant_query({}, "default") == {"tenant_id": "default"}
        assert build_tenant_query({}, "acme", include_default=False) == {"tenant_id": "acme"}

    def test_strict_query(self):
        assert build_strict_tenant_query({"a": 1}, "acme") == {"a": 1, "tenant_id": "acme"}


class TestBrandingHelpers:
    def test_css_variables_fall_back_to_defaults(self):
        css = generate_css_variables({"primaryColor": "#112233", "fontFamily": "Lato"})
        assert "--primary-color: #112233;" in css
        assert "--background-color: #FFFFFF;" in css
        assert "--font-family: Lato, system-ui, sans-serif;" in css
        assert "--font-family-heading: Lato, system-ui, sans-serif;" in css
        assert css.startswith(":root {")

    def test_preview_urls(self):
        assert generate_preview_url("acme", "/tours", base_url="https://shop.test/") == "https://shop.test/tours?tenant=acme"
        assert generate_preview_url("acme", "/tours?page=2", base_url="https://shop.test") == (
            "https://shop.test/tours?page=2&tenant=acme"
        )
        assert generate_reset_preview_url(base_url="https://shop.test") == "https://shop.test/?reset_tenant=true"

    def test_default_config(self):
        config = get_default_tenant_config("acme", "Acme Travel")
        assert config["domain"] == "acmetours.com"
        assert config["domains"] == ["acmetours.com", "www.acmetours.com"]
        assert config["seo"]["titleSuffix"] == "Acme Travel"
        assert config["contact"]["email"] == "info@acmetours.com"


class TestAccess:
    def test_super_admin_sees_everything(self):
        user = User(role=AdminRole.SUPER_ADMIN.value, tenant_ids=["other"])
        assert can_access_tenant(user, "acme")

    def test_empty_list_is_unrestricted(self):
        assert can_access_tenant(User(role=AdminRole.ADMIN.value, tenant_ids=[]), "acme")

    def test_restricted_admin(self):
        user = User(role=AdminRole.ADMIN.value, tenant_ids=["acme"])
        assert can_access_tenant(user, "acme")
        assert not can_access_tenant(user, "globex")


class TestTenantLocalNow:
    def test_converts_to_tenant_timezone(self):
        moment = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
        local = tenant_local_now({"localization": {"defaultTimezone": "Asia/Tokyo"}}, moment)
        assert local.hour == 21

    def test_unknown_timezone_is_utc(self):
        moment = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
        assert tenant_local_now({"localization": {"defaultTimezone": "Mars/Base"}}, moment).hour == 12
        assert tenant_local_now(None, moment).hour == 12
