from datetime import datetime, timezone

import pytest

from tourhub.services.admin_booking_filters import (
    build_base_match,
    build_tenant_stage,
    combine_criteria,
    resolve_effective_tenant_id,
    resolve_pagination,
    resolve_sort,
)

VALID_ULID = "01HZY3K9QW8V7T6S5R4P3N2M1K"


class TestEffectiveTenant:
    @pytest.mark.parametrize("raw", [None, "", "   ", "all"])
    def test_every_tenant(self, raw):
        assert resolve_effective_tenant_id(raw) is None

    def test_specific_tenant_is_trimmed(self):
        assert resolve_effective_tenant_id(" acme ") == "acme"


class TestBaseMatch:
    def test_empty_filters(self):
        assert build_base_match() == {}

    def test_status_code_becomes_label(self):
        assert build_base_match(status="partial_refunded") == {"status": "Partial Refunded"}

    def test_status_all_is_ignored(self):
        assert build_base_match(status="all") == {}

    def test_unknown_status_is_kept_verbatim(self):
        assert build_base_match(status="Archived") == {"status": "Archived"}

    def test_tour_id_must_be_a_ulid(self):
        assert build_base_match(tour_id=VALID_ULID) == {"tour_id": VALID_ULID}
        assert build_base_match(tour_id="not-a-ulid") == {}

    def test_purchase_range_covers_whole_days(self):
        match = build_base_match(purchase_from="2026-05-01", purchase_to="2026-05-31")
        assert match["created_at"]["$gte"] == datetime(2026, 5, 1, tzinfo=timezone.utc)
        assert match["created_at"]["$lte"] == datetime(2026, 5, 31, 23, 59, 59, 999000, tzinfo=timezone.utc)

    def test_malformed_dates_are_dropped(self):
        match = build_base_match(activity_from="05/01/2026", activity_to="2026-05-03")
        assert set(match["date"]) == {"$lte"}
        assert "created_at" not in match


class TestTenantStage:
    def test_no_tenant(self):
        assert build_tenant_stage(None) == []

    def test_matches_booking_or_tour_tenant(self):
        assert build_tenant_stage("acme") == [{"$or": [{"tenant_id": "acme"}, {"tour.tenant_id": "acme"}]}]

    def test_combine(self):
        base = {"status": "Confirmed"}
        combined = combine_criteria(base, build_tenant_stage("acme"))
        assert combined["status"] == "Confirmed"
        assert combined["$and"][0]["$or"][0] == {"tenant_id": "acme"}
        assert combine_criteria(base, []) == base


class TestPagination:
    @pytest.mark.parametrize(
        "page,limit,expected",
        [
            (None, None, (1, 10, 0)),
            ("3", "20", (3, 20, 40)),
            ("0", "50", (1, 50, 0)),
            ("-4", "10", (1, 10, 0)),
            ("abc", "25", (1, 10, 0)),
            ("2", "1000", (2, 10, 10)),
        ],
    )
    def test_resolve(self, page, limit, expected):
        assert resolve_pagination(page, limit) == expected


class TestSort:
    def test_default_is_newest_purchase_first(self):
        (clause,) = resolve_sort(None)
        assert "created_at" in str(clause)
        assert "DESC" in str(clause)

    def test_activity_ascending(self):
        (clause,) = resolve_sort("activityDate_asc")
        assert "bookings.date" in str(clause)
        assert "ASC" in str(clause)

    def test_unknown_sort_falls_back(self):
        assert str(resolve_sort("price_desc")[0]) == str(resolve_sort("createdAt_desc")[0])
