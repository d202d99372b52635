"""Special offer rules over plain offer objects."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from tourhub.core.enums import OfferType
from tourhub.services.offers.calculations import (
    DEFAULT_BADGE_COLOR,
    calculate_discounted_price,
    days_between,
    format_offer_time_remaining,
    get_best_offer,
    get_offer_badge_color,
    get_offer_display_text,
    is_offer_applicable_by_travel_date,
    is_offer_applicable_to_tour,
    is_offer_valid,
    should_show_urgency,
)

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def _make_offer(**overrides) -> SimpleNamespace:
    values = {
        "id": "offer-1",
        "type": OfferType.PERCENTAGE.value,
        "discount_value": 10,
        "is_active": True,
        "start_date": NOW - timedelta(days=1),
        "end_date": NOW + timedelta(days=30),
        "travel_start_date": None,
        "travel_end_date": None,
        "usage_limit": None,
        "used_count": 0,
        "min_booking_value": None,
        "max_discount": None,
        "min_days_in_advance": None,
        "max_days_before_tour": None,
        "min_group_size": None,
        "applicable_tours": [],
        "excluded_tours": [],
        "tour_option_selections": [],
        "priority": 0,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestValidity:
    def test_active_offer_in_window(self):
        assert is_offer_valid(_make_offer(), NOW)

    def test_inactive(self):
        assert not is_offer_valid(_make_offer(is_active=False), NOW)

    def test_outside_booking_window(self):
        assert not is_offer_valid(_make_offer(start_date=NOW + timedelta(hours=1)), NOW)
        assert not is_offer_valid(_make_offer(end_date=NOW - timedelta(seconds=1)), NOW)

    def test_usage_limit_reached(self):
        assert not is_offer_valid(_make_offer(usage_limit=5, used_count=5), NOW)
        assert is_offer_valid(_make_offer(usage_limit=5, used_count=4), NOW)

    def test_naive_window_is_utc(self):
        offer = _make_offer(start_date=datetime(2026, 4, 1), end_date=datetime(2026, 6, 1))
        assert is_offer_valid(offer, NOW)


class TestTargeting:
    def test_empty_list_applies_everywhere(self):
        assert is_offer_applicable_to_tour(_make_offer(), "tour-a")

    def test_excluded_tour(self):
        assert not is_offer_applicable_to_tour(_make_offer(excluded_tours=["tour-a"]), "tour-a")

    def test_listed_tours_only(self):
        offer = _make_offer(applicable_tours=["tour-a"])
        assert is_offer_applicable_to_tour(offer, "tour-a")
        assert not is_offer_applicable_to_tour(offer, "tour-b")

    def test_option_selection(self):
        offer = _make_offer(
            applicable_tours=["tour-a"],
            tour_option_selections=[{"tourId": "tour-a", "allOptions": False, "selectedOptions": ["private"]}],
        )
        assert is_offer_applicable_to_tour(offer, "tour-a", "private")
        assert not is_offer_applicable_to_tour(offer, "tour-a", "standard")
        # Without an option type the tour-level match is enough
        assert is_offer_applicable_to_tour(offer, "tour-a")

    def test_all_options_selection(self):
        offer = _make_offer(
            applicable_tours=["tour-a"],
            tour_option_selections=[{"tourId": "tour-a", "allOptions": True, "selectedOptions": ["private"]}],
        )
        assert is_offer_applicable_to_tour(offer, "tour-a", "standard")

    def test_travel_window(self):
        offer = _make_offer(travel_start_date=NOW + timedelta(days=10), travel_end_date=NOW + timedelta(days=20))
        assert is_offer_applicable_by_travel_date(offer, None)
        assert is_offer_applicable_by_travel_date(offer, NOW + timedelta(days=15))
        assert not is_offer_applicable_by_travel_date(offer, NOW + timedelta(days=5))
        assert not is_offer_applicable_by_travel_date(offer, NOW + timedelta(days=25))


class TestCalculateDiscountedPrice:
    def test_percentage(self):
        result = calculate_discounted_price(200.0, _make_offer(), booking_date=NOW)
        assert result.is_applicable
        assert result.discount_amount == 20.0
        assert result.discounted_price == 180.0
        assert result.discount_percentage == 10

    def test_fixed_never_exceeds_price(self):
        offer = _make_offer(type=OfferType.FIXED.value, discount_value=50)
        assert calculate_discounted_price(30.0, offer, booking_date=NOW).discounted_price == 0.0
        assert calculate_discounted_price(120.0, offer, booking_date=NOW).discount_amount == 50.0

    def test_max_discount_cap(self):
        offer = _make_offer(discount_value=50, max_discount=30)
        result = calculate_discounted_price(200.0, offer, booking_date=NOW)
        assert result.discount_amount == 30.0
        assert result.discount_percentage == 15

    def test_minimum_booking_value(self):
        offer = _make_offer(min_booking_value=100)
        result = calculate_discounted_price(99.0, offer, booking_date=NOW)
        assert not result.is_applicable
        assert result.reason == "Minimum booking value of $100 required"
        assert result.discounted_price == 99.0

    def test_inactive_offer_reason(self):
        result = calculate_discounted_price(100.0, _make_offer(is_active=False), booking_date=NOW)
        assert result.reason == "Offer is not currently active"

    def test_travel_date_outside_window(self):
        offer = _make_offer(travel_end_date=NOW + timedelta(days=2))
        result = calculate_discounted_price(100.0, offer, travel_date=NOW + timedelta(days=9), booking_date=NOW)
        assert result.reason == "Offer not valid for selected travel date"

    def test_early_bird(self):
        offer = _make_offer(type=OfferType.EARLY_BIRD.value, min_days_in_advance=14)
        far = calculate_discounted_price(100.0, offer, travel_date=NOW + timedelta(days=20), booking_date=NOW)
        near = calculate_discounted_price(100.0, offer, travel_date=NOW + timedelta(days=5), booking_date=NOW)
        missing = calculate_discounted_price(100.0, offer, booking_date=NOW)
        assert far.is_applicable and far.discount_amount == 10.0
        assert near.reason == "Book at least 14 days in advance to qualify"
        assert missing.reason == "Travel date required for early bird discount"

    def test_last_minute(self):
        offer = _make_offer(type=OfferType.LAST_MINUTE.value, discount_value=20)
        soon = calculate_discounted_price(100.0, offer, travel_date=NOW + timedelta(days=1), booking_date=NOW)
        later = calculate_discounted_price(100.0, offer, travel_date=NOW + timedelta(days=5), booking_date=NOW)
        assert soon.is_applicable and soon.discounted_price == 80.0
        assert later.reason == "Only valid when booking within 2 days of tour"

    def test_group(self):
        offer = _make_offer(type=OfferType.GROUP.value, min_group_size=4)
        assert calculate_discounted_price(100.0, offer, group_size=4, booking_date=NOW).is_applicable
        small = calculate_discounted_price(100.0, offer, group_size=3, booking_date=NOW)
        assert small.reason == "Minimum group size of 4 required"

    def test_promo_code_applies_with_hint(self):
        offer = _make_offer(type=OfferType.PROMO_CODE.value)
        result = calculate_discounted_price(100.0, offer, booking_date=NOW)
        assert result.is_applicable
        assert result.reason == "Enter promo code at checkout"

    def test_unknown_type(self):
        result = calculate_discounted_price(100.0, _make_offer(type="mystery"), booking_date=NOW)
        assert not result.is_applicable
        assert result.reason == "Unknown offer type"

    def test_to_dict(self):
        payload = calculate_discounted_price(100.0, _make_offer(), booking_date=NOW).to_dict({"id": "offer-1"})
        assert payload["discountedPrice"] == 90.0
        assert payload["offer"] == {"id": "offer-1"}
        assert "reason" not in payload


class TestBestOffer:
    def test_largest_discount_wins(self):
        small = _make_offer(id="small", discount_value=10, priority=5)
        large = _make_offer(id="large", discount_value=25, priority=1)
        best = get_best_offer([small, large], 100.0, now=NOW)
        assert best.offer.id == "large"

    def test_tie_keeps_higher_priority(self):
        first = _make_offer(id="first", priority=1)
        second = _make_offer(id="second", priority=9)
        assert get_best_offer([first, second], 100.0, now=NOW).offer.id == "second"

    def test_promo_codes_never_win(self):
        promo = _make_offer(type=OfferType.PROMO_CODE.value, discount_value=90)
        assert get_best_offer([promo], 100.0, now=NOW) is None

    def test_no_offers(self):
        assert get_best_offer([], 100.0, now=NOW) is None


class TestDisplay:
    @pytest.mark.parametrize(
        "offer_type,value,expected",
        [
            (OfferType.PERCENTAGE.value, 15, "15% OFF"),
            (OfferType.FIXED.value, 20, "$20 OFF"),
            (OfferType.EARLY_BIRD.value, 12.5, "EARLY BIRD 12.5% OFF"),
            (OfferType.PROMO_CODE.value, 10, "USE CODE"),
            ("mystery", 10, "SPECIAL OFFER"),
        ],
    )
    def test_display_text(self, offer_type, value, expected):
        assert get_offer_display_text(_make_offer(type=offer_type, discount_value=value)) == expected

    def test_badge_color_fallback(self):
        assert get_offer_badge_color(None) == DEFAULT_BADGE_COLOR
        assert get_offer_badge_color(OfferType.GROUP.value)["bg"] == "bg-blue-500"

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(days=-1), "Expired"),
            (timedelta(days=65), "2 months left"),
            (timedelta(days=1, hours=2), "1 day left"),
            (timedelta(days=3), "3 days left"),
            (timedelta(hours=5), "5 hours left"),
            (timedelta(minutes=20), "Ends soon"),
        ],
    )
    def test_time_remaining(self, delta, expected):
        assert format_offer_time_remaining(NOW + delta, NOW) == expected

    def test_urgency_within_a_week(self):
        assert should_show_urgency(NOW + timedelta(days=3), NOW)
        assert not should_show_urgency(NOW + timedelta(days=9), NOW)
        assert not should_show_urgency(NOW - timedelta(days=1), NOW)


def test_days_between_rounds_to_nearest_day():
    assert days_between(NOW, NOW + timedelta(days=2, hours=12)) == 3
    assert days_between(NOW + timedelta(days=2, hours=11), NOW) == 2
