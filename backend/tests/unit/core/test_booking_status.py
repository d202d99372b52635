"""Booking status normalization: labels and codes are interchangeable."""

import pytest

from tourhub.core.booking_status import (
    BOOKING_STATUS_CODES,
    BOOKING_STATUS_LABELS,
    BOOKING_STATUSES_DB,
    BookingStatus,
    to_booking_status_code,
    to_booking_status_db,
)


class TestToBookingStatusCode:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Confirmed", "confirmed"),
            ("  PENDING ", "pending"),
            ("Partial Refunded", "partial_refunded"),
            ("partial-refunded", "partial_refunded"),
            ("partial   refunded", "partial_refunded"),
            ("cancelled", "cancelled"),
        ],
    )
    def test_known_values(self, raw, expected):
        assert to_booking_status_code(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "archived", 3])
    def test_unknown_values_are_none(self, raw):
        assert to_booking_status_code(raw) is None


class TestToBookingStatusDb:
    def test_code_maps_to_label(self):
        assert to_booking_status_db("partial_refunded") == BookingStatus.PARTIAL_REFUNDED.value

    def test_label_is_unchanged(self):
        assert to_booking_status_db("Refunded") == "Refunded"

    def test_unknown_is_none(self):
        assert to_booking_status_db("lost") is None


def test_db_statuses_hold_labels_and_codes():
    assert set(BOOKING_STATUSES_DB) == set(BOOKING_STATUS_LABELS) | set(BOOKING_STATUS_CODES)
    assert len(BOOKING_STATUS_LABELS) == len(BOOKING_STATUS_CODES) == 6
