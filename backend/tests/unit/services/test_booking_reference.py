import re
from unittest.mock import patch

from tourhub.services.booking_reference import generate_booking_reference, random_base36, reference_prefix

SHORT_REFERENCE = re.compile(r"^[A-Z0-9]{1,4}-\d{8}-[0-9A-Z]{6}$")


class TestReferencePrefix:
    def test_initials_of_tenant_name(self):
        assert reference_prefix("sunrise-tours", "Sunrise Travel") == "ST"
        assert reference_prefix("x", "Grand Blue Nile Cruise Company") == "GBNC"

    def test_tenant_id_without_name(self):
        assert reference_prefix("nile-co", None) == "NILE"

    def test_fallback(self):
        assert reference_prefix(None, None) == "BKG"
        assert reference_prefix("---", None) == "BKG"


def test_random_base36_alphabet():
    value = random_base36(32)
    assert len(value) == 32
    assert re.fullmatch(r"[0-9A-Z]+", value)


class TestGenerateBookingReference:
    def test_first_candidate_is_used(self):
        reference = generate_booking_reference("default", "Default Tours", exists=lambda _: False)
        assert SHORT_REFERENCE.match(reference)
        assert reference.startswith("DT-")

    def test_retries_on_collision(self):
        seen = []

        def exists(candidate):
            seen.append(candidate)
            return len(seen) < 3

        with patch("tourhub.services.booking_reference.time.sleep") as sleep:
            reference = generate_booking_reference("default", "Default Tours", exists=exists)
        assert reference == seen[-1]
        assert len(seen) == 3
        assert sleep.call_count == 2

    def test_long_fallback_after_max_attempts(self):
        with patch("tourhub.services.booking_reference.time.sleep"):
            reference = generate_booking_reference("acme", None, exists=lambda _: True, max_attempts=2)
        prefix, millis, suffix = reference.split("-")
        assert prefix == "ACME"
        assert len(millis) >= 13
        assert len(suffix) == 10
