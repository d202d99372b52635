from datetime import datetime, timezone
import json
import re

import pytest

from tourhub.core.constants import STRIPE_METADATA_CHUNK
from tourhub.core.exceptions import ValidationException
from tourhub.schemas.checkout import CustomerInfo
from tourhub.services.checkout_service import bank_payment_id, join_metadata, split_metadata, validate_customer


class TestCartMetadata:
    def test_small_cart_uses_one_key(self):
        assert split_metadata('[{"t":"x"}]') == {"cart_data": '[{"t":"x"}]'}

    def test_large_cart_is_split_and_rejoined(self):
        payload = json.dumps([{"t": "x" * 40, "d": "2026-05-01"} for _ in range(12)])
        assert STRIPE_METADATA_CHUNK < len(payload) <= 2 * STRIPE_METADATA_CHUNK
        metadata = split_metadata(payload)
        assert set(metadata) == {"cart_data", "cart_data_2"}
        assert all(len(chunk) <= STRIPE_METADATA_CHUNK for chunk in metadata.values())
        assert json.loads(join_metadata(metadata)) == json.loads(payload)

    def test_cart_beyond_two_chunks_is_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            split_metadata("x" * (2 * STRIPE_METADATA_CHUNK + 1))
        assert exc_info.value.code == "CART_TOO_LARGE"

    def test_join_ignores_missing_keys(self):
        assert join_metadata({"cart_data": "[1]"}) == "[1]"


def test_bank_payment_id_format():
    moment = datetime(2026, 5, 1, tzinfo=timezone.utc)
    payment_id = bank_payment_id(moment)
    assert re.fullmatch(rf"BANK-{int(moment.timestamp() * 1000)}-[0-9A-Z]{{6}}", payment_id)


class TestValidateCustomer:
    def test_complete_customer(self):
        validate_customer(CustomerInfo(first_name="Jane", last_name="Doe", email="jane@example.com"))

    def test_missing_last_name(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_customer(CustomerInfo(first_name="Jane", last_name=" ", email="jane@example.com"))
        assert exc_info.value.code == "INCOMPLETE_CUSTOMER"

    def test_bad_email(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_customer(CustomerInfo(first_name="Jane", last_name="Doe", email="jane@example"))
        assert exc_info.value.code == "INVALID_EMAIL"
