import json
from unittest.mock import patch

import stripe

from tourhub.core.booking_status import BookingStatus

from tests.factories.builders import create_booking

WEBHOOK_URL = "/api/v1/webhooks/stripe"


def _post_event(client, event, signature="t=1,v1=signed"):
    return client.post(
        WEBHOOK_URL,
        content=json.dumps(event),
        headers={"stripe-signature": signature, "content-type": "application/json"},
    )


def test_missing_signature_is_rejected(client, db):
    response = client.post(WEBHOOK_URL, content=b"{}")
    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_SIGNATURE"


@patch("stripe.Webhook.construct_event")
def test_bad_signature_is_rejected(mock_construct, client, db):
    mock_construct.side_effect = stripe.SignatureVerificationError("bad", "t=1,v1=forged")
    response = _post_event(client, {"type": "payment_intent.succeeded"}, signature="t=1,v1=forged")
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_SIGNATURE"


@patch("stripe.Webhook.construct_event")
def test_succeeded_payment_confirms_pending_booking(mock_construct, client, db, test_tour, test_customer):
    booking = create_booking(db, test_tour, test_customer, payment_id="pi_hook", status=BookingStatus.PENDING.value)
    event = {
        "type": "payment_intent.succeeded",
        "data": {"object": {"id": "pi_hook", "metadata": {"has_booking_data": "true"}}},
    }

    response = _post_event(client, event)

    assert response.status_code == 200
    assert response.json() == {
        "received": True,
        "outcome": {"created": False, "reason": "updated_to_confirmed", "bookingId": booking.id},
    }
    db.refresh(booking)
    assert booking.status == BookingStatus.CONFIRMED.value


@patch("stripe.Webhook.construct_event")
def test_refund_event(mock_construct, client, db, test_booking):
    test_booking.payment_id = "pi_refund"
    db.commit()
    event = {
        "type": "charge.refunded",
        "data": {"object": {"payment_intent": "pi_refund", "amount": 21600, "amount_refunded": 21600}},
    }

    response = _post_event(client, event)

    assert response.status_code == 200
    db.refresh(test_booking)
    assert test_booking.status == BookingStatus.REFUNDED.value


@patch("stripe.Webhook.construct_event")
def test_unhandled_events_still_acknowledged(mock_construct, client, db):
    response = _post_event(client, {"type": "invoice.paid", "data": {"object": {}}})
    assert response.status_code == 200
    assert response.json()["outcome"]["reason"] == "ignored"
