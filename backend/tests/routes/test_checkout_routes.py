# backend/tests/routes/test_checkout_routes.py
"""
Checkout and payment-intent endpoints.

Stripe is never called: ``stripe.PaymentIntent`` methods are patched and
the recomputed total for two standard adults is 216.00 (21600 cents).
"""

from types import SimpleNamespace
from unittest.mock import patch

from tourhub.core.booking_status import BookingStatus
from tourhub.models.booking import Booking

from tests.factories.builders import create_tenant

CUSTOMER = {"firstName": "Jane", "lastName": "Doe", "email": "jane@example.com"}


def _payload(tour, **overrides):
    payload = {
        "customer": CUSTOMER,
        "cart": [
            {
                "tourId": tour.id,
                "selectedDate": "2026-12-01",
                "quantity": 2,
                "selectedBookingOption": {"id": "opt-standard"},
                # Client prices are ignored
                "totalPrice": 1.0,
            }
        ],
        "paymentMethod": "bank",
    }
    payload.update(overrides)
    return payload


class TestCheckout:
    def test_bank_transfer(self, client, db, test_tour):
        response = client.post("/api/v1/checkout", json=_payload(test_tour))

        assert response.status_code == 201
        data = response.json()
        assert data["paymentId"].startswith("BANK-")
        assert data["guestAccount"] is True
        assert data["pricing"]["total"] == 216.0
        assert db.query(Booking).one().status == BookingStatus.PENDING.value

    def test_signed_in_customer(self, client, db, test_tour, test_customer, auth_headers_customer):
        response = client.post("/api/v1/checkout", json=_payload(test_tour), headers=auth_headers_customer)

        assert response.status_code == 201
        assert response.json()["guestAccount"] is False
        assert db.query(Booking).one().user_id == test_customer.id

    @patch("stripe.PaymentIntent.retrieve")
    def test_card_payment(self, mock_retrieve, client, db, test_tour):
        mock_retrieve.return_value = SimpleNamespace(id="pi_card", status="succeeded", amount=21600)
        payload = _payload(test_tour, paymentMethod="card", paymentDetails={"paymentIntentId": "pi_card"})

        response = client.post("/api/v1/checkout", json=payload)

        assert response.status_code == 201
        assert response.json()["paymentId"] == "pi_card"
        assert db.query(Booking).one().status == BookingStatus.CONFIRMED.value

    @patch("stripe.PaymentIntent.retrieve")
    def test_card_amount_mismatch_is_402(self, mock_retrieve, client, db, test_tour):
        mock_retrieve.return_value = SimpleNamespace(id="pi_card", status="succeeded", amount=500)
        payload = _payload(test_tour, paymentMethod="card", paymentDetails={"paymentIntentId": "pi_card"})

        response = client.post("/api/v1/checkout", json=payload)

        assert response.status_code == 402
        assert response.json()["code"] == "PAYMENT_VERIFICATION_FAILED"
        assert db.query(Booking).count() == 0

    def test_invalid_email(self, client, test_tour):
        customer = {**CUSTOMER, "email": "not-an-email"}
        response = client.post("/api/v1/checkout", json=_payload(test_tour, customer=customer))
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_EMAIL"

    def test_unavailable_tour(self, client, test_tour):
        payload = _payload(test_tour)
        payload["cart"][0]["tourId"] = "01HZY3K9QW8V7T6S5R4P3N2M1K"
        response = client.post("/api/v1/checkout", json=payload)
        assert response.status_code == 404
        assert response.json()["code"] == "TOUR_UNAVAILABLE"

    def test_bookings_belong_to_request_tenant(self, client, db, test_tour):
        create_tenant(db, "acme", "Acme Adventures")
        response = client.post("/api/v1/checkout?tenant=acme", json=_payload(test_tour))

        assert response.status_code == 201
        booking = db.query(Booking).one()
        assert booking.tenant_id == "acme"
        assert booking.booking_reference.startswith("AA-")


@patch("stripe.PaymentIntent.create")
def test_payment_intent(mock_create, client, test_tour):
    mock_create.return_value = SimpleNamespace(id="pi_new", client_secret="pi_new_secret_abc")
    payload = _payload(test_tour)
    payload.pop("paymentMethod")

    response = client.post("/api/v1/checkout/payment-intent", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data == {
        "clientSecret": "pi_new_secret_abc",
        "paymentIntentId": "pi_new",
        "pricing": {
            "subtotal": 200.0,
            "serviceFee": 6.0,
            "tax": 10.0,
            "discount": 0.0,
            "total": 216.0,
            "currency": "USD",
        },
    }
    assert mock_create.call_args.kwargs["metadata"]["tenant_id"] == "default"
