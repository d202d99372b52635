from datetime import datetime, timedelta, timezone

from tourhub.auth import USER_SCOPE, create_access_token
from tourhub.core.booking_status import BookingStatus

from tests.factories.builders import create_booking, create_tenant, create_tour, create_user


class TestVerifyReference:
    def test_public_lookup(self, client, test_booking):
        response = client.get("/api/v1/bookings/verify/DT-12345678-ABC123")

        assert response.status_code == 200
        data = response.json()
        assert data["bookingReference"] == "DT-12345678-ABC123"
        assert data["customerName"] == "Test User"
        assert data["guestBreakdown"] == "2 adults"
        assert data["tour"]["title"] == "Pyramids Sunrise Tour"

    def test_unknown_reference(self, client, test_tenant):
        response = client.get("/api/v1/bookings/verify/DT-00000000-NOPE00")
        assert response.status_code == 404
        assert response.json()["status"] == 404

    def test_same_reference_on_two_brands(self, client, db, test_booking, test_customer):
        create_tenant(db, "acme", "Acme Adventures")
        acme_tour = create_tour(db, "acme", title="Acme Dunes")
        create_booking(db, acme_tour, test_customer, booking_reference="DT-12345678-ABC123", total_price=99.0)

        default = client.get("/api/v1/bookings/verify/DT-12345678-ABC123")
        acme = client.get("/api/v1/bookings/verify/DT-12345678-ABC123?tenant=acme")

        assert default.json()["totalPrice"] == 216.0
        assert acme.json()["totalPrice"] == 99.0
        assert acme.json()["tour"]["title"] == "Acme Dunes"

    def test_brand_sees_default_tenant_bookings(self, client, db, test_booking):
        create_tenant(db, "acme", "Acme Adventures")
        response = client.get("/api/v1/bookings/verify/DT-12345678-ABC123?tenant=acme")
        assert response.status_code == 200
        assert response.json()["totalPrice"] == 216.0


class TestOwnerAccess:
    def test_owner_reads_booking(self, client, test_booking, auth_headers_customer):
        response = client.get(f"/api/v1/bookings/{test_booking.id}", headers=auth_headers_customer)
        assert response.status_code == 200
        assert response.json()["totalPrice"] == 216.0

    def test_other_user_gets_403(self, client, db, test_booking):
        stranger = create_user(db, email="stranger@example.com")
        headers = {"Authorization": f"Bearer {create_access_token(stranger, USER_SCOPE)}"}

        response = client.get(f"/api/v1/bookings/{test_booking.id}", headers=headers)
        assert response.status_code == 403

    def test_anonymous_gets_401(self, client, test_booking):
        assert client.get(f"/api/v1/bookings/{test_booking.id}").status_code == 401


class TestCancel:
    def test_cancel_far_ahead_refunds_in_full(self, client, test_booking, auth_headers_customer):
        response = client.post(
            f"/api/v1/bookings/{test_booking.id}/cancel",
            json={"reason": "Change of plans"},
            headers=auth_headers_customer,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["refundPercentage"] == 100
        assert data["refundAmount"] == 216.0
        assert data["booking"]["status"] == BookingStatus.CANCELLED.value

    def test_cancel_without_body(self, client, db, test_tour, test_customer, auth_headers_customer):
        soon = datetime.now(timezone.utc) + timedelta(hours=30)
        booking = create_booking(db, test_tour, test_customer, date=soon)

        response = client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=auth_headers_customer)

        assert response.status_code == 200
        assert response.json()["refundPercentage"] == 0

    def test_cancel_twice(self, client, test_booking, auth_headers_customer):
        url = f"/api/v1/bookings/{test_booking.id}/cancel"
        assert client.post(url, headers=auth_headers_customer).status_code == 200

        response = client.post(url, headers=auth_headers_customer)
        assert response.status_code == 400
        assert response.json()["code"] == "BOOKING_ALREADY_CANCELLED"
