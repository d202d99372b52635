from tests.factories.builders import TEST_PASSWORD, create_user


def _signup(client, **overrides):
    payload = {
        "email": "New@Example.com",
        "password": "SecurePass123",
        "firstName": "New",
        "lastName": "Traveller",
    }
    payload.update(overrides)
    return client.post("/api/v1/auth/signup", json=payload)


class TestSignup:
    def test_creates_customer(self, client, db):
        response = _signup(client)

        assert response.status_code == 201
        data = response.json()
        assert data["accessToken"]
        assert data["tokenType"] == "bearer"
        assert data["user"]["email"] == "new@example.com"
        assert data["user"]["role"] == "customer"

    def test_duplicate_email(self, client, test_customer):
        response = _signup(client, email="customer@example.com")
        assert response.status_code == 409
        assert response.json()["code"] == "EMAIL_TAKEN"

    def test_claims_guest_account(self, client, db):
        guest = create_user(db, email="guest@example.com", hashed_password=None)

        response = _signup(client, email="guest@example.com")

        assert response.status_code == 201
        assert response.json()["user"]["id"] == guest.id

    def test_short_password(self, client, db):
        response = _signup(client, password="short")
        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"


class TestLogin:
    def test_login_and_use_token(self, client, test_customer, test_booking):
        response = client.post(
            "/api/v1/auth/login", json={"email": "customer@example.com", "password": TEST_PASSWORD}
        )
        assert response.status_code == 200
        token = response.json()["accessToken"]

        bookings = client.get("/api/v1/user/bookings", headers={"Authorization": f"Bearer {token}"})
        assert bookings.status_code == 200
        assert [b["bookingReference"] for b in bookings.json()] == ["DT-12345678-ABC123"]

    def test_wrong_password(self, client, test_customer):
        response = client.post("/api/v1/auth/login", json={"email": "customer@example.com", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_guest_account_cannot_log_in(self, client, db):
        create_user(db, email="guest@example.com", hashed_password=None)
        response = client.post("/api/v1/auth/login", json={"email": "guest@example.com", "password": "anything"})
        assert response.status_code == 401


def test_my_bookings_requires_auth(client, db):
    response = client.get("/api/v1/user/bookings")
    assert response.status_code == 401
