from tourhub.core.enums import AdminRole

from tests.factories.builders import TEST_PASSWORD, create_user

LOGIN_URL = "/api/v1/admin/login"


def test_login_sets_cookie_usable_by_admin_routes(client, test_admin):
    response = client.post(LOGIN_URL, json={"email": "admin@example.com", "password": TEST_PASSWORD})

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["role"] == "admin"
    assert "manageBookings" in data["user"]["permissions"]
    assert response.cookies.get("admin-auth-token") == data["accessToken"]

    # No Authorization header: the cookie carries the session
    assert client.get("/api/v1/admin/bookings").status_code == 200


def test_customer_is_forbidden(client, test_customer):
    response = client.post(LOGIN_URL, json={"email": "customer@example.com", "password": TEST_PASSWORD})
    assert response.status_code == 403
    assert response.json()["code"] == "ADMIN_REQUIRED"


def test_inactive_staff_is_forbidden(client, db):
    create_user(db, email="former@example.com", role=AdminRole.ADMIN.value, is_active=False)
    response = client.post(LOGIN_URL, json={"email": "former@example.com", "password": TEST_PASSWORD})
    assert response.status_code == 403


def test_bad_password(client, test_admin):
    response = client.post(LOGIN_URL, json={"email": "admin@example.com", "password": "wrong-password"})
    assert response.status_code == 401


def test_customer_login_token_cannot_reach_admin(client, test_customer):
    login = client.post("/api/v1/auth/login", json={"email": "customer@example.com", "password": TEST_PASSWORD})
    headers = {"Authorization": f"Bearer {login.json()['accessToken']}"}
    assert client.get("/api/v1/admin/dashboard", headers=headers).status_code == 403
