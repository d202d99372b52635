from tests.factories.builders import create_booking

COMMENT = "An unforgettable morning at the pyramids."


def _review(client, tour_id, headers, **overrides):
    payload = {"rating": 5, "title": "Wonderful", "comment": COMMENT}
    payload.update(overrides)
    return client.post(f"/api/v1/tours/{tour_id}/reviews", json=payload, headers=headers)


class TestCreateReview:
    def test_review_updates_tour_rating(self, client, db, test_tour, auth_headers_customer):
        response = _review(client, test_tour.id, auth_headers_customer, rating=4)

        assert response.status_code == 201
        data = response.json()
        assert data["userName"] == "Test User"
        assert data["isVerified"] is False

        tour = client.get(f"/api/v1/tours/{test_tour.id}").json()
        assert tour["rating"] == 4.0
        assert tour["reviewCount"] == 1

    def test_verified_when_customer_booked(self, client, db, test_tour, test_customer, auth_headers_customer):
        create_booking(db, test_tour, test_customer)
        response = _review(client, test_tour.id, auth_headers_customer)
        assert response.json()["isVerified"] is True

    def test_second_review_conflicts(self, client, test_tour, auth_headers_customer):
        assert _review(client, test_tour.id, auth_headers_customer).status_code == 201

        response = _review(client, test_tour.id, auth_headers_customer)
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_REVIEW"

    def test_short_comment(self, client, test_tour, auth_headers_customer):
        response = _review(client, test_tour.id, auth_headers_customer, comment="Nice")
        assert response.status_code == 422

    def test_rating_out_of_range(self, client, test_tour, auth_headers_customer):
        assert _review(client, test_tour.id, auth_headers_customer, rating=6).status_code == 422

    def test_requires_login(self, client, test_tour):
        assert _review(client, test_tour.id, {}).status_code == 401

    def test_unknown_tour(self, client, test_tenant, auth_headers_customer):
        response = _review(client, "01HZY3K9QW8V7T6S5R4P3N2M1K", auth_headers_customer)
        assert response.status_code == 404


def test_list_and_check(client, test_tour, auth_headers_customer):
    check_url = f"/api/v1/tours/{test_tour.id}/reviews/check"
    assert client.get(check_url, headers=auth_headers_customer).json() == {"hasReviewed": False}

    _review(client, test_tour.id, auth_headers_customer)

    listing = client.get(f"/api/v1/tours/{test_tour.id}/reviews").json()
    assert listing["total"] == 1
    assert listing["reviews"][0]["comment"] == COMMENT
    assert client.get(check_url, headers=auth_headers_customer).json() == {"hasReviewed": True}
