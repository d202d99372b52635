from tests.factories.builders import create_tenant, create_tour


class TestListTours:
    def test_default_tenant_sees_only_its_catalogue(self, client, db, test_tour):
        create_tenant(db, "acme", "Acme Adventures")
        create_tour(db, "acme", title="Acme Exclusive")

        response = client.get("/api/v1/tours")

        assert response.status_code == 200
        assert [tour["title"] for tour in response.json()] == ["Pyramids Sunrise Tour"]

    def test_tenant_sees_own_and_default_tours(self, client, db, test_tour):
        create_tenant(db, "acme", "Acme Adventures")
        create_tour(db, "acme", title="Acme Exclusive")
        create_tenant(db, "nile", "Nile Co")
        create_tour(db, "nile", title="Nile Only")

        response = client.get("/api/v1/tours?tenant=acme")

        titles = sorted(tour["title"] for tour in response.json())
        assert titles == ["Acme Exclusive", "Pyramids Sunrise Tour"]

    def test_unpublished_tours_are_hidden(self, client, db, test_tenant):
        create_tour(db, title="Draft", is_published=False)
        assert client.get("/api/v1/tours").json() == []


class TestTourDetail:
    def test_camel_case_fields(self, client, test_tour):
        response = client.get(f"/api/v1/tours/{test_tour.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["tenantId"] == "default"
        assert data["bookingOptions"][0]["id"] == "opt-standard"
        assert "reviewCount" in data

    def test_not_found(self, client, test_tenant):
        response = client.get("/api/v1/tours/01HZY3K9QW8V7T6S5R4P3N2M1K")
        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/problem+json")

    def test_booking_options_get_ids(self, client, db, test_tenant):
        tour = create_tour(db, booking_options=[{"type": "group", "label": "Group", "price": 80.0}])

        first = client.get(f"/api/v1/tours/{tour.id}/booking-options").json()
        second = client.get(f"/api/v1/tours/{tour.id}/booking-options").json()

        option_id = first["options"][0]["id"]
        assert option_id
        assert second["options"][0]["id"] == option_id
        assert first["addOns"] == []
