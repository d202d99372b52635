from tourhub.models.stop_sale import StopSale, StopSaleLog

STOP_SALES_URL = "/api/v1/admin/stop-sales"
LOGS_URL = "/api/v1/admin/stop-sale-logs"


def _body(tour, **overrides):
    body = {
        "tourId": tour.id,
        "tenantId": "default",
        "startDate": "2026-07-01",
        "endDate": "2026-07-03",
        "optionIds": ["opt-standard", "opt-private"],
        "reason": "Heatwave",
    }
    body.update(overrides)
    return body


class TestApply:
    def test_one_row_per_option(self, client, db, test_tour, auth_headers_admin):
        response = client.put(STOP_SALES_URL, json=_body(test_tour), headers=auth_headers_admin)

        assert response.status_code == 200
        assert response.json() == {"upserted": 2, "modified": 0, "matched": 0}
        assert sorted(row.option_ids[0] for row in db.query(StopSale).all()) == ["opt-private", "opt-standard"]
        assert db.query(StopSaleLog).count() == 2

    def test_log_rows_share_window(self, client, db, test_tour, test_admin, auth_headers_admin):
        client.put(STOP_SALES_URL, json=_body(test_tour), headers=auth_headers_admin)

        logs = db.query(StopSaleLog).all()

        assert sorted(log.option_id for log in logs) == ["opt-private", "opt-standard"]
        assert {(log.reason, log.applied_by_id, log.status) for log in logs} == {("Heatwave", test_admin.id, "active")}

    def test_reapplying_updates_reason(self, client, test_tour, auth_headers_admin):
        client.put(STOP_SALES_URL, json=_body(test_tour), headers=auth_headers_admin)

        response = client.put(STOP_SALES_URL, json=_body(test_tour, reason="Still hot"), headers=auth_headers_admin)

        assert response.json() == {"upserted": 0, "modified": 2, "matched": 2}

    def test_all_options(self, client, db, test_tour, auth_headers_admin):
        response = client.put(STOP_SALES_URL, json=_body(test_tour, optionIds=[]), headers=auth_headers_admin)

        assert response.json()["upserted"] == 1
        assert db.query(StopSale).one().covers_all_options
        assert db.query(StopSaleLog).one().option_id is None

    def test_visible_on_public_calendar(self, client, test_tour, auth_headers_admin):
        client.put(STOP_SALES_URL, json=_body(test_tour, optionIds=["opt-private"]), headers=auth_headers_admin)

        data = client.get(f"/api/v1/availability/{test_tour.id}?date=2026-07-02").json()

        assert data["stopSaleStatus"] == "partial"
        assert data["reasons"] == {"opt-private": "Heatwave"}

    def test_range_must_not_be_reversed(self, client, test_tour, auth_headers_admin):
        body = _body(test_tour, startDate="2026-07-05", endDate="2026-07-01")
        response = client.put(STOP_SALES_URL, json=body, headers=auth_headers_admin)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_RANGE"

    def test_unknown_tour(self, client, test_tenant, auth_headers_admin):
        body = {"tourId": "missing", "startDate": "2026-07-01", "endDate": "2026-07-01"}
        assert client.put(STOP_SALES_URL, json=body, headers=auth_headers_admin).status_code == 404

    def test_viewer_cannot_stop_sales(self, client, test_tour, auth_headers_viewer):
        assert client.put(STOP_SALES_URL, json=_body(test_tour), headers=auth_headers_viewer).status_code == 403


class TestRemove:
    def test_remove_single_option(self, client, db, test_tour, auth_headers_admin):
        client.put(STOP_SALES_URL, json=_body(test_tour), headers=auth_headers_admin)

        response = client.request(
            "DELETE", STOP_SALES_URL, json=_body(test_tour, optionIds=["opt-private"]), headers=auth_headers_admin
        )

        assert response.status_code == 200
        assert response.json() == {"deleted": 1}
        assert [row.option_ids for row in db.query(StopSale).all()] == [["opt-standard"]]

    def test_removal_is_logged(self, client, test_tour, auth_headers_admin):
        client.put(STOP_SALES_URL, json=_body(test_tour, optionIds=[]), headers=auth_headers_admin)
        client.request("DELETE", STOP_SALES_URL, json=_body(test_tour, optionIds=[]), headers=auth_headers_admin)

        logs = client.get(LOGS_URL, headers=auth_headers_admin).json()["logs"]

        assert len(logs) == 1
        assert logs[0]["status"] == "removed"
        assert logs[0]["optionTitle"] == "All options"
        assert logs[0]["removedBy"] == "Ada User"


class TestLogs:
    def test_filters_and_pagination(self, client, test_tour, auth_headers_admin):
        client.put(STOP_SALES_URL, json=_body(test_tour), headers=auth_headers_admin)

        response = client.get(LOGS_URL, params={"status": "active", "limit": 1}, headers=auth_headers_admin)

        data = response.json()
        assert data["pagination"] == {"page": 1, "limit": 1, "total": 2, "totalPages": 2}
        assert data["logs"][0]["appliedBy"] == "Ada User"
        assert data["logs"][0]["tourTitle"] == "Pyramids Sunrise Tour"
        assert data["logs"][0]["optionTitle"] in ("Standard", "Private")

    def test_removed_filter_is_empty(self, client, test_tour, auth_headers_admin):
        client.put(STOP_SALES_URL, json=_body(test_tour), headers=auth_headers_admin)
        data = client.get(LOGS_URL, params={"status": "removed"}, headers=auth_headers_admin).json()
        assert data["logs"] == []
