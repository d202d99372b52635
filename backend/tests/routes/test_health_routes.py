def test_health_reports_pool(client, db):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    pool = data["database"]["pool"]
    assert set(pool) == {"size", "checked_in", "checked_out", "total", "overflow"}
    assert pool["total"] >= pool["size"]
