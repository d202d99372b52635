from tourhub.models.discount import Discount


def _add_discount(db, **overrides):
    values = {"tenant_id": "default", "code": "NILE15", "discount_type": "percentage", "value": 15}
    values.update(overrides)
    db.add(Discount(**values))
    db.commit()


def test_verify_valid_code(client, db, test_tenant):
    _add_discount(db)
    response = client.post("/api/v1/discounts/verify", json={"code": "nile15"})
    assert response.status_code == 200
    assert response.json() == {"code": "NILE15", "discountType": "percentage", "value": 15.0}


def test_code_from_another_tenant(client, db, test_tenant):
    _add_discount(db, tenant_id="acme")
    response = client.post("/api/v1/discounts/verify", json={"code": "NILE15"})
    assert response.status_code == 404
    assert response.json()["code"] == "INVALID_COUPON"


def test_explicit_tenant_in_body(client, db, test_tenant):
    _add_discount(db, tenant_id="acme")
    response = client.post("/api/v1/discounts/verify", json={"code": "NILE15", "tenantId": "acme"})
    assert response.status_code == 200


def test_inactive_code(client, db, test_tenant):
    _add_discount(db, is_active=False)
    response = client.post("/api/v1/discounts/verify", json={"code": "NILE15"})
    assert response.status_code == 400
    assert response.json()["code"] == "COUPON_INACTIVE"
