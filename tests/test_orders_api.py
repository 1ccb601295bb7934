from sqlalchemy.exc import SQLAlchemyError

from food_delivery import crud

PIZZA_LINE = {"id": "m1", "name": "Margherita Pizza", "price": 12.99, "quantity": 2}


def _create(client, **overrides):
    payload = {"items": [PIZZA_LINE], "total": 25.98}
    payload.update(overrides)
    return client.post("/api/orders", json=payload)


def test_create_order(client):
    response = _create(client, userId="user-42")

    assert response.status_code == 201
    order = response.json()
    assert order["id"].startswith("ORD")
    assert order["status"] == "preparing"
    assert order["total"] == 25.98
    assert order["user_id"] == "user-42"
    assert order["estimatedTime"] == "25-35 min"
    assert order["items"] == [{"id": "m1", "name": "Margherita Pizza", "price": 12.99, "quantity": 2}]


def test_create_order_requires_items(client):
    response = client.post("/api/orders", json={"items": [], "total": 0})
    assert response.status_code == 400
    assert response.json()["detail"] == "Order must contain items"

    assert client.post("/api/orders", json={"total": 0}).status_code == 400


def test_create_order_rejects_wrong_total(client):
    response = _create(client, total=5)
    assert response.status_code == 400
    assert client.get("/api/orders").json() == []


def test_create_order_rejects_malformed_body(client):
    response = client.post("/api/orders", json={"items": [{"id": "m1"}], "total": 12.99})
    assert response.status_code == 400


def test_create_order_storage_failure_leaves_nothing_behind(client, monkeypatch):
    def broken_insert(session, order, lines):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(crud, "_insert_order_items", broken_insert)

    response = _create(client)
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to create order"

    monkeypatch.undo()
    assert client.get("/api/orders").json() == []


def test_list_and_get_orders(client):
    first = _create(client, userId="alice").json()
    second = _create(client, userId="bob").json()

    all_ids = {order["id"] for order in client.get("/api/orders").json()}
    assert all_ids == {first["id"], second["id"]}

    alice = client.get("/api/orders", params={"userId": "alice"}).json()
    assert [order["id"] for order in alice] == [first["id"]]
    assert alice[0]["items"][0]["quantity"] == 2

    fetched = client.get(f"/api/orders/{second['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["user_id"] == "bob"

    assert client.get("/api/orders/ORD-missing").status_code == 404


def test_update_status(client):
    order = _create(client).json()

    response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "on-the-way"})
    assert response.status_code == 200
    assert response.json()["status"] == "on-the-way"
    assert client.get(f"/api/orders/{order['id']}").json()["status"] == "on-the-way"


def test_update_status_rejects_unknown_status(client):
    order = _create(client).json()

    response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "flying"})
    assert response.status_code == 400
    assert client.get(f"/api/orders/{order['id']}").json()["status"] == "preparing"


def test_update_status_rejects_backward_move(client):
    order = _create(client).json()
    client.patch(f"/api/orders/{order['id']}/status", json={"status": "delivered"})

    response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "preparing"})
    assert response.status_code == 409
    assert client.get(f"/api/orders/{order['id']}").json()["status"] == "delivered"


def test_update_status_unknown_order(client):
    response = client.patch("/api/orders/ORD-missing/status", json={"status": "delivered"})
    assert response.status_code == 404


def test_create_paid_order(client, paystack):
    paystack.add_transaction("ref_paid", 2598)

    response = _create(client, paymentReference="ref_paid")

    assert response.status_code == 201
    assert response.json()["payment_status"] == "paid"
    assert response.json()["payment_reference"] == "ref_paid"


def test_payment_reference_pays_for_one_order_only(client, paystack):
    paystack.add_transaction("ref_once", 2598)

    assert _create(client, paymentReference="ref_once").status_code == 201
    replay = _create(client, paymentReference="ref_once")

    assert replay.status_code == 400
    assert replay.json()["detail"] == "Payment reference has already been used"
    orders = client.get("/api/orders").json()
    assert [order["payment_status"] for order in orders] == ["paid"]


def test_create_order_with_underpaid_reference(client, paystack):
    paystack.add_transaction("ref_short", 1000)

    response = _create(client, paymentReference="ref_short")
    assert response.status_code == 400
    assert client.get("/api/orders").json() == []


def test_create_order_with_abandoned_payment(client, paystack):
    paystack.add_transaction("ref_abandoned", 2598, status="abandoned")

    response = _create(client, paymentReference="ref_abandoned")
    assert response.status_code == 400
    assert response.json()["detail"] == "Payment has not been completed"


def test_create_order_with_unknown_reference(client):
    response = _create(client, paymentReference="ref_nope")
    assert response.status_code == 502
