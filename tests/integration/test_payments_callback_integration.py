def _checkout(client, payload):
    res = client.post("/api/v1/payments/checkout", json=payload)
    assert res.status_code == 200
    return res.json()["order_id"]

def test_success_callback_marks_paid_once(client, checkout_payload, effects):
    order_id = _checkout(client, checkout_payload)
    params = {"payment": "success", "provider": "paystack", "ref": order_id}

    first = client.get("/api/v1/payments/callback", params=params)
    assert first.status_code == 200
    body = first.json()
    assert body["status"] == "paid"
    assert body["order_id"] == order_id
    assert body["clear_cart"] is True
    assert "₦1,500" in body["message"]
    assert first.headers["Cache-Control"].startswith("no-store")

    # Rafraîchissement: même URL, aucun effet supplémentaire
    second = client.get("/api/v1/payments/callback", params=params)
    assert second.status_code == 200
    assert second.json()["status"] == "already_reconciled"
    assert second.json()["clear_cart"] is False

    assert client.get(f"/api/v1/payments/orders/{order_id}").json()["status"] == "paid"
    assert effects.cleared == [order_id]
    assert effects.notifications == [(order_id, "paid")]

def test_flutterwave_cancel_marks_failed(client, checkout_payload, effects):
    checkout_payload["provider"] = "flutterwave"
    order_id = _checkout(client, checkout_payload)

    res = client.get("/api/v1/payments/callback", params={
        "payment": "success", "provider": "flutterwave", "ref": order_id,
        "status": "cancelled", "tx_ref": order_id,
    })
    assert res.json()["status"] == "failed"
    assert res.json()["clear_cart"] is False
    assert effects.cleared == []

def test_unknown_reference_never_errors(client, order_store):
    res = client.get("/api/v1/payments/callback", params={"payment": "success", "provider": "stripe", "ref": "ORD-NOPE"})
    assert res.status_code == 200
    assert res.json()["status"] == "unknown_order"
    assert res.json()["clear_cart"] is False
    assert order_store.list_recent() == []

def test_callback_without_reference_is_ignored(client):
    res = client.get("/api/v1/payments/callback", params={"payment": "success"})
    assert res.status_code == 200
    assert res.json() == {"status": "ignored", "order_id": None, "clear_cart": False, "message": ""}
