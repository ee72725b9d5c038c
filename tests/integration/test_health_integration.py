def test_health_root(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"ok": True}

def test_health_providers(client):
    data = client.get("/health/providers").json()
    assert data["providers"] == {"paystack": True, "stripe": True, "flutterwave": True}
    assert data["order_store"] == "memory"
    assert data["verify_cart_prices"] is False
    assert data["rate_limit"]["enabled"] is False

def test_security_headers(client):
    res = client.get("/health")
    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert res.headers["X-Frame-Options"] == "DENY"
    assert res.headers["Referrer-Policy"] == "no-referrer"
