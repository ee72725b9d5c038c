import json

import httpx
import pytest

from storefront.errors import NetworkFailure, ReferenceMismatch, RemoteRejected, UnsupportedCurrency
from storefront.payments.models import Order, ProviderId
from storefront.payments.providers import PaystackAdapter


def _adapter(handler, calls=None):
    def _wrapped(request: httpx.Request):
        if calls is not None:
            calls.append(request)
        return handler(request)
    client = httpx.Client(transport=httpx.MockTransport(_wrapped))
    return PaystackAdapter("sk_test_paystack", base_url="https://paystack.test", client=client)

def _ok(request: httpx.Request):
    body = json.loads(request.content)
    return httpx.Response(200, json={
        "status": True,
        "message": "Authorization URL created",
        "data": {
            "authorization_url": "https://checkout.paystack.com/abc123",
            "access_code": "abc123",
            "reference": body["reference"],
        },
    })

def test_initialize_sends_minor_units_and_reference(make_request):
    calls = []
    adapter = _adapter(_ok, calls)
    result = adapter.initialize(make_request("NGN"), "ORD-TEST1")

    assert result.provider == ProviderId.PAYSTACK
    assert result.redirect_url == "https://checkout.paystack.com/abc123"
    assert result.provider_reference == "ORD-TEST1"

    req = calls[0]
    body = json.loads(req.content)
    assert str(req.url) == "https://paystack.test/transaction/initialize"
    assert req.headers["Authorization"] == "Bearer sk_test_paystack"
    assert body["amount"] == 150000
    assert body["currency"] == "NGN"
    assert body["reference"] == "ORD-TEST1"
    assert body["email"] == "ada@example.com"
    assert body["callback_url"] == "https://shop.example/return?payment=success&provider=paystack&ref=ORD-TEST1"
    assert body["metadata"]["order_id"] == "ORD-TEST1"

def test_initialize_rejects_currency_without_call(make_request):
    calls = []
    adapter = _adapter(_ok, calls)
    with pytest.raises(UnsupportedCurrency) as exc:
        adapter.initialize(make_request("USD"), "ORD-TEST1")
    assert exc.value.alternatives == ["GHS", "KES", "NGN", "ZAR"]
    assert calls == []

def test_initialize_invalid_key_is_remote_rejected(make_request):
    adapter = _adapter(lambda r: httpx.Response(401, json={"status": False, "message": "Invalid key"}))
    with pytest.raises(RemoteRejected) as exc:
        adapter.initialize(make_request("NGN"), "ORD-TEST1")
    assert exc.value.message == "Invalid key"
    assert exc.value.remote_status == 401
    assert exc.value.retryable is False

def test_initialize_status_false_is_remote_rejected(make_request):
    adapter = _adapter(lambda r: httpx.Response(200, json={"status": False, "message": "Currency not supported"}))
    with pytest.raises(RemoteRejected, match="Currency not supported"):
        adapter.initialize(make_request("GHS"), "ORD-TEST1")

def test_initialize_timeout_is_network_failure(make_request):
    def _timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)
    adapter = _adapter(_timeout)
    with pytest.raises(NetworkFailure) as exc:
        adapter.initialize(make_request("NGN"), "ORD-TEST1")
    assert exc.value.retryable is True
    assert exc.value.provider == "paystack"

def test_initialize_echoed_reference_must_match(make_request):
    def _other_ref(request):
        return httpx.Response(200, json={
            "status": True,
            "data": {"authorization_url": "https://checkout.paystack.com/x", "reference": "T123456"},
        })
    adapter = _adapter(_other_ref)
    with pytest.raises(ReferenceMismatch):
        adapter.initialize(make_request("NGN"), "ORD-TEST1")

def test_initialize_untransmittable_reference_fails_before_call(make_request):
    calls = []
    adapter = _adapter(_ok, calls)
    with pytest.raises(ReferenceMismatch):
        adapter.initialize(make_request("NGN"), "ORD 1/2")
    assert calls == []

def test_verify(make_request):
    req = make_request("NGN")
    order = Order(id="ORD-TEST1", cart_snapshot=list(req.cart), total_amount=1500, currency="NGN",
                  customer=req.customer, provider=ProviderId.PAYSTACK, provider_reference="ORD-TEST1")

    def _verify(request):
        assert request.url.path == "/transaction/verify/ORD-TEST1"
        return httpx.Response(200, json={"status": True, "data": {"status": "success", "reference": "ORD-TEST1"}})
    assert _adapter(_verify).verify(order) is True

    abandoned = lambda r: httpx.Response(200, json={"status": True, "data": {"status": "abandoned", "reference": "ORD-TEST1"}})
    assert _adapter(abandoned).verify(order) is False
