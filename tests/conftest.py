import os

# Environnement de test: commandes en mémoire, pas de Redis, pas de lecture catalogue
os.environ["ORDER_STORE_BACKEND"] = "memory"
os.environ["DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS"] = "1"
os.environ["VERIFY_CART_PRICES"] = "false"
os.environ.pop("LOCAL_RATE_LIMIT_FALLBACK", None)

import pytest
from typing import Generator
from fastapi.testclient import TestClient

from storefront.app_setup.factory import create_app
from storefront.payments.effects import InMemoryEffects
from storefront.payments.models import (
    CartLine,
    CheckoutRequest,
    Customer,
    PaymentSessionResult,
    ProviderId,
    ReturnTargets,
)
from storefront.payments.providers import ProviderAdapter
from storefront.payments.repository import InMemoryOrderStore

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/"):
            item.add_marker(pytest.mark.integration)


class FakeAdapter(ProviderAdapter):
    """Adaptateur sans réseau: trace les appels, peut échouer ou refuser la vérification."""

    def __init__(self, provider_id: ProviderId):
        super().__init__("sk_test")
        self.provider_id = provider_id
        self.calls = []
        self.fail = None
        self.verified = True

    def initialize(self, request, order_id):
        self.calls.append((request, order_id))
        if self.fail is not None:
            raise self.fail
        return PaymentSessionResult(
            provider=self.provider_id,
            redirect_url=f"https://pay.example/{self.provider_id.value}/{order_id}",
            provider_reference=order_id,
        )

    def verify(self, order):
        return self.verified


@pytest.fixture(scope="session")
def app():
    return create_app()

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

# Aucun appel fournisseur réel: le registre est remplacé par des FakeAdapter
@pytest.fixture(autouse=True)
def fake_adapters(monkeypatch):
    adapters = {p: FakeAdapter(p) for p in ProviderId}
    monkeypatch.setattr("storefront.payments.providers._adapters", adapters)
    return adapters

# Store et effets neufs pour chaque test (singletons remplacés)
@pytest.fixture(autouse=True)
def order_store(monkeypatch):
    store = InMemoryOrderStore()
    monkeypatch.setattr("storefront.payments.repository._order_store", store)
    return store

@pytest.fixture(autouse=True)
def effects(monkeypatch):
    fx = InMemoryEffects()
    monkeypatch.setattr("storefront.payments.effects._effects", fx)
    return fx

@pytest.fixture
def make_request():
    def _make(currency="NGN", provider=None, lines=None, total=None,
              name="Ada Obi", email="ada@example.com", success_url="https://shop.example/return"):
        if lines is None:
            lines = [CartLine(product_ref="p1", name="Ankara tote", unit_price=750, quantity=2)]
        if total is None:
            total = sum(line.unit_price * line.quantity for line in lines)
        return CheckoutRequest(
            customer=Customer(name=name, email=email),
            currency=currency,
            cart=tuple(lines),
            total_amount=total,
            provider=provider,
            return_targets=ReturnTargets(success_url=success_url) if success_url else None,
        )
    return _make

@pytest.fixture
def checkout_payload():
    return {
        "customer": {"name": "Ada Obi", "email": "ada@example.com"},
        "currency": "NGN",
        "cart": [{"product_ref": "p1", "name": "Ankara tote", "unit_price": 750, "quantity": 2}],
        "total_amount": 1500,
        "provider": "paystack",
        "return_targets": {"success_url": "https://shop.example/return"},
    }
