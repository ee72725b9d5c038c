import threading
from unittest.mock import MagicMock

import pytest

from storefront.errors import AlreadyReconciled, OrderStoreError, UnknownOrder
from storefront.payments import reconciler
from storefront.payments.models import (
    CallbackEvent,
    CallbackOutcome,
    CartLine,
    Customer,
    Order,
    OrderStatus,
    ProviderId,
    ReconcileResult,
)
from storefront.payments.repository import InMemoryOrderStore


def _seed(store, order_id="ORD-REC1", provider=ProviderId.PAYSTACK, status=OrderStatus.PENDING):
    order = Order(
        id=order_id,
        cart_snapshot=[CartLine(product_ref="p1", unit_price=750, quantity=2)],
        total_amount=1500,
        currency="NGN",
        status=status,
        customer=Customer(name="Ada Obi", email="ada@example.com"),
        provider=provider,
        provider_reference=order_id,
    )
    store.create(order)
    return order

def _event(order_id="ORD-REC1", provider=ProviderId.PAYSTACK, outcome=CallbackOutcome.SUCCESS):
    return CallbackEvent(order_id=order_id, provider=provider, outcome=outcome)

def test_success_marks_paid_and_emits_once(order_store, effects):
    _seed(order_store)

    assert reconciler.reconcile(_event(), orders=order_store, effects=effects, verify=False) == ReconcileResult.PAID
    assert order_store.get("ORD-REC1").status == OrderStatus.PAID
    assert effects.cleared == ["ORD-REC1"]
    assert effects.notifications == [("ORD-REC1", "paid")]

    # Rafraîchissement de la page de retour: aucune seconde transition
    assert reconciler.reconcile(_event(), orders=order_store, effects=effects, verify=False) == ReconcileResult.ALREADY_RECONCILED
    assert effects.cleared == ["ORD-REC1"]
    assert len(effects.notifications) == 1

def test_unknown_order_is_a_noop(order_store, effects):
    _seed(order_store)
    result = reconciler.reconcile(_event("ORD-UNKNOWN"), orders=order_store, effects=effects, verify=False)
    assert result == ReconcileResult.UNKNOWN_ORDER
    assert order_store.get("ORD-REC1").status == OrderStatus.PENDING
    assert effects.cleared == [] and effects.notifications == []

@pytest.mark.parametrize("outcome", [CallbackOutcome.FAILED, CallbackOutcome.CANCELLED])
def test_failed_outcome_keeps_cart(order_store, effects, outcome):
    _seed(order_store)
    result = reconciler.reconcile(_event(outcome=outcome), orders=order_store, effects=effects, verify=False)
    assert result == ReconcileResult.FAILED
    assert order_store.get("ORD-REC1").status == OrderStatus.FAILED
    assert effects.cleared == []
    assert effects.notifications == [("ORD-REC1", "failed")]

def test_apply_callback_raises_typed_noops(order_store, effects):
    _seed(order_store, status=OrderStatus.SHIPPED)
    with pytest.raises(UnknownOrder):
        reconciler.apply_callback(_event("ORD-NOPE"), orders=order_store, effects=effects)
    with pytest.raises(AlreadyReconciled):
        reconciler.apply_callback(_event(), orders=order_store, effects=effects)

def test_concurrent_callbacks_transition_once(order_store, effects):
    _seed(order_store)
    n = 8
    barrier = threading.Barrier(n)
    results = []
    lock = threading.Lock()

    def _worker():
        barrier.wait()
        r = reconciler.reconcile(_event(), orders=order_store, effects=effects, verify=False)
        with lock:
            results.append(r)

    threads = [threading.Thread(target=_worker) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(ReconcileResult.PAID) == 1
    assert results.count(ReconcileResult.ALREADY_RECONCILED) == n - 1
    assert effects.cleared == ["ORD-REC1"]
    assert len(effects.notifications) == 1

def test_provider_mismatch_still_reconciles(order_store, effects):
    _seed(order_store, provider=ProviderId.FLUTTERWAVE)
    result = reconciler.reconcile(_event(provider=ProviderId.PAYSTACK), orders=order_store, effects=effects, verify=False)
    assert result == ReconcileResult.PAID

def test_verification_refused_leaves_order_pending(order_store, effects, fake_adapters):
    _seed(order_store)
    fake_adapters[ProviderId.PAYSTACK].verified = False
    result = reconciler.reconcile(_event(), orders=order_store, effects=effects, adapters=fake_adapters, verify=True)
    assert result == ReconcileResult.UNVERIFIED
    assert order_store.get("ORD-REC1").status == OrderStatus.PENDING
    assert effects.cleared == []

    fake_adapters[ProviderId.PAYSTACK].verified = True
    result = reconciler.reconcile(_event(), orders=order_store, effects=effects, adapters=fake_adapters, verify=True)
    assert result == ReconcileResult.PAID

def test_failing_effects_do_not_undo_transition(order_store):
    _seed(order_store)
    fx = MagicMock()
    fx.clear_cart.side_effect = RuntimeError("carts table unavailable")
    result = reconciler.reconcile(_event(), orders=order_store, effects=fx, verify=False)
    assert result == ReconcileResult.PAID
    assert order_store.get("ORD-REC1").status == OrderStatus.PAID
    fx.notify.assert_called_once()

def test_store_failure_is_reported_not_raised(effects):
    store = MagicMock(spec=InMemoryOrderStore)
    store.get.side_effect = OrderStoreError("Lecture de la commande impossible")
    assert reconciler.reconcile(_event(), orders=store, effects=effects, verify=False) == ReconcileResult.ERROR

def test_default_singletons_are_used(order_store, effects):
    _seed(order_store)
    assert reconciler.reconcile(_event(), verify=False) == ReconcileResult.PAID
    assert effects.cleared == ["ORD-REC1"]
