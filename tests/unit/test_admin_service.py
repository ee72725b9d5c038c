import pytest

from storefront.admin import service as admin_service
from storefront.errors import InvalidRequest, UnknownOrder
from storefront.payments.models import CartLine, Customer, Order, OrderStatus, ProviderId


def _seed(store, order_id, status):
    store.create(Order(
        id=order_id,
        cart_snapshot=[CartLine(product_ref="p1", unit_price=10, quantity=1)],
        total_amount=10,
        currency="USD",
        status=status,
        customer=Customer(name="Sam", email="sam@example.com"),
        provider=ProviderId.STRIPE,
        provider_reference="cs_test_1",
    ))

def test_paid_order_ships_then_delivers(order_store):
    _seed(order_store, "ORD-A1", OrderStatus.PAID)
    assert admin_service.advance_order_status("ORD-A1", OrderStatus.SHIPPED).status == OrderStatus.SHIPPED
    assert admin_service.advance_order_status("ORD-A1", OrderStatus.DELIVERED, orders=order_store).status == OrderStatus.DELIVERED

@pytest.mark.parametrize("current,target", [
    (OrderStatus.PENDING, OrderStatus.SHIPPED),
    (OrderStatus.PENDING, OrderStatus.PAID),
    (OrderStatus.PAID, OrderStatus.DELIVERED),
    (OrderStatus.FAILED, OrderStatus.SHIPPED),
    (OrderStatus.DELIVERED, OrderStatus.SHIPPED),
])
def test_forbidden_transitions(order_store, current, target):
    _seed(order_store, "ORD-A2", current)
    with pytest.raises(InvalidRequest):
        admin_service.advance_order_status("ORD-A2", target)
    assert order_store.get("ORD-A2").status == current

def test_unknown_order(order_store):
    with pytest.raises(UnknownOrder):
        admin_service.advance_order_status("ORD-NOPE", OrderStatus.SHIPPED)

def test_list_orders(order_store):
    _seed(order_store, "ORD-A3", OrderStatus.PAID)
    assert [o.id for o in admin_service.list_orders()] == ["ORD-A3"]
