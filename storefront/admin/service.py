"""
Couche service de l'administration des commandes.
Les admins font avancer une commande payée: paid -> shipped -> delivered.
Toute autre transition est refusée; la réconciliation reste seule à sortir de 'pending'.
"""
import logging
from typing import List, Optional

from storefront.errors import InvalidRequest, UnknownOrder
from storefront.payments import repository
from storefront.payments.models import Order, OrderStatus

logger = logging.getLogger(__name__)

ADMIN_TRANSITIONS = {
    OrderStatus.PAID: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.DELIVERED,
}

def advance_order_status(order_id: str, new_status: OrderStatus,
                         orders: Optional[repository.OrderStore] = None) -> Order:
    store = orders if orders is not None else repository.get_order_store()
    order = store.get(order_id)
    if order is None:
        raise UnknownOrder(order_id)
    if ADMIN_TRANSITIONS.get(order.status) != new_status:
        raise InvalidRequest(f"Transition interdite: {order.status.value} -> {new_status.value}")
    if not store.compare_and_set_status(order_id, order.status, new_status):
        raise InvalidRequest(f"Statut modifié entre-temps pour {order_id}")
    logger.info("admin order status %s -> %s order_id=%s", order.status.value, new_status.value, order_id)
    return store.get(order_id)

def list_orders(limit: int = 100, orders: Optional[repository.OrderStore] = None) -> List[Order]:
    store = orders if orders is not None else repository.get_order_store()
    return store.list_recent(limit)
