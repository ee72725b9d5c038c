"""
Effets de bord d'une transition de statut (émis une seule fois par le réconciliateur).
- clear_cart: vide le panier sauvegardé du client ayant initié le checkout
- notify: confirmation unique destinée à l'utilisateur
"""
import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Tuple

import storefront.infra.supabase_client as supabase_client
from storefront.config import CARTS_TABLE, NOTIFICATIONS_TABLE, ORDER_STORE_BACKEND
from storefront.currency import format_amount
from storefront.payments.models import Order, OrderStatus

logger = logging.getLogger(__name__)


class CheckoutEffects(Protocol):
    def clear_cart(self, order: Order) -> None: ...
    def notify(self, order: Order, status: OrderStatus) -> None: ...


def confirmation_message(order: Order, status: OrderStatus) -> str:
    amount = format_amount(order.total_amount, order.currency)
    if status == OrderStatus.PAID:
        return f"Paiement confirmé ({amount}). La commande {order.id} est payée."
    if status == OrderStatus.FAILED:
        return f"Le paiement de la commande {order.id} n'a pas abouti."
    return f"Commande {order.id}: {status.value}."


class SupabaseEffects:
    def __init__(self, carts_table: str = CARTS_TABLE, notifications_table: str = NOTIFICATIONS_TABLE):
        self.carts_table = carts_table
        self.notifications_table = notifications_table

    def clear_cart(self, order: Order) -> None:
        (
            supabase_client.get_service_supabase()
            .table(self.carts_table)
            .delete()
            .eq("email", order.customer.email)
            .execute()
        )

    def notify(self, order: Order, status: OrderStatus) -> None:
        (
            supabase_client.get_service_supabase()
            .table(self.notifications_table)
            .insert({
                "order_id": order.id,
                "email": order.customer.email,
                "kind": f"order_{status.value}",
                "message": confirmation_message(order, status),
                "created_at": datetime.now(timezone.utc).isoformat(),
            })
            .execute()
        )


class InMemoryEffects:
    """Trace les effets émis (dev/tests)."""

    def __init__(self):
        self._lock = threading.Lock()
        self.cleared: List[str] = []
        self.notifications: List[Tuple[str, str]] = []

    def clear_cart(self, order: Order) -> None:
        with self._lock:
            self.cleared.append(order.id)

    def notify(self, order: Order, status: OrderStatus) -> None:
        with self._lock:
            self.notifications.append((order.id, status.value))


_effects: Optional[CheckoutEffects] = None


def get_effects() -> CheckoutEffects:
    global _effects
    if _effects is None:
        _effects = InMemoryEffects() if ORDER_STORE_BACKEND == "memory" else SupabaseEffects()
    return _effects
