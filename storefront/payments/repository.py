"""
Accès aux données pour la feature 'payments'.

- OrderStore: create / get / compare_and_set_status (+ list_recent pour l'admin)
- ProductStore: prix de référence du catalogue
- Implémentations Supabase (production) et mémoire (dev/tests), choisies par ORDER_STORE_BACKEND
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Protocol

import storefront.infra.supabase_client as supabase_client
from storefront.config import ORDER_STORE_BACKEND, ORDERS_TABLE, PRODUCTS_TABLE
from storefront.errors import DuplicateOrder, OrderStoreError
from storefront.payments.models import Order, OrderStatus

logger = logging.getLogger(__name__)


class OrderStore(Protocol):
    def create(self, order: Order) -> None: ...
    def get(self, order_id: str) -> Optional[Order]: ...
    def compare_and_set_status(self, order_id: str, expected: OrderStatus, new: OrderStatus) -> bool: ...
    def list_recent(self, limit: int = 100) -> List[Order]: ...


class ProductStore(Protocol):
    def prices_for(self, ids: Iterable[str]) -> Dict[str, float]: ...


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_unique_violation(exc: Exception) -> bool:
    code = getattr(exc, "code", None) or ""
    return str(code) == "23505" or "duplicate key" in str(exc).lower()


# module storefront.payments.repository
class SupabaseOrderStore:
    """
    Commandes dans la table ORDERS_TABLE (client service-role).
    La transition de statut est un UPDATE conditionnel (id + statut attendu):
    atomique côté Postgres, une seule réconciliation concurrente l'emporte.
    """

    def __init__(self, table: str = ORDERS_TABLE):
        self.table = table

    def create(self, order: Order) -> None:
        try:
            (
                supabase_client.get_service_supabase()
                .table(self.table)
                .insert(order.to_record())
                .execute()
            )
        except Exception as e:
            if _is_unique_violation(e):
                raise DuplicateOrder(f"Commande déjà existante: {order.id}") from e
            logger.exception("payments.repository.create failed order_id=%s", order.id)
            raise OrderStoreError("Enregistrement de la commande impossible") from e

    def get(self, order_id: str) -> Optional[Order]:
        try:
            res = (
                supabase_client.get_service_supabase()
                .table(self.table)
                .select("*")
                .eq("id", order_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.exception("payments.repository.get failed order_id=%s", order_id)
            raise OrderStoreError("Lecture de la commande impossible") from e
        rows = res.data or []
        return Order.from_record(rows[0]) if rows else None

    def compare_and_set_status(self, order_id: str, expected: OrderStatus, new: OrderStatus) -> bool:
        try:
            res = (
                supabase_client.get_service_supabase()
                .table(self.table)
                .update({"status": new.value, "updated_at": _now_iso()})
                .eq("id", order_id)
                .eq("status", expected.value)
                .execute()
            )
        except Exception as e:
            logger.exception("payments.repository.compare_and_set_status failed order_id=%s", order_id)
            raise OrderStoreError("Mise à jour du statut impossible") from e
        return bool(res.data)

    def list_recent(self, limit: int = 100) -> List[Order]:
        try:
            res = (
                supabase_client.get_service_supabase()
                .table(self.table)
                .select("*")
                .order("created_date", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.exception("payments.repository.list_recent failed")
            raise OrderStoreError("Lecture des commandes impossible") from e
        return [Order.from_record(r) for r in (res.data or [])]


class InMemoryOrderStore:
    """Commandes en mémoire; un verrou rend la transition check-and-set atomique."""

    def __init__(self):
        self._orders: Dict[str, Order] = {}
        self._lock = threading.Lock()

    def create(self, order: Order) -> None:
        with self._lock:
            if order.id in self._orders:
                raise DuplicateOrder(f"Commande déjà existante: {order.id}")
            self._orders[order.id] = order.model_copy(deep=True)

    def get(self, order_id: str) -> Optional[Order]:
        with self._lock:
            order = self._orders.get(order_id)
            return order.model_copy(deep=True) if order else None

    def compare_and_set_status(self, order_id: str, expected: OrderStatus, new: OrderStatus) -> bool:
        with self._lock:
            order = self._orders.get(order_id)
            if order is None or order.status != expected:
                return False
            self._orders[order_id] = order.model_copy(update={"status": new, "updated_at": _now_iso()})
            return True

    def list_recent(self, limit: int = 100) -> List[Order]:
        with self._lock:
            orders = sorted(self._orders.values(), key=lambda o: o.created_date, reverse=True)
            return [o.model_copy(deep=True) for o in orders[:limit]]

    def clear(self) -> None:
        with self._lock:
            self._orders.clear()


class SupabaseProductStore:
    def __init__(self, table: str = PRODUCTS_TABLE):
        self.table = table

    def prices_for(self, ids: Iterable[str]) -> Dict[str, float]:
        """
        Retourne {id: price} pour les produits demandés (catalogue faisant foi).
        - Produits absents: simplement absents du dict.
        """
        id_list = [str(i) for i in ids]
        if not id_list:
            return {}
        try:
            res = (
                supabase_client.get_supabase()
                .table(self.table)
                .select("id, price")
                .in_("id", id_list)
                .execute()
            )
        except Exception as e:
            logger.exception("payments.repository.prices_for failed ids=%s", id_list)
            raise OrderStoreError("Lecture du catalogue impossible") from e
        prices: Dict[str, float] = {}
        for row in res.data or []:
            try:
                prices[str(row.get("id"))] = float(row.get("price"))
            except (TypeError, ValueError):
                continue
        return prices


class InMemoryProductStore:
    def __init__(self, prices: Optional[Dict[str, float]] = None):
        self.prices: Dict[str, float] = dict(prices or {})

    def prices_for(self, ids: Iterable[str]) -> Dict[str, float]:
        return {i: self.prices[i] for i in ids if i in self.prices}


_order_store: Optional[OrderStore] = None
_product_store: Optional[ProductStore] = None


def get_order_store() -> OrderStore:
    global _order_store
    if _order_store is None:
        _order_store = InMemoryOrderStore() if ORDER_STORE_BACKEND == "memory" else SupabaseOrderStore()
    return _order_store


def get_product_store() -> ProductStore:
    global _product_store
    if _product_store is None:
        _product_store = InMemoryProductStore() if ORDER_STORE_BACKEND == "memory" else SupabaseProductStore()
    return _product_store
