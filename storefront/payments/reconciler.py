"""
Réconciliation des retours de paiement: applique un CallbackEvent à une commande, une seule fois.

Garde d'idempotence: seule une commande 'pending' peut transitionner, et la transition est un
compare-and-set au niveau du store. Un rafraîchissement de page ou un retour livré deux fois
ne produit ni seconde transition, ni second vidage de panier, ni seconde notification.

Limite connue: l'URL de retour n'est pas signée. PAYMENT_CALLBACK_VERIFY active une confirmation
serveur à serveur auprès du fournisseur avant le passage en 'paid'.
"""
import logging
from typing import Mapping, Optional

from storefront.config import PAYMENT_CALLBACK_VERIFY
from storefront.errors import AlreadyReconciled, CheckoutError, OrderStoreError, ReconcileError, UnknownOrder
from storefront.payments import repository
from storefront.payments.effects import CheckoutEffects, get_effects
from storefront.payments.models import (
    CallbackEvent,
    CallbackOutcome,
    Order,
    OrderStatus,
    ProviderId,
    ReconcileResult,
)
from storefront.payments.providers import ProviderAdapter, get_adapter

logger = logging.getLogger(__name__)


def _target_status(event: CallbackEvent) -> OrderStatus:
    return OrderStatus.PAID if event.outcome == CallbackOutcome.SUCCESS else OrderStatus.FAILED


def _verified(order: Order, adapters: Optional[Mapping[ProviderId, ProviderAdapter]]) -> bool:
    try:
        return get_adapter(order.provider, adapters).verify(order)
    except (CheckoutError, NotImplementedError) as e:
        logger.warning("reconcile verification unavailable order_id=%s provider=%s err=%s",
                       order.id, order.provider.value, e)
        return False


def _emit(effects: CheckoutEffects, order: Order, status: OrderStatus) -> None:
    """Effets de la transition; un échec est journalisé, jamais propagé."""
    if status == OrderStatus.PAID:
        try:
            effects.clear_cart(order)
        except Exception:
            logger.exception("reconcile clear_cart failed order_id=%s", order.id)
    try:
        effects.notify(order, status)
    except Exception:
        logger.exception("reconcile notify failed order_id=%s", order.id)


def apply_callback(
    event: CallbackEvent,
    *,
    orders: repository.OrderStore,
    effects: CheckoutEffects,
    adapters: Optional[Mapping[ProviderId, ProviderAdapter]] = None,
    verify: bool = False,
) -> ReconcileResult:
    """
    Applique l'événement. Lève UnknownOrder / AlreadyReconciled pour les no-ops.
    """
    order = orders.get(event.order_id)
    if order is None:
        raise UnknownOrder(event.order_id)
    if order.status != OrderStatus.PENDING:
        raise AlreadyReconciled(event.order_id, f"status={order.status.value}")
    if event.provider is not None and event.provider != order.provider:
        logger.warning("reconcile provider mismatch order_id=%s order_provider=%s callback_provider=%s",
                       order.id, order.provider.value, event.provider.value)

    target = _target_status(event)
    if target == OrderStatus.PAID and verify and not _verified(order, adapters):
        logger.warning("reconcile unverified order_id=%s provider=%s", order.id, order.provider.value)
        return ReconcileResult.UNVERIFIED

    if not orders.compare_and_set_status(order.id, OrderStatus.PENDING, target):
        # Une réconciliation concurrente a gagné la transition
        raise AlreadyReconciled(event.order_id, "lost compare-and-set")

    transitioned = order.model_copy(update={"status": target})
    _emit(effects, transitioned, target)
    logger.info("reconcile %s -> %s order_id=%s provider=%s",
                OrderStatus.PENDING.value, target.value, order.id, order.provider.value)
    return ReconcileResult.PAID if target == OrderStatus.PAID else ReconcileResult.FAILED


def reconcile(
    event: CallbackEvent,
    *,
    orders: Optional[repository.OrderStore] = None,
    effects: Optional[CheckoutEffects] = None,
    adapters: Optional[Mapping[ProviderId, ProviderAdapter]] = None,
    verify: Optional[bool] = None,
) -> ReconcileResult:
    """
    Idempotent, ne lève jamais: les no-ops et erreurs sont journalisés et renvoyés comme résultat,
    pour ne jamais bloquer la page de retour de l'utilisateur.
    """
    try:
        return apply_callback(
            event,
            orders=orders if orders is not None else repository.get_order_store(),
            effects=effects if effects is not None else get_effects(),
            adapters=adapters,
            verify=PAYMENT_CALLBACK_VERIFY if verify is None else verify,
        )
    except UnknownOrder as e:
        logger.warning("reconcile unknown order order_id=%s provider=%s", e.order_id,
                       event.provider.value if event.provider else None)
        return ReconcileResult.UNKNOWN_ORDER
    except AlreadyReconciled as e:
        logger.info("reconcile already reconciled order_id=%s detail=%s", e.order_id, e)
        return ReconcileResult.ALREADY_RECONCILED
    except ReconcileError as e:
        logger.warning("reconcile error order_id=%s err=%s", e.order_id, e)
        return ReconcileResult.ERROR
    except OrderStoreError:
        logger.exception("reconcile store failure order_id=%s", event.order_id)
        return ReconcileResult.ERROR
    except Exception:
        logger.exception("Erreur reconcile order_id=%s", event.order_id)
        return ReconcileResult.ERROR
