import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from storefront.config import VERIFY_CART_PRICES
from storefront.currency import format_amount
from storefront.errors import OrderStoreError
from storefront.utils.rate_limit import optional_rate_limit
from storefront.payments import repository as payments_repo
from storefront.payments import service as payments_service
from storefront.payments import reconciler as payments_reconciler
from storefront.payments.callback import parse_callback
from storefront.payments.effects import confirmation_message
from storefront.payments.models import CheckoutRequest, OrderStatus, ReconcileResult, RedirectTarget

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

_CALLBACK_MESSAGES = {
    ReconcileResult.UNKNOWN_ORDER: "Commande introuvable; si vous avez payé, contactez le support avec votre référence.",
    ReconcileResult.ALREADY_RECONCILED: "Cette commande a déjà été traitée.",
    ReconcileResult.UNVERIFIED: "Paiement en cours de confirmation.",
    ReconcileResult.ERROR: "Paiement reçu, confirmation en cours.",
}

# module storefront.payments.views
@router.post("/checkout", response_model=RedirectTarget, dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout(body: CheckoutRequest) -> RedirectTarget:
    """
    Ouvre une session de paiement et enregistre la commande 'pending'.
    - Entrée JSON: { customer, currency, cart: [{product_ref, unit_price, quantity}], total_amount,
      provider?, return_targets? }
    - Sortie: { order_id, redirect_url, provider, provider_reference }
    - Erreurs typées (handler global): invalid_request / unsupported_currency (400),
      remote_rejected / reference_mismatch (502), network_failure / order_store_failure (503)
    """
    products = payments_repo.get_product_store() if VERIFY_CART_PRICES else None
    return payments_service.checkout(body, products=products)

@router.get("/callback")
def payment_callback(request: Request) -> Dict[str, Any]:
    """
    Retour navigateur depuis le fournisseur: ?payment=success&provider={id}&ref={order_id}
    - Toujours 200: l'utilisateur a déjà payé de son point de vue.
    - clear_cart=True uniquement pour la réconciliation qui a effectué la transition 'paid'.
    """
    event = parse_callback(request.query_params)
    if event is None:
        return {"status": "ignored", "order_id": None, "clear_cart": False, "message": ""}

    result = payments_reconciler.reconcile(event)
    message = _CALLBACK_MESSAGES.get(result, "")
    if result in (ReconcileResult.PAID, ReconcileResult.FAILED):
        status = OrderStatus.PAID if result == ReconcileResult.PAID else OrderStatus.FAILED
        try:
            order = payments_repo.get_order_store().get(event.order_id)
        except OrderStoreError:
            order = None
        if order is not None:
            message = confirmation_message(order, status)
    return {
        "status": result.value,
        "order_id": event.order_id,
        "clear_cart": result == ReconcileResult.PAID,
        "message": message,
    }

@router.get("/orders/{order_id}")
def get_order(order_id: str) -> Dict[str, Any]:
    """
    Résumé public pour la page de confirmation (404 si inconnue).
    - Aucune donnée client (email, téléphone, nom) ni panier: l'order id n'est pas un secret.
    """
    order = payments_repo.get_order_store().get(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Commande introuvable")
    return {
        "id": order.id,
        "status": order.status.value,
        "total_amount": order.total_amount,
        "currency": order.currency,
        "formatted_total": format_amount(order.total_amount, order.currency),
        "created_date": order.created_date,
    }
