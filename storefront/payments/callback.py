"""
URLs de retour fournisseur et lecture du signal de redirection.

Forme du contrat (à préserver pour la compatibilité fournisseurs):
    {success_url}?payment=success&provider={providerId}&ref={orderId}
Variante annulation (Stripe cancel_url):
    {cancel_url}?payment=cancelled&provider=stripe&ref={orderId}
"""
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from storefront.payments.models import CallbackEvent, CallbackOutcome, ProviderId

# Valeurs de 'payment' ou du 'status' ajouté par les fournisseurs -> issue
_OUTCOMES = {
    "success": CallbackOutcome.SUCCESS,
    "successful": CallbackOutcome.SUCCESS,
    "completed": CallbackOutcome.SUCCESS,
    "failed": CallbackOutcome.FAILED,
    "failure": CallbackOutcome.FAILED,
    "error": CallbackOutcome.FAILED,
    "cancel": CallbackOutcome.CANCELLED,
    "cancelled": CallbackOutcome.CANCELLED,
    "canceled": CallbackOutcome.CANCELLED,
}


def _join(base_url: str, params: Mapping[str, str]) -> str:
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{urlencode(params)}"


def build_callback_url(success_url: str, provider: ProviderId, order_id: str) -> str:
    return _join(success_url, {"payment": "success", "provider": provider.value, "ref": order_id})


def build_cancel_url(cancel_url: str, provider: ProviderId, order_id: str) -> str:
    return _join(cancel_url, {"payment": "cancelled", "provider": provider.value, "ref": order_id})


def _first(query: Mapping[str, Any], key: str) -> str:
    value = query.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else ""
    return str(value or "").strip()


def parse_callback(query: Mapping[str, Any]) -> Optional[CallbackEvent]:
    """
    Extrait (ref, provider, outcome) des paramètres de la redirection.
    - Sans 'ref' (ou 'payment' absent): None, rien à réconcilier.
    - 'status' ajouté par Flutterwave (cancelled/failed) l'emporte sur payment=success.
    - Fournisseur inconnu: conservé à None, la commande fait foi.
    """
    order_id = _first(query, "ref")
    payment = _first(query, "payment").lower()
    if not order_id or not payment:
        return None

    outcome = _OUTCOMES.get(payment, CallbackOutcome.FAILED)
    status = _first(query, "status").lower()
    if outcome == CallbackOutcome.SUCCESS and status in _OUTCOMES:
        outcome = _OUTCOMES[status]

    try:
        provider: Optional[ProviderId] = ProviderId(_first(query, "provider").lower())
    except ValueError:
        provider = None

    return CallbackEvent(order_id=order_id, provider=provider, outcome=outcome)
