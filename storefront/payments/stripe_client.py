"""
Adaptateur Stripe bas niveau: centralise la configuration et les appels du SDK.
"""
import stripe
from typing import Any, Dict, List, Optional

from storefront.config import PROVIDER_TIMEOUT_SECONDS, STRIPE_SECRET_KEY

# Délai appliqué au client HTTP actuellement installé dans le SDK
_http_timeout: Optional[float] = None

# module storefront.payments.stripe_client
def require_stripe(timeout: float = PROVIDER_TIMEOUT_SECONDS) -> stripe:
    """
    Prépare et retourne le module stripe prêt à l’emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY si disponible.
    - Désactive les retries réseau du SDK: un seul appel sortant par tentative.
    - Installe un client HTTP borné par `timeout` (PROVIDER_TIMEOUT_SECONDS par défaut),
      comme pour les appels httpx des autres fournisseurs.
    - En absence de clé, les appels Stripe échoueront côté SDK (ex: No API key provided).
    """
    global _http_timeout
    if STRIPE_SECRET_KEY:
        stripe.api_key = STRIPE_SECRET_KEY
    stripe.max_network_retries = 0
    if stripe.default_http_client is None or _http_timeout != timeout:
        stripe.default_http_client = stripe.new_default_http_client(timeout=timeout)
        _http_timeout = timeout
    return stripe

def create_session(
    *,
    line_items: List[Dict[str, Any]],
    mode: str,
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, Any],
    client_reference_id: str,
    customer_email: str,
    timeout: float = PROVIDER_TIMEOUT_SECONDS,
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout.
    - line_items: lignes Stripe (price_data/quantity)
    - success_url / cancel_url: URLs de retour (contrat ?payment=...&provider=stripe&ref=...)
    - client_reference_id: order id, relu pour vérifier la corrélation
    - timeout: délai max de l'appel (au-delà: APIConnectionError côté SDK)
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://...", "client_reference_id": "ORD-..."})
    """
    require_stripe(timeout)
    session = stripe.checkout.Session.create(
        line_items=line_items,
        mode=mode,
        success_url=success_url,
        cancel_url=cancel_url,
        metadata=metadata,
        client_reference_id=client_reference_id,
        customer_email=customer_email,
        payment_method_types=["card"],
    )
    # stripe retourne un objet; on le traite comme dict-compatible
    return dict(session)

def get_session(session_id: str, timeout: float = PROVIDER_TIMEOUT_SECONDS) -> Dict[str, Any]:
    """
    Récupère une session Stripe Checkout par son identifiant.
    Retour: dict session incluant "id", "payment_status", "client_reference_id", etc.
    """
    require_stripe(timeout)
    session = stripe.checkout.Session.retrieve(session_id)
    return dict(session)
