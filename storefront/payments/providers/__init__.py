"""
Registre des adaptateurs fournisseurs: ProviderId -> adaptateur.
Ajouter un fournisseur = ajouter une entrée dans build_adapters(), sans branche par appel.
"""
import logging
from typing import Dict, Mapping, Optional

from storefront.config import FLUTTERWAVE_SECRET_KEY, PAYSTACK_SECRET_KEY, STRIPE_SECRET_KEY
from storefront.errors import InvalidRequest
from storefront.payments.models import ProviderId
from .base import MAJOR, MINOR, ProviderAdapter
from .flutterwave import FlutterwaveAdapter
from .paystack import PAYSTACK_CURRENCIES, PaystackAdapter
from .stripe_checkout import StripeAdapter

logger = logging.getLogger(__name__)

_adapters: Optional[Dict[ProviderId, ProviderAdapter]] = None


def build_adapters() -> Dict[ProviderId, ProviderAdapter]:
    adapters: Dict[ProviderId, ProviderAdapter] = {
        ProviderId.PAYSTACK: PaystackAdapter(PAYSTACK_SECRET_KEY),
        ProviderId.STRIPE: StripeAdapter(STRIPE_SECRET_KEY),
        ProviderId.FLUTTERWAVE: FlutterwaveAdapter(FLUTTERWAVE_SECRET_KEY),
    }
    for provider_id, adapter in adapters.items():
        if not adapter.configured:
            logger.warning("payment provider %s has no secret key configured", provider_id.value)
    return adapters


def get_adapters() -> Dict[ProviderId, ProviderAdapter]:
    global _adapters
    if _adapters is None:
        _adapters = build_adapters()
    return _adapters


def get_adapter(provider: ProviderId, adapters: Optional[Mapping[ProviderId, ProviderAdapter]] = None) -> ProviderAdapter:
    table = adapters if adapters is not None else get_adapters()
    adapter = table.get(provider)
    if adapter is None:
        raise InvalidRequest(f"Fournisseur indisponible: {provider}")
    return adapter


__all__ = [
    "MAJOR",
    "MINOR",
    "PAYSTACK_CURRENCIES",
    "ProviderAdapter",
    "PaystackAdapter",
    "StripeAdapter",
    "FlutterwaveAdapter",
    "build_adapters",
    "get_adapters",
    "get_adapter",
]
