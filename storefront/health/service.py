from typing import Any, Dict

from fastapi import Request

import storefront.config as config
from storefront.infra.supabase_client import supabase_configured
from storefront.payments.providers import get_adapters
from storefront.utils.rate_limit import rate_limit_health_info

def providers_health_info(request: Request) -> Dict[str, Any]:
    """
    État de configuration (jamais les secrets eux-mêmes):
    - fournisseurs dont la clé est présente
    - backend de stockage des commandes, vérifications actives
    - état du rate limiting
    """
    return {
        "providers": {p.value: adapter.configured for p, adapter in get_adapters().items()},
        "order_store": config.ORDER_STORE_BACKEND,
        "supabase_configured": supabase_configured(),
        "verify_cart_prices": config.VERIFY_CART_PRICES,
        "callback_verification": config.PAYMENT_CALLBACK_VERIFY,
        "rate_limit": rate_limit_health_info(request),
    }
