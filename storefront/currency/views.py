from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, Request

from storefront.currency import resolver

router = APIRouter(prefix="/api/v1/currency", tags=["Currency API"])

# module storefront.currency.views
@router.get("")
def list_currencies() -> Dict[str, Any]:
    """Devises supportées pour le sélecteur de devise du checkout."""
    return {"currencies": resolver.supported_currencies(), "default": resolver.DEFAULT_CURRENCY}

@router.get("/resolve")
def resolve_currency(request: Request, locale: Optional[str] = None) -> Dict[str, Any]:
    """
    Devise détectée + fournisseurs proposés.
    - locale: "en-NG", "en_GB", ... ; à défaut l'en-tête Accept-Language est utilisé.
    """
    signal = locale or request.headers.get("accept-language")
    code = resolver.resolve(signal)
    providers = resolver.providers_for(code)
    return {
        "currency": code,
        "symbol": resolver.currency_symbol(code),
        "providers": [p.value for p in providers],
        "default_provider": providers[0].value,
    }

@router.get("/format")
def format_amount(amount: float = Query(...), currency: str = Query(..., min_length=3, max_length=3)) -> Dict[str, Any]:
    """Montant affiché; supported=False signale une devise hors catalogue (symbole par défaut)."""
    return {
        "formatted": resolver.format_amount(amount, currency),
        "currency": currency.upper(),
        "supported": resolver.is_supported(currency),
    }

@router.get("/{code}/providers")
def currency_providers(code: str) -> Dict[str, Any]:
    """UnsupportedCurrency (400 + alternatives) si la devise est inconnue."""
    providers = resolver.providers_for(code)
    return {"currency": code.upper(), "providers": [p.value for p in providers]}
