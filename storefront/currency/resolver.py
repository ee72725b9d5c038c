"""
Résolution de devise et routage fournisseur.

- resolve(): locale / en-tête Accept-Language / région -> code devise (USD par défaut, ne lève jamais)
- providers_for(): devise -> fournisseurs par ordre de préférence (UnsupportedCurrency sinon)
- format_amount(): rendu d'un montant avec symbole et convention de décimales
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from storefront.errors import UnsupportedCurrency
from storefront.payments.models import ProviderId

DEFAULT_CURRENCY = "USD"

# Table statique: l'ordre des fournisseurs est l'ordre de préférence
CURRENCIES: Dict[str, Dict[str, Any]] = {
    "USD": {"symbol": "$", "name": "US Dollar", "providers": (ProviderId.STRIPE,)},
    "GBP": {"symbol": "£", "name": "British Pound", "providers": (ProviderId.STRIPE,)},
    "EUR": {"symbol": "€", "name": "Euro", "providers": (ProviderId.STRIPE,)},
    "NGN": {"symbol": "₦", "name": "Nigerian Naira", "providers": (ProviderId.PAYSTACK, ProviderId.FLUTTERWAVE)},
    "GHS": {"symbol": "GH₵", "name": "Ghanaian Cedi", "providers": (ProviderId.PAYSTACK, ProviderId.FLUTTERWAVE)},
    "KES": {"symbol": "KSh", "name": "Kenyan Shilling", "providers": (ProviderId.PAYSTACK, ProviderId.FLUTTERWAVE)},
    "ZAR": {"symbol": "R", "name": "South African Rand", "providers": (ProviderId.PAYSTACK, ProviderId.FLUTTERWAVE)},
    "TZS": {"symbol": "TSh", "name": "Tanzanian Shilling", "providers": (ProviderId.FLUTTERWAVE,)},
    "UGX": {"symbol": "USh", "name": "Ugandan Shilling", "providers": (ProviderId.FLUTTERWAVE,)},
    "CAD": {"symbol": "CA$", "name": "Canadian Dollar", "providers": (ProviderId.STRIPE,)},
    "AUD": {"symbol": "A$", "name": "Australian Dollar", "providers": (ProviderId.STRIPE,)},
}

# Devises dont l'unité n'est pas subdivisée dans l'usage courant
ZERO_DECIMAL_CURRENCIES = frozenset({"NGN", "KES", "TZS", "UGX"})

LOCALE_TO_CURRENCY: Dict[str, str] = {
    "en-US": "USD", "en-CA": "CAD", "en-GB": "GBP", "en-AU": "AUD",
    "en-NG": "NGN", "en-GH": "GHS", "en-KE": "KES", "en-ZA": "ZAR",
    "en-TZ": "TZS", "en-UG": "UGX",
    "fr-CA": "CAD", "sw-KE": "KES", "sw-TZ": "TZS", "af-ZA": "ZAR",
    "de-DE": "EUR", "fr-FR": "EUR", "es-ES": "EUR", "it-IT": "EUR",
    "nl-NL": "EUR", "pt-PT": "EUR", "pl-PL": "EUR",
}

# Repli par région seule (ex: "NG", "en-NG" inconnu en tant que locale)
REGION_TO_CURRENCY: Dict[str, str] = {
    "US": "USD", "CA": "CAD", "GB": "GBP", "UK": "GBP", "AU": "AUD",
    "NG": "NGN", "GH": "GHS", "KE": "KES", "ZA": "ZAR", "TZ": "TZS", "UG": "UGX",
    "DE": "EUR", "FR": "EUR", "ES": "EUR", "IT": "EUR", "NL": "EUR", "PT": "EUR",
    "PL": "EUR", "IE": "EUR", "BE": "EUR", "AT": "EUR", "FI": "EUR", "GR": "EUR", "LU": "EUR",
}

_LOCALE_INDEX = {k.lower(): v for k, v in LOCALE_TO_CURRENCY.items()}


def _first_locale(signal: str) -> str:
    # "en-GB,en;q=0.9" -> "en-GB"
    first = signal.split(",")[0].split(";")[0]
    return first.strip().replace("_", "-")


def resolve(locale_signal: Optional[str]) -> str:
    """
    Locale/région -> devise supportée.
    Accepte "en-NG", "en_NG", un en-tête Accept-Language complet ou une région "NG".
    Toute entrée inconnue ou invalide retourne DEFAULT_CURRENCY.
    """
    if not isinstance(locale_signal, str) or not locale_signal.strip():
        return DEFAULT_CURRENCY
    locale = _first_locale(locale_signal)
    code = _LOCALE_INDEX.get(locale.lower())
    if code:
        return code
    region = locale.split("-")[-1].upper()
    return REGION_TO_CURRENCY.get(region, DEFAULT_CURRENCY)


def is_supported(currency_code: Optional[str]) -> bool:
    return (currency_code or "").strip().upper() in CURRENCIES


def providers_for(currency_code: str) -> Tuple[ProviderId, ...]:
    code = (currency_code or "").strip().upper()
    entry = CURRENCIES.get(code)
    if entry is None:
        raise UnsupportedCurrency(
            f"Devise non supportée: {currency_code}",
            alternatives=list(CURRENCIES.keys()),
        )
    return entry["providers"]


def default_provider(currency_code: str) -> ProviderId:
    return providers_for(currency_code)[0]


def currency_symbol(currency_code: str) -> str:
    entry = CURRENCIES.get((currency_code or "").upper()) or CURRENCIES[DEFAULT_CURRENCY]
    return entry["symbol"]


def format_amount(amount: float, currency_code: str) -> str:
    """
    Rend un montant pour l'UI avant paiement.
    - NGN, KES, TZS, UGX: arrondi à l'entier (half-up) avec séparateur de milliers
    - autres devises: exactement deux décimales (half-up), sans séparateur de milliers
    - devise inconnue: symbole USD (l'affichage ne doit pas échouer)
    """
    code = (currency_code or "").upper()
    symbol = currency_symbol(code)
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        value = Decimal("0")
    if not value.is_finite():
        value = Decimal("0")
    if code in ZERO_DECIMAL_CURRENCIES:
        rounded = value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return f"{symbol}{int(rounded):,}"
    rounded = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{symbol}{rounded:.2f}"


def supported_currencies() -> List[Dict[str, Any]]:
    return [
        {
            "code": code,
            "symbol": entry["symbol"],
            "name": entry["name"],
            "providers": [p.value for p in entry["providers"]],
            "zero_decimal": code in ZERO_DECIMAL_CURRENCIES,
        }
        for code, entry in CURRENCIES.items()
    ]
