"""
Module 'currency' (feature-first): devise détectée, routage fournisseur et formatage.
"""

from .resolver import (
    CURRENCIES,
    DEFAULT_CURRENCY,
    ZERO_DECIMAL_CURRENCIES,
    resolve,
    is_supported,
    providers_for,
    default_provider,
    currency_symbol,
    format_amount,
    supported_currencies,
)

__all__ = [
    "CURRENCIES",
    "DEFAULT_CURRENCY",
    "ZERO_DECIMAL_CURRENCIES",
    "resolve",
    "is_supported",
    "providers_for",
    "default_provider",
    "currency_symbol",
    "format_amount",
    "supported_currencies",
]
