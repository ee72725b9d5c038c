"""
Logique panier pure (pas de fournisseur, pas de DB).
Montants calculés en Decimal pour éviter les écarts de flottants.
"""
import json
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Mapping

from storefront.errors import InvalidRequest
from storefront.payments.models import CartLine

# module storefront.payments.cart
def _dec(value: Any) -> Decimal:
    return Decimal(str(value))

def cart_total(cart: Iterable[CartLine]) -> Decimal:
    """Somme des unit_price × quantity du snapshot."""
    total = Decimal("0")
    for line in cart:
        total += _dec(line.unit_price) * line.quantity
    return total

def check_total(cart: Iterable[CartLine], total_amount: float, tolerance: float) -> Decimal:
    """
    Vérifie que le total envoyé correspond à la somme du panier.
    - Soulève InvalidRequest si l'écart dépasse la tolérance.
    - Retourne la somme recalculée.
    """
    expected = cart_total(cart)
    if abs(_dec(total_amount) - expected) > _dec(tolerance):
        raise InvalidRequest(f"Total incohérent: reçu {total_amount}, attendu {expected}")
    return expected

def check_catalog_prices(cart: Iterable[CartLine], prices: Mapping[str, float]) -> Decimal:
    """
    Compare chaque prix capturé au prix du catalogue (égalité stricte, aucune tolérance).
    - Produit introuvable ou prix modifié -> InvalidRequest.
    - Retourne le total Σ prix catalogue × quantité.
    """
    total = Decimal("0")
    for line in cart:
        price = prices.get(line.product_ref)
        if price is None:
            raise InvalidRequest(f"Produit introuvable: {line.product_ref}")
        if _dec(price) != _dec(line.unit_price):
            raise InvalidRequest(f"Prix modifié pour {line.product_ref}: {line.unit_price} != {price}")
        total += _dec(price) * line.quantity
    return total

def to_minor_units(amount: float) -> int:
    """Montant majeur -> unité mineure (×100, arrondi half-up), ex: 49.99 -> 4999."""
    return int((_dec(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def to_major_units(amount: float) -> float:
    """Montant majeur arrondi au centime, tel qu'attendu par les API en unité majeure."""
    return float(_dec(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))

def cart_item_count(cart: Iterable[CartLine]) -> int:
    return sum(line.quantity for line in cart)

def cart_metadata(cart: Iterable[CartLine], limit: int = 500) -> str:
    """
    Sérialise le panier pour les métadonnées fournisseur.
    - JSON compact [{"id", "quantity", "price"}] tronqué à `limit` caractères (limites Stripe/Paystack).
    """
    items: List[Dict[str, Any]] = [
        {"id": line.product_ref, "quantity": line.quantity, "price": line.unit_price}
        for line in cart
    ]
    return json.dumps(items, separators=(",", ":"))[:limit]
