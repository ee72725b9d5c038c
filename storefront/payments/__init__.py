"""
Module 'payments' (feature-first): checkout multi-fournisseurs et réconciliation des retours.
Réunit modèles, logique panier, adaptateurs fournisseurs, repository et services.

Seuls les modèles sont ré-exportés ici; importer les services depuis leurs modules
(storefront.payments.service, storefront.payments.reconciler).
"""

from .models import (
    CallbackEvent,
    CallbackOutcome,
    CartLine,
    CheckoutRequest,
    Customer,
    Order,
    OrderStatus,
    PaymentSessionResult,
    ProviderId,
    ReconcileResult,
    RedirectTarget,
    ReturnTargets,
)

__all__ = [
    "CallbackEvent",
    "CallbackOutcome",
    "CartLine",
    "CheckoutRequest",
    "Customer",
    "Order",
    "OrderStatus",
    "PaymentSessionResult",
    "ProviderId",
    "ReconcileResult",
    "RedirectTarget",
    "ReturnTargets",
]
