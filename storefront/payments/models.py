# module storefront.payments.models
"""
Modèles du checkout multi-fournisseurs (pydantic v2).

- CartLine / CheckoutRequest: copie figée du panier au moment du checkout (prix capturés).
- PaymentSessionResult: sortie normalisée de n'importe quel adaptateur fournisseur.
- Order: enregistrement durable, clé = order id (aussi référence fournisseur).
- CallbackEvent: signal de retour (ref + provider + outcome) lu dans l'URL de redirection.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProviderId(str, Enum):
    PAYSTACK = "paystack"
    STRIPE = "stripe"
    FLUTTERWAVE = "flutterwave"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


class CallbackOutcome(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


class CartLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_ref: str = Field(min_length=1)
    name: str = ""
    unit_price: float = Field(gt=0)
    quantity: int = Field(ge=1)


class Customer(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    phone: Optional[str] = None

    @field_validator("name", "email")
    @classmethod
    def _strip(cls, v: str) -> str:
        return (v or "").strip()


class ReturnTargets(BaseModel):
    model_config = ConfigDict(frozen=True)

    success_url: str = Field(min_length=1)
    cancel_url: Optional[str] = None


class CheckoutRequest(BaseModel):
    """
    Demande de checkout.
    - cart: tuple immuable (snapshot), jamais une référence vers un panier partagé.
    - provider: optionnel, à défaut le fournisseur préféré de la devise est utilisé.
    - return_targets: optionnel, à défaut FRONTEND_URL.
    """
    model_config = ConfigDict(frozen=True)

    customer: Customer
    currency: str = Field(min_length=3, max_length=3)
    cart: Tuple[CartLine, ...]
    total_amount: float = Field(ge=0)
    provider: Optional[ProviderId] = None
    return_targets: Optional[ReturnTargets] = None

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, v: str) -> str:
        return v.strip().upper()


class PaymentSessionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: ProviderId
    redirect_url: str
    provider_reference: str


class RedirectTarget(BaseModel):
    order_id: str
    redirect_url: str
    provider: ProviderId
    provider_reference: str


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Order(BaseModel):
    id: str
    cart_snapshot: List[CartLine]
    total_amount: float
    currency: str
    status: OrderStatus = OrderStatus.PENDING
    customer: Customer
    provider: ProviderId
    provider_reference: str = ""
    created_date: str = Field(default_factory=_now_iso)
    updated_at: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        """Ligne JSON-compatible pour la table des commandes."""
        return self.model_dump(mode="json")

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Order":
        return cls.model_validate(row)


class CallbackEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str
    provider: Optional[ProviderId] = None
    outcome: CallbackOutcome = CallbackOutcome.SUCCESS


class ReconcileResult(str, Enum):
    PAID = "paid"
    FAILED = "failed"
    UNKNOWN_ORDER = "unknown_order"
    ALREADY_RECONCILED = "already_reconciled"
    UNVERIFIED = "unverified"
    ERROR = "error"
