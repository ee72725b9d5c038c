"""
Adaptateur Flutterwave (fournisseur panafricain).
- Montant en unité MAJEURE (pas de ×100).
- tx_ref = order id; l'API Standard ne renvoie qu'un lien, la référence reste l'order id.
"""
import logging

from storefront.config import FLUTTERWAVE_BASE_URL
from storefront.errors import RemoteRejected
from storefront.payments import cart as cart_logic
from storefront.payments.callback import build_callback_url
from storefront.payments.models import CheckoutRequest, Order, PaymentSessionResult, ProviderId
from .base import MAJOR, ProviderAdapter

logger = logging.getLogger(__name__)


class FlutterwaveAdapter(ProviderAdapter):
    provider_id = ProviderId.FLUTTERWAVE
    amount_unit = MAJOR

    def __init__(self, secret_key: str = "", *, base_url: str = FLUTTERWAVE_BASE_URL, **kwargs):
        super().__init__(secret_key, **kwargs)
        self.base_url = base_url.rstrip("/")

    def build_payload(self, request: CheckoutRequest, order_id: str) -> dict:
        customer = request.customer
        return {
            "tx_ref": order_id,
            "amount": cart_logic.to_major_units(request.total_amount),
            "currency": request.currency.upper(),
            "redirect_url": build_callback_url(self.success_url(request), self.provider_id, order_id),
            "customer": {
                "email": customer.email,
                "name": customer.name,
                "phonenumber": customer.phone or "",
            },
            "customizations": {"title": "Checkout", "description": f"Order {order_id}"},
            "meta": {"order_id": order_id, "cart_items": cart_logic.cart_metadata(request.cart)},
        }

    def initialize(self, request: CheckoutRequest, order_id: str) -> PaymentSessionResult:
        self.ensure_currency(request.currency)
        self.ensure_reference(order_id)
        payload = self._post(f"{self.base_url}/v3/payments", self.build_payload(request, order_id))

        data = payload.get("data") or {}
        if payload.get("status") != "success" or not data.get("link"):
            raise RemoteRejected(
                str(payload.get("message") or "Initialisation Flutterwave refusée"),
                provider=self.provider_id.value,
            )
        logger.info("flutterwave session initialized ref=%s", order_id)
        return PaymentSessionResult(
            provider=self.provider_id,
            redirect_url=data["link"],
            provider_reference=order_id,
        )

    def verify(self, order: Order) -> bool:
        payload = self._get(
            f"{self.base_url}/v3/transactions/verify_by_reference",
            params={"tx_ref": order.id},
        )
        data = payload.get("data") or {}
        return (
            payload.get("status") == "success"
            and data.get("status") == "successful"
            and data.get("tx_ref") == order.id
        )
