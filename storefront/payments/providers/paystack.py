"""
Adaptateur Paystack (fournisseur régional NGN/GHS/KES/ZAR).
- Montant en unité mineure (kobo, pesewas, cents).
- Liste blanche stricte des devises.
- reference = order id; la référence renvoyée doit être identique.
"""
import logging
from urllib.parse import quote

from storefront.config import PAYSTACK_BASE_URL
from storefront.errors import RemoteRejected
from storefront.payments import cart as cart_logic
from storefront.payments.callback import build_callback_url
from storefront.payments.models import CheckoutRequest, Order, PaymentSessionResult, ProviderId
from .base import MINOR, ProviderAdapter

logger = logging.getLogger(__name__)

PAYSTACK_CURRENCIES = frozenset({"NGN", "GHS", "ZAR", "KES"})


class PaystackAdapter(ProviderAdapter):
    provider_id = ProviderId.PAYSTACK
    amount_unit = MINOR
    allowed_currencies = PAYSTACK_CURRENCIES

    def __init__(self, secret_key: str = "", *, base_url: str = PAYSTACK_BASE_URL, **kwargs):
        super().__init__(secret_key, **kwargs)
        self.base_url = base_url.rstrip("/")

    def build_payload(self, request: CheckoutRequest, order_id: str) -> dict:
        return {
            "email": request.customer.email,
            "amount": cart_logic.to_minor_units(request.total_amount),
            "currency": request.currency.upper(),
            "reference": order_id,
            "callback_url": build_callback_url(self.success_url(request), self.provider_id, order_id),
            "metadata": {
                "order_id": order_id,
                "customer_name": request.customer.name,
                "cart_items": cart_logic.cart_metadata(request.cart),
            },
        }

    def initialize(self, request: CheckoutRequest, order_id: str) -> PaymentSessionResult:
        self.ensure_currency(request.currency)
        self.ensure_reference(order_id)
        body = self.build_payload(request, order_id)

        payload = self._post(f"{self.base_url}/transaction/initialize", body)
        data = payload.get("data") or {}
        if not payload.get("status") or not data.get("authorization_url"):
            raise RemoteRejected(
                str(payload.get("message") or "Initialisation Paystack refusée"),
                provider=self.provider_id.value,
            )
        self.check_echo(order_id, data.get("reference"))
        logger.info("paystack session initialized ref=%s", order_id)
        return PaymentSessionResult(
            provider=self.provider_id,
            redirect_url=data["authorization_url"],
            provider_reference=data["reference"],
        )

    def verify(self, order: Order) -> bool:
        reference = order.provider_reference or order.id
        payload = self._get(f"{self.base_url}/transaction/verify/{quote(reference, safe='')}")
        data = payload.get("data") or {}
        return bool(payload.get("status")) and data.get("status") == "success" and data.get("reference") == order.id
