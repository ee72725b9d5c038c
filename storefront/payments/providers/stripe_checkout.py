"""
Adaptateur Stripe Checkout (fournisseur carte global).
- Montant en unité mineure (cents), une seule ligne "Order {id}".
- client_reference_id = order id, relu sur la session retournée.
- Erreurs SDK: APIConnectionError -> NetworkFailure, autres StripeError -> RemoteRejected.
"""
import logging

import stripe

from storefront.config import STRIPE_SECRET_KEY
from storefront.errors import NetworkFailure, RemoteRejected
from storefront.payments import cart as cart_logic
from storefront.payments import stripe_client
from storefront.payments.callback import build_callback_url, build_cancel_url
from storefront.payments.models import CheckoutRequest, Order, PaymentSessionResult, ProviderId
from .base import MINOR, ProviderAdapter

logger = logging.getLogger(__name__)


class StripeAdapter(ProviderAdapter):
    provider_id = ProviderId.STRIPE
    amount_unit = MINOR

    def __init__(self, secret_key: str = STRIPE_SECRET_KEY, **kwargs):
        super().__init__(secret_key, **kwargs)

    def build_line_items(self, request: CheckoutRequest, order_id: str) -> list:
        return [{
            "price_data": {
                "currency": request.currency.lower(),
                "unit_amount": cart_logic.to_minor_units(request.total_amount),
                "product_data": {
                    "name": f"Order {order_id}",
                    "description": f"{cart_logic.cart_item_count(request.cart)} item(s)",
                },
            },
            "quantity": 1,
        }]

    def initialize(self, request: CheckoutRequest, order_id: str) -> PaymentSessionResult:
        self.ensure_currency(request.currency)
        self.ensure_reference(order_id)
        name = self.provider_id.value
        try:
            session = stripe_client.create_session(
                line_items=self.build_line_items(request, order_id),
                mode="payment",
                success_url=build_callback_url(self.success_url(request), self.provider_id, order_id),
                cancel_url=build_cancel_url(self.cancel_url(request), self.provider_id, order_id),
                metadata={
                    "order_id": order_id,
                    "customer_name": request.customer.name,
                    "cart_items": cart_logic.cart_metadata(request.cart),
                },
                client_reference_id=order_id,
                customer_email=request.customer.email,
                timeout=self.timeout,
            )
        except stripe.APIConnectionError as e:
            logger.warning("stripe connection error ref=%s err=%s", order_id, e)
            raise NetworkFailure("stripe: fournisseur injoignable", provider=name) from e
        except stripe.StripeError as e:
            message = getattr(e, "user_message", None) or str(e) or "Initialisation Stripe refusée"
            logger.warning("stripe rejected ref=%s status=%s message=%s", order_id, e.http_status, message)
            raise RemoteRejected(message, provider=name, remote_status=e.http_status) from e

        if not session.get("url") or not session.get("id"):
            raise RemoteRejected("Session Stripe invalide", provider=name)
        self.check_echo(order_id, session.get("client_reference_id"))
        logger.info("stripe session initialized ref=%s session=%s", order_id, session.get("id"))
        return PaymentSessionResult(
            provider=self.provider_id,
            redirect_url=session["url"],
            provider_reference=session["id"],
        )

    def verify(self, order: Order) -> bool:
        if not order.provider_reference:
            return False
        try:
            session = stripe_client.get_session(order.provider_reference, timeout=self.timeout)
        except stripe.APIConnectionError as e:
            raise NetworkFailure("stripe: fournisseur injoignable", provider=self.provider_id.value) from e
        except stripe.StripeError as e:
            raise RemoteRejected(str(e), provider=self.provider_id.value, remote_status=e.http_status) from e
        return session.get("payment_status") == "paid" and session.get("client_reference_id") == order.id
