"""
Cas d'usage 'checkout': orchestre validation, fournisseur et enregistrement de la commande.

Machine à états d'une tentative (jamais ré-entrée, une tentative = un order id):
    VALIDATING -> INITIALIZING -> COMMITTED
    VALIDATING -> REJECTED
    INITIALIZING -> FAILED
Garantie: une commande existe si et seulement si une session fournisseur a été ouverte pour elle.
"""
import logging
from enum import Enum
from typing import Mapping, Optional

from email_validator import EmailNotValidError, validate_email

from storefront.config import AMOUNT_TOLERANCE
from storefront.currency import providers_for
from storefront.errors import CheckoutError, InvalidRequest, OrderStoreError, UnsupportedCurrency
from storefront.payments import cart as cart_logic
from storefront.payments import repository
from storefront.payments.models import (
    CheckoutRequest,
    Order,
    OrderStatus,
    PaymentSessionResult,
    ProviderId,
    RedirectTarget,
)
from storefront.payments.order_id import generate_order_id
from storefront.payments.providers import ProviderAdapter, get_adapter

logger = logging.getLogger(__name__)


class CheckoutState(str, Enum):
    VALIDATING = "validating"
    INITIALIZING = "initializing"
    COMMITTED = "committed"
    REJECTED = "rejected"
    FAILED = "failed"


class CheckoutAttempt:
    """Une tentative de checkout (usage unique)."""

    def __init__(
        self,
        request: CheckoutRequest,
        *,
        adapters: Optional[Mapping[ProviderId, ProviderAdapter]] = None,
        orders: Optional[repository.OrderStore] = None,
        products: Optional[repository.ProductStore] = None,
        tolerance: float = AMOUNT_TOLERANCE,
    ):
        self.request = request
        self.adapters = adapters
        self.orders = orders if orders is not None else repository.get_order_store()
        self.products = products
        self.tolerance = tolerance
        self.state = CheckoutState.VALIDATING
        self.order_id: Optional[str] = None
        self.provider: Optional[ProviderId] = request.provider

    def validate(self) -> CheckoutRequest:
        """
        Vérifie la requête sans effet de bord.
        - client: nom et email non vides, email syntaxiquement valide
        - panier non vide, total envoyé = Σ prix × quantité (tolérance AMOUNT_TOLERANCE)
        - le total recalculé (catalogue si disponible) remplace total_amount
        - devise supportée par le fournisseur choisi (sinon UnsupportedCurrency + alternatives)
        - prix re-vérifiés contre le catalogue si un ProductStore est fourni
        """
        req = self.request
        if not req.customer.name:
            raise InvalidRequest("Nom du client requis")
        if not req.customer.email:
            raise InvalidRequest("Email du client requis")
        try:
            validate_email(req.customer.email, check_deliverability=False)
        except EmailNotValidError as e:
            raise InvalidRequest(f"Email invalide: {e}") from e
        if not req.cart:
            raise InvalidRequest("Panier vide")

        allowed = providers_for(req.currency)
        provider = req.provider or allowed[0]
        if provider not in allowed:
            raise UnsupportedCurrency(
                f"{provider.value} ne prend pas en charge {req.currency}",
                alternatives=[p.value for p in allowed],
                provider=provider.value,
            )
        self.provider = provider

        total = cart_logic.check_total(req.cart, req.total_amount, self.tolerance)
        if self.products is not None:
            prices = self.products.prices_for(line.product_ref for line in req.cart)
            total = cart_logic.check_catalog_prices(req.cart, prices)

        # Le montant facturé et enregistré est toujours le total recalculé, jamais celui du client
        req = req.model_copy(update={"provider": provider, "total_amount": float(total)})
        self.request = req
        return req

    def initialize(self) -> PaymentSessionResult:
        self.state = CheckoutState.INITIALIZING
        self.order_id = generate_order_id()
        adapter = get_adapter(self.provider, self.adapters)
        return adapter.initialize(self.request, self.order_id)

    def commit(self, session: PaymentSessionResult) -> RedirectTarget:
        req = self.request
        order = Order(
            id=self.order_id,
            cart_snapshot=list(req.cart),
            total_amount=req.total_amount,
            currency=req.currency,
            status=OrderStatus.PENDING,
            customer=req.customer,
            provider=session.provider,
            provider_reference=session.provider_reference,
        )
        try:
            self.orders.create(order)
        except OrderStoreError:
            logger.error(
                "checkout commit failed order_id=%s provider=%s provider_reference=%s (session ouverte sans commande)",
                self.order_id, session.provider.value, session.provider_reference,
            )
            raise
        self.state = CheckoutState.COMMITTED
        return RedirectTarget(
            order_id=order.id,
            redirect_url=session.redirect_url,
            provider=session.provider,
            provider_reference=session.provider_reference,
        )

    def run(self) -> RedirectTarget:
        if self.state != CheckoutState.VALIDATING:
            raise RuntimeError(f"Tentative de checkout déjà utilisée (state={self.state.value})")
        try:
            self.validate()
        except CheckoutError as e:
            self.state = CheckoutState.REJECTED
            logger.info("checkout rejected kind=%s detail=%s", e.kind, e.message)
            raise

        try:
            session = self.initialize()
            target = self.commit(session)
        except CheckoutError as e:
            self.state = CheckoutState.FAILED
            logger.warning(
                "checkout failed order_id=%s provider=%s kind=%s detail=%s",
                self.order_id, self.provider.value if self.provider else None, e.kind, e.message,
            )
            raise
        except Exception:
            self.state = CheckoutState.FAILED
            logger.exception(
                "checkout failed unexpectedly order_id=%s provider=%s",
                self.order_id, self.provider.value if self.provider else None,
            )
            raise

        logger.info(
            "checkout committed order_id=%s provider=%s currency=%s total=%s",
            target.order_id, target.provider.value, self.request.currency, self.request.total_amount,
        )
        return target


def checkout(
    request: CheckoutRequest,
    *,
    adapters: Optional[Mapping[ProviderId, ProviderAdapter]] = None,
    orders: Optional[repository.OrderStore] = None,
    products: Optional[repository.ProductStore] = None,
) -> RedirectTarget:
    """
    Point d'entrée unique du checkout: valide, ouvre la session fournisseur, enregistre la commande
    'pending' et renvoie la cible de redirection. Les erreurs typées (storefront.errors) remontent
    telles quelles à l'appelant.
    """
    return CheckoutAttempt(request, adapters=adapters, orders=orders, products=products).run()
