"""
Contrat commun des adaptateurs fournisseurs.

Un adaptateur transforme (CheckoutRequest, order_id) en un appel distant unique
et normalise la réponse en PaymentSessionResult. Il est sans état et ne réessaie jamais:
la politique de nouvelle tentative appartient à l'appelant (nouveau checkout, nouvel order id).
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Optional

import httpx

from storefront.config import FRONTEND_URL, PROVIDER_TIMEOUT_SECONDS
from storefront.errors import NetworkFailure, ReferenceMismatch, RemoteRejected, UnsupportedCurrency
from storefront.payments.models import CheckoutRequest, Order, PaymentSessionResult, ProviderId
from storefront.payments.order_id import is_valid_reference

logger = logging.getLogger(__name__)

MINOR = "minor"
MAJOR = "major"


class ProviderAdapter(ABC):
    provider_id: ProviderId
    # Unité attendue par l'API: MINOR (×100) ou MAJOR
    amount_unit: str = MINOR
    # None = pas de liste blanche stricte côté adaptateur
    allowed_currencies: Optional[FrozenSet[str]] = None

    def __init__(self, secret_key: str = "", *, client: Optional[httpx.Client] = None,
                 timeout: float = PROVIDER_TIMEOUT_SECONDS):
        self.secret_key = secret_key
        self.timeout = timeout
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    @abstractmethod
    def initialize(self, request: CheckoutRequest, order_id: str) -> PaymentSessionResult:
        """Ouvre une session de paiement distante portant order_id comme référence."""

    def verify(self, order: Order) -> bool:
        """Confirme le paiement côté fournisseur (appel serveur à serveur)."""
        raise NotImplementedError

    # --- helpers partagés ---

    @staticmethod
    def success_url(request: CheckoutRequest) -> str:
        targets = request.return_targets
        return targets.success_url if targets else FRONTEND_URL

    @staticmethod
    def cancel_url(request: CheckoutRequest) -> str:
        targets = request.return_targets
        if targets and targets.cancel_url:
            return targets.cancel_url
        return targets.success_url if targets else FRONTEND_URL

    def ensure_currency(self, currency: str) -> None:
        if self.allowed_currencies is not None and currency.upper() not in self.allowed_currencies:
            raise UnsupportedCurrency(
                f"{self.provider_id.value} ne supporte pas {currency}",
                alternatives=sorted(self.allowed_currencies),
                provider=self.provider_id.value,
            )

    def ensure_reference(self, order_id: str) -> None:
        if not is_valid_reference(order_id):
            raise ReferenceMismatch(
                f"Référence de commande non transmissible: {order_id!r}",
                provider=self.provider_id.value,
            )

    def check_echo(self, order_id: str, echoed: Optional[str]) -> None:
        """La référence renvoyée doit être exactement l'order id."""
        if echoed != order_id:
            logger.error("%s reference mismatch sent=%s echoed=%s", self.provider_id.value, order_id, echoed)
            raise ReferenceMismatch(
                f"Référence modifiée par {self.provider_id.value}: {echoed!r} != {order_id!r}",
                provider=self.provider_id.value,
            )

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def _send(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        """
        Un seul appel HTTP, sans retry.
        - Timeout / transport -> NetworkFailure
        - HTTP non-2xx ou corps illisible -> RemoteRejected (message distant conservé)
        """
        name = self.provider_id.value
        try:
            if self._client is not None:
                response = self._client.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("%s timeout url=%s", name, url)
            raise NetworkFailure(f"{name}: délai dépassé", provider=name) from e
        except httpx.TransportError as e:
            logger.warning("%s transport error url=%s err=%s", name, url, e)
            raise NetworkFailure(f"{name}: fournisseur injoignable", provider=name) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.status_code >= 400:
            message = str(payload.get("message") or response.reason_phrase or "Erreur fournisseur")
            logger.warning("%s rejected status=%s message=%s", name, response.status_code, message)
            raise RemoteRejected(message, provider=name, remote_status=response.status_code)
        return payload

    def _post(self, url: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return self._send("POST", url, json=body)

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._send("GET", url, params=params)
