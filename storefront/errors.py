"""
Erreurs typées du checkout et de la réconciliation.

- Chaque erreur de checkout porte un `kind` stable, un code HTTP et un drapeau `retryable`
  pour que l'UI affiche un message précis par type d'échec.
- Les erreurs de réconciliation (UnknownOrder, AlreadyReconciled) sont des no-ops:
  journalisées, jamais renvoyées à l'utilisateur sur la page de retour.
"""
from typing import Any, Dict, Iterable, Optional


class CheckoutError(Exception):
    kind = "checkout_error"
    status_code = 400
    retryable = False

    def __init__(self, message: str, *, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "error": self.kind,
            "detail": self.message,
            "retryable": self.retryable,
        }
        if self.provider:
            body["provider"] = self.provider
        return body


class InvalidRequest(CheckoutError):
    """Requête corrigeable par l'utilisateur; aucun appel distant, aucune commande."""
    kind = "invalid_request"


class UnsupportedCurrency(InvalidRequest):
    """Devise refusée (résolveur ou fournisseur), avec les alternatives valides."""
    kind = "unsupported_currency"

    def __init__(self, message: str, *, alternatives: Iterable[str] = (), provider: Optional[str] = None):
        super().__init__(message, provider=provider)
        self.alternatives = [str(a) for a in alternatives]

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["alternatives"] = self.alternatives
        return body


class RemoteRejected(CheckoutError):
    """
    Le fournisseur a refusé la session (clé invalide, montant mal formé, ...).
    Le message distant est conservé pour l'affichage, jamais interprété.
    """
    kind = "remote_rejected"
    status_code = 502

    def __init__(self, message: str, *, provider: Optional[str] = None, remote_status: Optional[int] = None):
        super().__init__(message, provider=provider)
        self.remote_status = remote_status

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        if self.remote_status is not None:
            body["remote_status"] = self.remote_status
        return body


class ReferenceMismatch(RemoteRejected):
    """La référence de commande ne peut pas être transmise ou revient modifiée."""
    kind = "reference_mismatch"


class NetworkFailure(CheckoutError):
    """Aucune réponse (timeout, transport). Réessayable via une nouvelle tentative de checkout."""
    kind = "network_failure"
    status_code = 503
    retryable = True


class OrderStoreError(CheckoutError):
    kind = "order_store_failure"
    status_code = 503
    retryable = True


class DuplicateOrder(OrderStoreError):
    pass


class ReconcileError(Exception):
    kind = "reconcile_error"

    def __init__(self, order_id: str, message: str = ""):
        super().__init__(message or order_id)
        self.order_id = order_id


class UnknownOrder(ReconcileError):
    kind = "unknown_order"


class AlreadyReconciled(ReconcileError):
    kind = "already_reconciled"
