import secrets
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import BaseModel

import storefront.config as config
from storefront.admin import service as admin_service
from storefront.errors import UnknownOrder
from storefront.payments.models import OrderStatus

router = APIRouter(prefix="/api/v1/admin", tags=["Admin API"])


class StatusUpdate(BaseModel):
    status: OrderStatus


def require_admin_token(x_admin_token: Optional[str] = Header(None)) -> None:
    """
    Garde minimale de l'API admin: X-Admin-Token comparé à ADMIN_API_TOKEN (temps constant).
    - 503 si aucun token n'est configuré, 401 si absent ou différent.
    """
    expected = config.ADMIN_API_TOKEN
    if not expected:
        raise HTTPException(status_code=503, detail="ADMIN_API_TOKEN non configuré")
    if not x_admin_token or not secrets.compare_digest(x_admin_token, expected):
        raise HTTPException(status_code=401, detail="Accès admin refusé")

# module storefront.admin.views
@router.get("/orders", dependencies=[Depends(require_admin_token)])
def admin_list_orders(limit: int = Query(100, ge=1, le=500)) -> Dict[str, Any]:
    orders = admin_service.list_orders(limit)
    return {"orders": [o.to_record() for o in orders]}

@router.patch("/orders/{order_id}/status", dependencies=[Depends(require_admin_token)])
def admin_update_status(order_id: str, body: StatusUpdate) -> Dict[str, Any]:
    """
    Expédition / livraison d'une commande payée.
    - 404 si la commande est inconnue, 400 si la transition est interdite.
    """
    try:
        order = admin_service.advance_order_status(order_id, body.status)
    except UnknownOrder:
        raise HTTPException(status_code=404, detail="Commande introuvable")
    return order.to_record()
