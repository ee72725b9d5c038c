"""
Registre central des routers (API v1, admin, health).
- API v1: currency, payments
- Admin: commandes (expédition/livraison)
- Health
"""
from fastapi import FastAPI
from storefront.currency import views as currency_views
from storefront.payments import views as payments_views
from storefront.admin import views as admin_views
from storefront.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(currency_views.router)
    app.include_router(payments_views.router)
    # Admin
    app.include_router(admin_views.router)
    # Health & monitoring
    app.include_router(health_router)
