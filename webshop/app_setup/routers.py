"""
Registre central des routers (API catalogue, checkout, commandes, health).
"""
from fastapi import FastAPI
from webshop.catalog import views as catalog_views
from webshop.checkout import views as checkout_views
from webshop.orders import views as orders_views
from webshop.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(catalog_views.router)
    app.include_router(checkout_views.router)
    app.include_router(orders_views.router)
    # Health & monitoring
    app.include_router(health_router)
