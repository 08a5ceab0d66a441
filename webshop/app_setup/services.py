"""
Construction explicite des services au démarrage (pas de conteneur d'injection).
Les repositories sont des modules; le client Stripe est le module stripe_client.
Les vues récupèrent les services via app.state (dépendances get_*_service).
"""
from fastapi import FastAPI

from webshop import config
from webshop.catalog import repository as products_repo
from webshop.users import repository as users_repo
from webshop.orders import repository as orders_repo
from webshop.checkout import repository as sessions_repo
from webshop.checkout import stripe_client
from webshop.checkout.service import CheckoutService, WebhookReconciler
from webshop.orders.service import OrderService
from webshop.catalog.service import CatalogService

def build_services(app: FastAPI) -> None:
    app.state.checkout_service = CheckoutService(
        products=products_repo,
        sessions=sessions_repo,
        gateway=stripe_client,
        currency=config.CHECKOUT_CURRENCY,
        success_url=config.CHECKOUT_SUCCESS_URL,
        cancel_url=config.CHECKOUT_CANCEL_URL,
    )
    app.state.webhook_reconciler = WebhookReconciler(
        products=products_repo,
        users=users_repo,
        orders=orders_repo,
        sessions=sessions_repo,
        gateway=stripe_client,
        webhook_secret=config.STRIPE_WEBHOOK_SECRET,
    )
    app.state.order_service = OrderService(orders=orders_repo, users=users_repo, products=products_repo)
    app.state.catalog_service = CatalogService(products=products_repo)
