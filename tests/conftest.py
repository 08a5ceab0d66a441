import os

# Pas de Redis pendant les tests (lifespan)
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Generator, Dict, Any, Optional
from fastapi.testclient import TestClient

from webshop.app_setup.factory import create_app
from webshop.checkout.service import CheckoutService, WebhookReconciler
from webshop.orders.service import OrderService
from webshop.catalog.service import CatalogService
from webshop.utils.security import get_session_user

from fakes import ADMIN, ALICE, BOB, FakeGateway, FakeProducts, FakeStore, FakeUsers, WEBHOOK_SECRET

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture
def products() -> FakeProducts:
    return FakeProducts([
        {"id": 1, "name": "T-shirt", "price": 199.0},
        {"id": 2, "name": "Mug", "price": 89.5},
        {"id": 3, "name": "Sticker", "price": 12.25},
    ])

@pytest.fixture
def users() -> FakeUsers:
    return FakeUsers([ALICE, BOB, ADMIN])

@pytest.fixture
def store(products, users) -> FakeStore:
    return FakeStore(products, users)

@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()

@pytest.fixture
def checkout_service(products, store, gateway) -> CheckoutService:
    return CheckoutService(
        products=products,
        sessions=store,
        gateway=gateway,
        currency="nok",
        success_url="http://localhost:3000/profile/vieworders",
        cancel_url="http://localhost:3000/shoppingcart",
    )

@pytest.fixture
def reconciler(products, users, store, gateway) -> WebhookReconciler:
    return WebhookReconciler(
        products=products,
        users=users,
        orders=store,
        sessions=store,
        gateway=gateway,
        webhook_secret=WEBHOOK_SECRET,
    )

@pytest.fixture
def order_service(store, users, products) -> OrderService:
    return OrderService(orders=store, users=users, products=products)

@pytest.fixture
def app(checkout_service, reconciler, order_service, products):
    """App de test: services construits sur les fakes (le lifespan ne les remplace pas)."""
    fastapi_app = create_app()
    fastapi_app.state.checkout_service = checkout_service
    fastapi_app.state.webhook_reconciler = reconciler
    fastapi_app.state.order_service = order_service
    fastapi_app.state.catalog_service = CatalogService(products=products)
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture
def login(app):
    """login(user) pose l'identité renvoyée par get_session_user (None = anonyme)."""
    def _login(user: Optional[Dict[str, Any]]):
        app.dependency_overrides[get_session_user] = lambda: user
    yield _login
    app.dependency_overrides.clear()
