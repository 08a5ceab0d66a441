"""
ASGI entrypoint: expose `app` pour les process managers (ex: uvicorn webshop.asgi:app).
Toute la configuration FastAPI est centralisée dans webshop.app_setup.factory.
"""

from webshop.app import app
