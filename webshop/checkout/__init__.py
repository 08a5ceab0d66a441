"""
Module 'checkout' (feature-first): point d'entrée public.
Réunit logique panier, metadata Stripe, client Stripe, registre des sessions et services.
"""

from .cart import MAX_CART_LINES, build_line_items, line_items_total
from .metadata import make_metadata, parse_metadata, extract_session_id
from .service import (
    CheckoutService,
    WebhookReconciler,
    ReconciliationOutcome,
    ReconciliationResult,
)

__all__ = [
    # cart
    "MAX_CART_LINES",
    "build_line_items",
    "line_items_total",
    # metadata
    "make_metadata",
    "parse_metadata",
    "extract_session_id",
    # services
    "CheckoutService",
    "WebhookReconciler",
    "ReconciliationOutcome",
    "ReconciliationResult",
]
