"""
Cas d'usage 'checkout': orchestre catalogue, registre des sessions, Stripe et commandes.

- CheckoutService: panier -> session Stripe (+ contexte 'pending' enregistré)
- WebhookReconciler: événement Stripe -> une commande et ses lignes, avec un résultat explicite

Les collaborateurs (repositories, client Stripe) sont injectés à la construction
(voir webshop.app_setup.services.build_services); les tests passent des fakes.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import logging

from webshop.errors import BadRequest, Forbidden, InvalidPayload, StorageError, Unauthorized, ExternalServiceError
from . import cart as cart_logic
from . import metadata as meta

logger = logging.getLogger(__name__)

COMPLETED_EVENT = "checkout.session.completed"
PAID_STATUSES = ("paid", "no_payment_required")
ORDER_STATUS_PAID = "Paid"


class ReconciliationOutcome(str, Enum):
    APPLIED = "applied"
    IGNORED = "ignored"
    SKIPPED_UNKNOWN_USER = "skipped_unknown_user"
    SKIPPED_NO_LINES = "skipped_no_lines"
    SKIPPED_UNPAID = "skipped_unpaid"
    ALREADY_APPLIED = "already_applied"


class ReconciliationResult:
    def __init__(
        self,
        outcome: ReconciliationOutcome,
        session_id: Optional[str] = None,
        order_id: Optional[int] = None,
        lines: int = 0,
    ):
        self.outcome = outcome
        self.session_id = session_id
        self.order_id = order_id
        self.lines = lines

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"status": self.outcome.value, "lines": self.lines}
        if self.session_id:
            data["session_id"] = self.session_id
        if self.order_id is not None:
            data["order_id"] = self.order_id
        return data

    def __repr__(self) -> str:
        return f"ReconciliationResult({self.outcome.value}, session={self.session_id}, order={self.order_id}, lines={self.lines})"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckoutService:
    def __init__(self, *, products, sessions, gateway, currency: str, success_url: str, cancel_url: str):
        self.products = products
        self.sessions = sessions
        self.gateway = gateway
        self.currency = currency
        self.success_url = success_url
        self.cancel_url = cancel_url

    def create_checkout_session(self, cart: List[Dict[str, Any]], user_id: str) -> Dict[str, str]:
        """
        Prépare et crée la session Stripe pour un panier.
        - Produits chargés en une requête; lignes inconnues ignorées
        - 400 si aucune ligne résolue (Stripe n'est pas appelé) ou panier trop long
        - Enregistre le contexte 'pending' (session_id -> e-mail, panier)
        Retour: {"url": ..., "id": ...}
        """
        if len(cart or []) > cart_logic.MAX_CART_LINES:
            raise BadRequest(f"Panier trop long (max {cart_logic.MAX_CART_LINES} lignes)")

        products_by_id = self.products.get_products_map(cart_logic.cart_product_ids(cart))
        line_items = cart_logic.build_line_items(products_by_id, cart, self.currency)
        if not line_items:
            raise BadRequest("Panier vide: aucun produit connu")

        session = self.gateway.create_session(
            line_items=line_items,
            mode="payment",
            success_url=self.success_url,
            cancel_url=self.cancel_url,
            metadata=meta.make_metadata(user_id, cart),
        )
        session_id = session.get("id")
        url = session.get("url")
        if not session_id or not url:
            raise ExternalServiceError("Session Stripe invalide")

        if not self.sessions.save_pending_checkout(session_id=session_id, user_email=user_id, cart=cart):
            # Le webhook retombera sur les métadonnées de la session
            logger.warning("checkout: contexte non enregistré session=%s", session_id)

        logger.info(
            "checkout.session created id=%s user=%s lines=%s total=%s",
            session_id, user_id, len(line_items), cart_logic.line_items_total(line_items),
        )
        return {"url": url, "id": session_id}


class WebhookReconciler:
    def __init__(
        self,
        *,
        products,
        users,
        orders,
        sessions,
        gateway,
        webhook_secret: str,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.products = products
        self.users = users
        self.orders = orders
        self.sessions = sessions
        self.gateway = gateway
        self.webhook_secret = webhook_secret
        self.clock = clock or _utcnow

    def handle_event(self, payload: bytes, signature_header: Optional[str]) -> ReconciliationResult:
        """
        Point d'entrée du webhook.
        - Vérifie la signature puis parse (InvalidSignature / InvalidPayload)
        - Seul checkout.session.completed est traité, le reste est 'ignored'
        - La session à réconcilier est celle nommée par l'événement
        """
        event = self.gateway.construct_event(payload, signature_header, self.webhook_secret)
        event_type = event.get("type")
        if event_type != COMPLETED_EVENT:
            logger.info("checkout.webhook ignored type=%s", event_type)
            return ReconciliationResult(ReconciliationOutcome.IGNORED)

        session_id = meta.extract_session_id(event)
        if not session_id:
            raise InvalidPayload("Identifiant de session absent de l'événement")
        return self.reconcile_session(session_id)

    def reconcile_session(self, session_id: str, session: Optional[Dict[str, Any]] = None) -> ReconciliationResult:
        if session is None:
            session = self.gateway.get_session(session_id)
        if not session:
            raise BadRequest("Session de paiement introuvable")

        payment_status = session.get("payment_status") or ""
        if payment_status not in PAID_STATUSES:
            return self._done(ReconciliationOutcome.SKIPPED_UNPAID, session_id)

        pending = self.sessions.get_pending_checkout(session_id)
        if pending and pending.get("status") == "completed":
            return self._done(ReconciliationOutcome.ALREADY_APPLIED, session_id, order_id=pending.get("order_id"))

        if pending:
            user_email, cart = pending.get("user_email"), pending.get("cart") or []
        else:
            user_email, cart = meta.parse_metadata(session.get("metadata"))

        lines = self._resolve_lines(cart)
        user = self.users.get_user_by_email(user_email) if user_email else None
        if not user:
            return self._done(ReconciliationOutcome.SKIPPED_UNKNOWN_USER, session_id)
        if not lines:
            return self._done(ReconciliationOutcome.SKIPPED_NO_LINES, session_id)

        order = self.orders.create_order_with_lines(
            user_id=user["id"],
            status=ORDER_STATUS_PAID,
            order_date=self.clock().isoformat(),
            lines=lines,
            checkout_session_id=session_id,
        )
        if not order:
            raise StorageError()
        if order.get("created") is False:
            # La commande de cette session existait déjà (livraison en double)
            return self._done(ReconciliationOutcome.ALREADY_APPLIED, session_id, order_id=order.get("id"))
        return self._done(ReconciliationOutcome.APPLIED, session_id, order_id=order.get("id"), lines=len(lines))

    def confirm_checkout_session(self, session_id: str, caller: Optional[Dict[str, Any]]) -> ReconciliationResult:
        """
        Alternative sans webhook: le propriétaire de la session déclenche la réconciliation.
        - 401 sans appelant, 403 si la session appartient à un autre e-mail
        """
        if not caller:
            raise Unauthorized()
        if not session_id:
            raise BadRequest("session_id manquant")
        session = self.gateway.get_session(session_id)
        if not session:
            raise BadRequest("Session de paiement introuvable")

        pending = self.sessions.get_pending_checkout(session_id)
        owner = pending.get("user_email") if pending else meta.parse_metadata(session.get("metadata"))[0]
        if not owner or owner != caller.get("email"):
            raise Forbidden("Session appartenant à un autre utilisateur")
        return self.reconcile_session(session_id, session=session)

    def _resolve_lines(self, cart: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Une ligne par produit résolu, au prix courant du produit (snapshot)."""
        cart = [c for c in cart or [] if int(c.get("quantity") or 0) > 0]
        products_by_id = self.products.get_products_map(cart_logic.cart_product_ids(cart))
        lines: List[Dict[str, Any]] = []
        for item in cart:
            product = products_by_id.get(int(item["product_id"]))
            if not product:
                continue
            lines.append({
                "product_id": int(item["product_id"]),
                "quantity": int(item["quantity"]),
                "price": float(product.get("price") or 0),
            })
        return lines

    def _done(self, outcome: ReconciliationOutcome, session_id: str, order_id: Optional[int] = None, lines: int = 0) -> ReconciliationResult:
        result = ReconciliationResult(outcome, session_id=session_id, order_id=order_id, lines=lines)
        logger.info("checkout.reconcile %s", result)
        return result
