import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from webshop.utils.security import get_session_user
from webshop.utils.rate_limit import optional_rate_limit
from webshop.checkout.models import CartRequest
from webshop.checkout.service import CheckoutService, WebhookReconciler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Checkout API"])

SIGNATURE_HEADERS = ("Stripe-Signature", "Signature")

def get_checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout_service

def get_webhook_reconciler(request: Request) -> WebhookReconciler:
    return request.app.state.webhook_reconciler

# module webshop.checkout.views
@router.post("/create-checkout-session", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout_session(body: CartRequest, service: CheckoutService = Depends(get_checkout_service)):
    """
    Crée une session Checkout Stripe pour le panier soumis.
    - Entrée JSON: { "cart": [ { "productId": <int>, "quantity": <int> }, ... ], "userId": "<email>" }
    - Sortie: { "url": "https://checkout.stripe.com/...", "id": "cs_..." }
    - Erreurs: 400 panier vide/trop long, 422 body invalide, 500 Stripe indisponible
    """
    return service.create_checkout_session(body.cart_lines(), body.user_id)

@router.post("/webhook", include_in_schema=False)
async def stripe_webhook(request: Request, reconciler: WebhookReconciler = Depends(get_webhook_reconciler)):
    """
    Webhook Stripe: checkout.session.completed -> une commande + ses lignes.
    - Le body brut est requis pour la vérification de signature
    - 200 {status, order_id?, lines} pour tout résultat de réconciliation
    - 400 payload/signature invalide ou session introuvable, 500 Stripe/stockage
    """
    payload = await request.body()
    sig_header = next((request.headers.get(h) for h in SIGNATURE_HEADERS if request.headers.get(h)), None)
    # Stripe et Supabase sont synchrones: hors de la boucle d'événements
    result = await run_in_threadpool(reconciler.handle_event, payload, sig_header)
    return JSONResponse(result.to_dict())

@router.get("/confirm-checkout-session")
def confirm_checkout_session(
    session_id: str,
    user: Optional[Dict[str, Any]] = Depends(get_session_user),
    reconciler: WebhookReconciler = Depends(get_webhook_reconciler),
):
    """
    Alternative sans webhook: le propriétaire confirme sa session après le retour de Stripe.
    - Même réconciliation que le webhook (idempotente)
    - Erreurs: 401 non connecté, 403 session d'un autre utilisateur, 400 session inconnue
    """
    return reconciler.confirm_checkout_session(session_id, user).to_dict()
