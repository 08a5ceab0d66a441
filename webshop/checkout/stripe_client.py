"""
Adaptateur Stripe: centralise les appels au SDK et traduit ses erreurs
dans la taxonomie du webshop (ExternalServiceError, InvalidPayload, InvalidSignature).
"""
import json
import logging
from typing import Any, Dict, List, Optional

import stripe

from webshop import config
from webshop.errors import ExternalServiceError, InvalidPayload, InvalidSignature

logger = logging.getLogger(__name__)

# module webshop.checkout.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY si disponible.
    - Sans clé, les appels échouent côté SDK (AuthenticationError -> ExternalServiceError).
    """
    if config.STRIPE_SECRET_KEY:
        stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe

def _plain(obj: Any) -> Any:
    """StripeObject (et objets imbriqués) -> dict/list Python natifs."""
    if hasattr(obj, "keys") and callable(obj.keys):
        return {k: _plain(obj[k]) for k in obj.keys()}
    if isinstance(obj, (list, tuple)):
        return [_plain(v) for v in obj]
    return obj

def create_session(
    *,
    line_items: List[Dict[str, Any]],
    mode: str,
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, str],
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout (paiement par carte).
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://checkout.stripe.com/..."})
    Erreurs: ExternalServiceError si Stripe rejette ou est injoignable (pas de retry).
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.create(
            line_items=line_items,
            mode=mode,
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
            payment_method_types=["card"],
        )
    except stripe.StripeError as e:
        logger.exception("stripe_client.create_session failed")
        raise ExternalServiceError(f"Création de la session Stripe impossible: {e.user_message or e}")
    return _plain(session) or {}

def get_session(session_id: str) -> Optional[Dict[str, Any]]:
    """
    Récupère une session Checkout par son identifiant.
    - None si Stripe ne connaît pas la session (InvalidRequestError)
    - ExternalServiceError pour toute autre erreur Stripe
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.retrieve(session_id)
    except stripe.InvalidRequestError:
        logger.warning("stripe_client.get_session unknown session id=%s", session_id)
        return None
    except stripe.StripeError as e:
        logger.exception("stripe_client.get_session failed id=%s", session_id)
        raise ExternalServiceError(f"Lecture de la session Stripe impossible: {e.user_message or e}")
    return _plain(session) if session is not None else None

def construct_event(payload: bytes, sig_header: Optional[str], secret: str) -> Dict[str, Any]:
    """
    Valide la signature d'un webhook puis parse l'événement.
    - La signature (HMAC du body brut) est vérifiée avant tout parsing
    - InvalidSignature: en-tête absent, secret non configuré ou signature incorrecte
    - InvalidPayload: body non décodable, JSON invalide ou JSON qui n'est pas un objet
    """
    if not secret:
        logger.error("STRIPE_WEBHOOK_SECRET non configuré: webhook rejeté")
        raise InvalidSignature("Webhook secret not configured")
    if not sig_header:
        raise InvalidSignature("Missing signature header")
    try:
        body = payload.decode("utf-8") if isinstance(payload, bytes) else payload
    except UnicodeDecodeError:
        raise InvalidPayload()
    try:
        stripe.WebhookSignature.verify_header(body, sig_header, secret, stripe.Webhook.DEFAULT_TOLERANCE)
    except stripe.SignatureVerificationError:
        raise InvalidSignature()
    try:
        event = json.loads(body)
    except ValueError:
        raise InvalidPayload()
    if not isinstance(event, dict):
        raise InvalidPayload()
    return event
