"""
Registre durable des sessions de checkout (table 'checkout_sessions').

Chaque session Stripe créée y est enregistrée avec son contexte (e-mail acheteur,
snapshot du panier). Le webhook retrouve ce contexte par l'id de session porté
par l'événement. Le passage à 'completed' est fait par la RPC
create_order_with_lines, dans la même transaction que la commande.
"""
from typing import Any, Dict, List, Optional
import logging
import webshop.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"

# module webshop.checkout.repository
def save_pending_checkout(*, session_id: str, user_email: str, cart: List[Dict[str, Any]]) -> Optional[dict]:
    """Enregistre le contexte d'une session 'pending'. Retourne la ligne ou None en cas d'erreur."""
    row = {
        "session_id": session_id,
        "user_email": user_email,
        "cart": [{"product_id": int(i["product_id"]), "quantity": int(i["quantity"])} for i in cart],
        "status": STATUS_PENDING,
    }
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("checkout_sessions")
            .upsert(row)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else row
    except Exception:
        logger.exception("checkout.repository.save_pending_checkout failed session=%s", session_id)
        return None

def get_pending_checkout(session_id: str) -> Optional[dict]:
    """Contexte {session_id, user_email, cart, status, order_id} ou None."""
    if not session_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("checkout_sessions")
            .select("session_id, user_email, cart, status, order_id")
            .eq("session_id", session_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("checkout.repository.get_pending_checkout failed session=%s", session_id)
        return None
