"""
Accès aux données des commandes (tables 'shop_orders' et 'order_lines').

Lectures: erreurs journalisées puis valeurs neutres ([] / None).
Écriture: une seule fonction Postgres (RPC 'create_order_with_lines') insère la
commande et toutes ses lignes dans la même transaction, et marque la session de
checkout associée comme complétée. Retourne None en cas d'échec: rien n'est écrit.
"""
from typing import Any, Dict, List, Optional
import logging
import webshop.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

ORDER_COLUMNS = "id, order_date, status, user_id, checkout_session_id"

# module webshop.orders.repository
def find_all_orders(limit: int = 100, offset: int = 0) -> List[dict]:
    """
    Page de commandes (admin), de la plus récente à la plus ancienne, avec
    l'utilisateur propriétaire et les lignes (quantity, price) pour le total.
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("shop_orders")
            .select(f"{ORDER_COLUMNS}, users(id, email), order_lines(quantity, price)")
            .order("order_date", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.find_all_orders failed")
        return []

def find_orders_by_user(user_id: str) -> List[dict]:
    if not user_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("shop_orders")
            .select(f"{ORDER_COLUMNS}, order_lines(quantity, price)")
            .eq("user_id", user_id)
            .order("order_date", desc=True)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.find_orders_by_user failed user_id=%s", user_id)
        return []

def find_order_by_id(order_id: int) -> Optional[dict]:
    """Commande par id avec l'e-mail du propriétaire (users(email)), ou None."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("shop_orders")
            .select(f"{ORDER_COLUMNS}, users(id, email)")
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.find_order_by_id failed id=%s", order_id)
        return None

def find_lines_by_order(order_id: int) -> List[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("order_lines")
            .select("id, order_id, product_id, quantity, price, products(name)")
            .eq("order_id", order_id)
            .order("id", desc=False)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.find_lines_by_order failed order_id=%s", order_id)
        return []

def create_order_with_lines(
    *,
    user_id: str,
    status: str,
    order_date: str,
    lines: List[Dict[str, Any]],
    checkout_session_id: Optional[str] = None,
) -> Optional[dict]:
    """
    Crée la commande et ses lignes de façon atomique (RPC Postgres).
    - lines: [{"product_id": int, "quantity": int, "price": float}, ...]
    - checkout_session_id: unique côté base, empêche un double traitement du webhook
    Retour: la commande créée {id, order_date, status, user_id, checkout_session_id} ou None.
    """
    params = {
        "p_user_id": user_id,
        "p_status": status,
        "p_order_date": order_date,
        "p_checkout_session_id": checkout_session_id,
        "p_lines": lines,
    }
    try:
        res = supabase_client.get_service_supabase().rpc("create_order_with_lines", params).execute()
        data = res.data
        if isinstance(data, list):
            return data[0] if data else None
        return data or None
    except Exception:
        logger.exception(
            "orders.repository.create_order_with_lines failed user_id=%s session=%s lines=%s",
            user_id, checkout_session_id, len(lines),
        )
        return None
