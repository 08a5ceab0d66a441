"""
Accès aux données du catalogue (table 'products').
Les erreurs Supabase sont journalisées et transformées en valeurs neutres ([] / None).
"""
from typing import Any, Dict, Iterable, List, Optional
import logging
import webshop.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = "id, name, price, description, image_url, category"

# module webshop.catalog.repository
def list_products() -> List[dict]:
    try:
        res = (
            supabase_client.get_supabase()
            .table("products")
            .select(PRODUCT_COLUMNS)
            .order("id", desc=False)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("catalog.repository.list_products failed")
        return []

def get_product(product_id: int) -> Optional[dict]:
    """
    Récupère un produit par son id.
    - Retourne None si introuvable ou en cas d'erreur.
    """
    try:
        res = (
            supabase_client.get_supabase()
            .table("products")
            .select(PRODUCT_COLUMNS)
            .eq("id", product_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("catalog.repository.get_product failed id=%s", product_id)
        return None

def fetch_products_by_ids(ids: List[int]) -> List[dict]:
    if not ids:
        return []
    try:
        res = (
            supabase_client.get_supabase()
            .table("products")
            .select(PRODUCT_COLUMNS)
            .in_("id", [int(i) for i in ids])
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("catalog.repository.fetch_products_by_ids failed ids=%s", ids)
        return []

def get_products_map(ids: Iterable[int]) -> Dict[int, Dict[str, Any]]:
    """
    Retourne un dict {id: produit} pour une liste d'ids (une seule requête).
    Les ids inconnus sont simplement absents du dict.
    """
    products = fetch_products_by_ids(list(dict.fromkeys(ids)))
    return {int(p["id"]): p for p in products if p.get("id") is not None}
