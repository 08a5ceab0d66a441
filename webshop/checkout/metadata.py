"""
Sérialisation/désérialisation des métadonnées Stripe d'une session de checkout.

Format (chaînes uniquement, contrainte Stripe):
- "user_id": identifiant (e-mail) de l'acheteur
- "product_<n>": "<product_id>,<quantity>" pour chaque ligne du panier, n à partir de 1
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

USER_KEY = "user_id"
LINE_PREFIX = "product_"

# module webshop.checkout.metadata
def make_metadata(user_id: str, cart: List[Dict[str, Any]]) -> Dict[str, str]:
    metadata = {USER_KEY: str(user_id)}
    for n, item in enumerate(cart or [], start=1):
        metadata[f"{LINE_PREFIX}{n}"] = f"{int(item['product_id'])},{int(item['quantity'])}"
    return metadata

def _line_index(key: str) -> int:
    suffix = key[len(LINE_PREFIX):]
    return int(suffix) if suffix.isdigit() else 0

def parse_metadata(metadata: Optional[Dict[str, Any]]) -> Tuple[Optional[str], List[Dict[str, int]]]:
    """
    Extrait (user_id, cart) depuis les métadonnées d'une session.
    - Parcourt toutes les clés 'product_*' (dans l'ordre des index)
    - Ignore les valeurs mal formées (journalisées en warning)
    """
    meta = metadata or {}
    user_id = meta.get(USER_KEY) or None
    cart: List[Dict[str, int]] = []
    for key in sorted((k for k in meta.keys() if str(k).startswith(LINE_PREFIX)), key=_line_index):
        value = str(meta.get(key) or "")
        try:
            product_id, quantity = value.split(",")
            cart.append({"product_id": int(product_id), "quantity": int(quantity)})
        except ValueError:
            logger.warning("checkout.metadata: ligne ignorée %s=%r", key, value)
    return user_id, cart

def extract_session_id(event: Dict[str, Any]) -> Optional[str]:
    """Identifiant de la session porté par l'événement (event.data.object.id)."""
    data_obj = ((event or {}).get("data") or {}).get("object") or {}
    return data_obj.get("id") or None
