"""
Logique panier pure (pas de Stripe, pas de DB).
Un panier est une liste [{"product_id": int, "quantity": int}, ...] (une entrée par ligne soumise).
"""
from typing import Any, Dict, List

# Stripe limite les métadonnées à 50 clés: 'user_id' + une clé par ligne du panier
MAX_CART_LINES = 49

# module webshop.checkout.cart
def cart_product_ids(cart: List[Dict[str, Any]]) -> List[int]:
    return [int(item["product_id"]) for item in cart or []]

def unit_amount(price: Any) -> int:
    """Prix unitaire en unités mineures (øre/centimes): round(price * 100)."""
    return int(round(float(price) * 100))

def build_line_items(
    products_by_id: Dict[int, Dict[str, Any]],
    cart: List[Dict[str, Any]],
    currency: str,
) -> List[Dict[str, Any]]:
    """
    Construit les line_items Stripe (price_data) à partir du panier.
    - Ignore silencieusement les lignes dont le produit est inconnu.
    - unit_amount en unités mineures, devise unique configurée, nom du produit affiché.
    - Retourne [] si aucune ligne n'est résolue (la décision revient au service).
    """
    line_items: List[Dict[str, Any]] = []
    for item in cart or []:
        product = products_by_id.get(int(item["product_id"]))
        if not product:
            continue
        line_items.append({
            "quantity": int(item["quantity"]),
            "price_data": {
                "currency": currency,
                "unit_amount": unit_amount(product.get("price") or 0),
                "product_data": {"name": product.get("name") or "Article"},
            },
        })
    return line_items

def line_items_total(line_items: List[Dict[str, Any]]) -> int:
    """Total du panier en unités mineures: somme(unit_amount * quantity)."""
    return sum(
        int(li["price_data"]["unit_amount"]) * int(li["quantity"])
        for li in line_items or []
    )
