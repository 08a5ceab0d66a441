"""Cas d'usage 'catalog': lecture seule des produits."""
from typing import Any, Dict, List

from webshop.errors import BadRequest, NotFound


class CatalogService:
    def __init__(self, *, products):
        self.products = products

    def list_products(self) -> List[Dict[str, Any]]:
        return self.products.list_products()

    def get_product(self, product_id: str) -> Dict[str, Any]:
        try:
            pid = int(str(product_id).strip())
        except (TypeError, ValueError):
            raise BadRequest("Identifiant de produit invalide")
        product = self.products.get_product(pid)
        if not product:
            raise NotFound("Produit introuvable")
        return product
