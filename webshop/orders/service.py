"""
Cas d'usage 'orders': historique des commandes et lignes, filtré par l'identité de l'appelant.

Règles d'accès:
- listing global: administrateur uniquement
- commandes d'un utilisateur / lignes d'une commande: l'e-mail de l'appelant doit
  être exactement celui du propriétaire
Le total d'une commande est toujours recalculé depuis les lignes (prix figé à la création).
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from webshop.errors import BadRequest, Forbidden, NotFound, StorageError, Unauthorized

logger = logging.getLogger(__name__)

def order_total(lines: List[Dict[str, Any]]) -> float:
    return round(sum(float(l.get("price") or 0) * int(l.get("quantity") or 0) for l in lines or []), 2)

def _summary(row: Dict[str, Any], with_user: bool = False) -> Dict[str, Any]:
    summary = {
        "id": row.get("id"),
        "order_date": row.get("order_date"),
        "status": row.get("status"),
        "user_id": row.get("user_id"),
        "total": order_total(row.get("order_lines") or []),
    }
    if with_user:
        user = row.get("users") or {}
        summary["user"] = {"id": user.get("id"), "email": user.get("email")}
    return summary

def _line(row: Dict[str, Any]) -> Dict[str, Any]:
    product = row.get("products") or {}
    return {
        "id": row.get("id"),
        "order_id": row.get("order_id"),
        "product_id": row.get("product_id"),
        "product_name": product.get("name"),
        "quantity": int(row.get("quantity") or 0),
        "price": float(row.get("price") or 0),
    }


class OrderService:
    def __init__(self, *, orders, users, products):
        self.orders = orders
        self.users = users
        self.products = products

    def list_all_orders(self, caller: Optional[Dict[str, Any]], limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        if not caller:
            raise Unauthorized()
        if caller.get("role") != "admin":
            raise Forbidden()
        return [_summary(row, with_user=True) for row in self.orders.find_all_orders(limit=limit, offset=offset)]

    def list_orders_for_user(self, caller: Optional[Dict[str, Any]], username: str) -> List[Dict[str, Any]]:
        """Commandes de 'username' (e-mail), pour son seul propriétaire."""
        self._check_owner(caller, username)
        user = self.users.get_user_by_email(username)
        if not user:
            return []
        return [_summary(row) for row in self.orders.find_orders_by_user(user["id"])]

    def list_order_lines(self, caller: Optional[Dict[str, Any]], order_id: str) -> List[Dict[str, Any]]:
        """
        Lignes d'une commande.
        - 400 si l'id n'est pas numérique (aucun accès base)
        - 404 si la commande n'existe pas
        - 401/403 selon l'appelant et le propriétaire
        """
        try:
            oid = int(str(order_id).strip())
        except (TypeError, ValueError):
            raise BadRequest("Identifiant de commande invalide")

        order = self.orders.find_order_by_id(oid)
        if not order:
            raise NotFound("Commande introuvable")

        owner = order.get("users") or self.users.get_user_by_id(order.get("user_id")) or {}
        self._check_owner(caller, owner.get("email"))
        return [_line(row) for row in self.orders.find_lines_by_order(oid)]

    def create_order(self, order_in: Dict[str, Any]) -> Dict[str, Any]:
        """
        Création directe (back-office): utilisateur et produits vérifiés avant écriture,
        puis commande + lignes en une seule transaction.
        """
        user = self.users.get_user_by_id(order_in["user_id"])
        if not user:
            raise BadRequest("Utilisateur inconnu")

        lines = order_in.get("order_lines") or []
        products_by_id = self.products.get_products_map([int(l["product_id"]) for l in lines])
        missing = sorted({int(l["product_id"]) for l in lines} - set(products_by_id))
        if missing:
            raise BadRequest(f"Produit(s) inconnu(s): {', '.join(str(m) for m in missing)}")

        order_date = order_in.get("order_date") or datetime.now(timezone.utc)
        if isinstance(order_date, datetime):
            order_date = order_date.isoformat()

        order = self.orders.create_order_with_lines(
            user_id=user["id"],
            status=order_in.get("status") or "Pending",
            order_date=order_date,
            lines=[
                {"product_id": int(l["product_id"]), "quantity": int(l["quantity"]), "price": float(l["price"])}
                for l in lines
            ],
        )
        if not order:
            raise StorageError()
        logger.info("orders.create id=%s user_id=%s lines=%s", order.get("id"), user["id"], len(lines))
        return order

    def _check_owner(self, caller: Optional[Dict[str, Any]], owner_email: Optional[str]) -> None:
        if not caller:
            raise Unauthorized()
        if not owner_email or caller.get("email") != owner_email:
            raise Forbidden()
