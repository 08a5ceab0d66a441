# module webshop.orders.views

"""Endpoints Commandes (lecture filtrée par identité, création back-office).
- GET /api/orders: toutes les commandes (admin), paginées par limit/offset
- GET /api/orders/{username}: commandes de l'utilisateur connecté
- GET /api/orders/orderlines/{orderid}: lignes d'une commande du propriétaire
- POST /api/orders: création directe (admin)
"""
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query, Request, status

from webshop.utils.security import get_session_user, require_admin
from webshop.orders.models import OrderIn
from webshop.orders.service import OrderService

router = APIRouter(prefix="/api/orders", tags=["Orders API"])

def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service

@router.get("")
def list_orders(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user: Optional[Dict[str, Any]] = Depends(get_session_user),
    service: OrderService = Depends(get_order_service),
):
    """Toutes les commandes (admin), paginées: ?limit=1..500 (100 par défaut) & offset."""
    return service.list_all_orders(user, limit=limit, offset=offset)

# Création réservée aux administrateurs: 401 anonyme, 403 non-admin (en plus de 201/400)
@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(
    body: OrderIn,
    _admin: Dict[str, Any] = Depends(require_admin),
    service: OrderService = Depends(get_order_service),
):
    return service.create_order(body.model_dump())

@router.get("/orderlines/{orderid}")
def list_order_lines(
    orderid: str,
    user: Optional[Dict[str, Any]] = Depends(get_session_user),
    service: OrderService = Depends(get_order_service),
):
    return service.list_order_lines(user, orderid)

@router.get("/{username}")
def list_user_orders(
    username: str,
    user: Optional[Dict[str, Any]] = Depends(get_session_user),
    service: OrderService = Depends(get_order_service),
):
    return service.list_orders_for_user(user, username)
