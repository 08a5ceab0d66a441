"""Couche d'accès aux données (Supabase) pour les utilisateurs (table users).
L'e-mail est la clé d'identité utilisée pour la propriété des commandes.
"""
from typing import Optional
import logging
import webshop.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

def get_user_by_email(email: str) -> Optional[dict]:
    """Récupère un utilisateur par e-mail.
    - Retour: dict {id, email, role} ou None si introuvable/erreur
    """
    if not email:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .select("id, email, role")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("users.repository.get_user_by_email failed email=%s", email)
        return None

def get_user_by_id(user_id: str) -> Optional[dict]:
    if not user_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .select("id, email, role")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("users.repository.get_user_by_id failed id=%s", user_id)
        return None
