"""
Identité de l'appelant: jeton Supabase -> {id, email, role, token}.
La propriété des commandes se juge sur l'e-mail; le rôle 'admin' ouvre le listing global.
"""
from typing import Any, Dict, Optional
from webshop import config
from webshop.auth.repository import get_user_from_access_token as _repo_get_user_from_token

def determine_role(email: Optional[str], metadata: Dict[str, Any] | None) -> str:
    role_lower = str((metadata or {}).get("role", "")).lower()
    if role_lower == "admin":
        return "admin"
    if email and email.lower() in config.ADMIN_EMAILS:
        return "admin"
    return "user"

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise user issu de supabase.auth.get_user(access_token):
    - Retourne {id, email, metadata, role, token}
    """
    raw = _repo_get_user_from_token(access_token)
    email = raw.get("email")
    metadata = raw.get("user_metadata") or {}
    return {
        "id": raw.get("id"),
        "email": email,
        "metadata": metadata,
        "role": determine_role(email, metadata),
        "token": access_token,
    }
