from fastapi import Request, Depends
from typing import Optional, Dict, Any
import logging

from webshop.errors import Unauthorized, Forbidden

logger = logging.getLogger(__name__)

COOKIE_NAME = "sb_access"

def _token_from_request(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    token = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
    if not token:
        token = request.cookies.get(COOKIE_NAME)
    return token or None

def get_session_user(request: Request) -> Optional[Dict[str, Any]]:
    """
    Identité de l'appelant ou None (pas de jeton, jeton invalide/expiré).
    Les services décident eux-mêmes du 401/403.
    """
    token = _token_from_request(request)
    if not token:
        return None
    try:
        # Délégué au service Auth (import tardif: monkeypatch en tests)
        from webshop.auth.service import get_user_from_token as _svc_get_user_from_token
        user = _svc_get_user_from_token(token)
    except Exception:
        logger.warning("security.get_session_user: jeton refusé")
        return None
    if not user.get("id") or not user.get("email"):
        return None
    return user

def require_admin(user: Optional[Dict[str, Any]] = Depends(get_session_user)) -> Dict[str, Any]:
    if not user:
        raise Unauthorized()
    if user.get("role") != "admin":
        raise Forbidden()
    return user
