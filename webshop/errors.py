"""
Taxonomie d'erreurs du webshop.

Chaque erreur est une HTTPException FastAPI qui porte déjà son code HTTP:
les services la lèvent, les vues la laissent remonter telle quelle et le
handler global (app_setup.exceptions) la rend en JSON {"detail": ...}.
"""
from typing import Optional
from fastapi import HTTPException


class WebshopError(HTTPException):
    status_code = 500
    default_detail = "Erreur interne"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class ExternalServiceError(WebshopError):
    """Stripe injoignable ou requête rejetée."""
    status_code = 500
    default_detail = "Service de paiement indisponible"


class StorageError(WebshopError):
    """Écriture transactionnelle commande + lignes échouée (rien n'est persisté)."""
    status_code = 500
    default_detail = "Enregistrement de la commande impossible"


class InvalidPayload(WebshopError):
    status_code = 400
    default_detail = "Invalid webhook payload"


class InvalidSignature(WebshopError):
    status_code = 400
    default_detail = "Invalid webhook signature"


class BadRequest(WebshopError):
    status_code = 400
    default_detail = "Requête invalide"


class NotFound(WebshopError):
    status_code = 404
    default_detail = "Ressource introuvable"


class Unauthorized(WebshopError):
    status_code = 401
    default_detail = "Non authentifié"


class Forbidden(WebshopError):
    status_code = 403
    default_detail = "Accès interdit"
