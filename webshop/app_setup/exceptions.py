"""
Gestionnaires d'exceptions.
- HTTPException (dont la taxonomie webshop.errors): JSON {"detail": ...} avec son code
- Toute autre exception: journalisée puis 500 JSON, le process continue de servir
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_as_json(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    async def unexpected_exception(request: Request, exc: Exception):
        logger.exception("Erreur non gérée %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Erreur interne"})
