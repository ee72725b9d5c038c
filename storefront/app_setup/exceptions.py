"""
Gestionnaires d’exceptions utilisés par la factory.
- CheckoutError: JSON typé {error, detail, retryable, ...} pour que l'UI affiche un message par type.
- RequestValidationError: rendu comme invalid_request (400), même forme que les erreurs métier.
- HTTPException: JSON FastAPI standard {"detail": ...}.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.errors import CheckoutError, InvalidRequest

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        body = InvalidRequest("Requête invalide").to_dict()
        body["errors"] = jsonable_encoder(exc.errors())
        logger.info("request validation failed path=%s", request.url.path)
        return JSONResponse(status_code=InvalidRequest.status_code, content=body)

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)
