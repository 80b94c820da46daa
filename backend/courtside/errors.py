# backend/courtside/errors.py
"""
Error envelope handlers.

Every error body has the shape ``{"detail": {"message", "code", "details"}}``
so clients can branch on ``code`` whatever layer raised it.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .core.exceptions import DomainException

logger = logging.getLogger(__name__)


def _envelope(message: str, code: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"detail": {"message": message, "code": code, "details": details or {}}}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Unhandled service failure on %s: %s", request.url.path, exc.message)
        else:
            logger.info(
                "Request rejected",
                extra={"path": request.url.path, "code": exc.code, "status": exc.status_code},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(_envelope(exc.message, exc.code, exc.details)),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder(
                _envelope("Invalid request", "VALIDATION", {"errors": exc.errors()})
            ),
        )
