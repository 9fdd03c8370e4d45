"""
ideashare.api.errors — Domain error → HTTP response mapping
=============================================================

Services raise :mod:`ideashare.errors` exceptions; these handlers turn
them into JSON bodies of the form ``{"error": <code>, "detail": <msg>}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ideashare.errors import (
    IdeaShareError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[IdeaShareError], tuple[int, str]] = {
    ValidationError: (422, "validation_error"),
    NotFoundError: (status.HTTP_404_NOT_FOUND, "not_found"),
    PermissionDeniedError: (status.HTTP_403_FORBIDDEN, "forbidden"),
    PersistenceError: (status.HTTP_503_SERVICE_UNAVAILABLE, "store_unavailable"),
}


def _body(code: str, detail: str) -> dict:
    return {"error": code, "detail": detail}


async def domain_error_handler(request: Request, exc: IdeaShareError) -> JSONResponse:
    status_code, code = status.HTTP_400_BAD_REQUEST, "error"
    for error_type, mapped in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status_code, code = mapped
            break

    if isinstance(exc, PersistenceError):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
        detail = "The data store is unavailable, please retry"
    else:
        detail = str(exc)
    return JSONResponse(status_code=status_code, content=_body(code, detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_body("internal_error", "An unexpected error occurred"),
    )


def setup_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(IdeaShareError, domain_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
