"""Centralized exception handlers for the FastAPI app.

Every error body has the same shape as MarketplaceException.to_dict():
``{"error", "message", "kind"?, "details"?}`` plus the request id when one
is bound, so a client can quote it when reporting a failure.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.enums import ErrorKind
from app.domain.exceptions import MarketplaceException
from app.shared.context import get_context

logger = logging.getLogger(__name__)

KIND_STATUS: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.UPSTREAM_FAILURE: 502,
    ErrorKind.AUTH_REQUIRED: 401,
}

# error_code overrides where one kind covers several statuses
CODE_STATUS: dict[str, int] = {"PERMISSION_DENIED": 403, "TOO_MANY_ATTEMPTS": 429}


def status_for(exc: MarketplaceException) -> int:
    return CODE_STATUS.get(exc.error_code) or KIND_STATUS.get(exc.kind, 400)


def _body(content: dict[str, Any]) -> dict[str, Any]:
    request_id = get_context().request_id
    if request_id:
        content["request_id"] = request_id
    return content


def _marketplace_exception_handler(
    request: Request, exc: MarketplaceException
) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, status, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content=_body(exc.to_dict()), headers=headers)


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """422 with pydantic's error list under details."""
    return JSONResponse(
        status_code=422,
        content=_body(
            {
                "error": "VALIDATION_ERROR",
                "kind": ErrorKind.VALIDATION.value,
                "message": "Request validation failed",
                "details": exc.errors(),
            }
        ),
    )


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.info("Rate limit hit on %s %s (%s)", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=429,
        content=_body({"error": "RATE_LIMITED", "message": f"Rate limit exceeded: {exc.detail}"}),
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_body({"error": "HTTP_ERROR", "message": exc.detail}),
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """500; the exception text is only exposed in debug."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content=_body({"error": "INTERNAL_ERROR", "message": detail}),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers above; call once from create_app()."""
    app.add_exception_handler(MarketplaceException, _marketplace_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
