"""
core/errors.py
---------------

Exception hierarchy and centralised FastAPI error handlers.

Every error that reaches a client is rendered in the same envelope::

    {"success": false, "error": {"code", "message", "details?"}, "meta": {"timestamp"}}

Upstream failures are raised by :mod:`woodash.clients.woocommerce_client`
as subclasses of :class:`UpstreamError` and travel unchanged through the
cache and pagination layers; the handlers registered here are the only
place they are translated into HTTP statuses.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException

from woodash.core.responses import error_response
from woodash.logging_config import logger


class ErrorCodes:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"


_STATUS_CODES = {
    400: ErrorCodes.BAD_REQUEST,
    401: ErrorCodes.AUTHENTICATION_ERROR,
    403: ErrorCodes.AUTHORIZATION_ERROR,
    404: ErrorCodes.NOT_FOUND,
    422: ErrorCodes.VALIDATION_ERROR,
    429: ErrorCodes.RATE_LIMITED,
    502: ErrorCodes.EXTERNAL_SERVICE_ERROR,
    503: ErrorCodes.EXTERNAL_SERVICE_ERROR,
}


class ApiError(Exception):
    """Base exception carrying an error code and HTTP status."""

    def __init__(self, code: str, message: str, status_code: int = 500, details: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details


class AuthenticationError(ApiError):
    def __init__(self, message: str = "Authentication required", details: Any = None):
        super().__init__(ErrorCodes.AUTHENTICATION_ERROR, message, 401, details)


class UpstreamError(ApiError):
    """Failure talking to the WooCommerce store.

    ``upstream_status`` is the status returned by the store, or ``None``
    when no response was received at all.
    """

    def __init__(self, code: str, message: str, status_code: int,
                 upstream_status: Optional[int] = None, details: Any = None):
        super().__init__(code, message, status_code, details)
        self.upstream_status = upstream_status


class UpstreamUnavailableError(UpstreamError):
    def __init__(self, message: str = "Unable to connect to WooCommerce store", details: Any = None):
        super().__init__(ErrorCodes.EXTERNAL_SERVICE_ERROR, message, 503, None, details)


class UpstreamAuthError(UpstreamError):
    def __init__(self, message: str = "Invalid WooCommerce credentials", details: Any = None):
        super().__init__(ErrorCodes.AUTHENTICATION_ERROR, message, 401, 401, details)


class UpstreamForbiddenError(UpstreamError):
    def __init__(self, message: str = "Insufficient permissions for this operation", details: Any = None):
        super().__init__(ErrorCodes.AUTHORIZATION_ERROR, message, 403, 403, details)


class UpstreamRateLimitedError(UpstreamError):
    def __init__(self, message: str = "WooCommerce store is rate limiting requests", details: Any = None):
        super().__init__(ErrorCodes.RATE_LIMITED, message, 429, 429, details)


class UpstreamResponseError(UpstreamError):
    def __init__(self, message: str, upstream_status: Optional[int] = None, details: Any = None):
        super().__init__(ErrorCodes.EXTERNAL_SERVICE_ERROR, message, 502, upstream_status, details)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> ORJSONResponse:
        level = logger.error if exc.status_code >= 500 else logger.warning
        level(json.dumps({
            "event": "api_error",
            "path": request.url.path,
            "code": exc.code,
            "status": exc.status_code,
            "upstream_status": getattr(exc, "upstream_status", None),
            "detail": exc.message,
        }))
        return error_response(exc.code, exc.message, exc.status_code, exc.details)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> ORJSONResponse:
        details = [
            {"field": ".".join(str(p) for p in err.get("loc", ()) if p not in ("query", "body")),
             "message": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.info(json.dumps({"event": "validation_error", "path": request.url.path, "errors": details}))
        return error_response(ErrorCodes.VALIDATION_ERROR, "Invalid request data", 400, details)

    @app.exception_handler(HTTPException)
    async def handle_http_exception(_request: Request, exc: HTTPException) -> ORJSONResponse:
        code = _STATUS_CODES.get(exc.status_code, ErrorCodes.BAD_REQUEST if exc.status_code < 500 else ErrorCodes.INTERNAL_ERROR)
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        details: Optional[Dict[str, Any]] = None if isinstance(exc.detail, str) else {"detail": exc.detail}
        return error_response(code, message, exc.status_code, details, headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception(json.dumps({"event": "unhandled_error", "path": request.url.path, "detail": str(exc)}))
        return error_response(ErrorCodes.INTERNAL_ERROR, "An unexpected error occurred", 500)
