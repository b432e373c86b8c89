"""API middleware - CORS, request logging, and error handling.

Provides helper functions and middleware classes to configure cross-origin
resource sharing, structured request logging (via structlog), and automatic
conversion of ``MelodiaError`` subclasses into JSON ``ErrorResponse``
bodies carrying the error's own HTTP status.

# ─── MIDDLEWARE EXECUTION ORDER ───────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed):
#
#   In main.py:
#     app.add_middleware(ErrorHandlingMiddleware)    # added 1st → inner
#     app.add_middleware(RequestLoggingMiddleware)   # added 2nd → outer
#
#   Request flow:
#     Client → RequestLogging → ErrorHandling → route handler
#
# RequestLoggingMiddleware therefore logs the *final* status code, after
# ErrorHandling has turned a domain error into a 4xx/5xx JSON body.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from melodia.api.schemas import ErrorResponse
from melodia.utils.errors import MelodiaError, ValidationError
from melodia.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Attach Starlette's ``CORSMiddleware``.

    An empty origin list opens the API to every origin without
    credentials; an explicit list (``CORS_ALLOWED_ORIGINS``) also allows
    cookies and auth headers from those origins.
    """
    explicit = bool(allowed_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins if explicit else ["*"],
        allow_credentials=explicit,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One ``http_request`` event per request, with the final status and timing."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            _logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=request.url.query or None,
                status=status,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


def error_response(exc: MelodiaError) -> JSONResponse:
    """Render a domain error as a JSON ``ErrorResponse``."""
    body = ErrorResponse(
        error=type(exc).__name__,
        detail=exc.message,
        errors=exc.errors if isinstance(exc, ValidationError) and exc.errors else None,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``MelodiaError`` subclasses and return structured JSON errors.

    Client errors (4xx) are logged at info level; server-side failures
    (asset store, configuration) at error level.  Stack traces stay in the
    logs.  Anything that is not a ``MelodiaError`` falls through to
    FastAPI's default 500 handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except MelodiaError as exc:
            log = _logger.error if exc.status_code >= 500 else _logger.info
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                status=exc.status_code,
                path=str(request.url.path),
            )
            return error_response(exc)
