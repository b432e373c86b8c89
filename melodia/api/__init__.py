"""Melodia API layer - routes, schemas, and middleware."""

from melodia.api.artist_routes import router as artist_router
from melodia.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from melodia.api.release_routes import artist_releases_router
from melodia.api.release_routes import router as release_router
from melodia.api.schemas import ErrorResponse, HealthResponse

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "artist_router",
    "artist_releases_router",
    "release_router",
    "ErrorResponse",
    "HealthResponse",
]
