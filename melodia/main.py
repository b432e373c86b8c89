"""Melodia FastAPI application entry point.

Wires together the catalog stores, the asset store and the services via
explicit constructor injection.  Loads configuration from ``.env`` and
``config/config.yaml``, configures structured logging, and serves locally
stored uploads as static files.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from melodia.api.artist_routes import router as artist_router
from melodia.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from melodia.api.release_routes import artist_releases_router
from melodia.api.release_routes import router as release_router
from melodia.api.schemas import HealthResponse
from melodia.config.loader import load_config
from melodia.config.settings import Settings
from melodia.interfaces.asset_store import IAssetStore
from melodia.providers.assets.cloudinary_asset_store import CloudinaryAssetStore
from melodia.providers.assets.local_asset_store import LocalAssetStore
from melodia.providers.catalog.sqlite_artist_provider import SQLiteArtistProvider
from melodia.providers.catalog.sqlite_release_provider import SQLiteReleaseProvider
from melodia.services.artist_service import ArtistService
from melodia.services.release_service import ReleaseService
from melodia.utils.errors import ConfigurationError
from melodia.utils.logging import configure_logging, get_logger

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Asset store selection
# ---------------------------------------------------------------------------


def _build_asset_store(app_settings: Settings) -> IAssetStore:
    """Pick the upload backend named by ``ASSET_STORE``.

    ``cloudinary`` requires all three credentials; anything other than
    ``local`` or ``cloudinary`` is a configuration error.
    """
    backend = app_settings.asset_store.strip().lower()
    if backend == "cloudinary":
        return CloudinaryAssetStore(
            cloud_name=app_settings.cloudinary_cloud_name,
            api_key=app_settings.cloudinary_api_key,
            api_secret=app_settings.cloudinary_api_secret,
            root_folder=app_settings.cloudinary_root_folder,
        )
    if backend == "local":
        return LocalAssetStore(
            root=app_settings.uploads_dir,
            url_prefix=app_settings.uploads_url_prefix,
        )
    raise ConfigurationError(f"Unknown asset store backend: {app_settings.asset_store!r}")


# ---------------------------------------------------------------------------
# Dependency wiring
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    artist_store = SQLiteArtistProvider(db_path=app_settings.database_path)
    release_store = SQLiteReleaseProvider(db_path=app_settings.database_path)
    asset_store = _build_asset_store(app_settings)

    artist_service = ArtistService(artist_store=artist_store)
    release_service = ReleaseService(release_store=release_store, artist_store=artist_store)

    return {
        "artist_store": artist_store,
        "release_store": release_store,
        "asset_store": asset_store,
        "artist_service": artist_service,
        "release_service": release_service,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Wire components onto app.state and create the schema."""
    app_settings: Settings = application.state.settings
    components = getattr(application.state, "melodia_components", None)
    if components is None:
        components = _build_all(app_settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    # Both stores share one database file; apply_schema is idempotent.
    for store_name in ("artist_store", "release_store"):
        store = components.get(store_name)
        if store is not None:
            await store.initialize()

    _logger.info(
        "app_startup",
        name=config.get("app", {}).get("name", "melodia-catalog"),
        version=__version__,
        environment=app_settings.app_env,
        database=app_settings.database_path,
        asset_store=_provider_name(components.get("asset_store")),
    )

    yield

    _logger.info("app_shutdown", version=__version__)


def _provider_name(component: Any) -> str:
    return component.get_provider_name() if component is not None else "unavailable"


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    components: dict[str, Any] | None = None,
    app_settings: Settings | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    components:
        Pre-built components (stores, services, asset store).  When omitted
        the lifespan builds them from settings via ``_build_all``.
    app_settings:
        Settings to use instead of the module-level instance.
    """
    s = app_settings or settings
    application = FastAPI(
        title="Melodia Catalog API",
        version=__version__,
        description=(
            "Artists and their releases: registry, release lifecycle "
            "(draft, scheduled, published), song membership and cover uploads."
        ),
        lifespan=_lifespan,
    )
    application.state.settings = s
    if components is not None:
        application.state.melodia_components = components

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=s.get_cors_origins())

    # -- API routes --
    application.include_router(artist_router)
    application.include_router(artist_releases_router)
    application.include_router(release_router)

    @application.get("/health", response_model=HealthResponse, tags=["health"])
    async def health(request: Request) -> HealthResponse:
        state = request.app.state
        return HealthResponse(
            status="ok",
            version=__version__,
            providers={
                "artist_store": _provider_name(getattr(state, "artist_store", None)),
                "release_store": _provider_name(getattr(state, "release_store", None)),
                "asset_store": _provider_name(getattr(state, "asset_store", None)),
            },
        )

    # -- Locally stored uploads --
    if s.asset_store.strip().lower() == "local":
        application.mount(
            s.uploads_url_prefix,
            StaticFiles(directory=str(Path(s.uploads_dir)), check_dir=False),
            name="uploads",
        )

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "melodia.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
