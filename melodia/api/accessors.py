"""Shared helpers for the route modules: service accessors and uploads.

Routes reach singletons through ``request.app.state`` rather than
``Depends()``; a missing component means the app was wired without it
and is reported as 503.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, UploadFile

from melodia.config.settings import Settings
from melodia.interfaces.asset_store import IAssetStore
from melodia.services.artist_service import ArtistService
from melodia.services.release_service import ReleaseService
from melodia.utils.image_validator import validate_image
from melodia.utils.pagination import DEFAULT_LIMIT, MAX_LIMIT, validate_page_window


def _component(request: Request, name: str):  # noqa: ANN202
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(status_code=503, detail=f"{name} unavailable")
    return value


def get_artist_service(request: Request) -> ArtistService:
    return _component(request, "artist_service")


def get_release_service(request: Request) -> ReleaseService:
    return _component(request, "release_service")


def get_asset_store(request: Request) -> IAssetStore:
    return _component(request, "asset_store")


def search_window(
    request: Request,
    query: str | None,
    page: int,
    limit: int | None,
) -> tuple[str, int, int]:
    """Apply configured defaults and bounds to search parameters.

    Returns the stripped query with the effective page and limit.
    """
    settings: Settings | None = getattr(request.app.state, "settings", None)
    default_limit = settings.search_default_limit if settings else DEFAULT_LIMIT
    max_limit = settings.search_max_limit if settings else MAX_LIMIT

    effective_limit = default_limit if limit is None else limit
    needle = validate_page_window(query, page, effective_limit, max_limit=max_limit)
    return needle, page, effective_limit


async def store_upload(request: Request, upload: UploadFile, folder: str) -> str:
    """Validate an uploaded image and hand it to the asset store; returns its URL.

    The size cap is ``Settings.max_image_bytes`` when the app carries settings.
    """
    settings: Settings | None = getattr(request.app.state, "settings", None)
    data = await upload.read()
    validate_image(data, upload.filename, max_bytes=settings.max_image_bytes if settings else None)
    return await get_asset_store(request).store(data, folder, upload.filename)
