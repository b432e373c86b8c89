"""REST API routes for the Artist Registry.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: API (FastAPI route handlers).
# Pattern: Routes access services via ``request.app.state`` (see
#          ``melodia.api.accessors``).  Domain errors propagate to
#          ErrorHandlingMiddleware, which picks the HTTP status.
#
# Endpoints (literal routes before the catch-all):
#   POST   /api/v1/artists/                  - Create (multipart, optional image)
#   GET    /api/v1/artists/search            - Search by name or bio
#   GET    /api/v1/artists/{artist_id}       - Get one artist
#   PATCH  /api/v1/artists/{artist_id}       - Partial update
#   PATCH  /api/v1/artists/{artist_id}/bio   - Replace bio
#   PATCH  /api/v1/artists/{artist_id}/image - Upload profile image
#   PATCH  /api/v1/artists/{artist_id}/cover - Upload banner image
#   POST   /api/v1/artists/{artist_id}/follow
#   POST   /api/v1/artists/{artist_id}/unfollow
#   DELETE /api/v1/artists/{artist_id}       - Delete (cascades to releases)
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, File, Form, Request, Response, UploadFile

from melodia.api.accessors import get_artist_service, search_window, store_upload
from melodia.api.schemas import ArtistResponse, UpdateArtistRequest, UpdateBioRequest
from melodia.utils.errors import ValidationError

logger = structlog.get_logger(logger_name=__name__)

router = APIRouter(prefix="/api/v1/artists", tags=["artists"])

_UPLOAD_FOLDER = "artists"


def _parse_social_links(raw: str | None) -> dict[str, str] | None:
    """Decode the ``social_links`` form field (a JSON object string)."""
    if raw is None or not raw.strip():
        return None
    try:
        links = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError("social_links must be a JSON object") from exc
    if not isinstance(links, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in links.items()
    ):
        raise ValidationError("social_links must map names to URL strings")
    return links


# ── Create ────────────────────────────────────────────────────────────
@router.post("/", response_model=ArtistResponse, status_code=201)
async def create_artist(
    request: Request,
    name: str = Form(..., description="Unique display name."),
    id: str | None = Form(default=None, description="Caller-assigned artist ID."),  # noqa: A002
    bio: str | None = Form(default=None),
    social_links: str | None = Form(default=None, description="JSON object string."),
    image: UploadFile | None = File(default=None, description="Optional profile image."),
) -> ArtistResponse:
    """Create an artist; an attached image is uploaded before the record is written."""
    svc = get_artist_service(request)
    links = _parse_social_links(social_links)

    image_url = None
    if image is not None and image.filename:
        image_url = await store_upload(request, image, _UPLOAD_FOLDER)
        logger.debug("artist_image_stored", image_url=image_url)

    artist = await svc.create_artist(
        name=name,
        artist_id=id or None,
        bio=bio,
        social_links=links,
        image_url=image_url,
    )
    return ArtistResponse.from_artist(artist)


# ── Search ────────────────────────────────────────────────────────────
@router.get("/search", response_model=list[ArtistResponse])
async def search_artists(
    request: Request,
    query: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> list[ArtistResponse]:
    """Case-insensitive substring search on name or bio, most-followed first."""
    needle, page, limit = search_window(request, query, page, limit)
    artists = await get_artist_service(request).search_artists(needle, limit=limit, page=page)
    return [ArtistResponse.from_artist(a) for a in artists]


# ── Read / update ─────────────────────────────────────────────────────
@router.get("/{artist_id}", response_model=ArtistResponse)
async def get_artist(request: Request, artist_id: str) -> ArtistResponse:
    artist = await get_artist_service(request).get_artist(artist_id)
    return ArtistResponse.from_artist(artist)


@router.patch("/{artist_id}", response_model=ArtistResponse)
async def update_artist(
    request: Request,
    artist_id: str,
    body: UpdateArtistRequest,
) -> ArtistResponse:
    artist = await get_artist_service(request).update_artist(
        artist_id, body.model_dump(exclude_unset=True)
    )
    return ArtistResponse.from_artist(artist)


@router.patch("/{artist_id}/bio", response_model=ArtistResponse)
async def update_bio(request: Request, artist_id: str, body: UpdateBioRequest) -> ArtistResponse:
    artist = await get_artist_service(request).update_artist(artist_id, {"bio": body.bio})
    return ArtistResponse.from_artist(artist)


@router.patch("/{artist_id}/image", response_model=ArtistResponse)
async def update_image(
    request: Request,
    artist_id: str,
    image: UploadFile = File(..., description="Profile image."),
) -> ArtistResponse:
    svc = get_artist_service(request)
    await svc.get_artist(artist_id)
    image_url = await store_upload(request, image, _UPLOAD_FOLDER)
    artist = await svc.update_media(artist_id, image_url=image_url)
    return ArtistResponse.from_artist(artist)


@router.patch("/{artist_id}/cover", response_model=ArtistResponse)
async def update_cover(
    request: Request,
    artist_id: str,
    cover: UploadFile = File(..., description="Banner/cover image."),
) -> ArtistResponse:
    svc = get_artist_service(request)
    await svc.get_artist(artist_id)
    cover_url = await store_upload(request, cover, _UPLOAD_FOLDER)
    artist = await svc.update_media(artist_id, cover_url=cover_url)
    return ArtistResponse.from_artist(artist)


# ── Followers ─────────────────────────────────────────────────────────
@router.post("/{artist_id}/follow", response_model=ArtistResponse)
async def follow_artist(request: Request, artist_id: str) -> ArtistResponse:
    artist = await get_artist_service(request).increment_followers(artist_id)
    return ArtistResponse.from_artist(artist)


@router.post("/{artist_id}/unfollow", response_model=ArtistResponse)
async def unfollow_artist(request: Request, artist_id: str) -> ArtistResponse:
    artist = await get_artist_service(request).decrement_followers(artist_id)
    return ArtistResponse.from_artist(artist)


# ── Delete ────────────────────────────────────────────────────────────
@router.delete("/{artist_id}", status_code=204)
async def delete_artist(request: Request, artist_id: str) -> Response:
    await get_artist_service(request).remove_artist(artist_id)
    return Response(status_code=204)
