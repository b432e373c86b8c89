"""REST API routes for the Release Catalog.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: API (FastAPI route handlers).
#
# Two routers share the ReleaseService:
#
#   ``router`` - catalog-wide, /api/v1/releases
#     GET  /                        - All releases (optional ?type=)
#     GET  /search                  - Search by title
#     GET  /song/{song_id}/cover    - Cover of the release holding a song
#     GET  /{release_id}            - One release (LAST - catch-all)
#
#   ``artist_releases_router`` - artist-scoped, /api/v1/artists/{artist_id}/releases
#     GET    /                              - List (?type=, ?with_latest_flag=)
#     POST   /                              - Create (JSON body)
#     GET    /latest                        - Newest release or null
#     GET    /{release_id}
#     PATCH  /{release_id}                  - Partial update
#     PATCH  /{release_id}/cover            - Upload cover image
#     PATCH  /{release_id}/songs/add
#     PATCH  /{release_id}/songs/remove
#     DELETE /{release_id}
#
# Artist-scoped lookups report a release owned by someone else as 404.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, File, Request, Response, UploadFile

from melodia.api.accessors import get_release_service, search_window, store_upload
from melodia.api.schemas import (
    CoverUrlResponse,
    CreateReleaseRequest,
    FlaggedReleaseResponse,
    ReleaseResponse,
    SongIdsRequest,
    UpdateReleaseRequest,
)
from melodia.models.release import ReleaseType

logger = structlog.get_logger(logger_name=__name__)

router = APIRouter(prefix="/api/v1/releases", tags=["releases"])
artist_releases_router = APIRouter(
    prefix="/api/v1/artists/{artist_id}/releases",
    tags=["artist releases"],
)

_UPLOAD_FOLDER = "releases"


# ═══════════════════════════════════════════════════════════════════════
# Catalog-wide routes
# ═══════════════════════════════════════════════════════════════════════

@router.get("/", response_model=list[ReleaseResponse])
async def list_all_releases(
    request: Request,
    type: ReleaseType | None = None,  # noqa: A002
) -> list[ReleaseResponse]:
    releases = await get_release_service(request).list_releases(release_type=type)
    return [ReleaseResponse.from_release(r) for r in releases]


@router.get("/search", response_model=list[ReleaseResponse])
async def search_releases(
    request: Request,
    query: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> list[ReleaseResponse]:
    """Case-insensitive substring search on title, newest first."""
    needle, page, limit = search_window(request, query, page, limit)
    releases = await get_release_service(request).search_releases(needle, limit=limit, page=page)
    return [ReleaseResponse.from_release(r) for r in releases]


@router.get("/song/{song_id}/cover", response_model=CoverUrlResponse)
async def get_cover_by_song(request: Request, song_id: str) -> CoverUrlResponse:
    result = await get_release_service(request).get_cover_url_by_song_id(song_id)
    return CoverUrlResponse(**result)


@router.get("/{release_id}", response_model=ReleaseResponse)
async def get_release(request: Request, release_id: str) -> ReleaseResponse:
    release = await get_release_service(request).get_release(release_id)
    return ReleaseResponse.from_release(release)


# ═══════════════════════════════════════════════════════════════════════
# Artist-scoped routes
# ═══════════════════════════════════════════════════════════════════════

@artist_releases_router.get(
    "/",
    response_model=list[FlaggedReleaseResponse] | list[ReleaseResponse],
)
async def list_artist_releases(
    request: Request,
    artist_id: str,
    type: ReleaseType | None = None,  # noqa: A002
    with_latest_flag: bool = False,
) -> list[FlaggedReleaseResponse] | list[ReleaseResponse]:
    """List an artist's releases, newest first.

    With ``with_latest_flag`` every entry carries ``is_latest``; the type
    filter does not apply in that mode.
    """
    svc = get_release_service(request)
    if with_latest_flag:
        flagged = await svc.list_releases_with_latest_flag(artist_id)
        return [
            FlaggedReleaseResponse(**item.release.model_dump(), is_latest=item.is_latest)
            for item in flagged
        ]
    releases = await svc.list_releases(artist_id=artist_id, release_type=type)
    return [ReleaseResponse.from_release(r) for r in releases]


@artist_releases_router.post("/", response_model=ReleaseResponse, status_code=201)
async def create_release(
    request: Request,
    artist_id: str,
    body: CreateReleaseRequest,
) -> ReleaseResponse:
    release = await get_release_service(request).create_release(
        artist_id=artist_id,
        title=body.title,
        release_type=body.type,
        release_date=body.release_date,
        status=body.status,
        scheduled_publish_at=body.scheduled_publish_at,
        cover_url=body.cover_url,
        genres=body.genres,
        song_ids=body.song_ids,
    )
    return ReleaseResponse.from_release(release)


@artist_releases_router.get("/latest", response_model=ReleaseResponse | None)
async def get_latest_release(request: Request, artist_id: str) -> ReleaseResponse | None:
    release = await get_release_service(request).get_latest_release(artist_id)
    return ReleaseResponse.from_release(release) if release else None


@artist_releases_router.get("/{release_id}", response_model=ReleaseResponse)
async def get_artist_release(request: Request, artist_id: str, release_id: str) -> ReleaseResponse:
    release = await get_release_service(request).get_release(release_id, artist_id=artist_id)
    return ReleaseResponse.from_release(release)


@artist_releases_router.patch("/{release_id}", response_model=ReleaseResponse)
async def update_release(
    request: Request,
    artist_id: str,
    release_id: str,
    body: UpdateReleaseRequest,
) -> ReleaseResponse:
    release = await get_release_service(request).update_release(
        release_id,
        body.model_dump(exclude_unset=True),
        artist_id=artist_id,
    )
    return ReleaseResponse.from_release(release)


@artist_releases_router.patch("/{release_id}/cover", response_model=ReleaseResponse)
async def update_release_cover(
    request: Request,
    artist_id: str,
    release_id: str,
    cover: UploadFile = File(..., description="Cover artwork."),
) -> ReleaseResponse:
    svc = get_release_service(request)
    await svc.get_release(release_id, artist_id=artist_id)
    cover_url = await store_upload(request, cover, _UPLOAD_FOLDER)
    release = await svc.update_release(release_id, {"cover_url": cover_url}, artist_id=artist_id)
    logger.info("release_cover_uploaded", release_id=release_id, cover_url=cover_url)
    return ReleaseResponse.from_release(release)


@artist_releases_router.patch("/{release_id}/songs/add", response_model=ReleaseResponse)
async def add_songs(
    request: Request,
    artist_id: str,
    release_id: str,
    body: SongIdsRequest,
) -> ReleaseResponse:
    release = await get_release_service(request).add_songs(
        release_id, body.song_ids, artist_id=artist_id
    )
    return ReleaseResponse.from_release(release)


@artist_releases_router.patch("/{release_id}/songs/remove", response_model=ReleaseResponse)
async def remove_songs(
    request: Request,
    artist_id: str,
    release_id: str,
    body: SongIdsRequest,
) -> ReleaseResponse:
    release = await get_release_service(request).remove_songs(
        release_id, body.song_ids, artist_id=artist_id
    )
    return ReleaseResponse.from_release(release)


@artist_releases_router.delete("/{release_id}", status_code=204)
async def delete_release(request: Request, artist_id: str, release_id: str) -> Response:
    await get_release_service(request).remove_release(release_id, artist_id=artist_id)
    return Response(status_code=204)
