"""Release Catalog - lifecycle, per-artist consistency and song membership.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services (business logic orchestration).
# Depends on: IReleaseProvider, IArtistProvider (existence checks only).
#
# Rules enforced here:
#
#   1. CREATION VALIDATION - every failing rule is collected and raised
#      together as one ReleaseValidationError.
#   2. STATUS DERIVATION - decided once at creation from the requested
#      status and scheduled_publish_at (see ``derive_status``).
#   3. TITLE UNIQUENESS - (title, artist_id) pre-checked on create and on
#      title change; the store's UNIQUE constraint is authoritative.
#   4. SONG GUARD - the song set of a PUBLISHED release is frozen.
#   5. LATEST FLAG - every release sharing the newest release date is
#      flagged, not just the first.
#
# Every lookup takes an optional ``artist_id``; when given, a release
# owned by another artist is reported as not found for that artist.
#
# The current time comes from an injectable ``clock`` so scheduling rules
# are testable without freezing time globally.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable, TypeVar
from uuid import uuid4

import structlog

from melodia.interfaces.artist_provider import IArtistProvider
from melodia.interfaces.release_provider import IReleaseProvider
from melodia.models.artist import utc_now
from melodia.models.release import (
    Release,
    ReleaseStatus,
    ReleaseType,
    ReleaseWithLatestFlag,
)
from melodia.utils.errors import (
    ArtistNotFoundError,
    CoverNotFoundError,
    PublishedReleaseError,
    ReleaseNotFoundError,
    ReleaseTitleConflictError,
    ReleaseValidationError,
    SongNotFoundError,
    ValidationError,
)
from melodia.utils.pagination import page_offset

logger = structlog.get_logger(logger_name=__name__)

E = TypeVar("E", bound=Enum)

_UPDATABLE_FIELDS = frozenset({
    "title",
    "type",
    "status",
    "release_date",
    "scheduled_publish_at",
    "cover_url",
    "genres",
    "song_ids",
})


# ── Pure helpers ──────────────────────────────────────────────────────

def as_utc(value: datetime | str) -> datetime:
    """Parse/normalize a timestamp; naive values are taken as UTC."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError as exc:
            raise ValidationError(f"Invalid timestamp: {value!r}") from exc
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def as_calendar_date(value: date | datetime | str) -> date:
    """Normalize a release date to a plain calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(value).date()
    except ValueError as exc:
        raise ValidationError(f"Invalid release date: {value!r}") from exc


def as_choice(enum_cls: type[E], value: E | str, label: str) -> E:
    """Coerce *value* to a member of *enum_cls*, in either letter case."""
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {label}: {value!r}",
            errors=[f"{label.capitalize()} must be one of: {allowed}"],
        ) from exc


def unique_in_order(values: list[str]) -> list[str]:
    """Drop duplicates, keeping the first occurrence of each value."""
    return list(dict.fromkeys(values))


def derive_status(
    requested: ReleaseStatus | None,
    scheduled_publish_at: datetime | None,
    now: datetime,
) -> ReleaseStatus:
    """Decide a new release's status.

    - a schedule in the future       -> SCHEDULED
    - a schedule now or in the past  -> PUBLISHED (immediate back-dated publish)
    - no schedule and no status      -> PUBLISHED
    - otherwise                      -> the requested status
    """
    if scheduled_publish_at is not None:
        if scheduled_publish_at > now:
            return ReleaseStatus.SCHEDULED
        return ReleaseStatus.PUBLISHED
    if requested is None:
        return ReleaseStatus.PUBLISHED
    return requested


def validate_new_release(
    *,
    title: str | None,
    cover_url: str | None,
    genres: list[str] | None,
    song_ids: list[str] | None,
    status: ReleaseStatus | None,
    scheduled_publish_at: datetime | None,
    now: datetime,
) -> list[str]:
    """Return every creation rule the input breaks (empty list when valid)."""
    errors: list[str] = []

    if not (title or "").strip():
        errors.append("Title is required")

    # Omitting genres is fine; an explicit empty list is not.
    if genres is not None and len(genres) == 0:
        errors.append("If genres are provided, at least one genre is required")

    if not (cover_url or "").strip():
        errors.append("Cover image is required")

    if not song_ids:
        errors.append("At least one song is required")

    if status == ReleaseStatus.SCHEDULED:
        if scheduled_publish_at is None:
            errors.append("Scheduled publish date is required for programmed releases")
        elif scheduled_publish_at <= now:
            errors.append("Scheduled publish date must be in the future")

    return errors


# ── Service ───────────────────────────────────────────────────────────

class ReleaseService:
    """Owns release records and their lifecycle rules.

    All dependencies are constructor-injected; the service never builds
    its own stores.
    """

    def __init__(
        self,
        release_store: IReleaseProvider,
        artist_store: IArtistProvider,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._release_store = release_store
        self._artist_store = artist_store
        self._clock = clock

    # ── Create ─────────────────────────────────────────────────────────

    async def create_release(
        self,
        artist_id: str,
        title: str,
        release_type: ReleaseType | str,
        release_date: date | datetime | str,
        status: ReleaseStatus | str | None = None,
        scheduled_publish_at: datetime | str | None = None,
        cover_url: str | None = None,
        genres: list[str] | None = None,
        song_ids: list[str] | None = None,
    ) -> Release:
        """Create a release for an existing artist.

        Raises
        ------
        ArtistNotFoundError
            The artist doesn't exist.
        ReleaseValidationError
            One or more creation rules failed; ``errors`` lists them all.
        ReleaseTitleConflictError
            The artist already has a release with this title.
        """
        await self._ensure_artist(artist_id)

        now = self._clock()
        requested = as_choice(ReleaseStatus, status, "status") if status is not None else None
        scheduled_at = as_utc(scheduled_publish_at) if scheduled_publish_at is not None else None

        errors = validate_new_release(
            title=title,
            cover_url=cover_url,
            genres=genres,
            song_ids=song_ids,
            status=requested,
            scheduled_publish_at=scheduled_at,
            now=now,
        )
        if errors:
            logger.info("release_validation_failed", artist_id=artist_id, errors=errors)
            raise ReleaseValidationError(errors)

        title = title.strip()
        if await self._release_store.find_by_title(artist_id, title) is not None:
            raise ReleaseTitleConflictError(title)

        release = Release(
            release_id=str(uuid4()),
            artist_id=artist_id,
            title=title,
            type=as_choice(ReleaseType, release_type, "release type"),
            status=derive_status(requested, scheduled_at, now),
            release_date=as_calendar_date(release_date),
            scheduled_publish_at=scheduled_at,
            cover_url=cover_url,
            genres=genres,
            song_ids=unique_in_order(song_ids or []),
            created_at=now,
            updated_at=now,
        )
        created = await self._release_store.insert_release(release)
        logger.info(
            "release_created",
            release_id=created.release_id,
            artist_id=artist_id,
            status=created.status.value,
        )
        return created

    # ── Read ───────────────────────────────────────────────────────────

    async def get_release(self, release_id: str, artist_id: str | None = None) -> Release:
        release = await self._release_store.get_release(release_id, artist_id=artist_id)
        if release is None:
            raise ReleaseNotFoundError(release_id, artist_id)
        return release

    async def list_releases(
        self,
        artist_id: str | None = None,
        release_type: ReleaseType | str | None = None,
    ) -> list[Release]:
        """Releases ordered newest first, then by title.

        With no ``artist_id`` the whole catalog is listed.
        """
        if artist_id is not None:
            await self._ensure_artist(artist_id)
        return await self._release_store.list_releases(
            artist_id=artist_id,
            release_type=(
                as_choice(ReleaseType, release_type, "release type")
                if release_type is not None
                else None
            ),
        )

    async def list_releases_with_latest_flag(self, artist_id: str) -> list[ReleaseWithLatestFlag]:
        """Flag the first release and every other release on the same latest date."""
        releases = await self.list_releases(artist_id=artist_id)
        if not releases:
            return []

        latest_date = releases[0].release_date
        return [
            ReleaseWithLatestFlag(
                release=release,
                is_latest=index == 0 or release.release_date == latest_date,
            )
            for index, release in enumerate(releases)
        ]

    async def get_latest_release(self, artist_id: str) -> Release | None:
        releases = await self.list_releases(artist_id=artist_id)
        return releases[0] if releases else None

    async def search_releases(self, query: str, limit: int, page: int) -> list[Release]:
        return await self._release_store.search_releases(
            query,
            limit=limit,
            offset=page_offset(page, limit),
        )

    async def get_cover_url_by_song_id(self, song_id: str) -> dict[str, str]:
        """Cover of the release containing *song_id*.

        When several releases contain the song, the earliest stored one wins.
        """
        release = await self._release_store.find_release_by_song(song_id)
        if release is None:
            raise SongNotFoundError(song_id)
        if not release.cover_url:
            raise CoverNotFoundError()
        return {"cover_url": release.cover_url}

    # ── Update ─────────────────────────────────────────────────────────

    async def update_release(
        self,
        release_id: str,
        changes: dict[str, Any],
        artist_id: str | None = None,
    ) -> Release:
        """Apply a partial update.

        A supplied ``status`` is written as-is: schedule derivation only runs
        at creation.  Changing the song set of a published release is
        rejected just like add/remove.
        """
        release = await self.get_release(release_id, artist_id)
        updates = {k: v for k, v in changes.items() if k in _UPDATABLE_FIELDS}

        if "title" in updates:
            new_title = (updates["title"] or "").strip()
            if not new_title:
                raise ValidationError("Title cannot be empty")
            updates["title"] = new_title
            if new_title != release.title:
                existing = await self._release_store.find_by_title(release.artist_id, new_title)
                if existing is not None and existing.release_id != release.release_id:
                    raise ReleaseTitleConflictError(new_title)

        if updates.get("release_date") is not None:
            updates["release_date"] = as_calendar_date(updates["release_date"])
        else:
            updates.pop("release_date", None)

        if updates.get("scheduled_publish_at") is not None:
            updates["scheduled_publish_at"] = as_utc(updates["scheduled_publish_at"])

        if updates.get("type") is not None:
            updates["type"] = as_choice(ReleaseType, updates["type"], "release type")
        else:
            updates.pop("type", None)

        if updates.get("status") is not None:
            updates["status"] = as_choice(ReleaseStatus, updates["status"], "status")
            if updates["status"] != release.status:
                logger.warning(
                    "release_status_overridden",
                    release_id=release_id,
                    previous=release.status.value,
                    status=updates["status"].value,
                )
        else:
            updates.pop("status", None)

        if "song_ids" in updates:
            new_songs = unique_in_order(updates["song_ids"] or [])
            if set(new_songs) != set(release.song_ids):
                self._guard_song_mutation(release, "change songs of")
            updates["song_ids"] = new_songs

        saved = await self._release_store.save_release(release.model_copy(update=updates))
        logger.info("release_updated", release_id=release_id, fields=sorted(updates))
        return saved

    async def add_songs(
        self,
        release_id: str,
        song_ids: list[str],
        artist_id: str | None = None,
    ) -> Release:
        """Merge *song_ids* into the release; existing order kept, new ids appended."""
        release = await self.get_release(release_id, artist_id)
        self._guard_song_mutation(release, "add songs to")

        merged = unique_in_order([*release.song_ids, *song_ids])
        saved = await self._release_store.save_release(
            release.model_copy(update={"song_ids": merged})
        )
        logger.info(
            "release_songs_added",
            release_id=release_id,
            added=len(merged) - len(release.song_ids),
        )
        return saved

    async def remove_songs(
        self,
        release_id: str,
        song_ids: list[str],
        artist_id: str | None = None,
    ) -> Release:
        release = await self.get_release(release_id, artist_id)
        self._guard_song_mutation(release, "remove songs from")

        to_remove = set(song_ids)
        remaining = [song_id for song_id in release.song_ids if song_id not in to_remove]
        saved = await self._release_store.save_release(
            release.model_copy(update={"song_ids": remaining})
        )
        logger.info(
            "release_songs_removed",
            release_id=release_id,
            removed=len(release.song_ids) - len(remaining),
        )
        return saved

    # ── Delete ─────────────────────────────────────────────────────────

    async def remove_release(self, release_id: str, artist_id: str | None = None) -> None:
        release = await self.get_release(release_id, artist_id)
        if not await self._release_store.delete_release(release.release_id):
            raise ReleaseNotFoundError(release_id, artist_id)
        logger.info("release_removed", release_id=release_id, artist_id=release.artist_id)

    # ── Private helpers ────────────────────────────────────────────────

    async def _ensure_artist(self, artist_id: str) -> None:
        if await self._artist_store.get_artist(artist_id) is None:
            raise ArtistNotFoundError(artist_id)

    @staticmethod
    def _guard_song_mutation(release: Release, action: str) -> None:
        if not release.songs_editable:
            logger.info(
                "release_song_mutation_rejected",
                release_id=release.release_id,
                status=release.status.value,
            )
            raise PublishedReleaseError(action)
