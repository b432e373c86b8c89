"""Artist Registry - identity, name uniqueness, metadata, followers, media.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services (business logic orchestration).
# Depends on: IArtistProvider.
#
# Name and ID uniqueness is pre-checked here so callers get a precise
# error; the store's UNIQUE constraints remain the real guarantee and
# surface the same ConflictError subclasses on a race.
#
# Updates are shallow merges: only keys present in ``changes`` are
# applied, and ``social_links`` is replaced as a whole.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

import structlog

from melodia.interfaces.artist_provider import IArtistProvider
from melodia.models.artist import Artist
from melodia.utils.errors import (
    ArtistIdConflictError,
    ArtistNameConflictError,
    ArtistNotFoundError,
    ValidationError,
)
from melodia.utils.pagination import page_offset

logger = structlog.get_logger(logger_name=__name__)

_UPDATABLE_FIELDS = frozenset({"name", "bio", "social_links"})


class ArtistService:
    """Owns the artist lifecycle.

    All dependencies are constructor-injected; the service never builds
    its own store.
    """

    def __init__(self, artist_store: IArtistProvider) -> None:
        self._artist_store = artist_store

    async def create_artist(
        self,
        name: str,
        artist_id: str | None = None,
        bio: str | None = None,
        social_links: dict[str, str] | None = None,
        image_url: str | None = None,
    ) -> Artist:
        """Register a new artist.

        Raises
        ------
        ArtistIdConflictError
            An artist with *artist_id* already exists (checked first).
        ArtistNameConflictError
            An artist named *name* already exists.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Artist name is required")

        if artist_id and await self._artist_store.get_artist(artist_id) is not None:
            raise ArtistIdConflictError(artist_id)
        if await self._artist_store.get_artist_by_name(name) is not None:
            raise ArtistNameConflictError(name)

        artist = Artist(
            artist_id=artist_id or str(uuid4()),
            name=name,
            bio=bio,
            social_links=social_links or {},
            image_url=image_url,
        )
        created = await self._artist_store.insert_artist(artist)
        logger.info("artist_created", artist_id=created.artist_id, name=created.name)
        return created

    async def get_artist(self, artist_id: str) -> Artist:
        artist = await self._artist_store.get_artist(artist_id)
        if artist is None:
            raise ArtistNotFoundError(artist_id)
        return artist

    async def update_artist(self, artist_id: str, changes: dict[str, Any]) -> Artist:
        """Apply a partial update; a changed name is re-checked for uniqueness."""
        artist = await self.get_artist(artist_id)
        updates = {k: v for k, v in changes.items() if k in _UPDATABLE_FIELDS}

        if "name" in updates:
            new_name = (updates["name"] or "").strip()
            if not new_name:
                raise ValidationError("Artist name cannot be empty")
            updates["name"] = new_name
            if new_name != artist.name:
                if await self._artist_store.get_artist_by_name(new_name) is not None:
                    raise ArtistNameConflictError(new_name)
        if "social_links" in updates and updates["social_links"] is None:
            updates["social_links"] = {}

        saved = await self._artist_store.save_artist(artist.model_copy(update=updates))
        logger.info("artist_updated", artist_id=artist_id, fields=sorted(updates))
        return saved

    async def update_media(
        self,
        artist_id: str,
        image_url: str | None = None,
        cover_url: str | None = None,
    ) -> Artist:
        """Set the non-empty URLs only.  Always writes, even when both are empty."""
        artist = await self.get_artist(artist_id)
        updates: dict[str, str] = {}
        if image_url:
            updates["image_url"] = image_url
        if cover_url:
            updates["cover_url"] = cover_url

        saved = await self._artist_store.save_artist(artist.model_copy(update=updates))
        logger.info("artist_media_updated", artist_id=artist_id, fields=sorted(updates))
        return saved

    async def increment_followers(self, artist_id: str) -> Artist:
        return await self._change_followers(artist_id, 1)

    async def decrement_followers(self, artist_id: str) -> Artist:
        """Remove one follower; the counter never drops below zero."""
        return await self._change_followers(artist_id, -1)

    async def remove_artist(self, artist_id: str) -> None:
        if not await self._artist_store.delete_artist(artist_id):
            raise ArtistNotFoundError(artist_id)
        logger.info("artist_removed", artist_id=artist_id)

    async def search_artists(self, query: str, limit: int, page: int) -> list[Artist]:
        """Case-insensitive search on name or bio, most-followed first."""
        return await self._artist_store.search_artists(
            query,
            limit=limit,
            offset=page_offset(page, limit),
        )

    async def _change_followers(self, artist_id: str, delta: int) -> Artist:
        artist = await self._artist_store.change_followers(artist_id, delta)
        if artist is None:
            raise ArtistNotFoundError(artist_id)
        logger.debug(
            "artist_followers_changed",
            artist_id=artist_id,
            delta=delta,
            followers=artist.followers_count,
        )
        return artist
