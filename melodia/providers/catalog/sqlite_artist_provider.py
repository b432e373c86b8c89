"""SQLite-backed artist persistence provider.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing IArtistProvider).
# Pattern: Adapter pattern - wraps SQLite behind the IArtistProvider ABC
#          so the persistence backend can be swapped without touching
#          ArtistService.
#
# Database: ``data/catalog.db`` (shared with SQLiteReleaseProvider, see
# melodia/providers/catalog/schema.py).
#
# The UNIQUE constraints on ``artist_id`` and ``name`` are the real
# uniqueness guarantee.  ArtistService pre-checks for nicer errors, but
# two concurrent creates can both pass that check; the loser's
# IntegrityError is translated here into the same ConflictError the
# pre-check would have raised.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from melodia.interfaces.artist_provider import IArtistProvider
from melodia.models.artist import Artist, utc_now
from melodia.providers.catalog.schema import DEFAULT_DB_PATH, apply_schema, connect
from melodia.utils.errors import ArtistIdConflictError, ArtistNameConflictError
from melodia.utils.pagination import search_needle

logger = structlog.get_logger(logger_name=__name__)

_ARTIST_COLUMNS = (
    "artist_id, name, bio, social_links, image_url, cover_url, "
    "followers_count, created_at, updated_at"
)

_INSERT_ARTIST = f"""\
INSERT INTO artists ({_ARTIST_COLUMNS})
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_BY_ID = f"SELECT {_ARTIST_COLUMNS} FROM artists WHERE artist_id = ?;"

_SELECT_BY_NAME = f"SELECT {_ARTIST_COLUMNS} FROM artists WHERE name = ?;"

_UPDATE_ARTIST = """\
UPDATE artists
SET name = ?, bio = ?, social_links = ?, image_url = ?, cover_url = ?,
    followers_count = ?, updated_at = ?
WHERE artist_id = ?;
"""

# MAX() keeps the counter at zero or above without a read-modify-write.
_CHANGE_FOLLOWERS = """\
UPDATE artists
SET followers_count = MAX(followers_count + ?, 0), updated_at = ?
WHERE artist_id = ?;
"""

_SEARCH_ARTISTS = f"""\
SELECT {_ARTIST_COLUMNS}
FROM artists
WHERE instr(casefold(name), ?) > 0
   OR instr(casefold(COALESCE(bio, '')), ?) > 0
ORDER BY followers_count DESC, name ASC
LIMIT ? OFFSET ?;
"""


class SQLiteArtistProvider(IArtistProvider):
    """SQLite-backed artist persistence."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        await apply_schema(self._db_path)
        logger.info("artist_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return "sqlite_artist"

    # ── CRUD ───────────────────────────────────────────────────────────

    async def insert_artist(self, artist: Artist) -> Artist:
        async with connect(self._db_path) as db:
            try:
                await db.execute(_INSERT_ARTIST, (
                    artist.artist_id,
                    artist.name,
                    artist.bio,
                    json.dumps(artist.social_links) if artist.social_links else None,
                    artist.image_url,
                    artist.cover_url,
                    artist.followers_count,
                    artist.created_at.isoformat(),
                    artist.updated_at.isoformat(),
                ))
                await db.commit()
            except aiosqlite.IntegrityError as exc:
                raise self._conflict_from(exc, artist) from exc

        logger.info("artist_inserted", artist_id=artist.artist_id)
        return artist

    async def get_artist(self, artist_id: str) -> Artist | None:
        async with connect(self._db_path) as db:
            cursor = await db.execute(_SELECT_BY_ID, (artist_id,))
            row = await cursor.fetchone()
        return self._row_to_artist(dict(row)) if row is not None else None

    async def get_artist_by_name(self, name: str) -> Artist | None:
        async with connect(self._db_path) as db:
            cursor = await db.execute(_SELECT_BY_NAME, (name,))
            row = await cursor.fetchone()
        return self._row_to_artist(dict(row)) if row is not None else None

    async def save_artist(self, artist: Artist) -> Artist:
        saved = artist.model_copy(update={"updated_at": utc_now()})
        async with connect(self._db_path) as db:
            try:
                await db.execute(_UPDATE_ARTIST, (
                    saved.name,
                    saved.bio,
                    json.dumps(saved.social_links) if saved.social_links else None,
                    saved.image_url,
                    saved.cover_url,
                    saved.followers_count,
                    saved.updated_at.isoformat(),
                    saved.artist_id,
                ))
                await db.commit()
            except aiosqlite.IntegrityError as exc:
                raise self._conflict_from(exc, saved) from exc

        logger.debug("artist_saved", artist_id=saved.artist_id)
        return saved

    async def delete_artist(self, artist_id: str) -> bool:
        async with connect(self._db_path) as db:
            cursor = await db.execute("DELETE FROM artists WHERE artist_id = ?;", (artist_id,))
            await db.commit()
            return cursor.rowcount > 0

    # ── Counters ───────────────────────────────────────────────────────

    async def change_followers(self, artist_id: str, delta: int) -> Artist | None:
        async with connect(self._db_path) as db:
            cursor = await db.execute(
                _CHANGE_FOLLOWERS, (delta, utc_now().isoformat(), artist_id)
            )
            if cursor.rowcount == 0:
                return None
            await db.commit()
            cursor = await db.execute(_SELECT_BY_ID, (artist_id,))
            row = await cursor.fetchone()
        return self._row_to_artist(dict(row))

    # ── Search ─────────────────────────────────────────────────────────

    async def search_artists(
        self,
        query: str,
        *,
        limit: int,
        offset: int,
    ) -> list[Artist]:
        needle = search_needle(query)
        async with connect(self._db_path) as db:
            cursor = await db.execute(_SEARCH_ARTISTS, (needle, needle, limit, offset))
            rows = await cursor.fetchall()
        return [self._row_to_artist(dict(r)) for r in rows]

    # ── Private helpers ────────────────────────────────────────────────

    @staticmethod
    def _conflict_from(
        exc: aiosqlite.IntegrityError,
        artist: Artist,
    ) -> ArtistIdConflictError | ArtistNameConflictError:
        """Map a UNIQUE violation to the matching conflict error."""
        if "artists.artist_id" in str(exc):
            return ArtistIdConflictError(artist.artist_id)
        return ArtistNameConflictError(artist.name)

    @staticmethod
    def _row_to_artist(row: dict[str, Any]) -> Artist:
        links_raw = row.get("social_links")
        return Artist(
            artist_id=row["artist_id"],
            name=row["name"],
            bio=row.get("bio"),
            social_links=json.loads(links_raw) if links_raw else {},
            image_url=row.get("image_url"),
            cover_url=row.get("cover_url"),
            followers_count=row["followers_count"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
