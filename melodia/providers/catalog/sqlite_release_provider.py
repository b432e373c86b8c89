"""SQLite-backed release persistence provider.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing IReleaseProvider).
#
# Tables (see melodia/providers/catalog/schema.py):
#   releases       one row per release, UNIQUE(title, artist_id)
#   release_songs  one row per (release, song), ``position`` keeps order
#
# Song membership lives in its own table rather than a JSON column so the
# song -> cover lookup is an indexed join and duplicates are impossible at
# the schema level.  Genres are a plain JSON list on the release row.
#
# Ordering for every list query: release_date DESC, title ASC.
# ``release_date`` is stored as ``YYYY-MM-DD`` so text order == date order.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from melodia.interfaces.release_provider import IReleaseProvider
from melodia.models.artist import utc_now
from melodia.models.release import Release, ReleaseStatus, ReleaseType
from melodia.providers.catalog.schema import DEFAULT_DB_PATH, apply_schema, connect
from melodia.utils.errors import ReleaseTitleConflictError
from melodia.utils.pagination import search_needle

logger = structlog.get_logger(logger_name=__name__)

_RELEASE_COLUMNS = (
    "r.release_id, r.artist_id, r.title, r.type, r.status, r.release_date, "
    "r.scheduled_publish_at, r.cover_url, r.genres, r.created_at, r.updated_at"
)

_ORDER_BY = "ORDER BY r.release_date DESC, r.title ASC"

_INSERT_RELEASE = """\
INSERT INTO releases (release_id, artist_id, title, type, status, release_date,
                      scheduled_publish_at, cover_url, genres, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_UPDATE_RELEASE = """\
UPDATE releases
SET title = ?, type = ?, status = ?, release_date = ?, scheduled_publish_at = ?,
    cover_url = ?, genres = ?, updated_at = ?
WHERE release_id = ?;
"""

_INSERT_SONG = """\
INSERT OR IGNORE INTO release_songs (release_id, song_id, position)
VALUES (?, ?, ?);
"""

_SELECT_SONGS = """\
SELECT song_id FROM release_songs WHERE release_id = ? ORDER BY position ASC;
"""

# Earliest stored release wins when a song appears on several releases.
_SELECT_BY_SONG = f"""\
SELECT {_RELEASE_COLUMNS}
FROM releases r
JOIN release_songs s ON s.release_id = r.release_id
WHERE s.song_id = ?
ORDER BY r.id ASC
LIMIT 1;
"""

_SEARCH_RELEASES = f"""\
SELECT {_RELEASE_COLUMNS}
FROM releases r
WHERE instr(casefold(r.title), ?) > 0
{_ORDER_BY}
LIMIT ? OFFSET ?;
"""


class SQLiteReleaseProvider(IReleaseProvider):
    """SQLite-backed release persistence."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        await apply_schema(self._db_path)
        logger.info("release_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return "sqlite_release"

    # ── CRUD ───────────────────────────────────────────────────────────

    async def insert_release(self, release: Release) -> Release:
        async with connect(self._db_path) as db:
            try:
                await db.execute(_INSERT_RELEASE, (
                    release.release_id,
                    release.artist_id,
                    release.title,
                    release.type.value,
                    release.status.value,
                    release.release_date.isoformat(),
                    self._iso_or_none(release.scheduled_publish_at),
                    release.cover_url,
                    json.dumps(release.genres) if release.genres is not None else None,
                    release.created_at.isoformat(),
                    release.updated_at.isoformat(),
                ))
                await self._write_songs(db, release.release_id, release.song_ids)
                await db.commit()
            except aiosqlite.IntegrityError as exc:
                conflict = self._conflict_from(exc, release)
                if conflict is None:
                    raise
                raise conflict from exc

        logger.info(
            "release_inserted",
            release_id=release.release_id,
            artist_id=release.artist_id,
            status=release.status.value,
            songs=len(release.song_ids),
        )
        return release

    async def get_release(
        self,
        release_id: str,
        artist_id: str | None = None,
    ) -> Release | None:
        conditions = ["r.release_id = ?"]
        params: list[Any] = [release_id]
        if artist_id is not None:
            conditions.append("r.artist_id = ?")
            params.append(artist_id)

        query = f"SELECT {_RELEASE_COLUMNS} FROM releases r WHERE {' AND '.join(conditions)};"
        async with connect(self._db_path) as db:
            cursor = await db.execute(query, params)
            row = await cursor.fetchone()
            if row is None:
                return None
            return await self._hydrate(db, dict(row))

    async def find_by_title(self, artist_id: str, title: str) -> Release | None:
        query = f"SELECT {_RELEASE_COLUMNS} FROM releases r WHERE r.artist_id = ? AND r.title = ?;"
        async with connect(self._db_path) as db:
            cursor = await db.execute(query, (artist_id, title))
            row = await cursor.fetchone()
            if row is None:
                return None
            return await self._hydrate(db, dict(row))

    async def save_release(self, release: Release) -> Release:
        saved = release.model_copy(update={"updated_at": utc_now()})
        async with connect(self._db_path) as db:
            try:
                await db.execute(_UPDATE_RELEASE, (
                    saved.title,
                    saved.type.value,
                    saved.status.value,
                    saved.release_date.isoformat(),
                    self._iso_or_none(saved.scheduled_publish_at),
                    saved.cover_url,
                    json.dumps(saved.genres) if saved.genres is not None else None,
                    saved.updated_at.isoformat(),
                    saved.release_id,
                ))
                # Song membership is rewritten wholesale to keep positions dense.
                await db.execute(
                    "DELETE FROM release_songs WHERE release_id = ?;", (saved.release_id,)
                )
                await self._write_songs(db, saved.release_id, saved.song_ids)
                await db.commit()
            except aiosqlite.IntegrityError as exc:
                conflict = self._conflict_from(exc, saved)
                if conflict is None:
                    raise
                raise conflict from exc

        logger.debug("release_saved", release_id=saved.release_id, songs=len(saved.song_ids))
        return saved

    async def delete_release(self, release_id: str) -> bool:
        async with connect(self._db_path) as db:
            cursor = await db.execute("DELETE FROM releases WHERE release_id = ?;", (release_id,))
            await db.commit()
            return cursor.rowcount > 0

    # ── Queries ────────────────────────────────────────────────────────

    async def list_releases(
        self,
        *,
        artist_id: str | None = None,
        release_type: ReleaseType | None = None,
    ) -> list[Release]:
        conditions: list[str] = []
        params: list[Any] = []

        if artist_id is not None:
            conditions.append("r.artist_id = ?")
            params.append(artist_id)
        if release_type is not None:
            conditions.append("r.type = ?")
            params.append(release_type.value)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        query = f"SELECT {_RELEASE_COLUMNS} FROM releases r {where_clause} {_ORDER_BY};"

        async with connect(self._db_path) as db:
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [await self._hydrate(db, dict(row)) for row in rows]

    async def search_releases(
        self,
        query: str,
        *,
        limit: int,
        offset: int,
    ) -> list[Release]:
        async with connect(self._db_path) as db:
            cursor = await db.execute(_SEARCH_RELEASES, (search_needle(query), limit, offset))
            rows = await cursor.fetchall()
            return [await self._hydrate(db, dict(row)) for row in rows]

    async def find_release_by_song(self, song_id: str) -> Release | None:
        async with connect(self._db_path) as db:
            cursor = await db.execute(_SELECT_BY_SONG, (song_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return await self._hydrate(db, dict(row))

    # ── Private helpers ────────────────────────────────────────────────

    @staticmethod
    async def _write_songs(
        db: aiosqlite.Connection,
        release_id: str,
        song_ids: list[str],
    ) -> None:
        for position, song_id in enumerate(song_ids):
            await db.execute(_INSERT_SONG, (release_id, song_id, position))

    async def _hydrate(self, db: aiosqlite.Connection, row: dict[str, Any]) -> Release:
        """Attach song membership to a releases row and build the model."""
        cursor = await db.execute(_SELECT_SONGS, (row["release_id"],))
        song_rows = await cursor.fetchall()
        return self._row_to_release(row, [r["song_id"] for r in song_rows])

    @staticmethod
    def _iso_or_none(value: Any) -> str | None:
        return value.isoformat() if value is not None else None

    @staticmethod
    def _conflict_from(
        exc: aiosqlite.IntegrityError,
        release: Release,
    ) -> ReleaseTitleConflictError | None:
        """Map the (title, artist_id) UNIQUE violation; None for anything else."""
        if "releases.title" in str(exc):
            return ReleaseTitleConflictError(release.title)
        return None

    @staticmethod
    def _row_to_release(row: dict[str, Any], song_ids: list[str]) -> Release:
        genres_raw = row.get("genres")
        return Release(
            release_id=row["release_id"],
            artist_id=row["artist_id"],
            title=row["title"],
            type=ReleaseType(row["type"]),
            status=ReleaseStatus(row["status"]),
            release_date=row["release_date"],
            scheduled_publish_at=row.get("scheduled_publish_at"),
            cover_url=row.get("cover_url"),
            genres=json.loads(genres_raw) if genres_raw is not None else None,
            song_ids=song_ids,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
