"""Shared SQLite schema and connection helper for the catalog database.

Artists and releases live in one database file (``data/catalog.db`` by
default) because releases hold a foreign key to their artist.  Both
providers call :func:`apply_schema` from ``initialize()``; every statement
is ``IF NOT EXISTS`` so running it twice is harmless.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

DEFAULT_DB_PATH = Path("data/catalog.db")

# ── Schema DDL ────────────────────────────────────────────────────────

_CREATE_ARTISTS_TABLE = """\
CREATE TABLE IF NOT EXISTS artists (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    artist_id        TEXT    NOT NULL UNIQUE,
    name             TEXT    NOT NULL UNIQUE,
    bio              TEXT,
    social_links     TEXT,
    image_url        TEXT,
    cover_url        TEXT,
    followers_count  INTEGER NOT NULL DEFAULT 0 CHECK (followers_count >= 0),
    created_at       TEXT    NOT NULL,
    updated_at       TEXT    NOT NULL
);
"""

_CREATE_RELEASES_TABLE = """\
CREATE TABLE IF NOT EXISTS releases (
    id                    INTEGER PRIMARY KEY AUTOINCREMENT,
    release_id            TEXT NOT NULL UNIQUE,
    artist_id             TEXT NOT NULL REFERENCES artists(artist_id) ON DELETE CASCADE,
    title                 TEXT NOT NULL,
    type                  TEXT NOT NULL DEFAULT 'album',
    status                TEXT NOT NULL DEFAULT 'draft',
    release_date          TEXT NOT NULL,
    scheduled_publish_at  TEXT,
    cover_url             TEXT,
    genres                TEXT,
    created_at            TEXT NOT NULL,
    updated_at            TEXT NOT NULL,
    UNIQUE(title, artist_id)
);
"""

# One row per (release, song); position keeps insertion order.
_CREATE_RELEASE_SONGS_TABLE = """\
CREATE TABLE IF NOT EXISTS release_songs (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    release_id  TEXT    NOT NULL REFERENCES releases(release_id) ON DELETE CASCADE,
    song_id     TEXT    NOT NULL,
    position    INTEGER NOT NULL,
    UNIQUE(release_id, song_id)
);
"""

_CREATE_INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_artists_followers ON artists(followers_count DESC, name ASC);",
    "CREATE INDEX IF NOT EXISTS idx_releases_artist ON releases(artist_id);",
    "CREATE INDEX IF NOT EXISTS idx_releases_order ON releases(release_date DESC, title ASC);",
    "CREATE INDEX IF NOT EXISTS idx_release_songs_song ON release_songs(song_id);",
]


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


@asynccontextmanager
async def connect(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    """Open a connection with foreign keys on and ``casefold()`` registered.

    SQLite's own ``lower()``/``LIKE`` only fold ASCII, so search queries use
    ``instr(casefold(column), ?)`` with a Python-casefolded needle instead.
    """
    async with aiosqlite.connect(str(db_path)) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys=ON;")
        await db.create_function("casefold", 1, _casefold, deterministic=True)
        yield db


async def apply_schema(db_path: Path) -> None:
    """Create all catalog tables and indices if they don't exist."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    async with connect(db_path) as db:
        # WAL mode enables concurrent readers while a writer is active.
        await db.execute("PRAGMA journal_mode=WAL;")
        await db.execute(_CREATE_ARTISTS_TABLE)
        await db.execute(_CREATE_RELEASES_TABLE)
        await db.execute(_CREATE_RELEASE_SONGS_TABLE)
        for idx_sql in _CREATE_INDICES:
            await db.execute(idx_sql)
        await db.commit()
