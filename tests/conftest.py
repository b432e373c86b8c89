"""Shared pytest fixtures for the Melodia test suite."""

from __future__ import annotations

import io
import os
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path

import pytest
from PIL import Image

from melodia.models.artist import Artist
from melodia.models.release import Release, ReleaseStatus, ReleaseType
from melodia.providers.catalog.sqlite_artist_provider import SQLiteArtistProvider
from melodia.providers.catalog.sqlite_release_provider import SQLiteReleaseProvider

# Fixed "now" used by clock-injected services.
FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Databases
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_db():
    """Path of a throwaway SQLite file, removed (with WAL side files) afterwards."""
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    yield tmp.name
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(tmp.name + suffix):
            os.unlink(tmp.name + suffix)


@pytest.fixture
async def artist_store(tmp_db):
    store = SQLiteArtistProvider(db_path=tmp_db)
    await store.initialize()
    return store


@pytest.fixture
async def release_store(tmp_db, artist_store):
    store = SQLiteReleaseProvider(db_path=tmp_db)
    await store.initialize()
    return store


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


def _image_bytes(fmt: str, size: tuple[int, int] = (32, 32)) -> bytes:
    img = Image.new("RGB", size, color=(200, 30, 90))
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    """A tiny valid PNG."""
    return _image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _image_bytes("JPEG")


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


# ---------------------------------------------------------------------------
# Model builders
# ---------------------------------------------------------------------------


def make_artist(artist_id: str = "artist-001", name: str = "Nina Kraviz", **kwargs) -> Artist:
    return Artist(artist_id=artist_id, name=name, **kwargs)


def make_release(
    release_id: str = "release-001",
    artist_id: str = "artist-001",
    title: str = "Trip",
    release_date: date = date(2024, 3, 1),
    status: ReleaseStatus = ReleaseStatus.PUBLISHED,
    **kwargs,
) -> Release:
    return Release(
        release_id=release_id,
        artist_id=artist_id,
        title=title,
        type=kwargs.pop("type", ReleaseType.ALBUM),
        status=status,
        release_date=release_date,
        cover_url=kwargs.pop("cover_url", "https://cdn.example.com/cover.png"),
        song_ids=kwargs.pop("song_ids", ["song-1"]),
        **kwargs,
    )
