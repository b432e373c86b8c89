"""Abstract base class for artist persistence providers.

# ─── ADAPTER PATTERN ─────────────────────────────────────────────────
#
# The concrete implementation is SQLiteArtistProvider
# (melodia/providers/catalog/sqlite_artist_provider.py).  ArtistService
# only talks to this contract, so the store can move to PostgreSQL
# without touching business logic.
#
# Providers return ``None`` for missing rows; raising NotFound errors is
# the service's job.  Unique-constraint violations, however, are raised
# from here as ConflictError subclasses, since the store is the
# authoritative uniqueness check.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from melodia.models.artist import Artist


class IArtistProvider(ABC):
    """Contract for artist persistence.  All storage operations are async."""

    # ── Lifecycle ──────────────────────────────────────────────────────

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    # ── CRUD ───────────────────────────────────────────────────────────

    @abstractmethod
    async def insert_artist(self, artist: Artist) -> Artist:
        """Persist a new artist.

        Raises
        ------
        ArtistIdConflictError, ArtistNameConflictError
            When the store's unique constraints reject the row.
        """

    @abstractmethod
    async def get_artist(self, artist_id: str) -> Artist | None:
        """Return the artist with *artist_id*, or None."""

    @abstractmethod
    async def get_artist_by_name(self, name: str) -> Artist | None:
        """Return the artist whose name equals *name* exactly, or None."""

    @abstractmethod
    async def save_artist(self, artist: Artist) -> Artist:
        """Overwrite every mutable column of an existing artist.

        Always performs a write, even if nothing changed, and returns the
        stored state (``updated_at`` refreshed).
        """

    @abstractmethod
    async def delete_artist(self, artist_id: str) -> bool:
        """Delete an artist and, by cascade, its releases.

        Returns True if a row was removed.
        """

    # ── Counters ───────────────────────────────────────────────────────

    @abstractmethod
    async def change_followers(self, artist_id: str, delta: int) -> Artist | None:
        """Atomically add *delta* to ``followers_count``, flooring at zero.

        Returns the updated artist, or None if it doesn't exist.
        """

    # ── Search ─────────────────────────────────────────────────────────

    @abstractmethod
    async def search_artists(
        self,
        query: str,
        *,
        limit: int,
        offset: int,
    ) -> list[Artist]:
        """Case-insensitive substring search over name OR bio.

        Ordered by ``followers_count`` descending, then name ascending.
        """
