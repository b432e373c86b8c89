"""Abstract base class for release persistence providers.

# ─── ADAPTER PATTERN ─────────────────────────────────────────────────
#
# Same shape as IArtistProvider.  The concrete implementation is
# SQLiteReleaseProvider (melodia/providers/catalog/sqlite_release_provider.py).
#
# Every list-returning query uses the catalog ordering:
#   release_date DESC, title ASC
# so services never re-sort.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from melodia.models.release import Release, ReleaseType


class IReleaseProvider(ABC):
    """Contract for release persistence.  All storage operations are async."""

    # ── Lifecycle ──────────────────────────────────────────────────────

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    # ── CRUD ───────────────────────────────────────────────────────────

    @abstractmethod
    async def insert_release(self, release: Release) -> Release:
        """Persist a new release with its song membership.

        Raises
        ------
        ReleaseTitleConflictError
            When (title, artist_id) already exists.
        """

    @abstractmethod
    async def get_release(
        self,
        release_id: str,
        artist_id: str | None = None,
    ) -> Release | None:
        """Return a release by ID, optionally requiring it to belong to *artist_id*."""

    @abstractmethod
    async def find_by_title(self, artist_id: str, title: str) -> Release | None:
        """Return the artist's release titled exactly *title*, or None."""

    @abstractmethod
    async def save_release(self, release: Release) -> Release:
        """Overwrite an existing release, song membership included.

        Raises
        ------
        ReleaseTitleConflictError
            When the new title collides with another release of the artist.
        """

    @abstractmethod
    async def delete_release(self, release_id: str) -> bool:
        """Delete a release.  Returns True if a row was removed."""

    # ── Queries ────────────────────────────────────────────────────────

    @abstractmethod
    async def list_releases(
        self,
        *,
        artist_id: str | None = None,
        release_type: ReleaseType | None = None,
    ) -> list[Release]:
        """List releases, optionally filtered by artist and exact type."""

    @abstractmethod
    async def search_releases(
        self,
        query: str,
        *,
        limit: int,
        offset: int,
    ) -> list[Release]:
        """Case-insensitive substring search over titles."""

    @abstractmethod
    async def find_release_by_song(self, song_id: str) -> Release | None:
        """Return the earliest stored release whose song set contains *song_id*."""
