"""Release domain models - albums, singles and EPs owned by an artist.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph - no imports from upper layers).
#
# Status lifecycle:
#
#   DRAFT      editable, unpublished
#   SCHEDULED  scheduled_publish_at set in the future
#   PUBLISHED  song set frozen
#
# Status is decided once, at creation, by ReleaseService.  There is no
# transition function and no background promotion of SCHEDULED releases.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from melodia.models.artist import utc_now


def _lookup_casefolded(enum_cls: type[Enum], value: object):  # noqa: ANN202
    """Resolve "ALBUM" or " Album " to the member whose value is "album"."""
    if isinstance(value, str):
        wanted = value.strip().casefold()
        for member in enum_cls:
            if member.value == wanted:
                return member
    return None


class ReleaseType(str, Enum):
    """Kind of publication.  Values are the lowercase wire strings."""

    ALBUM = "album"
    SINGLE = "single"
    EP = "ep"

    @classmethod
    def _missing_(cls, value: object) -> ReleaseType | None:
        return _lookup_casefolded(cls, value)


class ReleaseStatus(str, Enum):
    """Lifecycle states for a release."""

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"

    @classmethod
    def _missing_(cls, value: object) -> ReleaseStatus | None:
        return _lookup_casefolded(cls, value)


# Statuses whose song set may still be edited.
EDITABLE_STATUSES = frozenset({ReleaseStatus.DRAFT, ReleaseStatus.SCHEDULED})


class Release(BaseModel):
    """A single release owned by exactly one artist.

    ``song_ids`` reference songs held by an external songs service; they
    are kept unique and in insertion order.
    """

    model_config = ConfigDict(frozen=True)

    release_id: str = Field(description="UUID4 assigned at creation.")
    artist_id: str = Field(description="Owning artist.")
    title: str = Field(description="Title, unique per artist.")
    type: ReleaseType = Field(default=ReleaseType.ALBUM)
    status: ReleaseStatus = Field(default=ReleaseStatus.DRAFT)
    release_date: date = Field(description="Calendar release date.")
    scheduled_publish_at: datetime | None = Field(
        default=None,
        description="When a scheduled release is meant to go public (UTC).",
    )
    cover_url: str | None = Field(default=None, description="Cover artwork URL.")
    genres: list[str] | None = Field(default=None, description="Genre tags, order irrelevant.")
    song_ids: list[str] = Field(default_factory=list, description="External song IDs, no duplicates.")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def songs_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES


class ReleaseWithLatestFlag(BaseModel):
    """A release paired with whether it shares the artist's latest release date."""

    model_config = ConfigDict(frozen=True)

    release: Release
    is_latest: bool = False
