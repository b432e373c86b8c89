"""Request and response schemas for the Melodia catalog API.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: API (Pydantic v2 schemas for request validation and response
#        serialization).
# Pattern: All schemas use ``frozen=True``, like the domain models.
#
# Release creation fields are deliberately loose here (title, cover_url
# and song_ids are optional): the ReleaseService collects every broken
# rule into one 400 response, which a strict schema would pre-empt with
# a partial 422.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from melodia.models.artist import Artist
from melodia.models.release import Release, ReleaseStatus, ReleaseType


def _coerce_release_date(value: object) -> object:
    # Accepts full ISO timestamps ("2023-05-12T10:00:00Z"), keeping the day.
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value).date()
    return value


def _fold_choice(value: object) -> object:
    # "ALBUM" and "album" name the same enum member.
    return value.strip().casefold() if isinstance(value, str) else value


# ─── Request schemas ──────────────────────────────────────────────────

class UpdateArtistRequest(BaseModel):
    """Partial artist update; omitted fields are left untouched."""

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, min_length=1, description="New unique display name.")
    bio: str | None = Field(default=None, description="Free-text biography.")
    social_links: dict[str, str] | None = Field(
        default=None, description="Platform -> URL map; replaces the existing map."
    )


class UpdateBioRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    bio: str = Field(description="Replacement biography.")


class CreateReleaseRequest(BaseModel):
    """Request body for creating a release under an artist."""

    model_config = ConfigDict(frozen=True)

    title: str | None = Field(default=None, description="Unique per artist.")
    type: ReleaseType = Field(description="album, single or ep.")
    release_date: date = Field(description="Calendar release date.")
    status: ReleaseStatus | None = Field(
        default=None, description="Requested status; derived from the schedule when omitted."
    )
    scheduled_publish_at: datetime | None = Field(
        default=None, description="Publication instant; naive values are UTC."
    )
    cover_url: str | None = Field(default=None, description="Cover image URL (required).")
    genres: list[str] | None = Field(default=None, description="Omit, or give at least one.")
    song_ids: list[str] | None = Field(default=None, description="At least one song ID.")

    @field_validator("release_date", mode="before")
    @classmethod
    def _release_date_from_timestamp(cls, value: object) -> object:
        return _coerce_release_date(value)

    @field_validator("type", "status", mode="before")
    @classmethod
    def _case_insensitive_choice(cls, value: object) -> object:
        return _fold_choice(value)


class UpdateReleaseRequest(BaseModel):
    """Partial release update; a supplied ``status`` is stored as given."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    type: ReleaseType | None = None
    release_date: date | None = None
    status: ReleaseStatus | None = None
    scheduled_publish_at: datetime | None = None
    cover_url: str | None = None
    genres: list[str] | None = None
    song_ids: list[str] | None = None

    @field_validator("release_date", mode="before")
    @classmethod
    def _release_date_from_timestamp(cls, value: object) -> object:
        return _coerce_release_date(value)

    @field_validator("type", "status", mode="before")
    @classmethod
    def _case_insensitive_choice(cls, value: object) -> object:
        return _fold_choice(value)


class SongIdsRequest(BaseModel):
    """Song IDs to add to or remove from a release."""

    model_config = ConfigDict(frozen=True)

    song_ids: list[str] = Field(min_length=1, description="Song IDs (at least one).")


# ─── Response schemas ─────────────────────────────────────────────────

class ArtistResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    artist_id: str
    name: str
    bio: str | None = None
    social_links: dict[str, str] = Field(default_factory=dict)
    image_url: str | None = None
    cover_url: str | None = None
    followers_count: int = 0
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_artist(cls, artist: Artist) -> ArtistResponse:
        return cls(**artist.model_dump())


class ReleaseResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    release_id: str
    artist_id: str
    title: str
    type: ReleaseType
    status: ReleaseStatus
    release_date: date
    scheduled_publish_at: datetime | None = None
    cover_url: str | None = None
    genres: list[str] | None = None
    song_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_release(cls, release: Release) -> ReleaseResponse:
        return cls(**release.model_dump())


class FlaggedReleaseResponse(ReleaseResponse):
    """A release annotated with whether it shares the artist's latest date."""

    is_latest: bool


class CoverUrlResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    cover_url: str


class HealthResponse(BaseModel):
    """Service health plus the active store backends."""

    model_config = ConfigDict(frozen=True)

    status: str
    version: str
    providers: dict[str, str] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    errors: list[str] | None = None
