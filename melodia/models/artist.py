"""Artist domain model.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph - no imports from upper layers).
#
# ``Artist`` is a frozen Pydantic v2 model.  Updates never mutate an
# instance; services build the next state with ``model_copy(update={...})``
# and hand it to the IArtistProvider to persist.
#
# The artist owns its releases, but the relationship lives on the
# release side (``Release.artist_id``); artists never embed releases.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Timezone-aware current time, used for record timestamps."""
    return datetime.now(tz=timezone.utc)


class Artist(BaseModel):
    """A catalog artist.

    ``artist_id`` is usually supplied by the caller (it mirrors the user ID
    of the owning account) and falls back to a generated UUID4.  ``name`` is
    unique across the whole catalog.
    """

    model_config = ConfigDict(frozen=True)

    artist_id: str = Field(description="Artist identifier (caller-assigned or UUID4).")
    name: str = Field(description="Unique display name.")
    bio: str | None = Field(default=None, description="Free-form biography, may contain line breaks.")
    social_links: dict[str, str] = Field(
        default_factory=dict,
        description="Social network key -> profile URL (keys unconstrained).",
    )
    image_url: str | None = Field(default=None, description="Profile image URL.")
    cover_url: str | None = Field(default=None, description="Banner/cover image URL.")
    followers_count: int = Field(default=0, ge=0, description="Number of followers, never negative.")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
