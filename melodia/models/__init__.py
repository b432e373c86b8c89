"""Melodia domain models - re-exports all public model classes.

Submodules:
    - artist.py   - Artist plus the shared ``utc_now`` timestamp helper
    - release.py  - Release, its type/status enums and the latest-flag pair
"""

from __future__ import annotations

from melodia.models.artist import Artist, utc_now
from melodia.models.release import (
    EDITABLE_STATUSES,
    Release,
    ReleaseStatus,
    ReleaseType,
    ReleaseWithLatestFlag,
)

__all__ = [
    "EDITABLE_STATUSES",
    "Artist",
    "Release",
    "ReleaseStatus",
    "ReleaseType",
    "ReleaseWithLatestFlag",
    "utc_now",
]
