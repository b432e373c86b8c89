"""Public interface definitions for the catalog's storage backends.

Business logic in ``melodia/services/`` only depends on these ABCs.
Concrete adapters live in ``melodia/providers/`` and are wired in
``melodia/main.py``.

CONCRETE PROVIDER MAP:
    Interface          →  Concrete implementations
    ─────────────────────────────────────────────────────
    IArtistProvider    →  SQLiteArtistProvider
    IReleaseProvider   →  SQLiteReleaseProvider
    IAssetStore        →  LocalAssetStore, CloudinaryAssetStore
"""

from melodia.interfaces.artist_provider import IArtistProvider
from melodia.interfaces.asset_store import IAssetStore
from melodia.interfaces.release_provider import IReleaseProvider

__all__ = [
    "IArtistProvider",
    "IAssetStore",
    "IReleaseProvider",
]
