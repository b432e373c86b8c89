from melodia.providers.catalog.sqlite_artist_provider import SQLiteArtistProvider
from melodia.providers.catalog.sqlite_release_provider import SQLiteReleaseProvider

__all__ = ["SQLiteArtistProvider", "SQLiteReleaseProvider"]
