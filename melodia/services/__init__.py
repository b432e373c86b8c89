"""Business services: the Artist Registry and the Release Catalog."""

from melodia.services.artist_service import ArtistService
from melodia.services.release_service import ReleaseService

__all__ = ["ArtistService", "ReleaseService"]
