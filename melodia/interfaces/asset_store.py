"""Abstract base class for binary asset stores (artist images, release covers).

# ─── ADAPTER PATTERN ─────────────────────────────────────────────────
#
# Concrete implementations (melodia/providers/assets/):
#   - LocalAssetStore       files under ``uploads/``, served at ``/uploads``
#   - CloudinaryAssetStore  uploads through the official cloudinary SDK
#
# main.py picks one from ``Settings.asset_store``; routes only ever see
# this interface.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IAssetStore(ABC):
    """Contract for persisting an uploaded file and returning its public URL."""

    @abstractmethod
    async def store(
        self,
        data: bytes,
        folder: str,
        filename: str | None = None,
    ) -> str:
        """Persist *data* under the logical *folder* ("artists" or "releases").

        Parameters
        ----------
        data:
            Raw file bytes.
        folder:
            Logical namespace for the asset.
        filename:
            Original client filename, used as a suffix where the backend
            keeps names.

        Returns
        -------
        str
            A URL clients can fetch the asset from.

        Raises
        ------
        AssetStoreError
            When the backend cannot persist the file.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""
