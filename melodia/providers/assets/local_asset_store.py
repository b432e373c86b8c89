"""Local-disk asset store for development deployments.

Files land in ``<root>/<folder>/<uuid>-<filename>`` and are served by the
``/uploads`` static mount that main.py adds when this store is active.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from uuid import uuid4

import structlog

from melodia.interfaces.asset_store import IAssetStore
from melodia.utils.errors import AssetStoreError

logger = structlog.get_logger(logger_name=__name__)

# Anything outside this set is replaced so client filenames can't escape the folder.
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class LocalAssetStore(IAssetStore):
    """Stores uploads under a local directory.

    Parameters
    ----------
    root:
        Base directory for uploads (``uploads/`` by default).
    url_prefix:
        Public URL prefix the directory is mounted at.
    """

    def __init__(self, root: str | Path = "uploads", url_prefix: str = "/uploads") -> None:
        self._root = Path(root)
        self._url_prefix = url_prefix.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    async def store(
        self,
        data: bytes,
        folder: str,
        filename: str | None = None,
    ) -> str:
        safe_folder = _UNSAFE_CHARS.sub("_", folder).strip("._") or "misc"
        safe_name = _UNSAFE_CHARS.sub("_", Path(filename or "file").name)
        stored_name = f"{uuid4()}-{safe_name}"
        target = self._root / safe_folder / stored_name

        try:
            await asyncio.to_thread(self._write, target, data)
        except OSError as exc:
            raise AssetStoreError(
                message=f"Could not write {stored_name}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("asset_stored_locally", folder=safe_folder, file=stored_name, bytes=len(data))
        return f"{self._url_prefix}/{safe_folder}/{stored_name}"

    def get_provider_name(self) -> str:
        return "local"

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
