"""Cloudinary asset store for production deployments.

Wraps the official ``cloudinary`` SDK.  Its uploader is synchronous, so
each upload runs in a worker thread via ``asyncio.to_thread`` to keep the
event loop free.  Credentials travel with each call; the SDK's global
``cloudinary.config()`` is never set.  The SDK wraps transport failures in
``cloudinary.exceptions.Error`` as well.

Every asset gets a UUID4 public ID under ``<root_folder>/<folder>`` and
``resource_type="auto"`` so images and other media share one endpoint.
"""

from __future__ import annotations

import asyncio
import io
from typing import Any
from uuid import uuid4

import cloudinary.exceptions
import cloudinary.uploader
import structlog

from melodia.interfaces.asset_store import IAssetStore
from melodia.utils.errors import AssetStoreError, ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 60


class CloudinaryAssetStore(IAssetStore):
    """Uploads assets to Cloudinary and returns their ``secure_url``."""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        root_folder: str = "melodia",
        timeout: int = _DEFAULT_TIMEOUT,
    ) -> None:
        if not (cloud_name and api_key and api_secret):
            raise ConfigurationError(
                message="Cloudinary requires cloud name, API key and API secret",
                provider_name="cloudinary",
            )
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }
        self._root_folder = root_folder.strip("/")
        self._timeout = timeout

    # -- Sync helper (executed via asyncio.to_thread) ---------------------

    def _upload_sync(self, data: bytes, options: dict[str, Any]) -> dict[str, Any]:
        return cloudinary.uploader.upload(io.BytesIO(data), **options, **self._credentials)

    # -- IAssetStore implementation ---------------------------------------

    async def store(
        self,
        data: bytes,
        folder: str,
        filename: str | None = None,
    ) -> str:
        options: dict[str, Any] = {
            "folder": f"{self._root_folder}/{folder}",
            "public_id": str(uuid4()),
            "resource_type": "auto",
            "timeout": self._timeout,
        }
        if filename:
            options["filename_override"] = filename

        try:
            result = await asyncio.to_thread(self._upload_sync, data, options)
        except cloudinary.exceptions.Error as exc:
            logger.error("asset_upload_failed", provider="cloudinary", error=str(exc))
            raise AssetStoreError(
                message=f"Upload failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        secure_url = (result or {}).get("secure_url")
        if not secure_url:
            raise AssetStoreError(
                message="Upload failed: No result returned",
                provider_name=self.get_provider_name(),
            )

        logger.info(
            "asset_uploaded",
            provider="cloudinary",
            folder=options["folder"],
            public_id=options["public_id"],
            bytes=len(data),
        )
        return secure_url

    def get_provider_name(self) -> str:
        return "cloudinary"
