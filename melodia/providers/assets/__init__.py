from melodia.providers.assets.cloudinary_asset_store import CloudinaryAssetStore
from melodia.providers.assets.local_asset_store import LocalAssetStore

__all__ = ["CloudinaryAssetStore", "LocalAssetStore"]
