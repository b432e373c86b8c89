"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Sources, highest priority first:
#
#   1. Environment variables   (DATABASE_PATH=/var/lib/melodia/catalog.db)
#   2. .env file in the working directory
#   3. The defaults below
#
# Field ``cloudinary_api_key`` maps to env var ``CLOUDINARY_API_KEY``.
# Empty string means "not configured".
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Melodia catalog settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Catalog store ===
    database_path: str = "data/catalog.db"

    # === Asset store ===
    # "local" writes under uploads_dir; "cloudinary" needs all three credentials.
    asset_store: str = "local"
    uploads_dir: str = "uploads"
    uploads_url_prefix: str = "/uploads"
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_root_folder: str = "melodia"
    # Upload cap applied before any asset store sees the bytes.
    max_image_bytes: int = 10 * 1024 * 1024

    # === Search ===
    search_default_limit: int = 20
    search_max_limit: int = 100

    # === HTTP ===
    # Comma-separated; empty means allow all (development).
    cors_allowed_origins: str = ""

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_cors_origins(self) -> list[str]:
        """Return the configured CORS origins as a list."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    def cloudinary_configured(self) -> bool:
        return bool(
            self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret
        )
