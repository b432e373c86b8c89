"""YAML configuration loader with environment variable overrides.

Configuration is layered, later layers winning:

    1. config/config.yaml  - static defaults checked into the repo
    2. .env file           - local developer overrides (not committed)
    3. Environment vars    - set at deploy time

``load_config`` reads the YAML file and deep-merges the Settings-derived
values on top, so a key set in both places takes the environment value.
"""

from pathlib import Path

import yaml

from melodia.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings to overlay; a fresh ``Settings()`` when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "catalog": {
            "database_path": settings.database_path,
        },
        "assets": {
            "backend": settings.asset_store,
            "uploads_dir": settings.uploads_dir,
            "url_prefix": settings.uploads_url_prefix,
            "max_image_bytes": settings.max_image_bytes,
            "cloudinary_configured": settings.cloudinary_configured(),
        },
        "search": {
            "default_limit": settings.search_default_limit,
            "max_limit": settings.search_max_limit,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
