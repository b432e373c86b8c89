"""Configuration module - exports Settings and load_config."""

from melodia.config.loader import load_config
from melodia.config.settings import Settings

__all__ = ["Settings", "load_config"]
