"""Utility modules for the Melodia catalog service.

- **errors** -- Domain exception hierarchy rooted at MelodiaError; every
  subclass carries the HTTP status the API boundary maps it to.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **pagination** -- Search window validation, offset math and the casefolded
  needle matched with ``instr(casefold(column), ?)``.
- **image_validator** -- Pillow-based sanity check for uploaded images.
"""

# -- Domain exception hierarchy --------------------------------------------
from melodia.utils.errors import (
    AssetStoreError,
    ConfigurationError,
    ConflictError,
    MelodiaError,
    NotFoundError,
    StatusGuardError,
    ValidationError,
)

# -- Upload validation ------------------------------------------------------
from melodia.utils.image_validator import validate_image

# -- Structured logging setup ----------------------------------------------
from melodia.utils.logging import configure_logging, get_logger

# -- Search windowing -------------------------------------------------------
from melodia.utils.pagination import page_offset, search_needle, validate_page_window

__all__ = [
    "AssetStoreError",
    "ConfigurationError",
    "ConflictError",
    "MelodiaError",
    "NotFoundError",
    "StatusGuardError",
    "ValidationError",
    "configure_logging",
    "get_logger",
    "page_offset",
    "search_needle",
    "validate_image",
    "validate_page_window",
]
