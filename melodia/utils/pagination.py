"""Page/limit windowing shared by the artist and release search endpoints."""

from __future__ import annotations

from melodia.utils.errors import ValidationError

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def validate_page_window(
    query: str | None,
    page: int,
    limit: int,
    max_limit: int = MAX_LIMIT,
) -> str:
    """Check a search request's query and window; return the stripped query.

    Raises
    ------
    ValidationError
        When the query is missing/blank, ``page < 1``, or ``limit`` falls
        outside ``[1, max_limit]``.
    """
    if query is None or not query.strip():
        raise ValidationError("Query parameter is required")
    if page < 1:
        raise ValidationError("Page must be greater than 0")
    if limit < 1 or limit > max_limit:
        raise ValidationError(f"Limit must be between 1 and {max_limit}")
    return query.strip()


def page_offset(page: int, limit: int) -> int:
    """Rows to skip before the requested page (pages are 1-based)."""
    return (page - 1) * limit


def search_needle(query: str) -> str:
    """Normalize a search query for ``instr(casefold(column), ?)`` matching."""
    return query.strip().casefold()
