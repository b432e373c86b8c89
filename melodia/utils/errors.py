"""Custom exception hierarchy for the Melodia catalog service.

All application exceptions inherit from :class:`MelodiaError`, which
carries an optional ``provider_name`` so error handlers can identify which
backend (e.g. "sqlite_release", "cloudinary") caused the failure, plus the
HTTP ``status_code`` the API boundary maps it to.

The hierarchy is organized by failure kind:

    MelodiaError  (base -- catch-all for any catalog error)
    +-- ValidationError           (400: malformed or rule-breaking input)
    |   +-- ReleaseValidationError  (aggregated release creation rules)
    +-- ConflictError             (409: uniqueness violations)
    |   +-- ArtistIdConflictError
    |   +-- ArtistNameConflictError
    |   +-- ReleaseTitleConflictError
    +-- NotFoundError             (404: missing records)
    |   +-- ArtistNotFoundError
    |   +-- ReleaseNotFoundError
    |   +-- SongNotFoundError
    |   +-- CoverNotFoundError
    +-- StatusGuardError          (400: lifecycle forbids the mutation)
    |   +-- PublishedReleaseError
    +-- AssetStoreError           (502: upload backend failure)
    +-- ConfigurationError        (500: startup / missing config)

None of these are retried automatically; the middleware in
``melodia.api.middleware`` turns them into JSON error responses.
"""


class MelodiaError(Exception):
    """Base exception for all Melodia errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which backend triggered the error.  The
    ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[cloudinary] Upload failed``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

class ValidationError(MelodiaError):
    """Raised when request input breaks a business rule.

    ``errors`` lists every failing rule so clients can fix all of them in
    one round trip.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        errors: list[str] | None = None,
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._errors = list(errors or [])

    @property
    def errors(self) -> list[str]:
        return list(self._errors)


class ReleaseValidationError(ValidationError):
    """Raised when a release fails one or more creation rules."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(message="Release validation failed", errors=errors)


# ---------------------------------------------------------------------------
# Uniqueness
# ---------------------------------------------------------------------------

class ConflictError(MelodiaError):
    """Raised when a write would break a uniqueness constraint."""

    status_code = 409

    def __init__(
        self,
        message: str = "Resource already exists",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ArtistIdConflictError(ConflictError):
    def __init__(self, artist_id: str) -> None:
        super().__init__(message=f"Artist with ID '{artist_id}' already exists")


class ArtistNameConflictError(ConflictError):
    def __init__(self, name: str) -> None:
        super().__init__(message=f"Artist with name '{name}' already exists")


class ReleaseTitleConflictError(ConflictError):
    def __init__(self, title: str) -> None:
        super().__init__(
            message=f'A release with the title "{title}" already exists for this artist'
        )


# ---------------------------------------------------------------------------
# Missing records
# ---------------------------------------------------------------------------

class NotFoundError(MelodiaError):
    """Raised when a requested record does not exist."""

    status_code = 404

    def __init__(
        self,
        message: str = "Resource not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ArtistNotFoundError(NotFoundError):
    def __init__(self, artist_id: str) -> None:
        super().__init__(message=f"Artist with ID {artist_id} not found")


class ReleaseNotFoundError(NotFoundError):
    """Raised for a missing release; the artist-scoped form names the artist."""

    def __init__(self, release_id: str, artist_id: str | None = None) -> None:
        if artist_id is None:
            message = f"Release with ID {release_id} not found"
        else:
            message = f"Release with ID {release_id} not found for artist {artist_id}"
        super().__init__(message=message)


class SongNotFoundError(NotFoundError):
    def __init__(self, song_id: str) -> None:
        super().__init__(message=f"No release found containing song with ID {song_id}")


class CoverNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__(message="Release found but has no cover image associated")


# ---------------------------------------------------------------------------
# Lifecycle guards
# ---------------------------------------------------------------------------

class StatusGuardError(MelodiaError):
    """Raised when a release's status forbids the requested mutation."""

    status_code = 400

    def __init__(
        self,
        message: str = "Operation not allowed in the current release status",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PublishedReleaseError(StatusGuardError):
    """Raised when the song set of a published release would change."""

    def __init__(self, action: str = "modify songs of") -> None:
        super().__init__(
            message=(
                f"Cannot {action} published releases. "
                "Only draft and scheduled releases can be modified."
            )
        )


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------

class AssetStoreError(MelodiaError):
    """Raised when an uploaded file cannot be persisted by the asset store."""

    status_code = 502

    def __init__(
        self,
        message: str = "Asset upload failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(MelodiaError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
