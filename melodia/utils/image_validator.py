"""Upload sanity checks for artist images and release covers.

Uploaded bytes are opened with Pillow before they reach an asset store so a
renamed PDF or a truncated file is rejected with a 400 instead of becoming a
broken public URL.
"""

import io

from PIL import Image, UnidentifiedImageError

from melodia.utils.errors import ValidationError

MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10 MB
ALLOWED_FORMATS = {"JPEG", "PNG", "WEBP", "GIF"}


def validate_image(
    data: bytes,
    filename: str | None = None,
    max_bytes: int | None = None,
) -> str:
    """Verify *data* is a supported image and return its Pillow format name.

    Raises
    ------
    ValidationError
        Empty payload, payload over *max_bytes* (default
        :data:`MAX_IMAGE_BYTES`), undecodable bytes, or a format
        outside :data:`ALLOWED_FORMATS`.
    """
    label = filename or "upload"
    limit = max_bytes or MAX_IMAGE_BYTES
    if not data:
        raise ValidationError(f"Uploaded file '{label}' is empty")
    if len(data) > limit:
        raise ValidationError(f"Uploaded file '{label}' exceeds the {limit} byte limit")

    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
            # verify() walks the file structure without decoding pixel data.
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ValidationError(f"Uploaded file '{label}' is not a valid image") from exc

    if image_format not in ALLOWED_FORMATS:
        raise ValidationError(
            f"Unsupported image format {image_format!r}; "
            f"expected one of {', '.join(sorted(ALLOWED_FORMATS))}"
        )
    return image_format
