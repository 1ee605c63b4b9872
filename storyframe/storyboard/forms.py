"""
Form collection: turns raw user input into a validated GenerationRequest.

Shared by the HTTP form endpoint and the CLI so both apply the same rules.
"""

import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

from storyframe.core.constants import (
    ALLOWED_IMAGE_TYPES,
    AspectRatio,
    StyleTheme,
    MAX_IMAGE_BYTES,
)
from storyframe.core.exceptions import InvalidRequestError

from .models import CharacterImage, GenerationRequest


def load_character_image(
    data: Optional[bytes],
    field: str,
    max_bytes: int = MAX_IMAGE_BYTES,
) -> Optional[CharacterImage]:
    """
    Validate an uploaded reference image.

    Empty uploads count as "not provided". The MIME type comes from the image
    content, not from the client-declared type or file name.
    """
    if not data:
        return None

    if len(data) > max_bytes:
        raise InvalidRequestError(field, f"image is larger than {max_bytes // (1024 * 1024)}MB")

    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
            img.verify()
    except Image.DecompressionBombError as e:
        raise InvalidRequestError(field, f"image dimensions are too large ({e})")
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidRequestError(field, f"not a readable image ({e})")

    mime_type = ALLOWED_IMAGE_TYPES.get(image_format or "")
    if not mime_type:
        allowed = ", ".join(sorted(ALLOWED_IMAGE_TYPES))
        raise InvalidRequestError(field, f"unsupported image format {image_format}; use {allowed}")

    return CharacterImage.from_bytes(data, mime_type)


def _parse_choice(enum_cls, value, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(f"'{member.value}'" for member in enum_cls)
        raise InvalidRequestError(field, f"'{value}' is not one of {allowed}")


def build_request(
    title: str,
    description: str,
    style=StyleTheme.REAL,
    aspect_ratio=AspectRatio.PORTRAIT,
    character1: Optional[bytes] = None,
    character2: Optional[bytes] = None,
    max_image_bytes: int = MAX_IMAGE_BYTES,
) -> GenerationRequest:
    """Validate form fields and build the immutable request."""
    title = (title or "").strip()
    description = (description or "").strip()
    if not title:
        raise InvalidRequestError("title", "story title is required")
    if not description:
        raise InvalidRequestError("description", "short description is required")

    return GenerationRequest(
        title=title,
        description=description,
        style=_parse_choice(StyleTheme, style, "style"),
        aspect_ratio=_parse_choice(AspectRatio, aspect_ratio, "aspect_ratio"),
        character1=load_character_image(character1, "character1", max_image_bytes),
        character2=load_character_image(character2, "character2", max_image_bytes),
    )
