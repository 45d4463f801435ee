"""Utility helpers for encoding, decoding and previewing image payloads."""

from __future__ import annotations

import base64
import binascii
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from modules.errors import ValidationError

DISPLAY_MIME_TYPE = "image/jpeg"
SUPPORTED_MIME_TYPES: tuple[str, ...] = ("image/png", "image/jpeg", "image/webp")


@dataclass(frozen=True, slots=True)
class ImageFile:
    """Raw image bytes with the media type detected from their content."""

    name: str
    data: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)


def detect_mime_type(data: bytes) -> str:
    """Return the media type of an encoded image, validating it with Pillow."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("The selected file is not a readable image.") from exc

    mime_type = Image.MIME.get(image_format or "", "")
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise ValidationError(f"Unsupported image type: {mime_type or image_format}.")
    return mime_type


def read_image_file(path: Path | str) -> ImageFile:
    """Load a local image file for transmission."""
    file_path = Path(path)
    data = file_path.read_bytes()
    return ImageFile(name=file_path.name, data=data, mime_type=detect_mime_type(data))


def encode_payload(data: bytes) -> str:
    """Encode image bytes as base64 text."""
    return base64.b64encode(data).decode("ascii")


def decode_payload(payload: str) -> bytes:
    """Decode base64 text back into image bytes."""
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Invalid base64 image payload.") from exc


def to_data_uri(payload: str, mime_type: str = DISPLAY_MIME_TYPE) -> str:
    """Compose a displayable data URI from a base64 payload."""
    return f"data:{mime_type};base64,{payload}"


def strip_data_uri_prefix(uri: str) -> str:
    """Return the payload portion of a data URI."""
    _, _, payload = (uri or "").partition(",")
    if not payload:
        raise ValidationError("Invalid image data URL.")
    return payload


def data_uri_to_image(uri: str) -> Image.Image:
    """Decode a data URI into a PIL image for display."""
    data = decode_payload(strip_data_uri_prefix(uri))
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("The image data could not be decoded.") from exc
    return image


def generate_thumbnail(image: Image.Image, max_size: Tuple[int, int] = (256, 256)) -> Image.Image:
    """Create a thumbnail suitable for history and reference previews."""
    thumbnail = image.copy()
    thumbnail.thumbnail(max_size)
    return thumbnail
