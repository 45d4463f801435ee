"""Normalize the two remote response shapes into a single ImageResult.

The image service answers in two different ways:

* ``generate_images`` returns ``generated_images[].image.image_bytes``;
* ``generate_content`` returns ``candidates[].content.parts[]`` where any part
  may carry ``inline_data`` next to plain text parts.

Each shape is wrapped in its own tagged type and has exactly one normalizer.
Callers go through :func:`normalize_response` and never inspect the raw
payloads themselves.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from modules.errors import EmptyResult, MalformedResponse
from modules.utils.image_utils import DISPLAY_MIME_TYPE, encode_payload, to_data_uri

NO_IMAGES_MESSAGE = "No images were generated. The prompt may have been rejected."
INVALID_IMAGE_MESSAGE = "The API response did not contain valid image data."


@dataclass(frozen=True, slots=True)
class ImageResult:
    """Base64 image payload produced by every remote operation."""

    encoded_image_data: str

    @property
    def data_uri(self) -> str:
        return to_data_uri(self.encoded_image_data, DISPLAY_MIME_TYPE)


@dataclass(frozen=True, slots=True)
class GenerateShape:
    """Response of the dedicated image-generation call."""

    response: Any


@dataclass(frozen=True, slots=True)
class MultimodalShape:
    """Response of the multimodal content call.

    ``purpose`` names the produced image in error messages ("edited",
    "upscaled").
    """

    response: Any
    purpose: str = "edited"


RemoteImageResponse = Union[GenerateShape, MultimodalShape]


def _coerce_payload(blob: Any) -> Optional[str]:
    """Return base64 text for raw bytes or an already encoded string."""
    if isinstance(blob, (bytes, bytearray)):
        return encode_payload(bytes(blob)) if blob else None
    if isinstance(blob, str) and blob:
        try:
            base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError):
            return None
        return blob
    return None


def normalize_generate(shape: GenerateShape) -> ImageResult:
    """Extract the first generated image."""
    generated = list(getattr(shape.response, "generated_images", None) or [])
    if not generated:
        raise EmptyResult(NO_IMAGES_MESSAGE)

    image = getattr(generated[0], "image", None)
    payload = _coerce_payload(getattr(image, "image_bytes", None))
    if payload is None:
        raise MalformedResponse(INVALID_IMAGE_MESSAGE)
    return ImageResult(encoded_image_data=payload)


def normalize_multimodal(shape: MultimodalShape) -> ImageResult:
    """Extract the first inline image part of the first candidate."""
    candidates = getattr(shape.response, "candidates", None) or []
    content = getattr(candidates[0], "content", None) if candidates else None
    for part in getattr(content, "parts", None) or []:
        inline = getattr(part, "inline_data", None)
        if inline is None:
            continue
        payload = _coerce_payload(getattr(inline, "data", None))
        if payload is None:
            break
        return ImageResult(encoded_image_data=payload)

    raise MalformedResponse(
        f"The API response did not contain valid {shape.purpose} image data."
    )


_NORMALIZERS: Dict[type, Callable[[Any], ImageResult]] = {
    GenerateShape: normalize_generate,
    MultimodalShape: normalize_multimodal,
}


def normalize_response(shape: RemoteImageResponse) -> ImageResult:
    """Dispatch a tagged response to its normalizer."""
    try:
        normalizer = _NORMALIZERS[type(shape)]
    except KeyError as exc:
        raise TypeError(f"Unknown response shape: {type(shape).__name__}") from exc
    return normalizer(shape)
