"""Image editing and upscaling through the multimodal content endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from google.genai import types

from config.settings import AppConfig
from modules.errors import MalformedResponse, ServiceError, ValidationError, upstream_message
from modules.pipelines.responses import ImageResult, MultimodalShape, normalize_response
from modules.utils.image_utils import DISPLAY_MIME_TYPE, ImageFile, decode_payload, encode_payload

logger = logging.getLogger(__name__)

UPSCALE_PROMPT_TEMPLATE = (
    "Upscale this image by a factor of {factor}x, significantly increasing its resolution "
    "and enhancing details and clarity without changing the original content or style."
)


@dataclass(frozen=True, slots=True)
class EditRequest:
    """Prompt plus the reference image it should be applied to."""

    prompt: str
    source: ImageFile

    def __post_init__(self) -> None:
        if not (self.prompt or "").strip():
            raise ValidationError("Please enter a prompt.")


@dataclass(frozen=True, slots=True)
class UpscaleRequest:
    """Base64 image to enlarge by ``factor``."""

    encoded_image: str
    mime_type: str = DISPLAY_MIME_TYPE
    factor: Union[int, float] = 2

    def __post_init__(self) -> None:
        if not self.encoded_image:
            raise ValidationError("Invalid image data URL.")
        if isinstance(self.factor, bool) or not isinstance(self.factor, (int, float)) or self.factor <= 0:
            raise ValidationError(f"Upscale factor must be a positive number, got {self.factor!r}.")

    @property
    def prompt(self) -> str:
        return UPSCALE_PROMPT_TEMPLATE.format(factor=self.factor)


class Image2ImageService:
    """Facade around ``generate_content`` requests that return an image part."""

    def __init__(self, client: Any, config: AppConfig) -> None:
        self.client = client
        self.config = config

    def _content_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_modalities=[types.Modality.IMAGE, types.Modality.TEXT],
        )

    async def _generate_content(
        self, prompt: str, encoded_image: str, mime_type: str, purpose: str
    ) -> ImageResult:
        contents = [
            types.Part.from_bytes(data=decode_payload(encoded_image), mime_type=mime_type),
            types.Part.from_text(text=prompt),
        ]
        try:
            response = await self.client.aio.models.generate_content(
                model=self.config.edit_model,
                contents=contents,
                config=self._content_config(),
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Error calling Gemini API for %s image: %s", purpose, exc)
            raise ServiceError(f"Gemini API Error: {upstream_message(exc)}") from exc

        try:
            return normalize_response(MultimodalShape(response, purpose=purpose))
        except MalformedResponse as exc:
            logger.error("Unusable %s image response: %s", purpose, exc)
            raise

    async def edit(self, request: EditRequest) -> ImageResult:
        """Apply the prompt to the reference image."""
        encoded = encode_payload(request.source.data)
        return await self._generate_content(
            request.prompt, encoded, request.source.mime_type, purpose="edited"
        )

    async def upscale(self, request: UpscaleRequest) -> ImageResult:
        """Ask the model for a higher resolution rendition of the image."""
        return await self._generate_content(
            request.prompt, request.encoded_image, request.mime_type, purpose="upscaled"
        )
