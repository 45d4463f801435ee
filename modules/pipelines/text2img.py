"""Text-to-image generation against the Imagen endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from google.genai import types

from config.settings import ASPECT_RATIOS, IMAGE_SIZES, AppConfig
from modules.errors import EmptyResult, MalformedResponse, ServiceError, ValidationError, upstream_message
from modules.pipelines.responses import GenerateShape, ImageResult, normalize_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PromptRequest:
    """Request data for text-to-image generation."""

    prompt: str
    aspect_ratio: str = "9:16"
    image_size: str = "2K"

    def __post_init__(self) -> None:
        if not (self.prompt or "").strip():
            raise ValidationError("Please enter a prompt.")
        if self.aspect_ratio not in ASPECT_RATIOS:
            raise ValidationError(f"Unsupported aspect ratio: {self.aspect_ratio}")
        if self.image_size not in IMAGE_SIZES:
            raise ValidationError(f"Unsupported image size: {self.image_size}")


class Text2ImageService:
    """Facade around the Imagen ``generate_images`` call."""

    def __init__(self, client: Any, config: AppConfig) -> None:
        self.client = client
        self.config = config

    def _build_config(self, request: PromptRequest) -> types.GenerateImagesConfig:
        return types.GenerateImagesConfig(
            number_of_images=1,
            output_mime_type=self.config.output_mime_type,
            aspect_ratio=request.aspect_ratio,
            image_size=request.image_size,
        )

    async def generate(self, request: PromptRequest) -> ImageResult:
        """Generate a single image from a text prompt."""
        try:
            response = await self.client.aio.models.generate_images(
                model=self.config.generate_model,
                prompt=request.prompt,
                config=self._build_config(request),
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Error calling Gemini API: %s", exc)
            raise ServiceError(f"Gemini API Error: {upstream_message(exc)}") from exc

        try:
            return normalize_response(GenerateShape(response))
        except (EmptyResult, MalformedResponse) as exc:
            logger.error("Unusable image generation response: %s", exc)
            raise
