"""Single entry point for the three remote image operations."""

from __future__ import annotations

from typing import Any, Union

from google import genai

from config.settings import AppConfig, require_api_key
from modules.pipelines.img2img import EditRequest, Image2ImageService, UpscaleRequest
from modules.pipelines.responses import ImageResult
from modules.pipelines.text2img import PromptRequest, Text2ImageService
from modules.utils.image_utils import ImageFile


def create_genai_client(config: AppConfig) -> genai.Client:
    """Build the credentialed SDK client; raises when no key is configured."""
    return genai.Client(api_key=require_api_key(config))


class ImageClient:
    """Generate, edit and upscale images; every call yields an ImageResult."""

    def __init__(self, genai_client: Any, config: AppConfig) -> None:
        self.config = config
        self._text2img = Text2ImageService(genai_client, config)
        self._image2img = Image2ImageService(genai_client, config)

    @classmethod
    def from_config(cls, config: AppConfig) -> "ImageClient":
        return cls(create_genai_client(config), config)

    async def generate(self, prompt: str, aspect_ratio: str, image_size: str) -> ImageResult:
        request = PromptRequest(prompt=prompt, aspect_ratio=aspect_ratio, image_size=image_size)
        return await self._text2img.generate(request)

    async def edit(self, prompt: str, source: ImageFile) -> ImageResult:
        return await self._image2img.edit(EditRequest(prompt=prompt, source=source))

    async def upscale(
        self, encoded_image: str, mime_type: str, factor: Union[int, float]
    ) -> ImageResult:
        request = UpscaleRequest(encoded_image=encoded_image, mime_type=mime_type, factor=factor)
        return await self._image2img.upscale(request)
