"""Text2ImageService unit tests."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from config.settings import AppConfig
from modules.errors import EmptyResult, MalformedResponse, ServiceError, ValidationError
from modules.pipelines import text2img


class DummyModels:
    """Stand-in for ``client.aio.models`` capturing generate_images calls."""

    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    async def generate_images(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def build_service(models: DummyModels, config: AppConfig | None = None) -> text2img.Text2ImageService:
    client = SimpleNamespace(aio=SimpleNamespace(models=models))
    return text2img.Text2ImageService(client, config or AppConfig())


def _images(*blobs):
    return SimpleNamespace(
        generated_images=[SimpleNamespace(image=SimpleNamespace(image_bytes=blob)) for blob in blobs]
    )


def test_generate_passes_request_parameters():
    models = DummyModels(response=_images(b"jpeg-bytes"))
    service = build_service(models)

    request = text2img.PromptRequest(prompt="A robot holding a red skateboard.", aspect_ratio="9:16", image_size="2K")
    result = asyncio.run(service.generate(request))

    assert result.encoded_image_data == "anBlZy1ieXRlcw=="
    assert len(models.calls) == 1
    call = models.calls[0]
    assert call["model"] == "imagen-4.0-generate-001"
    assert call["prompt"] == "A robot holding a red skateboard."
    config = call["config"]
    assert config.number_of_images == 1
    assert config.output_mime_type == "image/jpeg"
    assert config.aspect_ratio == "9:16"
    assert config.image_size == "2K"


def test_generate_uses_configured_model():
    models = DummyModels(response=_images(b"x"))
    service = build_service(models, AppConfig(generate_model="imagen-custom"))

    asyncio.run(service.generate(text2img.PromptRequest(prompt="cat", aspect_ratio="1:1", image_size="4K")))

    assert models.calls[0]["model"] == "imagen-custom"
    assert models.calls[0]["config"].image_size == "4K"


def test_generate_without_images_raises_empty_result():
    service = build_service(DummyModels(response=SimpleNamespace(generated_images=[])))

    with pytest.raises(EmptyResult, match="prompt may have been rejected"):
        asyncio.run(service.generate(text2img.PromptRequest(prompt="cat")))


def test_generate_without_bytes_raises_malformed_response():
    service = build_service(DummyModels(response=_images(None)))

    with pytest.raises(MalformedResponse):
        asyncio.run(service.generate(text2img.PromptRequest(prompt="cat")))


def test_generate_wraps_upstream_failures():
    service = build_service(DummyModels(error=RuntimeError("quota exhausted")))

    with pytest.raises(ServiceError) as excinfo:
        asyncio.run(service.generate(text2img.PromptRequest(prompt="cat")))

    assert str(excinfo.value) == "Gemini API Error: quota exhausted"
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_generate_prefers_upstream_message_attribute():
    class UpstreamError(Exception):
        message = "Request contains an invalid argument."

    service = build_service(DummyModels(error=UpstreamError("400 INVALID_ARGUMENT {...}")))

    with pytest.raises(ServiceError, match="Gemini API Error: Request contains an invalid argument."):
        asyncio.run(service.generate(text2img.PromptRequest(prompt="cat")))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"prompt": "   "},
        {"prompt": ""},
        {"prompt": "cat", "aspect_ratio": "2:1"},
        {"prompt": "cat", "image_size": "8K"},
    ],
)
def test_prompt_request_validation(kwargs):
    with pytest.raises(ValidationError):
        text2img.PromptRequest(**kwargs)


def test_generate_names_the_error_type_when_message_is_empty():
    class SilentError(Exception):
        pass

    service = build_service(DummyModels(error=SilentError()))

    with pytest.raises(ServiceError) as excinfo:
        asyncio.run(service.generate(text2img.PromptRequest(prompt="cat")))

    assert str(excinfo.value) == "Gemini API Error: SilentError"
