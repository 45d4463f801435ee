"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
from typing import Any, Optional

from PIL import Image

from modules.errors import ValidationError
from modules.services.history_service import HistoryEntry
from modules.ui.controller import StudioController
from modules.utils.image_utils import data_uri_to_image, generate_thumbnail

logger = logging.getLogger(__name__)

READY_MESSAGE = "Ready."
IMAGE_READY_MESSAGE = "Image ready."
EMPTY_HISTORY_MESSAGE = "Your generated images will appear here."

View = tuple[str, str, str, Optional[Image.Image], str, list[tuple[Image.Image, str]], Optional[str]]


def history_caption(entry: HistoryEntry) -> str:
    return f"{entry.prompt}\nRatio: {entry.aspect_ratio} • Size: {entry.image_size}"


def build_callbacks(controller: StudioController) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions.

    Every callback returns the same view tuple:
    ``(prompt, aspect_ratio, image_size, image, status, gallery, reference_preview)``.
    """

    def _decode(uri: Optional[str]) -> Optional[Image.Image]:
        if not uri:
            return None
        try:
            return data_uri_to_image(uri)
        except ValidationError as exc:
            logger.warning("Could not render image: %s", exc)
            return None

    def _gallery() -> list[tuple[Image.Image, str]]:
        items: list[tuple[Image.Image, str]] = []
        for entry in controller.history_entries():
            image = _decode(entry.image_url)
            if image is None:
                image = Image.new("RGB", (64, 64), "gray")
            items.append((generate_thumbnail(image), history_caption(entry)))
        return items

    def _status() -> str:
        state = controller.state
        if state.error:
            return state.error
        if state.image_url:
            return IMAGE_READY_MESSAGE
        if not controller.history_entries():
            return EMPTY_HISTORY_MESSAGE
        return READY_MESSAGE

    def _view() -> View:
        state = controller.state
        reference = state.reference_image
        return (
            state.prompt,
            state.aspect_ratio,
            state.image_size,
            _decode(state.image_url),
            _status(),
            _gallery(),
            str(reference.preview_path) if reference is not None else None,
        )

    def _apply_inputs(prompt: str, aspect_ratio: str, image_size: str) -> bool:
        controller.set_prompt(prompt)
        try:
            if aspect_ratio:
                controller.set_aspect_ratio(aspect_ratio)
            if image_size:
                controller.set_image_size(image_size)
        except ValidationError as exc:
            controller.state.error = str(exc)
            return False
        return True

    async def on_submit(prompt: str, aspect_ratio: str, image_size: str) -> View:
        if _apply_inputs(prompt, aspect_ratio, image_size):
            await controller.submit()
        return _view()

    async def on_upscale(factor: int) -> View:
        await controller.upscale(factor)
        return _view()

    def on_select_history(index: Any) -> View:
        # Gradio reports gallery selections as an int or a (row, col) pair
        if isinstance(index, (list, tuple)):
            index = index[0]
        if isinstance(index, int):
            controller.select_history(index)
        return _view()

    def on_reference_upload(path: Optional[str]) -> View:
        if path:
            controller.attach_reference(path)
        else:
            controller.clear_reference()
        return _view()

    def on_reference_clear() -> View:
        controller.clear_reference()
        return _view()

    def on_load() -> View:
        return _view()

    return {
        "on_submit": on_submit,
        "on_upscale": on_upscale,
        "on_select_history": on_select_history,
        "on_reference_upload": on_reference_upload,
        "on_reference_clear": on_reference_clear,
        "on_load": on_load,
    }
