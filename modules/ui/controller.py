"""Session state and the actions that drive the remote image client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Protocol, Union

from config.settings import ASPECT_RATIOS, IMAGE_SIZES, AppConfig
from modules.errors import ValidationError
from modules.pipelines.responses import ImageResult
from modules.services.history_service import GenerationHistoryService, HistoryEntry
from modules.ui.reference_image import ReferenceImage
from modules.utils.image_utils import DISPLAY_MIME_TYPE, ImageFile, strip_data_uri_prefix

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


class ImageClientProtocol(Protocol):
    async def generate(self, prompt: str, aspect_ratio: str, image_size: str) -> ImageResult:
        ...

    async def edit(self, prompt: str, source: ImageFile) -> ImageResult:
        ...

    async def upscale(self, encoded_image: str, mime_type: str, factor: Union[int, float]) -> ImageResult:
        ...


class Phase(str, Enum):
    """Coarse controller state derived from the session flags."""

    IDLE = "idle"
    GENERATING = "generating"
    UPSCALING = "upscaling"
    ERROR = "error"


@dataclass(slots=True)
class SessionState:
    """Everything the input panel and the image display render from."""

    prompt: str = ""
    aspect_ratio: str = "9:16"
    image_size: str = "2K"
    image_url: Optional[str] = None
    is_loading: bool = False
    is_upscaling: bool = False
    error: Optional[str] = None
    reference_image: Optional[ReferenceImage] = None


def _error_text(exc: BaseException) -> str:
    return str(exc) or UNKNOWN_ERROR_MESSAGE


class StudioController:
    """Selects generate, edit or upscale and keeps display state and history in sync."""

    def __init__(
        self,
        client: ImageClientProtocol,
        history: GenerationHistoryService,
        config: AppConfig,
    ) -> None:
        self.client = client
        self.history = history
        self.config = config
        self.state = SessionState(
            aspect_ratio=config.default_aspect_ratio,
            image_size=config.default_image_size,
        )

    @property
    def phase(self) -> Phase:
        if self.state.is_loading:
            return Phase.GENERATING
        if self.state.is_upscaling:
            return Phase.UPSCALING
        if self.state.error:
            return Phase.ERROR
        return Phase.IDLE

    @property
    def busy(self) -> bool:
        return self.state.is_loading or self.state.is_upscaling

    def history_entries(self) -> List[HistoryEntry]:
        return self.history.list()

    # Input panel --------------------------------------------------------------
    def set_prompt(self, prompt: str) -> None:
        self.state.prompt = prompt or ""

    def set_aspect_ratio(self, aspect_ratio: str) -> None:
        if aspect_ratio not in ASPECT_RATIOS:
            raise ValidationError(f"Unsupported aspect ratio: {aspect_ratio}")
        self.state.aspect_ratio = aspect_ratio

    def set_image_size(self, image_size: str) -> None:
        if image_size not in IMAGE_SIZES:
            raise ValidationError(f"Unsupported image size: {image_size}")
        self.state.image_size = image_size

    def attach_reference(self, source: Path | str) -> Optional[ReferenceImage]:
        """Replace the reference image, releasing the previous handle first."""
        try:
            handle = ReferenceImage.open(source, preview_dir=self.config.preview_dir)
        except (ValidationError, OSError) as exc:
            logger.warning("Rejected reference image %s: %s", source, exc)
            self.state.error = _error_text(exc)
            return None

        previous = self.state.reference_image
        if previous is not None:
            previous.release()
        self.state.reference_image = handle
        return handle

    def clear_reference(self) -> None:
        handle = self.state.reference_image
        if handle is not None:
            handle.release()
        self.state.reference_image = None

    # Actions ------------------------------------------------------------------
    async def submit(self) -> bool:
        """Generate (or edit, with a reference image) from the current prompt.

        Returns True when a remote call was issued.
        """
        state = self.state
        if not state.prompt.strip():
            state.error = "Please enter a prompt."
            return False
        if self.busy:
            return False

        prompt = state.prompt
        aspect_ratio = state.aspect_ratio
        image_size = state.image_size
        reference = state.reference_image

        state.is_loading = True
        state.error = None
        state.image_url = None
        try:
            if reference is not None:
                result = await self.client.edit(prompt, reference.file)
            else:
                result = await self.client.generate(prompt, aspect_ratio, image_size)

            state.image_url = result.data_uri
        except Exception as exc:  # noqa: BLE001
            logger.error("Image generation failed: %s", exc)
            state.error = f"Failed to generate image: {_error_text(exc)}"
            return True
        finally:
            state.is_loading = False

        entry = self.history.create_entry(
            prompt=prompt,
            aspect_ratio=aspect_ratio,
            image_size=image_size,
            image_url=result.data_uri,
        )
        try:
            self.history.record(entry)
        except OSError as exc:
            # the image stays on screen; only the history write is lost
            logger.error("Failed to save history entry %s: %s", entry.id, exc)
        return True

    async def upscale(self, factor: Union[int, float]) -> bool:
        """Replace the displayed image with an upscaled rendition.

        History is never touched; on failure the previous image stays.
        """
        state = self.state
        if not state.image_url or self.busy:
            return False

        state.is_upscaling = True
        state.error = None
        try:
            payload = strip_data_uri_prefix(state.image_url)
            result = await self.client.upscale(payload, DISPLAY_MIME_TYPE, factor)
            state.image_url = result.data_uri
        except Exception as exc:  # noqa: BLE001
            logger.error("Image upscaling failed: %s", exc)
            state.error = f"Failed to upscale image: {_error_text(exc)}"
        finally:
            state.is_upscaling = False
        return True

    def select_history(self, item: Union[HistoryEntry, int]) -> Optional[HistoryEntry]:
        """Restore the session to a past generation."""
        if isinstance(item, HistoryEntry):
            entry = item
        else:
            entries = self.history.list()
            if not 0 <= item < len(entries):
                return None
            entry = entries[item]

        state = self.state
        state.image_url = entry.image_url
        state.prompt = entry.prompt
        state.aspect_ratio = entry.aspect_ratio
        state.image_size = entry.image_size
        state.error = None
        state.is_loading = False
        self.clear_reference()
        return entry

    def shutdown(self) -> None:
        """Release resources still held by the session."""
        self.clear_reference()
