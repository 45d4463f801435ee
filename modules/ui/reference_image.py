"""Ownership of the uploaded reference image and its preview file."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import ClassVar, Optional

from PIL import Image

from modules.utils.image_utils import ImageFile, generate_thumbnail, read_image_file

logger = logging.getLogger(__name__)


class ReferenceImage:
    """Uploaded image plus a temporary thumbnail shown in the input panel.

    The thumbnail file is not cleaned up automatically: whoever holds the
    handle must call :meth:`release` when it is replaced, cleared or when the
    application shuts down.
    """

    _outstanding: ClassVar[int] = 0

    def __init__(self, file: ImageFile, preview_path: Path) -> None:
        self.file = file
        self.preview_path = preview_path
        self._released = False
        ReferenceImage._outstanding += 1

    @classmethod
    def open(cls, source: Path | str, preview_dir: Optional[Path] = None) -> "ReferenceImage":
        """Read ``source`` and write its preview thumbnail."""
        image_file = read_image_file(source)
        if preview_dir is not None:
            Path(preview_dir).mkdir(parents=True, exist_ok=True)
        fd, raw_path = tempfile.mkstemp(prefix="reference-", suffix=".png", dir=preview_dir)
        os.close(fd)
        preview_path = Path(raw_path)
        try:
            with Image.open(source) as img:
                generate_thumbnail(img.convert("RGBA")).save(preview_path, format="PNG")
        except Exception:
            preview_path.unlink(missing_ok=True)
            raise
        return cls(image_file, preview_path)

    @classmethod
    def outstanding(cls) -> int:
        """Number of handles created and not yet released."""
        return cls._outstanding

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Delete the preview file; calling it twice is harmless."""
        if self._released:
            return
        self._released = True
        ReferenceImage._outstanding -= 1
        try:
            self.preview_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove reference preview %s: %s", self.preview_path, exc)

    def __enter__(self) -> "ReferenceImage":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()
