"""Configuration helpers for the Imagen Studio project."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ASPECT_RATIOS: tuple[str, ...] = ("9:16", "16:9", "1:1", "4:3", "3:4")
IMAGE_SIZES: tuple[str, ...] = ("2K", "4K")


class ConfigurationError(RuntimeError):
    """Raised when the application cannot start with the given settings."""


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    api_key: Optional[str] = None
    generate_model: str = "imagen-4.0-generate-001"
    edit_model: str = "gemini-2.5-flash-image"
    output_mime_type: str = "image/jpeg"
    log_dir: Path = Path("logs")
    storage_path: Path = Path("data/storage.json")
    history_limit: int = 12
    default_aspect_ratio: str = "9:16"
    default_image_size: str = "2K"
    upscale_factors: tuple[int, ...] = (2, 4)
    preview_dir: Optional[Path] = None


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip().strip("\"'")


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    defaults = AppConfig()
    storage_path = os.getenv("STORAGE_PATH")
    log_dir = os.getenv("LOG_DIR")
    preview_dir = os.getenv("PREVIEW_DIR")

    return AppConfig(
        api_key=os.getenv("API_KEY") or os.getenv("GEMINI_API_KEY"),
        generate_model=os.getenv("GENERATE_MODEL") or defaults.generate_model,
        edit_model=os.getenv("EDIT_MODEL") or defaults.edit_model,
        log_dir=Path(log_dir).expanduser() if log_dir else defaults.log_dir,
        storage_path=Path(storage_path).expanduser() if storage_path else defaults.storage_path,
        preview_dir=Path(preview_dir).expanduser() if preview_dir else None,
    )


def require_api_key(config: AppConfig) -> str:
    """Return the service credential or fail startup."""
    if not config.api_key:
        raise ConfigurationError("API_KEY environment variable not set")
    return config.api_key
