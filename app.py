"""Application entry point for the Imagen Studio project."""

from __future__ import annotations

from typing import Optional

from config.settings import load_config
from modules.pipelines.client import ImageClient
from modules.services.history_service import GenerationHistoryService
from modules.services.storage_service import StorageService
from modules.ui.controller import StudioController
from modules.ui.layout import build_app
from modules.utils.logging import setup_logging


def main(config_path: Optional[str] = None) -> None:
    """Load configuration and launch the Gradio interface."""
    config = load_config(config_path)
    logger = setup_logging(config)

    client = ImageClient.from_config(config)
    history = GenerationHistoryService(StorageService(config.storage_path), limit=config.history_limit)
    history.load()
    logger.info("Loaded %d history entries from %s", len(history), config.storage_path)

    # one controller for the whole process; every browser tab shares its session state
    controller = StudioController(client, history, config)
    app = build_app(config, controller)
    app.queue()
    try:
        app.launch(share=False, inbrowser=False)
    finally:
        controller.shutdown()


if __name__ == "__main__":
    main()
