"""One-off script for debugging generate, edit and upscale against the real service."""

import asyncio
import sys
from pathlib import Path

from config.settings import load_config
from modules.pipelines.client import ImageClient
from modules.services.history_service import GenerationHistoryService
from modules.services.storage_service import StorageService
from modules.ui.callbacks import build_callbacks
from modules.ui.controller import StudioController


async def run(reference: str | None) -> None:
    # 1. real config and client; history goes to a scratch file
    config = load_config()
    client = ImageClient.from_config(config)
    history = GenerationHistoryService(StorageService(Path("debug_storage.json")), limit=config.history_limit)
    history.load()
    controller = StudioController(client, history, config)
    callbacks = build_callbacks(controller)

    try:
        # 2. optional reference image switches the submit to the edit path
        if reference:
            callbacks["on_reference_upload"](reference)

        _, _, _, image, status, gallery, _ = await callbacks["on_submit"](
            "A robot holding a red skateboard.", "1:1", "2K"
        )
        print("Status:", status)
        print("History entries:", len(gallery))
        if image is None:
            print("No image returned, check the status message.")
            return
        image.save("debug_generate_output.jpg")

        # 3. upscale the result once
        _, _, _, upscaled, status, _, _ = await callbacks["on_upscale"](2)
        print("Upscale status:", status)
        if upscaled is not None:
            upscaled.save("debug_upscale_output.jpg")
            print("Saved:", Path("debug_upscale_output.jpg").resolve())
    finally:
        controller.shutdown()


def main() -> None:
    asyncio.run(run(sys.argv[1] if len(sys.argv) > 1 else None))


if __name__ == "__main__":
    main()
