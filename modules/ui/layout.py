"""Gradio layout composition for the prompt panel, image display and history."""

from __future__ import annotations

from typing import Any, Callable, Sequence

import gradio as gr

from config.settings import ASPECT_RATIOS, IMAGE_SIZES, AppConfig
from modules.ui.callbacks import View, build_callbacks
from modules.ui.controller import StudioController


def _present(view: View) -> tuple[Any, ...]:
    """Lock the aspect-ratio and size selectors while a reference image is attached."""
    prompt, aspect_ratio, image_size, image, status, gallery, reference_preview = view
    unlocked = reference_preview is None
    return (
        prompt,
        gr.update(value=aspect_ratio, interactive=unlocked),
        gr.update(value=image_size, interactive=unlocked),
        image,
        status,
        gallery,
        reference_preview,
    )


def _upscale_handler(on_upscale: Callable[[int], Any], factor: int) -> Callable[[], Any]:
    async def _handler() -> tuple[Any, ...]:
        return _present(await on_upscale(factor))

    return _handler


def build_app(config: AppConfig, controller: StudioController) -> Any:
    """Compose and return the Gradio application."""
    callbacks_map = build_callbacks(controller)

    async def submit(prompt: str, aspect_ratio: str, image_size: str) -> tuple[Any, ...]:
        return _present(await callbacks_map["on_submit"](prompt, aspect_ratio, image_size))

    def select_history(evt: gr.SelectData) -> tuple[Any, ...]:
        # the upload widget is cleared along with the reference handle
        return _present(callbacks_map["on_select_history"](evt.index)) + (None,)

    def upload_reference(path: str | None) -> tuple[Any, ...]:
        return _present(callbacks_map["on_reference_upload"](path))

    def clear_reference() -> tuple[Any, ...]:
        return _present(callbacks_map["on_reference_clear"]())

    def load() -> tuple[Any, ...]:
        return _present(callbacks_map["on_load"]())

    with gr.Blocks(title="Imagen Studio") as demo:
        gr.Markdown("## Imagen 4.0 AI Generator\nTurn your creative ideas into stunning visuals.")

        with gr.Row():
            with gr.Column(scale=1):
                prompt = gr.Textbox(
                    label="Enter your prompt",
                    lines=6,
                    placeholder="e.g., A robot holding a red skateboard.",
                )
                reference_input = gr.Image(label="Reference Image (Optional)", type="filepath")
                reference_preview = gr.Image(
                    label="Reference preview",
                    type="filepath",
                    interactive=False,
                    height=128,
                )
                aspect_ratio = gr.Radio(
                    label="Aspect Ratio",
                    choices=list(ASPECT_RATIOS),
                    value=config.default_aspect_ratio,
                )
                image_size = gr.Radio(
                    label="Image Size",
                    choices=list(IMAGE_SIZES),
                    value=config.default_image_size,
                )
                generate_btn = gr.Button("Generate Image", variant="primary")
                history = gr.Gallery(label="Generation History", columns=3, allow_preview=False)

            with gr.Column(scale=2):
                output_image = gr.Image(label="Generated Image", type="pil", interactive=False)
                status = gr.Markdown("Ready.")
                with gr.Row():
                    upscale_buttons: Sequence[tuple[int, Any]] = [
                        (factor, gr.Button(f"Upscale {factor}x")) for factor in config.upscale_factors
                    ]

        view = [prompt, aspect_ratio, image_size, output_image, status, history, reference_preview]

        generate_btn.click(fn=submit, inputs=[prompt, aspect_ratio, image_size], outputs=view)
        for factor, button in upscale_buttons:
            button.click(fn=_upscale_handler(callbacks_map["on_upscale"], factor), inputs=None, outputs=view)
        history.select(fn=select_history, inputs=None, outputs=view + [reference_input])
        reference_input.upload(fn=upload_reference, inputs=[reference_input], outputs=view)
        reference_input.clear(fn=clear_reference, inputs=None, outputs=view)
        demo.load(fn=load, inputs=None, outputs=view)

    return demo
