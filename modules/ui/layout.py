"""Gradio layout composition for the outfit studio."""

import html
from functools import lru_cache, partial
from typing import Any, Callable, Optional

import gradio as gr

from config.settings import AppConfig
from modules.prompts.outfit_presets import load_outfit_presets
from modules.ui.callbacks import BUSY_HINT, BUSY_TITLE, StudioView, build_callbacks
from modules.utils.image_utils import data_uri_to_image

PRO_TIP = (
    "**Pro Tip:** For the best results, use a high-quality photo of one person facing the "
    "camera. Mention specific colors and materials in your description to guide the AI better."
)
EMPTY_HISTORY = "**No creations yet**  \nGenerated outfits will appear here for your session."


@lru_cache(maxsize=32)
def _history_image(entry_id: str, payload: str) -> Any:
    """Decode a history thumbnail once per entry; entries never change."""
    return data_uri_to_image(payload)


def _error_html(error: Optional[str]) -> str:
    if not error:
        return ""
    return f"<p style='color:#ef4444;text-align:center'>{html.escape(error)}</p>"


def _to_outputs(view: StudioView) -> tuple[Any, ...]:
    """Map a StudioView onto the component outputs wired in build_app."""
    canvas = data_uri_to_image(view.canvas) if view.canvas else None
    gallery = [(_history_image(card.id, card.modified), card.prompt) for card in view.history]
    status = f"**{BUSY_TITLE}** {BUSY_HINT}" if view.busy else view.notice
    return (
        view.controller,
        gr.update(value=canvas, label=view.canvas_title),
        status,
        view.prompt,
        gr.update(
            interactive=view.can_generate,
            value="Processing..." if view.busy else "Generate Outfit",
        ),
        _error_html(view.error),
        gr.update(interactive=not view.busy),
        gr.update(value=gallery, visible=bool(gallery)),
        gr.update(visible=not gallery),
    )


def _bind(fn: Callable[..., StudioView]) -> Callable[..., Any]:
    # Coroutine handlers keep every transition on the event loop that runs on_generate.
    async def handler(*args: Any) -> tuple[Any, ...]:
        return _to_outputs(fn(*args))

    return handler


def _bind_stream(fn: Callable[..., Any]) -> Callable[..., Any]:
    async def handler(*args: Any):
        async for view in fn(*args):
            yield _to_outputs(view)

    return handler


def build_app(config: AppConfig) -> Any:
    """Compose and return the Gradio application."""
    presets = load_outfit_presets(config.assets_dir)
    callbacks_map = build_callbacks(config, preset_registry=presets)

    with gr.Blocks(title="FashionAI Studio") as demo:
        controller_state = gr.State(None)

        with gr.Row():
            gr.Markdown("## Fashion**AI** Studio")
            reset_btn = gr.Button("Reset", size="sm", variant="secondary")

        with gr.Row():
            with gr.Column(scale=8):
                with gr.Row():
                    with gr.Column():
                        canvas = gr.Image(
                            label="Start Here",
                            type="pil",
                            interactive=False,
                            height=480,
                        )
                        status = gr.Markdown("Upload a photo to begin.")
                        upload_btn = gr.UploadButton(
                            "Upload / Change Image",
                            file_types=["image"],
                            file_count="single",
                        )

                    with gr.Column():
                        prompt = gr.Textbox(
                            label="Describe the new outfit",
                            lines=5,
                            placeholder=(
                                "e.g., A stylish neon cyberpunk leather jacket with glowing trims, "
                                "black cargo pants, and futuristic sneakers."
                            ),
                        )
                        gr.Markdown("Quick Suggestions")
                        with gr.Row():
                            suggestion_buttons = [
                                (preset.name, gr.Button(preset.name, size="sm"))
                                for preset in presets.list_presets()
                            ]
                        generate_btn = gr.Button(
                            "Generate Outfit", variant="primary", interactive=False
                        )
                        error = gr.Markdown("")

                gr.Markdown(PRO_TIP)

            with gr.Column(scale=4):
                gr.Markdown("### Recent Creations")
                history_empty = gr.Markdown(EMPTY_HISTORY)
                history_gallery = gr.Gallery(
                    label="Recent Creations",
                    columns=2,
                    allow_preview=False,
                    visible=False,
                )

        outputs = [
            controller_state,
            canvas,
            status,
            prompt,
            generate_btn,
            error,
            upload_btn,
            history_gallery,
            history_empty,
        ]

        demo.load(fn=_bind(callbacks_map["on_load"]), inputs=[controller_state], outputs=outputs)

        upload_btn.upload(
            fn=_bind(callbacks_map["on_upload"]),
            inputs=[controller_state, upload_btn],
            outputs=outputs,
        )

        prompt.input(
            fn=_bind(callbacks_map["on_prompt_change"]),
            inputs=[controller_state, prompt],
            outputs=outputs,
        )

        for name, button in suggestion_buttons:
            button.click(
                fn=_bind(partial(callbacks_map["on_apply_suggestion"], name=name)),
                inputs=[controller_state],
                outputs=outputs,
            )

        generate_btn.click(
            fn=_bind_stream(callbacks_map["on_generate"]),
            inputs=[controller_state, prompt],
            outputs=outputs,
        )

        async def on_gallery_select(controller: Any, evt: gr.SelectData) -> tuple[Any, ...]:
            return _to_outputs(callbacks_map["on_select_history"](controller, evt.index))

        history_gallery.select(
            fn=on_gallery_select,
            inputs=[controller_state],
            outputs=outputs,
        )

        reset_btn.click(
            fn=_bind(callbacks_map["on_reset"]),
            inputs=[controller_state],
            outputs=outputs,
        )

    return demo
