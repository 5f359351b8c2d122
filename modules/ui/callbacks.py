"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, List, Optional

from config.settings import AppConfig
from modules.pipelines.outfit_editor import OutfitEditor
from modules.prompts.outfit_presets import OutfitPresetRegistry, load_outfit_presets
from modules.services.history_service import HistoryBuffer
from modules.services.studio_controller import StudioController, StudioPhase
from modules.utils.image_utils import load_image_file

BUSY_TITLE = "Tailoring your outfit..."
BUSY_HINT = "This takes about 10-15 seconds"
IDLE_HINT = "Upload a photo to begin. Portrait or full body shots work best."
READY_HINT = "Original image selected"

ControllerFactory = Callable[[], StudioController]


@dataclass(slots=True)
class HistoryCard:
    """One item of the "Recent Creations" list."""

    id: str
    prompt: str
    modified: str


@dataclass(slots=True)
class StudioView:
    """Everything the layout needs to draw one frame."""

    controller: StudioController
    phase: StudioPhase
    canvas: Optional[str]
    canvas_title: str
    prompt: str
    can_generate: bool
    busy: bool
    error: Optional[str]
    notice: str
    history: List[HistoryCard] = field(default_factory=list)


def render_view(controller: StudioController, notice: str = "") -> StudioView:
    """Project controller state into a view."""
    session = controller.session
    phase = controller.phase
    if session.modified:
        title = "Modified Result"
    elif session.original:
        title = "Source Image"
    else:
        title = "Start Here"

    if not notice:
        if phase is StudioPhase.BUSY:
            notice = f"{BUSY_TITLE} {BUSY_HINT}"
        elif phase is StudioPhase.IDLE:
            notice = IDLE_HINT
        else:
            notice = READY_HINT

    return StudioView(
        controller=controller,
        phase=phase,
        canvas=session.modified or session.original,
        canvas_title=title,
        prompt=controller.prompt,
        can_generate=controller.can_generate(),
        busy=session.busy,
        error=session.error,
        notice=notice,
        history=[
            HistoryCard(id=entry.id, prompt=entry.prompt, modified=entry.modified)
            for entry in controller.history
        ],
    )


def build_callbacks(
    config: AppConfig,
    controller_factory: Optional[ControllerFactory] = None,
    preset_registry: Optional[OutfitPresetRegistry] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions.

    Every callback takes the per-session controller (None on first use) as its
    first argument and returns a StudioView.
    """

    registry = preset_registry or load_outfit_presets(config.assets_dir)

    def _default_factory() -> StudioController:
        return StudioController(
            OutfitEditor(config),
            history=HistoryBuffer(config.history_capacity),
            presets=registry,
        )

    factory = controller_factory or _default_factory

    def _ensure_controller(controller: Optional[StudioController]) -> StudioController:
        return controller if controller is not None else factory()

    def on_load(controller: Optional[StudioController]) -> StudioView:
        return render_view(_ensure_controller(controller))

    def on_upload(controller: Optional[StudioController], file_path: Optional[str]) -> StudioView:
        studio = _ensure_controller(controller)
        if not file_path:
            return render_view(studio, "No file selected.")
        try:
            payload = load_image_file(file_path)
        except (OSError, ValueError) as exc:
            return render_view(studio, f"Upload failed: {exc}")
        if not studio.upload(payload):
            return render_view(studio, "Please wait for the current outfit to finish.")
        return render_view(studio)

    def on_prompt_change(controller: Optional[StudioController], prompt: str) -> StudioView:
        studio = _ensure_controller(controller)
        studio.set_prompt(prompt)
        return render_view(studio)

    def on_apply_suggestion(controller: Optional[StudioController], name: str) -> StudioView:
        studio = _ensure_controller(controller)
        try:
            studio.apply_suggestion(name)
        except KeyError as exc:
            return render_view(studio, str(exc.args[0]) if exc.args else "Unknown outfit.")
        return render_view(studio)

    async def on_generate(
        controller: Optional[StudioController], prompt: str
    ) -> AsyncIterator[StudioView]:
        studio = _ensure_controller(controller)
        studio.set_prompt(prompt)
        if not studio.can_generate():
            yield render_view(studio)
            return

        pending = asyncio.create_task(studio.generate())
        # Let the task start so the first frame shows the busy overlay.
        await asyncio.sleep(0)
        yield render_view(studio)
        # The edit runs to completion even if this generator is cancelled.
        await asyncio.shield(pending)
        yield render_view(studio)

    def on_select_history(controller: Optional[StudioController], index: Optional[int]) -> StudioView:
        studio = _ensure_controller(controller)
        entries = studio.history
        if index is None or not 0 <= index < len(entries):
            return render_view(studio)
        studio.select_history(entries[index].id)
        return render_view(studio)

    def on_reset(controller: Optional[StudioController]) -> StudioView:
        studio = _ensure_controller(controller)
        studio.reset()
        return render_view(studio)

    return {
        "on_load": on_load,
        "on_upload": on_upload,
        "on_prompt_change": on_prompt_change,
        "on_apply_suggestion": on_apply_suggestion,
        "on_generate": on_generate,
        "on_select_history": on_select_history,
        "on_reset": on_reset,
    }
