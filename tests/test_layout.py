"""Gradio output mapping tests."""

from __future__ import annotations

import io

from PIL import Image

from modules.services.studio_controller import StudioPhase
from modules.ui import layout
from modules.ui.callbacks import HistoryCard, StudioView
from modules.utils.image_utils import encode_data_uri


def png_payload() -> str:
    buffer = io.BytesIO()
    Image.new("RGB", (2, 2)).save(buffer, format="PNG")
    return encode_data_uri(buffer.getvalue())


def make_view(**overrides) -> StudioView:
    values = dict(
        controller=None,
        phase=StudioPhase.READY,
        canvas=None,
        canvas_title="Source Image",
        prompt="",
        can_generate=False,
        busy=False,
        error=None,
        notice="",
        history=[],
    )
    values.update(overrides)
    return StudioView(**values)


def test_error_text_is_escaped():
    outputs = layout._to_outputs(make_view(error="<script>alert('quota')</script>"))

    rendered = outputs[5]
    assert "<script>" not in rendered
    assert "&lt;script&gt;" in rendered


def test_no_error_renders_empty():
    assert layout._to_outputs(make_view())[5] == ""


def test_history_images_are_decoded_once_per_entry():
    layout._history_image.cache_clear()
    card = HistoryCard(id="0001-000001", prompt="Classic Tuxedo", modified=png_payload())
    view = make_view(history=[card])

    layout._to_outputs(view)
    layout._to_outputs(view)

    info = layout._history_image.cache_info()
    assert info.misses == 1
    assert info.hits == 1
