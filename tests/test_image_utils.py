"""Image payload helper tests."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from modules.utils.image_utils import (
    data_uri_to_image,
    decode_data_uri,
    describe_payload,
    encode_data_uri,
    load_image_file,
)


def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 3), color=(200, 40, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_encode_and_decode_data_uri():
    payload = encode_data_uri(b"\x89PNG-data", "image/png")

    assert payload.startswith("data:image/png;base64,")
    assert decode_data_uri(payload) == (b"\x89PNG-data", "image/png")


@pytest.mark.parametrize(
    "payload",
    ["cat.png", "data:image/png,plain-text", "data:image/png;base64,@@@", "data:image/png;base64"],
)
def test_decode_rejects_bad_payloads(payload):
    with pytest.raises(ValueError):
        decode_data_uri(payload)


def test_load_image_file_reads_same_file_twice(tmp_path):
    path = tmp_path / "cat.png"
    path.write_bytes(png_bytes())

    first = load_image_file(path)
    second = load_image_file(str(path))

    assert first == second
    assert decode_data_uri(first)[1] == "image/png"


def test_load_image_file_rejects_non_images(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello", encoding="utf-8")

    with pytest.raises(ValueError):
        load_image_file(path)


def test_data_uri_to_image():
    image = data_uri_to_image(encode_data_uri(png_bytes()))

    assert image.size == (4, 3)


def test_describe_payload_never_includes_data():
    payload = encode_data_uri(b"secret-bytes", "image/jpeg")

    description = describe_payload(payload)

    assert "image/jpeg" in description
    assert "base64" not in description
    assert describe_payload(None) == "<none>"
