"""Helpers for moving image payloads between files, bytes and data URIs."""

from __future__ import annotations

import base64
import binascii
import io
import mimetypes
from pathlib import Path
from typing import Any, Tuple

from PIL import Image

DEFAULT_MIME_TYPE = "image/png"


def encode_data_uri(data: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    """Wrap raw image bytes in a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def decode_data_uri(payload: str) -> Tuple[bytes, str]:
    """Split a data URI into its raw bytes and mime type."""
    if not payload.startswith("data:") or "," not in payload:
        raise ValueError("Image payload is not a data URI.")
    header, encoded = payload[5:].split(",", 1)
    parts = header.split(";")
    mime_type = parts[0] or DEFAULT_MIME_TYPE
    if "base64" not in parts[1:]:
        raise ValueError("Only base64 encoded data URIs are supported.")
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Image payload is not valid base64: {exc}") from exc
    return data, mime_type


def load_image_file(path: str | Path) -> str:
    """Read a local image file and return it as a data URI."""
    file_path = Path(path)
    mime_type, _ = mimetypes.guess_type(file_path.name)
    if mime_type is None or not mime_type.startswith("image/"):
        raise ValueError(f"'{file_path.name}' is not an image file.")
    return encode_data_uri(file_path.read_bytes(), mime_type)


def data_uri_to_image(payload: str) -> Any:
    """Decode a data URI into a PIL image for display widgets."""
    data, _ = decode_data_uri(payload)
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def describe_payload(payload: str | None) -> str:
    """Short description used in log lines instead of the payload itself."""
    if not payload:
        return "<none>"
    mime_type = payload[5:].split(";", 1)[0] if payload.startswith("data:") else "?"
    return f"<{mime_type}, {len(payload)} chars>"
