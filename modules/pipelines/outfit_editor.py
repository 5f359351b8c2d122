"""Outfit editing via third-party image models."""

from __future__ import annotations

import base64
import binascii
import importlib
import logging
import mimetypes
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from config.settings import AppConfig
from modules.utils.image_utils import (
    DEFAULT_MIME_TYPE,
    decode_data_uri,
    describe_payload,
    encode_data_uri,
)

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Failed to generate new outfit. Please try again."
NO_BACKEND_MESSAGE = (
    "No image editing backend is configured. Set GEMINI_API_KEY or OPENAI_API_KEY."
)
NO_IMAGE_MESSAGE = "The model did not return an edited image."

OUTFIT_INSTRUCTION = (
    "Edit this photo so that the person is wearing the following outfit: {prompt}. "
    "Change only the clothing. Preserve the person's identity, face, hairstyle, skin tone, "
    "body shape, pose, framing, background and lighting. "
    "Do not add text, watermarks or logos. Return only the edited image."
)


class EditFailure(Exception):
    """Raised when the image service could not produce an edited photo."""

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = (message or "").strip() or DEFAULT_FAILURE_MESSAGE
        super().__init__(self.message)


@dataclass(slots=True)
class EditRequest:
    """Information passed to editing backends."""

    image_bytes: bytes
    mime_type: str
    prompt: str
    instruction: str
    metadata: Dict[str, Any] = field(default_factory=dict)


BackendPayload = bytes | str | Dict[str, Any]
BackendCallable = Callable[[EditRequest], Awaitable[BackendPayload]]


class ImagePipelineClient(Protocol):
    """Boundary used by the controller: one photo and prompt in, one photo out."""

    async def edit(self, original: str, prompt: str) -> str:
        ...


class OutfitEditor:
    """Interface to Gemini/OpenAI image editing."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self._backends: Dict[str, BackendCallable] = {}
        self.warnings: list[str] = []
        self._auto_register_backends()

    def register_backend(self, name: str, backend: BackendCallable) -> None:
        """Register an image editing backend."""
        self._backends[name.lower()] = backend

    def clear_backends(self) -> None:
        """Remove all backends (mainly for tests)."""
        self._backends.clear()

    def has_backend(self, name: str) -> bool:
        """Return True when backend exists."""
        return name.lower() in self._backends

    def available_backends(self) -> list[str]:
        """Return the list of registered backends ordered by preference."""
        priority = {"gemini": 0, "openai": 1}
        return sorted(
            self._backends.keys(),
            key=lambda item: (priority.get(item, 99), item),
        )

    def default_backend(self) -> str:
        """Return the configured backend when registered, else the preferred one."""
        preferred = self.config.image_backend.lower()
        if preferred in self._backends:
            return preferred
        choices = self.available_backends()
        if choices:
            return choices[0]
        return preferred

    def build_instruction(self, prompt: str) -> str:
        template = self.config.metadata.get("edit_instruction") or OUTFIT_INSTRUCTION
        return template.format(prompt=prompt.strip())

    async def edit(self, original: str, prompt: str) -> str:
        """Return the edited photo as a data URI, or raise EditFailure."""
        name = self.default_backend()
        backend = self._backends.get(name)
        if backend is None:
            message = NO_BACKEND_MESSAGE
            if self.warnings:
                message = f"{message} ({'; '.join(self.warnings)})"
            raise EditFailure(message)

        try:
            image_bytes, mime_type = decode_data_uri(original)
        except ValueError as exc:
            raise EditFailure(str(exc)) from exc

        request = EditRequest(
            image_bytes=image_bytes,
            mime_type=mime_type,
            prompt=prompt,
            instruction=self.build_instruction(prompt),
            metadata=self.config.metadata,
        )
        logger.info("Sending %s to %s backend", describe_payload(original), name)
        try:
            payload = await backend(request)
        except EditFailure:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.warning("%s backend raised %s: %s", name, type(exc).__name__, exc)
            raise EditFailure(str(exc)) from exc

        result = self._normalize_backend_response(payload)
        logger.info("Received %s from %s backend", describe_payload(result), name)
        return result

    # Internal helpers ---------------------------------------------------------
    def _auto_register_backends(self) -> None:
        """Register backends automatically when keys and SDKs are available."""
        self._register_gemini_backend()
        self._register_openai_backend()

    def _normalize_backend_response(self, payload: BackendPayload) -> str:
        """Coerce backend outputs into a data URI."""
        mime_type = DEFAULT_MIME_TYPE
        data: Any = payload
        if isinstance(payload, dict):
            data = payload.get("b64_json") or payload.get("data")
            mime_type = payload.get("mime_type") or DEFAULT_MIME_TYPE

        if isinstance(data, (bytes, bytearray)) and data:
            return encode_data_uri(bytes(data), mime_type)
        if isinstance(data, str) and data.strip():
            cleaned = data.strip()
            if cleaned.startswith("data:"):
                try:
                    decode_data_uri(cleaned)
                except ValueError as exc:
                    raise EditFailure(f"The image service returned an invalid image: {exc}") from exc
                return cleaned
            try:
                raw = base64.b64decode(cleaned, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise EditFailure("The image service returned an invalid image.") from exc
            return encode_data_uri(raw, mime_type)
        raise EditFailure(NO_IMAGE_MESSAGE)

    def _extract_gemini_image(self, response: Any) -> Dict[str, Any]:
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None)
        if block_reason:
            raise EditFailure(f"The request was blocked by the image service ({block_reason}).")

        texts: list[str] = []
        for candidate in getattr(response, "candidates", None) or []:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                inline = getattr(part, "inline_data", None)
                if inline is not None and getattr(inline, "data", None):
                    return {
                        "data": inline.data,
                        "mime_type": getattr(inline, "mime_type", None) or DEFAULT_MIME_TYPE,
                    }
                text = getattr(part, "text", None)
                if text:
                    texts.append(text.strip())
        raise EditFailure(" ".join(texts) or NO_IMAGE_MESSAGE)

    def _register_gemini_backend(self) -> None:
        if not self.config.gemini_key:
            return
        try:
            genai_module = importlib.import_module("google.genai")
            types_module = importlib.import_module("google.genai.types")
        except ImportError as exc:
            self.warnings.append(f"Cannot import google-genai: {exc}")
            return

        client = genai_module.Client(
            api_key=self.config.gemini_key,
            http_options=types_module.HttpOptions(timeout=int(self.config.request_timeout * 1000)),
        )

        async def _gemini_backend(request: EditRequest) -> Dict[str, Any]:
            response = await client.aio.models.generate_content(
                model=self.config.gemini_model,
                contents=[
                    types_module.Part.from_bytes(
                        data=request.image_bytes, mime_type=request.mime_type
                    ),
                    request.instruction,
                ],
                config=types_module.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
            )
            return self._extract_gemini_image(response)

        self.register_backend("gemini", _gemini_backend)

    def _register_openai_backend(self) -> None:
        if not self.config.openai_key:
            return
        try:
            openai_module = importlib.import_module("openai")
        except ImportError as exc:
            self.warnings.append(f"Cannot import openai: {exc}")
            return

        client_kwargs: Dict[str, Any] = {
            "api_key": self.config.openai_key,
            "timeout": self.config.request_timeout,
        }
        base_url = self.config.metadata.get("openai_base_url")
        if base_url:
            client_kwargs["base_url"] = base_url
        client = openai_module.AsyncOpenAI(**client_kwargs)

        async def _openai_backend(request: EditRequest) -> Dict[str, Any]:
            extension = mimetypes.guess_extension(request.mime_type) or ".png"
            result = await client.images.edit(
                model=self.config.openai_image_model,
                image=(f"photo{extension}", request.image_bytes, request.mime_type),
                prompt=request.instruction,
            )
            items = getattr(result, "data", None) or []
            encoded = getattr(items[0], "b64_json", None) if items else None
            if not encoded:
                raise EditFailure(NO_IMAGE_MESSAGE)
            return {"b64_json": encoded, "mime_type": "image/png"}

        self.register_backend("openai", _openai_backend)
