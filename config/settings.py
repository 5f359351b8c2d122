"""Configuration helpers for the Fashion AI Studio project."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

SUPPORTED_BACKENDS = ("gemini", "openai")


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    assets_dir: Path = Path("assets")
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    image_backend: str = "gemini"
    gemini_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash-image"
    openai_key: Optional[str] = None
    openai_image_model: str = "gpt-image-1"
    request_timeout: float = 120.0
    history_capacity: int = 10
    server_name: str = "127.0.0.1"
    server_port: int = 7860
    metadata: dict[str, Any] = field(default_factory=dict)


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


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _resolve_backend(name: Optional[str]) -> str:
    backend = (name or "gemini").strip().lower()
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unknown IMAGE_BACKEND '{backend}', expected one of: {', '.join(SUPPORTED_BACKENDS)}"
        )
    return backend


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    # Same lookup order as the browser build, which read API_KEY.
    gemini_key = (
        os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY")
    )

    metadata: dict[str, Any] = {}
    openai_base_url = os.getenv("OPENAI_BASE_URL")
    if openai_base_url:
        metadata["openai_base_url"] = openai_base_url

    return AppConfig(
        assets_dir=Path(os.getenv("ASSETS_DIR", "assets")),
        log_dir=Path(os.getenv("LOG_DIR", "logs")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        image_backend=_resolve_backend(os.getenv("IMAGE_BACKEND")),
        gemini_key=gemini_key,
        gemini_model=os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image"),
        openai_key=os.getenv("OPENAI_API_KEY"),
        openai_image_model=os.getenv("OPENAI_IMAGE_MODEL", "gpt-image-1"),
        request_timeout=_env_float("IMAGE_REQUEST_TIMEOUT", 120.0),
        server_name=os.getenv("GRADIO_SERVER_NAME", "127.0.0.1"),
        server_port=_env_int("GRADIO_SERVER_PORT", 7860),
        metadata=metadata,
    )
