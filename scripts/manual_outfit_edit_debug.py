"""One-off script for debugging a real outfit edit end to end."""

import argparse
import asyncio
from pathlib import Path

from config.settings import load_config
from modules.ui.callbacks import build_callbacks
from modules.utils.image_utils import decode_data_uri
from modules.utils.logging import setup_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one outfit edit against the configured backend.")
    parser.add_argument("image", type=Path, help="Photo of one person facing the camera")
    parser.add_argument("--prompt", default="Steampunk Gear")
    parser.add_argument("--output", type=Path, default=Path("debug_outfit_output.png"))
    return parser.parse_args()


async def run(image: Path, prompt: str, output: Path) -> None:
    # 1. Real configuration and services
    config = load_config()
    setup_logging(config)
    callbacks = build_callbacks(config)

    # 2. Upload the photo
    if not image.exists():
        raise FileNotFoundError(f"Missing input image: {image}")
    view = callbacks["on_upload"](None, str(image))
    print("Upload:", view.notice)

    # 3. Generate and keep the last frame
    async for view in callbacks["on_generate"](view.controller, prompt):
        print("Phase:", view.phase.value)

    if view.error:
        print("Edit failed:", view.error)
        return
    session = view.controller.session
    if session.modified:
        data, mime_type = decode_data_uri(session.modified)
        output.write_bytes(data)
        print(f"Saved {mime_type} result:", output.resolve())


if __name__ == "__main__":
    args = parse_args()
    asyncio.run(run(args.image, args.prompt, args.output))
