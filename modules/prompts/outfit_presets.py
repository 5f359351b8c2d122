"""Quick outfit suggestions offered next to the prompt box."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

DEFAULT_OUTFITS = (
    "Modern Space Suit",
    "Traditional Vietnamese Ao Dai",
    "Classic Tuxedo",
    "Superhero Cape & Armor",
    "Summer Beachwear",
    "Steampunk Gear",
)


@dataclass(slots=True)
class OutfitPreset:
    """A one-click outfit description."""

    name: str
    description: Optional[str] = None

    @property
    def prompt(self) -> str:
        """Text placed in the prompt box when the preset is picked."""
        return (self.description or self.name).strip()


class OutfitPresetRegistry:
    """In-memory registry of outfit presets, in insertion order."""

    def __init__(self) -> None:
        self._presets: Dict[str, OutfitPreset] = {}

    @classmethod
    def with_defaults(cls) -> "OutfitPresetRegistry":
        registry = cls()
        for name in DEFAULT_OUTFITS:
            registry.add(OutfitPreset(name=name))
        return registry

    def load_from_file(self, path: Path) -> None:
        """Load presets from a JSON list of names or {name, description} objects."""
        if not path.exists():
            return
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        for entry in data:
            if isinstance(entry, str):
                self.add(OutfitPreset(name=entry))
                continue
            self.add(OutfitPreset(name=entry["name"], description=entry.get("description")))

    def add(self, preset: OutfitPreset) -> None:
        """Register a new outfit preset."""
        self._presets[preset.name] = preset

    def list_presets(self) -> List[OutfitPreset]:
        """Return all registered presets."""
        return list(self._presets.values())

    def get(self, name: str) -> OutfitPreset:
        """Retrieve a preset by name."""
        try:
            return self._presets[name]
        except KeyError as exc:
            raise KeyError(f"Outfit preset '{name}' not found") from exc


def load_outfit_presets(assets_dir: Path) -> OutfitPresetRegistry:
    """Read assets/outfits.json, falling back to the built-in suggestions."""
    registry = OutfitPresetRegistry()
    registry.load_from_file(Path(assets_dir) / "outfits.json")
    if not registry.list_presets():
        return OutfitPresetRegistry.with_defaults()
    return registry
