"""Live state of the photo currently being edited."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Read-only copy of the session handed to views and tests."""

    original: Optional[str]
    modified: Optional[str]
    busy: bool
    error: Optional[str]


@dataclass(slots=True)
class EditSession:
    """Original/modified/busy/error record driving the current view.

    The session performs no validation of its own. Guards such as "only
    generate when an original is present" belong to the controller that owns
    the instance.
    """

    original: Optional[str] = None
    modified: Optional[str] = None
    busy: bool = False
    error: Optional[str] = None

    def upload(self, image: str) -> None:
        """Replace the source photo and drop any previous result."""
        self.original = image
        self.modified = None
        self.error = None

    def begin_generate(self) -> None:
        self.busy = True
        self.error = None

    def complete_generate(self, result: str) -> None:
        self.modified = result
        self.busy = False

    def fail_generate(self, message: str) -> None:
        """Record a failed edit; a previous successful result is kept."""
        self.busy = False
        self.error = message

    def reset(self) -> None:
        self.original = None
        self.modified = None
        self.busy = False
        self.error = None

    def adopt(self, original: str, modified: str) -> None:
        """Show a past result without touching the history it came from."""
        self.original = original
        self.modified = modified
        self.busy = False
        self.error = None

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            original=self.original,
            modified=self.modified,
            busy=self.busy,
            error=self.error,
        )
