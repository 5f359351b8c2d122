"""Turns user actions into edit session and history transitions."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from modules.pipelines.outfit_editor import (
    DEFAULT_FAILURE_MESSAGE,
    EditFailure,
    ImagePipelineClient,
)
from modules.prompts.outfit_presets import OutfitPresetRegistry
from modules.services.edit_session import EditSession, SessionSnapshot
from modules.services.history_service import HistoryBuffer, HistoryEntry
from modules.utils.image_utils import describe_payload

logger = logging.getLogger(__name__)


class StudioPhase(str, Enum):
    """Coarse state of the studio as seen by the user."""

    IDLE = "idle"
    READY = "ready"
    BUSY = "busy"


class StudioController:
    """Owns the edit session, the prompt and the history buffer.

    All mutation goes through the intent methods below. Only one edit call is
    ever in flight; a generate request that arrives while one is pending, or
    without a photo or prompt, is ignored rather than queued.

    Reset and history selection are honored while a call is pending. The
    pending call then belongs to an older epoch: a success is still recorded
    in history but no longer shown, and a failure is dropped.
    """

    def __init__(
        self,
        client: ImagePipelineClient,
        history: Optional[HistoryBuffer] = None,
        presets: Optional[OutfitPresetRegistry] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._session = EditSession()
        self._history = history if history is not None else HistoryBuffer()
        self._presets = presets if presets is not None else OutfitPresetRegistry.with_defaults()
        self._clock = clock
        self._prompt = ""
        self._epoch = 0
        self._in_flight = False

    @property
    def session(self) -> SessionSnapshot:
        return self._session.snapshot()

    @property
    def history(self) -> List[HistoryEntry]:
        return self._history.entries

    @property
    def prompt(self) -> str:
        return self._prompt

    @property
    def presets(self) -> OutfitPresetRegistry:
        return self._presets

    @property
    def phase(self) -> StudioPhase:
        if self._session.busy:
            return StudioPhase.BUSY
        if self._session.original is None:
            return StudioPhase.IDLE
        return StudioPhase.READY

    def can_generate(self) -> bool:
        """Generate guard: photo present, prompt non-empty, nothing pending."""
        return (
            self._session.original is not None
            and bool(self._prompt.strip())
            and not self._session.busy
            and not self._in_flight
        )

    def upload(self, image: str) -> bool:
        """Use a new source photo. Ignored while an edit is running."""
        if self._session.busy:
            logger.debug("Ignoring upload while an edit is in flight")
            return False
        self._session.upload(image)
        logger.debug("Uploaded %s", describe_payload(image))
        return True

    def set_prompt(self, text: Optional[str]) -> None:
        self._prompt = text or ""

    def apply_suggestion(self, name: str) -> str:
        """Fill the prompt from a named outfit preset and return it."""
        self._prompt = self._presets.get(name).prompt
        return self._prompt

    async def generate(self) -> bool:
        """Run one edit of the current photo. Returns False when the guard refuses."""
        if not self.can_generate():
            logger.debug("Generate refused in phase %s", self.phase.value)
            return False

        original = self._session.original
        prompt = self._prompt
        assert original is not None  # guarded by can_generate
        epoch = self._epoch

        self._session.begin_generate()
        self._in_flight = True
        logger.info("Generating outfit %r for %s", prompt, describe_payload(original))
        try:
            result = await self._client.edit(original, prompt)
        except EditFailure as exc:
            self._finish_failure(epoch, exc.message)
            return True
        except asyncio.CancelledError:
            self._finish_failure(epoch, DEFAULT_FAILURE_MESSAGE)
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Image pipeline raised an unexpected error")
            self._finish_failure(epoch, str(exc) or DEFAULT_FAILURE_MESSAGE)
            return True
        finally:
            self._in_flight = False

        entry = HistoryEntry.create(original, result, prompt, clock=self._clock)
        self._history.record(entry)
        if epoch == self._epoch:
            self._session.complete_generate(result)
            logger.info("Outfit %r generated, history holds %d entries", prompt, len(self._history))
        else:
            logger.info("Recorded result for %r after the session moved on", prompt)
        return True

    def select_history(self, entry_id: str) -> bool:
        """Show a past result. Returns False when the entry is no longer buffered."""
        entry = self._history.get(entry_id)
        if entry is None:
            logger.debug("History entry %s not found", entry_id)
            return False
        self._epoch += 1
        self._session.adopt(entry.original, entry.modified)
        return True

    def reset(self) -> None:
        """Clear the photo, result, error and prompt. History is kept."""
        self._epoch += 1
        self._session.reset()
        self._prompt = ""

    def _finish_failure(self, epoch: int, message: str) -> None:
        if epoch != self._epoch:
            logger.info("Dropping failure from a superseded edit: %s", message)
            return
        logger.warning("Outfit generation failed: %s", message)
        self._session.fail_generate(message)
