"""Session history of successful outfit edits."""

from __future__ import annotations

import itertools
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Iterator, List, Optional

DEFAULT_CAPACITY = 10

_sequence = itertools.count(1)


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Snapshot of one successful edit."""

    id: str
    original: str
    modified: str
    prompt: str
    created_at: float

    @classmethod
    def create(
        cls,
        original: str,
        modified: str,
        prompt: str,
        clock: Callable[[], float] = time.time,
    ) -> "HistoryEntry":
        """Build an entry whose id sorts in creation order."""
        created_at = clock()
        entry_id = f"{int(created_at * 1000):013d}-{next(_sequence):06d}"
        return cls(
            id=entry_id,
            original=original,
            modified=modified,
            prompt=prompt,
            created_at=created_at,
        )


class HistoryBuffer:
    """Newest-first, fixed-capacity list of history entries."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1.")
        self.capacity = capacity
        self._entries: Deque[HistoryEntry] = deque(maxlen=capacity)

    def record(self, entry: HistoryEntry) -> None:
        """Prepend an entry, evicting the oldest one once full."""
        self._entries.appendleft(entry)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        """Return the entry with the given id, if it is still buffered."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    @property
    def entries(self) -> List[HistoryEntry]:
        """Return a newest-first copy of the buffered entries."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))
