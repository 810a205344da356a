"""Action log entries and the bounded log that holds them."""

from __future__ import annotations

import time
from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from combat_tracker.core.constants import MAX_LOG_ENTRIES


def unix_now() -> int:
    """Current time as whole unix seconds."""
    return int(time.time())


class LogEntry(BaseModel):
    """One line of the action log.

    Attributes:
        round: Round number when the action happened.
        message: What happened.
        timestamp: Unix seconds when the entry was recorded.
    """

    model_config = ConfigDict(frozen=True)

    round: int = Field(ge=1)
    message: str
    timestamp: int = Field(default_factory=unix_now)


class ActionLog:
    """Append-only log that keeps only the newest entries.

    Pushing past capacity evicts the oldest entries first.
    """

    def __init__(
        self,
        entries: list[LogEntry] | None = None,
        *,
        capacity: int = MAX_LOG_ENTRIES,
    ) -> None:
        self.capacity = capacity
        self._entries: list[LogEntry] = []
        for entry in entries or []:
            self.append(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> LogEntry:
        return self._entries[index]

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)
        overflow = len(self._entries) - self.capacity
        if overflow > 0:
            del self._entries[:overflow]

    def push(self, round_number: int, message: str) -> LogEntry:
        """Record ``message`` against ``round_number`` and return the new entry."""
        entry = LogEntry(round=round_number, message=message)
        self.append(entry)
        return entry

    def replace(self, entries: list[LogEntry]) -> None:
        """Swap in a loaded history, trimmed to capacity."""
        self._entries = []
        for entry in entries:
            self.append(entry)

    def clear(self) -> None:
        self._entries.clear()

    def recent(self, count: int) -> list[LogEntry]:
        """Return up to ``count`` newest entries, oldest first."""
        if count <= 0:
            return []
        return self._entries[-count:]


__all__ = [
    "unix_now",
    "LogEntry",
    "ActionLog",
]
