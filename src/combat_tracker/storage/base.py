"""Abstract persistence collaborators used by the combat session.

The session validates every record name against the allowed character
set before calling a store, so implementations may assume names are safe
to use as file stems.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from combat_tracker.models.combat import CombatEncounter
from combat_tracker.models.log import LogEntry
from combat_tracker.models.records import CombatantTemplate, EncounterTemplate, SavedEncounter


class BaseEncounterStore(ABC):
    """Stores full encounter snapshots together with their action log."""

    @abstractmethod
    def save(
        self,
        encounter: CombatEncounter,
        log: Sequence[LogEntry],
        name: str,
    ) -> SavedEncounter:
        """Persist a snapshot under ``name`` and return what was written."""
        ...

    @abstractmethod
    def load(self, name: str) -> SavedEncounter:
        """Load the snapshot stored under ``name``."""
        ...

    @abstractmethod
    def list_names(self) -> list[str]:
        """Names of all stored snapshots, sorted."""
        ...

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Whether a snapshot is stored under ``name``."""
        ...


class BaseTemplateStore(ABC):
    """Stores the reusable combatant template list as a whole."""

    @abstractmethod
    def load(self) -> list[CombatantTemplate]:
        """Load all templates; an absent store yields an empty list."""
        ...

    @abstractmethod
    def save(self, templates: Sequence[CombatantTemplate]) -> None:
        """Replace the stored templates."""
        ...


class BaseLibraryStore(ABC):
    """Stores encounter blueprints stripped of live state."""

    @abstractmethod
    def save(self, template: EncounterTemplate, name: str) -> None:
        """Persist a blueprint under ``name``, replacing any existing one."""
        ...

    @abstractmethod
    def load(self, name: str) -> EncounterTemplate:
        """Load the blueprint stored under ``name``."""
        ...

    @abstractmethod
    def list_names(self) -> list[str]:
        """Names of all stored blueprints, sorted."""
        ...

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Whether a blueprint is stored under ``name``."""
        ...


__all__ = [
    "BaseEncounterStore",
    "BaseTemplateStore",
    "BaseLibraryStore",
]
