"""JSON file implementations of the persistence collaborators.

Each encounter snapshot and library blueprint is one ``<name>.json`` file
in its directory; templates share a single JSON array file. Directories
are created on first write. Failures are logged and raised as
PersistenceError subclasses.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from combat_tracker import __version__
from combat_tracker.core.constants import RECORD_NAME_PATTERN, RECORD_SUFFIX
from combat_tracker.core.exceptions import (
    PersistenceCorruptError,
    PersistenceError,
    PersistenceNotFoundError,
)
from combat_tracker.core.logging import get_logger
from combat_tracker.models.combat import CombatEncounter
from combat_tracker.models.log import LogEntry
from combat_tracker.models.records import CombatantTemplate, EncounterTemplate, SavedEncounter
from combat_tracker.storage.base import BaseEncounterStore, BaseLibraryStore, BaseTemplateStore


logger = get_logger(__name__)

_TEMPLATE_LIST = TypeAdapter(list[CombatantTemplate])


# =============================================================================
# Helpers
# =============================================================================


class _JsonDirectory:
    """A directory of ``<name>.json`` records.

    Args:
        directory: Where the records live.
        kind: Human-readable record kind used in error messages.
    """

    def __init__(self, directory: Path, kind: str) -> None:
        self.directory = Path(directory)
        self.kind = kind

    def path_for(self, name: str) -> Path:
        if not RECORD_NAME_PATTERN.match(name):
            raise PersistenceError(
                f"Invalid {self.kind} name: {name}",
                record_name=name,
            )
        return self.directory / f"{name}{RECORD_SUFFIX}"

    def exists(self, name: str) -> bool:
        if not RECORD_NAME_PATTERN.match(name):
            return False
        return self.path_for(name).is_file()

    def list_names(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        try:
            names = [
                entry.stem
                for entry in self.directory.iterdir()
                if entry.is_file() and entry.suffix == RECORD_SUFFIX
            ]
        except OSError as exc:
            logger.error(
                "Failed to list directory",
                kind=self.kind,
                path=str(self.directory),
                error=str(exc),
            )
            raise PersistenceError(
                f"Could not read {self.kind} directory: {exc}",
                path=str(self.directory),
            ) from exc
        return sorted(names)

    def write(self, name: str, payload: str) -> Path:
        path = self.path_for(name)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error(
                "Failed to create directory",
                kind=self.kind,
                path=str(self.directory),
                error=str(exc),
            )
            raise PersistenceError(
                f"Could not create {self.kind} directory: {exc}",
                record_name=name,
                path=str(self.directory),
            ) from exc
        try:
            path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to write record", kind=self.kind, path=str(path), error=str(exc))
            raise PersistenceError(
                f"Could not write {self.kind} file: {exc}",
                record_name=name,
                path=str(path),
            ) from exc
        return path

    def read(self, name: str) -> str:
        path = self.path_for(name)
        if not path.is_file():
            raise PersistenceNotFoundError(
                f"{self.kind.capitalize()} file not found: {name}",
                record_name=name,
                path=str(path),
            )
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read record", kind=self.kind, path=str(path), error=str(exc))
            raise PersistenceError(
                f"Could not read {self.kind} file: {exc}",
                record_name=name,
                path=str(path),
            ) from exc


# =============================================================================
# Encounter Snapshots
# =============================================================================


class JsonEncounterStore(BaseEncounterStore):
    """Saved encounters as pretty-printed JSON files.

    Args:
        directory: Directory holding the snapshots.
        version: Version string stamped into every snapshot.
    """

    def __init__(self, directory: Path, *, version: str = __version__) -> None:
        self._files = _JsonDirectory(directory, "encounter")
        self.version = version

    @property
    def directory(self) -> Path:
        return self._files.directory

    def save(
        self,
        encounter: CombatEncounter,
        log: Sequence[LogEntry],
        name: str,
    ) -> SavedEncounter:
        snapshot = SavedEncounter(encounter=encounter, log=list(log), version=self.version)
        path = self._files.write(name, snapshot.model_dump_json(indent=2))
        logger.info("Encounter saved", name=name, path=str(path), combatants=len(encounter))
        return snapshot

    def load(self, name: str) -> SavedEncounter:
        content = self._files.read(name)
        try:
            snapshot = SavedEncounter.model_validate_json(content)
        except PydanticValidationError as exc:
            logger.error("Failed to parse encounter", name=name, error=str(exc))
            raise PersistenceCorruptError(
                f"Encounter file is corrupted: {exc.error_count()} validation error(s)",
                record_name=name,
            ) from exc
        logger.info("Encounter loaded", name=name, version=snapshot.version)
        return snapshot

    def list_names(self) -> list[str]:
        return self._files.list_names()

    def exists(self, name: str) -> bool:
        return self._files.exists(name)


# =============================================================================
# Combatant Templates
# =============================================================================


class JsonTemplateStore(BaseTemplateStore):
    """All combatant templates in one JSON array file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> list[CombatantTemplate]:
        if not self.path.is_file():
            return []
        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read templates", path=str(self.path), error=str(exc))
            raise PersistenceError(
                f"Could not read templates file: {exc}",
                path=str(self.path),
            ) from exc
        try:
            templates = _TEMPLATE_LIST.validate_json(content)
        except PydanticValidationError as exc:
            logger.error("Failed to parse templates", path=str(self.path), error=str(exc))
            raise PersistenceCorruptError(
                f"Templates file is corrupted: {exc.error_count()} validation error(s)",
                path=str(self.path),
            ) from exc
        logger.debug("Templates loaded", count=len(templates))
        return templates

    def save(self, templates: Sequence[CombatantTemplate]) -> None:
        payload = _TEMPLATE_LIST.dump_json(list(templates), indent=2).decode("utf-8")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to write templates", path=str(self.path), error=str(exc))
            raise PersistenceError(
                f"Could not write templates file: {exc}",
                path=str(self.path),
            ) from exc
        logger.debug("Templates saved", count=len(templates))


# =============================================================================
# Encounter Library
# =============================================================================


class JsonLibraryStore(BaseLibraryStore):
    """Encounter blueprints as pretty-printed JSON files."""

    def __init__(self, directory: Path) -> None:
        self._files = _JsonDirectory(directory, "library")

    @property
    def directory(self) -> Path:
        return self._files.directory

    def save(self, template: EncounterTemplate, name: str) -> None:
        path = self._files.write(name, template.model_dump_json(indent=2))
        logger.info(
            "Library entry saved",
            name=name,
            path=str(path),
            combatants=len(template.combatants),
        )

    def load(self, name: str) -> EncounterTemplate:
        content = self._files.read(name)
        try:
            template = EncounterTemplate.model_validate_json(content)
        except PydanticValidationError as exc:
            logger.error("Failed to parse library entry", name=name, error=str(exc))
            raise PersistenceCorruptError(
                f"Library file is corrupted: {exc.error_count()} validation error(s)",
                record_name=name,
            ) from exc
        return template

    def list_names(self) -> list[str]:
        return self._files.list_names()

    def exists(self, name: str) -> bool:
        return self._files.exists(name)


__all__ = [
    "JsonEncounterStore",
    "JsonTemplateStore",
    "JsonLibraryStore",
]
