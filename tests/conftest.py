"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Combat Tracker test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from combat_tracker.engine.keys import KeyEvent
from combat_tracker.engine.session import CombatSession
from combat_tracker.models.combat import Combatant, CombatEncounter
from combat_tracker.storage.files import JsonEncounterStore, JsonLibraryStore, JsonTemplateStore


if TYPE_CHECKING:
    from collections.abc import Callable, Generator, Iterable
    from pathlib import Path


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from combat_tracker.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "COMBAT_TRACKER_DEBUG": "true",
        "COMBAT_TRACKER_LOG_LEVEL": "DEBUG",
        "COMBAT_TRACKER_ENCOUNTERS_DIR": str(tmp_path / "saves"),
        "COMBAT_TRACKER_LIBRARY_DIR": str(tmp_path / "blueprints"),
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def fighter() -> Combatant:
    """A player character with 20 HP."""
    return Combatant.create("Aria", initiative=15, hp_max=20, armor_class=16, is_player=True)


@pytest.fixture
def goblin() -> Combatant:
    """A monster with 7 HP."""
    return Combatant.create("Goblin", initiative=12, hp_max=7, armor_class=15, is_player=False)


@pytest.fixture
def wizard() -> Combatant:
    """A player character with 12 HP and low initiative."""
    return Combatant.create("Brynn", initiative=8, hp_max=12, armor_class=12, is_player=True)


@pytest.fixture
def encounter(fighter: Combatant, goblin: Combatant, wizard: Combatant) -> CombatEncounter:
    """An encounter with three combatants in initiative order Aria, Goblin, Brynn."""
    enc = CombatEncounter()
    for combatant in (goblin, wizard, fighter):
        enc.add_combatant(combatant)
    return enc


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def encounter_store(tmp_path: Path) -> JsonEncounterStore:
    return JsonEncounterStore(tmp_path / "encounters", version="test")


@pytest.fixture
def template_store(tmp_path: Path) -> JsonTemplateStore:
    return JsonTemplateStore(tmp_path / "templates.json")


@pytest.fixture
def library_store(tmp_path: Path) -> JsonLibraryStore:
    return JsonLibraryStore(tmp_path / "library")


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def session(
    encounter_store: JsonEncounterStore,
    template_store: JsonTemplateStore,
    library_store: JsonLibraryStore,
) -> CombatSession:
    """A fresh session with an empty encounter and temp-dir stores."""
    return CombatSession(encounter_store, template_store, library_store)


@pytest.fixture
def populated_session(session: CombatSession, encounter: CombatEncounter) -> CombatSession:
    """A session holding the three-combatant encounter."""
    session.encounter = encounter
    return session


@pytest.fixture
def press(session: CombatSession) -> Callable[..., None]:
    """Feed keys to the session fixture.

    Strings are expanded to one CHAR event per character; KeyEvent values
    are passed through.
    """
    from combat_tracker.engine.input_handler import handle_key

    def _press(*keys: str | KeyEvent | Iterable[KeyEvent]) -> None:
        for key in keys:
            if isinstance(key, str):
                for char in key:
                    handle_key(session, KeyEvent.of(char))
            elif isinstance(key, KeyEvent):
                handle_key(session, key)
            else:
                for event in key:
                    handle_key(session, event)

    return _press
