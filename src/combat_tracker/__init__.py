"""Combat Tracker - turn-based TTRPG encounter engine.

Tracks initiative order, hit points, temporary hit points, timed
conditions, death saves and spell concentration. All changes flow
through a modal key-driven state machine, so any front end only has to
translate its key presses into KeyEvent values and draw the session.

Example:
    >>> from combat_tracker import CombatSession, KeyEvent, handle_key, type_text
    >>>
    >>> session = CombatSession.from_settings()
    >>> for key in [KeyEvent.of("a"), *type_text("Goblin"), KeyEvent.enter()]:
    ...     handle_key(session, key)

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 combat models and persistence records.
    engine: Key events, interaction modes, session and dispatcher.
    storage: JSON-file persistence collaborators.
"""

from __future__ import annotations


__version__ = "0.1.0"
__author__ = "Combat Tracker Team"

# Core
from combat_tracker.core.config import Settings, get_settings  # noqa: E402
from combat_tracker.core.exceptions import TrackerError  # noqa: E402
from combat_tracker.core.logging import configure_logging, get_logger  # noqa: E402

# Engine
from combat_tracker.engine import (  # noqa: E402
    CombatSession,
    KeyCode,
    KeyEvent,
    handle_key,
    type_text,
)

# Models
from combat_tracker.models import (  # noqa: E402
    ActionLog,
    Combatant,
    CombatEncounter,
    ConditionType,
    DeathSaveOutcome,
    LogEntry,
    StatusEffect,
)


__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Core
    "TrackerError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Combatant",
    "CombatEncounter",
    "ConditionType",
    "DeathSaveOutcome",
    "StatusEffect",
    "ActionLog",
    "LogEntry",
    # Engine
    "CombatSession",
    "KeyCode",
    "KeyEvent",
    "handle_key",
    "type_text",
]
