"""Interaction engine: key events, modes, the session and the key dispatcher.

Modules:
    keys: Rendering-agnostic KeyEvent values.
    menus: Action and combatant menu items.
    modes: The closed union of interaction modes.
    session: CombatSession, the owner of all tracker state.
    input_handler: handle_key, the per-mode key dispatcher.
"""

from __future__ import annotations

from combat_tracker.engine.input_handler import MODE_HANDLERS, handle_key
from combat_tracker.engine.keys import KeyCode, KeyEvent, type_text
from combat_tracker.engine.menus import (
    ACTION_MENU,
    COMBATANT_MENU,
    ActionMenuItem,
    CombatantMenuItem,
)
from combat_tracker.engine.modes import ALL_MODES, InputMode, Mode, Normal
from combat_tracker.engine.session import CombatSession


__all__ = [
    # Keys
    "KeyCode",
    "KeyEvent",
    "type_text",
    # Menus
    "ActionMenuItem",
    "CombatantMenuItem",
    "ACTION_MENU",
    "COMBATANT_MENU",
    # Modes
    "Mode",
    "Normal",
    "InputMode",
    "ALL_MODES",
    # Session
    "CombatSession",
    "handle_key",
    "MODE_HANDLERS",
]
