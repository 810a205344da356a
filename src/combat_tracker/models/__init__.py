"""Pydantic V2 models for the combat tracker.

Modules:
    enums: ConditionType, DeathSaveOutcome and ClearAction.
    components: StatusEffect, DeathSaves and ConcentrationInfo.
    combat: Combatant rule engine and CombatEncounter turn scheduler.
    log: LogEntry and the bounded ActionLog.
    records: Saved-encounter, template and library record shapes.
"""

from __future__ import annotations

from combat_tracker.models.combat import (
    Combatant,
    CombatEncounter,
    DamageReport,
    concentration_dc_for,
)
from combat_tracker.models.components import (
    EXPIRED_DURATION,
    ConcentrationInfo,
    DeathSaves,
    StatusEffect,
)
from combat_tracker.models.enums import ClearAction, ConditionType, DeathSaveOutcome
from combat_tracker.models.log import ActionLog, LogEntry, unix_now
from combat_tracker.models.records import (
    CombatantTemplate,
    EncounterTemplate,
    LibraryCombatant,
    SavedEncounter,
)


__all__ = [
    # Enums
    "ConditionType",
    "DeathSaveOutcome",
    "ClearAction",
    # Components
    "EXPIRED_DURATION",
    "StatusEffect",
    "DeathSaves",
    "ConcentrationInfo",
    # Combat
    "Combatant",
    "CombatEncounter",
    "DamageReport",
    "concentration_dc_for",
    # Log
    "LogEntry",
    "ActionLog",
    "unix_now",
    # Records
    "SavedEncounter",
    "CombatantTemplate",
    "LibraryCombatant",
    "EncounterTemplate",
]
