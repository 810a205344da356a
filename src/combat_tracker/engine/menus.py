"""Items of the action and combatant menus, in display order."""

from __future__ import annotations

from enum import StrEnum


class ActionMenuItem(StrEnum):
    """Entries of the combat action menu (``m``)."""

    DAMAGE = "Deal Damage"
    HEAL = "Heal"
    ADD_STATUS = "Add Status Effect"
    DEATH_SAVE = "Roll Death Save"
    CONCENTRATION = "Set Concentration"
    CLEAR = "Clear Concentration/Status"
    TEMP_HP = "Grant Temp HP"

    @property
    def label(self) -> str:
        return self.value


class CombatantMenuItem(StrEnum):
    """Entries of the roster management menu (``b``)."""

    ADD_COMBATANT = "Add Combatant"
    REMOVE_COMBATANT = "Remove Combatant"
    LOAD_TEMPLATE = "Add from Template"
    SAVE_TEMPLATE = "Save as Template"
    LOAD_LIBRARY = "Load Encounter Library"
    SAVE_LIBRARY = "Save to Encounter Library"

    @property
    def label(self) -> str:
        return self.value


ACTION_MENU: tuple[ActionMenuItem, ...] = tuple(ActionMenuItem)
COMBATANT_MENU: tuple[CombatantMenuItem, ...] = tuple(CombatantMenuItem)


__all__ = [
    "ActionMenuItem",
    "CombatantMenuItem",
    "ACTION_MENU",
    "COMBATANT_MENU",
]
