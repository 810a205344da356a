"""Stored record shapes: saved encounters, combatant templates and library entries.

Templates and library entries hold stat blocks only. Live state such as
current HP, temp HP, status effects, death saves and concentration is
never stored in them and is regenerated fresh when they are used.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from combat_tracker.models.combat import Combatant, CombatEncounter
from combat_tracker.models.log import LogEntry, unix_now


class SavedEncounter(BaseModel):
    """Complete snapshot of an encounter and its action history."""

    encounter: CombatEncounter
    log: list[LogEntry] = Field(default_factory=list)
    saved_at: int = Field(default_factory=unix_now)
    version: str


class CombatantTemplate(BaseModel):
    """Reusable stat block for quickly adding a known combatant.

    Attributes:
        name: Display name; templates are unique by case-insensitive name.
        hp_max: Maximum hit points.
        armor_class: Armor class.
        initiative: Suggested initiative, pre-filled when the template is used.
        is_player: Whether the combatant is a player character.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    hp_max: int = Field(ge=1)
    armor_class: int = Field(ge=0)
    initiative: int = 0
    is_player: bool = False

    @classmethod
    def from_combatant(cls, combatant: Combatant) -> CombatantTemplate:
        return cls(
            name=combatant.name,
            hp_max=combatant.hp_max,
            armor_class=combatant.armor_class,
            initiative=combatant.initiative,
            is_player=combatant.is_player,
        )

    def matches(self, name: str) -> bool:
        return self.name.lower() == name.lower()


class LibraryCombatant(BaseModel):
    """Combatant entry in a library blueprint; no initiative and no live state."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    hp_max: int = Field(ge=1)
    armor_class: int = Field(ge=0)
    is_player: bool = False

    @classmethod
    def from_combatant(cls, combatant: Combatant) -> LibraryCombatant:
        return cls(
            name=combatant.name,
            hp_max=combatant.hp_max,
            armor_class=combatant.armor_class,
            is_player=combatant.is_player,
        )

    def instantiate(self, initiative: int) -> Combatant:
        """Build a fresh, full-health combatant with the given initiative."""
        return Combatant.create(
            name=self.name,
            initiative=initiative,
            hp_max=self.hp_max,
            armor_class=self.armor_class,
            is_player=self.is_player,
        )


class EncounterTemplate(BaseModel):
    """A named encounter blueprint stored in the library.

    Attributes:
        name: Library entry name, also used as the file stem.
        description: Short description, required.
        difficulty: Free-text difficulty label, may be empty.
        combatants: Stat blocks to instantiate on load.
        created_at: Unix seconds when the entry was saved.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str
    difficulty: str = ""
    combatants: tuple[LibraryCombatant, ...] = ()
    created_at: int = Field(default_factory=unix_now)

    @classmethod
    def from_encounter(
        cls,
        encounter: CombatEncounter,
        *,
        name: str,
        description: str,
        difficulty: str = "",
    ) -> EncounterTemplate:
        return cls(
            name=name,
            description=description,
            difficulty=difficulty,
            combatants=tuple(LibraryCombatant.from_combatant(c) for c in encounter.combatants),
        )


__all__ = [
    "SavedEncounter",
    "CombatantTemplate",
    "LibraryCombatant",
    "EncounterTemplate",
]
