"""Pydantic V2 models for combatants and the encounter turn scheduler.

The Combatant model owns every hit point, death save, concentration and
status rule for one participant. CombatEncounter owns the roster, keeps
it in initiative order and advances turns and rounds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from combat_tracker.core.constants import (
    CONCENTRATION_MIN_DC,
    CRITICAL_FAIL_FAILURES,
    DEATH_SAVE_SUCCESS_THRESHOLD,
    NATURAL_1,
    NATURAL_20,
    REVIVE_HP,
)
from combat_tracker.core.exceptions import CombatError, ValidationError
from combat_tracker.core.logging import get_logger
from combat_tracker.models.components import ConcentrationInfo, DeathSaves, StatusEffect
from combat_tracker.models.enums import DeathSaveOutcome


logger = get_logger(__name__)


@dataclass(frozen=True)
class DamageReport:
    """What happened when damage was applied to a combatant.

    Attributes:
        amount: Damage requested.
        absorbed_by_temp: Portion soaked up by temporary hit points.
        hp_lost: Portion taken from current hit points.
        dropped_unconscious: True if the hit took the combatant from above 0 to 0.
        death_saves_started: True if a fresh death-save record was created.
        death_save_outcome: Outcome of the automatic failure for damage at 0 HP.
        concentration_dc: DC of the required constitution save, if any.
        concentration_lost: True if concentration ended because the combatant went down.
    """

    amount: int
    absorbed_by_temp: int = 0
    hp_lost: int = 0
    dropped_unconscious: bool = False
    death_saves_started: bool = False
    death_save_outcome: DeathSaveOutcome | None = None
    concentration_dc: int | None = None
    concentration_lost: bool = False

    @property
    def requires_concentration_check(self) -> bool:
        return self.concentration_dc is not None


def concentration_dc_for(damage: int) -> int:
    """Return the constitution save DC for ``damage`` taken while concentrating."""
    return max(CONCENTRATION_MIN_DC, damage // 2)


class Combatant(BaseModel):
    """A participant in a combat encounter.

    Attributes:
        name: Display name.
        initiative: Turn-order priority; higher acts first.
        hp_current: Current hit points, between 0 and hp_max.
        hp_max: Maximum hit points.
        temp_hp: Temporary hit points, consumed before current HP.
        armor_class: Armor class.
        is_player: Player characters make death saves at 0 HP.
        status_effects: Active conditions, at most one per condition type.
        death_saves: Death-save progress while a player is down.
        concentration: Spell currently being concentrated on.
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str = Field(min_length=1, description="Display name")
    initiative: int = Field(default=0, description="Initiative")
    hp_current: int = Field(ge=0, description="Current HP")
    hp_max: int = Field(ge=1, description="Maximum HP")
    temp_hp: int = Field(default=0, ge=0, description="Temporary HP")
    armor_class: int = Field(default=10, ge=0, description="Armor class")
    is_player: bool = False
    status_effects: list[StatusEffect] = Field(default_factory=list)
    death_saves: DeathSaves | None = None
    concentration: ConcentrationInfo | None = None

    @model_validator(mode="after")
    def validate_hit_points(self) -> Self:
        if self.hp_current > self.hp_max:
            raise ValueError(
                f"hp_current ({self.hp_current}) cannot exceed hp_max ({self.hp_max})"
            )
        return self

    @classmethod
    def create(
        cls,
        name: str,
        initiative: int,
        hp_max: int,
        armor_class: int,
        is_player: bool,
    ) -> Combatant:
        """Create a combatant at full health with no afflictions."""
        return cls(
            name=name,
            initiative=initiative,
            hp_current=hp_max,
            hp_max=hp_max,
            armor_class=armor_class,
            is_player=is_player,
        )

    # =========================================================================
    # Derived state
    # =========================================================================

    @property
    def is_unconscious(self) -> bool:
        return self.hp_current == 0

    @property
    def is_dead(self) -> bool:
        return self.death_saves is not None and self.death_saves.is_dead

    @property
    def is_stable(self) -> bool:
        return self.death_saves is not None and self.death_saves.is_stable

    @property
    def needs_death_save(self) -> bool:
        """True for a downed player who is neither dead nor stable."""
        return self.is_player and self.is_unconscious and not self.is_dead and not self.is_stable

    @property
    def hp_percentage(self) -> float:
        if self.hp_max <= 0:
            return 0.0
        return (self.hp_current / self.hp_max) * 100

    # =========================================================================
    # Hit points
    # =========================================================================

    def take_damage(self, amount: int) -> DamageReport:
        """Apply damage and every rule that follows from it.

        Temp HP absorbs first and current HP is floored at 0. A player who
        drops to 0 starts death saves; a player hit while already at 0
        takes one automatic failure. Going down ends concentration outright,
        while staying up reports the DC of the required save.

        Args:
            amount: Damage dealt. Zero or negative amounts change nothing.

        Returns:
            A DamageReport describing the consequences.
        """
        if amount <= 0:
            return DamageReport(amount=max(amount, 0))

        was_unconscious = self.is_unconscious
        was_concentrating = self.concentration is not None

        absorbed = min(self.temp_hp, amount)
        self.temp_hp -= absorbed
        remaining = amount - absorbed
        hp_lost = min(self.hp_current, remaining)
        self.hp_current -= hp_lost

        death_saves_started = False
        outcome: DeathSaveOutcome | None = None
        if self.is_player and self.is_unconscious:
            if not was_unconscious:
                self.ensure_death_saves()
                death_saves_started = True
            elif not self.is_dead:
                outcome = self.fail_death_save_from_damage()

        concentration_dc: int | None = None
        concentration_lost = False
        if self.is_unconscious:
            concentration_lost = was_concentrating
            self.clear_concentration()
        elif was_concentrating:
            concentration_dc = concentration_dc_for(amount)

        return DamageReport(
            amount=amount,
            absorbed_by_temp=absorbed,
            hp_lost=hp_lost,
            dropped_unconscious=not was_unconscious and self.is_unconscious,
            death_saves_started=death_saves_started,
            death_save_outcome=outcome,
            concentration_dc=concentration_dc,
            concentration_lost=concentration_lost,
        )

    def heal(self, amount: int) -> int:
        """Restore hit points up to the maximum.

        Reaching positive HP discards any death-save record. Concentration
        is left untouched.

        Args:
            amount: Hit points to restore. Zero or negative amounts change nothing.

        Returns:
            Hit points actually restored.
        """
        if amount <= 0:
            return 0
        before = self.hp_current
        self.hp_current = min(self.hp_max, self.hp_current + amount)
        if self.hp_current > 0:
            self.death_saves = None
        return self.hp_current - before

    def grant_temp_hp(self, amount: int) -> None:
        """Grant temporary hit points; pools never stack, the larger one wins.

        Raises:
            ValidationError: If amount is negative.
        """
        if amount < 0:
            raise ValidationError(
                "Temp HP must be non-negative",
                field_name="temp_hp",
                invalid_value=amount,
            )
        self.temp_hp = max(self.temp_hp, amount)

    # =========================================================================
    # Death saves
    # =========================================================================

    def ensure_death_saves(self) -> DeathSaves:
        if self.death_saves is None:
            self.death_saves = DeathSaves()
        return self.death_saves

    def fail_death_save_from_damage(self) -> DeathSaveOutcome:
        """Record the automatic failure for taking damage at 0 HP."""
        return self.ensure_death_saves().add_failure(1)

    def apply_death_save_roll(self, roll: int) -> DeathSaveOutcome:
        """Apply a d20 death-save roll.

        A natural 20 wakes the combatant at 1 HP and discards the record.
        A natural 1 counts as two failures. Otherwise 10 or higher is a
        success and anything lower is a failure.

        Args:
            roll: The natural d20 result.

        Returns:
            The resulting DeathSaveOutcome.
        """
        if roll == NATURAL_20:
            self.hp_current = min(REVIVE_HP, self.hp_max)
            self.death_saves = None
            return DeathSaveOutcome.REVIVED

        saves = self.ensure_death_saves()
        if roll == NATURAL_1:
            return saves.add_failure(CRITICAL_FAIL_FAILURES)
        if roll >= DEATH_SAVE_SUCCESS_THRESHOLD:
            return saves.add_success()
        return saves.add_failure(1)

    # =========================================================================
    # Concentration
    # =========================================================================

    def set_concentration(self, info: ConcentrationInfo) -> None:
        self.concentration = info

    def clear_concentration(self) -> ConcentrationInfo | None:
        previous = self.concentration
        self.concentration = None
        return previous

    def resolve_concentration_check(self, roll_total: int, dc: int) -> bool:
        """Resolve the constitution save required after taking damage.

        Args:
            roll_total: The save result including modifiers.
            dc: The DC reported by take_damage.

        Returns:
            True if concentration is maintained.

        Raises:
            CombatError: If the combatant is not concentrating.
        """
        if self.concentration is None:
            raise CombatError("Combatant is not concentrating", combatant_name=self.name)
        if roll_total < dc:
            self.clear_concentration()
            return False
        return True

    # =========================================================================
    # Status effects
    # =========================================================================

    def add_status_effect(self, effect: StatusEffect) -> None:
        """Add a condition, replacing any existing entry for the same condition."""
        for existing in self.status_effects:
            if existing.condition == effect.condition:
                existing.duration = effect.duration
                existing.source = effect.source
                return
        self.status_effects.append(effect)

    def remove_status_effect(self, index: int) -> StatusEffect | None:
        if 0 <= index < len(self.status_effects):
            return self.status_effects.pop(index)
        return None

    def clear_status_effects(self) -> int:
        count = len(self.status_effects)
        self.status_effects.clear()
        return count

    def decrement_status_effects(self) -> list[StatusEffect]:
        """Tick every effect by one round and drop the ones that expired.

        Returns:
            The effects that expired this tick.
        """
        for effect in self.status_effects:
            effect.decrement_duration()
        expired = [e for e in self.status_effects if e.is_expired]
        self.status_effects = [e for e in self.status_effects if not e.is_expired]
        return expired


class CombatEncounter(BaseModel):
    """Initiative-ordered roster with turn and round tracking.

    Attributes:
        combatants: Roster sorted by initiative, highest first.
        current_turn_index: Index of the combatant whose turn it is.
        round_number: Current round, starting at 1.
    """

    model_config = ConfigDict(validate_assignment=True)

    combatants: list[Combatant] = Field(default_factory=list)
    current_turn_index: int = Field(default=0, ge=0)
    round_number: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def validate_turn_index(self) -> Self:
        if self.combatants and self.current_turn_index >= len(self.combatants):
            raise ValueError(
                f"current_turn_index {self.current_turn_index} is out of range "
                f"for {len(self.combatants)} combatants"
            )
        return self

    def __len__(self) -> int:
        return len(self.combatants)

    @property
    def is_empty(self) -> bool:
        return not self.combatants

    @property
    def current_combatant(self) -> Combatant | None:
        if not self.combatants:
            return None
        return self.combatants[self.current_turn_index]

    def get(self, index: int) -> Combatant | None:
        if 0 <= index < len(self.combatants):
            return self.combatants[index]
        return None

    def sort_by_initiative(self) -> None:
        # sort() stays stable with reverse=True, so ties keep insertion order
        self.combatants.sort(key=lambda c: c.initiative, reverse=True)

    def add_combatant(self, combatant: Combatant) -> None:
        """Insert a combatant and restore initiative order."""
        self.combatants.append(combatant)
        self.sort_by_initiative()
        if len(self.combatants) == 1:
            self.current_turn_index = 0
        logger.debug(
            "Combatant added",
            combatant=combatant.name,
            initiative=combatant.initiative,
            roster_size=len(self.combatants),
        )

    def remove_combatant(self, index: int) -> Combatant | None:
        """Remove the combatant at ``index``.

        The turn cursor wraps to 0 if it would point past the end.

        Returns:
            The removed combatant, or None if the index is out of range.
        """
        if not 0 <= index < len(self.combatants):
            return None
        removed = self.combatants.pop(index)
        if self.current_turn_index >= len(self.combatants):
            self.current_turn_index = 0
        logger.debug("Combatant removed", combatant=removed.name)
        return removed

    def next_turn(self) -> None:
        """End the current turn.

        The current combatant's status effects tick down, then the cursor
        advances. Wrapping past the last combatant starts a new round.
        """
        current = self.current_combatant
        if current is None:
            return
        expired = current.decrement_status_effects()
        if expired:
            logger.debug(
                "Status effects expired",
                combatant=current.name,
                conditions=[e.condition.value for e in expired],
            )
        next_index = self.current_turn_index + 1
        if next_index >= len(self.combatants):
            self.current_turn_index = 0
            self.round_number += 1
            logger.info("New round", round=self.round_number)
        else:
            self.current_turn_index = next_index

    def previous_turn(self) -> None:
        """Step the cursor back one turn.

        Wrapping before the first combatant goes back a round, never below
        round 1. Status effect durations are not restored.
        """
        if not self.combatants:
            return
        if self.current_turn_index == 0:
            self.current_turn_index = len(self.combatants) - 1
            self.round_number = max(1, self.round_number - 1)
        else:
            self.current_turn_index -= 1

    def clear(self) -> None:
        """Empty the roster and reset to round 1."""
        self.combatants = []
        self.current_turn_index = 0
        self.round_number = 1


__all__ = [
    "DamageReport",
    "concentration_dc_for",
    "Combatant",
    "CombatEncounter",
]
