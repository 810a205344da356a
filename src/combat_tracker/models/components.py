"""Small value components attached to a combatant.

StatusEffect, DeathSaves and ConcentrationInfo carry no behaviour beyond
their own counters; the Combatant model decides when they are created,
replaced or discarded.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from combat_tracker.core.constants import MAX_DEATH_SAVES
from combat_tracker.models.enums import ConditionType, DeathSaveOutcome


EXPIRED_DURATION = -1
"""Sentinel duration marking a timed effect that has run out."""


class StatusEffect(BaseModel):
    """A condition applied to a combatant.

    Attributes:
        condition: The applied condition.
        duration: Rounds remaining. 0 means indefinite, negative means expired.
        source: Optional free-text origin (spell, creature, trap).
    """

    model_config = ConfigDict(validate_assignment=True)

    condition: ConditionType
    duration: int = Field(default=0, description="Remaining rounds; 0 is indefinite")
    source: str | None = Field(default=None, description="What applied the condition")

    @property
    def is_expired(self) -> bool:
        return self.duration < 0

    @property
    def is_indefinite(self) -> bool:
        return self.duration == 0

    def decrement_duration(self) -> None:
        """Tick one round off a timed effect.

        A timed effect that reaches 0 is flipped to the expired sentinel so
        it can never be mistaken for an indefinite one.
        """
        if self.duration > 0:
            self.duration -= 1
            if self.duration == 0:
                self.duration = EXPIRED_DURATION


class DeathSaves(BaseModel):
    """Death saving throw progress for a downed player character.

    Attributes:
        successes: Successful saves, 0 to 3.
        failures: Failed saves, 0 to 3.
        is_stable: Set once three successes are recorded.
    """

    model_config = ConfigDict(validate_assignment=True)

    successes: int = Field(default=0, ge=0, le=MAX_DEATH_SAVES)
    failures: int = Field(default=0, ge=0, le=MAX_DEATH_SAVES)
    is_stable: bool = False

    @property
    def is_dead(self) -> bool:
        return self.failures >= MAX_DEATH_SAVES

    def add_success(self) -> DeathSaveOutcome:
        """Record one success.

        Returns:
            STABILIZED on the third success, otherwise ONGOING.
        """
        self.successes = min(self.successes + 1, MAX_DEATH_SAVES)
        if self.successes >= MAX_DEATH_SAVES:
            self.is_stable = True
            return DeathSaveOutcome.STABILIZED
        return DeathSaveOutcome.ONGOING

    def add_failure(self, count: int = 1) -> DeathSaveOutcome:
        """Record one or more failures, capped at three.

        Any failure ends stability.

        Args:
            count: Number of failures to add (2 for a natural 1).

        Returns:
            DIED when the cap is reached, otherwise ONGOING.
        """
        self.is_stable = False
        self.failures = min(self.failures + count, MAX_DEATH_SAVES)
        if self.is_dead:
            return DeathSaveOutcome.DIED
        return DeathSaveOutcome.ONGOING


class ConcentrationInfo(BaseModel):
    """The spell a combatant is concentrating on."""

    model_config = ConfigDict(frozen=True)

    spell_name: str = Field(min_length=1)
    constitution_modifier: int = 0


__all__ = [
    "EXPIRED_DURATION",
    "StatusEffect",
    "DeathSaves",
    "ConcentrationInfo",
]
