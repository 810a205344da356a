"""Enumerations for conditions and death-save outcomes.

Condition descriptions are condensed from the SRD 5.1 condition list and
are meant for at-the-table reference, not as full rules text.
"""

from __future__ import annotations

from enum import StrEnum


class ConditionType(StrEnum):
    """The fourteen standard conditions, in reference-card order."""

    BLINDED = "blinded"
    CHARMED = "charmed"
    DEAFENED = "deafened"
    FRIGHTENED = "frightened"
    GRAPPLED = "grappled"
    INCAPACITATED = "incapacitated"
    INVISIBLE = "invisible"
    PARALYZED = "paralyzed"
    PETRIFIED = "petrified"
    POISONED = "poisoned"
    PRONE = "prone"
    RESTRAINED = "restrained"
    STUNNED = "stunned"
    UNCONSCIOUS = "unconscious"

    @classmethod
    def ordered(cls) -> list[ConditionType]:
        """Return every condition in menu order."""
        return list(cls)

    @classmethod
    def from_number(cls, number: int) -> ConditionType | None:
        """Look up a condition by its 1-based menu number.

        Args:
            number: Position in the condition menu, starting at 1.

        Returns:
            The matching condition, or None when out of range.
        """
        conditions = cls.ordered()
        if 1 <= number <= len(conditions):
            return conditions[number - 1]
        return None

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def mechanical_effects(self) -> str:
        """Short combat summary, kept under 80 characters for side panels."""
        return _MECHANICAL_EFFECTS[self]


_DESCRIPTIONS: dict[ConditionType, str] = {
    ConditionType.BLINDED: (
        "Automatically fails sight-based checks; attack rolls against have advantage; "
        "their attacks have disadvantage."
    ),
    ConditionType.CHARMED: "Can't attack charmer; charmer has advantage on social checks.",
    ConditionType.DEAFENED: "Automatically fails hearing-based checks.",
    ConditionType.FRIGHTENED: (
        "Disadvantage on ability checks/attacks while source in sight; "
        "can't willingly move closer to source."
    ),
    ConditionType.GRAPPLED: "Speed becomes 0; ends if grappler is incapacitated or moved away.",
    ConditionType.INCAPACITATED: "Can't take actions or reactions.",
    ConditionType.INVISIBLE: (
        "Can't be seen without magic; attacks against have disadvantage; "
        "their attacks have advantage."
    ),
    ConditionType.PARALYZED: (
        "Incapacitated; can't move/speak; auto fail Str/Dex saves; "
        "attacks have advantage and crit within 5 ft."
    ),
    ConditionType.PETRIFIED: (
        "Transformed to stone; incapacitated; attacks have advantage; "
        "resists all damage; immune to poison/disease."
    ),
    ConditionType.POISONED: "Disadvantage on attack rolls and ability checks.",
    ConditionType.PRONE: (
        "Only crawl; attacks vs them have advantage if within 5 ft, otherwise disadvantage; "
        "their attacks have disadvantage."
    ),
    ConditionType.RESTRAINED: (
        "Speed 0; attacks vs have advantage; their attacks have disadvantage; "
        "Dex saves at disadvantage."
    ),
    ConditionType.STUNNED: (
        "Incapacitated; can't move; can speak falteringly; auto fail Str/Dex saves; "
        "attacks have advantage."
    ),
    ConditionType.UNCONSCIOUS: (
        "Incapacitated; drops prone; drops what holds; auto fail Str/Dex saves; "
        "attacks have advantage and crit within 5 ft."
    ),
}

_MECHANICAL_EFFECTS: dict[ConditionType, str] = {
    ConditionType.BLINDED: "Attacks: disadv; Attacks vs: adv; Fails sight checks",
    ConditionType.CHARMED: "Can't attack charmer; Charmer: adv on social",
    ConditionType.DEAFENED: "Fails hearing checks",
    ConditionType.FRIGHTENED: "Attacks/checks: disadv; Can't move closer",
    ConditionType.GRAPPLED: "Speed: 0",
    ConditionType.INCAPACITATED: "No actions/reactions",
    ConditionType.INVISIBLE: "Attacks: adv; Attacks vs: disadv",
    ConditionType.PARALYZED: "Attacks vs: adv + crit (5ft); Fails STR/DEX saves",
    ConditionType.PETRIFIED: "Attacks vs: adv; Resist all damage",
    ConditionType.POISONED: "Attacks/checks: disadv",
    ConditionType.PRONE: "Attacks vs: adv (melee 5ft), disadv (ranged); Attacks: disadv",
    ConditionType.RESTRAINED: "Speed: 0; Attacks vs: adv; Attacks: disadv; DEX saves: disadv",
    ConditionType.STUNNED: "Attacks vs: adv; Fails STR/DEX saves",
    ConditionType.UNCONSCIOUS: "Prone; Attacks vs: adv + crit (5ft); Fails STR/DEX saves",
}


class DeathSaveOutcome(StrEnum):
    """Result of recording a death save, rolled or automatic."""

    ONGOING = "ongoing"
    STABILIZED = "stabilized"
    DIED = "died"
    REVIVED = "revived"


class ClearAction(StrEnum):
    """Choices offered by the clear menu."""

    CONCENTRATION = "concentration"
    STATUS_EFFECTS = "status_effects"

    @property
    def label(self) -> str:
        return "Concentration" if self is ClearAction.CONCENTRATION else "Status Effects"

    def toggled(self) -> ClearAction:
        if self is ClearAction.CONCENTRATION:
            return ClearAction.STATUS_EFFECTS
        return ClearAction.CONCENTRATION


__all__ = [
    "ConditionType",
    "DeathSaveOutcome",
    "ClearAction",
]
