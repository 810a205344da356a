"""The closed set of interaction modes.

Each mode is a frozen pydantic model holding only the scratch input its
own prompt needs. Modes are never mutated: every key press produces a
new value through ``evolve`` and the session swaps it in.

Shapes:
    idle: Normal.
    roster selection: a cursor over the live roster plus an optional
        numeric amount (DealingDamage, Healing, Removing, ...).
    filtered list: a cursor over names narrowed by typed text
        (SelectingTemplate, LoadingEncounter, LoadingLibrary).
    wizard: linear steps gated on Enter (AddingCombatant,
        ApplyingConcentration, SavingLibrary, SettingLibraryInitiatives).
    confirmation: a yes/no prompt carrying its pending payload.
"""

from __future__ import annotations

from typing import Any, ClassVar, Self, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

from combat_tracker.models.enums import ClearAction, ConditionType
from combat_tracker.models.records import EncounterTemplate, LibraryCombatant


def wrap_index(index: int, delta: int, length: int) -> int:
    """Move ``index`` by ``delta`` with wraparound over ``length`` items.

    Returns 0 for an empty list.
    """
    if length <= 0:
        return 0
    return (index + delta) % length


def filter_names(names: list[str], query: str) -> list[str]:
    """Case-insensitive substring filter preserving order."""
    needle = query.lower()
    return [name for name in names if needle in name.lower()]


class Mode(BaseModel):
    """Base class for every interaction mode."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def evolve(self, **changes: Any) -> Self:
        """Return a copy with ``changes`` applied."""
        return self.model_copy(update=changes)


# =============================================================================
# Idle
# =============================================================================


class Normal(Mode):
    """No multi-step input in progress."""


# =============================================================================
# Roster Selection
# =============================================================================


class RosterSelection(Mode):
    """Cursor over the live roster, optionally collecting a numeric amount.

    Attributes:
        selected_index: Highlighted combatant.
        input: Digits typed so far.
    """

    allow_empty_confirm: ClassVar[bool] = False
    accepts_amount: ClassVar[bool] = False

    selected_index: int = Field(default=0, ge=0)
    input: str = ""


class DealingDamage(RosterSelection):
    accepts_amount: ClassVar[bool] = True


class Healing(RosterSelection):
    accepts_amount: ClassVar[bool] = True


class GrantingTempHp(RosterSelection):
    accepts_amount: ClassVar[bool] = True


class RollingDeathSave(RosterSelection):
    accepts_amount: ClassVar[bool] = True


class Removing(RosterSelection):
    allow_empty_confirm: ClassVar[bool] = True


class SavingTemplate(RosterSelection):
    allow_empty_confirm: ClassVar[bool] = True


class ConcentrationTarget(RosterSelection):
    allow_empty_confirm: ClassVar[bool] = True


class ClearingConcentration(RosterSelection):
    allow_empty_confirm: ClassVar[bool] = True


class ClearingStatus(RosterSelection):
    allow_empty_confirm: ClassVar[bool] = True


class AddingStatus(RosterSelection):
    allow_empty_confirm: ClassVar[bool] = True


# =============================================================================
# Per-combatant Follow-ups
# =============================================================================


class SelectingCondition(Mode):
    """Typing ``<condition number> <duration>`` for the chosen combatant."""

    combatant_index: int = Field(ge=0)
    input: str = ""


class ApplyingConcentration(Mode):
    """Two-step wizard: spell name, then constitution modifier."""

    LAST_STEP: ClassVar[int] = 1

    combatant_index: int = Field(ge=0)
    step: int = Field(default=0, ge=0, le=1)
    spell_name: str = ""
    con_mod: str = ""


class ConcentrationCheck(Mode):
    """Waiting for the constitution save total after damage."""

    combatant_index: int = Field(ge=0)
    dc: int
    input: str = ""


class ClearActionSelection(Mode):
    """Choosing between clearing concentration or status effects."""

    choice: ClearAction = ClearAction.CONCENTRATION


class SelectingStatusToClear(Mode):
    """Cursor over one combatant's status effects."""

    combatant_index: int = Field(ge=0)
    selected_status_index: int = Field(default=0, ge=0)


# =============================================================================
# Wizards
# =============================================================================


class AddingCombatant(Mode):
    """Five-step wizard: name, initiative, HP, AC, player flag."""

    LAST_STEP: ClassVar[int] = 4

    step: int = Field(default=0, ge=0, le=4)
    name: str = ""
    initiative: str = ""
    hp: str = ""
    ac: str = ""
    is_player: str = ""

    @property
    def player_flag(self) -> bool:
        return self.is_player.lower() in {"y", "yes"}


class SavingLibrary(Mode):
    """Three-step wizard: name, description, optional difficulty."""

    LAST_STEP: ClassVar[int] = 2

    step: int = Field(default=0, ge=0, le=2)
    name: str = ""
    description: str = ""
    difficulty: str = ""


class SettingLibraryInitiatives(Mode):
    """Entering an initiative for each combatant of a library blueprint in turn.

    Attributes:
        template: The blueprint being loaded.
        initiatives: One input buffer per blueprint combatant.
        current_index: Which combatant is being prompted.
    """

    template: EncounterTemplate
    initiatives: tuple[str, ...]
    current_index: int = Field(default=0, ge=0)

    @classmethod
    def for_template(cls, template: EncounterTemplate) -> SettingLibraryInitiatives:
        return cls(template=template, initiatives=("",) * len(template.combatants))

    @property
    def current_combatant(self) -> LibraryCombatant:
        return self.template.combatants[self.current_index]

    @property
    def current_input(self) -> str:
        return self.initiatives[self.current_index]

    @property
    def is_last(self) -> bool:
        return self.current_index + 1 >= len(self.initiatives)

    def with_current_input(self, value: str) -> SettingLibraryInitiatives:
        buffers = list(self.initiatives)
        buffers[self.current_index] = value
        return self.evolve(initiatives=tuple(buffers))


# =============================================================================
# Filtered Lists
# =============================================================================


class FilteredList(Mode):
    """Cursor over a name list narrowed by typed text."""

    selected_index: int = Field(default=0, ge=0)
    input: str = ""


class SelectingTemplate(FilteredList):
    pass


class LoadingEncounter(FilteredList):
    pass


class LoadingLibrary(FilteredList):
    pass


class SavingEncounter(Mode):
    """Typing a filename for the encounter snapshot."""

    input: str = ""


# =============================================================================
# Menus
# =============================================================================


class ActionMenu(Mode):
    selected: int = Field(default=0, ge=0)


class CombatantMenu(Mode):
    selected: int = Field(default=0, ge=0)


class QuickReference(Mode):
    """Browsing the condition reference card."""

    selected: int = Field(default=0, ge=0, lt=len(ConditionType))


# =============================================================================
# Confirmations
# =============================================================================


class LibrarySaveRequest(BaseModel):
    """A validated, trimmed request to save the encounter to the library."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    difficulty: str = ""


class ConfirmingLibraryOverwrite(Mode):
    request: LibrarySaveRequest


class ConfirmingLibraryLoad(Mode):
    name: str


InputMode: TypeAlias = (
    Normal
    | AddingCombatant
    | DealingDamage
    | Healing
    | GrantingTempHp
    | RollingDeathSave
    | Removing
    | SavingTemplate
    | ConcentrationTarget
    | ClearingConcentration
    | ClearingStatus
    | AddingStatus
    | SelectingCondition
    | ApplyingConcentration
    | ConcentrationCheck
    | ClearActionSelection
    | SelectingStatusToClear
    | SelectingTemplate
    | ActionMenu
    | CombatantMenu
    | QuickReference
    | SavingEncounter
    | LoadingEncounter
    | SavingLibrary
    | LoadingLibrary
    | SettingLibraryInitiatives
    | ConfirmingLibraryOverwrite
    | ConfirmingLibraryLoad
)

ALL_MODES: tuple[type[Mode], ...] = (
    Normal,
    AddingCombatant,
    DealingDamage,
    Healing,
    GrantingTempHp,
    RollingDeathSave,
    Removing,
    SavingTemplate,
    ConcentrationTarget,
    ClearingConcentration,
    ClearingStatus,
    AddingStatus,
    SelectingCondition,
    ApplyingConcentration,
    ConcentrationCheck,
    ClearActionSelection,
    SelectingStatusToClear,
    SelectingTemplate,
    ActionMenu,
    CombatantMenu,
    QuickReference,
    SavingEncounter,
    LoadingEncounter,
    SavingLibrary,
    LoadingLibrary,
    SettingLibraryInitiatives,
    ConfirmingLibraryOverwrite,
    ConfirmingLibraryLoad,
)


__all__ = [
    "wrap_index",
    "filter_names",
    "Mode",
    "Normal",
    "RosterSelection",
    "DealingDamage",
    "Healing",
    "GrantingTempHp",
    "RollingDeathSave",
    "Removing",
    "SavingTemplate",
    "ConcentrationTarget",
    "ClearingConcentration",
    "ClearingStatus",
    "AddingStatus",
    "SelectingCondition",
    "ApplyingConcentration",
    "ConcentrationCheck",
    "ClearActionSelection",
    "SelectingStatusToClear",
    "AddingCombatant",
    "SavingLibrary",
    "SettingLibraryInitiatives",
    "FilteredList",
    "SelectingTemplate",
    "LoadingEncounter",
    "LoadingLibrary",
    "SavingEncounter",
    "ActionMenu",
    "CombatantMenu",
    "QuickReference",
    "LibrarySaveRequest",
    "ConfirmingLibraryOverwrite",
    "ConfirmingLibraryLoad",
    "InputMode",
    "ALL_MODES",
]
