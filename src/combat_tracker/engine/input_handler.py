"""Key dispatcher: maps a key event and the current mode to the next state.

Every mode class has exactly one handler in MODE_HANDLERS. A handler either
replaces ``session.mode`` with an evolved copy or hands finished input to a
CombatSession operation. Errors raised by those operations are caught here,
in one place, and shown to the user.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from combat_tracker.core.constants import is_record_name_char
from combat_tracker.core.exceptions import TrackerError, ValidationError
from combat_tracker.core.logging import get_logger
from combat_tracker.engine.keys import KeyCode, KeyEvent
from combat_tracker.engine.menus import (
    ACTION_MENU,
    COMBATANT_MENU,
    ActionMenuItem,
    CombatantMenuItem,
)
from combat_tracker.engine.modes import (
    ActionMenu,
    AddingCombatant,
    AddingStatus,
    ApplyingConcentration,
    ClearActionSelection,
    ClearingConcentration,
    ClearingStatus,
    CombatantMenu,
    ConcentrationCheck,
    ConcentrationTarget,
    ConfirmingLibraryLoad,
    ConfirmingLibraryOverwrite,
    DealingDamage,
    GrantingTempHp,
    Healing,
    LoadingEncounter,
    LoadingLibrary,
    Mode,
    Normal,
    QuickReference,
    Removing,
    RollingDeathSave,
    RosterSelection,
    SavingEncounter,
    SavingLibrary,
    SavingTemplate,
    SelectingCondition,
    SelectingStatusToClear,
    SelectingTemplate,
    SettingLibraryInitiatives,
    filter_names,
    wrap_index,
)
from combat_tracker.engine.session import (
    NO_LIBRARY_ENTRIES,
    NO_SAVED_ENCOUNTERS,
    CombatSession,
    parse_int,
    validate_record_name,
)
from combat_tracker.models.enums import ConditionType


logger = get_logger(__name__)

Handler = Callable[[CombatSession, Any, KeyEvent], None]
SessionAction = Callable[[CombatSession], None]


def handle_key(session: CombatSession, key: KeyEvent) -> None:
    """Process one key event against the session.

    Esc from any non-idle mode returns to Normal and clears the message.
    Any TrackerError raised while handling the key becomes the message and
    the session returns to Normal.

    Args:
        session: The session to update.
        key: The key that was pressed.
    """
    mode = session.mode
    if key.code is KeyCode.ESC and not isinstance(mode, Normal):
        session.cancel_input()
        return

    handler = MODE_HANDLERS[type(mode)]
    try:
        handler(session, mode, key)
    except TrackerError as exc:
        session.fail(exc)


def _typed(key: KeyEvent) -> str | None:
    """The character of a plain CHAR event, or None."""
    if key.code is KeyCode.CHAR and not key.ctrl:
        return key.char
    return None


def _is_digit(char: str | None) -> bool:
    return char is not None and char.isascii() and char.isdigit()


# =============================================================================
# Normal
# =============================================================================


_NORMAL_BINDINGS: dict[str, SessionAction] = {
    "q": CombatSession.quit,
    "n": CombatSession.next_turn,
    "p": CombatSession.previous_turn,
    "a": CombatSession.start_adding_combatant,
    "d": CombatSession.start_dealing_damage,
    "h": CombatSession.start_healing,
    "s": CombatSession.start_adding_status,
    "v": CombatSession.start_rolling_death_save,
    "c": CombatSession.start_concentration_target,
    "x": CombatSession.start_clear_choice,
    "m": CombatSession.open_action_menu,
    "b": CombatSession.open_combatant_menu,
    "?": CombatSession.open_quick_reference,
}

_CTRL_BINDINGS: dict[str, SessionAction] = {
    "s": CombatSession.start_saving_encounter,
    "o": CombatSession.start_loading_encounter,
}


def _handle_normal(session: CombatSession, mode: Normal, key: KeyEvent) -> None:
    if key.code is not KeyCode.CHAR or key.char is None:
        return
    bindings = _CTRL_BINDINGS if key.ctrl else _NORMAL_BINDINGS
    action = bindings.get(key.char.lower() if key.ctrl else key.char)
    if action is not None:
        action(session)


# =============================================================================
# Roster Selection
# =============================================================================


_AMOUNT_ERRORS: dict[type[RosterSelection], str] = {
    DealingDamage: "Invalid damage value!",
    Healing: "Invalid heal value!",
    GrantingTempHp: "Invalid temp HP value!",
    RollingDeathSave: "Invalid roll value!",
}

_AMOUNT_ACTIONS: dict[type[RosterSelection], Callable[[CombatSession, int, int], Any]] = {
    DealingDamage: CombatSession.complete_deal_damage,
    Healing: CombatSession.complete_heal,
    GrantingTempHp: CombatSession.complete_grant_temp_hp,
    RollingDeathSave: CombatSession.complete_death_save_roll,
}


def _begin_concentration(session: CombatSession, index: int) -> None:
    session.combatant_at(index)
    session.mode = ApplyingConcentration(combatant_index=index)


_TARGET_ACTIONS: dict[type[RosterSelection], Callable[[CombatSession, int], Any]] = {
    Removing: CombatSession.complete_remove,
    SavingTemplate: CombatSession.save_template_from_combatant,
    ConcentrationTarget: _begin_concentration,
    ClearingConcentration: CombatSession.complete_clear_concentration,
    ClearingStatus: CombatSession.begin_clear_status,
    AddingStatus: CombatSession.begin_add_status,
}


def _handle_roster_selection(
    session: CombatSession,
    mode: RosterSelection,
    key: KeyEvent,
) -> None:
    roster_size = len(session.encounter)
    char = _typed(key)

    if key.code is KeyCode.UP:
        session.mode = mode.evolve(selected_index=wrap_index(mode.selected_index, -1, roster_size))
    elif key.code is KeyCode.DOWN:
        session.mode = mode.evolve(selected_index=wrap_index(mode.selected_index, 1, roster_size))
    elif key.code is KeyCode.BACKSPACE:
        session.mode = mode.evolve(input=mode.input[:-1])
    elif mode.accepts_amount and _is_digit(char):
        session.mode = mode.evolve(input=mode.input + char)
    elif key.code is KeyCode.ENTER:
        mode_type = type(mode)
        if mode.accepts_amount:
            amount = parse_int(mode.input, _AMOUNT_ERRORS[mode_type], field_name="amount")
            _AMOUNT_ACTIONS[mode_type](session, mode.selected_index, amount)
        else:
            _TARGET_ACTIONS[mode_type](session, mode.selected_index)


# =============================================================================
# Per-combatant Follow-ups
# =============================================================================


def _parse_condition_input(text: str) -> tuple[ConditionType, int]:
    """Parse ``"<condition number> <duration>"``.

    Raises:
        ValidationError: On a malformed pair, an unknown condition number
            or a negative duration.
    """
    parts = text.split()
    if len(parts) != 2:
        raise ValidationError(
            "Enter condition number and duration (e.g., 1 3)",
            field_name="condition",
            invalid_value=text,
        )
    number = parse_int(parts[0], "Invalid condition number", field_name="condition")
    condition = ConditionType.from_number(number)
    if condition is None:
        raise ValidationError(
            "Invalid condition number",
            field_name="condition",
            invalid_value=number,
        )
    duration = parse_int(parts[1], "Duration must be a non-negative number", field_name="duration")
    return condition, duration


def _handle_selecting_condition(
    session: CombatSession,
    mode: SelectingCondition,
    key: KeyEvent,
) -> None:
    char = _typed(key)
    if _is_digit(char) or (char == " " and " " not in mode.input):
        session.mode = mode.evolve(input=mode.input + char)
    elif key.code is KeyCode.BACKSPACE:
        session.mode = mode.evolve(input=mode.input[:-1])
    elif key.code is KeyCode.ENTER:
        condition, duration = _parse_condition_input(mode.input)
        session.complete_add_status(mode.combatant_index, condition, duration)


def _handle_applying_concentration(
    session: CombatSession,
    mode: ApplyingConcentration,
    key: KeyEvent,
) -> None:
    char = _typed(key)
    field = "spell_name" if mode.step == 0 else "con_mod"
    current = getattr(mode, field)

    if key.code is KeyCode.BACKSPACE:
        session.mode = mode.evolve(**{field: current[:-1]})
    elif char is not None:
        if mode.step == 0 or _is_digit(char) or char == "-":
            session.mode = mode.evolve(**{field: current + char})
    elif key.code is KeyCode.ENTER:
        if mode.step < ApplyingConcentration.LAST_STEP:
            if not mode.spell_name.strip():
                raise ValidationError("Spell name cannot be empty", field_name="spell_name")
            session.mode = mode.evolve(step=mode.step + 1)
        else:
            session.complete_apply_concentration(
                mode.combatant_index, mode.spell_name, mode.con_mod
            )


def _handle_concentration_check(
    session: CombatSession,
    mode: ConcentrationCheck,
    key: KeyEvent,
) -> None:
    char = _typed(key)
    if _is_digit(char):
        session.mode = mode.evolve(input=mode.input + char)
    elif key.code is KeyCode.BACKSPACE:
        session.mode = mode.evolve(input=mode.input[:-1])
    elif key.code is KeyCode.ENTER:
        total = parse_int(mode.input, "Invalid roll total", field_name="roll_total")
        session.complete_concentration_check(mode.combatant_index, mode.dc, total)


def _handle_clear_action_selection(
    session: CombatSession,
    mode: ClearActionSelection,
    key: KeyEvent,
) -> None:
    if key.code in (KeyCode.UP, KeyCode.DOWN):
        session.mode = mode.evolve(choice=mode.choice.toggled())
    elif key.code is KeyCode.ENTER:
        session.mode = Normal()
        session.start_clearing(mode.choice)


def _handle_selecting_status_to_clear(
    session: CombatSession,
    mode: SelectingStatusToClear,
    key: KeyEvent,
) -> None:
    if key.code in (KeyCode.UP, KeyCode.DOWN):
        count = len(session.combatant_at(mode.combatant_index).status_effects)
        delta = -1 if key.code is KeyCode.UP else 1
        session.mode = mode.evolve(
            selected_status_index=wrap_index(mode.selected_status_index, delta, count)
        )
    elif key.code is KeyCode.ENTER:
        session.complete_clear_status_effect(mode.combatant_index, mode.selected_status_index)


# =============================================================================
# Wizards
# =============================================================================


_COMBATANT_FIELDS = ("name", "initiative", "hp", "ac", "is_player")


def _accepts_combatant_char(step: int, char: str) -> bool:
    if step == 0:
        return True
    if step == 1:
        return _is_digit(char) or char == "-"
    if step in (2, 3):
        return _is_digit(char)
    return char in "yYnN"


def _handle_adding_combatant(
    session: CombatSession,
    mode: AddingCombatant,
    key: KeyEvent,
) -> None:
    char = _typed(key)
    field = _COMBATANT_FIELDS[mode.step]
    current = getattr(mode, field)

    if key.code is KeyCode.BACKSPACE:
        session.mode = mode.evolve(**{field: current[:-1]})
    elif char is not None:
        if not _accepts_combatant_char(mode.step, char):
            return
        value = char.lower() if mode.step == AddingCombatant.LAST_STEP else current + char
        session.mode = mode.evolve(**{field: value})
    elif key.code is KeyCode.ENTER:
        if mode.step < AddingCombatant.LAST_STEP:
            session.mode = mode.evolve(step=mode.step + 1)
        else:
            session.complete_add_combatant(
                mode.name, mode.initiative, mode.hp, mode.ac, mode.is_player
            )


_LIBRARY_FIELDS = ("name", "description", "difficulty")


def _handle_saving_library(
    session: CombatSession,
    mode: SavingLibrary,
    key: KeyEvent,
) -> None:
    char = _typed(key)
    field = _LIBRARY_FIELDS[mode.step]
    current = getattr(mode, field)

    if key.code is KeyCode.BACKSPACE:
        session.mode = mode.evolve(**{field: current[:-1]})
    elif char is not None:
        if mode.step == 0 and not is_record_name_char(char):
            return
        session.mode = mode.evolve(**{field: current + char})
    elif key.code is KeyCode.ENTER:
        if mode.step == 0:
            validate_record_name(mode.name, "Name")
            session.mode = mode.evolve(step=1)
        elif mode.step == 1:
            if not mode.description.strip():
                raise ValidationError("Description cannot be empty", field_name="description")
            session.mode = mode.evolve(step=2)
        else:
            session.complete_save_library(mode.name, mode.description, mode.difficulty)


def _handle_setting_library_initiatives(
    session: CombatSession,
    mode: SettingLibraryInitiatives,
    key: KeyEvent,
) -> None:
    char = _typed(key)
    current = mode.current_input
    if _is_digit(char) or (char == "-" and not current):
        session.mode = mode.with_current_input(current + char)
    elif key.code is KeyCode.BACKSPACE:
        session.mode = mode.with_current_input(current[:-1])
    elif key.code is KeyCode.ENTER:
        session.complete_library_initiative(current)


def _handle_saving_encounter(
    session: CombatSession,
    mode: SavingEncounter,
    key: KeyEvent,
) -> None:
    char = _typed(key)
    if char is not None and is_record_name_char(char):
        session.mode = mode.evolve(input=mode.input + char)
    elif key.code is KeyCode.BACKSPACE:
        session.mode = mode.evolve(input=mode.input[:-1])
    elif key.code is KeyCode.ENTER:
        session.complete_save_encounter(mode.input)


# =============================================================================
# Filtered Lists
# =============================================================================


def _step_filtered(
    session: CombatSession,
    mode: Any,
    key: KeyEvent,
    visible: int,
) -> bool:
    """Apply typing, backspace and cursor keys to a filtered list.

    Returns:
        True if the key was consumed.
    """
    char = _typed(key)
    if char is not None:
        session.mode = mode.evolve(input=mode.input + char, selected_index=0)
    elif key.code is KeyCode.BACKSPACE:
        session.mode = mode.evolve(input=mode.input[:-1], selected_index=0)
    elif key.code is KeyCode.UP:
        session.mode = mode.evolve(selected_index=wrap_index(mode.selected_index, -1, visible))
    elif key.code is KeyCode.DOWN:
        session.mode = mode.evolve(selected_index=wrap_index(mode.selected_index, 1, visible))
    else:
        return False
    return True


def _pick(items: list[Any], index: int) -> Any | None:
    if not items:
        return None
    return items[min(index, len(items) - 1)]


def _handle_selecting_template(
    session: CombatSession,
    mode: SelectingTemplate,
    key: KeyEvent,
) -> None:
    matches = session.filtered_templates(mode.input)
    if _step_filtered(session, mode, key, len(matches)):
        return
    if key.code is KeyCode.ENTER:
        template_index = _pick(matches, mode.selected_index)
        if template_index is None:
            raise ValidationError("No matching template", invalid_value=mode.input)
        session.add_combatant_from_template(template_index)


def _handle_loading_encounter(
    session: CombatSession,
    mode: LoadingEncounter,
    key: KeyEvent,
) -> None:
    names = session.list_saved_encounters()
    if not names and not mode.input:
        session.finish(NO_SAVED_ENCOUNTERS)
        return
    matches = filter_names(names, mode.input)
    if _step_filtered(session, mode, key, len(matches)):
        return
    if key.code is KeyCode.ENTER:
        name = _pick(matches, mode.selected_index)
        if name is None:
            raise ValidationError("No encounter selected", invalid_value=mode.input)
        session.complete_load_encounter(name)


def _handle_loading_library(
    session: CombatSession,
    mode: LoadingLibrary,
    key: KeyEvent,
) -> None:
    names = session.list_library_entries()
    if not names and not mode.input:
        session.finish(NO_LIBRARY_ENTRIES)
        return
    matches = filter_names(names, mode.input)
    if _step_filtered(session, mode, key, len(matches)):
        return
    if key.code is KeyCode.ENTER:
        name = _pick(matches, mode.selected_index)
        if name is None:
            raise ValidationError("No template selected", invalid_value=mode.input)
        session.select_library_template(name)


# =============================================================================
# Menus
# =============================================================================


_ACTION_MENU_ACTIONS: dict[ActionMenuItem, SessionAction] = {
    ActionMenuItem.DAMAGE: CombatSession.start_dealing_damage,
    ActionMenuItem.HEAL: CombatSession.start_healing,
    ActionMenuItem.ADD_STATUS: CombatSession.start_adding_status,
    ActionMenuItem.DEATH_SAVE: CombatSession.start_rolling_death_save,
    ActionMenuItem.CONCENTRATION: CombatSession.start_concentration_target,
    ActionMenuItem.CLEAR: CombatSession.start_clear_choice,
    ActionMenuItem.TEMP_HP: CombatSession.start_granting_temp_hp,
}

_COMBATANT_MENU_ACTIONS: dict[CombatantMenuItem, SessionAction] = {
    CombatantMenuItem.ADD_COMBATANT: CombatSession.start_adding_combatant,
    CombatantMenuItem.REMOVE_COMBATANT: CombatSession.start_removing,
    CombatantMenuItem.LOAD_TEMPLATE: CombatSession.start_selecting_template,
    CombatantMenuItem.SAVE_TEMPLATE: CombatSession.start_saving_template,
    CombatantMenuItem.LOAD_LIBRARY: CombatSession.start_loading_library,
    CombatantMenuItem.SAVE_LIBRARY: CombatSession.start_saving_library,
}


def _handle_menu(
    session: CombatSession,
    mode: ActionMenu | CombatantMenu,
    key: KeyEvent,
    items: tuple[Any, ...],
    actions: dict[Any, SessionAction],
) -> None:
    if key.code is KeyCode.UP:
        session.mode = mode.evolve(selected=wrap_index(mode.selected, -1, len(items)))
    elif key.code is KeyCode.DOWN:
        session.mode = mode.evolve(selected=wrap_index(mode.selected, 1, len(items)))
    elif key.code is KeyCode.ENTER:
        item = items[mode.selected % len(items)]
        logger.debug("Menu item chosen", item=item.label)
        session.mode = Normal()
        actions[item](session)


def _handle_action_menu(session: CombatSession, mode: ActionMenu, key: KeyEvent) -> None:
    _handle_menu(session, mode, key, ACTION_MENU, _ACTION_MENU_ACTIONS)


def _handle_combatant_menu(session: CombatSession, mode: CombatantMenu, key: KeyEvent) -> None:
    _handle_menu(session, mode, key, COMBATANT_MENU, _COMBATANT_MENU_ACTIONS)


def _handle_quick_reference(
    session: CombatSession,
    mode: QuickReference,
    key: KeyEvent,
) -> None:
    count = len(ConditionType)
    if key.is_char("q"):
        session.cancel_input()
    elif key.code is KeyCode.UP:
        session.mode = mode.evolve(selected=wrap_index(mode.selected, -1, count))
    elif key.code is KeyCode.DOWN:
        session.mode = mode.evolve(selected=wrap_index(mode.selected, 1, count))


# =============================================================================
# Confirmations
# =============================================================================


def _handle_confirming_overwrite(
    session: CombatSession,
    mode: ConfirmingLibraryOverwrite,
    key: KeyEvent,
) -> None:
    if key.is_char("y", "Y"):
        session.confirm_overwrite_library(mode.request)
    elif key.is_char("n", "N"):
        session.cancel_library_overwrite()


def _handle_confirming_load(
    session: CombatSession,
    mode: ConfirmingLibraryLoad,
    key: KeyEvent,
) -> None:
    if key.is_char("y", "Y"):
        session.confirm_load_library(mode.name)
    elif key.is_char("n", "N"):
        session.cancel_library_load()


# =============================================================================
# Dispatch Table
# =============================================================================


MODE_HANDLERS: dict[type[Mode], Handler] = {
    Normal: _handle_normal,
    AddingCombatant: _handle_adding_combatant,
    DealingDamage: _handle_roster_selection,
    Healing: _handle_roster_selection,
    GrantingTempHp: _handle_roster_selection,
    RollingDeathSave: _handle_roster_selection,
    Removing: _handle_roster_selection,
    SavingTemplate: _handle_roster_selection,
    ConcentrationTarget: _handle_roster_selection,
    ClearingConcentration: _handle_roster_selection,
    ClearingStatus: _handle_roster_selection,
    AddingStatus: _handle_roster_selection,
    SelectingCondition: _handle_selecting_condition,
    ApplyingConcentration: _handle_applying_concentration,
    ConcentrationCheck: _handle_concentration_check,
    ClearActionSelection: _handle_clear_action_selection,
    SelectingStatusToClear: _handle_selecting_status_to_clear,
    SelectingTemplate: _handle_selecting_template,
    ActionMenu: _handle_action_menu,
    CombatantMenu: _handle_combatant_menu,
    QuickReference: _handle_quick_reference,
    SavingEncounter: _handle_saving_encounter,
    LoadingEncounter: _handle_loading_encounter,
    SavingLibrary: _handle_saving_library,
    LoadingLibrary: _handle_loading_library,
    SettingLibraryInitiatives: _handle_setting_library_initiatives,
    ConfirmingLibraryOverwrite: _handle_confirming_overwrite,
    ConfirmingLibraryLoad: _handle_confirming_load,
}


__all__ = [
    "handle_key",
    "MODE_HANDLERS",
]
