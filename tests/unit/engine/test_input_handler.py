"""Tests for key dispatch across interaction modes."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from combat_tracker.engine.input_handler import handle_key
from combat_tracker.engine.keys import KeyEvent
from combat_tracker.engine.modes import (
    ALL_MODES,
    ActionMenu,
    AddingCombatant,
    AddingStatus,
    ApplyingConcentration,
    ClearActionSelection,
    ClearingStatus,
    CombatantMenu,
    ConcentrationCheck,
    ConfirmingLibraryLoad,
    ConfirmingLibraryOverwrite,
    DealingDamage,
    GrantingTempHp,
    LibrarySaveRequest,
    LoadingEncounter,
    LoadingLibrary,
    Mode,
    Normal,
    QuickReference,
    Removing,
    RollingDeathSave,
    SavingEncounter,
    SavingLibrary,
    SelectingCondition,
    SelectingStatusToClear,
    SelectingTemplate,
    SettingLibraryInitiatives,
)
from combat_tracker.engine.session import CombatSession
from combat_tracker.models import (
    ClearAction,
    CombatantTemplate,
    ConcentrationInfo,
    ConditionType,
    EncounterTemplate,
    StatusEffect,
)


ENTER = KeyEvent.enter()
ESC = KeyEvent.esc()
UP = KeyEvent.up()
DOWN = KeyEvent.down()
BACKSPACE = KeyEvent.backspace()

Press = Callable[..., None]


def _sample_mode(mode_type: type[Mode], session: CombatSession) -> Mode:
    """Build a representative instance of ``mode_type``."""
    if mode_type is SettingLibraryInitiatives:
        template = EncounterTemplate.from_encounter(
            session.encounter, name="ambush", description="d"
        )
        return SettingLibraryInitiatives.for_template(template)
    if mode_type is ConfirmingLibraryOverwrite:
        return ConfirmingLibraryOverwrite(
            request=LibrarySaveRequest(name="ambush", description="d")
        )
    if mode_type is ConfirmingLibraryLoad:
        return ConfirmingLibraryLoad(name="ambush")
    if mode_type is ConcentrationCheck:
        return ConcentrationCheck(combatant_index=0, dc=10, input="1")
    if "combatant_index" in mode_type.model_fields:
        return mode_type(combatant_index=0)
    return mode_type()


class TestCancellation:
    """Tests for the universal escape rule."""

    @pytest.mark.parametrize("mode_type", [m for m in ALL_MODES if m is not Normal])
    def test_escape_returns_to_normal(
        self,
        populated_session: CombatSession,
        mode_type: type[Mode],
    ) -> None:
        """Esc from any non-idle mode goes idle and clears the message."""
        populated_session.mode = _sample_mode(mode_type, populated_session)
        populated_session.set_message("in progress")

        handle_key(populated_session, ESC)

        assert isinstance(populated_session.mode, Normal)
        assert populated_session.message is None

    def test_escape_keeps_encounter(self, populated_session: CombatSession, press: Press) -> None:
        """Cancelling mid-entry changes nothing in the encounter."""
        press("d", "5", ESC)
        assert all(c.hp_current == c.hp_max for c in populated_session.encounter.combatants)


class TestNormalMode:
    """Tests for idle key bindings."""

    def test_quit(self, session: CombatSession, press: Press) -> None:
        """q asks the front end to quit."""
        press("q")
        assert session.should_quit

    def test_turn_keys(self, populated_session: CombatSession, press: Press) -> None:
        """n and p move the turn cursor and clear the message."""
        populated_session.set_message("old")
        press("n", "n")
        assert populated_session.encounter.current_turn_index == 2
        assert populated_session.message is None
        press("p")
        assert populated_session.encounter.current_turn_index == 1

    @pytest.mark.parametrize(
        "key,mode_type",
        [
            ("a", AddingCombatant),
            ("d", DealingDamage),
            ("s", AddingStatus),
            ("x", ClearActionSelection),
            ("m", ActionMenu),
            ("b", CombatantMenu),
            ("?", QuickReference),
        ],
    )
    def test_mode_keys(
        self,
        populated_session: CombatSession,
        press: Press,
        key: str,
        mode_type: type[Mode],
    ) -> None:
        """Letters open their modes."""
        press(key)
        assert type(populated_session.mode) is mode_type

    def test_ctrl_s_saves(self, session: CombatSession, press: Press) -> None:
        """Ctrl+S opens the filename prompt."""
        press(KeyEvent.of("s", ctrl=True))
        assert isinstance(session.mode, SavingEncounter)

    def test_ctrl_o_without_saves(self, session: CombatSession, press: Press) -> None:
        """Ctrl+O with nothing saved stays idle with a hint."""
        press(KeyEvent.of("o", ctrl=True))
        assert isinstance(session.mode, Normal)
        assert session.message is not None
        assert "Ctrl+S" in session.message

    def test_unbound_key_ignored(self, session: CombatSession, press: Press) -> None:
        """Unknown keys do nothing."""
        press("z", ENTER, UP)
        assert isinstance(session.mode, Normal)
        assert session.message is None


class TestAddCombatantWizard:
    """Tests for the five-step add wizard."""

    def test_full_flow(self, session: CombatSession, press: Press) -> None:
        """Name, initiative, HP, AC and player flag build a combatant."""
        press("a", "Goblin", ENTER, "-1", ENTER, "7", ENTER, "15", ENTER, "n", ENTER)

        assert isinstance(session.mode, Normal)
        assert session.message == "Added combatant: Goblin"
        goblin = session.encounter.combatants[0]
        assert (goblin.initiative, goblin.hp_max, goblin.armor_class) == (-1, 7, 15)

    def test_keystroke_filters(self, session: CombatSession, press: Press) -> None:
        """Numeric steps ignore letters; HP ignores minus signs."""
        press("a", "Orc", ENTER, "1x2", ENTER, "-1a5", ENTER)
        mode = session.mode
        assert isinstance(mode, AddingCombatant)
        assert mode.initiative == "12"
        assert mode.hp == "15"
        assert mode.step == 3

    def test_player_flag_replaces(self, session: CombatSession, press: Press) -> None:
        """The last y/n typed wins."""
        press("a", "Aria", ENTER, "9", ENTER, "20", ENTER, "16", ENTER, "Y", "x", "n", "y")
        mode = session.mode
        assert isinstance(mode, AddingCombatant)
        assert mode.is_player == "y"
        press(ENTER)
        assert session.encounter.combatants[0].is_player

    def test_backspace(self, session: CombatSession, press: Press) -> None:
        """Backspace edits the current field only."""
        press("a", "Gobb", BACKSPACE)
        mode = session.mode
        assert isinstance(mode, AddingCombatant)
        assert mode.name == "Gob"

    def test_invalid_completion_returns_to_normal(
        self,
        session: CombatSession,
        press: Press,
    ) -> None:
        """An empty HP field fails at the end and leaves no half-finished mode."""
        press("a", "Gob", ENTER, "3", ENTER, ENTER, "12", ENTER, ENTER)
        assert isinstance(session.mode, Normal)
        assert session.message == "Invalid HP value"
        assert session.encounter.is_empty


class TestRosterSelection:
    """Tests for selection modes over the live roster."""

    def test_cursor_wraps(self, populated_session: CombatSession, press: Press) -> None:
        """Up from the top goes to the bottom and back."""
        press("d", UP)
        assert populated_session.mode == DealingDamage(selected_index=2)
        press(DOWN)
        assert populated_session.mode == DealingDamage(selected_index=0)

    def test_damage_flow(self, populated_session: CombatSession, press: Press) -> None:
        """Select, type an amount and confirm."""
        press("d", DOWN, "1a0", BACKSPACE, "3", ENTER)
        assert populated_session.encounter.combatants[1].hp_current == 0
        assert populated_session.message == "Goblin took 13 damage (HP: 0)"

    def test_empty_amount_rejected(self, populated_session: CombatSession, press: Press) -> None:
        """Amount modes need digits."""
        press("h", ENTER)
        assert isinstance(populated_session.mode, Normal)
        assert populated_session.message == "Invalid heal value!"

    def test_removal_ignores_digits(self, populated_session: CombatSession, press: Press) -> None:
        """Selection-only modes confirm without input."""
        press("b", DOWN, ENTER)
        assert populated_session.mode == Removing()
        press(DOWN, "5", ENTER)
        assert [c.name for c in populated_session.encounter.combatants] == ["Aria", "Brynn"]
        assert populated_session.message == "Removed combatant: Goblin"

    def test_selection_past_removed_roster(
        self,
        populated_session: CombatSession,
        press: Press,
    ) -> None:
        """A stale cursor fails cleanly."""
        populated_session.mode = DealingDamage(selected_index=5, input="3")
        press(ENTER)
        assert isinstance(populated_session.mode, Normal)
        assert populated_session.message == "Invalid combatant index"

    def test_death_save_flow(self, populated_session: CombatSession, press: Press) -> None:
        """Rolling a death save for a downed player."""
        populated_session.encounter.combatants[0].take_damage(20)
        press("v")
        assert isinstance(populated_session.mode, RollingDeathSave)
        press("8", ENTER)
        assert populated_session.message == "Aria death save result recorded (S0/F1)"


class TestStatusFlow:
    """Tests for adding and clearing status effects."""

    def test_add_status(self, populated_session: CombatSession, press: Press) -> None:
        """Pick a target, then type condition number and duration."""
        press("s", DOWN, ENTER)
        assert populated_session.mode == SelectingCondition(combatant_index=1)

        press("1", "0", " ", " ", "2", ENTER)

        goblin = populated_session.encounter.combatants[1]
        assert [(e.condition, e.duration) for e in goblin.status_effects] == [
            (ConditionType.POISONED, 2)
        ]

    @pytest.mark.parametrize(
        "typed,message",
        [
            ("3", "Enter condition number and duration (e.g., 1 3)"),
            ("15 2", "Invalid condition number"),
            ("0 2", "Invalid condition number"),
        ],
    )
    def test_bad_condition_input(
        self,
        populated_session: CombatSession,
        press: Press,
        typed: str,
        message: str,
    ) -> None:
        """Malformed condition input returns to idle with a message."""
        press("s", ENTER, typed, ENTER)
        assert isinstance(populated_session.mode, Normal)
        assert populated_session.message == message

    def test_clear_single_status(self, populated_session: CombatSession, press: Press) -> None:
        """Choosing status effects and a target with several effects asks which."""
        goblin = populated_session.encounter.combatants[1]
        goblin.add_status_effect(StatusEffect(condition=ConditionType.PRONE))
        goblin.add_status_effect(StatusEffect(condition=ConditionType.BLINDED, duration=1))

        press("x", DOWN)
        assert populated_session.mode == ClearActionSelection(choice=ClearAction.STATUS_EFFECTS)
        press(ENTER)
        assert isinstance(populated_session.mode, ClearingStatus)
        press(DOWN, ENTER)
        assert populated_session.mode == SelectingStatusToClear(combatant_index=1)
        press(UP, ENTER)

        assert [e.condition for e in goblin.status_effects] == [ConditionType.PRONE]
        assert isinstance(populated_session.mode, Normal)

    def test_clear_concentration(self, populated_session: CombatSession, press: Press) -> None:
        """The default clear choice is concentration."""
        aria = populated_session.encounter.combatants[0]
        aria.set_concentration(ConcentrationInfo(spell_name="Bless"))
        press("x", ENTER, ENTER)
        assert aria.concentration is None
        assert populated_session.message == "Aria stops concentrating."


class TestConcentrationFlow:
    """Tests for setting and checking concentration."""

    def test_set_concentration(self, populated_session: CombatSession, press: Press) -> None:
        """Target, spell name, then modifier."""
        press("c", DOWN, DOWN, ENTER)
        assert populated_session.mode == ApplyingConcentration(combatant_index=2)
        press("Hold Person", ENTER, "-x1", ENTER)

        info = populated_session.encounter.combatants[2].concentration
        assert info == ConcentrationInfo(spell_name="Hold Person", constitution_modifier=-1)

    def test_empty_spell_name(self, populated_session: CombatSession, press: Press) -> None:
        """The spell name is required before the modifier step."""
        press("c", ENTER, ENTER)
        assert isinstance(populated_session.mode, Normal)
        assert populated_session.message == "Spell name cannot be empty"

    def test_damage_then_check(self, populated_session: CombatSession, press: Press) -> None:
        """Damage to a concentrator chains into the save prompt."""
        aria = populated_session.encounter.combatants[0]
        aria.set_concentration(ConcentrationInfo(spell_name="Bless"))

        press("d", "4", ENTER)
        assert populated_session.mode == ConcentrationCheck(combatant_index=0, dc=10)

        press("1", "x", "2", ENTER)
        assert aria.concentration is not None
        assert populated_session.message == (
            "Aria maintains concentration on Bless (roll 12 vs DC 10)."
        )
        assert isinstance(populated_session.mode, Normal)


class TestMenus:
    """Tests for menus and the reference card."""

    def test_action_menu_starts_flow(
        self,
        populated_session: CombatSession,
        press: Press,
    ) -> None:
        """Up from the first item wraps to Grant Temp HP."""
        press("m", UP, ENTER)
        assert populated_session.mode == GrantingTempHp()

    def test_menu_guard_returns_to_normal(self, session: CombatSession, press: Press) -> None:
        """A menu item whose precondition fails leaves the menu."""
        press("m", ENTER)
        assert isinstance(session.mode, Normal)
        assert session.message == "No combatants to damage!"

    def test_combatant_menu_add(self, session: CombatSession, press: Press) -> None:
        """The first combatant menu item adds a combatant."""
        press("b", ENTER)
        assert isinstance(session.mode, AddingCombatant)

    def test_quick_reference(self, session: CombatSession, press: Press) -> None:
        """The reference card scrolls with wraparound and closes on q."""
        press("?", UP)
        assert session.mode == QuickReference(selected=13)
        press(DOWN, DOWN)
        assert session.mode == QuickReference(selected=1)
        press("q")
        assert isinstance(session.mode, Normal)


class TestTemplateFlow:
    """Tests for templates through the keyboard."""

    def test_save_and_use_template(self, populated_session: CombatSession, press: Press) -> None:
        """Save a combatant as a template, then add a copy with a new initiative."""
        press("b", DOWN, DOWN, DOWN, ENTER, DOWN, ENTER)
        assert populated_session.message == "Saved template: Goblin"

        press("b", DOWN, DOWN, ENTER)
        assert isinstance(populated_session.mode, SelectingTemplate)
        press("gob", ENTER)
        mode = populated_session.mode
        assert isinstance(mode, AddingCombatant)
        assert mode.step == 1

        assert mode.initiative == ""

        press("2", "0", ENTER, ENTER, ENTER, ENTER)

        assert [c.name for c in populated_session.encounter.combatants][0] == "Goblin"
        assert populated_session.encounter.combatants[0].initiative == 20

    def test_typed_initiative_is_not_appended(
        self,
        session: CombatSession,
        press: Press,
    ) -> None:
        """The stored initiative never prefixes what the user types."""
        session.templates = [
            CombatantTemplate(name="Goblin", hp_max=7, armor_class=15, initiative=12)
        ]
        press("b", DOWN, DOWN, ENTER, ENTER, "8")
        assert session.mode == AddingCombatant(
            step=1, name="Goblin", initiative="8", hp="7", ac="15", is_player="n"
        )

    def test_no_matching_template(self, session: CombatSession, press: Press) -> None:
        """A filter matching nothing fails on Enter."""
        session.templates = [CombatantTemplate(name="Goblin", hp_max=7, armor_class=15)]
        press("b", DOWN, DOWN, ENTER, "zzz", ENTER)
        assert isinstance(session.mode, Normal)
        assert session.message == "No matching template"

    def test_typing_resets_selection(self, session: CombatSession, press: Press) -> None:
        """Typing moves the cursor back to the first match."""
        session.templates = [
            CombatantTemplate(name="Goblin", hp_max=7, armor_class=15),
            CombatantTemplate(name="Hobgoblin", hp_max=11, armor_class=18),
        ]
        press("b", DOWN, DOWN, ENTER, DOWN)
        assert session.mode == SelectingTemplate(selected_index=1)
        press("g")
        assert session.mode == SelectingTemplate(selected_index=0, input="g")


class TestPersistenceFlow:
    """Tests for saving and loading through the keyboard."""

    def test_save_filename_filter(self, populated_session: CombatSession, press: Press) -> None:
        """Only record-name characters reach the filename."""
        press(KeyEvent.of("s", ctrl=True), "my fight!/1")
        assert populated_session.mode == SavingEncounter(input="myfight1")
        press(ENTER)
        assert populated_session.message == "Successfully saved encounter: myfight1"

    def test_empty_filename(self, populated_session: CombatSession, press: Press) -> None:
        """An empty filename fails."""
        press(KeyEvent.of("s", ctrl=True), ENTER)
        assert populated_session.message == "Filename cannot be empty"

    def test_load_filtered(self, populated_session: CombatSession, press: Press) -> None:
        """Type to filter, then load the highlighted file."""
        populated_session.complete_save_encounter("cave")
        populated_session.complete_save_encounter("bridge")
        populated_session.encounter.clear()

        press(KeyEvent.of("o", ctrl=True))
        assert isinstance(populated_session.mode, LoadingEncounter)
        press("AV", ENTER)

        assert populated_session.message == "Successfully loaded encounter: cave"
        assert len(populated_session.encounter) == 3

    def test_load_filter_without_match(
        self,
        populated_session: CombatSession,
        press: Press,
    ) -> None:
        """Enter with nothing highlighted fails."""
        populated_session.complete_save_encounter("cave")
        press(KeyEvent.of("o", ctrl=True), "zz", ENTER)
        assert populated_session.message == "No encounter selected"

    def test_load_mode_with_files_removed(
        self,
        session: CombatSession,
        press: Press,
    ) -> None:
        """If the list empties while open, the mode closes with a hint."""
        session.mode = LoadingEncounter()
        press(DOWN)
        assert isinstance(session.mode, Normal)
        assert session.message is not None
        assert session.message.startswith("No saved encounters found")


class TestLibraryFlow:
    """Tests for the library wizard and loader."""

    def test_save_wizard(self, populated_session: CombatSession, press: Press) -> None:
        """Name, description, difficulty, saved."""
        press("b", UP, ENTER)
        assert isinstance(populated_session.mode, SavingLibrary)
        press("road side", ENTER, "Goblins on the road", ENTER, "Easy", ENTER)

        assert populated_session.message == "Successfully saved to library: roadside"
        template = populated_session.library_store.load("roadside")
        assert template.description == "Goblins on the road"
        assert template.difficulty == "Easy"

    def test_wizard_requires_name(self, populated_session: CombatSession, press: Press) -> None:
        """An empty name stops the wizard."""
        press("b", UP, ENTER, ENTER)
        assert isinstance(populated_session.mode, Normal)
        assert populated_session.message == "Name cannot be empty"

    def test_overwrite_confirmation(self, populated_session: CombatSession, press: Press) -> None:
        """An existing name asks first; n cancels."""
        populated_session.complete_save_library("roadside", "First")
        press("b", UP, ENTER, "roadside", ENTER, "Second", ENTER, ENTER)
        assert isinstance(populated_session.mode, ConfirmingLibraryOverwrite)

        press("x")
        assert isinstance(populated_session.mode, ConfirmingLibraryOverwrite)
        press("n")
        assert populated_session.message == "Save cancelled"
        assert populated_session.library_store.load("roadside").description == "First"

    def test_load_with_confirmation(self, populated_session: CombatSession, press: Press) -> None:
        """Loading over a live encounter confirms, then asks each initiative."""
        populated_session.complete_save_library("roadside", "Goblins")

        press("b", UP, UP, ENTER)
        assert isinstance(populated_session.mode, LoadingLibrary)
        press(ENTER)
        assert populated_session.mode == ConfirmingLibraryLoad(name="roadside")
        press("Y")
        assert isinstance(populated_session.mode, SettingLibraryInitiatives)

        press("1-0", ENTER, "-", "5", ENTER, "x7", ENTER)

        assert [(c.name, c.initiative) for c in populated_session.encounter.combatants] == [
            ("Aria", 10),
            ("Brynn", 7),
            ("Goblin", -5),
        ]
        assert populated_session.message == "Loaded encounter from library: roadside"

    def test_empty_blueprint_loads_immediately(
        self,
        session: CombatSession,
        press: Press,
    ) -> None:
        """A blueprint with no combatants needs no initiatives."""
        session.library_store.save(
            EncounterTemplate(name="empty", description="nothing"), "empty"
        )
        press("b", UP, UP, ENTER, ENTER)
        assert isinstance(session.mode, Normal)
        assert session.message == "Loaded encounter from library: empty"
