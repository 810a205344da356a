"""The combat session: one encounter, its interaction mode, log and stores.

CombatSession is the single owner of all mutable tracker state. Key
handlers call its ``start_*`` methods to enter a mode and its
``complete_*`` methods to hand finished input to the rule engine.

Conventions:
    - ``start_*`` methods check their precondition first. When it fails
      they set the message and leave the mode unchanged.
    - ``complete_*`` methods raise TrackerError subclasses on bad input.
      The key dispatcher turns those into a message and returns to
      Normal, so a failed completion never leaves a half-finished mode.
    - On success a completion sets its own message and next mode.

Example:
    >>> session = CombatSession.from_settings()
    >>> session.complete_add_combatant("Goblin", "12", "7", "15", "n")
    >>> session.start_dealing_damage()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from combat_tracker.core.config import Settings, get_settings
from combat_tracker.core.constants import NATURAL_1, NATURAL_20, RECORD_NAME_PATTERN
from combat_tracker.core.exceptions import (
    CombatError,
    PersistenceError,
    PreconditionError,
    TrackerError,
    ValidationError,
)
from combat_tracker.core.logging import bind_context, configure_logging, get_logger
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
    InputMode,
    LibrarySaveRequest,
    LoadingEncounter,
    LoadingLibrary,
    Normal,
    QuickReference,
    Removing,
    RollingDeathSave,
    SavingEncounter,
    SavingLibrary,
    SavingTemplate,
    SelectingCondition,
    SelectingStatusToClear,
    SelectingTemplate,
    SettingLibraryInitiatives,
)
from combat_tracker.models.combat import Combatant, CombatEncounter
from combat_tracker.models.components import ConcentrationInfo, StatusEffect
from combat_tracker.models.enums import ClearAction, ConditionType, DeathSaveOutcome
from combat_tracker.models.log import ActionLog
from combat_tracker.models.records import CombatantTemplate, EncounterTemplate
from combat_tracker.storage.files import JsonEncounterStore, JsonLibraryStore, JsonTemplateStore


if TYPE_CHECKING:
    from combat_tracker.storage.base import (
        BaseEncounterStore,
        BaseLibraryStore,
        BaseTemplateStore,
    )

logger = get_logger(__name__)


NO_SAVED_ENCOUNTERS = "No saved encounters found. Press Ctrl+S to save current encounter."
NO_LIBRARY_ENTRIES = "No library templates found. Save current encounter to library first."
FILENAME_CHARSET_ERROR = "can only contain letters, numbers, underscore, and hyphen"


def parse_int(value: str, message: str, *, field_name: str | None = None) -> int:
    """Parse a typed integer, raising ValidationError with ``message`` on failure."""
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ValidationError(message, field_name=field_name, invalid_value=value) from exc


def validate_record_name(name: str, label: str) -> str:
    """Check a user-supplied file stem.

    Args:
        name: The typed name.
        label: "Filename" or "Name", used in the error text.

    Returns:
        The name, unchanged.

    Raises:
        ValidationError: If the name is empty or contains other characters
            than letters, digits, underscore and hyphen.
    """
    if not name.strip():
        raise ValidationError(f"{label} cannot be empty", field_name=label.lower())
    if not RECORD_NAME_PATTERN.match(name):
        raise ValidationError(
            f"{label} {FILENAME_CHARSET_ERROR}",
            field_name=label.lower(),
            invalid_value=name,
        )
    return name


class CombatSession:
    """Owns the encounter, the current mode, the action log and the templates.

    Args:
        encounter_store: Where encounter snapshots are saved.
        template_store: Where reusable combatant templates live.
        library_store: Where encounter blueprints live.
        encounter: Optional starting encounter; a fresh one by default.
    """

    def __init__(
        self,
        encounter_store: BaseEncounterStore,
        template_store: BaseTemplateStore,
        library_store: BaseLibraryStore,
        *,
        encounter: CombatEncounter | None = None,
    ) -> None:
        self.encounter = encounter or CombatEncounter()
        self.mode: InputMode = Normal()
        self.log = ActionLog()
        self.templates: list[CombatantTemplate] = []
        self.message: str | None = None
        self.should_quit = False

        self.encounter_store = encounter_store
        self.template_store = template_store
        self.library_store = library_store

        self._load_templates()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        setup_logging: bool = False,
    ) -> CombatSession:
        """Build a session backed by JSON file stores from configuration.

        Args:
            settings: Settings to use; the cached application settings by default.
            setup_logging: Also configure structlog from the logging settings.
        """
        settings = settings or get_settings()
        if setup_logging:
            configure_logging(
                level=settings.log_level,
                json_format=settings.log_json,
                log_file=settings.log_file,
            )
        storage = settings.storage
        return cls(
            encounter_store=JsonEncounterStore(
                storage.encounters_dir, version=settings.app_version
            ),
            template_store=JsonTemplateStore(storage.templates_path),
            library_store=JsonLibraryStore(storage.library_dir),
        )

    def _load_templates(self) -> None:
        try:
            self.templates = self.template_store.load()
        except PersistenceError as exc:
            logger.error("Template load failed", error=exc.message)
            self.templates = []
            self.set_message(f"Warning: {exc.message}")

    # =========================================================================
    # Session Basics
    # =========================================================================

    def quit(self) -> None:
        self.should_quit = True

    def set_message(self, message: str) -> None:
        self.message = message

    def clear_message(self) -> None:
        self.message = None

    def enter(self, mode: InputMode) -> None:
        """Switch to ``mode`` and clear the message."""
        self.mode = mode
        self.clear_message()

    def finish(self, message: str | None = None) -> None:
        """Return to Normal, optionally leaving ``message`` for the user."""
        self.mode = Normal()
        if message is not None:
            self.set_message(message)

    def cancel_input(self) -> None:
        """Abandon whatever input was in progress."""
        self.mode = Normal()
        self.clear_message()

    def fail(self, error: TrackerError) -> None:
        """Surface ``error`` to the user and return to Normal."""
        logger.debug(
            "Input rejected",
            mode=type(self.mode).__name__,
            error=error.message,
            error_type=type(error).__name__,
        )
        self.mode = Normal()
        self.set_message(error.message)

    def push_log(self, message: str) -> None:
        self.log.push(self.encounter.round_number, message)

    def combatant_at(self, index: int) -> Combatant:
        """Return the combatant at ``index`` of the live roster.

        Raises:
            ValidationError: If the index is out of range.
        """
        combatant = self.encounter.get(index)
        if combatant is None:
            raise ValidationError(
                "Invalid combatant index",
                field_name="combatant_index",
                invalid_value=index,
            )
        return combatant

    # =========================================================================
    # Turn Order
    # =========================================================================

    def next_turn(self) -> None:
        self.encounter.next_turn()
        self.clear_message()

    def previous_turn(self) -> None:
        self.encounter.previous_turn()
        self.clear_message()

    # =========================================================================
    # Entering Modes
    # =========================================================================

    def _start_roster_mode(self, mode: InputMode, empty_message: str) -> None:
        if self.encounter.is_empty:
            self.set_message(empty_message)
            return
        self.enter(mode)

    def start_adding_combatant(self) -> None:
        self.enter(AddingCombatant())

    def start_dealing_damage(self) -> None:
        self._start_roster_mode(DealingDamage(), "No combatants to damage!")

    def start_healing(self) -> None:
        self._start_roster_mode(Healing(), "No combatants to heal!")

    def start_adding_status(self) -> None:
        self._start_roster_mode(AddingStatus(), "No combatants to add status to!")

    def start_removing(self) -> None:
        self._start_roster_mode(Removing(), "No combatants to remove!")

    def start_rolling_death_save(self) -> None:
        if not any(c.needs_death_save for c in self.encounter.combatants):
            self.set_message("No combatants need death saves!")
            return
        self.enter(RollingDeathSave())

    def start_concentration_target(self) -> None:
        self._start_roster_mode(ConcentrationTarget(), "No combatants to set concentration on!")

    def start_granting_temp_hp(self) -> None:
        self._start_roster_mode(GrantingTempHp(), "No combatants to grant temp HP!")

    def start_clear_choice(self) -> None:
        self.enter(ClearActionSelection())

    def start_clearing(self, choice: ClearAction) -> None:
        if choice is ClearAction.CONCENTRATION:
            self._start_roster_mode(
                ClearingConcentration(), "No combatants to clear concentration from!"
            )
        else:
            self._start_roster_mode(ClearingStatus(), "No combatants to clear status from!")

    def open_action_menu(self) -> None:
        self.enter(ActionMenu())

    def open_combatant_menu(self) -> None:
        self.enter(CombatantMenu())

    def open_quick_reference(self) -> None:
        self.enter(QuickReference())

    def start_selecting_template(self) -> None:
        if not self.templates:
            self.set_message("No templates available")
            return
        self.enter(SelectingTemplate())

    def start_saving_template(self) -> None:
        self._start_roster_mode(SavingTemplate(), "No combatants to save as template")

    def start_saving_encounter(self) -> None:
        self.enter(SavingEncounter())

    def start_loading_encounter(self) -> None:
        if not self.list_saved_encounters():
            self.set_message(NO_SAVED_ENCOUNTERS)
            return
        self.enter(LoadingEncounter())

    def start_saving_library(self) -> None:
        self._start_roster_mode(SavingLibrary(), "Cannot save empty encounter to library")

    def start_loading_library(self) -> None:
        if not self.list_library_entries():
            self.set_message(NO_LIBRARY_ENTRIES)
            return
        self.enter(LoadingLibrary())

    # =========================================================================
    # Roster
    # =========================================================================

    def complete_add_combatant(
        self,
        name: str,
        initiative: str,
        hp: str,
        ac: str,
        is_player: str,
    ) -> Combatant:
        """Validate wizard input and add the new combatant.

        Raises:
            ValidationError: On an empty name or unparsable numbers.
        """
        name = name.strip()
        if not name:
            raise ValidationError("Name cannot be empty", field_name="name")
        initiative_value = parse_int(
            initiative, "Invalid initiative value", field_name="initiative"
        )
        hp_value = parse_int(hp, "Invalid HP value", field_name="hp")
        ac_value = parse_int(ac, "Invalid AC value", field_name="ac")
        if hp_value < 1:
            raise ValidationError("HP must be at least 1", field_name="hp", invalid_value=hp_value)
        if ac_value < 0:
            raise ValidationError("Invalid AC value", field_name="ac", invalid_value=ac_value)
        player = is_player.strip().lower() in {"y", "yes"}

        combatant = Combatant.create(name, initiative_value, hp_value, ac_value, player)
        self.encounter.add_combatant(combatant)
        self.finish(f"Added combatant: {name}")
        self.push_log(
            f"Added {name} (HP {hp_value}, AC {ac_value}, Init {initiative_value}, "
            f"{'PC' if player else 'NPC'})"
        )
        logger.info(
            "Combatant added", combatant=name, initiative=initiative_value, is_player=player
        )
        return combatant

    def complete_remove(self, index: int) -> None:
        combatant = self.combatant_at(index)
        self.encounter.remove_combatant(index)
        message = f"Removed combatant: {combatant.name}"
        self.finish(message)
        self.push_log(message)
        logger.info("Combatant removed", combatant=combatant.name)

    # =========================================================================
    # Hit Points
    # =========================================================================

    def complete_deal_damage(self, index: int, amount: int) -> None:
        """Apply damage and route to a concentration check when one is owed."""
        combatant = self.combatant_at(index)
        spell = combatant.concentration.spell_name if combatant.concentration else None
        report = combatant.take_damage(amount)
        name = combatant.name

        notes: list[str] = []
        if report.death_saves_started:
            notes.append(f"{name} is down and starts making death saves.")
        elif report.death_save_outcome is DeathSaveOutcome.DIED:
            notes.append(f"{name} takes damage at 0 HP and dies.")
        elif report.death_save_outcome is DeathSaveOutcome.ONGOING and combatant.death_saves:
            saves = combatant.death_saves
            notes.append(
                f"{name} takes damage at 0 HP (Death Saves F{saves.failures}/S{saves.successes})"
            )
        if report.concentration_lost and spell:
            notes.append(f"{name} loses concentration on {spell}.")

        base = f"{name} took {amount} damage (HP: {combatant.hp_current})"
        self.push_log(base)
        for note in notes:
            self.push_log(note)
        logger.info(
            "Damage applied",
            combatant=name,
            amount=amount,
            absorbed=report.absorbed_by_temp,
            hp=combatant.hp_current,
        )

        if report.concentration_dc is not None:
            self.mode = ConcentrationCheck(combatant_index=index, dc=report.concentration_dc)
            self.set_message(
                f"{name} took damage while concentrating on {spell}. "
                f"Roll CON save (DC {report.concentration_dc})."
            )
            return

        self.finish(" | ".join([base, *notes]))

    def complete_heal(self, index: int, amount: int) -> None:
        combatant = self.combatant_at(index)
        combatant.heal(amount)
        message = f"{combatant.name} healed {amount} HP (HP: {combatant.hp_current})"
        self.finish(message)
        self.push_log(message)
        logger.info("Healing applied", combatant=combatant.name, amount=amount)

    def complete_grant_temp_hp(self, index: int, amount: int) -> None:
        combatant = self.combatant_at(index)
        combatant.grant_temp_hp(amount)
        message = f"{combatant.name} gains {amount} temp HP"
        self.finish(message)
        self.push_log(message)

    # =========================================================================
    # Death Saves
    # =========================================================================

    def complete_death_save_roll(self, index: int, roll: int) -> DeathSaveOutcome:
        """Record a d20 death save for a downed player.

        Raises:
            ValidationError: If the combatant cannot roll or the roll is not 1-20.
        """
        combatant = self.combatant_at(index)
        if not combatant.is_player:
            raise ValidationError("Only player characters roll death saves")
        if combatant.hp_current > 0:
            raise ValidationError("Combatant is not at 0 HP")
        if combatant.is_dead:
            raise ValidationError("Combatant is already dead")
        if combatant.is_stable:
            raise ValidationError("Combatant is already stable")
        if not NATURAL_1 <= roll <= NATURAL_20:
            raise ValidationError(
                "Death save roll must be between 1 and 20",
                field_name="roll",
                invalid_value=roll,
            )

        name = combatant.name
        outcome = combatant.apply_death_save_roll(roll)
        saves = combatant.death_saves
        if outcome is DeathSaveOutcome.REVIVED:
            message = f"{name} rolled a 20 and regains consciousness at 1 HP!"
        elif outcome is DeathSaveOutcome.STABILIZED and saves is not None:
            message = (
                f"{name} succeeds the death save and is now stable "
                f"(S{saves.successes}/F{saves.failures})"
            )
        elif outcome is DeathSaveOutcome.DIED:
            message = f"{name} failed too many death saves and has died."
        elif saves is not None:
            message = f"{name} death save result recorded (S{saves.successes}/F{saves.failures})"
        else:
            message = f"{name} death save recorded."

        self.finish(message)
        self.push_log(message)
        logger.info("Death save rolled", combatant=name, roll=roll, outcome=outcome.value)
        return outcome

    # =========================================================================
    # Concentration
    # =========================================================================

    def complete_apply_concentration(self, index: int, spell_name: str, con_mod: str) -> None:
        combatant = self.combatant_at(index)
        modifier = parse_int(con_mod, "Invalid constitution modifier", field_name="con_mod")
        spell = spell_name.strip()
        if not spell:
            raise ValidationError("Spell name cannot be empty", field_name="spell_name")

        combatant.set_concentration(
            ConcentrationInfo(spell_name=spell, constitution_modifier=modifier)
        )
        message = f"{combatant.name} starts concentrating on {spell}."
        self.finish(message)
        self.push_log(message)

    def complete_concentration_check(self, index: int, dc: int, roll_total: int) -> bool:
        """Resolve the constitution save owed after damage.

        Returns:
            True if concentration holds.

        Raises:
            CombatError: If the combatant is no longer concentrating.
        """
        combatant = self.combatant_at(index)
        if combatant.concentration is None:
            raise CombatError(
                "Combatant is not concentrating",
                combatant_name=combatant.name,
                round_number=self.encounter.round_number,
            )
        spell = combatant.concentration.spell_name
        held = combatant.resolve_concentration_check(roll_total, dc)
        verb = "maintains" if held else "fails"
        message = (
            f"{combatant.name} {verb} concentration on {spell} "
            f"(roll {roll_total} vs DC {dc})."
        )
        self.finish(message)
        self.push_log(message)
        return held

    def complete_clear_concentration(self, index: int) -> None:
        combatant = self.combatant_at(index)
        if combatant.clear_concentration() is not None:
            self.finish(f"{combatant.name} stops concentrating.")
        else:
            self.finish(f"{combatant.name} has no concentration to clear.")

    # =========================================================================
    # Status Effects
    # =========================================================================

    def begin_add_status(self, index: int) -> None:
        self.combatant_at(index)
        self.mode = SelectingCondition(combatant_index=index)

    def complete_add_status(self, index: int, condition: ConditionType, duration: int) -> None:
        combatant = self.combatant_at(index)
        if duration < 0:
            raise ValidationError(
                "Duration must be a non-negative number",
                field_name="duration",
                invalid_value=duration,
            )
        combatant.add_status_effect(StatusEffect(condition=condition, duration=duration))
        label = condition.display_name
        self.finish(f"Added {label} to {combatant.name} for {duration} rounds")
        span = f"for {duration} rounds" if duration > 0 else "indefinitely"
        self.push_log(f"{combatant.name} gains {label} {span}")

    def begin_clear_status(self, index: int) -> None:
        """Clear directly when there is at most one effect, otherwise ask which."""
        combatant = self.combatant_at(index)
        count = len(combatant.status_effects)
        if count == 0:
            self.complete_clear_status_effect(index, None)
        elif count == 1:
            self.complete_clear_status_effect(index, 0)
        else:
            self.mode = SelectingStatusToClear(combatant_index=index)

    def complete_clear_status_effect(self, index: int, status_index: int | None) -> None:
        """Remove one effect by position, or all of them when ``status_index`` is None.

        Raises:
            ValidationError: If ``status_index`` is out of range.
        """
        combatant = self.combatant_at(index)
        name = combatant.name
        if status_index is not None:
            removed = combatant.remove_status_effect(status_index)
            if removed is None:
                raise ValidationError(
                    "Invalid status selection",
                    field_name="status_index",
                    invalid_value=status_index,
                )
            self.finish(f"Removed {removed.condition.display_name} from {name}.")
        elif combatant.clear_status_effects():
            self.finish(f"Cleared all status effects from {name}.")
        else:
            self.finish(f"{name} has no status effects to clear.")

    # =========================================================================
    # Templates
    # =========================================================================

    def filtered_templates(self, query: str) -> list[int]:
        """Indices of templates whose name contains ``query``, ignoring case."""
        needle = query.lower()
        return [i for i, t in enumerate(self.templates) if needle in t.name.lower()]

    def add_combatant_from_template(self, template_index: int) -> None:
        """Pre-fill the add-combatant wizard from a template.

        Initiative is left blank and the wizard starts on that step.
        """
        if not 0 <= template_index < len(self.templates):
            raise ValidationError(
                "Invalid template selection",
                field_name="template_index",
                invalid_value=template_index,
            )
        template = self.templates[template_index]
        self.mode = AddingCombatant(
            step=1,
            name=template.name,
            hp=str(template.hp_max),
            ac=str(template.armor_class),
            is_player="y" if template.is_player else "n",
        )
        self.set_message(f"Set initiative for template: {template.name}")

    def save_template_from_combatant(self, index: int) -> CombatantTemplate:
        """Store the combatant's stat block, replacing a template of the same name."""
        template = CombatantTemplate.from_combatant(self.combatant_at(index))
        for position, existing in enumerate(self.templates):
            if existing.matches(template.name):
                self.templates[position] = template
                break
        else:
            self.templates.append(template)

        try:
            self.template_store.save(self.templates)
        except PersistenceError as exc:
            logger.error("Template save failed", template=template.name, error=exc.message)
            self.finish(f"Saved template in memory but failed to write file: {exc.message}")
        else:
            self.finish(f"Saved template: {template.name}")
        return template

    # =========================================================================
    # Encounter Snapshots
    # =========================================================================

    def list_saved_encounters(self) -> list[str]:
        try:
            return self.encounter_store.list_names()
        except PersistenceError as exc:
            logger.warning("Could not list saved encounters", error=exc.message)
            return []

    def complete_save_encounter(self, filename: str) -> None:
        name = validate_record_name(filename, "Filename")
        try:
            self.encounter_store.save(self.encounter, self.log.entries, name)
        except PersistenceError as exc:
            logger.error("Encounter save failed", name=name, error=exc.message)
            raise PersistenceError(
                f"Failed to save encounter: {exc.message}",
                record_name=name,
            ) from exc
        self.finish(f"Successfully saved encounter: {name}")

    def complete_load_encounter(self, filename: str) -> None:
        """Replace the encounter and the action log with a saved snapshot."""
        name = validate_record_name(filename, "Filename")
        try:
            snapshot = self.encounter_store.load(name)
        except PersistenceError as exc:
            logger.error("Encounter load failed", name=name, error=exc.message)
            raise type(exc)(f"Failed to load encounter: {exc.message}", record_name=name) from exc
        self.encounter = snapshot.encounter
        self.log.replace(snapshot.log)
        bind_context(encounter=name)
        self.finish(f"Successfully loaded encounter: {name}")

    # =========================================================================
    # Encounter Library
    # =========================================================================

    def list_library_entries(self) -> list[str]:
        try:
            return self.library_store.list_names()
        except PersistenceError as exc:
            logger.warning("Could not list library entries", error=exc.message)
            return []

    def complete_save_library(self, name: str, description: str, difficulty: str = "") -> None:
        """Validate the library wizard and save, asking first if the name is taken."""
        request = LibrarySaveRequest(
            name=validate_record_name(name, "Name"),
            description=description.strip(),
            difficulty=difficulty.strip(),
        )
        if not request.description:
            raise ValidationError("Description cannot be empty", field_name="description")

        if self.library_store.exists(request.name):
            self.mode = ConfirmingLibraryOverwrite(request=request)
            self.set_message(f"Library entry '{request.name}' already exists. Overwrite? (y/n)")
            return
        self._save_library(request)

    def confirm_overwrite_library(self, request: LibrarySaveRequest) -> None:
        self._save_library(request)

    def cancel_library_overwrite(self) -> None:
        self.finish("Save cancelled")

    def _save_library(self, request: LibrarySaveRequest) -> None:
        template = EncounterTemplate.from_encounter(
            self.encounter,
            name=request.name,
            description=request.description,
            difficulty=request.difficulty,
        )
        try:
            self.library_store.save(template, request.name)
        except PersistenceError as exc:
            logger.error("Library save failed", name=request.name, error=exc.message)
            raise PersistenceError(
                f"Failed to save library template: {exc.message}",
                record_name=request.name,
            ) from exc
        self.finish(f"Successfully saved to library: {request.name}")

    def select_library_template(self, name: str) -> None:
        """Start loading a blueprint, confirming first if the encounter is not empty."""
        if self.encounter.is_empty:
            self._start_library_initiatives(name)
            return
        self.mode = ConfirmingLibraryLoad(name=name)
        self.set_message("This will clear the current encounter. Continue? (y/n)")

    def confirm_load_library(self, name: str) -> None:
        self._start_library_initiatives(name)

    def cancel_library_load(self) -> None:
        self.finish("Load cancelled")

    def _start_library_initiatives(self, name: str) -> None:
        try:
            template = self.library_store.load(name)
        except PersistenceError as exc:
            logger.error("Library load failed", name=name, error=exc.message)
            raise type(exc)(
                f"Failed to load library template: {exc.message}",
                record_name=name,
            ) from exc
        if not template.combatants:
            self._finalize_library_load(template, [])
            return
        self.enter(SettingLibraryInitiatives.for_template(template))

    def complete_library_initiative(self, value: str) -> None:
        """Accept the initiative for the current blueprint combatant.

        Advances to the next combatant, or commits the whole blueprint after
        the last one.

        Raises:
            PreconditionError: If no blueprint is being loaded.
            ValidationError: If ``value`` is not an integer.
        """
        mode = self.mode
        if not isinstance(mode, SettingLibraryInitiatives):
            raise PreconditionError("Not in library initiative setting mode")
        initiative = parse_int(value, "Invalid initiative value", field_name="initiative")
        mode = mode.with_current_input(str(initiative))
        if not mode.is_last:
            self.mode = mode.evolve(current_index=mode.current_index + 1)
            return
        self._finalize_library_load(mode.template, [int(v) for v in mode.initiatives])

    def _finalize_library_load(self, template: EncounterTemplate, initiatives: list[int]) -> None:
        fresh = [
            entry.instantiate(initiative)
            for entry, initiative in zip(template.combatants, initiatives, strict=True)
        ]
        self.encounter.clear()
        self.log.clear()
        bind_context(encounter=template.name)
        for combatant in fresh:
            self.encounter.add_combatant(combatant)
        self.finish(f"Loaded encounter from library: {template.name}")
        self.push_log(f"Loaded encounter '{template.name}' from library")
        logger.info("Library entry loaded", name=template.name, combatants=len(fresh))


__all__ = [
    "NO_SAVED_ENCOUNTERS",
    "NO_LIBRARY_ENTRIES",
    "parse_int",
    "validate_record_name",
    "CombatSession",
]
