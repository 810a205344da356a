"""Tests for stored record shapes."""

from __future__ import annotations

from combat_tracker.models import (
    Combatant,
    CombatantTemplate,
    CombatEncounter,
    ConcentrationInfo,
    ConditionType,
    EncounterTemplate,
    LibraryCombatant,
    StatusEffect,
)


class TestCombatantTemplate:
    """Tests for reusable combatant templates."""

    def test_from_combatant_keeps_stat_block(self, goblin: Combatant) -> None:
        """Templates copy the stat block only."""
        goblin.take_damage(3)
        template = CombatantTemplate.from_combatant(goblin)
        assert template.model_dump() == {
            "name": "Goblin",
            "hp_max": 7,
            "armor_class": 15,
            "initiative": 12,
            "is_player": False,
        }

    def test_matches_ignores_case(self) -> None:
        """Template names match case-insensitively."""
        template = CombatantTemplate(name="Goblin", hp_max=7, armor_class=15)
        assert template.matches("gOBLIN")
        assert not template.matches("Hobgoblin")


class TestEncounterTemplate:
    """Tests for library blueprints."""

    def test_strips_live_state(self, encounter: CombatEncounter) -> None:
        """Blueprints drop HP, effects, concentration and initiative."""
        aria = encounter.combatants[0]
        aria.take_damage(5)
        aria.add_status_effect(StatusEffect(condition=ConditionType.PRONE, duration=2))
        aria.set_concentration(ConcentrationInfo(spell_name="Bless"))

        template = EncounterTemplate.from_encounter(
            encounter, name="ambush", description="Roadside ambush", difficulty="Hard"
        )

        assert [c.name for c in template.combatants] == ["Aria", "Goblin", "Brynn"]
        assert set(LibraryCombatant.model_fields) == {"name", "hp_max", "armor_class", "is_player"}
        assert template.difficulty == "Hard"

    def test_instantiate_is_fresh(self) -> None:
        """Instantiated combatants start at full HP with the given initiative."""
        entry = LibraryCombatant(name="Orc", hp_max=15, armor_class=13)
        combatant = entry.instantiate(9)
        assert combatant.hp_current == 15
        assert combatant.initiative == 9
        assert combatant.status_effects == []
        assert combatant.concentration is None

    def test_json_round_trip(self, encounter: CombatEncounter) -> None:
        """Blueprints survive JSON serialization."""
        template = EncounterTemplate.from_encounter(encounter, name="ambush", description="d")
        restored = EncounterTemplate.model_validate_json(template.model_dump_json())
        assert restored == template
