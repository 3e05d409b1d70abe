"""Tests for conditions and start-of-turn effects."""

from cryospace.game.conditions import (
    CONDITIONS,
    TurnEffectKind,
    apply_condition,
    get_condition,
    process_condition_effects,
    remove_condition,
)
from cryospace.game.dice import DiceRoller, ScriptedRandom
from cryospace.game.tokens import Token


class TestCatalog:
    """Test the condition catalog."""

    def test_ten_conditions_in_order(self):
        assert list(CONDITIONS) == [
            "stunned", "poisoned", "burning", "frozen", "blinded",
            "frightened", "prone", "invisible", "blessed", "shielded",
        ]

    def test_entries_have_label_icon_and_effect(self):
        for key, condition in CONDITIONS.items():
            assert condition.key == key
            assert condition.label == key.title()
            assert condition.icon
            assert condition.effect

    def test_get_condition(self):
        assert get_condition(" Shielded ").effect == "+2 AC until next turn"
        assert get_condition("petrified") is None


class TestApplyRemove:
    """Test adding and removing conditions."""

    def setup_method(self):
        self.token = Token(id="t1", label="Mira")

    def test_apply(self):
        poisoned = apply_condition(self.token, "poisoned")
        assert poisoned.conditions == frozenset({"poisoned"})
        assert self.token.conditions == frozenset()

    def test_apply_is_idempotent(self):
        once = apply_condition(self.token, "poisoned")
        twice = apply_condition(once, "poisoned")
        assert twice.conditions == once.conditions
        assert twice is once

    def test_apply_normalizes_key(self):
        assert apply_condition(self.token, "BURNING").has_condition("burning")

    def test_unknown_condition_is_ignored(self):
        assert apply_condition(self.token, "petrified") is self.token

    def test_remove(self):
        token = apply_condition(apply_condition(self.token, "prone"), "blessed")
        assert remove_condition(token, "prone").conditions == frozenset({"blessed"})

    def test_remove_absent_is_noop(self):
        assert remove_condition(self.token, "stunned") is self.token


class TestTurnEffects:
    """Test processing of start-of-turn effects."""

    def test_no_conditions(self):
        assert process_condition_effects(Token(id="t1", label="Mira")) == []

    def test_burning_rolls_damage(self):
        token = Token(id="t1", label="Mira", hp=10, conditions=frozenset({"burning"}))
        effects = process_condition_effects(token, DiceRoller(rng=ScriptedRandom([4])))

        assert len(effects) == 1
        assert effects[0].kind == TurnEffectKind.DAMAGE
        assert effects[0].amount == 4
        assert effects[0].new_hp == 6
        assert "4" in effects[0].narrative
        assert token.hp == 10

    def test_burning_floors_at_zero(self):
        token = Token(id="t1", label="Mira", hp=2, conditions=frozenset({"burning"}))
        effects = process_condition_effects(token, DiceRoller(rng=ScriptedRandom([6])))
        assert effects[0].new_hp == 0

    def test_poisoned_flags_disadvantage(self):
        token = Token(id="t1", label="Mira", conditions=frozenset({"poisoned"}))
        effect = process_condition_effects(token)[0]
        assert effect.kind == TurnEffectKind.DEBUFF
        assert effect.disadvantage is True
        assert effect.roll is None

    def test_stunned_skips_turn(self):
        token = Token(id="t1", label="Mira", conditions=frozenset({"stunned"}))
        effect = process_condition_effects(token)[0]
        assert effect.kind == TurnEffectKind.SKIP
        assert effect.skip_turn is True

    def test_fixed_order(self):
        token = Token(
            id="t1",
            label="Mira",
            conditions=frozenset({"stunned", "blessed", "poisoned", "burning"}),
        )
        effects = process_condition_effects(token, DiceRoller(rng=ScriptedRandom([1])))
        assert [e.condition for e in effects] == ["burning", "poisoned", "stunned"]

    def test_custom_burning_damage(self):
        token = Token(id="t1", label="Mira", hp=20, conditions=frozenset({"burning"}))
        effects = process_condition_effects(
            token, DiceRoller(rng=ScriptedRandom([3, 3])), burning_damage="2d4"
        )
        assert effects[0].amount == 6

    def test_to_dict(self):
        token = Token(id="t1", label="Mira", hp=10, conditions=frozenset({"burning"}))
        data = process_condition_effects(token, DiceRoller(rng=ScriptedRandom([2])))[0].to_dict()
        assert data["type"] == "damage"
        assert data["new_hp"] == 8
