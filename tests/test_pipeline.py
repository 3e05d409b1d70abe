"""Tests for the resolution pipeline."""

import pytest

from cryospace.config import AppConfig, CombatConfig, DiceConfig
from cryospace.game.actions import ActionType
from cryospace.game.combat import ActionResult, DeathSaveState, ResultType
from cryospace.game.conditions import TurnEffectKind
from cryospace.game.dice import DiceRoller, ScriptedRandom
from cryospace.game.pipeline import ResolutionPipeline, log_category, resolve_input
from cryospace.game.tokens import AbilityScores, Roster, Token


def pipeline_with(*faces: int, config: CombatConfig | None = None) -> ResolutionPipeline:
    return ResolutionPipeline(DiceRoller(rng=ScriptedRandom(faces)), config)


@pytest.fixture
def roster():
    return Roster(
        [
            Token(id="hero", label="Mira the Bold", hp=24, max_hp=24, armor_class=15,
                  abilities=AbilityScores(strength=16, dexterity=14)),
            Token(id="gob", label="Goblin Warrior", hp=7, max_hp=7, armor_class=13, is_npc=True),
        ]
    )


class TestSubmit:
    """Test parse-and-resolve in one step."""

    def test_empty_input_gives_nothing(self, roster):
        pipeline = ResolutionPipeline()
        assert pipeline.submit("", roster["hero"], roster.tokens) is None
        assert pipeline.submit("   ", roster["hero"], roster.tokens) is None

    def test_attack_hits_goblin(self, roster):
        # 15 + 3 STR vs AC 13, then 5 damage
        result = pipeline_with(15, 5).submit("I attack the goblin", roster["hero"], roster.tokens)

        assert result.type == ResultType.COMBAT
        assert result.action_type == ActionType.ATTACK
        assert result.target_id == "gob"
        assert result.damage == 5
        assert result.new_target_hp == 2
        assert roster.apply_result(result)["gob"].hp == 2

    def test_lethal_attack(self, roster):
        result = pipeline_with(15, 6, config=CombatConfig(weapon_damage="1d6+3")).submit(
            "I attack the goblin", roster["hero"], roster.tokens
        )
        assert result.new_target_hp == 0
        assert "is down!" in result.narrative

    def test_dice_roll(self, roster):
        result = pipeline_with(2, 5).submit("/roll 2d6+1", roster["hero"])
        assert result.type == ResultType.DICE
        assert result.rolls[0].total == 8

    def test_without_actor(self):
        result = ResolutionPipeline().submit("I attack", None)
        assert result.narrative == "No action to resolve."

    def test_resolve_input(self, roster):
        result = resolve_input("I sing loudly", roster["hero"], roster.tokens)
        assert result.type == ResultType.NARRATIVE
        assert "I sing loudly" in result.narrative


class TestLogCategory:
    """Test log channel routing."""

    @pytest.mark.parametrize(
        "result_type,category",
        [
            (ResultType.COMBAT, "combat"),
            (ResultType.DICE, "dice"),
            (ResultType.ACTION, "action"),
            (ResultType.MOVEMENT, "action"),
            (ResultType.NARRATIVE, "action"),
        ],
    )
    def test_category(self, result_type, category):
        assert log_category(ActionResult(narrative="x", type=result_type)) == category


class TestFromConfig:
    """Test building pipelines from application config."""

    def test_seeded_pipelines_agree(self, roster):
        config = AppConfig(dice=DiceConfig(seed=2024))
        first = ResolutionPipeline.from_config(config)
        second = ResolutionPipeline.from_config(config)

        a = [first.submit("/roll 1d20", roster["hero"]).rolls[0].total for _ in range(10)]
        b = [second.submit("/roll 1d20", roster["hero"]).rolls[0].total for _ in range(10)]
        assert a == b

    def test_uses_combat_config(self):
        config = AppConfig(combat=CombatConfig(spell_dc=18))
        assert ResolutionPipeline.from_config(config).config.spell_dc == 18


class TestTurnHelpers:
    """Test start-of-turn, initiative and death saves through the pipeline."""

    def test_start_of_turn_uses_configured_burning_damage(self):
        token = Token(id="hero", label="Mira", hp=10, conditions=frozenset({"burning"}))
        pipeline = pipeline_with(2, 2, config=CombatConfig(burning_damage="2d4"))

        effects = pipeline.start_of_turn(token)
        assert effects[0].kind == TurnEffectKind.DAMAGE
        assert effects[0].new_hp == 6

    def test_roll_initiative(self, roster):
        # hero 5 + 2, goblin 18 + 0
        entries = pipeline_with(5, 18).roll_initiative(roster.tokens)
        assert [e.token_id for e in entries] == ["gob", "hero"]

    def test_death_save(self):
        token = Token(id="hero", label="Mira", hp=0)
        assert pipeline_with(20).death_save(token).state == DeathSaveState.REVIVED
