"""Action resolution, initiative and death saves."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from ..config import CombatConfig
from .actions import (
    Action,
    ActionType,
    AttackAction,
    CastSpellAction,
    DefendAction,
    DiceRollAction,
    GenericAction,
    InteractAction,
    MovementAction,
    SkillCheckAction,
)
from .dice import DiceRoller, RollResult, format_roll, get_default_roller
from .icons import (
    ICON_FAILURE,
    ICON_HEART,
    ICON_INITIATIVE,
    ICON_MAGIC,
    ICON_MOVE,
    ICON_NOTE,
    ICON_SEARCH,
    ICON_SHIELD,
    ICON_SKULL,
    ICON_SUCCESS,
    ICON_SWORD,
    ICON_TALK,
)
from .tokens import DeathSaves, Token

logger = logging.getLogger(__name__)


# Scanned in this order; the first skill named in the text wins
SKILL_TO_ABILITY: tuple[tuple[str, str], ...] = (
    ("athletics", "str"),
    ("acrobatics", "dex"),
    ("stealth", "dex"),
    ("sleight", "dex"),
    ("arcana", "int"),
    ("history", "int"),
    ("investigation", "int"),
    ("nature", "int"),
    ("religion", "int"),
    ("insight", "wis"),
    ("medicine", "wis"),
    ("perception", "wis"),
    ("survival", "wis"),
    ("animal handling", "wis"),
    ("deception", "cha"),
    ("intimidation", "cha"),
    ("performance", "cha"),
    ("persuasion", "cha"),
)

ABILITY_NAMES = {
    "str": "Strength",
    "dex": "Dexterity",
    "con": "Constitution",
    "int": "Intelligence",
    "wis": "Wisdom",
    "cha": "Charisma",
}


class ResultType(Enum):
    """Which log channel a result belongs in."""

    DICE = "dice"
    COMBAT = "combat"
    ACTION = "action"
    MOVEMENT = "movement"
    NARRATIVE = "narrative"


@dataclass(frozen=True)
class ConditionEffect:
    """Instruction to put a condition on a token."""

    target: str
    condition: str
    kind: str = "condition"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "target": self.target, "condition": self.condition}


@dataclass(frozen=True)
class ActionResult:
    """Everything the caller needs to show and apply a resolved action.

    The engine never applies these changes itself. ``previous_target_hp`` is
    the HP the damage was computed against, so the caller can detect that the
    target changed in the meantime.
    """

    narrative: str
    type: ResultType
    rolls: tuple[RollResult, ...] = ()
    action_type: ActionType | None = None
    target_id: str | None = None
    damage: int | None = None
    new_target_hp: int | None = None
    previous_target_hp: int | None = None
    effects: tuple[ConditionEffect, ...] = ()
    requires_grid_move: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "narrative": self.narrative,
            "type": self.type.value,
            "rolls": [r.to_dict() for r in self.rolls],
        }
        if self.action_type is not None:
            data["action_type"] = self.action_type.value
        if self.target_id is not None:
            data["target_id"] = self.target_id
        if self.damage is not None:
            data["damage"] = self.damage
            data["new_target_hp"] = self.new_target_hp
        if self.effects:
            data["effects"] = [e.to_dict() for e in self.effects]
        if self.requires_grid_move:
            data["requires_grid_move"] = True
        return data


NO_ACTION = ActionResult(narrative="No action to resolve.", type=ResultType.NARRATIVE)


@dataclass(frozen=True)
class InitiativeEntry:
    """One combatant's place in the initiative order."""

    token_id: str
    label: str
    roll: RollResult
    total: int
    is_npc: bool


class DeathSaveState(Enum):
    """Where a downed combatant stands after a death save."""

    ACTIVE = "active"
    STABILIZED = "stabilized"
    DEAD = "dead"
    REVIVED = "revived"


@dataclass(frozen=True)
class DeathSaveResult:
    """Outcome of a death save. ``saves`` holds the updated counters."""

    roll: RollResult
    state: DeathSaveState
    saves: DeathSaves
    narrative: str
    new_hp: int | None = None

    @property
    def dead(self) -> bool:
        return self.saves.failures >= 3

    @property
    def stabilized(self) -> bool:
        return self.state == DeathSaveState.REVIVED or self.saves.successes >= 3

    @property
    def revived(self) -> bool:
        return self.state == DeathSaveState.REVIVED


@dataclass(frozen=True)
class AttackOutcome:
    """Result of a weapon attack between two combatants."""

    attacker: str
    target: str
    attack_roll: RollResult
    narrative: str
    damage: RollResult | None = None
    new_target_hp: int | None = None

    @property
    def hit(self) -> bool:
        return bool(self.attack_roll.hit)

    @property
    def is_critical(self) -> bool:
        return self.attack_roll.is_critical

    @property
    def is_fumble(self) -> bool:
        return self.attack_roll.is_fumble

    @property
    def target_downed(self) -> bool:
        return self.new_target_hp is not None and self.new_target_hp <= 0


@dataclass(frozen=True)
class SkillCheckOutcome:
    """Result of a skill or ability check."""

    roll: RollResult
    ability: str
    skill_name: str
    narrative: str

    @property
    def success(self) -> bool:
        return bool(self.roll.success)


class ActionResolver:
    """Resolves actions into results without touching any shared state."""

    def __init__(self, roller: DiceRoller | None = None, config: CombatConfig | None = None):
        """Initialize the resolver.

        Args:
            roller: Dice roller to draw from. Uses the shared roller if not provided.
            config: Combat defaults. Uses CombatConfig() if not provided.
        """
        self.roller = roller or get_default_roller()
        self.config = config or CombatConfig()

    def resolve_action(self, action: Action | None) -> ActionResult:
        """Resolve a parsed action.

        Args:
            action: Action from ``parse_action``

        Returns:
            ActionResult with a non-empty narrative. Missing actions or actors
            give a neutral "No action to resolve." result.
        """
        if action is None or action.actor is None:
            return NO_ACTION

        match action:
            case DiceRollAction(notation=notation):
                result = self._resolve_dice_roll(notation)
            case AttackAction():
                result = self._resolve_attack(action)
            case CastSpellAction():
                result = self._resolve_spell(action)
            case SkillCheckAction():
                result = self._resolve_skill(action)
            case MovementAction():
                result = self._resolve_movement(action)
            case DefendAction():
                result = self._resolve_defend(action)
            case InteractAction():
                result = self._resolve_interact(action)
            case GenericAction():
                result = self._resolve_generic(action)
            case _:
                return NO_ACTION

        logger.info(f"Resolved {action.type.value} for {action.actor.label}")
        return replace(result, action_type=action.type)

    def _resolve_dice_roll(self, notation: str | None) -> ActionResult:
        result = self.roller.roll(notation or "d20")
        return ActionResult(narrative=format_roll(result), type=ResultType.DICE, rolls=(result,))

    def _targeted_attack(
        self,
        target: Token,
        modifier: int,
        damage_notation: str,
        opening: str,
        announce_down: bool = True,
    ) -> ActionResult:
        attack = self.roller.roll_attack(modifier, target.armor_class)
        narrative = f"{opening} {format_roll(attack)}"

        if not attack.hit:
            return ActionResult(
                narrative=narrative,
                type=ResultType.COMBAT,
                rolls=(attack,),
                target_id=target.id,
            )

        damage = self.roller.roll_damage(damage_notation, attack.is_critical)
        new_hp = max(0, target.hp - damage.total)
        narrative += f" {format_roll(damage)}"
        if announce_down and new_hp <= 0:
            narrative += f" {ICON_SKULL} **{target.label}** is down!"

        return ActionResult(
            narrative=narrative,
            type=ResultType.COMBAT,
            rolls=(attack, damage),
            target_id=target.id,
            damage=damage.total,
            new_target_hp=new_hp,
            previous_target_hp=target.hp,
        )

    def _resolve_attack(self, action: AttackAction) -> ActionResult:
        actor = action.actor
        str_mod = actor.modifier("str")

        if action.target is None:
            attack = self.roller.roll_attack(str_mod, self.config.default_armor_class)
            return ActionResult(
                narrative=f"{ICON_SWORD} **{actor.label}** attacks! {format_roll(attack)}",
                type=ResultType.COMBAT,
                rolls=(attack,),
            )

        return self._targeted_attack(
            action.target,
            str_mod,
            self.config.weapon_damage,
            f"{ICON_SWORD} **{actor.label}** attacks **{action.target.label}**!",
        )

    def _resolve_spell(self, action: CastSpellAction) -> ActionResult:
        actor = action.actor
        int_mod = actor.modifier("int")

        if action.target is not None:
            return self._targeted_attack(
                action.target,
                int_mod,
                self.config.spell_damage,
                f"{ICON_MAGIC} **{actor.label}** casts a spell at **{action.target.label}**!",
                announce_down=False,
            )

        check = self.roller.roll_ability_check(int_mod, self.config.spell_dc)
        return ActionResult(
            narrative=f"{ICON_MAGIC} **{actor.label}** channels arcane energy: {format_roll(check)}",
            type=ResultType.ACTION,
            rolls=(check,),
        )

    def _resolve_skill(self, action: SkillCheckAction) -> ActionResult:
        ability, skill_name = find_skill(action.raw_input)
        outcome = self.resolve_skill_check(action.actor, ability, self.config.skill_dc, skill_name)
        return ActionResult(
            narrative=f"{ICON_SEARCH} **{action.actor.label}** makes a {skill_name} check: {format_roll(outcome.roll)}",
            type=ResultType.ACTION,
            rolls=(outcome.roll,),
        )

    def _resolve_movement(self, action: MovementAction) -> ActionResult:
        return ActionResult(
            narrative=f"{ICON_MOVE} **{action.actor.label}** moves across the battlefield.",
            type=ResultType.MOVEMENT,
            requires_grid_move=True,
        )

    def _resolve_defend(self, action: DefendAction) -> ActionResult:
        actor = action.actor
        return ActionResult(
            narrative=f"{ICON_SHIELD} **{actor.label}** takes a defensive stance. (+2 AC until next turn)",
            type=ResultType.ACTION,
            effects=(ConditionEffect(target=actor.id, condition="shielded"),),
        )

    def _resolve_interact(self, action: InteractAction) -> ActionResult:
        actor = action.actor
        check = self.roller.roll_ability_check(actor.modifier("wis"), self.config.interact_dc)
        return ActionResult(
            narrative=f"{ICON_TALK} **{actor.label}** interacts: {format_roll(check)}",
            type=ResultType.ACTION,
            rolls=(check,),
        )

    def _resolve_generic(self, action: GenericAction) -> ActionResult:
        return ActionResult(
            narrative=f'{ICON_NOTE} **{action.actor.label}**: *"{action.raw_input}"*',
            type=ResultType.NARRATIVE,
        )

    def resolve_attack(
        self,
        attacker: Token,
        target: Token,
        weapon_damage: str = "1d6",
        attack_bonus: int = 0,
    ) -> AttackOutcome:
        """Make a weapon attack from one combatant to another.

        Args:
            attacker: Attacking token (Strength modifier applies)
            target: Target token
            weapon_damage: Damage dice notation
            attack_bonus: Extra bonus on top of the Strength modifier

        Returns:
            AttackOutcome with the rolls, new target HP on a hit, and narrative
        """
        attack = self.roller.roll_attack(attacker.modifier("str") + attack_bonus, target.armor_class)

        if not attack.hit:
            if attack.is_fumble:
                narrative = f"{ICON_SWORD} **{attacker.label}** swings wildly at **{target.label}**: {format_roll(attack)}"
            else:
                narrative = f"{ICON_SWORD} **{attacker.label}** attacks **{target.label}**: {format_roll(attack)}"
            return AttackOutcome(attacker.label, target.label, attack, narrative)

        damage = self.roller.roll_damage(weapon_damage, attack.is_critical)
        new_hp = max(0, target.hp - damage.total)

        if attack.is_critical:
            narrative = f"{ICON_SWORD} **{attacker.label}** strikes **{target.label}** with devastating precision!"
        else:
            narrative = f"{ICON_SWORD} **{attacker.label}** attacks **{target.label}**."
        narrative += f" {format_roll(attack)} {format_roll(damage)}"
        if new_hp <= 0:
            narrative += f" {ICON_SKULL} **{target.label}** is down!"

        return AttackOutcome(attacker.label, target.label, attack, narrative, damage, new_hp)

    def resolve_skill_check(
        self,
        token: Token,
        ability: str,
        dc: int,
        skill_name: str = "",
    ) -> SkillCheckOutcome:
        """Make a skill or ability check.

        Args:
            token: Token making the check
            ability: Short ability key ("dex", "wis", ...)
            dc: Difficulty class
            skill_name: Skill to name in the narrative. Defaults to the ability name.

        Returns:
            SkillCheckOutcome
        """
        check = self.roller.roll_ability_check(token.modifier(ability), dc)
        name = skill_name or ABILITY_NAMES.get(ability, ability)
        narrative = f"{ICON_SEARCH} **{token.label}** attempts a {name} check: {format_roll(check)}"
        return SkillCheckOutcome(check, ability, name, narrative)

    def roll_all_initiative(self, tokens: Iterable[Token]) -> list[InitiativeEntry]:
        """Roll initiative for every token, highest total first.

        Ties keep roster order; Dexterity is not used as a tiebreaker.
        """
        entries = []
        for token in tokens:
            result = self.roller.roll_initiative(token.modifier("dex"))
            entries.append(
                InitiativeEntry(
                    token_id=token.id,
                    label=token.label,
                    roll=result,
                    total=result.total,
                    is_npc=token.is_npc,
                )
            )
        return sorted(entries, key=lambda e: e.total, reverse=True)

    def roll_death_save(self, token: Token) -> DeathSaveResult:
        """Roll a death save for a downed token.

        A natural 20 revives the token at 1 HP. A natural 1 counts as two
        failures. Three failures is death, three successes is stable.
        """
        check = self.roller.roll_ability_check(0, self.config.death_save_dc)
        face = check.rolls[0]
        saves = token.death_saves

        if face == 20:
            narrative = (
                f"{ICON_HEART} **{token.label}** rolls a NAT 20 on their death save! "
                f"They regain 1 HP and are conscious!"
            )
            return DeathSaveResult(check, DeathSaveState.REVIVED, DeathSaves(), narrative, new_hp=1)

        if face == 1:
            saves = replace(saves, failures=saves.failures + 2)
            narrative = f"{ICON_SKULL} **{token.label}** rolls a NAT 1: two death save failures! ({saves.failures}/3)"
        elif check.success:
            saves = replace(saves, successes=saves.successes + 1)
            narrative = f"{ICON_SUCCESS} **{token.label}** succeeds a death save ({saves.successes}/3 successes)"
        else:
            saves = replace(saves, failures=saves.failures + 1)
            narrative = f"{ICON_FAILURE} **{token.label}** fails a death save ({saves.failures}/3 failures)"

        state = DeathSaveState.ACTIVE
        if saves.successes >= 3:
            state = DeathSaveState.STABILIZED
            narrative += f" {ICON_HEART} **{token.label}** has stabilized!"
        if saves.failures >= 3:
            state = DeathSaveState.DEAD
            narrative += f" {ICON_SKULL} **{token.label}** has died!"

        logger.debug(f"Death save for {token.label}: {face} -> {state.value}")
        return DeathSaveResult(check, state, saves, narrative)


def find_skill(text: str) -> tuple[str, str]:
    """Find the first known skill named in the text.

    Returns:
        Tuple of (ability key, skill name). Defaults to ("wis", "Perception").
    """
    lowered = text.lower()
    for skill, ability in SKILL_TO_ABILITY:
        if skill in lowered:
            return ability, skill.capitalize()
    return "wis", "Perception"


def format_initiative_order(entries: Iterable[InitiativeEntry]) -> str:
    """Numbered initiative listing for the session log."""
    lines = [f"{ICON_INITIATIVE} Initiative rolled!"]
    for position, entry in enumerate(entries, start=1):
        lines.append(f"{position}. **{entry.label}** rolled {entry.total}")
    return "\n".join(lines)


def resolve_action(action: Action | None) -> ActionResult:
    """Resolve an action with the shared roller and default combat settings."""
    return ActionResolver().resolve_action(action)


def roll_all_initiative(tokens: Iterable[Token]) -> list[InitiativeEntry]:
    return ActionResolver().roll_all_initiative(tokens)


def roll_death_save(token: Token) -> DeathSaveResult:
    return ActionResolver().roll_death_save(token)


def resolve_attack(
    attacker: Token,
    target: Token,
    weapon_damage: str = "1d6",
    attack_bonus: int = 0,
) -> AttackOutcome:
    return ActionResolver().resolve_attack(attacker, target, weapon_damage, attack_bonus)


def resolve_skill_check(token: Token, ability: str, dc: int, skill_name: str = "") -> SkillCheckOutcome:
    return ActionResolver().resolve_skill_check(token, ability, dc, skill_name)
