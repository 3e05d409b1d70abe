"""Condition catalog and start-of-turn status effects."""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from .dice import DiceRoller, RollResult, get_default_roller

if TYPE_CHECKING:
    from .tokens import Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Condition:
    """A named status with a mechanical consequence."""

    key: str
    label: str
    icon: str
    effect: str


# Catalog order is the display order
CONDITIONS: dict[str, Condition] = {
    "stunned": Condition("stunned", "Stunned", "💫", "Cannot act on their turn"),
    "poisoned": Condition("poisoned", "Poisoned", "☠️", "Disadvantage on attacks and ability checks"),
    "burning": Condition("burning", "Burning", "🔥", "Takes 1d6 fire damage at start of turn"),
    "frozen": Condition("frozen", "Frozen", "🧊", "Speed reduced to 0"),
    "blinded": Condition("blinded", "Blinded", "🙈", "Disadvantage on attacks, advantage for attackers"),
    "frightened": Condition(
        "frightened", "Frightened", "😱", "Disadvantage on ability checks, cannot move closer"
    ),
    "prone": Condition(
        "prone", "Prone", "🔻", "Disadvantage on attacks, melee attacks against have advantage"
    ),
    "invisible": Condition(
        "invisible", "Invisible", "👻", "Advantage on attacks, disadvantage for attackers"
    ),
    "blessed": Condition("blessed", "Blessed", "✨", "+1d4 to attacks and saves"),
    "shielded": Condition("shielded", "Shielded", "🛡️", "+2 AC until next turn"),
}


def _normalize(condition_key: str) -> str:
    return condition_key.strip().lower()


def get_condition(condition_key: str) -> Condition | None:
    """Look up a condition by key, or None if it is not in the catalog."""
    return CONDITIONS.get(_normalize(condition_key))


def apply_condition(token: "Token", condition_key: str) -> "Token":
    """Return a copy of ``token`` with the condition added.

    Adding a condition that is already present returns the token unchanged.
    Keys outside the catalog are logged and ignored.
    """
    key = _normalize(condition_key)
    if key not in CONDITIONS:
        logger.warning(f"Ignoring unknown condition '{condition_key}' for {token.label}")
        return token
    if key in token.conditions:
        return token
    return replace(token, conditions=token.conditions | {key})


def remove_condition(token: "Token", condition_key: str) -> "Token":
    """Return a copy of ``token`` without the condition. Absent keys are a no-op."""
    key = _normalize(condition_key)
    if key not in token.conditions:
        return token
    return replace(token, conditions=token.conditions - {key})


class TurnEffectKind(Enum):
    """What a start-of-turn effect asks the caller to do."""

    DAMAGE = "damage"
    DEBUFF = "debuff"
    SKIP = "skip"


@dataclass(frozen=True)
class TurnEffect:
    """A start-of-turn consequence of a condition, for the caller to apply."""

    kind: TurnEffectKind
    condition: str
    narrative: str
    amount: int = 0
    new_hp: int | None = None
    roll: RollResult | None = None
    disadvantage: bool = False
    skip_turn: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = {
            "type": self.kind.value,
            "condition": self.condition,
            "narrative": self.narrative,
        }
        if self.kind == TurnEffectKind.DAMAGE:
            data["amount"] = self.amount
            data["new_hp"] = self.new_hp
        if self.disadvantage:
            data["disadvantage"] = True
        if self.skip_turn:
            data["skip_turn"] = True
        return data


def _burning(token: "Token", roller: DiceRoller, burning_damage: str) -> TurnEffect:
    damage = roller.roll_damage(burning_damage)
    return TurnEffect(
        kind=TurnEffectKind.DAMAGE,
        condition="burning",
        narrative=f"🔥 **{token.label}** takes **{damage.total}** fire damage from burning!",
        amount=damage.total,
        new_hp=max(0, token.hp - damage.total),
        roll=damage,
    )


def _poisoned(token: "Token", roller: DiceRoller, burning_damage: str) -> TurnEffect:
    return TurnEffect(
        kind=TurnEffectKind.DEBUFF,
        condition="poisoned",
        narrative=f"☠️ **{token.label}** is poisoned: disadvantage on attacks and ability checks.",
        disadvantage=True,
    )


def _stunned(token: "Token", roller: DiceRoller, burning_damage: str) -> TurnEffect:
    return TurnEffect(
        kind=TurnEffectKind.SKIP,
        condition="stunned",
        narrative=f"💫 **{token.label}** is stunned and cannot act!",
        skip_turn=True,
    )


# Evaluated in this order; conditions without a start-of-turn rule are skipped
TURN_EFFECT_HANDLERS = (
    ("burning", _burning),
    ("poisoned", _poisoned),
    ("stunned", _stunned),
)


def process_condition_effects(
    token: "Token",
    roller: DiceRoller | None = None,
    burning_damage: str = "1d6",
) -> list[TurnEffect]:
    """Work out start-of-turn effects for a token without changing it.

    Args:
        token: Token whose turn is starting
        roller: Dice roller for damage. Uses the shared roller if not provided.
        burning_damage: Damage dice for the burning condition

    Returns:
        One TurnEffect per applicable condition, burning then poisoned then stunned
    """
    roller = roller or get_default_roller()
    effects = []
    for key, handler in TURN_EFFECT_HANDLERS:
        if key in token.conditions:
            effects.append(handler(token, roller, burning_damage))
    return effects
