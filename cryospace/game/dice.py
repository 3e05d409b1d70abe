"""Dice rolling engine: notation parsing, checks, attacks and damage."""

import logging
import random
import re
from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .errors import InvalidNotationError
from .icons import (
    ICON_CRITICAL,
    ICON_DAMAGE,
    ICON_DICE,
    ICON_FUMBLE,
    ICON_HIT,
    ICON_INITIATIVE,
    ICON_MISS,
    ICON_TARGET,
)

logger = logging.getLogger(__name__)


class RollType(Enum):
    """What a roll was made for. Drives how it is formatted."""

    PLAIN = "plain"
    ATTACK = "attack"
    DAMAGE = "damage"
    ABILITY_CHECK = "ability_check"
    INITIATIVE = "initiative"


@dataclass(frozen=True)
class DiceNotation:
    """Parsed form of ``[count]d<sides>[+-modifier]``."""

    count: int
    sides: int
    modifier: int = 0

    def __str__(self) -> str:
        text = f"{self.count}d{self.sides}"
        if self.modifier > 0:
            text += f"+{self.modifier}"
        elif self.modifier < 0:
            text += str(self.modifier)
        return text


@dataclass(frozen=True)
class RollResult:
    """Result of a roll with the full breakdown.

    A result whose ``error`` is set came from malformed notation: it has no
    faces and a total of 0, so it can be dropped into a narrative as is.
    """

    notation: str
    rolls: tuple[int, ...] = ()
    modifier: int = 0
    subtotal: int = 0
    total: int = 0
    is_critical: bool = False
    is_fumble: bool = False
    roll_type: RollType = RollType.PLAIN

    # Checks and attacks
    dc: int | None = None
    target_ac: int | None = None
    success: bool | None = None
    hit: bool | None = None

    # Advantage/disadvantage keep the rejected draw for transparency
    advantage: bool = False
    disadvantage: bool = False
    other_roll: "RollResult | None" = None

    error: str | None = None

    @property
    def is_error(self) -> bool:
        """True if this result stands in for an unparseable notation."""
        return self.error is not None

    @property
    def natural_roll(self) -> int | None:
        """The unmodified face of a single-die roll."""
        if len(self.rolls) == 1:
            return self.rolls[0]
        return None

    def __str__(self) -> str:
        return format_roll(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {
            "notation": self.notation,
            "rolls": list(self.rolls),
            "modifier": self.modifier,
            "subtotal": self.subtotal,
            "total": self.total,
            "is_critical": self.is_critical,
            "is_fumble": self.is_fumble,
            "type": self.roll_type.value,
        }
        if self.dc is not None:
            data["dc"] = self.dc
            data["success"] = self.success
        if self.target_ac is not None:
            data["target_ac"] = self.target_ac
            data["hit"] = self.hit
        if self.advantage:
            data["advantage"] = True
        if self.disadvantage:
            data["disadvantage"] = True
        if self.other_roll is not None:
            data["other_roll"] = self.other_roll.to_dict()
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class Die:
    """A die in the standard set."""

    sides: int
    label: str
    icon: str


DICE_SET: tuple[Die, ...] = (
    Die(4, "d4", "🔷"),
    Die(6, "d6", "🎲"),
    Die(8, "d8", "💎"),
    Die(10, "d10", "🔶"),
    Die(12, "d12", "⬡"),
    Die(20, "d20", "⭐"),
    Die(100, "d100", "💯"),
)


class ScriptedRandom:
    """Random source that replays preset die faces.

    Once the script runs out, draws come from an ordinary seeded generator.
    Pass it to ``DiceRoller(rng=...)`` to make rolls deterministic.
    """

    def __init__(self, faces: Iterable[int] = (), seed: int | None = None):
        self.faces = list(faces)
        self._fallback = random.Random(seed)

    def push(self, *faces: int) -> None:
        """Queue more faces at the end of the script."""
        self.faces.extend(faces)

    def seed(self, seed: int | None) -> None:
        self._fallback.seed(seed)

    def randint(self, a: int, b: int) -> int:
        if not self.faces:
            return self._fallback.randint(a, b)
        face = self.faces.pop(0)
        if not a <= face <= b:
            raise ValueError(f"Scripted face {face} is outside [{a}, {b}]")
        return face


class DiceRoller:
    """Dice rolling engine with notation parsing."""

    # Matches: d20, 2d6, 1d20+5, 4d6-2
    DICE_PATTERN = re.compile(r"^(\d*)d(\d+)([+-]\d+)?$", re.IGNORECASE)

    # Largest pool a single notation may ask for
    MAX_DICE = 100
    MAX_SIDES = 1000

    def __init__(self, rng: random.Random | ScriptedRandom | None = None):
        """Initialize the dice roller.

        Args:
            rng: Random number generator instance. Uses default if not provided.
        """
        self.rng = rng or random.Random()

    def seed(self, seed: int) -> None:
        """Seed the random number generator for reproducible rolls.

        Args:
            seed: Seed value
        """
        self.rng.seed(seed)

    def parse_notation(self, notation: str) -> DiceNotation:
        """Parse dice notation string into a DiceNotation.

        Args:
            notation: Dice notation string (e.g., "2d6+4", "d20")

        Returns:
            DiceNotation with parsed parameters

        Raises:
            InvalidNotationError: If notation is invalid
        """
        match = self.DICE_PATTERN.match(notation.strip().lower())
        if not match:
            raise InvalidNotationError(notation)

        try:
            count = int(match.group(1)) if match.group(1) else 1
            sides = int(match.group(2))
            modifier = int(match.group(3)) if match.group(3) else 0
        except ValueError:
            # Digit strings past the interpreter's int conversion limit
            raise InvalidNotationError(notation) from None

        if not 1 <= count <= self.MAX_DICE or not 1 <= sides <= self.MAX_SIDES:
            raise InvalidNotationError(notation)

        return DiceNotation(count=count, sides=sides, modifier=modifier)

    def roll_notation(self, parsed: DiceNotation, notation: str | None = None) -> RollResult:
        """Roll already-parsed dice.

        Args:
            parsed: DiceNotation to roll
            notation: Original notation text to report. Defaults to the canonical form.

        Returns:
            RollResult with full roll details
        """
        rolls = tuple(self.rng.randint(1, parsed.sides) for _ in range(parsed.count))
        subtotal = sum(rolls)
        single_d20 = parsed.count == 1 and parsed.sides == 20

        result = RollResult(
            notation=notation if notation is not None else str(parsed),
            rolls=rolls,
            modifier=parsed.modifier,
            subtotal=subtotal,
            total=subtotal + parsed.modifier,
            is_critical=single_d20 and rolls[0] == 20,
            is_fumble=single_d20 and rolls[0] == 1,
        )
        logger.debug(f"Rolled {result.notation}: {list(rolls)} -> {result.total}")
        return result

    def roll(self, notation: str) -> RollResult:
        """Parse and roll dice from notation string.

        Malformed notation does not raise: the result carries the error text
        instead, with no faces and a total of 0.

        Args:
            notation: Dice notation string

        Returns:
            RollResult with full roll details
        """
        try:
            parsed = self.parse_notation(notation)
        except InvalidNotationError as e:
            logger.warning(str(e))
            return RollResult(notation=notation, error=str(e))

        return self.roll_notation(parsed, notation.strip())

    def roll_advantage(self, notation: str) -> RollResult:
        """Roll twice and keep the higher total. The first draw wins ties."""
        first = self.roll(notation)
        second = self.roll(notation)
        if first.total >= second.total:
            chosen, other = first, second
        else:
            chosen, other = second, first
        return replace(chosen, advantage=True, other_roll=other)

    def roll_disadvantage(self, notation: str) -> RollResult:
        """Roll twice and keep the lower total. The first draw wins ties."""
        first = self.roll(notation)
        second = self.roll(notation)
        if first.total <= second.total:
            chosen, other = first, second
        else:
            chosen, other = second, first
        return replace(chosen, disadvantage=True, other_roll=other)

    def roll_initiative(self, dex_modifier: int = 0) -> RollResult:
        """Roll initiative (d20 + Dex modifier).

        Args:
            dex_modifier: Dexterity modifier

        Returns:
            RollResult tagged as an initiative roll
        """
        result = self.roll("d20")
        return replace(
            result,
            modifier=dex_modifier,
            total=result.total + dex_modifier,
            roll_type=RollType.INITIATIVE,
        )

    def roll_ability_check(self, ability_modifier: int, dc: int) -> RollResult:
        """Roll an ability check (d20 + modifier vs DC).

        Args:
            ability_modifier: Modifier to add to the roll
            dc: Difficulty class to meet or beat

        Returns:
            RollResult with ``success`` set
        """
        result = self.roll("d20")
        total = result.total + ability_modifier
        return replace(
            result,
            modifier=ability_modifier,
            total=total,
            dc=dc,
            success=total >= dc,
            roll_type=RollType.ABILITY_CHECK,
        )

    def roll_attack(self, attack_modifier: int, target_ac: int) -> RollResult:
        """Roll to hit (d20 + modifier vs AC).

        A natural 20 always hits and a natural 1 always misses.

        Args:
            attack_modifier: Modifier to add to the roll
            target_ac: Target's armor class

        Returns:
            RollResult with ``hit`` set
        """
        result = self.roll("d20")
        total = result.total + attack_modifier
        hit = result.is_critical or (not result.is_fumble and total >= target_ac)
        return replace(
            result,
            modifier=attack_modifier,
            total=total,
            target_ac=target_ac,
            hit=hit,
            roll_type=RollType.ATTACK,
        )

    def roll_damage(self, notation: str, is_critical: bool = False) -> RollResult:
        """Roll damage. A critical hit doubles the dice, not the modifier.

        Args:
            notation: Damage dice notation (e.g., "1d8+2")
            is_critical: Whether the attack was a critical hit

        Returns:
            RollResult tagged as a damage roll
        """
        try:
            parsed = self.parse_notation(notation)
        except InvalidNotationError as e:
            logger.warning(str(e))
            return RollResult(notation=notation, roll_type=RollType.DAMAGE, error=str(e))

        if is_critical:
            parsed = replace(parsed, count=parsed.count * 2)

        # Doubled crit pools may hold up to twice MAX_DICE
        result = self.roll_notation(parsed)
        return replace(result, is_critical=is_critical, roll_type=RollType.DAMAGE)


def ability_modifier(score: int) -> int:
    """Ability modifier for a score, rounding down (9 -> -1, not 0)."""
    return (score - 10) // 2


def _signed(value: int) -> str:
    return f" + {value}" if value >= 0 else f" - {abs(value)}"


def format_roll(result: RollResult) -> str:
    """Format a roll as a narrative fragment.

    Always shows the die faces, the modifier (when non-zero) and the total.
    Attacks and checks also show the AC or DC and the verdict.

    Args:
        result: Roll to format

    Returns:
        Markdown-flavoured text
    """
    if result.error:
        return result.error

    faces = ", ".join(str(r) for r in result.rolls)

    if result.roll_type == RollType.ATTACK:
        text = f"{ICON_TARGET} Attack: {faces}"
        if result.modifier:
            text += _signed(result.modifier)
        text += f" = **{result.total}** vs AC {result.target_ac}"
        if result.is_critical:
            text += f" {ICON_CRITICAL} **CRITICAL HIT!**"
        elif result.is_fumble:
            text += f" {ICON_FUMBLE} **FUMBLE!**"
        elif result.hit:
            text += f" {ICON_HIT} **HIT!**"
        else:
            text += f" {ICON_MISS} **MISS**"
    elif result.roll_type == RollType.DAMAGE:
        text = f"{ICON_DAMAGE} Damage: [{faces}]"
        if result.modifier:
            text += _signed(result.modifier)
        text += f" = **{result.total}**"
        if result.is_critical:
            text += " (Critical!)"
    elif result.roll_type == RollType.ABILITY_CHECK:
        text = f"{ICON_DICE} Check: {faces}"
        if result.modifier:
            text += _signed(result.modifier)
        text += f" = **{result.total}** vs DC {result.dc}"
        text += f" {ICON_HIT} **SUCCESS**" if result.success else f" {ICON_MISS} **FAIL**"
    elif result.roll_type == RollType.INITIATIVE:
        text = f"{ICON_INITIATIVE} Initiative: {faces}"
        if result.modifier:
            text += _signed(result.modifier)
        text += f" = **{result.total}**"
    else:
        text = f"{ICON_DICE} Roll {result.notation}: [{faces}]"
        if result.modifier:
            text += _signed(result.modifier)
        text += f" = **{result.total}**"
        if result.is_critical:
            text += f" {ICON_CRITICAL} NAT 20!"
        if result.is_fumble:
            text += f" {ICON_FUMBLE} NAT 1!"

    if result.advantage:
        text += " (Advantage)"
    if result.disadvantage:
        text += " (Disadvantage)"

    return text


# Shared roller for the module-level convenience functions
_default_roller = DiceRoller()


def get_default_roller() -> DiceRoller:
    """Get the roller used by the module-level functions."""
    return _default_roller


def roll(notation: str) -> RollResult:
    """Quick roll function using the default roller."""
    return _default_roller.roll(notation)


def roll_multiple(notations: list[str]) -> list[RollResult]:
    """Roll multiple dice expressions.

    Args:
        notations: List of dice notation strings

    Returns:
        List of RollResults
    """
    return [_default_roller.roll(n) for n in notations]


def roll_advantage(notation: str) -> RollResult:
    return _default_roller.roll_advantage(notation)


def roll_disadvantage(notation: str) -> RollResult:
    return _default_roller.roll_disadvantage(notation)


def roll_initiative(dex_modifier: int = 0) -> RollResult:
    return _default_roller.roll_initiative(dex_modifier)


def roll_ability_check(modifier: int, dc: int) -> RollResult:
    return _default_roller.roll_ability_check(modifier, dc)


def roll_attack(attack_modifier: int, target_ac: int) -> RollResult:
    return _default_roller.roll_attack(attack_modifier, target_ac)


def roll_damage(notation: str, is_critical: bool = False) -> RollResult:
    return _default_roller.roll_damage(notation, is_critical)
