"""Combatant tokens and the roster that holds them.

Tokens are immutable snapshots. The engine reads them and reports deltas;
``Roster`` is the caller-side helper that applies those deltas and hands back
a new roster.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from .conditions import apply_condition
from .dice import ability_modifier
from .errors import StaleTokenError, UnknownTokenError

if TYPE_CHECKING:
    from .combat import ActionResult, DeathSaveResult
    from .conditions import TurnEffect


ABILITIES = ("str", "dex", "con", "int", "wis", "cha")

_ABILITY_FIELDS = {
    "str": "strength",
    "dex": "dexterity",
    "con": "constitution",
    "int": "intelligence",
    "wis": "wisdom",
    "cha": "charisma",
}


@dataclass(frozen=True)
class AbilityScores:
    """The six ability scores. Missing scores default to 10."""

    strength: int = 10
    dexterity: int = 10
    constitution: int = 10
    intelligence: int = 10
    wisdom: int = 10
    charisma: int = 10

    def get_score(self, ability: str) -> int:
        """Get a score by short ("dex") or full ("dexterity") name."""
        key = ability.lower()
        return getattr(self, _ABILITY_FIELDS.get(key, key), 10)

    def get_modifier(self, ability: str) -> int:
        """Get the modifier for an ability score."""
        return ability_modifier(self.get_score(ability))

    def __getitem__(self, key: str) -> int:
        """Allow dictionary-style access to ability scores."""
        return self.get_score(key)

    def to_dict(self) -> dict[str, int]:
        return {short: getattr(self, name) for short, name in _ABILITY_FIELDS.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "AbilityScores":
        """Build from a mapping keyed by short or full ability names."""
        values = {}
        for key, score in (data or {}).items():
            name = _ABILITY_FIELDS.get(key.lower(), key.lower())
            if name in _ABILITY_FIELDS.values() and score is not None:
                values[name] = int(score)
        return cls(**values)


@dataclass(frozen=True)
class DeathSaves:
    """Death save counters. Successes and failures never cancel out."""

    successes: int = 0
    failures: int = 0


@dataclass(frozen=True)
class Token:
    """A combatant on the battlefield."""

    id: str
    label: str
    hp: int = 10
    max_hp: int = 10
    armor_class: int = 10
    abilities: AbilityScores = field(default_factory=AbilityScores)
    conditions: frozenset[str] = frozenset()
    death_saves: DeathSaves = field(default_factory=DeathSaves)
    x: int = 0
    y: int = 0
    is_npc: bool = False
    speed: int = 6  # Grid squares per move
    xp: int = 0

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)

    @property
    def is_down(self) -> bool:
        return self.hp <= 0

    def modifier(self, ability: str) -> int:
        """Ability modifier for this token."""
        return self.abilities.get_modifier(ability)

    def has_condition(self, condition: str) -> bool:
        return condition.lower() in self.conditions

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "label": self.label,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "armor_class": self.armor_class,
            "stats": self.abilities.to_dict(),
            "conditions": sorted(self.conditions),
            "death_saves": {
                "successes": self.death_saves.successes,
                "failures": self.death_saves.failures,
            },
            "x": self.x,
            "y": self.y,
            "is_npc": self.is_npc,
            "speed": self.speed,
            "xp": self.xp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Token":
        """Create from dictionary data.

        Accepts the session store's row shape (``stats``, ``ac``) as well as
        the field names used here.
        """
        hp = int(data.get("hp", 10))
        position = data.get("position") or (data.get("x", 0), data.get("y", 0))
        saves = data.get("death_saves") or {}

        return cls(
            id=str(data["id"]),
            label=str(data.get("label", data["id"])),
            hp=hp,
            max_hp=int(data.get("max_hp", hp)),
            armor_class=int(data.get("armor_class", data.get("ac", 10))),
            abilities=AbilityScores.from_dict(data.get("stats") or data.get("abilities")),
            conditions=frozenset(c.lower() for c in data.get("conditions") or ()),
            death_saves=DeathSaves(
                successes=int(saves.get("successes", 0)),
                failures=int(saves.get("failures", 0)),
            ),
            x=int(position[0]),
            y=int(position[1]),
            is_npc=bool(data.get("is_npc", False)),
            speed=int(data.get("speed", 6)),
            xp=int(data.get("xp", 0)),
        )


class Roster(Mapping[str, Token]):
    """Immutable set of tokens addressed by id, kept in insertion order.

    Every ``apply_*`` method returns a new roster and leaves this one as it was.
    """

    def __init__(self, tokens: Iterable[Token] = ()):
        self._tokens: dict[str, Token] = {}
        for token in tokens:
            if token.id in self._tokens:
                raise ValueError(f"Duplicate token id: {token.id}")
            self._tokens[token.id] = token

    def __getitem__(self, token_id: str) -> Token:
        try:
            return self._tokens[token_id]
        except KeyError:
            raise UnknownTokenError(token_id) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        return f"Roster({list(self._tokens.values())!r})"

    @property
    def tokens(self) -> list[Token]:
        """Tokens in roster order."""
        return list(self._tokens.values())

    def find(self, label: str) -> Token | None:
        """First token whose label contains ``label`` (case-insensitive)."""
        needle = label.lower()
        for token in self._tokens.values():
            if needle in token.label.lower():
                return token
        return None

    def replace(self, token: Token) -> "Roster":
        """Return a roster with ``token`` swapped in for the one with its id."""
        if token.id not in self._tokens:
            raise UnknownTokenError(token.id)
        return Roster(token if t.id == token.id else t for t in self._tokens.values())

    def apply_result(self, result: "ActionResult") -> "Roster":
        """Apply an action result: HP change first, then condition effects.

        Raises:
            StaleTokenError: If the target's HP moved since the result was computed
            UnknownTokenError: If the result names a token not in the roster
        """
        roster = self

        if result.target_id is not None and result.new_target_hp is not None:
            target = roster[result.target_id]
            if result.previous_target_hp is not None and target.hp != result.previous_target_hp:
                raise StaleTokenError(target.id, result.previous_target_hp, target.hp)
            roster = roster.replace(replace(target, hp=result.new_target_hp))

        for effect in result.effects:
            if effect.kind == "condition":
                token = roster[effect.target]
                roster = roster.replace(apply_condition(token, effect.condition))

        return roster

    def apply_turn_effects(self, token_id: str, effects: Iterable["TurnEffect"]) -> "Roster":
        """Apply HP changes reported by start-of-turn condition effects."""
        token = self[token_id]
        for effect in effects:
            if effect.new_hp is not None:
                token = replace(token, hp=effect.new_hp)
        return self.replace(token)

    def apply_death_save(self, token_id: str, result: "DeathSaveResult") -> "Roster":
        """Store new death save counters, and the regained HP on a revive."""
        token = replace(self[token_id], death_saves=result.saves)
        if result.new_hp is not None:
            token = replace(token, hp=result.new_hp)
        return self.replace(token)
