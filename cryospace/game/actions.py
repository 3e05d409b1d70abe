"""Turn free-text player input into a typed, targeted action.

"I attack the goblin with my sword" becomes an ``AttackAction`` aimed at
the goblin token.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from .tokens import Token

logger = logging.getLogger(__name__)


class ActionType(Enum):
    """Kinds of action a player can declare."""

    DICE_ROLL = "dice_roll"
    ATTACK = "attack"
    CAST_SPELL = "cast_spell"
    MOVEMENT = "movement"
    SKILL_CHECK = "skill_check"
    DEFEND = "defend"
    INTERACT = "interact"
    GENERIC = "generic"


@dataclass(frozen=True)
class Action:
    """A declared action. Use one of the concrete subclasses."""

    type: ClassVar[ActionType]

    raw_input: str
    actor: Token | None
    target: Token | None = None
    target_name: str | None = None


@dataclass(frozen=True)
class DiceRollAction(Action):
    type: ClassVar[ActionType] = ActionType.DICE_ROLL

    notation: str | None = None


@dataclass(frozen=True)
class AttackAction(Action):
    type: ClassVar[ActionType] = ActionType.ATTACK


@dataclass(frozen=True)
class CastSpellAction(Action):
    type: ClassVar[ActionType] = ActionType.CAST_SPELL


@dataclass(frozen=True)
class MovementAction(Action):
    type: ClassVar[ActionType] = ActionType.MOVEMENT


@dataclass(frozen=True)
class SkillCheckAction(Action):
    type: ClassVar[ActionType] = ActionType.SKILL_CHECK


@dataclass(frozen=True)
class DefendAction(Action):
    type: ClassVar[ActionType] = ActionType.DEFEND


@dataclass(frozen=True)
class InteractAction(Action):
    type: ClassVar[ActionType] = ActionType.INTERACT


@dataclass(frozen=True)
class GenericAction(Action):
    type: ClassVar[ActionType] = ActionType.GENERIC


ACTION_CLASSES: dict[ActionType, type[Action]] = {
    ActionType.DICE_ROLL: DiceRollAction,
    ActionType.ATTACK: AttackAction,
    ActionType.CAST_SPELL: CastSpellAction,
    ActionType.MOVEMENT: MovementAction,
    ActionType.SKILL_CHECK: SkillCheckAction,
    ActionType.DEFEND: DefendAction,
    ActionType.INTERACT: InteractAction,
    ActionType.GENERIC: GenericAction,
}


def _words(*words: str) -> re.Pattern:
    return re.compile(r"\b(" + "|".join(words) + r")\b", re.IGNORECASE)


# First match wins, so order matters: "strike it with fire" is an attack
# because attack verbs are checked before spell words.
ACTION_RULES: tuple[tuple[re.Pattern, ActionType], ...] = (
    (re.compile(r"^/roll?\s+(.+)", re.IGNORECASE), ActionType.DICE_ROLL),
    (re.compile(r"^(\d*d\d+(?:[+-]\d+)?)", re.IGNORECASE), ActionType.DICE_ROLL),
    (
        _words("attack", "strike", "hit", "slash", "stab", "shoot", "swing", "smash", "punch", "kick", "bite", "claw"),
        ActionType.ATTACK,
    ),
    (
        _words("cast", "spell", "magic", "fireball", "heal", "lightning", "frost", "ice", "fire", "thunder", "arcane"),
        ActionType.CAST_SPELL,
    ),
    (
        _words("move", "walk", "run", "dash", "sneak", "stealth", "climb", "swim", "fly", "jump", "teleport"),
        ActionType.MOVEMENT,
    ),
    (
        _words(
            "check", "inspect", "investigate", "search", "perception", "insight",
            "persuade", "intimidate", "deceive", "acrobatics", "athletics",
        ),
        ActionType.SKILL_CHECK,
    ),
    (
        _words("defend", "block", "dodge", "parry", "shield", "guard", "brace"),
        ActionType.DEFEND,
    ),
    (
        _words(
            "talk", "speak", "ask", "tell", "negotiate", "barter", "trade", "buy", "sell",
            "give", "open", "close", "pick", "lock", "trap", "use", "drink", "eat",
        ),
        ActionType.INTERACT,
    ),
)

# "at the goblin", "against an orc", "with Mira"
PREPOSITION_TARGET = re.compile(
    r"\b(?:at|to|on|against|with)\s+(?:(?:the|a|an)\s+)?(\w+(?:\s+\w+)?)",
    re.IGNORECASE,
)
# "attack the goblin"
ARTICLE_TARGET = re.compile(r"\b(?:the|a|an)\s+(\w+(?:\s+\w+)?)", re.IGNORECASE)

# "with my sword" names gear, not a combatant
PRONOUNS = frozenset(
    ("my", "your", "his", "her", "its", "our", "their", "me", "him", "them", "us", "it", "you")
)


def match_action(text: str) -> tuple[ActionType, re.Match | None]:
    """Find the first rule that matches.

    Returns:
        Tuple of (ActionType, the rule's match or None for generic)
    """
    for pattern, action_type in ACTION_RULES:
        match = pattern.search(text)
        if match:
            return action_type, match
    return ActionType.GENERIC, None


def classify(text: str) -> ActionType:
    """Classify free text into an action type."""
    return match_action(text.strip())[0]


def _phrases(pattern: re.Pattern, text: str) -> list[str]:
    phrases = []
    for match in pattern.finditer(text):
        phrase = match.group(1).lower()
        words = phrase.split()
        if words[0] in PRONOUNS:
            continue
        phrases.append(phrase)
        if len(words) > 1:
            phrases.extend(w for w in words if len(w) > 2 and w not in PRONOUNS)
    return phrases


def _candidate_phrases(text: str) -> list[str]:
    # A preposition cue names the target when there is one; article phrases
    # only stand in for a missing cue ("attack the goblin"). Two-word phrases
    # are also tried word by word so "the big goblin" still finds "Goblin".
    return _phrases(PREPOSITION_TARGET, text) or _phrases(ARTICLE_TARGET, text)


def extract_target_name(text: str) -> str | None:
    """The noun phrase the text seems to aim at, lowercased."""
    phrases = _candidate_phrases(text)
    return phrases[0] if phrases else None


def extract_target(
    text: str,
    actor_id: str | None,
    roster: Iterable[Token],
) -> tuple[Token | None, str | None]:
    """Find the roster token the text refers to.

    The captured phrase must appear inside a token's label (case-insensitive).
    The actor is never its own target.

    Args:
        text: Player input
        actor_id: Id of the acting token
        roster: Tokens to search, in roster order

    Returns:
        Tuple of (matched token or None, the phrase used)
    """
    candidates = [token for token in roster if token.id != actor_id]
    phrases = _candidate_phrases(text)

    for phrase in phrases:
        for token in candidates:
            if phrase in token.label.lower():
                return token, phrase

    return None, (phrases[0] if phrases else None)


def parse_action(
    text: str | None,
    actor: Token | None,
    roster: Iterable[Token] = (),
) -> Action | None:
    """Parse player input into an action.

    Args:
        text: Free-text input
        actor: Token declaring the action
        roster: Tokens currently in the session

    Returns:
        The matching Action, or None if the input is empty
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return None

    action_type, match = match_action(trimmed)
    target, target_name = extract_target(trimmed, actor.id if actor else None, roster)

    logger.debug(
        f"Parsed '{trimmed}' as {action_type.value}"
        + (f" targeting {target.label}" if target else "")
    )

    if action_type == ActionType.DICE_ROLL:
        return DiceRollAction(
            raw_input=trimmed,
            actor=actor,
            target=target,
            target_name=target_name,
            notation=match.group(1).strip() if match else None,
        )

    return ACTION_CLASSES[action_type](
        raw_input=trimmed,
        actor=actor,
        target=target,
        target_name=target_name,
    )
