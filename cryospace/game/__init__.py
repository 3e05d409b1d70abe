"""Game mechanics module for dice, actions, combat and conditions."""

from .actions import ActionType, parse_action
from .combat import ActionResolver, ActionResult
from .dice import DiceRoller, roll
from .pipeline import ResolutionPipeline
from .tokens import Roster, Token

__all__ = [
    "ActionType", "parse_action", "ActionResolver", "ActionResult",
    "DiceRoller", "roll", "ResolutionPipeline", "Roster", "Token",
]
