"""Resolution pipeline: free text in, ActionResult out."""

import logging
import random
from collections.abc import Iterable

from ..config import AppConfig, CombatConfig
from .actions import Action, parse_action
from .combat import ActionResolver, ActionResult, DeathSaveResult, InitiativeEntry, ResultType
from .conditions import TurnEffect, process_condition_effects
from .dice import DiceRoller
from .tokens import Token

logger = logging.getLogger(__name__)


class ResolutionPipeline:
    """Parses and resolves player input against a roster snapshot.

    Holds no session state between calls; the roller is its only moving part.
    """

    def __init__(self, roller: DiceRoller | None = None, config: CombatConfig | None = None):
        self.roller = roller or DiceRoller()
        self.config = config or CombatConfig()
        self.resolver = ActionResolver(self.roller, self.config)

    @classmethod
    def from_config(cls, config: AppConfig) -> "ResolutionPipeline":
        """Build a pipeline from application config, seeding the roller if asked."""
        return cls(DiceRoller(random.Random(config.dice.seed)), config.combat)

    def parse(self, text: str | None, actor: Token | None, roster: Iterable[Token] = ()) -> Action | None:
        return parse_action(text, actor, roster)

    def resolve(self, action: Action | None) -> ActionResult:
        return self.resolver.resolve_action(action)

    def submit(
        self,
        text: str | None,
        actor: Token | None,
        roster: Iterable[Token] = (),
    ) -> ActionResult | None:
        """Parse and resolve in one step.

        Args:
            text: Player input
            actor: Token declaring the action
            roster: Tokens in the session

        Returns:
            The ActionResult, or None if the input was empty and there is
            nothing to show
        """
        action = self.parse(text, actor, roster)
        if action is None:
            return None
        return self.resolve(action)

    def start_of_turn(self, token: Token) -> list[TurnEffect]:
        """Start-of-turn condition effects for a token."""
        return process_condition_effects(token, self.roller, self.config.burning_damage)

    def roll_initiative(self, tokens: Iterable[Token]) -> list[InitiativeEntry]:
        return self.resolver.roll_all_initiative(tokens)

    def death_save(self, token: Token) -> DeathSaveResult:
        return self.resolver.roll_death_save(token)


def log_category(result: ActionResult) -> str:
    """Session log channel for a result: "combat", "dice" or "action"."""
    if result.type == ResultType.COMBAT:
        return "combat"
    if result.type == ResultType.DICE:
        return "dice"
    return "action"


def resolve_input(
    text: str | None,
    actor: Token | None,
    roster: Iterable[Token] = (),
) -> ActionResult | None:
    """Parse and resolve with a fresh pipeline."""
    return ResolutionPipeline().submit(text, actor, roster)
