"""Interactive console for trying the resolution engine."""

import logging
import sys
from collections.abc import Callable
from pathlib import Path

import yaml

from .config import get_config
from .game.errors import CryoSpaceError
from .game.combat import format_initiative_order
from .game.pipeline import ResolutionPipeline, log_category
from .game.tokens import Roster, Token

logger = logging.getLogger(__name__)

DEMO_PARTY = [
    {
        "id": "hero",
        "label": "Mira the Bold",
        "hp": 24,
        "ac": 15,
        "stats": {"str": 16, "dex": 14, "con": 14, "int": 10, "wis": 12, "cha": 10},
        "x": 1,
        "y": 1,
    },
    {
        "id": "goblin-1",
        "label": "Goblin Warrior",
        "hp": 7,
        "ac": 13,
        "stats": {"str": 8, "dex": 14},
        "x": 5,
        "y": 4,
        "is_npc": True,
    },
    {
        "id": "goblin-2",
        "label": "Goblin Archer",
        "hp": 5,
        "ac": 12,
        "stats": {"dex": 16},
        "x": 7,
        "y": 2,
        "is_npc": True,
    },
]

HELP_TEXT = """Type what your character does, e.g. "I attack the goblin" or "/roll 2d6+3".
Commands: /init (roll initiative), /turn (start-of-turn effects), /status, /help, /quit"""


def load_roster(path: Path | str | None = None) -> Roster:
    """Load tokens from a YAML list, or the demo party if no path is given.

    Args:
        path: YAML file holding a list of token mappings

    Returns:
        Roster of loaded tokens
    """
    if path is None:
        data = DEMO_PARTY
    else:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or []
    return Roster(Token.from_dict(entry) for entry in data)


def format_status(roster: Roster) -> str:
    lines = []
    for token in roster.tokens:
        conditions = ", ".join(sorted(token.conditions)) or "-"
        lines.append(
            f"{token.label}: {token.hp}/{token.max_hp} HP, AC {token.armor_class}, "
            f"at {token.position}, conditions: {conditions}"
        )
    return "\n".join(lines)


def run_console(
    pipeline: ResolutionPipeline,
    roster: Roster,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> Roster:
    """Read actions until /quit or end of input, applying each result.

    Args:
        pipeline: Pipeline to resolve actions with
        roster: Starting roster. The first player token acts.
        read: Line reader
        write: Output sink

    Returns:
        The roster after every applied result
    """
    actor_id = next((t.id for t in roster.tokens if not t.is_npc), None)
    if actor_id is None:
        write("The roster has no player token to act with.")
        return roster

    write(HELP_TEXT)
    while True:
        try:
            line = read(f"{roster[actor_id].label}> ").strip()
        except EOFError:
            break

        if line == "/quit":
            break
        if line == "/help":
            write(HELP_TEXT)
            continue
        if line == "/status":
            write(format_status(roster))
            continue
        if line == "/init":
            write(format_initiative_order(pipeline.roll_initiative(roster.tokens)))
            continue
        if line == "/turn":
            effects = pipeline.start_of_turn(roster[actor_id])
            for effect in effects:
                write(effect.narrative)
            roster = roster.apply_turn_effects(actor_id, effects)
            continue

        result = pipeline.submit(line, roster[actor_id], roster.tokens)
        if result is None:
            continue

        write(f"[{log_category(result)}] {result.narrative}")
        try:
            roster = roster.apply_result(result)
        except CryoSpaceError as e:
            logger.warning(f"Could not apply result: {e}")
            write(f"(not applied: {e})")

    return roster


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the console.

    Args:
        argv: Arguments after the program name: an optional roster YAML path

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = sys.argv[1:] if argv is None else argv

    try:
        config = get_config()
        logging.basicConfig(level=config.logging.level, format=config.logging.format)

        roster = load_roster(args[0] if args else None)
        pipeline = ResolutionPipeline.from_config(config)
        run_console(pipeline, roster)
        return 0

    except KeyboardInterrupt:
        print("\nGoodbye, adventurer!")
        return 0
    except (OSError, yaml.YAMLError, CryoSpaceError, ValueError, KeyError) as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
