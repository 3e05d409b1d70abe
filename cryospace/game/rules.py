"""Grid movement and experience rules."""

# XP needed to reach each level; index 0 is level 1
XP_TABLE = (
    0,
    300,
    900,
    2700,
    6500,
    14000,
    23000,
    34000,
    48000,
    64000,
    85000,
    100000,
    120000,
    140000,
    165000,
    195000,
    225000,
    265000,
    305000,
    355000,
)

MAX_LEVEL = len(XP_TABLE)


def get_distance(from_x: int, from_y: int, to_x: int, to_y: int) -> int:
    """Manhattan distance between two grid squares."""
    return abs(to_x - from_x) + abs(to_y - from_y)


def is_valid_move(from_x: int, from_y: int, to_x: int, to_y: int, speed: int) -> bool:
    """Check if a move fits within the mover's speed.

    Only distance is checked. Occupancy and terrain belong to the map layer.
    """
    return get_distance(from_x, from_y, to_x, to_y) <= speed


def get_level(xp: int) -> int:
    """Highest level whose XP threshold has been reached."""
    for index in range(MAX_LEVEL - 1, -1, -1):
        if xp >= XP_TABLE[index]:
            return index + 1
    return 1


def get_xp_for_next_level(xp: int) -> int | None:
    """XP threshold of the next level, or None at the top of the table."""
    level = get_level(xp)
    if level >= MAX_LEVEL:
        return None
    return XP_TABLE[level]


def get_xp_progress(xp: int) -> float:
    """Fraction of the way from the current level to the next, in [0, 1].

    Returns 1.0 at the top of the table.
    """
    level = get_level(xp)
    if level >= MAX_LEVEL:
        return 1.0

    current = XP_TABLE[level - 1]
    following = XP_TABLE[level]
    progress = (xp - current) / (following - current)
    return min(1.0, max(0.0, progress))
