"""Exceptions raised by the resolution engine."""


class CryoSpaceError(Exception):
    """Base class for engine errors."""


class InvalidNotationError(CryoSpaceError, ValueError):
    """Raised when a dice notation string cannot be parsed."""

    def __init__(self, notation: str):
        self.notation = notation
        super().__init__(f"Invalid dice notation: {notation}")


class UnknownTokenError(CryoSpaceError, KeyError):
    """Raised when a roster lookup names a token that is not present."""

    def __init__(self, token_id: str):
        self.token_id = token_id
        super().__init__(token_id)

    def __str__(self) -> str:
        return f"Unknown token: {self.token_id}"


class StaleTokenError(CryoSpaceError):
    """Raised when a delta was computed from HP the roster no longer holds."""

    def __init__(self, token_id: str, expected_hp: int, actual_hp: int):
        self.token_id = token_id
        self.expected_hp = expected_hp
        self.actual_hp = actual_hp
        super().__init__(
            f"Token {token_id} changed since the action was resolved "
            f"(expected {expected_hp} HP, found {actual_hp})"
        )
