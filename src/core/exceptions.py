"""
Custom exceptions shared by all layers.

Everything raised on purpose inherits from GameError, so a caller can catch a single top-level type
(the specific types are the responsibility of the layer raising them).
"""


class GameError(Exception):
    """Top-level exception for anything that goes wrong while replaying a game."""


class InvalidFENError(GameError):
    """String cannot be interpreted as a FEN string."""


class MoveError(GameError):
    """A move token could not be applied to the current position."""

    def __init__(self, message: str, token: str = "") -> None:
        super().__init__(message)
        self.token = token


class IllegalMoveError(MoveError):
    """No legal move matches the token."""


class NotationError(IllegalMoveError):
    """The token does not follow the move grammar at all (so no legal interpretation either)."""


class AmbiguousMoveError(MoveError):
    """More than one legal move remains after applying all disambiguators in the token."""


class InvalidRequestError(GameError):
    """Incoming request data did not pass validation. (Not a ValueError, so pydantic lets it propagate as is)"""


class RepositoryError(GameError):
    """Persistence layer could not find / store a record."""
