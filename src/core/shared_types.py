"""
Type definitions used across layers
"""

from enum import StrEnum


class Side(StrEnum):
    """Side that made (or has to make) a move. Values match the FEN encoding."""

    WHITE = "w"
    BLACK = "b"


class MatchMode(StrEnum):
    """How a move token is matched against the legal moves of a position."""

    STRICT = "strict"
    LENIENT = "lenient"


class Tier(StrEnum):
    """Recovery tier that produced a game's result. FAILED marks a game where no tier got past the initial position."""

    STRICT = "strict"
    CLEANED = "cleaned"
    MANUAL = "manual"
    LENIENT = "lenient"
    FAILED = "failed"
