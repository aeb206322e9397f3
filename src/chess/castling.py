"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from enum import Enum
from typing import Self

from src.chess.pieces import Color
from src.chess.square import Square


class CastlingDirection(Enum):
    """The four castling directions. Values represent their encodings in FEN string."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"


# Order in which the rights are written in a FEN string
CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)

KING_SIDE: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
)


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: If castling rights have not been revoked, we already know the king / rook are still at their starting squares.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """Convenience method: to make mapping shown below (from CastlingDirection) more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def castling_color(direction: CastlingDirection) -> Color:
    return Color.WHITE if direction.value.isupper() else Color.BLACK


def castling_options(color: Color) -> list[CastlingDirection]:
    """The two directions belonging to one player"""
    return [
        direction for direction in CASTLING_ORDER if castling_color(direction) == color
    ]


def is_king_side(direction: CastlingDirection) -> bool:
    return direction in KING_SIDE


def squares_between_on_rank(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares in between the two squares specified that are on the same rank (both ends excluded)
    """
    if from_square.rank != to_square.rank:
        raise ValueError(
            f"squares_between_on_rank requires both squares to lie on the same rank. \n from: {from_square}\n to:{to_square}"
        )
    step = 1 if to_square.file > from_square.file else -1
    return [
        Square(file, from_square.rank)
        for file in range(from_square.file + step, to_square.file, step)
    ]


def castling_path(direction: CastlingDirection) -> list[Square]:
    """Squares between king and rook: they all must be empty to castle"""
    rule = CASTLING_RULES[direction]
    return squares_between_on_rank(rule.king_from, rule.rook_from)


def king_path(direction: CastlingDirection) -> list[Square]:
    """
    Squares the king stands on / crosses / lands on: none of them may be under attack.
    (On the queen side the rook also crosses the b-file, which may be attacked)
    """
    rule = CASTLING_RULES[direction]
    return [
        rule.king_from,
        *squares_between_on_rank(rule.king_from, rule.king_to),
        rule.king_to,
    ]
