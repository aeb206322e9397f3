"""Defines the types of chess pieces"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Self

from src.core.shared_types import Side


class PieceType(Enum):
    EMPTY = auto()
    PAWN = auto()
    KNIGHT = auto()
    BISHOP = auto()
    ROOK = auto()
    QUEEN = auto()
    KING = auto()


class Color(Enum):
    NONE = auto()
    WHITE = auto()
    BLACK = auto()


FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}

# SAN uses upper case letters for both colors, and no letter at all for pawns
SAN_TO_PIECE: dict[str, PieceType] = {
    "N": PieceType.KNIGHT,
    "B": PieceType.BISHOP,
    "R": PieceType.ROOK,
    "Q": PieceType.QUEEN,
    "K": PieceType.KING,
}

PIECE_TO_SAN: dict[PieceType, str] = {value: key for key, value in SAN_TO_PIECE.items()}


def opponent(color: Color) -> Color:
    return Color.WHITE if color == Color.BLACK else Color.BLACK


def color_to_side(color: Color) -> Side:
    return Side.WHITE if color == Color.WHITE else Side.BLACK


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color)

    @classmethod
    def empty(cls) -> Self:
        return cls(PieceType.EMPTY, Color.NONE)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    def is_empty(self) -> bool:
        return self.type == PieceType.EMPTY
