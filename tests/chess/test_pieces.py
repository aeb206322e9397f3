"""Unit tests for src/chess/pieces.py"""

import pytest

from src.chess.pieces import Color, Piece, PieceType, color_to_side, opponent
from src.core.shared_types import Side


@pytest.mark.parametrize(
    "character, piece",
    [
        ("K", Piece(PieceType.KING, Color.WHITE)),
        ("q", Piece(PieceType.QUEEN, Color.BLACK)),
        ("N", Piece(PieceType.KNIGHT, Color.WHITE)),
        ("p", Piece(PieceType.PAWN, Color.BLACK)),
    ],
)
def test_piece_from_fen(character: str, piece: Piece) -> None:
    assert Piece.from_fen(character) == piece


@pytest.mark.parametrize("character", list("pnbrqkPNBRQK"))
def test_piece_fen_roundtrip(character: str) -> None:
    assert Piece.from_fen(character).to_fen() == character


def test_empty_piece() -> None:
    empty = Piece.empty()
    assert empty.is_empty()
    assert empty.color == Color.NONE
    assert not Piece.from_fen("P").is_empty()


def test_opponent() -> None:
    assert opponent(Color.WHITE) == Color.BLACK
    assert opponent(Color.BLACK) == Color.WHITE


def test_color_to_side() -> None:
    assert color_to_side(Color.WHITE) == Side.WHITE
    assert color_to_side(Color.BLACK) == Side.BLACK
