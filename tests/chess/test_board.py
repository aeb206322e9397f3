"""Unit tests for src/chess/board.py"""

import pytest

from src.chess.board import Board
from src.chess.fen import STARTING_FEN
from src.chess.moves import Move
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square
from src.core.exceptions import InvalidFENError

STARTING_POSITION = STARTING_FEN.split()[0]
EMPTY_POSITION = "/".join(["8"] * 8)


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


@pytest.mark.parametrize(
    "position",
    [
        STARTING_POSITION,
        EMPTY_POSITION,
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR",
        "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1",
    ],
)
def test_board_fen_roundtrip(position: str) -> None:
    assert Board.from_fen(position).to_fen() == position


def test_board_from_fen_places_pieces() -> None:
    board = Board.from_fen(STARTING_POSITION)
    assert board.piece(sq("a1")) == Piece(PieceType.ROOK, Color.WHITE)
    assert board.piece(sq("e8")) == Piece(PieceType.KING, Color.BLACK)
    assert board.is_empty(sq("e4"))
    assert len(board.position) == 64


def test_locate_pieces() -> None:
    board = Board.from_fen(STARTING_POSITION)
    assert set(board.locate_pieces(PieceType.KNIGHT, Color.BLACK)) == {sq("b8"), sq("g8")}
    assert len(board.locate_color(Color.WHITE)) == 16
    assert board.king_square(Color.WHITE) == sq("e1")


@pytest.mark.parametrize(
    "position, color",
    [
        ("8/8/8/8/8/8/8/4K3", Color.BLACK),  # no black king
        ("4k3/8/8/8/8/8/8/3KK3", Color.WHITE),  # two white kings
    ],
)
def test_king_square_requires_a_single_king(position: str, color: Color) -> None:
    board = Board.from_fen(position)
    with pytest.raises(InvalidFENError):
        board.king_square(color)


def test_is_check() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/4R1K1")
    assert board.is_check(Color.BLACK)
    assert not board.is_check(Color.WHITE)

    # blocked line of sight
    board = Board.from_fen("4k3/4p3/8/8/8/8/8/4R1K1")
    assert not board.is_check(Color.BLACK)


def test_is_any_under_attack() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K2r")
    assert board.is_any_under_attack([sq("a5"), sq("f1")], Color.BLACK)
    assert not board.is_any_under_attack([sq("a5"), sq("b5")], Color.BLACK)


def test_candidate_moves_in_starting_position() -> None:
    board = Board.from_fen(STARTING_POSITION)
    assert len(board.generate_candidate_moves(Color.WHITE)) == 20
    assert len(board.generate_candidate_moves(Color.BLACK)) == 20


def test_copy_is_independent() -> None:
    board = Board.from_fen(STARTING_POSITION)
    copied = board.copy()
    copied.move_piece(Move.from_uci("e2e4"))
    assert board.to_fen() == STARTING_POSITION
    assert copied.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR"


def test_piece_updates() -> None:
    board = Board.from_fen(EMPTY_POSITION)
    board.place_piece(Piece.from_fen("P"), sq("a7"))
    board.promote_piece(sq("a7"), to=PieceType.KNIGHT)
    assert board.piece(sq("a7")) == Piece(PieceType.KNIGHT, Color.WHITE)
    board.remove_piece(sq("a7"))
    assert board.to_fen() == EMPTY_POSITION
