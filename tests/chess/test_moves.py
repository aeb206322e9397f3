"""Unit tests for src/chess/moves.py"""

import pytest

from src.chess.board import Board
from src.chess.castling import CastlingDirection
from src.chess.fen import STARTING_FEN
from src.chess.moves import (
    AcceptedMove,
    Move,
    candidate_castling_move,
    candidate_king_moves,
    candidate_knight_moves,
    candidate_pawn_moves,
    candidate_rook_moves,
    en_passant_moves,
    is_attacked_by_bishop,
    is_attacked_by_pawn,
    is_pawn_push_to_promotion_square,
    pawn_pushes_w_promotion,
)
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square

STARTING_POSITION = STARTING_FEN.split()[0]


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


def targets(moves: list[Move]) -> set[str]:
    return {move.to_square.to_algebraic() for move in moves}


# --- UCI ---
def test_move_from_uci() -> None:
    move = Move.from_uci("e7e8q")
    assert move.from_square == sq("e7")
    assert move.to_square == sq("e8")
    assert move.promote_to == PieceType.QUEEN


@pytest.mark.parametrize("uci", ["e2e4", "g1f3", "a7a8n", "h2h1r"])
def test_move_uci_roundtrip(uci: str) -> None:
    assert Move.from_uci(uci).to_uci() == uci


# --- MOVEMENT RULES ---
def test_pawn_on_starting_rank() -> None:
    board = Board.from_fen(STARTING_POSITION)
    assert targets(candidate_pawn_moves(sq("e2"), board)) == {"e3", "e4"}
    assert targets(candidate_pawn_moves(sq("d7"), board)) == {"d6", "d5"}


def test_blocked_pawn() -> None:
    """Cannot push into a piece, or jump over one"""
    board = Board.from_fen("4k3/8/8/8/8/4n3/4P3/4K3")
    assert candidate_pawn_moves(sq("e2"), board) == []

    board = Board.from_fen("4k3/8/8/8/4n3/8/4P3/4K3")
    assert targets(candidate_pawn_moves(sq("e2"), board)) == {"e3"}


def test_pawn_captures_diagonally() -> None:
    board = Board.from_fen("4k3/8/8/3p1N2/4P3/8/8/4K3")
    # takes the pawn on d5, not its own knight on f5
    assert targets(candidate_pawn_moves(sq("e4"), board)) == {"e5", "d5"}


def test_knight_moves() -> None:
    board = Board.from_fen(STARTING_POSITION)
    assert targets(candidate_knight_moves(sq("b1"), board)) == {"a3", "c3"}
    assert targets(candidate_knight_moves(sq("g8"), board)) == {"f6", "h6"}


def test_rook_moves_stop_at_pieces() -> None:
    board = Board.from_fen("4k3/8/8/8/R2p4/8/8/4K3")
    assert targets(candidate_rook_moves(sq("a4"), board)) == {
        "a1", "a2", "a3", "a5", "a6", "a7", "a8", "b4", "c4", "d4",
    }


def test_king_moves_in_corner() -> None:
    board = Board.from_fen("7k/8/8/8/8/8/8/K7")
    assert targets(candidate_king_moves(sq("a1"), board)) == {"a2", "b1", "b2"}


# --- ATTACKS ---
def test_pawn_attacks() -> None:
    board = Board.from_fen("4k3/8/8/8/4P3/8/8/4K3")
    assert is_attacked_by_pawn(sq("d5"), Color.WHITE, board)
    assert is_attacked_by_pawn(sq("f5"), Color.WHITE, board)
    assert not is_attacked_by_pawn(sq("e5"), Color.WHITE, board)
    assert not is_attacked_by_pawn(sq("d3"), Color.WHITE, board)


def test_bishop_attack_is_blocked() -> None:
    board = Board.from_fen("4k3/8/8/8/8/2p5/8/B3K3")
    assert is_attacked_by_bishop(sq("b2"), Color.WHITE, board)
    assert is_attacked_by_bishop(sq("c3"), Color.WHITE, board)
    assert not is_attacked_by_bishop(sq("d4"), Color.WHITE, board)


# --- SPECIAL MOVES ---
def test_castling_move_is_king_move() -> None:
    move = candidate_castling_move(CastlingDirection.BLACK_QUEEN_SIDE)
    assert move == Move(sq("e8"), sq("c8"), castling_direction=CastlingDirection.BLACK_QUEEN_SIDE)


def test_en_passant_moves() -> None:
    board = Board.from_fen("4k3/8/8/8/3pP3/8/8/4K3")
    assert en_passant_moves(sq("e3"), Color.BLACK, board) == [
        Move(sq("d4"), sq("e3"), is_en_passant=True)
    ]
    # no white pawn can take on e3
    assert en_passant_moves(sq("e3"), Color.WHITE, board) == []


def test_en_passant_on_the_edge() -> None:
    board = Board.from_fen("4k3/8/8/Pp6/8/8/8/4K3")
    assert en_passant_moves(sq("b6"), Color.WHITE, board) == [
        Move(sq("a5"), sq("b6"), is_en_passant=True)
    ]


def test_accepted_move_en_passant_capture() -> None:
    board = Board.from_fen("4k3/8/8/3pP3/8/8/8/4K3")
    move = Move(sq("e5"), sq("d6"), is_en_passant=True)
    accepted = AcceptedMove.from_move_and_board(move, board)
    assert accepted.moving_piece == Piece(PieceType.PAWN, Color.WHITE)
    assert accepted.captured_piece == Piece(PieceType.PAWN, Color.BLACK)


def test_accepted_move_without_capture() -> None:
    board = Board.from_fen(STARTING_POSITION)
    accepted = AcceptedMove.from_move_and_board(Move.from_uci("g1f3"), board)
    assert accepted.moving_piece == Piece(PieceType.KNIGHT, Color.WHITE)
    assert accepted.captured_piece is None


def test_promotion_moves() -> None:
    board = Board.from_fen("k7/4P3/8/8/8/8/8/4K3")
    push = Move(sq("e7"), sq("e8"))
    assert is_pawn_push_to_promotion_square(push, board)
    assert [move.promote_to for move in pawn_pushes_w_promotion(push)] == [
        PieceType.QUEEN,
        PieceType.ROOK,
        PieceType.BISHOP,
        PieceType.KNIGHT,
    ]
    assert not is_pawn_push_to_promotion_square(Move(sq("e1"), sq("e2")), board)
