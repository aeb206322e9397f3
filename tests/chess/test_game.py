"""Unit tests for src/chess/game.py"""

import pytest

from src.chess.fen import STARTING_FEN
from src.chess.game import Game
from src.chess.pieces import Color, Piece, PieceType
from src.core.exceptions import IllegalMoveError, InvalidFENError, NotationError
from src.core.shared_types import MatchMode

AFTER_E4 = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"


def play(game: Game, tokens: list[str]) -> None:
    for token in tokens:
        game.apply_san(token)


# -- CREATION --
def test_game_from_starting_position() -> None:
    game = Game.from_fen()
    assert game.fen == STARTING_FEN
    assert game.color_to_move == Color.WHITE
    assert len(game.legal_moves()) == 20


def test_game_from_fen() -> None:
    game = Game.from_fen(AFTER_E4)
    assert game.fen == AFTER_E4
    assert game.color_to_move == Color.BLACK


@pytest.mark.parametrize(
    "fen",
    [
        "not a fen",
        "8/8/8/8/8/8/8/4K3 w - - 0 1",  # no black king
        "4k3/8/8/8/8/8/8/4RK2 w - - 0 1",  # black king in check with white to move
    ],
)
def test_game_from_unplayable_fen(fen: str) -> None:
    with pytest.raises(InvalidFENError):
        Game.from_fen(fen)


# -- APPLYING MOVES --
def test_apply_first_move() -> None:
    game = Game.from_fen()
    applied = game.apply_san("e4")
    assert game.fen == AFTER_E4
    assert applied.san == "e4"
    assert applied.move.to_uci() == "e2e4"
    assert applied.accepted.moving_piece == Piece(PieceType.PAWN, Color.WHITE)
    assert not applied.is_check
    assert game.history == [STARTING_FEN]


def test_apply_italian_and_castle() -> None:
    game = Game.from_fen()
    play(game, ["e4", "e5", "Nf3", "Nc6", "Bc4", "Bc5"])
    assert game.fen == "r1bqk1nr/pppp1ppp/2n5/2b1p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4"

    applied = game.apply_san("O-O")
    assert applied.san == "O-O"
    assert game.fen == "r1bqk1nr/pppp1ppp/2n5/2b1p3/2B1P3/5N2/PPPP1PPP/RNBQ1RK1 b kq - 5 4"


def test_en_passant_target_after_every_double_push() -> None:
    game = Game.from_fen()
    play(game, ["e4", "e5"])
    assert game.fen == "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq e6 0 2"


def test_en_passant_capture() -> None:
    game = Game.from_fen()
    play(game, ["e4", "a6", "e5", "d5"])
    assert game.fen == "rnbqkbnr/1pp1pppp/p7/3pP3/8/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 3"

    applied = game.apply_san("exd6")
    assert applied.san == "exd6"
    assert applied.accepted.captured_piece == Piece(PieceType.PAWN, Color.BLACK)
    assert game.fen == "rnbqkbnr/1pp1pppp/p2P4/8/8/8/PPPP1PPP/RNBQKBNR b KQkq - 0 3"


def test_promotion_with_check() -> None:
    game = Game.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    applied = game.apply_san("e8=Q")
    assert applied.san == "e8=Q+"
    assert applied.is_check
    assert not applied.is_checkmate
    assert game.fen == "k3Q3/8/8/8/8/8/8/4K3 b - - 0 1"


def test_fools_mate() -> None:
    game = Game.from_fen()
    play(game, ["f3", "e5", "g4"])
    applied = game.apply_san("Qh4#")
    assert applied.san == "Qh4#"
    assert applied.is_checkmate
    assert game.is_checkmate()
    assert game.legal_moves() == []


def test_check_suffix_is_added_when_missing() -> None:
    game = Game.from_fen()
    play(game, ["f3", "e5", "g4"])
    assert game.apply_san("Qh4").san == "Qh4#"


def test_cannot_castle_through_attacked_square() -> None:
    game = Game.from_fen("4kr2/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    with pytest.raises(IllegalMoveError):
        game.apply_san("O-O")
    # nothing changed
    assert game.fen == "4kr2/8/8/8/8/8/8/R3K2R w KQ - 0 1"

    game.apply_san("O-O-O")
    assert game.fen == "4kr2/8/8/8/8/8/8/2KR3R b - - 1 1"


def test_cannot_castle_out_of_check() -> None:
    game = Game.from_fen("4r1k1/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    with pytest.raises(IllegalMoveError):
        game.apply_san("O-O")


def test_rook_move_revokes_one_right() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    game.apply_san("Rh2")
    assert game.fen == "r3k2r/8/8/8/8/8/7R/R3K3 b Qkq - 1 1"


def test_capturing_rook_revokes_both_sides_rights() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    applied = game.apply_san("Rxa8+")
    assert applied.san == "Rxa8+"
    assert game.fen == "R3k2r/8/8/8/8/8/8/4K2R b Kk - 0 1"


def test_pinned_piece_cannot_move() -> None:
    game = Game.from_fen("4k3/4r3/8/8/8/8/4N3/4K3 w - - 0 1")
    with pytest.raises(IllegalMoveError):
        game.apply_san("Nc3")


def test_illegal_move_keeps_position() -> None:
    game = Game.from_fen()
    with pytest.raises(IllegalMoveError):
        game.apply_san("Qh5")
    with pytest.raises(NotationError):
        game.apply_san("hello")
    assert game.fen == STARTING_FEN
    assert game.history == []


def test_pawn_push_cannot_capture() -> None:
    game = Game.from_fen("4k3/8/3p4/4P3/8/8/8/4K3 w - - 0 1")
    with pytest.raises(IllegalMoveError):
        game.apply_san("d6")
    assert game.apply_san("exd6").san == "exd6"
    assert game.fen == "4k3/8/3P4/8/8/8/8/4K3 b - - 0 1"


def test_apply_lenient() -> None:
    game = Game.from_fen()
    applied = game.apply_san("e2e4", MatchMode.LENIENT)
    assert applied.san == "e4"
    assert game.fen == AFTER_E4


def test_half_move_clock_and_move_number() -> None:
    game = Game.from_fen()
    play(game, ["Nf3", "Nf6", "Ng1", "Ng8"])
    assert game.fen == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 4 3"
    game.apply_san("e3")
    assert game.state.half_move_clock == 0
