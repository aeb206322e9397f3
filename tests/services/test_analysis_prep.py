"""Unit tests for src/services/analysis_prep.py"""

import pytest

from src.core.models import BatchResult, GameFenResult, GameInfo, PositionRecord, RawGame
from src.core.shared_types import Side, Tier
from src.services.analysis_prep import (
    critical_positions,
    format_batch,
    format_game,
    format_position,
    split_phases,
)
from src.services.recovery import RecoveryController

AFTER_E4 = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"


def fake_positions(count: int) -> list[PositionRecord]:
    return [
        PositionRecord(
            ply=ply,
            move_number=(ply + 1) // 2 or 1,
            side=Side.WHITE if ply % 2 else Side.BLACK,
            fen=f"fen-{ply}",
            san=None if ply == 0 else f"m{ply}",
        )
        for ply in range(count)
    ]


@pytest.mark.parametrize(
    "count, sizes",
    [(45, (20, 20, 5)), (20, (20, 0, 0)), (25, (20, 5, 0)), (1, (1, 0, 0))],
)
def test_split_phases(count: int, sizes: tuple[int, int, int]) -> None:
    phases = split_phases(fake_positions(count))
    assert (len(phases.opening), len(phases.middlegame), len(phases.endgame)) == sizes


def test_split_phases_boundaries() -> None:
    phases = split_phases(fake_positions(45))
    assert phases.opening[-1].ply == 19
    assert phases.middlegame[0].ply == 20
    assert phases.endgame[0].ply == 40


def test_critical_positions() -> None:
    assert [position.ply for position in critical_positions(fake_positions(23))] == [0, 5, 10, 15, 20]
    assert [position.ply for position in critical_positions(fake_positions(7), step=3)] == [0, 3, 6]


def test_format_position() -> None:
    result = RecoveryController().run(RawGame(pgn="1. e4 e5"))
    start, e4, e5 = result.positions
    assert format_position(start).startswith("Starting position: rnbqkbnr/")
    assert format_position(e4) == f"Move 1. e4: {AFTER_E4}"
    assert format_position(e5) == f"Move 1... e5: {e5.fen}"


def test_format_game() -> None:
    result = GameFenResult(
        positions=fake_positions(25),
        total_tokens=24,
        complete=True,
        game_info=GameInfo(white="alice", black="bob", result="1-0", date="2024.03.01"),
    )
    text = format_game(2, result)
    lines = text.splitlines()
    assert lines[0] == "GAME 2: alice vs bob (1-0)"
    assert "Date: 2024.03.01" in lines
    assert "Total Moves: 24" in lines
    assert "OPENING PHASE POSITIONS:" in lines
    assert "MIDDLEGAME PHASE POSITIONS:" in lines
    assert "ENDGAME PHASE POSITIONS:" not in lines
    # only the first 10 positions of a phase are listed
    assert "Move 5. m9: fen-9" in lines
    assert "Move 5... m10: fen-10" not in lines
    assert lines[-1] == "--- END OF GAME 2 ---"


def test_format_batch_skips_failed_games() -> None:
    batch = BatchResult()
    controller = RecoveryController()
    batch.add("a", controller.run(RawGame(pgn='[White "alice"]\n\n1. e4 e5')))
    batch.add("b", controller.run(RawGame(pgn="1. Qh6")))
    assert batch["b"].tier_used == Tier.FAILED

    text = format_batch(batch, player="alice", platform="lichess")
    assert text.startswith("PLAYER: alice (lichess)")
    assert "TOTAL GAMES ANALYZED: 1" in text
    assert "GAME 1: alice vs Unknown (*)" in text
    assert "GAME 2" not in text
