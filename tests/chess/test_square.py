"""Unit tests for src/chess/square.py"""

import pytest

from src.chess.square import Square, file_char, file_index


@pytest.mark.parametrize(
    "algebraic, expected",
    [("a1", Square(1, 1)), ("h8", Square(8, 8)), ("e4", Square(5, 4)), ("b7", Square(2, 7))],
)
def test_from_algebraic(algebraic: str, expected: Square) -> None:
    assert Square.from_algebraic(algebraic) == expected
    assert expected.to_algebraic() == algebraic


@pytest.mark.parametrize(
    "square, expected",
    [
        (Square(1, 1), True),
        (Square(8, 8), True),
        (Square(0, 4), False),
        (Square(9, 1), False),
        (Square(4, 0), False),
        (Square(4, 9), False),
    ],
)
def test_is_within_bounds(square: Square, expected: bool) -> None:
    assert square.is_within_bounds() is expected


def test_offset() -> None:
    assert Square.from_algebraic("e2").offset(0, 2) == Square.from_algebraic("e4")
    assert Square.from_algebraic("g1").offset(-1, 2) == Square.from_algebraic("f3")


@pytest.mark.parametrize(
    "from_sq, to_sq, distance",
    [("a1", "h8", 7), ("e2", "e4", 2), ("g1", "f3", 2), ("d4", "d4", 0), ("e1", "c1", 2)],
)
def test_distance_counts_king_steps(from_sq: str, to_sq: str, distance: int) -> None:
    assert Square.from_algebraic(from_sq).distance(Square.from_algebraic(to_sq)) == distance


def test_file_helpers() -> None:
    assert file_index("a") == 1
    assert file_index("h") == 8
    assert file_char(1) == "a"
    assert file_char(8) == "h"
