"""
Representation of a single position on the board. The part that can be encoded in a FEN string.
"""

from dataclasses import dataclass
from itertools import combinations
from string import ascii_lowercase
from typing import Optional, Self

from src.chess.board import Board
from src.chess.castling import CASTLING_ORDER, CastlingDirection, castling_options
from src.chess.pieces import FEN_TO_PIECE, Color
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.exceptions import InvalidFENError

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

# "-" or any non-empty subset of "KQkq", kept in the canonical order
VALID_CASTLING_ENCODINGS: list[str] = ["-"] + [
    "".join(chars)
    for length in range(1, len(CASTLING_ORDER) + 1)
    for chars in combinations("KQkq", length)
]


def castling_from_fen(castle_fen: str) -> dict[CastlingDirection, bool]:
    """parse the part of the FEN string that encodes castling rights"""
    return {
        direction: (direction.value in castle_fen) for direction in CastlingDirection
    }


def castling_to_fen(castling_rights: dict[CastlingDirection, bool]) -> str:
    """create the part of the FEN string that encodes castling rights"""
    castling_chars = "".join(
        [direction.value for direction in CASTLING_ORDER if castling_rights[direction]]
    )
    return castling_chars or "-"


def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation.
    """

    # there should be 6 parts to the string
    parts = fen.split()
    if len(parts) != 6:
        return False

    position, color, castling, en_passant, half_move_counter, full_move_counter = parts
    if not is_valid_position(position):
        return False

    if not is_valid_color_code(color):
        return False

    if not is_valid_castling_rights(castling):
        return False

    if not is_valid_en_passant(en_passant):
        return False

    if not (
        is_valid_move_counter(half_move_counter)
        and is_valid_move_counter(full_move_counter)
        and int(full_move_counter) >= 1
    ):
        return False
    return True


def is_playable_fen(fen: str) -> bool:
    """
    Valid FEN that can also be replayed from:
    * exactly one king per side
    * the side that just moved is not left in check (its king could be captured right away)
    """
    if not is_valid_fen(fen):
        return False
    position, active_color = fen.split()[:2]
    if position.count("K") != 1 or position.count("k") != 1:
        return False
    waiting_color = Color.BLACK if active_color == "w" else Color.WHITE
    return not Board.from_fen(position).is_check(waiting_color)


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            # make sure every character is valid
            if is_ascii_number(character):
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                # immediately invalidate if the character is anything else
                return False

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_castling_rights(castling: str) -> bool:
    """A valid castling encoding has either KQkq, KQk, etc. or a '-' if all rights have been revoked."""
    return castling in VALID_CASTLING_ENCODINGS


def is_valid_en_passant(en_passant: str) -> bool:
    """Valid en passant square encoding should be a square that exists on the board or a '-'"""
    return (en_passant == "-") or is_valid_square(en_passant)


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    num_files, num_ranks = BOARD_DIMENSIONS
    if len(square) < 2:
        return False

    # NOTE: The following works as long as we do not go beyond 26 files.
    file_char, rank_char = square[0], square[1:]
    allowed_file_names = ascii_lowercase[:num_files]
    if file_char not in allowed_file_names:
        return False

    if not is_ascii_number(rank_char):
        return False

    return 1 <= int(rank_char) <= num_ranks


def is_valid_move_counter(counter: str) -> bool:
    return is_ascii_number(counter)


def is_ascii_number(text: str) -> bool:
    """Plain digits 0-9 only (str.isdigit() also accepts ex. "²", which int() cannot read)"""
    return text.isascii() and text.isdigit()


@dataclass
class FENState:
    """
    Data that can be constructed from a FEN string.
    ----

    FEN, or Forsyth-Edwards Notation, is a standard notation for describing a particular board position of a chess game.
    The purpose of FEN is to provide all the necessary information to restart a game from a particular position.

    <board position string><active color><castling rights><en passant square><# half move clock><number turns played>

    * The string to describe the board position is described in the Board class
    * The active color is either "w" or "b"
    * Castling rights are denoted as "k" for king-side or "q" for queen-side. Capital letters for the white pieces, small letters for the black pieces.
        In the starting position: KQkq (all rights available). Without any rights left a "-" is used.
    * The en passant square is the square a pawn can take on right after a two-square pawn advance. If not available a "-" is used.
    * The half move clock counts the number of moves made since the last pawn move or capture.
    * The number of turns starts at 1 and increments after every move black makes.

    ex) The standard starting position has a FEN
    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
    i.e. it is white to move, all castling options available, no en passant square, no half moves and we are in the first turn.
    """

    position: str
    color_to_move: Color
    castling_rights: dict[CastlingDirection, bool]
    en_passant_square: Optional[Square]
    half_move_clock: int
    num_turns: int

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Parse the FEN into data"""

        # raise an exception if invalid FEN:
        if not is_valid_fen(fen):
            raise InvalidFENError(f"Cannot interpret supplied string as FEN: {fen}")

        # extract the different components. FEN is space separated
        (
            position,
            active_color,
            castling_str,
            en_passant_algebraic,
            half_move_clock,
            num_turns,
        ) = fen.split()

        color_to_move = Color.WHITE if active_color == "w" else Color.BLACK
        castling_rights = castling_from_fen(castling_str)
        en_passant_square = (
            Square.from_algebraic(en_passant_algebraic)
            if en_passant_algebraic != "-"
            else None
        )
        return cls(
            position,
            color_to_move,
            castling_rights,
            en_passant_square,
            int(half_move_clock),
            int(num_turns),
        )

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        active_color = "w" if self.color_to_move == Color.WHITE else "b"
        castling_str = castling_to_fen(self.castling_rights)

        en_passant_algebraic = (
            self.en_passant_square.to_algebraic()
            if self.en_passant_square is not None
            else "-"
        )
        return f"{self.position} {active_color} {castling_str} {en_passant_algebraic} {self.half_move_clock} {self.num_turns}"

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_FEN)

    # --- CASTLING RIGHTS ---
    def castling_options(self, color: Color) -> list[CastlingDirection]:
        """Directions the player still holds the rights for"""
        return [
            direction
            for direction in castling_options(color)
            if self.castling_rights[direction]
        ]

    def can_castle(self, color: Color) -> bool:
        return bool(self.castling_options(color))

    def revoke_castling_rights(self, direction: CastlingDirection) -> None:
        self.castling_rights[direction] = False

    def revoke_all_castling_rights(self, color: Color) -> None:
        for direction in castling_options(color):
            self.revoke_castling_rights(direction)

    # --- MOVE COUNTERS ---
    def increment_half_move_counter(self) -> None:
        self.half_move_clock += 1

    def reset_half_move_counter(self) -> None:
        self.half_move_clock = 0

    def increment_full_move_counter(self) -> None:
        self.num_turns += 1
