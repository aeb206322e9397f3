"""
SAN (Standard Algebraic Notation) grammar.
----

Two ways of matching a move token against the legal moves of a position:

* strict: the token must follow the SAN grammar. The legal moves of the named piece kind landing on the destination are
  narrowed down by every disambiguator in the token. Exactly one move must remain.
* lenient: the token only has to "look like" a move. Used as the last resort for malformed exports, see `match_lenient()`.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

from src.chess.board import Board
from src.chess.castling import is_king_side
from src.chess.moves import PROMOTION_OPTIONS, Move
from src.chess.pieces import FEN_TO_PIECE, PIECE_TO_SAN, SAN_TO_PIECE, PieceType
from src.chess.square import Square, file_char, file_index
from src.core.exceptions import AmbiguousMoveError, IllegalMoveError, NotationError

SAN_PATTERN = re.compile(
    r"^(?P<piece>[NBRQK])?"
    r"(?P<from_file>[a-h])?(?P<from_rank>[1-8])?"
    r"(?P<capture>x)?"
    r"(?P<to>[a-h][1-8])"
    r"(?:=?(?P<promotion>[NBRQ]))?"
    r"(?P<suffix>[+#])?$"
)
CASTLING_PATTERN = re.compile(r"^(?P<castle>O-O(?:-O)?|0-0(?:-0)?)(?P<suffix>[+#])?$")
ANNOTATION_GLYPHS = "!?"

# --- lenient grammar ---
LENIENT_CASTLING = re.compile(r"^[O0o]-?[O0o](?P<long>-?[O0o])?$")
LENIENT_COORDINATES = re.compile(
    r"^(?P<from>[a-h][1-8])[-x:]?(?P<to>[a-h][1-8])=?(?P<promotion>[nbrqNBRQ])?$"
)
LENIENT_SAN = re.compile(
    r"^(?P<piece>[PNBRQKnrqk])?"
    r"(?P<disambiguation>[a-h1-8]{0,2})"
    r"[x:]?"
    r"(?P<to>[a-h][1-8])"
    r"=?(?P<promotion>[NBRQnbrq])?$"
)
ANY_SQUARE = re.compile(r"[a-h][1-8]")
NOT_MOVE_CHARACTERS = re.compile(r"[^a-zA-Z0-9=:\-]")


@dataclass(frozen=True)
class SanToken:
    """The parts of a SAN move. castles_king_side is None for anything that is not castling."""

    piece_type: PieceType = PieceType.PAWN
    to_square: Optional[Square] = None
    from_file: Optional[int] = None
    from_rank: Optional[int] = None
    is_capture: bool = False
    promote_to: Optional[PieceType] = None
    castles_king_side: Optional[bool] = None
    suffix: str = ""


def parse_san(token: str) -> SanToken:
    """Split a SAN token into its parts. Raises NotationError if it does not follow the grammar."""
    text = token.rstrip(ANNOTATION_GLYPHS)

    castling = CASTLING_PATTERN.match(text)
    if castling:
        castle = castling.group("castle").replace("0", "O")
        return SanToken(
            piece_type=PieceType.KING,
            castles_king_side=(castle == "O-O"),
            suffix=castling.group("suffix") or "",
        )

    match = SAN_PATTERN.match(text)
    if match is None:
        raise NotationError(f"Cannot interpret {token!r} as a move.", token)

    piece = match.group("piece")
    from_file = match.group("from_file")
    from_rank = match.group("from_rank")
    promotion = match.group("promotion")
    return SanToken(
        piece_type=SAN_TO_PIECE[piece] if piece else PieceType.PAWN,
        to_square=Square.from_algebraic(match.group("to")),
        from_file=file_index(from_file) if from_file else None,
        from_rank=int(from_rank) if from_rank else None,
        is_capture=bool(match.group("capture")),
        promote_to=SAN_TO_PIECE[promotion] if promotion else None,
        suffix=match.group("suffix") or "",
    )


def matches_san(san: SanToken, move: Move, board: Board) -> bool:
    """Does the legal move fit every part of the parsed token?"""
    if san.castles_king_side is not None:
        return (
            move.castling_direction is not None
            and is_king_side(move.castling_direction) == san.castles_king_side
        )
    if move.castling_direction is not None:
        return False
    if board.piece(move.from_square).type != san.piece_type:
        return False
    if move.to_square != san.to_square:
        return False
    if move.promote_to != san.promote_to:
        return False
    if san.from_file is not None and move.from_square.file != san.from_file:
        return False
    if san.from_rank is not None and move.from_square.rank != san.from_rank:
        return False

    # the capture marker must agree with the board, and a pawn capture always names its file
    is_capture = move.is_en_passant or not board.is_empty(move.to_square)
    if san.is_capture != is_capture:
        return False
    if (
        san.piece_type == PieceType.PAWN
        and move.from_square.file != move.to_square.file
        and san.from_file is None
    ):
        return False
    return True


def match_strict(token: str, legal_moves: list[Move], board: Board) -> Move:
    """The unique legal move denoted by the token"""
    san = parse_san(token)
    candidates = [move for move in legal_moves if matches_san(san, move, board)]
    if not candidates:
        raise IllegalMoveError(f"Move not allowed: {token}", token)
    if len(candidates) > 1:
        options = ", ".join(move.to_uci() for move in candidates)
        raise AmbiguousMoveError(
            f"Move {token} can be played in multiple ways: {options}", token
        )
    return candidates[0]


# --- LENIENT MATCHING ---
def lenient_sort_key(move: Move) -> tuple[int, int, int, int]:
    """
    Deterministic tie-break between lenient candidates:
    shortest distance travelled, then lowest origin file, then lowest origin rank, then promotion piece (Q > R > B > N)
    """
    promotion_rank = (
        PROMOTION_OPTIONS.index(move.promote_to) if move.promote_to is not None else 0
    )
    return (
        move.from_square.distance(move.to_square),
        move.from_square.file,
        move.from_square.rank,
        promotion_rank,
    )


def _soft_filter(moves: list[Move], keep: Callable[[Move], bool]) -> list[Move]:
    """Apply a filter only if something survives it: in lenient mode a bad hint is ignored instead of failing the move."""
    filtered = [move for move in moves if keep(move)]
    return filtered or moves


def _pick(token: str, candidates: list[Move]) -> Move:
    if not candidates:
        raise IllegalMoveError(f"No legal move resembles: {token}", token)
    return min(candidates, key=lenient_sort_key)


def match_lenient(token: str, legal_moves: list[Move], board: Board) -> Move:
    """
    Loosely match a malformed token
    ----

    1. castling written with zeros / lower case letters / without dashes
    2. coordinate notation: e2e4, e2-e4, e7e8q
    3. SAN-like: lower case piece letters, "P" for pawns, missing "=", disambiguators that do not fit
    4. anything else: the last square mentioned is the destination, the first piece letter (if any) the piece kind

    Ties are broken by `lenient_sort_key()`, so lenient matching never reports an ambiguous move.
    """
    text = NOT_MOVE_CHARACTERS.sub("", token)

    castling = LENIENT_CASTLING.match(text)
    if castling:
        king_side = castling.group("long") is None
        candidates = [
            move
            for move in legal_moves
            if move.castling_direction is not None
            and is_king_side(move.castling_direction) == king_side
        ]
        return _pick(token, candidates)

    coordinates = LENIENT_COORDINATES.match(text)
    if coordinates:
        from_square = Square.from_algebraic(coordinates.group("from"))
        to_square = Square.from_algebraic(coordinates.group("to"))
        candidates = [
            move
            for move in legal_moves
            if move.from_square == from_square and move.to_square == to_square
        ]
        promotion = coordinates.group("promotion")
        if promotion:
            promote_to = FEN_TO_PIECE[promotion.lower()]
            candidates = _soft_filter(candidates, lambda m: m.promote_to == promote_to)
        return _pick(token, candidates)

    match = LENIENT_SAN.match(text)
    if match:
        piece_letter = match.group("piece")
        disambiguation = match.group("disambiguation")
        to_algebraic = match.group("to")
        promotion = match.group("promotion")
    else:
        squares = ANY_SQUARE.findall(text)
        if not squares:
            raise NotationError(f"Cannot find a destination square in {token!r}.", token)
        to_algebraic = squares[-1]
        piece_letter = next((char for char in text if char in SAN_TO_PIECE), None)
        disambiguation = ""
        promotion = None

    to_square = Square.from_algebraic(to_algebraic)
    candidates = [move for move in legal_moves if move.to_square == to_square]

    if piece_letter and piece_letter.upper() != "P":
        piece_type = SAN_TO_PIECE[piece_letter.upper()]
        candidates = [
            move for move in candidates if board.piece(move.from_square).type == piece_type
        ]
    else:
        # without a piece letter a pawn is the most likely reading, but any piece landing there will do
        candidates = _soft_filter(
            candidates, lambda m: board.piece(m.from_square).type == PieceType.PAWN
        )

    for hint in disambiguation:
        if hint.isdigit():
            candidates = _soft_filter(
                candidates, lambda m, rank=int(hint): m.from_square.rank == rank
            )
        else:
            candidates = _soft_filter(
                candidates, lambda m, file=file_index(hint): m.from_square.file == file
            )

    if promotion:
        promote_to = SAN_TO_PIECE[promotion.upper()]
        candidates = _soft_filter(candidates, lambda m: m.promote_to == promote_to)
    return _pick(token, candidates)


# --- WRITING SAN ---
def move_to_san(move: Move, board: Board, legal_moves: list[Move]) -> str:
    """
    Canonical SAN of a legal `move`, given the board and legal moves BEFORE it is made.
    (Check / mate suffix is added by the Game, as that needs the position after the move)
    """
    if move.castling_direction is not None:
        return "O-O" if is_king_side(move.castling_direction) else "O-O-O"

    piece = board.piece(move.from_square)
    is_capture = move.is_en_passant or not board.is_empty(move.to_square)

    san = ""
    if piece.type == PieceType.PAWN:
        if is_capture:
            san += file_char(move.from_square.file)
    else:
        san += PIECE_TO_SAN[piece.type]
        san += _disambiguation(move, board, legal_moves)

    if is_capture:
        san += "x"
    san += move.to_square.to_algebraic()

    if move.promote_to is not None:
        san += "=" + PIECE_TO_SAN[move.promote_to]
    return san


def _disambiguation(move: Move, board: Board, legal_moves: list[Move]) -> str:
    """File if that is enough, otherwise rank, otherwise the full origin square"""
    piece_type = board.piece(move.from_square).type
    rivals = [
        other.from_square
        for other in legal_moves
        if other.to_square == move.to_square
        and other.from_square != move.from_square
        and other.castling_direction is None
        and board.piece(other.from_square).type == piece_type
    ]
    if not rivals:
        return ""
    origin = move.from_square
    if all(square.file != origin.file for square in rivals):
        return file_char(origin.file)
    if all(square.rank != origin.rank for square in rivals):
        return str(origin.rank)
    return origin.to_algebraic()
