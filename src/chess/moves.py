"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define candidate move sets for each piece type.

Legality (not leaving your own king in check) is checked later by Game
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from src.chess.castling import CASTLING_RULES, CastlingDirection
from src.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Color, Piece, PieceType, opponent
from src.chess.square import BOARD_DIMENSIONS, Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Piece: ...
    def is_empty(self, square: Square) -> bool: ...


Vector = tuple[int, int]

KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = [
    (0, 1),
    (0, -1),
    (1, 0),
    (-1, 0),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_square: Square
    to_square: Square
    promote_to: Optional[PieceType] = None
    castling_direction: Optional[CastlingDirection] = None
    is_en_passant: bool = False

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "e1g1": the king castles king side

        NOTE: Castling / En Passant flags are only known once matched against the legal moves of a position.
        """
        from_sq = Square.from_algebraic(uci[:2])
        to_sq = Square.from_algebraic(uci[2:4])
        promote_to = FEN_TO_PIECE[uci[4].lower()] if len(uci) == 5 else None
        return cls(from_sq, to_sq, promote_to=promote_to)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"


@dataclass(frozen=True)
class AcceptedMove:
    """Snapshot of the pieces involved, taken BEFORE the move updates the board."""

    move: Move
    moving_piece: Piece
    captured_piece: Optional[Piece] = None

    @classmethod
    def from_move_and_board(cls, move: Move, board: Board) -> Self:
        moving_piece = board.piece(move.from_square)
        if move.is_en_passant:
            # the pawn taken is not standing on the target square
            captured: Optional[Piece] = Piece(PieceType.PAWN, opponent(moving_piece.color))
        elif board.is_empty(move.to_square):
            captured = None
        else:
            captured = board.piece(move.to_square)
        return cls(move, moving_piece, captured)


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """

    player_color = board.piece(square).color
    opponent_color = opponent(player_color)

    moves: list[Move] = []
    for df, dr in directions:
        target_square = square
        while True:
            target_square = target_square.offset(df, dr)
            if not target_square.is_within_bounds():
                break

            if not board.is_empty(target_square):
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if board.piece(target_square).color == opponent_color:
                    moves.append(Move(from_square=square, to_square=target_square))
                break

            moves.append(Move(from_square=square, to_square=target_square))
    return moves


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    player_color = board.piece(square).color
    moves: list[Move] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        if board.piece(target_square).color != player_color:
            moves.append(Move(from_square=square, to_square=target_square))

    return moves


def pawn_direction(color: Color) -> int:
    """White moves UP the board, black moves DOWN"""
    return 1 if color == Color.WHITE else -1


def pawn_starting_rank(color: Color) -> int:
    return 2 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 1


def candidate_pawn_moves(square: Square, board: Board) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally

    NOTE: En passant is added by the Game, as it depends on the FEN state.
    """
    color = board.piece(square).color
    forward = pawn_direction(color)
    moves: list[Move] = []

    one_step = square.offset(0, forward)
    if one_step.is_within_bounds() and board.is_empty(one_step):
        moves.append(Move(from_square=square, to_square=one_step))
        two_steps = square.offset(0, 2 * forward)
        if square.rank == pawn_starting_rank(color) and board.is_empty(two_steps):
            moves.append(Move(from_square=square, to_square=two_steps))

    opponent_color = opponent(color)
    for df in (-1, 1):
        target_square = square.offset(df, forward)
        if not target_square.is_within_bounds():
            continue
        if board.piece(target_square).color == opponent_color:
            moves.append(Move(from_square=square, to_square=target_square))
    return moves


def candidate_knight_moves(square: Square, board: Board) -> list[Move]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return candidate_bishop_moves(square, board) + candidate_rook_moves(square, board)


def candidate_king_moves(square: Square, board: Board) -> list[Move]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move (handled separately).
    """
    return single_step_move(square, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and type
    that is allowed to move along the given direction?"_
    """
    for df, dr in directions:
        target_square = square
        while True:
            target_square = target_square.offset(df, dr)
            if not target_square.is_within_bounds():
                break

            if not board.is_empty(target_square):
                piece_found = board.piece(target_square)
                if (piece_found.color == by_color) and (
                    piece_found.type == by_piece_type
                ):
                    return True
                break
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    Equivalent of raycasting for pawns, kings, and knights: they only attack a single step along a direction.
    """
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if (piece_found.color == by_color) and (piece_found.type == by_piece_type):
            return True

    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric. To check IF a white pawn could take on your square -->
    Must look one rank DOWN the board. Hence, vectors are exactly opposite to the ones used in `candidate_pawn_moves()`
    """
    backwards = -pawn_direction(by_color)
    inverse_pawn_take_deltas: list[Vector] = [(1, backwards), (-1, backwards)]
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, inverse_pawn_take_deltas
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_bishop(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, PieceType.BISHOP, board, DIAGONALS)


def is_attacked_by_rook(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, PieceType.ROOK, board, STRAIGHTS)


def is_attacked_by_queen(square: Square, by_color: Color, board: Board) -> bool:
    """The Queen attacks along both the straight lines and the diagonals"""
    return raycasting_attack(
        square, by_color, PieceType.QUEEN, board, STRAIGHTS + DIAGONALS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: dict[PieceType, IsAttackedFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}


# -- CASTLING MOVES ---
def castling_rook_squares(direction: CastlingDirection) -> tuple[Square, Square]:
    rule = CASTLING_RULES[direction]
    return rule.rook_from, rule.rook_to


def candidate_castling_move(direction: CastlingDirection) -> Move:
    """Castling is encoded as the king's move + the castling direction"""
    rule = CASTLING_RULES[direction]
    return Move(rule.king_from, rule.king_to, castling_direction=direction)


# -- EN PASSANT MOVES ---
def en_passant_moves(
    en_passant_square: Square, color: Color, board: Board
) -> list[Move]:
    """Given a target en passant square, check the adjacent files (in the rank one up/down from the en passant square) for pawns of the correct color."""

    # NOTE: The pawn that can take stands one rank 'behind' the en passant square (as seen from the moving player)
    behind = -pawn_direction(color)
    own_pawn = Piece(PieceType.PAWN, color)

    moves: list[Move] = []
    for df in (-1, 1):
        maybe_pawn_square = en_passant_square.offset(df, behind)
        if not maybe_pawn_square.is_within_bounds():
            continue
        if board.piece(maybe_pawn_square) == own_pawn:
            moves.append(
                Move(
                    from_square=maybe_pawn_square,
                    to_square=en_passant_square,
                    is_en_passant=True,
                )
            )

    return moves


# -- PAWN PROMOTION MOVES --
# NOTE: order doubles as the preference when a promotion piece has to be guessed.
PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
]


def is_pawn_push_to_promotion_square(move: Move, board: Board) -> bool:
    """check if the move is a pawn move and if it reaches either the first or the final rank"""
    is_pawn_move = board.piece(move.from_square).type == PieceType.PAWN
    reaches_promotion_square = move.to_square.rank in (1, BOARD_DIMENSIONS[1])
    return is_pawn_move and reaches_promotion_square


def pawn_pushes_w_promotion(pawn_push: Move) -> list[Move]:
    """Return multiple copies of the pawn push with the piece type to promote into filled in."""
    return [
        Move(
            from_square=pawn_push.from_square,
            to_square=pawn_push.to_square,
            promote_to=piece_type,
        )
        for piece_type in PROMOTION_OPTIONS
    ]
