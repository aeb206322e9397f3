"""
The Game class is the Board State Engine: it owns the board + FEN state of a single game replay.
It is responsible for applying one move token at the time -->
find the unique legal move the token denotes, play it, and update every part of the FEN state.
"""

from dataclasses import dataclass
from typing import Optional, Self

from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingDirection, castling_path, king_path
from src.chess.fen import FENState
from src.chess.moves import (
    AcceptedMove,
    Move,
    candidate_castling_move,
    castling_rook_squares,
    en_passant_moves,
    is_pawn_push_to_promotion_square,
    pawn_direction,
    pawn_pushes_w_promotion,
)
from src.chess.notation import match_lenient, match_strict, move_to_san
from src.chess.pieces import Color, Piece, PieceType, opponent
from src.chess.square import Square
from src.core.exceptions import InvalidFENError
from src.core.shared_types import MatchMode


@dataclass(frozen=True)
class AppliedMove:
    """What the Game reports back after a token got applied"""

    accepted: AcceptedMove
    san: str
    is_check: bool
    is_checkmate: bool

    @property
    def move(self) -> Move:
        return self.accepted.move


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY THE SEQUENCER ---

    board: Board
    state: FENState
    moves: list[Move]
    history: list[str]  # list of FEN strings, before every move

    @classmethod
    def from_fen(cls, fen: Optional[str] = None) -> Self:
        """Fresh game, seeded from the given FEN or the standard starting position. Raises InvalidFENError."""
        state = FENState.from_fen(fen) if fen else FENState.starting_position()
        board = Board.from_fen(state.position)

        # Cannot replay anything without both kings (checks are inferred from them)
        board.king_square(Color.WHITE)
        board.king_square(Color.BLACK)
        if board.is_check(opponent(state.color_to_move)):
            raise InvalidFENError(
                f"The side that just moved is left in check: {state.to_fen()}"
            )
        return cls(board=board, state=state, moves=[], history=[])

    @property
    def fen(self) -> str:
        return self.state.to_fen()

    @property
    def color_to_move(self) -> Color:
        return self.state.color_to_move

    def legal_moves(self) -> list[Move]:
        """Legal moves of the player whose turn it is"""
        return self._generate_legal_moves(self.color_to_move)

    def is_check(self) -> bool:
        """Is the player to move in check?"""
        return self.board.is_check(self.color_to_move)

    def is_checkmate(self) -> bool:
        return self.is_check() and not self.legal_moves()

    def apply_san(self, token: str, mode: MatchMode = MatchMode.STRICT) -> AppliedMove:
        """
        Apply a single move token
        -----

        1. determine legal moves
        2. find the unique legal move the token denotes (raises IllegalMoveError / AmbiguousMoveError, nothing changed yet)
        3. update the board (NOTE: if castling, move the king and the rook)
        4. update the FEN history + FEN state
        5. report check / mate for the opponent
        """
        legal_moves = self.legal_moves()
        if mode == MatchMode.STRICT:
            move = match_strict(token, legal_moves, self.board)
        else:
            move = match_lenient(token, legal_moves, self.board)

        san = move_to_san(move, self.board, legal_moves)

        # Store move info before update
        accepted_move = AcceptedMove.from_move_and_board(move, self.board)

        # update the FEN history (with the FEN before the move)
        self._update_fen_history(self.fen)

        self._play_move(self.board, move)
        self._update_fen_state(accepted_move)
        self.moves.append(move)

        is_check = self.is_check()
        is_checkmate = is_check and not self.legal_moves()
        suffix = "#" if is_checkmate else "+" if is_check else ""
        return AppliedMove(accepted_move, san + suffix, is_check, is_checkmate)

    # -- PRIVATE HELPERS ---
    def _generate_legal_moves(self, color: Color) -> list[Move]:
        """
        List of legal moves for the player with the 'color' pieces
        ----

        **Combines the following**

        1. generate candidate moves, using the basic movement rules for all pieces (the board does this calculation)
        2. add candidate castling moves
        3. add candidate en passant moves
        4. remove illegal options --> a move that would put you in check or you are in check and the move does not get you out of it.
        5. Pawn push to promotion square? --> expand the set of moves to include one for every choice of piece type to promote into.
        """
        candidate_moves = self.board.generate_candidate_moves(color)
        candidate_moves.extend(self._generate_castling_moves(color))

        if self.state.en_passant_square is not None:
            candidate_moves.extend(
                en_passant_moves(self.state.en_passant_square, color, self.board)
            )

        legal_moves: list[Move] = []
        for move in candidate_moves:
            if self._is_putting_yourself_in_check(move, color):
                continue
            if is_pawn_push_to_promotion_square(move, self.board):
                legal_moves.extend(pawn_pushes_w_promotion(move))
            else:
                legal_moves.append(move)
        return legal_moves

    def _is_putting_yourself_in_check(self, move: Move, color: Color) -> bool:
        """Return True if the move puts (or leaves) you in check

        plan:
        1. Copy the board
        2. make the candidate move
        3. determine if king is in check on the new board
        """
        board = self.board.copy()
        self._play_move(board, move)
        return board.is_check(color)

    def _play_move(self, board: Board, move: Move) -> None:
        """Update a board's position. Works on the real board as well as on copies used for legality checks."""
        if move.castling_direction:
            self._move_castling_pieces(board, move.castling_direction)
            return

        board.move_piece(move)
        if move.is_en_passant:
            # the pawn taken stands on the en passant file, on the rank the moving pawn started from
            board.remove_piece(Square(move.to_square.file, move.from_square.rank))
        if move.promote_to is not None:
            board.promote_piece(move.to_square, to=move.promote_to)

    def _update_fen_history(self, fen: str) -> None:
        self.history.append(fen)

    def _update_fen_state(self, accepted_move: AcceptedMove) -> None:
        """Update the FEN state to reflect state after move. NOTE the board has already been updated."""
        self.state.position = self.board.to_fen()

        # NOTE: ask for current player's pieces color BEFORE updating this part of the FEN string
        player_color = self.color_to_move

        self._revoke_castling_rights_if_needed(accepted_move, player_color)
        self.state.en_passant_square = self._determine_en_passant_square(
            accepted_move, player_color
        )

        # move counters
        if self._is_half_move(accepted_move):
            self.state.increment_half_move_counter()
        else:
            self.state.reset_half_move_counter()

        if player_color == Color.BLACK:
            self.state.increment_full_move_counter()

        # NOTE update color to move AFTER doing checks that depend on the last move made
        self.state.color_to_move = opponent(player_color)

    # -- CASTLING RULE HELPERS ---
    def _generate_castling_moves(self, color: Color) -> list[Move]:
        """Use CASTLING_RULES to construct corresponding set of moves"""
        return [
            candidate_castling_move(direction)
            for direction in self._legal_castling_directions(color)
        ]

    def _legal_castling_directions(self, color: Color) -> list[CastlingDirection]:
        """
        Find the legal castling directions for the player currently attempting to move
        ---

        **you are allowed to castle if**

        * Castling rights are not yet revoked (and king + rook are on their starting squares).
        * You are not currently in check (you cannot castle out of check).
        * All squares between king and rook are empty.
        * None of the squares the king passes through or lands on is under attack.
        """
        if not self.state.can_castle(color):
            return []

        opponent_color = opponent(color)
        if self.board.is_check(color):
            return []

        legal_directions: list[CastlingDirection] = []
        for direction in self.state.castling_options(color):
            rule = CASTLING_RULES[direction]
            if self.board.piece(rule.king_from) != Piece(PieceType.KING, color):
                continue
            if self.board.piece(rule.rook_from) != Piece(PieceType.ROOK, color):
                continue
            if self.board.is_any_occupied(castling_path(direction)):
                continue
            if self.board.is_any_under_attack(king_path(direction), opponent_color):
                continue
            legal_directions.append(direction)

        return legal_directions

    def _revoke_castling_rights_if_needed(
        self, move: AcceptedMove, player_color: Color
    ) -> None:
        """
        Checks which rights should get revoked
        ----

        1. If you are moving your king (castling included) --> revoke both
        2. If you are moving your rook away from its starting square --> revoke the right in that direction
        3. If you are taking your opponent's rook on its starting square --> revoke your opponent's right in that direction
        """
        opponent_color = opponent(player_color)

        if move.moving_piece.type == PieceType.KING:
            self.state.revoke_all_castling_rights(player_color)

        if move.moving_piece.type == PieceType.ROOK:
            for direction in self.state.castling_options(player_color):
                rook_starting_square, _ = castling_rook_squares(direction)
                if move.move.from_square == rook_starting_square:
                    self.state.revoke_castling_rights(direction)

        if move.captured_piece == Piece(PieceType.ROOK, opponent_color):
            for direction in self.state.castling_options(opponent_color):
                rook_starting_square, _ = castling_rook_squares(direction)
                if move.move.to_square == rook_starting_square:
                    self.state.revoke_castling_rights(direction)

    def _move_castling_pieces(self, board: Board, direction: CastlingDirection) -> None:
        """Move both the King and the Rook"""
        squares = CASTLING_RULES[direction]
        board.move_piece(Move(from_square=squares.king_from, to_square=squares.king_to))
        board.move_piece(Move(from_square=squares.rook_from, to_square=squares.rook_to))

    # --- EN PASSANT RULE HELPERS ----
    def _determine_en_passant_square(
        self, move: AcceptedMove, player_color: Color
    ) -> Optional[Square]:
        """The en passant square for the next turn: only right after a two-square pawn advance."""
        ranks_moved = abs(move.move.from_square.rank - move.move.to_square.rank)
        if self._is_pawn_move(move) and ranks_moved == 2:
            return move.move.from_square.offset(0, pawn_direction(player_color))
        return None

    # --- HALF MOVE CLOCK HELPERS ---
    def _is_half_move(self, move: AcceptedMove) -> bool:
        return (not self._is_pawn_move(move)) and (not self._is_capture(move))

    def _is_pawn_move(self, move: AcceptedMove) -> bool:
        return move.moving_piece.type == PieceType.PAWN

    def _is_capture(self, move: AcceptedMove) -> bool:
        return move.captured_piece is not None
