"""
Position Sequencer: drives the tokens of one game through a fresh Game and records the position after every ply.
"""

import logging
from typing import Optional, Sequence

from src.chess.game import AppliedMove, Game
from src.chess.pieces import PIECE_TO_FEN, color_to_side
from src.core.exceptions import MoveError
from src.core.models import GameFenResult, MoveToken, PositionRecord
from src.core.shared_types import MatchMode

logger = logging.getLogger(__name__)


def initial_record(game: Game) -> PositionRecord:
    """Ply 0: the position before any move"""
    return PositionRecord(
        ply=0,
        move_number=game.state.num_turns,
        side=color_to_side(game.color_to_move),
        fen=game.fen,
    )


def move_record(
    ply: int, move_number: int, token: str, applied: AppliedMove, fen: str, mode: MatchMode
) -> PositionRecord:
    accepted = applied.accepted
    return PositionRecord(
        ply=ply,
        move_number=move_number,
        side=color_to_side(accepted.moving_piece.color),
        fen=fen,
        token=token,
        san=applied.san,
        from_square=accepted.move.from_square.to_algebraic(),
        to_square=accepted.move.to_square.to_algebraic(),
        piece=PIECE_TO_FEN[accepted.moving_piece.type],
        captured=(
            PIECE_TO_FEN[accepted.captured_piece.type] if accepted.captured_piece else None
        ),
        promotion=(
            PIECE_TO_FEN[accepted.move.promote_to] if accepted.move.promote_to else None
        ),
        is_check=applied.is_check,
        is_checkmate=applied.is_checkmate,
        match_mode=mode,
    )


def sequence(
    initial_fen: Optional[str],
    tokens: Sequence[MoveToken | str],
    mode: MatchMode = MatchMode.STRICT,
) -> GameFenResult:
    """
    Replay the tokens in order
    ----

    * ply 0 is always recorded
    * the first token that cannot be applied stops the replay: the result is marked incomplete and keeps everything up to that point.
      (Skipping the token and carrying on would shift the side to move for every later token)

    Raises InvalidFENError if the initial position cannot be replayed from.
    """
    game = Game.from_fen(initial_fen)
    positions = [initial_record(game)]
    texts = [token.text if isinstance(token, MoveToken) else token for token in tokens]

    for ply, text in enumerate(texts, start=1):
        move_number = game.state.num_turns
        try:
            applied = game.apply_san(text, mode)
        except MoveError as exc:
            logger.debug("Replay stopped at ply %d (%r): %s", ply, text, exc)
            return GameFenResult(
                positions=positions,
                total_tokens=len(texts),
                complete=False,
                stopped_at=text,
                error=str(exc),
            )
        positions.append(move_record(ply, move_number, text, applied, game.fen, mode))

    return GameFenResult(positions=positions, total_tokens=len(texts), complete=True)
