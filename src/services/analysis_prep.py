"""
Turns replayed games into the position listing the report generator works from.

Each game is split in phases by position index (opening: the first 20 positions, middlegame: the next 20, endgame: the rest),
only the first few positions of every phase are listed.
"""

from dataclasses import dataclass

from src.core.models import BatchResult, GameFenResult, PositionRecord
from src.core.shared_types import Side

OPENING_END = 20
MIDDLEGAME_END = 40
CRITICAL_POSITION_STEP = 5
POSITIONS_PER_PHASE = 10


@dataclass(frozen=True)
class GamePhases:
    opening: list[PositionRecord]
    middlegame: list[PositionRecord]
    endgame: list[PositionRecord]


def split_phases(positions: list[PositionRecord]) -> GamePhases:
    return GamePhases(
        opening=positions[:OPENING_END],
        middlegame=positions[OPENING_END:MIDDLEGAME_END],
        endgame=positions[MIDDLEGAME_END:],
    )


def critical_positions(
    positions: list[PositionRecord], step: int = CRITICAL_POSITION_STEP
) -> list[PositionRecord]:
    """Sample of positions to look at closely: every `step`-th position, starting with the initial one"""
    return positions[::step]


def format_position(position: PositionRecord) -> str:
    """ex. 'Move 1. e4: <fen>' for White's moves, 'Move 1... e5: <fen>' for Black's"""
    if position.ply == 0:
        return f"Starting position: {position.fen}"
    dots = "." if position.side == Side.WHITE else "..."
    return f"Move {position.move_number}{dots} {position.san or position.token}: {position.fen}"


def format_game(game_number: int, result: GameFenResult) -> str:
    info = result.game_info
    lines = [
        f"GAME {game_number}: {info.white} vs {info.black} ({info.result})",
        f"Date: {info.date}",
        f"Total Moves: {result.total_tokens}",
        "",
    ]
    phases = split_phases(result.positions)
    for title, positions in (
        ("OPENING", phases.opening),
        ("MIDDLEGAME", phases.middlegame),
        ("ENDGAME", phases.endgame),
    ):
        if not positions:
            continue
        lines.append(f"{title} PHASE POSITIONS:")
        lines.extend(format_position(position) for position in positions[:POSITIONS_PER_PHASE])
        lines.append("")
    lines.append(f"--- END OF GAME {game_number} ---")
    return "\n".join(lines)


def format_batch(batch: BatchResult, player: str, platform: str) -> str:
    """Position listing of every game that got past its initial position"""
    replayed = [batch[game_id] for game_id in batch if not batch[game_id].is_failed]
    summary = batch.summary()
    sections = [
        f"PLAYER: {player} ({platform})",
        f"TOTAL GAMES ANALYZED: {len(replayed)}",
        f"TOTAL POSITIONS: {summary.total_positions}",
        "",
        "=== FEN POSITION ANALYSIS DATA ===",
        "",
    ]
    for game_number, result in enumerate(replayed, start=1):
        sections.append(format_game(game_number, result))
        sections.append("")
    return "\n".join(sections)
