"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.chess.fen import is_playable_fen
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import MatchMode, Side, Tier

GameId = str


# --- REQUEST MODELS ---
class RawGameRequest(BaseModel):
    """A single game as handed over by the game-fetch collaborator"""

    pgn: str = ""
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("headers")
    @classmethod
    def validate_starting_fen(cls, value: dict[str, str]) -> dict[str, str]:
        fen = value.get("FEN")
        if fen is None:
            return value

        if len(fen.split()) != 6:
            raise InvalidRequestError(
                "FEN string must contain 6 space-separated parts."
            )
        if not is_playable_fen(fen):
            raise InvalidRequestError(f"Cannot replay a game from FEN: {fen!r}")
        return value


class ExtractPositionsRequest(BaseModel):
    """Games keyed by the caller's identifier. The response keeps the same order."""

    games: dict[GameId, RawGameRequest]


# --- RESPONSE MODELS ---
class PositionResponse(BaseModel):
    ply: int
    move_number: int
    side: Side
    fen: str
    token: Optional[str] = None
    san: Optional[str] = None
    from_square: Optional[str] = None
    to_square: Optional[str] = None
    piece: Optional[str] = None
    captured: Optional[str] = None
    promotion: Optional[str] = None
    is_check: bool = False
    is_checkmate: bool = False
    match_mode: Optional[MatchMode] = None


class GameInfoResponse(BaseModel):
    white: str
    black: str
    result: str
    date: str
    event: str
    site: str
    time_control: str
    opening: str


class GameResultResponse(BaseModel):
    positions: list[PositionResponse]
    total_tokens: int
    complete: bool
    tier_used: Tier
    game_info: GameInfoResponse
    stopped_at: Optional[str] = None
    error: Optional[str] = None


class BatchSummaryResponse(BaseModel):
    games_processed: int
    total_positions: int
    average_positions: float
    tiers: dict[Tier, int]


class BatchResponse(BaseModel):
    results: dict[GameId, GameResultResponse]
    summary: BatchSummaryResponse
