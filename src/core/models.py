"""
Boundary layer data model(s).

These objects are handed between the tokenizer/sequencer (domain), the services, the API models and the repository.
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Iterator, Mapping, Optional, Self

from src.core.shared_types import MatchMode, Side, Tier

UNKNOWN = "Unknown"
GameId = str


@dataclass(frozen=True)
class RawGame:
    """Notation text as fetched from a hosting platform + optional header overrides (ex. {"FEN": ...}) supplied by the caller."""

    pgn: str
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MoveToken:
    """A single ply's notation. Ply 1 is the first move played from the initial position."""

    text: str
    ply: int
    side: Side


@dataclass(frozen=True)
class PositionRecord:
    """
    The position after a single ply.
    ----

    Ply 0 is the initial position: it has no move, so every move related field is None.
    Pieces use the (lower case) FEN letters: "p", "n", "b", "r", "q", "k".
    """

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

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        values = dict(data)
        values["side"] = Side(values["side"])
        if values.get("match_mode") is not None:
            values["match_mode"] = MatchMode(values["match_mode"])
        return cls(**values)


@dataclass(frozen=True)
class GameInfo:
    """Game metadata taken from the PGN headers (defaults used by the report when a header is missing)"""

    white: str = UNKNOWN
    black: str = UNKNOWN
    result: str = "*"
    date: str = UNKNOWN
    event: str = UNKNOWN
    site: str = UNKNOWN
    time_control: str = UNKNOWN
    opening: str = UNKNOWN

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> Self:
        # lichess exports UTCDate next to Date, where Date can be "????.??.??"
        date = headers.get("UTCDate") or headers.get("Date") or UNKNOWN
        return cls(
            white=headers.get("White") or UNKNOWN,
            black=headers.get("Black") or UNKNOWN,
            result=headers.get("Result") or "*",
            date=date,
            event=headers.get("Event") or UNKNOWN,
            site=headers.get("Site") or UNKNOWN,
            time_control=headers.get("TimeControl") or UNKNOWN,
            opening=headers.get("Opening") or headers.get("ECO") or UNKNOWN,
        )

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class GameFenResult:
    """
    Replay of a single game.
    ----

    * positions always start with ply 0 and are gapless.
    * complete is True when every token was applied.
    * stopped_at / error describe the token the replay stopped at (only set when incomplete).
    """

    positions: list[PositionRecord]
    total_tokens: int
    complete: bool
    tier_used: Tier = Tier.STRICT
    game_info: GameInfo = field(default_factory=GameInfo)
    stopped_at: Optional[str] = None
    error: Optional[str] = None

    @property
    def applied_moves(self) -> int:
        return len(self.positions) - 1

    @property
    def initial_fen(self) -> str:
        return self.positions[0].fen

    @property
    def final_fen(self) -> str:
        return self.positions[-1].fen

    @property
    def is_failed(self) -> bool:
        return self.tier_used == Tier.FAILED

    @property
    def is_partial(self) -> bool:
        return not self.complete and not self.is_failed

    @property
    def match_mode(self) -> MatchMode:
        """Lenient matching is only ever used by the lenient tier."""
        return MatchMode.LENIENT if self.tier_used == Tier.LENIENT else MatchMode.STRICT


@dataclass(frozen=True)
class BatchSummary:
    games_processed: int
    total_positions: int
    average_positions: float
    tiers: dict[Tier, int]


@dataclass
class BatchResult:
    """Results keyed by the caller's game identifier, in the order the games were handed in."""

    results: dict[GameId, GameFenResult] = field(default_factory=dict)

    def __getitem__(self, game_id: GameId) -> GameFenResult:
        return self.results[game_id]

    def __iter__(self) -> Iterator[GameId]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def add(self, game_id: GameId, result: GameFenResult) -> None:
        self.results[game_id] = result

    def completed(self) -> list[GameId]:
        return [game_id for game_id, result in self.results.items() if result.complete]

    def partial(self) -> list[GameId]:
        return [game_id for game_id, result in self.results.items() if result.is_partial]

    def failed(self) -> list[GameId]:
        return [game_id for game_id, result in self.results.items() if result.is_failed]

    def summary(self) -> BatchSummary:
        total_positions = sum(len(result.positions) for result in self.results.values())
        games = len(self.results)
        tiers = {tier: 0 for tier in Tier}
        for result in self.results.values():
            tiers[result.tier_used] += 1
        return BatchSummary(
            games_processed=games,
            total_positions=total_positions,
            average_positions=round(total_positions / games, 1) if games else 0.0,
            tiers=tiers,
        )
