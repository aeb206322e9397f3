"""Orchestration of communication from API models to the replay logic and persistence layers (and the reverse direction)."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping, Optional, Self

from src.api.models import (
    BatchResponse,
    BatchSummaryResponse,
    ExtractPositionsRequest,
    GameInfoResponse,
    GameResultResponse,
    PositionResponse,
)
from src.chess.game import Game
from src.chess.sequencer import initial_record
from src.chess.tokenizer import read_headers, resolve_initial_fen
from src.core.config import Settings
from src.core.exceptions import GameError, RepositoryError
from src.core.models import BatchResult, GameFenResult, GameId, GameInfo, PositionRecord, RawGame
from src.core.shared_types import Tier
from src.db.repository import ExtractionRepository
from src.services.analysis_prep import format_batch
from src.services.recovery import RecoveryController

logger = logging.getLogger(__name__)


class PositionExtractionService:
    """
    Batch Coordinator
    ----

    Runs the Recovery Controller once per game. Games share no state, so they can be replayed on a thread pool;
    a game that fails every tier is reported as failed and never stops the rest of the batch.
    """

    def __init__(
        self,
        repository: Optional[ExtractionRepository] = None,
        controller: Optional[RecoveryController] = None,
        max_workers: int = 1,
    ) -> None:
        self.repo = repository
        self.controller = controller or RecoveryController()
        self.max_workers = max(1, max_workers)

    @classmethod
    def from_settings(
        cls, settings: Settings, repository: Optional[ExtractionRepository] = None
    ) -> Self:
        return cls(
            repository=repository,
            controller=RecoveryController(lenient_tier=settings.lenient_tier),
            max_workers=settings.max_workers,
        )

    # -- API logic ---
    def extract_batch(self, request: ExtractPositionsRequest) -> BatchResponse:
        """Replay all games in the request."""
        batch = self.extract_games(self._raw_games(request))
        return self._create_batch_response(batch)

    def report_input(
        self, request: ExtractPositionsRequest, player: str, platform: str
    ) -> str:
        """Replay all games in the request and list their positions for the report generator."""
        batch = self.extract_games(self._raw_games(request))
        return format_batch(batch, player, platform)

    def get_game_result(self, game_id: GameId) -> GameResultResponse:
        """Retrieve a stored replay result."""
        return self._create_game_response(self._fetch_result(game_id))

    def delete_game_result(self, game_id: GameId) -> None:
        if self._require_repository().delete_result(game_id) is None:
            raise RepositoryError(f"Result for game {game_id!r} not found.")

    # -- Domain level entry point --
    def extract_games(self, games: Mapping[GameId, RawGame]) -> BatchResult:
        """Every input game appears exactly once in the result, in input order."""
        logger.info("Extracting positions for %d games", len(games))
        game_ids = list(games)
        raw_games = [games[game_id] for game_id in game_ids]

        if self.max_workers > 1 and len(games) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                results = list(pool.map(self._extract_game, game_ids, raw_games))
        else:
            results = [
                self._extract_game(game_id, raw_game)
                for game_id, raw_game in zip(game_ids, raw_games)
            ]

        batch = BatchResult()
        for game_id, result in zip(game_ids, results):
            batch.add(game_id, result)

        # Sessions are not shared between threads: results are stored once the replays are done.
        if self.repo is not None:
            for game_id, result in batch.results.items():
                self.repo.save_result(game_id, result)

        summary = batch.summary()
        logger.info(
            "Processed %d games: %d positions (%.1f per game), %d partial, %d failed",
            summary.games_processed,
            summary.total_positions,
            summary.average_positions,
            len(batch.partial()),
            len(batch.failed()),
        )
        return batch

    # -- Internal helpers --
    def _raw_games(self, request: ExtractPositionsRequest) -> dict[GameId, RawGame]:
        return {
            game_id: RawGame(pgn=game.pgn, headers=game.headers)
            for game_id, game in request.games.items()
        }

    def _extract_game(self, game_id: GameId, raw_game: RawGame) -> GameFenResult:
        """A single game. Recovery describes every replay problem in the result, anything else left is turned into a failed entry."""
        try:
            return self.controller.run(raw_game)
        except GameError as exc:
            logger.exception("Could not replay game %s", game_id)
            return GameFenResult(
                positions=[self._initial_position(raw_game)],
                total_tokens=0,
                complete=False,
                tier_used=Tier.FAILED,
                game_info=GameInfo.from_headers(raw_game.headers),
                error=str(exc),
            )

    def _initial_position(self, raw_game: RawGame) -> PositionRecord:
        """Ply 0 of the game itself: its own starting position when the headers give a usable one"""
        initial_fen = resolve_initial_fen(read_headers(raw_game.pgn), raw_game.headers)
        try:
            return initial_record(Game.from_fen(initial_fen))
        except GameError:
            return initial_record(Game.from_fen())

    def _require_repository(self) -> ExtractionRepository:
        if self.repo is None:
            raise RepositoryError("No repository configured to store replay results.")
        return self.repo

    def _fetch_result(self, game_id: GameId) -> GameFenResult:
        """Attempt to find the result in the repository and raise error if it fails."""
        result = self._require_repository().get_result(game_id)
        if result is None:
            raise RepositoryError(f"Result for game {game_id!r} not found.")
        return result

    def _create_game_response(self, result: GameFenResult) -> GameResultResponse:
        return GameResultResponse(
            positions=[
                PositionResponse(**position.to_dict()) for position in result.positions
            ],
            total_tokens=result.total_tokens,
            complete=result.complete,
            tier_used=result.tier_used,
            game_info=GameInfoResponse(**result.game_info.to_dict()),
            stopped_at=result.stopped_at,
            error=result.error,
        )

    def _create_batch_response(self, batch: BatchResult) -> BatchResponse:
        summary = batch.summary()
        return BatchResponse(
            results={
                game_id: self._create_game_response(result)
                for game_id, result in batch.results.items()
            },
            summary=BatchSummaryResponse(
                games_processed=summary.games_processed,
                total_positions=summary.total_positions,
                average_positions=summary.average_positions,
                tiers=summary.tiers,
            ),
        )
