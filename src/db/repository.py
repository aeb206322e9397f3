"""Protocol repository (implemented with SQLAlchemy, tests use a dictionary)"""

from typing import Protocol

from src.core.models import GameFenResult, GameId


class ExtractionRepository(Protocol):
    """Persistence layer orchestration"""

    def get_result(self, game_id: GameId) -> GameFenResult | None:
        """Get a game's replay result, if record exists."""
        ...

    def save_result(self, game_id: GameId, result: GameFenResult) -> GameFenResult:
        """Store the result, replacing an earlier one for the same game."""
        ...

    def delete_result(self, game_id: GameId) -> GameFenResult | None:
        """Remove a game's record."""
        ...
