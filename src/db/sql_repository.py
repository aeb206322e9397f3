"""Implementation of (Extraction)Repository using SQLAlchemy"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.models import GameFenResult, GameId, GameInfo, PositionRecord
from src.core.shared_types import Tier
from src.db.schema import DBExtraction

logger = logging.getLogger(__name__)


class SQLExtractionRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_result(self, game_id: GameId) -> GameFenResult | None:
        """Get a game's replay result, if record exists."""
        record = self._fetch(game_id)
        if record:
            return self._to_model(record)
        return None

    def save_result(self, game_id: GameId, result: GameFenResult) -> GameFenResult:
        """Store the result, replacing an earlier one for the same game."""
        record = self._fetch(game_id)
        if record is None:
            record = DBExtraction(game_id=game_id)
            self.db.add(record)

        record.tier_used = result.tier_used.value
        record.complete = result.complete
        record.total_tokens = result.total_tokens
        record.positions = [position.to_dict() for position in result.positions]
        record.game_info = result.game_info.to_dict()
        record.stopped_at = result.stopped_at
        record.error = result.error
        self.db.commit()
        self.db.refresh(record)
        logger.debug("Stored %d positions for game %s", len(result.positions), game_id)
        return self._to_model(record)

    def delete_result(self, game_id: GameId) -> GameFenResult | None:
        """Remove a game's record."""
        record = self._fetch(game_id)
        if not record:
            return None
        result = self._to_model(record)
        self.db.delete(record)
        self.db.commit()
        return result

    def _fetch(self, game_id: GameId) -> DBExtraction | None:
        query = select(DBExtraction).where(DBExtraction.game_id == game_id)
        return self.db.scalar(query)

    def _to_model(self, record: DBExtraction) -> GameFenResult:
        """Convert SQLAlchemy model to data transfer model."""
        return GameFenResult(
            positions=[PositionRecord.from_dict(data) for data in record.positions],
            total_tokens=record.total_tokens,
            complete=record.complete,
            tier_used=Tier(record.tier_used),
            game_info=GameInfo(**record.game_info),
            stopped_at=record.stopped_at,
            error=record.error,
        )
