"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBExtraction(Base):
    """Replay result of a single game, keyed by the identifier the caller used for it."""

    __tablename__ = "extractions"
    game_id: Mapped[str] = mapped_column(primary_key=True)
    tier_used: Mapped[str]
    complete: Mapped[bool]
    total_tokens: Mapped[int]
    positions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    game_info: Mapped[dict[str, str]] = mapped_column(JSON, default=dict)
    stopped_at: Mapped[Optional[str]]
    error: Mapped[Optional[str]]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
