"""
Runtime configuration.

Values are read from the process environment (prefix PGN_EXTRACTOR_) so the same code runs in tests, locally and deployed.
"""

import logging
import os
from dataclasses import dataclass
from typing import Self

ENV_PREFIX = "PGN_EXTRACTOR_"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _env_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./positions.db"
    max_workers: int = 1
    lenient_tier: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Self:
        """Settings with every value overridable by an environment variable, ex. PGN_EXTRACTOR_MAX_WORKERS=4"""
        defaults = cls()
        env = os.environ
        return cls(
            database_url=env.get(f"{ENV_PREFIX}DATABASE_URL", defaults.database_url),
            max_workers=int(env.get(f"{ENV_PREFIX}MAX_WORKERS", defaults.max_workers)),
            lenient_tier=_env_bool(
                env.get(f"{ENV_PREFIX}LENIENT_TIER", str(defaults.lenient_tier))
            ),
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Root handler for running the extractor as an application (library code only ever calls getLogger)."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
