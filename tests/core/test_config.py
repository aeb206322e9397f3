"""Unit tests for src/core/config.py"""

import pytest

from src.core.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DATABASE_URL", "MAX_WORKERS", "LENIENT_TIER", "LOG_LEVEL"):
        monkeypatch.delenv(f"PGN_EXTRACTOR_{name}", raising=False)
    assert Settings.from_env() == Settings()


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PGN_EXTRACTOR_DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("PGN_EXTRACTOR_MAX_WORKERS", "4")
    monkeypatch.setenv("PGN_EXTRACTOR_LENIENT_TIER", "no")
    monkeypatch.setenv("PGN_EXTRACTOR_LOG_LEVEL", "debug")
    settings = Settings.from_env()
    assert settings.database_url == "sqlite:///:memory:"
    assert settings.max_workers == 4
    assert settings.lenient_tier is False
    assert settings.log_level == "DEBUG"
