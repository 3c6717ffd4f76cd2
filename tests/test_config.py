"""Tests for settings loading."""

from link_shortener.core.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.database_url.startswith("postgresql+asyncpg://")
    assert settings.database_pool_size == 5


def test_environment_override(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///links.db")
    monkeypatch.setenv("DEBUG", "true")

    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite+aiosqlite:///links.db"
    assert settings.debug
