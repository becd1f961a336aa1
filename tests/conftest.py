"""
Pytest configuration and fixtures for the JSON store tests.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import structlog

from jsonstore.core.config import Settings
from jsonstore.core.database import Database
from jsonstore.services.store import JsonStore


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_structlog():
    """Keep structlog on its defaults so capture_logs sees every event."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture
def isolated_logging(monkeypatch):
    """Allow configure_logging to run without leaking into other tests.

    Module loggers are kept uncached so later capture_logs calls still see
    them, and the root logger is restored afterwards.
    """
    real_configure = structlog.configure

    def configure_uncached(**kwargs):
        kwargs["cache_logger_on_first_use"] = False
        real_configure(**kwargs)

    monkeypatch.setattr(structlog, "configure", configure_uncached)

    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'store.db'}",
        sweeper_interval=60,
        sweeper_run_on_init=True,
    )


@pytest.fixture
async def database(settings: Settings) -> Database:
    """Create an initialized database for testing."""
    db = Database(settings)
    await db.startup()
    yield db
    await db.shutdown()


@pytest.fixture
def store(database: Database, settings: Settings, clock: FakeClock) -> JsonStore:
    return JsonStore(database, settings, clock=clock)
