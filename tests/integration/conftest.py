"""Pytest configuration and fixtures for integration tests against SQLite."""

import pytest

from src.core import db_client
from src.core.config import settings
from tests.unit.mocks import RecordingSink


@pytest.fixture
async def sqlite_db(monkeypatch, tmp_path):
    """A fresh SQLite database file with the schema applied.

    The connection is closed on teardown so each test gets its own file.
    """
    db_path = str(tmp_path / "dididothat.db")
    monkeypatch.setattr(settings, "sqlite_db_path", db_path)

    await db_client.init_db()
    yield db_path
    await db_client.close_connection()


@pytest.fixture
def recording_sink(monkeypatch) -> RecordingSink:
    """Routes reminders into a RecordingSink instead of the scheduler."""
    sink = RecordingSink()
    monkeypatch.setattr("src.interface.notification_sink._active_sink", sink)
    return sink
