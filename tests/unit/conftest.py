"""Pytest configuration and fixtures for unit tests."""

import pytest

from tests.unit.mocks import InMemoryDBClient, RecordingSink


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def recording_sink(monkeypatch) -> RecordingSink:
    """Routes reminders into a RecordingSink instead of the scheduler."""
    sink = RecordingSink()
    monkeypatch.setattr("src.interface.notification_sink._active_sink", sink)
    return sink


@pytest.fixture
def patched_db(monkeypatch, in_memory_db, recording_sink):
    """Patches src.core.db_client functions to use InMemoryDBClient.

    Reminders go to the recording sink so no scheduler jobs are created.
    """
    monkeypatch.setattr("src.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("src.core.db_client.get_record", in_memory_db.get_record)
    monkeypatch.setattr("src.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("src.core.db_client.delete_record", in_memory_db.delete_record)
    monkeypatch.setattr("src.core.db_client.list_records", in_memory_db.list_records)
    monkeypatch.setattr("src.core.db_client.get_first_record", in_memory_db.get_first_record)

    return in_memory_db
