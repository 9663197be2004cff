"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime

import pytest

from src.core.scheduler_tracker import job_tracker


@pytest.fixture
def now() -> datetime:
    """A fixed "current time" so status calculations are deterministic."""
    return datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def reset_job_tracker():
    """Clear global job history between tests."""
    job_tracker.reset()
    yield
    job_tracker.reset()
