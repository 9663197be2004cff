"""Tests for health check endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from src.main import app


@pytest.fixture
def client() -> TestClient:
    """Create a test client for FastAPI app (lifespan not run)."""
    return TestClient(app)


def _job_status(**overrides) -> dict:
    return {
        "job_name": "refresh_notifications",
        "last_success": "2024-01-01T06:00:00+00:00",
        "last_failure": None,
        "last_error": None,
        "consecutive_failures": 0,
        "success_count": 10,
        "failure_count": 0,
        "currently_running": False,
        "current_run_started": None,
        **overrides,
    }


@pytest.mark.unit
def test_health_endpoint_returns_healthy(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.unit
def test_scheduler_health_with_no_history_is_healthy(client: TestClient) -> None:
    response = client.get("/health/scheduler")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["jobs"]["refresh_notifications"]["success_count"] == 0
    assert data["dead_letter_queue_size"] == 0


@pytest.mark.unit
def test_scheduler_health_degraded_with_failures(client: TestClient) -> None:
    with patch("src.main.job_tracker") as mock_tracker:
        mock_tracker.get_job_status = AsyncMock(
            return_value=_job_status(consecutive_failures=1, last_error="database is locked")
        )
        mock_tracker.get_dead_letter_queue = lambda: []

        response = client.get("/health/scheduler")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


@pytest.mark.unit
def test_scheduler_health_critical_with_dead_letters(client: TestClient) -> None:
    with patch("src.main.job_tracker") as mock_tracker:
        mock_tracker.get_job_status = AsyncMock(return_value=_job_status(consecutive_failures=3))
        mock_tracker.get_dead_letter_queue = lambda: [
            {"job_name": "refresh_notifications", "error": "boom", "context": "x", "timestamp": "t"}
        ]

        response = client.get("/health/scheduler")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "critical"
    assert data["dead_letter_queue_size"] == 1


@pytest.mark.unit
def test_scheduler_health_reports_pending_reminders(client: TestClient) -> None:
    with patch("src.main.pending_reminder_count", return_value=4):
        response = client.get("/health/scheduler")

    assert response.json()["pending_reminders"] == 4
