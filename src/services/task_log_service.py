"""Completion log service."""

import logging
from datetime import datetime

from src.core import db_client
from src.core.logging import span
from src.domain.log import TaskLog
from src.domain.timestamps import as_utc


logger = logging.getLogger(__name__)

COLLECTION = "task_logs"


def _to_log(record: dict) -> TaskLog:
    return TaskLog.model_validate(record)


def _newest_first(logs: list[TaskLog]) -> list[TaskLog]:
    return sorted(logs, key=lambda log: log.completed_at, reverse=True)


async def get_logs_for_task(task_id: str) -> list[TaskLog]:
    """All completions of a task, newest first."""
    with span("task_log_service.get_logs_for_task"):
        records = await db_client.list_all_records(
            collection=COLLECTION,
            filter_query=f'task_id = "{db_client.sanitize_param(task_id)}"',
        )
        return _newest_first([_to_log(r) for r in records])


async def get_all_logs() -> list[TaskLog]:
    """Every completion record, newest first."""
    records = await db_client.list_all_records(collection=COLLECTION)
    return _newest_first([_to_log(r) for r in records])


async def get_most_recent_log(task_id: str) -> TaskLog | None:
    """The completion with the latest ``completed_at``, or None if never completed."""
    logs = await get_logs_for_task(task_id)
    return logs[0] if logs else None


async def create_log(*, task_id: str, completed_at: datetime, notes: str | None = None) -> TaskLog:
    """Record that a task was completed."""
    with span("task_log_service.create_log"):
        log_data = {
            "task_id": task_id,
            "completed_at": as_utc(completed_at).isoformat(),
            "notes": notes,
        }
        # Validate before writing so bad notes never reach the database
        TaskLog.model_validate({"id": "pending", **log_data})

        record = await db_client.create_record(collection=COLLECTION, data=log_data)
        logger.info("Created completion log for task %s", task_id)
        return _to_log(record)


async def delete_log(log_id: str) -> bool:
    """Delete one completion record. Returns False if it did not exist."""
    with span("task_log_service.delete_log"):
        try:
            await db_client.delete_record(collection=COLLECTION, record_id=log_id)
        except KeyError:
            return False
        logger.info("Deleted completion log %s", log_id)
        return True


async def delete_logs_for_task(task_id: str) -> int:
    """Delete every completion record of a task and return how many were removed."""
    logs = await get_logs_for_task(task_id)
    for log in logs:
        await db_client.delete_record(collection=COLLECTION, record_id=log.id)
    return len(logs)


async def get_logs_in_range(*, start: datetime, end: datetime) -> list[TaskLog]:
    """Completions with ``start <= completed_at <= end``, newest first."""
    with span("task_log_service.get_logs_in_range"):
        start_utc = as_utc(start)
        end_utc = as_utc(end)
        logs = await get_all_logs()
        return [log for log in logs if start_utc <= log.completed_at <= end_utc]
