"""Task service for CRUD, completion and dashboard queries."""

import logging
from datetime import UTC, datetime

from src.core import db_client, status_calculator
from src.core.config import constants
from src.core.logging import log_with_task_context, span
from src.domain.category import Category
from src.domain.log import TaskLog
from src.domain.task import FrequencyUnit, Task, TaskStatus
from src.domain.timestamps import as_utc, utc_now
from src.models.service_models import DashboardSummary, TaskOverview
from src.services import category_service, notification_service, task_log_service


logger = logging.getLogger(__name__)

COLLECTION = "tasks"


def _to_task(record: dict) -> Task:
    return Task.model_validate(record)


def _now(now: datetime | None) -> datetime:
    return as_utc(now) if now else utc_now()


async def get_all_tasks() -> list[Task]:
    """All tasks, ordered by category name and then task name."""
    with span("task_service.get_all_tasks"):
        categories = {c.id: c.name for c in await category_service.get_all_categories()}
        records = await db_client.list_all_records(collection=COLLECTION, sort="name")
        tasks = [_to_task(r) for r in records]
        return sorted(tasks, key=lambda t: (categories.get(t.category_id, ""), t.name))


async def get_tasks_by_category(category_id: str) -> list[Task]:
    records = await db_client.list_all_records(
        collection=COLLECTION,
        filter_query=f'category_id = "{db_client.sanitize_param(category_id)}"',
        sort="name",
    )
    return [_to_task(r) for r in records]


async def get_task(task_id: str) -> Task | None:
    try:
        record = await db_client.get_record(collection=COLLECTION, record_id=task_id)
    except KeyError:
        return None
    return _to_task(record)


async def _require_task(task_id: str) -> Task:
    task = await get_task(task_id)
    if task is None:
        msg = f"Task not found: {task_id}"
        raise KeyError(msg)
    return task


async def create_task(
    *,
    category_id: str,
    name: str,
    description: str | None = None,
    frequency_value: int = 1,
    frequency_unit: FrequencyUnit = FrequencyUnit.MONTHS,
    is_reminder_enabled: bool = True,
) -> Task:
    """Create a recurring task in an existing category.

    A new task has never been completed, so it starts out overdue and no
    reminder is scheduled until its first completion.

    Raises:
        KeyError: If the category does not exist
        pydantic.ValidationError: If a field is out of bounds
    """
    with span("task_service.create_task"):
        if not await category_service.category_exists(category_id):
            msg = f"Category not found: {category_id}"
            raise KeyError(msg)

        task_data = {
            "category_id": category_id,
            "name": name.strip(),
            "description": description.strip() if description else None,
            "frequency_value": frequency_value,
            "frequency_unit": FrequencyUnit(frequency_unit).value,
            "is_reminder_enabled": is_reminder_enabled,
            "created": utc_now().isoformat(),
        }
        Task.model_validate({"id": "pending", **task_data})

        record = await db_client.create_record(collection=COLLECTION, data=task_data)
        task = _to_task(record)
        log_with_task_context(logger, "info", "Created task", task_id=task.id, task_name=task.name)
        return task


async def update_task(
    *,
    task_id: str,
    category_id: str | None = None,
    name: str | None = None,
    description: str | None = None,
    frequency_value: int | None = None,
    frequency_unit: FrequencyUnit | None = None,
    is_reminder_enabled: bool | None = None,
    now: datetime | None = None,
) -> Task | None:
    """Change a task's fields and bring its reminder in line.

    Arguments left as None are unchanged. A blank description clears it.

    Returns:
        The updated task, or None if it does not exist
    """
    with span("task_service.update_task"):
        existing = await get_task(task_id)
        if existing is None:
            return None

        changes = {
            key: value
            for key, value in {
                "category_id": category_id,
                "name": name.strip() if name is not None else None,
                "frequency_value": frequency_value,
                "frequency_unit": frequency_unit,
                "is_reminder_enabled": is_reminder_enabled,
            }.items()
            if value is not None
        }
        if description is not None:
            changes["description"] = description.strip() or None
        if category_id is not None and not await category_service.category_exists(category_id):
            msg = f"Category not found: {category_id}"
            raise KeyError(msg)

        updated = Task.model_validate({**existing.model_dump(), **changes})
        if changes:
            record = await db_client.update_record(
                collection=COLLECTION,
                record_id=task_id,
                data={
                    "category_id": updated.category_id,
                    "name": updated.name,
                    "description": updated.description,
                    "frequency_value": updated.frequency_value,
                    "frequency_unit": updated.frequency_unit.value,
                    "is_reminder_enabled": updated.is_reminder_enabled,
                },
            )
            updated = _to_task(record)

        if updated.is_reminder_enabled:
            await notification_service.schedule_task_notification(
                task=updated,
                due_date=await get_due_date(task_id),
                now=_now(now),
            )
        else:
            await notification_service.cancel_task_notification(task_id)

        log_with_task_context(logger, "info", "Updated task", task_id=task_id, fields=sorted(changes))
        return updated


async def delete_task(task_id: str) -> bool:
    """Delete a task, its completion history and its pending reminder.

    Returns:
        False if the task did not exist
    """
    with span("task_service.delete_task"):
        if await get_task(task_id) is None:
            return False

        await notification_service.cancel_task_notification(task_id)
        removed_logs = await task_log_service.delete_logs_for_task(task_id)
        await db_client.delete_record(collection=COLLECTION, record_id=task_id)
        log_with_task_context(logger, "info", "Deleted task", task_id=task_id, removed_logs=removed_logs)
        return True


async def complete_task(
    task_id: str,
    completed_at: datetime | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> TaskLog:
    """Record a completion and schedule the next reminder.

    Args:
        task_id: Task that was done
        completed_at: When it was done (defaults to now)
        notes: Optional free text
        now: Current time used for reminder scheduling

    Returns:
        The created completion log

    Raises:
        KeyError: If the task does not exist
    """
    with span("task_service.complete_task"):
        task = await _require_task(task_id)
        current = _now(now)
        log = await task_log_service.create_log(
            task_id=task_id,
            completed_at=completed_at or current,
            notes=notes,
        )

        # A backdated completion may not be the latest one
        due_date = await get_due_date(task_id)
        await notification_service.schedule_task_notification(task=task, due_date=due_date, now=current)

        log_with_task_context(logger, "info", "Task completed", task_id=task_id, has_notes=bool(notes))
        return log


async def get_last_completed_date(task_id: str) -> datetime | None:
    log = await task_log_service.get_most_recent_log(task_id)
    return log.completed_at if log else None


async def get_due_date(task_id: str) -> datetime | None:
    """Due date from the latest completion, or None if the task is unknown or never completed."""
    task = await get_task(task_id)
    if task is None:
        return None
    return status_calculator.calculate_due_date(
        rule=task.rule,
        last_completed_at=await get_last_completed_date(task_id),
    )


async def get_task_status(task_id: str, now: datetime | None = None) -> TaskStatus:
    """Status of a single task; an unknown task reports as overdue."""
    task = await get_task(task_id)
    if task is None:
        return TaskStatus.OVERDUE
    return status_calculator.calculate_status(
        rule=task.rule,
        last_completed_at=await get_last_completed_date(task_id),
        now=_now(now),
    )


async def _build_overview(task: Task, category: Category | None, now: datetime) -> TaskOverview:
    last_completed_at = await get_last_completed_date(task.id)
    due_date = status_calculator.calculate_due_date(rule=task.rule, last_completed_at=last_completed_at)
    return TaskOverview(
        task=task,
        category_name=category.name if category else None,
        category_icon=category.icon if category else None,
        last_completed_at=last_completed_at,
        due_date=due_date,
        status=status_calculator.calculate_status(rule=task.rule, last_completed_at=last_completed_at, now=now),
        due_description=status_calculator.get_due_description(due_date=due_date, now=now),
    )


async def get_task_overview(task_id: str, now: datetime | None = None) -> TaskOverview | None:
    """A single task with its computed due date and status, or None if it does not exist."""
    with span("task_service.get_task_overview"):
        task = await get_task(task_id)
        if task is None:
            return None
        category = await category_service.get_category(task.category_id)
        return await _build_overview(task, category, _now(now))


async def get_task_overviews(now: datetime | None = None) -> list[TaskOverview]:
    """Every task together with its computed due date and status."""
    with span("task_service.get_task_overviews"):
        current = _now(now)
        categories = {c.id: c for c in await category_service.get_all_categories()}
        return [
            await _build_overview(task, categories.get(task.category_id), current) for task in await get_all_tasks()
        ]


def _by_due_date(overview: TaskOverview) -> tuple[bool, datetime]:
    # Never-completed tasks sort first
    if overview.due_date is None:
        return (False, datetime.min.replace(tzinfo=UTC))
    return (True, overview.due_date)


async def get_overdue_tasks(now: datetime | None = None) -> list[TaskOverview]:
    """Overdue tasks, never-completed first, then by how long ago they fell due."""
    overviews = await get_task_overviews(now)
    return sorted((o for o in overviews if o.status == TaskStatus.OVERDUE), key=_by_due_date)


async def get_due_soon_tasks(now: datetime | None = None) -> list[TaskOverview]:
    """Tasks in their due-soon window, soonest first."""
    overviews = await get_task_overviews(now)
    return sorted((o for o in overviews if o.status == TaskStatus.DUE_SOON), key=_by_due_date)


async def get_recently_completed_tasks(
    count: int = constants.RECENTLY_COMPLETED_COUNT,
    now: datetime | None = None,
) -> list[TaskOverview]:
    """The ``count`` most recently completed distinct tasks, latest first."""
    with span("task_service.get_recently_completed_tasks"):
        overviews = await get_task_overviews(now)
        completed = [o for o in overviews if o.last_completed_at is not None]
        completed.sort(key=lambda o: o.last_completed_at, reverse=True)
        return completed[:count]


async def get_dashboard_summary(now: datetime | None = None) -> DashboardSummary:
    """Per-status counts plus the overdue, due-soon and recent lists."""
    with span("task_service.get_dashboard_summary"):
        overviews = await get_task_overviews(now)

        overdue = sorted((o for o in overviews if o.status == TaskStatus.OVERDUE), key=_by_due_date)
        due_soon = sorted((o for o in overviews if o.status == TaskStatus.DUE_SOON), key=_by_due_date)
        recent = sorted(
            (o for o in overviews if o.last_completed_at is not None),
            key=lambda o: o.last_completed_at,
            reverse=True,
        )

        return DashboardSummary(
            total_tasks=len(overviews),
            overdue_count=len(overdue),
            due_soon_count=len(due_soon),
            up_to_date_count=sum(1 for o in overviews if o.status == TaskStatus.UP_TO_DATE),
            overdue=overdue,
            due_soon=due_soon,
            recently_completed=recent[: constants.RECENTLY_COMPLETED_COUNT],
        )
