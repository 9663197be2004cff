"""Pydantic models for service layer return types.

These models provide type safety at service boundaries, converting database
dictionaries into typed objects with validation.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.task import Task, TaskStatus


class TaskOverview(BaseModel):
    """A task together with everything computed from its completion history."""

    task: Task
    category_name: str | None = None
    category_icon: str | None = None
    last_completed_at: datetime | None = None
    due_date: datetime | None = None
    status: TaskStatus
    due_description: str


class DashboardSummary(BaseModel):
    """Counts of tasks per status plus the lists the dashboard shows."""

    total_tasks: int
    overdue_count: int
    due_soon_count: int
    up_to_date_count: int
    overdue: list[TaskOverview] = Field(default_factory=list)
    due_soon: list[TaskOverview] = Field(default_factory=list)
    recently_completed: list[TaskOverview] = Field(default_factory=list)


class NotificationRequest(BaseModel):
    """A one-shot reminder handed to the notification sink."""

    task_id: str
    notification_id: int
    title: str
    body: str
    notify_at: datetime
    channel_id: str


class NotificationResult(BaseModel):
    """Result of delivering a reminder."""

    task_id: str
    success: bool
    message_id: str | None = None
    error: str | None = None


class RecalculationSummary(BaseModel):
    """Outcome of a bulk reminder recalculation."""

    tasks_processed: int = 0
    scheduled: int = 0
    skipped: int = 0
    failed: int = 0
    failed_task_ids: list[str] = Field(default_factory=list)
    notifications_enabled: bool = True


class ImportResult(BaseModel):
    """Result of an import operation."""

    success: bool
    message: str
    categories_imported: int = 0
    tasks_imported: int = 0
    logs_imported: int = 0
    invalid_skipped: int = 0
