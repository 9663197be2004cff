"""Notification service for scheduling task reminders."""

import logging
import uuid
from datetime import datetime, timedelta

from src.core import message_templates, status_calculator
from src.core.config import constants
from src.core.logging import log_with_task_context, span
from src.domain.task import Task
from src.domain.timestamps import as_utc, utc_now
from src.interface.notification_sink import get_notification_sink
from src.models.service_models import NotificationRequest, RecalculationSummary


logger = logging.getLogger(__name__)


def get_notification_id(task_id: str) -> int:
    """Stable signed 32-bit id for a task's reminder.

    The first four bytes of the UUID in little-endian field order, read as a
    little-endian int32. That is the first eight hex digits of the id as a
    signed number, so rescheduling replaces the previous reminder on
    platforms keyed by int.
    """
    raw = uuid.UUID(task_id).bytes_le[:4]
    return int.from_bytes(raw, byteorder="little", signed=True)


def get_notification_lead_time(task: Task) -> timedelta:
    return status_calculator.get_notification_lead_time(task.rule)


def build_notification_request(*, task: Task, notify_at: datetime) -> NotificationRequest:
    return NotificationRequest(
        task_id=task.id,
        notification_id=get_notification_id(task.id),
        title=message_templates.reminder_title(),
        body=message_templates.reminder_body(task_name=task.name),
        notify_at=notify_at,
        channel_id=constants.NOTIFICATION_CHANNEL_ID,
    )


async def _notifications_enabled() -> bool:
    from src.services import settings_service

    app_settings = await settings_service.get_settings()
    return app_settings.notifications_enabled


async def cancel_task_notification(task_id: str) -> None:
    """Drop any pending reminder for a task."""
    await get_notification_sink().cancel(task_id)


async def cancel_all_notifications() -> None:
    """Drop every pending reminder."""
    with span("notification_service.cancel_all_notifications"):
        await get_notification_sink().cancel_all()
        logger.info("Cancelled all reminders")


async def _schedule(*, task: Task, due_date: datetime | None, now: datetime) -> NotificationRequest | None:
    """Replace the task's reminder with a fresh one, if one is due."""
    sink = get_notification_sink()
    await sink.cancel(task.id)

    notify_at = status_calculator.calculate_notification_time(
        rule=task.rule,
        due_date=due_date,
        reminder_enabled=task.is_reminder_enabled,
        now=now,
    )
    if notify_at is None:
        return None

    request = build_notification_request(task=task, notify_at=notify_at)
    await sink.schedule(request)
    return request


async def schedule_task_notification(
    *,
    task: Task,
    due_date: datetime | None,
    now: datetime | None = None,
) -> NotificationRequest | None:
    """Schedule (or reschedule) the reminder for one task.

    Does nothing when reminders are switched off globally or for the task.
    Otherwise any reminder already pending for the task is cancelled first,
    and none is scheduled when the reminder time has already passed.

    Returns:
        The scheduled request, or None if no reminder was scheduled
    """
    with span("notification_service.schedule_task_notification"):
        if not await _notifications_enabled():
            log_with_task_context(logger, "debug", "Notifications disabled, skipping", task_id=task.id)
            return None

        if not task.is_reminder_enabled:
            log_with_task_context(logger, "debug", "Reminder disabled for task, skipping", task_id=task.id)
            return None

        request = await _schedule(task=task, due_date=due_date, now=as_utc(now) if now else utc_now())
        if request is not None:
            log_with_task_context(
                logger, "info", "Scheduled task reminder", task_id=task.id, notify_at=request.notify_at.isoformat()
            )
        return request


async def recalculate_all_notifications(now: datetime | None = None) -> RecalculationSummary:
    """Cancel every reminder and reschedule from current task data.

    A failure on one task is logged and counted, and the remaining tasks
    are still processed.
    """
    from src.services import task_service

    with span("notification_service.recalculate_all_notifications"):
        now = as_utc(now) if now else utc_now()
        await cancel_all_notifications()

        if not await _notifications_enabled():
            logger.info("Notifications disabled, nothing to reschedule")
            return RecalculationSummary(notifications_enabled=False)

        summary = RecalculationSummary()
        tasks = await task_service.get_all_tasks()

        for task in tasks:
            summary.tasks_processed += 1
            try:
                due_date = await task_service.get_due_date(task.id)
                if await _schedule(task=task, due_date=due_date, now=now) is not None:
                    summary.scheduled += 1
                else:
                    summary.skipped += 1
            except Exception as e:
                summary.failed += 1
                summary.failed_task_ids.append(task.id)
                log_with_task_context(
                    logger,
                    "error",
                    "Failed to schedule reminder",
                    task_id=task.id,
                    error=str(e),
                )

        logger.info(
            "Recalculated reminders",
            extra={
                "tasks_processed": summary.tasks_processed,
                "scheduled": summary.scheduled,
                "skipped": summary.skipped,
                "failed": summary.failed,
            },
        )
        return summary
