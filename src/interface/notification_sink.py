"""Where scheduled reminders go.

The notification service computes *when* a reminder should fire; a sink
arranges for it to actually fire. The default sink keeps one APScheduler
date job per task and delivers through the webhook sender.
"""

import logging
from typing import Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger

from src.core.config import constants
from src.core.scheduler import scheduler
from src.interface import notification_sender
from src.models.service_models import NotificationRequest


logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Receives one-shot reminders and cancellations."""

    async def schedule(self, request: NotificationRequest) -> None:
        """Arrange delivery of ``request`` at ``request.notify_at``, replacing any pending one for the task."""
        ...

    async def cancel(self, task_id: str) -> None:
        """Drop the pending reminder for a task, if any."""
        ...

    async def cancel_all(self) -> None:
        """Drop every pending reminder."""
        ...


def reminder_job_id(task_id: str) -> str:
    return f"{constants.REMINDER_JOB_PREFIX}{task_id}"


async def deliver_reminder(request: NotificationRequest) -> None:
    """Job body run by the scheduler when a reminder comes due."""
    result = await notification_sender.send_reminder(request=request)
    if result.success:
        logger.info("Delivered reminder for task %s", request.task_id)
    else:
        logger.warning("Reminder for task %s not delivered: %s", request.task_id, result.error)


class SchedulerNotificationSink:
    """Notification sink backed by APScheduler date-triggered jobs."""

    def __init__(self, job_scheduler: BaseScheduler | None = None) -> None:
        self._scheduler = job_scheduler or scheduler

    async def schedule(self, request: NotificationRequest) -> None:
        self._scheduler.add_job(
            deliver_reminder,
            trigger=DateTrigger(run_date=request.notify_at),
            kwargs={"request": request},
            id=reminder_job_id(request.task_id),
            name=f"Reminder: {request.body}",
            replace_existing=True,
        )
        logger.info(
            "Scheduled reminder",
            extra={"task_id": request.task_id, "notify_at": request.notify_at.isoformat()},
        )

    async def cancel(self, task_id: str) -> None:
        try:
            self._scheduler.remove_job(reminder_job_id(task_id))
        except JobLookupError:
            return
        logger.info("Cancelled reminder", extra={"task_id": task_id})

    async def cancel_all(self) -> None:
        removed = 0
        for job in self._scheduler.get_jobs():
            if job.id.startswith(constants.REMINDER_JOB_PREFIX):
                self._scheduler.remove_job(job.id)
                removed += 1
        logger.info("Cancelled %d reminders", removed)


_active_sink: NotificationSink = SchedulerNotificationSink()


def get_notification_sink() -> NotificationSink:
    """Return the sink reminders are currently sent to."""
    return _active_sink


def set_notification_sink(sink: NotificationSink) -> None:
    """Replace the sink (e.g. with a platform-specific one)."""
    global _active_sink  # noqa: PLW0603
    _active_sink = sink
