"""Scheduler for background jobs (daily reminder refresh) and per-task reminders."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from src.core.config import constants, settings
from src.core.scheduler_tracker import retry_job_with_backoff


logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = AsyncIOScheduler()

REFRESH_JOB_ID = "refresh_notifications"


async def refresh_notifications() -> None:
    """Recalculate every task reminder.

    Runs daily so reminders dropped while the process was down, or whose
    time passed unnoticed, are rebuilt from current task data.
    """
    from src.services import notification_service

    logger.info("Running reminder refresh job")
    summary = await notification_service.recalculate_all_notifications()
    if summary.failed:
        msg = f"Failed to schedule reminders for {summary.failed} task(s): {', '.join(summary.failed_task_ids)}"
        raise RuntimeError(msg)


async def _run_refresh_notifications() -> None:
    await retry_job_with_backoff(refresh_notifications, REFRESH_JOB_ID)


def start_scheduler() -> None:
    """Start the scheduler and register the daily refresh job.

    This should be called during FastAPI app startup.
    """
    logger.info("Starting scheduler")

    if settings.enable_daily_refresh:
        scheduler.add_job(
            _run_refresh_notifications,
            trigger=CronTrigger(hour=constants.DAILY_REFRESH_HOUR, minute=0),
            id=REFRESH_JOB_ID,
            name="Refresh Task Reminders",
            replace_existing=True,
        )
        logger.info("Scheduled reminder refresh job: daily at %d:00", constants.DAILY_REFRESH_HOUR)
    else:
        logger.info("Daily reminder refresh disabled")

    scheduler.start()
    logger.info("Scheduler started successfully")


def stop_scheduler() -> None:
    """Stop the scheduler.

    This should be called during FastAPI app shutdown.
    """
    if not scheduler.running:
        return
    logger.info("Stopping scheduler")
    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")


def pending_reminder_count() -> int:
    """Number of per-task reminder jobs waiting to fire."""
    return sum(1 for job in scheduler.get_jobs() if job.id.startswith(constants.REMINDER_JOB_PREFIX))
