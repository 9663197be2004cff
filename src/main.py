"""dididothat - reminders for recurring maintenance tasks."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.db_client import init_db
from src.core.logging import configure_logfire, instrument_fastapi
from src.core.scheduler import REFRESH_JOB_ID, pending_reminder_count, start_scheduler, stop_scheduler
from src.core.scheduler_tracker import job_tracker
from src.interface.api_router import register_error_handlers, router as api_router
from src.services import category_service, notification_service


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    configure_logfire()

    await init_db()
    logger.info("Database initialized")

    await category_service.seed_default_categories()

    # Scheduled jobs live in memory, so rebuild them from stored tasks
    summary = await notification_service.recalculate_all_notifications()
    logger.info("Startup reminder recalculation", extra=summary.model_dump())

    start_scheduler()
    yield
    # Shutdown
    stop_scheduler()


app = FastAPI(
    title="dididothat",
    description="Reminders for recurring maintenance tasks",
    version=settings.app_version,
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(api_router)
register_error_handlers(app)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)


@app.get("/health/scheduler")
async def scheduler_health_check() -> JSONResponse:
    """Scheduler health check endpoint with job statuses."""
    job_statuses = {REFRESH_JOB_ID: await job_tracker.get_job_status(REFRESH_JOB_ID)}

    dlq = job_tracker.get_dead_letter_queue()

    has_failures = any(status["consecutive_failures"] > 0 for status in job_statuses.values())

    overall_status = "degraded" if has_failures else "healthy"
    if len(dlq) > 0:
        overall_status = "critical"

    return JSONResponse(
        content={
            "status": overall_status,
            "jobs": job_statuses,
            "dead_letter_queue_size": len(dlq),
            "dead_letter_queue": dlq,
            "pending_reminders": pending_reminder_count(),
        },
        status_code=200 if overall_status == "healthy" else 503,
    )
