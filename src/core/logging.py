"""Logging and observability configuration using Pydantic Logfire.

All modules use Python's standard logging library (logging.getLogger(__name__)),
and Logfire picks these records up once configured.

Standard usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Message", extra={"key": "value"})

Structured logging utilities:
    log_with_task_context(logger, "info", "Task completed", task_id="abc", notes=False)
"""

import logging

import logfire
from fastapi import FastAPI

from src.core.config import settings


def configure_logfire() -> None:
    """Configure Pydantic Logfire and route standard logging records into it.

    Without a token nothing is sent remotely and records still reach the
    console.
    """
    logfire.configure(
        token=settings.logfire_token,
        service_name="dididothat",
        service_version=settings.app_version,
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )
    logging.basicConfig(
        level=settings.log_level.upper(),
        handlers=[logfire.LogfireLoggingHandler()],
    )

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured", extra={"log_level": settings.log_level})


def instrument_fastapi(app: FastAPI) -> None:
    """Add Logfire instrumentation to FastAPI application."""
    logfire.instrument_fastapi(app)
    logger = logging.getLogger(__name__)
    logger.info("FastAPI instrumentation configured")


def span(name: str) -> logfire.LogfireSpan:
    """Create a custom span for service layer functions.

    Usage:
        with span("task_service.complete_task"):
            ...
    """
    return logfire.span(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: object,
) -> None:
    """Log a message with structured context fields.

    Args:
        logger: Logger instance to use
        level: Log level ("debug", "info", "warning", "error", "critical")
        message: Log message
        **context: Additional context fields (task_id, category_id, operation_type, etc.)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)


def log_with_task_context(
    logger: logging.Logger,
    level: str,
    message: str,
    task_id: str | None = None,
    **extra: object,
) -> None:
    """Log a message with task context.

    Usage:
        log_with_task_context(logger, "warning", "Reminder skipped", task_id="123", reason="disabled")
    """
    context = {"task_id": task_id, **extra} if task_id else extra
    log_with_context(logger, level, message, **context)
