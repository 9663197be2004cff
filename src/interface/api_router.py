"""JSON API for categories, tasks, completions, settings and export/import."""

import logging
from datetime import datetime

from fastapi import APIRouter, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.core.config import Constants
from src.core.db_client import DatabaseError
from src.core.errors import classify_error_with_response, http_status_for
from src.domain.category import Category
from src.domain.log import TaskLog
from src.domain.preferences import AppSettings
from src.domain.task import FrequencyUnit, Task
from src.models.service_models import DashboardSummary, ImportResult, TaskOverview
from src.services import (
    category_service,
    export_service,
    settings_service,
    task_log_service,
    task_service,
)


logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=Constants.CATEGORY_NAME_MAX_LENGTH)
    icon: str | None = Field(default=None, max_length=Constants.CATEGORY_ICON_MAX_LENGTH)


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Constants.CATEGORY_NAME_MAX_LENGTH)
    icon: str | None = Field(default=None, max_length=Constants.CATEGORY_ICON_MAX_LENGTH)


class TaskCreate(BaseModel):
    category_id: str
    name: str = Field(..., min_length=1, max_length=Constants.TASK_NAME_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=Constants.TASK_DESCRIPTION_MAX_LENGTH)
    frequency_value: int = Field(default=1, ge=Constants.MIN_FREQUENCY_VALUE, le=Constants.MAX_FREQUENCY_VALUE)
    frequency_unit: FrequencyUnit = FrequencyUnit.MONTHS
    is_reminder_enabled: bool = True


class TaskUpdate(BaseModel):
    category_id: str | None = None
    name: str | None = Field(default=None, min_length=1, max_length=Constants.TASK_NAME_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=Constants.TASK_DESCRIPTION_MAX_LENGTH)
    frequency_value: int | None = Field(
        default=None, ge=Constants.MIN_FREQUENCY_VALUE, le=Constants.MAX_FREQUENCY_VALUE
    )
    frequency_unit: FrequencyUnit | None = None
    is_reminder_enabled: bool | None = None


class CompletionCreate(BaseModel):
    completed_at: datetime | None = None
    notes: str | None = Field(default=None, max_length=Constants.LOG_NOTES_MAX_LENGTH)


class SettingsUpdate(BaseModel):
    notifications_enabled: bool | None = None
    default_reminder_lead_time_days: int | None = Field(default=None, ge=0)
    is_first_launch_complete: bool | None = None
    notification_permission_requested: bool | None = None


async def service_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Turn service-layer exceptions into structured JSON errors."""
    error_response = classify_error_with_response(exc)
    status_code = http_status_for(error_response)
    logger.warning(
        "Request failed",
        extra={"code": error_response.code, "status_code": status_code, "error": str(exc)},
    )
    return JSONResponse(content=error_response.model_dump(mode="json"), status_code=status_code)


def register_error_handlers(app: FastAPI) -> None:
    for exc_type in (KeyError, ValueError, DatabaseError):
        app.add_exception_handler(exc_type, service_error_handler)


# Dashboard


@router.get("/dashboard")
async def get_dashboard() -> DashboardSummary:
    return await task_service.get_dashboard_summary()


# Categories


@router.get("/categories")
async def list_categories() -> list[Category]:
    return await category_service.get_all_categories()


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(body: CategoryCreate) -> Category:
    return await category_service.create_category(name=body.name, icon=body.icon)


@router.get("/categories/{category_id}")
async def get_category(category_id: str) -> Category:
    category = await category_service.get_category(category_id)
    if category is None:
        msg = f"Category not found: {category_id}"
        raise KeyError(msg)
    return category


@router.patch("/categories/{category_id}")
async def update_category(category_id: str, body: CategoryUpdate) -> Category:
    return await category_service.update_category(category_id=category_id, name=body.name, icon=body.icon)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: str) -> Response:
    await category_service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Tasks


@router.get("/tasks")
async def list_tasks(category_id: str | None = None) -> list[TaskOverview]:
    """Every task with its computed status, optionally limited to one category."""
    overviews = await task_service.get_task_overviews()
    if category_id is not None:
        overviews = [o for o in overviews if o.task.category_id == category_id]
    return overviews


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreate) -> Task:
    return await task_service.create_task(**body.model_dump())


@router.get("/tasks/{task_id}")
async def get_task(task_id: str) -> TaskOverview:
    overview = await task_service.get_task_overview(task_id)
    if overview is None:
        msg = f"Task not found: {task_id}"
        raise KeyError(msg)
    return overview


@router.patch("/tasks/{task_id}")
async def update_task(task_id: str, body: TaskUpdate) -> Task:
    task = await task_service.update_task(task_id=task_id, **body.model_dump())
    if task is None:
        msg = f"Task not found: {task_id}"
        raise KeyError(msg)
    return task


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str) -> Response:
    if not await task_service.delete_task(task_id):
        msg = f"Task not found: {task_id}"
        raise KeyError(msg)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/tasks/{task_id}/complete", status_code=status.HTTP_201_CREATED)
async def complete_task(task_id: str, body: CompletionCreate | None = None) -> TaskLog:
    body = body or CompletionCreate()
    return await task_service.complete_task(task_id, completed_at=body.completed_at, notes=body.notes)


@router.get("/tasks/{task_id}/logs")
async def list_task_logs(task_id: str) -> list[TaskLog]:
    if await task_service.get_task(task_id) is None:
        msg = f"Task not found: {task_id}"
        raise KeyError(msg)
    return await task_log_service.get_logs_for_task(task_id)


@router.delete("/logs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_log(log_id: str) -> Response:
    if not await task_log_service.delete_log(log_id):
        msg = f"Log not found: {log_id}"
        raise KeyError(msg)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Settings


@router.get("/settings")
async def get_settings() -> AppSettings:
    return await settings_service.get_settings()


@router.put("/settings")
async def update_settings(body: SettingsUpdate) -> AppSettings:
    """Apply the given preferences; toggling notifications reschedules or cancels reminders."""
    changes = body.model_dump(exclude_none=True)
    notifications_enabled = changes.pop("notifications_enabled", None)

    for key, value in changes.items():
        await settings_service.update_setting(key=key, value=value)

    if notifications_enabled is not None:
        return await settings_service.set_notifications_enabled(notifications_enabled)
    return await settings_service.get_settings()


# Export / import


@router.get("/export")
async def export_data() -> Response:
    data = await export_service.gather_export_data()
    return Response(
        content=export_service.serialize_export_data(data),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_service.export_filename()}"'},
    )


@router.post("/import")
async def import_data(request: Request) -> JSONResponse:
    """Merge an export document posted as the raw request body."""
    raw = await request.body()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        result = ImportResult(success=False, message=export_service.INVALID_FILE_MESSAGE)
    else:
        result = await export_service.import_data_from_json(text)

    return JSONResponse(
        content=result.model_dump(mode="json"),
        status_code=status.HTTP_200_OK if result.success else status.HTTP_400_BAD_REQUEST,
    )
