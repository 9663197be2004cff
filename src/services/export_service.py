"""Export and import of all app data as a JSON document."""

import logging
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ValidationError

from src.core import db_client, message_templates
from src.core.config import constants, settings
from src.core.logging import span
from src.domain.category import Category
from src.domain.log import TaskLog
from src.domain.task import FrequencyUnit, Task
from src.models.export_models import CategoryExport, ExportData, TaskExport, TaskLogExport
from src.models.service_models import ImportResult
from src.services import notification_service


logger = logging.getLogger(__name__)

INVALID_FILE_MESSAGE = "Invalid file format. Could not parse the export file."


async def gather_export_data(app_version: str | None = None) -> ExportData:
    """Collect every category, task and completion log."""
    with span("export_service.gather_export_data"):
        categories = [
            Category.model_validate(r) for r in await db_client.list_all_records(collection="categories")
        ]
        tasks = [Task.model_validate(r) for r in await db_client.list_all_records(collection="tasks")]
        logs = [TaskLog.model_validate(r) for r in await db_client.list_all_records(collection="task_logs")]

        return ExportData(
            app_version=app_version or settings.app_version,
            categories=[
                CategoryExport(
                    id=c.id,
                    name=c.name,
                    icon=c.icon,
                    created_date=c.created,
                    is_default=c.is_default,
                )
                for c in categories
            ],
            tasks=[
                TaskExport(
                    id=t.id,
                    category_id=t.category_id,
                    name=t.name,
                    description=t.description,
                    frequency_value=t.frequency_value,
                    frequency_unit=t.frequency_unit.value,
                    is_reminder_enabled=t.is_reminder_enabled,
                    created_date=t.created,
                )
                for t in tasks
            ],
            task_logs=[
                TaskLogExport(
                    id=log.id,
                    task_item_id=log.task_id,
                    completed_date=log.completed_at,
                    notes=log.notes,
                )
                for log in logs
            ],
        )


def serialize_export_data(data: ExportData) -> str:
    """Indented camelCase JSON with null fields left out."""
    return data.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def deserialize_export_data(text: str) -> ExportData | None:
    """Parse an export document, returning None if it is not one."""
    try:
        return ExportData.model_validate_json(text)
    except ValidationError:
        return None


async def _existing_ids(collection: str) -> set[str]:
    return {r["id"] for r in await db_client.list_all_records(collection=collection)}


def _is_valid(model: type[BaseModel], record: dict, kind: str) -> bool:
    try:
        model.model_validate(record)
    except ValidationError as e:
        logger.warning("Skipping invalid %s in import", kind, extra={"record_id": record["id"], "error": str(e)})
        return False
    return True


async def import_data(data: ExportData) -> ImportResult:
    """Merge an export into the database.

    Records whose id already exists are skipped, as are tasks whose
    category is missing and logs whose task is missing. Rows that break the
    domain limits are skipped with a warning, and anything referring to a
    skipped row goes with it. Categories go in first, then tasks, then
    logs, so references resolve against both the existing data and what
    was just imported.
    """
    with span("export_service.import_data"):
        category_ids = await _existing_ids("categories")
        task_ids = await _existing_ids("tasks")
        log_ids = await _existing_ids("task_logs")
        invalid_skipped = 0

        categories_imported = 0
        for item in data.categories:
            if item.id in category_ids:
                continue
            category_data = {
                "id": item.id,
                "name": item.name,
                "icon": item.icon,
                "created": item.created_date.isoformat(),
                "is_default": item.is_default,
            }
            if not _is_valid(Category, category_data, "category"):
                invalid_skipped += 1
                continue
            await db_client.create_record(collection="categories", data=category_data)
            category_ids.add(item.id)
            categories_imported += 1

        tasks_imported = 0
        for item in data.tasks:
            if item.id in task_ids or item.category_id not in category_ids:
                continue
            task_data = {
                "id": item.id,
                "category_id": item.category_id,
                "name": item.name,
                "description": item.description,
                "frequency_value": item.frequency_value,
                "frequency_unit": FrequencyUnit.from_name(item.frequency_unit).value,
                "is_reminder_enabled": item.is_reminder_enabled,
                "created": item.created_date.isoformat(),
            }
            if not _is_valid(Task, task_data, "task"):
                invalid_skipped += 1
                continue
            await db_client.create_record(collection="tasks", data=task_data)
            task_ids.add(item.id)
            tasks_imported += 1

        logs_imported = 0
        for item in data.task_logs:
            if item.id in log_ids or item.task_item_id not in task_ids:
                continue
            log_data = {
                "id": item.id,
                "task_id": item.task_item_id,
                "completed_at": item.completed_date.isoformat(),
                "notes": item.notes,
            }
            if not _is_valid(TaskLog, log_data, "log"):
                invalid_skipped += 1
                continue
            await db_client.create_record(collection="task_logs", data=log_data)
            log_ids.add(item.id)
            logs_imported += 1

        if categories_imported or tasks_imported or logs_imported:
            await notification_service.recalculate_all_notifications()

        logger.info(
            "Imported data",
            extra={
                "categories_imported": categories_imported,
                "tasks_imported": tasks_imported,
                "logs_imported": logs_imported,
                "invalid_skipped": invalid_skipped,
            },
        )
        return ImportResult(
            success=True,
            message=message_templates.import_summary(
                categories=categories_imported,
                tasks=tasks_imported,
                logs=logs_imported,
            ),
            categories_imported=categories_imported,
            tasks_imported=tasks_imported,
            logs_imported=logs_imported,
            invalid_skipped=invalid_skipped,
        )


async def import_data_from_json(text: str) -> ImportResult:
    data = deserialize_export_data(text)
    if data is None:
        return ImportResult(success=False, message=INVALID_FILE_MESSAGE)
    return await import_data(data)


def export_filename(at: datetime | None = None) -> str:
    """``DidIDoThat_Export_YYYYMMDD_HHMMSS.json`` stamped with local time."""
    stamp = (at or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{constants.EXPORT_FILENAME_PREFIX}{stamp}.json"


async def export_to_file(directory: str | Path) -> Path:
    """Write a full export into ``directory`` and return the file path."""
    with span("export_service.export_to_file"):
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / export_filename()
        path.write_text(serialize_export_data(await gather_export_data()), encoding="utf-8")
        logger.info("Exported data", extra={"path": str(path)})
        return path


async def import_from_file(path: str | Path) -> ImportResult:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read import file", extra={"path": str(path), "error": str(e)})
        return ImportResult(success=False, message=f"Import failed: {e}")
    return await import_data_from_json(text)
