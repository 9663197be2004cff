"""Export file format.

Field names are camelCase on the wire (``exportedAt``, ``taskLogs``) and
snake_case in Python. The frequency unit is written as its name.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.timestamps import UtcDatetime, utc_now


class _ExportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CategoryExport(_ExportModel):
    """Category data for export."""

    id: str
    name: str = ""
    icon: str | None = None
    created_date: UtcDatetime = Field(default_factory=utc_now)
    is_default: bool = False


class TaskExport(_ExportModel):
    """Task data for export."""

    id: str
    category_id: str
    name: str = ""
    description: str | None = None
    frequency_value: int = 1
    frequency_unit: str | int | None = None
    is_reminder_enabled: bool = True
    created_date: UtcDatetime = Field(default_factory=utc_now)


class TaskLogExport(_ExportModel):
    """Task completion log data for export."""

    id: str
    task_item_id: str
    completed_date: UtcDatetime
    notes: str | None = None


class ExportData(_ExportModel):
    """Everything the app stores, as written to an export file."""

    exported_at: UtcDatetime = Field(default_factory=utc_now)
    app_version: str = ""
    categories: list[CategoryExport] = Field(default_factory=list)
    tasks: list[TaskExport] = Field(default_factory=list)
    task_logs: list[TaskLogExport] = Field(default_factory=list)
