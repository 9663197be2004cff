"""Completion log domain model."""

from pydantic import BaseModel, Field

from src.core.config import Constants
from src.domain.timestamps import UtcDatetime, utc_now


class TaskLog(BaseModel):
    """One completion of a task. A new entry is written every time a task is marked done."""

    id: str = Field(..., description="Unique log ID")
    task_id: str = Field(..., description="ID of the completed task")
    completed_at: UtcDatetime = Field(default_factory=utc_now, description="When the task was completed")
    notes: str | None = Field(
        default=None, max_length=Constants.LOG_NOTES_MAX_LENGTH, description="Optional notes about this completion"
    )
