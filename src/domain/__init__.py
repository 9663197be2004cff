"""Domain models and DTOs."""

from src.domain.category import Category
from src.domain.log import TaskLog
from src.domain.preferences import AppSettings
from src.domain.task import FrequencyUnit, RecurrenceRule, Task, TaskStatus


__all__ = [
    "AppSettings",
    "Category",
    "FrequencyUnit",
    "RecurrenceRule",
    "Task",
    "TaskLog",
    "TaskStatus",
]
