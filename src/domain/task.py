"""Task domain models and enums."""

from datetime import timedelta
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from src.core.config import Constants
from src.domain.timestamps import UtcDatetime, utc_now


class FrequencyUnit(StrEnum):
    """Unit of time a task's frequency is expressed in."""

    DAYS = "Days"
    WEEKS = "Weeks"
    MONTHS = "Months"

    @classmethod
    def from_name(cls, value: str | int | None) -> "FrequencyUnit":
        """Parse a stored/exported unit name, falling back to DAYS.

        Accepts any casing of the member names and the ordinal positions
        ("0", "1", "2") older exports wrote. Anything else becomes DAYS so a
        single bad row does not abort an import.
        """
        if value is None:
            return cls.DAYS

        text = str(value).strip()
        for unit in cls:
            if unit.value.lower() == text.lower():
                return unit

        if text.isdigit():
            members = list(cls)
            index = int(text)
            if index < len(members):
                return members[index]

        return cls.DAYS


class TaskStatus(StrEnum):
    """Computed status of a recurring task. Never persisted."""

    UP_TO_DATE = "UpToDate"
    DUE_SOON = "DueSoon"
    OVERDUE = "Overdue"


class RecurrenceRule(BaseModel):
    """How often a task repeats."""

    model_config = ConfigDict(frozen=True)

    frequency_value: int = Field(..., ge=Constants.MIN_FREQUENCY_VALUE, description="Numeric multiplier, e.g. 3")
    frequency_unit: FrequencyUnit = Field(..., description="Days, Weeks or Months")


class Task(BaseModel):
    """Recurring maintenance task data transfer object."""

    id: str = Field(..., description="Unique task ID")
    category_id: str = Field(..., description="ID of the category this task belongs to")
    name: str = Field(..., min_length=1, max_length=Constants.TASK_NAME_MAX_LENGTH, description="Task name")
    description: str | None = Field(
        default=None, max_length=Constants.TASK_DESCRIPTION_MAX_LENGTH, description="Optional description"
    )
    frequency_value: int = Field(
        default=1,
        ge=Constants.MIN_FREQUENCY_VALUE,
        le=Constants.MAX_FREQUENCY_VALUE,
        description="Numeric frequency value (e.g., 3 for 'every 3 months')",
    )
    frequency_unit: FrequencyUnit = Field(default=FrequencyUnit.MONTHS, description="Frequency unit")
    is_reminder_enabled: bool = Field(default=True, description="Whether reminders are scheduled for this task")
    created: UtcDatetime = Field(default_factory=utc_now, description="Creation timestamp")

    @property
    def rule(self) -> RecurrenceRule:
        return RecurrenceRule(frequency_value=self.frequency_value, frequency_unit=self.frequency_unit)

    @property
    def frequency_span(self) -> timedelta:
        from src.core.status_calculator import frequency_span

        return frequency_span(self.rule)

    @property
    def frequency_description(self) -> str:
        """Human-readable frequency, e.g. "Every Week" or "Every 3 Months"."""
        if self.frequency_value == 1:
            return f"Every {self.frequency_unit.value.removesuffix('s')}"
        return f"Every {self.frequency_value} {self.frequency_unit.value}"
