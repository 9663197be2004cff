"""Application preference model."""

from pydantic import BaseModel, Field


class AppSettings(BaseModel):
    """User-adjustable application preferences persisted in the database."""

    notifications_enabled: bool = Field(default=True, description="Whether reminders are globally enabled")
    default_reminder_lead_time_days: int = Field(default=3, ge=0, description="Default reminder lead time in days")
    is_first_launch_complete: bool = Field(default=False, description="Whether default data has been seeded")
    notification_permission_requested: bool = Field(
        default=False, description="Whether the user has been asked for notification permission"
    )
