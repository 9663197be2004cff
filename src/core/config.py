"""Configuration management for dididothat."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    sqlite_db_path: str = Field(default="dididothat.db", description="Path to the SQLite database file")

    # Logging
    log_level: str = Field(default="INFO", description="Minimum level for standard logging records")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Push delivery (optional)
    notification_webhook_url: str | None = Field(
        default=None, description="Webhook URL that receives reminder notifications as JSON"
    )
    notification_webhook_token: str | None = Field(
        default=None, description="Bearer token sent with reminder webhook calls"
    )

    # Application metadata
    app_version: str = Field(default="0.1.0", description="Version string written into exports")
    environment: str = Field(default="development", description="Deployment environment name")

    # Background refresh
    enable_daily_refresh: bool = Field(
        default=True, description="Recalculate all reminders once a day in the background"
    )

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # Recurrence
    DAYS_PER_WEEK: int = 7
    DAYS_PER_MONTH: int = 30  # Fixed approximation, not calendar months
    MIN_FREQUENCY_VALUE: int = 1
    MAX_FREQUENCY_VALUE: int = 365

    # Status classification
    DUE_SOON_FRACTION: float = 0.20  # Trailing share of the interval that counts as "due soon"

    # Reminder lead times
    SHORT_INTERVAL_MAX_DAYS: int = 14
    SHORT_LEAD_TIME_DAYS: int = 3
    LONG_LEAD_TIME_DAYS: int = 7

    # Field limits
    CATEGORY_NAME_MAX_LENGTH: int = 100
    CATEGORY_ICON_MAX_LENGTH: int = 50
    TASK_NAME_MAX_LENGTH: int = 200
    TASK_DESCRIPTION_MAX_LENGTH: int = 1000
    LOG_NOTES_MAX_LENGTH: int = 500

    # Notifications
    NOTIFICATION_CHANNEL_ID: str = "dididothat_reminders"
    NOTIFICATION_CHANNEL_NAME: str = "Task Reminders"
    NOTIFICATION_CHANNEL_DESCRIPTION: str = "Notifications for upcoming maintenance tasks"

    # Scheduler Configuration
    DAILY_REFRESH_HOUR: int = 6  # 6am
    REMINDER_JOB_PREFIX: str = "reminder:"

    # API Configuration
    API_TIMEOUT_SECONDS: int = 30

    # Dashboard
    RECENTLY_COMPLETED_COUNT: int = 5

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 100

    # Job Tracker Configuration
    TRACKER_DEAD_LETTER_QUEUE_MAXLEN: int = 100

    # Default categories seeded on first launch
    DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
        ("Home", "\U0001f3e0"),
        ("Car", "\U0001f697"),
        ("Personal", "\U0001f464"),
        ("Pet", "\U0001f43e"),
        ("Business", "\U0001f4bc"),
    )

    # Export
    EXPORT_FILENAME_PREFIX: str = "DidIDoThat_Export_"

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
