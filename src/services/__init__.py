from src.services import (
    category_service,
    export_service,
    notification_service,
    settings_service,
    task_log_service,
    task_service,
)


__all__ = [
    "category_service",
    "export_service",
    "notification_service",
    "settings_service",
    "task_log_service",
    "task_service",
]
