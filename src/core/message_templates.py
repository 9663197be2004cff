"""Centralized message templates for reminder notifications.

All user-facing notification strings are defined here so wording can be
changed in one place.
"""


def reminder_title() -> str:
    return "Task Reminder"


def reminder_body(*, task_name: str) -> str:
    return f"{task_name} is due soon!"


def import_summary(*, categories: int, tasks: int, logs: int) -> str:
    """Build the message shown after an import.

    Args:
        categories: Number of categories added
        tasks: Number of tasks added
        logs: Number of completion records added

    Returns:
        Summary text
    """
    if categories == 0 and tasks == 0 and logs == 0:
        return "No new data to import. All items already exist in the app."
    return (
        f"Successfully imported {categories} categories, {tasks} tasks, "
        f"and {logs} completion records."
    )
