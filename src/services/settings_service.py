"""Application preferences stored as key/value rows."""

import json
import logging
from typing import Any

from src.core import db_client
from src.core.logging import span
from src.domain.preferences import AppSettings


logger = logging.getLogger(__name__)

COLLECTION = "preferences"


async def _get_value(key: str) -> Any | None:
    record = await db_client.get_first_record(
        collection=COLLECTION,
        filter_query=f'key = "{db_client.sanitize_param(key)}"',
    )
    if record is None:
        return None
    return json.loads(record["value"])


async def _set_value(key: str, value: Any) -> None:
    encoded = json.dumps(value)
    record = await db_client.get_first_record(
        collection=COLLECTION,
        filter_query=f'key = "{db_client.sanitize_param(key)}"',
    )
    if record is None:
        await db_client.create_record(collection=COLLECTION, data={"key": key, "value": encoded})
    elif record["value"] != encoded:
        await db_client.update_record(collection=COLLECTION, record_id=record["id"], data={"value": encoded})


async def get_settings() -> AppSettings:
    """Load preferences, using defaults for anything never saved."""
    with span("settings_service.get_settings"):
        values = {}
        for field_name in AppSettings.model_fields:
            stored = await _get_value(field_name)
            if stored is not None:
                values[field_name] = stored
        return AppSettings.model_validate(values)


async def save_settings(app_settings: AppSettings) -> AppSettings:
    """Persist every preference."""
    with span("settings_service.save_settings"):
        for field_name, value in app_settings.model_dump().items():
            await _set_value(field_name, value)
        logger.info("Saved settings", extra=app_settings.model_dump())
        return app_settings


async def update_setting(*, key: str, value: Any) -> AppSettings:
    """Change a single preference, validating it against AppSettings."""
    if key not in AppSettings.model_fields:
        msg = f"Unknown setting: {key}"
        raise ValueError(msg)

    current = await get_settings()
    updated = AppSettings.model_validate({**current.model_dump(), key: value})
    await _set_value(key, getattr(updated, key))
    return updated


async def set_notifications_enabled(enabled: bool) -> AppSettings:
    """Toggle reminders globally.

    Enabling reschedules every reminder; disabling cancels them all.
    """
    from src.services import notification_service

    with span("settings_service.set_notifications_enabled"):
        updated = await update_setting(key="notifications_enabled", value=enabled)
        if enabled:
            await notification_service.recalculate_all_notifications()
        else:
            await notification_service.cancel_all_notifications()
        logger.info("Notifications %s", "enabled" if enabled else "disabled")
        return updated
