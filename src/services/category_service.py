"""Category service for CRUD operations and first-launch seeding."""

import logging

from src.core import db_client
from src.core.config import constants
from src.core.errors import DefaultCategoryError
from src.core.logging import span
from src.domain.category import Category
from src.domain.timestamps import utc_now


logger = logging.getLogger(__name__)

COLLECTION = "categories"


def _to_category(record: dict) -> Category:
    return Category.model_validate(record)


async def get_all_categories() -> list[Category]:
    """All categories, alphabetically by name."""
    with span("category_service.get_all_categories"):
        records = await db_client.list_all_records(collection=COLLECTION, sort="name")
        return [_to_category(r) for r in records]


async def get_category(category_id: str) -> Category | None:
    try:
        record = await db_client.get_record(collection=COLLECTION, record_id=category_id)
    except KeyError:
        return None
    return _to_category(record)


async def category_exists(category_id: str) -> bool:
    return await get_category(category_id) is not None


async def category_name_exists(name: str, exclude_id: str | None = None) -> bool:
    """Whether another category already uses this name, ignoring case and surrounding spaces."""
    wanted = name.strip().lower()
    return any(c.name.lower() == wanted and c.id != exclude_id for c in await get_all_categories())


async def create_category(*, name: str, icon: str | None = None, is_default: bool = False) -> Category:
    """Create a category.

    Raises:
        ValueError: If another category already has this name
        pydantic.ValidationError: If the name or icon is out of bounds
    """
    with span("category_service.create_category"):
        name = name.strip()
        if await category_name_exists(name):
            msg = f"A category named '{name}' already exists"
            raise ValueError(msg)

        category_data = {
            "name": name,
            "icon": icon.strip() if icon else None,
            "is_default": is_default,
            "created": utc_now().isoformat(),
        }
        Category.model_validate({"id": "pending", **category_data})

        record = await db_client.create_record(collection=COLLECTION, data=category_data)
        logger.info("Created category", extra={"category_id": record["id"], "category_name": name})
        return _to_category(record)


async def update_category(*, category_id: str, name: str | None = None, icon: str | None = None) -> Category:
    """Rename a category or change its icon.

    Raises:
        KeyError: If the category does not exist
        ValueError: If another category already has the new name
    """
    with span("category_service.update_category"):
        existing = await get_category(category_id)
        if existing is None:
            msg = f"Category not found: {category_id}"
            raise KeyError(msg)

        if name is not None:
            name = name.strip()
            if await category_name_exists(name, exclude_id=category_id):
                msg = f"A category named '{name}' already exists"
                raise ValueError(msg)
        if icon is not None:
            icon = icon.strip()

        updated = Category.model_validate(
            {
                **existing.model_dump(),
                **({"name": name} if name is not None else {}),
                **({"icon": icon} if icon is not None else {}),
            }
        )
        record = await db_client.update_record(
            collection=COLLECTION,
            record_id=category_id,
            data={"name": updated.name, "icon": updated.icon},
        )
        return _to_category(record)


async def delete_category(category_id: str) -> None:
    """Delete a user-created category with its tasks, their logs and reminders.

    Raises:
        KeyError: If the category does not exist
        DefaultCategoryError: If the category is one of the built-in defaults
    """
    from src.services import task_service

    with span("category_service.delete_category"):
        category = await get_category(category_id)
        if category is None:
            msg = f"Category not found: {category_id}"
            raise KeyError(msg)

        if category.is_default:
            msg = f"Category '{category.name}' is a default category and cannot be deleted"
            raise DefaultCategoryError(msg)

        for task in await task_service.get_tasks_by_category(category_id):
            await task_service.delete_task(task.id)

        await db_client.delete_record(collection=COLLECTION, record_id=category_id)
        logger.info("Deleted category", extra={"category_id": category_id})


async def seed_default_categories() -> list[Category]:
    """Create the built-in categories on first launch.

    Runs once; afterwards ``is_first_launch_complete`` is set and this
    returns an empty list.
    """
    from src.services import settings_service

    with span("category_service.seed_default_categories"):
        app_settings = await settings_service.get_settings()
        if app_settings.is_first_launch_complete:
            return []

        created = [
            await create_category(name=name, icon=icon, is_default=True) for name, icon in constants.DEFAULT_CATEGORIES
        ]
        await settings_service.update_setting(key="is_first_launch_complete", value=True)
        logger.info("Seeded default categories", extra={"count": len(created)})
        return created
