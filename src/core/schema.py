"""SQLite schema management (code-first approach)."""

import logging

from src.core import db_client


logger = logging.getLogger(__name__)


# Central list of all collections in the schema, in dependency order
COLLECTIONS = [
    "categories",
    "tasks",
    "task_logs",
    "preferences",
]


TABLE_SCHEMAS: dict[str, str] = {
    "categories": """
        CREATE TABLE IF NOT EXISTS categories (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            icon TEXT,
            created TEXT NOT NULL,
            is_default INTEGER NOT NULL DEFAULT 0
        )
    """,
    "tasks": """
        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            category_id TEXT NOT NULL REFERENCES categories (id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            description TEXT,
            frequency_value INTEGER NOT NULL DEFAULT 1 CHECK (frequency_value BETWEEN 1 AND 365),
            frequency_unit TEXT NOT NULL DEFAULT 'Months' CHECK (frequency_unit IN ('Days', 'Weeks', 'Months')),
            is_reminder_enabled INTEGER NOT NULL DEFAULT 1,
            created TEXT NOT NULL
        )
    """,
    "task_logs": """
        CREATE TABLE IF NOT EXISTS task_logs (
            id TEXT PRIMARY KEY,
            task_id TEXT NOT NULL REFERENCES tasks (id) ON DELETE CASCADE,
            completed_at TEXT NOT NULL,
            notes TEXT
        )
    """,
    "preferences": """
        CREATE TABLE IF NOT EXISTS preferences (
            id TEXT PRIMARY KEY,
            key TEXT NOT NULL UNIQUE,
            value TEXT NOT NULL
        )
    """,
}


INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_category ON tasks (category_id)",
    "CREATE INDEX IF NOT EXISTS idx_task_logs_task ON task_logs (task_id)",
    "CREATE INDEX IF NOT EXISTS idx_task_logs_completed ON task_logs (completed_at)",
]


async def init_db(*, db_path: str | None = None) -> None:
    """Create all tables and indexes if they do not exist yet.

    Safe to call on every startup.
    """
    conn = await db_client.get_connection(db_path=db_path)

    for collection in COLLECTIONS:
        await conn.execute(TABLE_SCHEMAS[collection])

    for index_sql in INDEXES:
        await conn.execute(index_sql)

    await conn.commit()
    logger.info("Database schema initialized", extra={"collections": COLLECTIONS})
