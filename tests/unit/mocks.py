"""Pure Python in-memory database for unit testing."""

import copy
import re
import uuid
from typing import Any

from src.core.db_client import DatabaseError, RecordNotFoundError
from src.models.service_models import NotificationRequest


_COMPARISON = re.compile(r"""^(\w+)\s*(!=|>=|<=|=|>|<|~)\s*(['"])(.*)\3$""")


class InMemoryDBClient:
    """Pure Python in-memory database for unit testing.

    Mirrors the db_client module interface: records get a UUID id unless one
    is supplied, lookups of missing ids raise RecordNotFoundError, and filters
    support ``= != > < >= <= ~`` joined with ``&&``.
    """

    def __init__(self):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    async def create_record(self, *, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create a new record in the specified collection.

        Raises:
            DatabaseError: If data is not a dict or the id is already taken
        """
        if not isinstance(data, dict):
            raise DatabaseError(f"Data must be a dictionary, got {type(data)}")

        records = self._collections.setdefault(collection, {})
        record = {"id": str(uuid.uuid4()), **data}

        if record["id"] in records:
            raise DatabaseError(f"Failed to create record in {collection}: UNIQUE constraint failed: {collection}.id")

        records[record["id"]] = record
        return copy.deepcopy(record)

    async def get_record(self, *, collection: str, record_id: str) -> dict[str, Any]:
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        return copy.deepcopy(records[record_id])

    async def update_record(self, *, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        if not data:
            raise ValueError("Empty update payload")

        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")

        records[record_id].update(data)
        return copy.deepcopy(records[record_id])

    async def delete_record(self, *, collection: str, record_id: str) -> None:
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        del records[record_id]

    async def list_records(
        self,
        *,
        collection: str,
        page: int = 1,
        per_page: int = 50,
        filter_query: str = "",
        sort: str = "",
    ) -> list[dict[str, Any]]:
        """List records with optional filtering, sorting and pagination.

        Args:
            collection: Name of the collection
            page: Page number (1-indexed)
            per_page: Number of records per page
            filter_query: Filter expression
            sort: Comma-separated fields, each optionally prefixed with -

        Returns:
            Deep copies of the matching records on the requested page
        """
        records = list(self._collections.get(collection, {}).values())

        if filter_query:
            records = [r for r in records if self._parse_filter(filter_query, r)]

        records = self._apply_sort(records, sort or "id")

        start_idx = (page - 1) * per_page
        return [copy.deepcopy(r) for r in records[start_idx : start_idx + per_page]]

    async def get_first_record(self, *, collection: str, filter_query: str) -> dict[str, Any] | None:
        records = await self.list_records(collection=collection, filter_query=filter_query, per_page=1)
        return records[0] if records else None

    def _parse_filter(self, filter_str: str, record: dict[str, Any]) -> bool:
        """Evaluate a filter expression against a record.

        Raises:
            DatabaseError: For invalid filter syntax
        """
        conditions = [c.strip() for c in filter_str.split("&&")]
        return all(self._matches(condition, record) for condition in conditions)

    def _matches(self, condition: str, record: dict[str, Any]) -> bool:
        match = _COMPARISON.match(condition)
        if not match:
            raise DatabaseError(f"Invalid filter syntax: {condition}")

        field, op, _, value = match.groups()
        actual = record.get(field)

        if op == "~":
            return value.lower() in str(actual or "").lower()

        if isinstance(actual, bool) and value.lower() in ("true", "false"):
            expected: Any = value.lower() == "true"
        elif isinstance(actual, int | float) and not isinstance(actual, bool):
            expected = type(actual)(value)
        else:
            actual = "" if actual is None else str(actual)
            expected = value

        match op:
            case "=":
                return actual == expected
            case "!=":
                return actual != expected
            case ">":
                return actual > expected
            case "<":
                return actual < expected
            case ">=":
                return actual >= expected
            case "<=":
                return actual <= expected
        raise DatabaseError(f"Unsupported operator: {op}")

    def _apply_sort(self, records: list[dict], sort: str) -> list[dict]:
        """Stable multi-key sort; later keys are applied first."""
        for item in reversed([s.strip() for s in sort.split(",") if s.strip()]):
            reverse = item.startswith("-")
            field = item.lstrip("+-")
            records = sorted(records, key=lambda r, f=field: (r.get(f) is None, str(r.get(f) or "")), reverse=reverse)
        return records


class RecordingSink:
    """Notification sink that remembers what it was asked to do."""

    def __init__(self) -> None:
        self.pending: dict[str, NotificationRequest] = {}
        self.scheduled: list[NotificationRequest] = []
        self.cancelled: list[str] = []
        self.cancel_all_calls = 0

    async def schedule(self, request: NotificationRequest) -> None:
        self.pending[request.task_id] = request
        self.scheduled.append(request)

    async def cancel(self, task_id: str) -> None:
        self.pending.pop(task_id, None)
        self.cancelled.append(task_id)

    async def cancel_all(self) -> None:
        self.pending.clear()
        self.cancel_all_calls += 1
