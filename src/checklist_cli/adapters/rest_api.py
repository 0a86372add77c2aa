"""REST API adapters - repository implementations over the hosted store.

The hosted store speaks the PostgREST dialect: tables are resources, filters are
query parameters (``id=in.(a,b)``), embedded relations are requested through
``select`` and multi-row writes go through a stored procedure under ``/rpc``.
"""

from __future__ import annotations

from typing import Any

from checklist_cli.exceptions import NotFoundError, StoreError
from checklist_cli.models import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    RecurrencePattern,
    SortUpdate,
    Task,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
)
from checklist_cli.repositories.repository import CategoryRepository, TaskRepository
from checklist_cli.services.api.client import APIClient

TASK_SELECT = "*,category:categories(*),recurrence:task_recurrence(*)"
RETURN_REPRESENTATION = {"Prefer": "return=representation"}
UPSERT_HEADERS = {"Prefer": "resolution=merge-duplicates,return=minimal"}


def in_filter(ids: list[str]) -> str:
    """PostgREST ``in`` operator value for a list of ids."""
    return f"in.({','.join(ids)})"


def _json_value(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    return value


def _payload(data: dict[str, Any]) -> dict[str, Any]:
    return {key: _json_value(value) for key, value in data.items()}


def parse_task(data: dict[str, Any]) -> Task:
    """Build a Task from a row with embedded category and recurrence.

    The embedded recurrence arrives as a list when the relation is not known to
    be one-to-one, and as an object (or null) when it is.
    """
    row = dict(data)
    recurrence = row.pop("recurrence", None)
    if isinstance(recurrence, list):
        recurrence = recurrence[0] if recurrence else None
    category = row.pop("category", None)
    row.pop("user_id", None)
    return Task(**row, recurrence=recurrence, category=category)


class RestApiTaskRepository(TaskRepository):
    """Task repository implementation over the hosted REST API."""

    def __init__(self, client: APIClient, user_id: str | None = None):
        self.client = client
        self.user_id = user_id

    async def list_all(self, filters: TaskFilters) -> list[Task]:
        params: dict[str, Any] = {
            "select": TASK_SELECT,
            "order": "sort_order.asc,created_at.desc",
        }
        if filters.status == "active":
            params["completed_at"] = "is.null"
        elif filters.status == "completed":
            params["completed_at"] = "not.is.null"
        if filters.category_id:
            params["category_id"] = f"eq.{filters.category_id}"
        if filters.search:
            term = filters.search.replace(",", " ")
            params["or"] = f"(title.ilike.*{term}*,notes.ilike.*{term}*)"

        response = await self.client.get("/tasks", params=params)
        return [parse_task(item) for item in response.json()]

    async def get(self, task_id: str) -> Task:
        response = await self.client.get(
            "/tasks", params={"select": TASK_SELECT, "id": f"eq.{task_id}"}
        )
        rows = response.json()
        if not rows:
            raise NotFoundError(f"Task not found: {task_id}")
        return parse_task(rows[0])

    async def add(self, task_data: TaskCreate) -> Task:
        body = _payload(
            task_data.model_dump(exclude={"pattern", "weekly_day", "sort_order"})
        )
        body["sort_order"] = task_data.sort_order or 0
        if self.user_id:
            body["user_id"] = self.user_id

        response = await self.client.post(
            "/tasks", json=body, headers=RETURN_REPRESENTATION
        )
        rows = response.json()
        if not rows:
            raise StoreError("Task insert returned no row")
        task_id = rows[0]["id"]

        if task_data.pattern != RecurrencePattern.NONE:
            await self.set_recurrence(task_id, task_data.pattern, task_data.weekly_day)
        return await self.get(task_id)

    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        changes = updates.changes()
        if changes:
            response = await self.client.patch(
                "/tasks",
                params={"id": f"eq.{task_id}"},
                json=_payload(changes),
                headers=RETURN_REPRESENTATION,
            )
            if not response.json():
                raise NotFoundError(f"Task not found: {task_id}")
        return await self.get(task_id)

    async def bulk_update(self, task_ids: list[str], updates: TaskUpdate) -> None:
        changes = updates.changes()
        if not task_ids or not changes:
            return
        await self.client.patch(
            "/tasks", params={"id": in_filter(task_ids)}, json=_payload(changes)
        )

    async def delete(self, task_id: str) -> bool:
        return await self.bulk_delete([task_id]) > 0

    async def bulk_delete(self, task_ids: list[str]) -> int:
        if not task_ids:
            return 0
        response = await self.client.delete(
            "/tasks", params={"id": in_filter(task_ids)}, headers=RETURN_REPRESENTATION
        )
        return len(response.json() or [])

    async def batch_reorder(self, updates: list[SortUpdate]) -> None:
        """Call the ``reorder_tasks`` procedure, which applies the batch atomically."""
        if not updates:
            return
        await self.client.post(
            "/rpc/reorder_tasks",
            json={"task_updates": [update.model_dump() for update in updates]},
        )

    async def set_recurrence(
        self,
        task_id: str,
        pattern: RecurrencePattern,
        weekly_day: int | None = None,
    ) -> None:
        if pattern == RecurrencePattern.NONE:
            await self.client.delete(
                "/task_recurrence", params={"task_id": f"eq.{task_id}"}
            )
            return
        if pattern != RecurrencePattern.WEEKLY:
            weekly_day = None
        await self.client.post(
            "/task_recurrence",
            params={"on_conflict": "task_id"},
            json={
                "task_id": task_id,
                "pattern": RecurrencePattern(pattern).value,
                "weekly_day": weekly_day,
            },
            headers=UPSERT_HEADERS,
        )


class RestApiCategoryRepository(CategoryRepository):
    """Category repository implementation over the hosted REST API."""

    def __init__(self, client: APIClient, user_id: str | None = None):
        self.client = client
        self.user_id = user_id

    async def list_all(self) -> list[Category]:
        response = await self.client.get(
            "/categories", params={"select": "*", "order": "created_at.asc"}
        )
        return [Category(**row) for row in response.json()]

    async def get(self, category_id: str) -> Category:
        response = await self.client.get(
            "/categories", params={"select": "*", "id": f"eq.{category_id}"}
        )
        rows = response.json()
        if not rows:
            raise NotFoundError(f"Category not found: {category_id}")
        return Category(**rows[0])

    async def add(self, category_data: CategoryCreate) -> Category:
        body = category_data.model_dump()
        if self.user_id:
            body["user_id"] = self.user_id
        response = await self.client.post(
            "/categories", json=body, headers=RETURN_REPRESENTATION
        )
        rows = response.json()
        if not rows:
            raise StoreError("Category insert returned no row")
        return Category(**rows[0])

    async def update(self, category_id: str, updates: CategoryUpdate) -> Category:
        changes = updates.model_dump(exclude_none=True)
        if not changes:
            return await self.get(category_id)
        response = await self.client.patch(
            "/categories",
            params={"id": f"eq.{category_id}"},
            json=changes,
            headers=RETURN_REPRESENTATION,
        )
        rows = response.json()
        if not rows:
            raise NotFoundError(f"Category not found: {category_id}")
        return Category(**rows[0])

    async def delete(self, category_id: str) -> bool:
        """Delete a category; the store's foreign key detaches its tasks."""
        response = await self.client.delete(
            "/categories",
            params={"id": f"eq.{category_id}"},
            headers=RETURN_REPRESENTATION,
        )
        return bool(response.json())
