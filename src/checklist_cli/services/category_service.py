"""Category service - Business logic for category operations."""

from __future__ import annotations

from collections.abc import Callable

from pydantic import ValidationError as PydanticValidationError

from checklist_cli.exceptions import NotFoundError, ValidationError
from checklist_cli.models import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    Session,
    SortUpdate,
    UNCATEGORIZED,
    TaskFilters,
)
from checklist_cli.repositories import CategoryRepository, TaskRepository
from checklist_cli.utils.logger import get_logger
from checklist_cli.utils.ordering import build_groups

logger = get_logger(__name__)


class CategoryService:
    """Service for category business logic.

    Deleting a category keeps its tasks: they move to the end of the
    uncategorized group in their previous relative order.
    """

    def __init__(
        self,
        category_repository: CategoryRepository,
        task_repository: TaskRepository,
        *,
        session_guard: Callable[[], Session] | None = None,
    ):
        self.repository = category_repository
        self.task_repository = task_repository
        self._session_guard = session_guard

    def _require_session(self) -> None:
        if self._session_guard is not None:
            self._session_guard()

    async def list_categories(self) -> list[Category]:
        """List categories, oldest first."""
        return await self.repository.list_all()

    async def get_category(self, category_id: str) -> Category:
        return await self.repository.get(category_id)

    async def resolve_category_id(self, name_or_id: str) -> str:
        """Category id from an id, id suffix or case-insensitive name."""
        categories = await self.list_categories()
        for category in categories:
            if category.id == name_or_id:
                return category.id

        by_name = [c for c in categories if c.name.lower() == name_or_id.lower()]
        if len(by_name) == 1:
            return by_name[0].id

        by_suffix = [c for c in categories if c.id.endswith(name_or_id)]
        if len(by_suffix) == 1:
            return by_suffix[0].id
        if len(by_name) > 1 or len(by_suffix) > 1:
            raise ValidationError(f"Ambiguous category '{name_or_id}'")
        raise NotFoundError(f"Category not found: {name_or_id}")

    async def create_category(self, name: str, *, color: str | None = None) -> Category:
        """Create a new category."""
        self._require_session()
        try:
            data = CategoryCreate(name=name, color=color)
        except PydanticValidationError as e:
            raise ValidationError("Category name cannot be empty") from e
        category = await self.repository.add(data)
        logger.info("Created category %s (%s)", category.id, category.name)
        return category

    async def update_category(
        self,
        category_id: str,
        *,
        name: str | None = None,
        color: str | None = None,
    ) -> Category:
        """Rename and/or recolor a category."""
        self._require_session()
        if name is not None and not name.strip():
            raise ValidationError("Category name cannot be empty")
        updates = CategoryUpdate(name=name.strip() if name else None, color=color)
        return await self.repository.update(category_id, updates)

    async def delete_category(self, category_id: str) -> bool:
        """Delete a category and append its tasks to the uncategorized group."""
        self._require_session()
        await self.repository.get(category_id)

        tasks = await self.task_repository.list_all(TaskFilters(status="all"))
        groups = build_groups(tasks)
        orphans = groups.get(category_id, [])
        uncategorized = groups.get(UNCATEGORIZED, [])

        deleted = await self.repository.delete(category_id)
        if deleted and orphans:
            start = len(uncategorized)
            await self.task_repository.batch_reorder(
                [
                    SortUpdate(id=task_id, sort_order=start + offset, category_id=None)
                    for offset, task_id in enumerate(orphans)
                ]
            )
            logger.info("Moved %d tasks of category %s to uncategorized", len(orphans), category_id)
        return deleted


def get_category_service() -> CategoryService:
    """Factory function to get a CategoryService for the active context."""
    from checklist_cli.services.auth_service import get_auth_service
    from checklist_cli.services.config_service import get_storage_strategy_context

    storage_strategy_context = get_storage_strategy_context()
    return CategoryService(
        storage_strategy_context.category_repository,
        storage_strategy_context.task_repository,
        session_guard=get_auth_service().require_session,
    )
