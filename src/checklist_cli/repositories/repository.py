"""Repository abstraction layer for Checklist CLI.

This module defines the abstract base classes (interfaces) for the task store,
following the hexagonal architecture (Ports & Adapters) pattern.

Repositories provide an abstraction over data persistence, allowing the business
logic to remain independent of the underlying storage mechanism (local SQLite,
remote API, etc.).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

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


class TaskRepository(ABC):
    """Abstract base class for task persistence operations.

    Tasks returned by every read method carry their joined ``recurrence`` and
    ``category``.
    """

    @abstractmethod
    async def list_all(self, filters: TaskFilters) -> list[Task]:
        """List tasks with optional filtering.

        Args:
            filters: TaskFilters object specifying filter criteria

        Returns:
            Tasks ordered by sort_order ascending, then newest first
        """
        raise NotImplementedError(
            "TaskRepository.list_all() must be implemented by adapter"
        )

    @abstractmethod
    async def get(self, task_id: str) -> Task:
        """Get a specific task by ID.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError("TaskRepository.get() must be implemented by adapter")

    @abstractmethod
    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new task (and its recurrence when the pattern is not none).

        Returns:
            Created Task object with generated ID and timestamps
        """
        raise NotImplementedError("TaskRepository.add() must be implemented by adapter")

    @abstractmethod
    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        """Apply a patch to one task.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError(
            "TaskRepository.update() must be implemented by adapter"
        )

    @abstractmethod
    async def bulk_update(self, task_ids: list[str], updates: TaskUpdate) -> None:
        """Apply the same patch to many tasks in one call.

        Ids that no longer exist are ignored, so repeating the call is harmless.
        """
        raise NotImplementedError(
            "TaskRepository.bulk_update() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, task_id: str) -> bool:
        """Delete a task.

        Returns:
            True if a task was deleted
        """
        raise NotImplementedError(
            "TaskRepository.delete() must be implemented by adapter"
        )

    @abstractmethod
    async def bulk_delete(self, task_ids: list[str]) -> int:
        """Delete many tasks in one call.

        Already-deleted ids are a no-op.

        Returns:
            Number of tasks actually deleted
        """
        raise NotImplementedError(
            "TaskRepository.bulk_delete() must be implemented by adapter"
        )

    @abstractmethod
    async def batch_reorder(self, updates: list[SortUpdate]) -> None:
        """Persist sort positions and groups atomically.

        Either every update is applied or none is; a partial application
        would break dense ordering.

        Raises:
            StoreError: If the batch was rejected (nothing applied)
        """
        raise NotImplementedError(
            "TaskRepository.batch_reorder() must be implemented by adapter"
        )

    @abstractmethod
    async def set_recurrence(
        self,
        task_id: str,
        pattern: RecurrencePattern,
        weekly_day: int | None = None,
    ) -> None:
        """Insert, update or (for pattern none) remove a task's recurrence."""
        raise NotImplementedError(
            "TaskRepository.set_recurrence() must be implemented by adapter"
        )


class CategoryRepository(ABC):
    """Abstract base class for category persistence operations."""

    @abstractmethod
    async def list_all(self) -> list[Category]:
        """List categories, oldest first."""
        raise NotImplementedError(
            "CategoryRepository.list_all() must be implemented by adapter"
        )

    @abstractmethod
    async def get(self, category_id: str) -> Category:
        """Get a specific category by ID.

        Raises:
            NotFoundError: If category does not exist
        """
        raise NotImplementedError(
            "CategoryRepository.get() must be implemented by adapter"
        )

    @abstractmethod
    async def add(self, category_data: CategoryCreate) -> Category:
        """Create a new category."""
        raise NotImplementedError(
            "CategoryRepository.add() must be implemented by adapter"
        )

    @abstractmethod
    async def update(self, category_id: str, updates: CategoryUpdate) -> Category:
        """Rename or recolor a category."""
        raise NotImplementedError(
            "CategoryRepository.update() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, category_id: str) -> bool:
        """Delete a category; its tasks are detached, not deleted."""
        raise NotImplementedError(
            "CategoryRepository.delete() must be implemented by adapter"
        )
