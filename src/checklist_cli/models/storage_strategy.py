"""
Strategy Pattern: Storage Strategy Container

The active context is resolved once at startup into a strategy holding every
repository for one backend (local SQLite or the hosted REST store). Services
receive the StorageStrategyContext and never branch on the backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from checklist_cli.repositories import CategoryRepository, TaskRepository


class StorageStrategy(ABC):
    """Abstract base class for storage strategies."""

    @abstractmethod
    def get_task_repository(self) -> TaskRepository:
        """Get task repository implementation for this strategy."""

    @abstractmethod
    def get_category_repository(self) -> CategoryRepository:
        """Get category repository implementation for this strategy."""

    @property
    @abstractmethod
    def storage_type(self) -> str:
        """Get storage type identifier (for logging/debugging)."""

    async def close(self) -> None:
        """Release network or file handles held by the repositories."""


class LocalStorageStrategy(StorageStrategy):
    """Local SQLite storage strategy."""

    def __init__(self, db_path: str):
        self.db_path = db_path

        # Import here to avoid circular dependencies
        from checklist_cli.adapters.sqlite.category_repository import (
            SqliteCategoryRepository,
        )
        from checklist_cli.adapters.sqlite.task_repository import SqliteTaskRepository

        self._task_repo = SqliteTaskRepository(db_path=db_path)
        self._category_repo = SqliteCategoryRepository(db_path=db_path)

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    def get_category_repository(self) -> CategoryRepository:
        return self._category_repo

    @property
    def storage_type(self) -> str:
        return "local"


class RemoteStorageStrategy(StorageStrategy):
    """Hosted REST store strategy.

    Args:
        base_url: Store endpoint (context ``source``)
        api_key: Public API key sent as the ``apikey`` header
        token: Session token from ``checklist auth login``
        user_id: Owner id stamped on inserted rows
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        token: str | None = None,
        user_id: str | None = None,
        timeout: float = 30,
    ):
        from checklist_cli.adapters.rest_api import (
            RestApiCategoryRepository,
            RestApiTaskRepository,
        )
        from checklist_cli.services.api.client import APIClient

        self._client = APIClient(base_url, api_key=api_key, token=token, timeout=timeout)
        self._task_repo = RestApiTaskRepository(self._client, user_id=user_id)
        self._category_repo = RestApiCategoryRepository(self._client, user_id=user_id)

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    def get_category_repository(self) -> CategoryRepository:
        return self._category_repo

    @property
    def storage_type(self) -> str:
        return "remote"

    async def close(self) -> None:
        await self._client.close()


class StorageStrategyContext:
    """
    Strategy context that provides access to all repositories.

    Usage:
        strategy = LocalStorageStrategy(db_path="/path/to/db")
        context = StorageStrategyContext(strategy)
        task_repo = context.task_repository
    """

    def __init__(self, strategy: StorageStrategy):
        self._strategy = strategy

    @property
    def task_repository(self) -> TaskRepository:
        """Get task repository from current strategy."""
        return self._strategy.get_task_repository()

    @property
    def category_repository(self) -> CategoryRepository:
        """Get category repository from current strategy."""
        return self._strategy.get_category_repository()

    @property
    def storage_type(self) -> str:
        """Get storage type (for logging/debugging only)."""
        return self._strategy.storage_type

    async def close(self) -> None:
        await self._strategy.close()
