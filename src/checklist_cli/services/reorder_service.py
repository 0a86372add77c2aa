"""Optimistic drag-and-drop reordering with rollback.

A move is applied to the local task list at once, then persisted as one atomic
batch. Every move takes a sequence number; only the newest outstanding move may
roll the list back or trigger a reload, so a late failure of an older move
never clobbers newer local state.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from dataclasses import dataclass

from checklist_cli.exceptions import NotFoundError
from checklist_cli.models import UNCATEGORIZED, Task, TaskFilters
from checklist_cli.repositories import TaskRepository
from checklist_cli.utils.logger import get_logger
from checklist_cli.utils.ordering import (
    MoveInstruction,
    apply_updates,
    build_groups,
    compute_move,
)

logger = get_logger(__name__)

GROUP_CONTAINER_PREFIX = "category-"
REORDER_FAILED_MESSAGE = "Failed to save task order"


@dataclass(frozen=True)
class DragEnd:
    """End of a drag gesture.

    ``over_id`` is either a task id or a group container id of the form
    ``category-<group key>``; None means the drop landed nowhere.
    """

    active_id: str
    over_id: str | None


def container_id(group: str) -> str:
    return f"{GROUP_CONTAINER_PREFIX}{group}"


class ReorderCoordinator:
    """Owns the optimistic task list for one view.

    Attributes:
        tasks: What the user currently sees (may include unconfirmed moves)
        confirmed: Last list the store acknowledged (independent copy)

    Args:
        task_repository: Store used to load and persist the order
        on_change: Called with the new list after every local change
        on_error: Called with a user-facing message when a save fails
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        *,
        filters: TaskFilters | None = None,
        on_change: Callable[[list[Task]], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ):
        self.repository = task_repository
        self.filters = filters or TaskFilters(status="all")
        self.on_change = on_change
        self.on_error = on_error

        self.tasks: list[Task] = []
        self.confirmed: list[Task] = []
        self._sequence = 0
        self._latest = 0
        self._confirmed_sequence = 0

    @property
    def latest_sequence(self) -> int:
        return self._latest

    async def load(self) -> list[Task]:
        """Fetch the canonical list and make it both current and confirmed."""
        tasks = await self.repository.list_all(self.filters)
        self._set_confirmed(tasks)
        self._set_tasks(copy.deepcopy(tasks))
        return self.tasks

    def groups(self) -> dict[str, list[str]]:
        return build_groups(self.tasks)

    def resolve_drag(self, event: DragEnd) -> MoveInstruction | None:
        """Translate a drop into a move, or None when nothing should happen."""
        if event.over_id is None or event.over_id == event.active_id:
            return None

        by_id = {task.id: task for task in self.tasks}
        active = by_id.get(event.active_id)
        if active is None:
            return None

        groups = self.groups()
        if event.over_id.startswith(GROUP_CONTAINER_PREFIX):
            target_group = event.over_id[len(GROUP_CONTAINER_PREFIX):] or UNCATEGORIZED
            target_index = 0
        else:
            over = by_id.get(event.over_id)
            if over is None:
                return None
            target_group = over.group_key
            target_index = groups[target_group].index(over.id)

        return MoveInstruction(
            task_id=active.id,
            source_group=active.group_key,
            target_group=target_group,
            target_index=target_index,
        )

    async def drag_end(self, event: DragEnd) -> bool:
        """Handle a drop. Returns True if the new order was saved."""
        instruction = self.resolve_drag(event)
        if instruction is None:
            return False
        return await self._commit(instruction)

    async def move(self, task_id: str, target_group: str, target_index: int) -> bool:
        """Move a task to *target_index* of *target_group* (keyboard/CLI path)."""
        by_id = {task.id: task for task in self.tasks}
        task = by_id.get(task_id)
        if task is None:
            raise NotFoundError(f"Task not found: {task_id}")
        instruction = MoveInstruction(
            task_id=task_id,
            source_group=task.group_key,
            target_group=target_group or UNCATEGORIZED,
            target_index=target_index,
        )
        return await self._commit(instruction)

    async def _commit(self, instruction: MoveInstruction) -> bool:
        result = compute_move(self.groups(), instruction)
        if not result.changed:
            return False

        self._sequence += 1
        sequence = self._latest = self._sequence

        # Optimistic local apply before any I/O.
        self._set_tasks(apply_updates(self.tasks, result.updates))
        optimistic = self.tasks

        try:
            await self.repository.batch_reorder(result.updates)
        except Exception as e:
            logger.warning("Reorder #%d failed: %s", sequence, e)
            if sequence == self._latest:
                self._set_tasks(copy.deepcopy(self.confirmed))
                if self.on_error is not None:
                    self.on_error(REORDER_FAILED_MESSAGE)
            else:
                logger.info("Reorder #%d failure superseded by #%d", sequence, self._latest)
            return False

        # The store now holds this order; later moves build on it.
        if sequence > self._confirmed_sequence:
            self._confirmed_sequence = sequence
            self._set_confirmed(optimistic)
        logger.debug("Reorder #%d saved (%d rows)", sequence, len(result.updates))
        if sequence == self._latest:
            await self._reload(sequence)
        return True

    async def _reload(self, sequence: int) -> None:
        try:
            tasks = await self.repository.list_all(self.filters)
        except Exception as e:
            logger.warning("Reload after reorder #%d failed: %s", sequence, e)
            return
        if sequence == self._latest:
            self._set_confirmed(tasks)
            self._set_tasks(copy.deepcopy(tasks))

    def _set_confirmed(self, tasks: list[Task]) -> None:
        self.confirmed = copy.deepcopy(tasks)

    def _set_tasks(self, tasks: list[Task]) -> None:
        self.tasks = tasks
        if self.on_change is not None:
            self.on_change(self.tasks)


def get_reorder_coordinator(**kwargs) -> ReorderCoordinator:
    """Factory function to get a ReorderCoordinator for the active context."""
    from checklist_cli.services.config_service import get_storage_strategy_context

    return ReorderCoordinator(get_storage_strategy_context().task_repository, **kwargs)
