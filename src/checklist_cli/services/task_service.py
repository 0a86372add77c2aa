"""Task service - Business logic for task operations.

This service layer sits between commands and repositories. It keeps each
category group densely ordered when tasks are added, moved between categories
or removed, and applies the checklist visibility rules.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time

from pydantic import ValidationError as PydanticValidationError

from checklist_cli.exceptions import ValidationError
from checklist_cli.models import (
    RecurrencePattern,
    Session,
    Task,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
)
from checklist_cli.models.core import validate_time_block
from checklist_cli.repositories import TaskRepository
from checklist_cli.utils.clock import Clock, SystemClock
from checklist_cli.utils.logger import get_logger
from checklist_cli.utils.ordering import (
    MoveInstruction,
    build_groups,
    compute_move,
    group_key,
    next_sort_order,
    normalize_groups,
)
from checklist_cli.utils.recurrence import should_show
from checklist_cli.utils.task_helpers import match_task_id, sort_visible_tasks

logger = get_logger(__name__)


class TaskService:
    """Service for task business logic.

    Args:
        task_repository: TaskRepository implementation for data access
        clock: Source of "now" and of the local calendar day
        session_guard: Called before every mutation; raises when signed out
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        *,
        clock: Clock | None = None,
        session_guard: Callable[[], Session] | None = None,
    ):
        self.repository = task_repository
        self.clock = clock or SystemClock()
        self._session_guard = session_guard

    def _require_session(self) -> None:
        if self._session_guard is not None:
            self._session_guard()

    async def list_tasks(
        self,
        *,
        status: str | None = None,
        category_id: str | None = None,
        search: str | None = None,
    ) -> list[Task]:
        """List tasks in stored order (sort_order, newest first)."""
        filters = TaskFilters(status=status, category_id=category_id, search=search)
        return await self.repository.list_all(filters)

    async def list_visible_tasks(
        self,
        *,
        now: datetime | None = None,
        category_id: str | None = None,
        search: str | None = None,
    ) -> list[Task]:
        """Tasks visible in the checklist at *now*, in display order."""
        now = now or self.clock.now()
        tasks = await self.list_tasks(category_id=category_id, search=search)
        visible = [
            task
            for task in tasks
            if should_show(task.due_date, task.completed_at, task.pattern, task.weekly_day, now)
        ]
        return sort_visible_tasks(visible)

    async def get_task(self, task_id: str) -> Task:
        """Get a specific task by ID."""
        return await self.repository.get(task_id)

    async def resolve_task_id(self, id_or_suffix: str) -> str:
        """Full task id from a full id or a unique suffix."""
        tasks = await self.list_tasks(status="all")
        return match_task_id(tasks, id_or_suffix)

    async def add_task(
        self,
        title: str,
        *,
        notes: str | None = None,
        category_id: str | None = None,
        due_date: date | None = None,
        due_time: time | None = None,
        start_time: time | None = None,
        end_time: time | None = None,
        pattern: RecurrencePattern = RecurrencePattern.NONE,
        weekly_day: int | None = None,
    ) -> Task:
        """Create a task at the end of its category group.

        A due time or time block without a date is scheduled for today.
        """
        self._require_session()

        if due_date is None and (due_time is not None or start_time is not None):
            due_date = self.clock.now().date()

        existing = await self.list_tasks(status="all", category_id=category_id)
        if category_id is None:
            existing = [task for task in existing if task.category_id is None]

        try:
            task_data = TaskCreate(
                title=title,
                notes=notes,
                category_id=category_id,
                due_date=due_date,
                due_time=due_time,
                start_time=start_time,
                end_time=end_time,
                sort_order=next_sort_order(existing, category_id),
                pattern=pattern,
                weekly_day=weekly_day,
            )
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e)) from e

        task = await self.repository.add(task_data)
        logger.info("Created task %s in group %s at %d", task.id, task.group_key, task.sort_order)
        return task

    async def update_task(
        self,
        task_id: str,
        updates: TaskUpdate,
        *,
        pattern: RecurrencePattern | None = None,
        weekly_day: int | None = None,
    ) -> Task:
        """Edit a task.

        Only fields set on *updates* change. Passing *pattern* replaces the
        recurrence (``none`` removes it). Moving the task to another category
        appends it there and closes the gap it leaves behind.
        """
        self._require_session()
        current = await self.repository.get(task_id)
        changes = updates.changes()

        start = changes.get("start_time", current.start_time)
        end = changes.get("end_time", current.end_time)
        try:
            validate_time_block(start, end)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        if pattern == RecurrencePattern.WEEKLY and weekly_day is not None and not 0 <= weekly_day <= 6:
            raise ValidationError("weekly_day must be between 0 (Sunday) and 6 (Saturday)")

        moving = "category_id" in changes and changes["category_id"] != current.category_id
        if moving:
            # Position and group change in one atomic batch, so the source
            # group is dense again even if a later write fails.
            target_category = changes.pop("category_id")
            changes.pop("sort_order", None)
            await self._move_to_end(current, target_category)
            updates = TaskUpdate(**changes)

        if not moving or changes:
            task = await self.repository.update(task_id, updates)
        else:
            task = await self.repository.get(task_id)

        if pattern is not None and (pattern != current.pattern or weekly_day != current.weekly_day):
            await self.repository.set_recurrence(task_id, pattern, weekly_day)
            task = await self.repository.get(task_id)
        return task

    async def toggle_complete(
        self, task_id: str, completed: bool, *, now: datetime | None = None
    ) -> Task:
        """Mark a task completed at *now*, or reopen it."""
        self._require_session()
        completed_at = (now or self.clock.now()) if completed else None
        return await self.repository.update(task_id, TaskUpdate(completed_at=completed_at))

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task and re-index the group it leaves."""
        self._require_session()
        task = await self.repository.get(task_id)
        deleted = await self.repository.delete(task_id)
        if deleted:
            await self._close_gap(task.category_id)
        return deleted

    async def _move_to_end(self, task: Task, category_id: str | None) -> None:
        """Append *task* to *category_id*'s group and re-index the one it left."""
        groups = build_groups(await self.list_tasks(status="all"))
        target = group_key(category_id)
        result = compute_move(
            groups,
            MoveInstruction(
                task_id=task.id,
                source_group=task.group_key,
                target_group=target,
                target_index=len(groups.get(target, [])),
            ),
        )
        await self.repository.batch_reorder(result.updates)

    async def _close_gap(self, category_id: str | None) -> None:
        """Re-index a group densely after a task left it."""
        tasks = await self.list_tasks(status="all", category_id=category_id)
        if category_id is None:
            tasks = [task for task in tasks if task.category_id is None]
        updates = normalize_groups(tasks)
        if updates:
            await self.repository.batch_reorder(updates)


def _first_error(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    message = first["msg"].removeprefix("Value error, ")
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {message}" if location else message


def get_task_service() -> TaskService:
    """Factory function to get a TaskService for the active context."""
    from checklist_cli.services.auth_service import get_auth_service
    from checklist_cli.services.config_service import get_config_service

    config_service = get_config_service()
    return TaskService(
        config_service.storage_strategy_context.task_repository,
        clock=config_service.get_clock(),
        session_guard=get_auth_service().require_session,
    )
