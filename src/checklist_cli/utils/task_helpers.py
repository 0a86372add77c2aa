"""Task helper utilities."""

from __future__ import annotations

from functools import cmp_to_key

from checklist_cli.exceptions import NotFoundError, ValidationError
from checklist_cli.models import Task


def find_shortest_unique_suffix(task_ids: list[str], target_id: str) -> str:
    """
    Find the shortest suffix of target_id that uniquely identifies it.

    Args:
        task_ids: List of all task IDs
        target_id: The task ID to find a unique suffix for

    Returns:
        The shortest unique suffix
    """
    for length in range(1, len(target_id) + 1):
        suffix = target_id[-length:]
        matches = [tid for tid in task_ids if tid.endswith(suffix)]
        if len(matches) == 1:
            return suffix
    return target_id


def calculate_unique_suffixes(task_ids: list[str]) -> dict[str, str]:
    """Map each id to its shortest unique suffix (used for display)."""
    return {task_id: find_shortest_unique_suffix(task_ids, task_id) for task_id in task_ids}


def match_task_id(tasks: list[Task], id_or_suffix: str) -> str:
    """Resolve a full id or unique suffix against *tasks*.

    Raises:
        NotFoundError: If nothing matches
        ValidationError: If the suffix is ambiguous
    """
    ids = [task.id for task in tasks]
    if id_or_suffix in ids:
        return id_or_suffix

    matching = [task for task in tasks if task.id.endswith(id_or_suffix)]
    if not matching:
        raise NotFoundError(f"No task found with ID or suffix '{id_or_suffix}'")
    if len(matching) > 1:
        suggestions = ", ".join(
            f"{find_shortest_unique_suffix(ids, task.id)} ({task.title})"
            for task in matching[:5]
        )
        raise ValidationError(
            f"Ambiguous task ID '{id_or_suffix}'. Did you mean: {suggestions}"
        )
    return matching[0].id


def _compare_visible(a: Task, b: Task) -> int:
    if a.is_completed != b.is_completed:
        return 1 if a.is_completed else -1

    a_timed = a.due_date is not None and a.due_time is not None
    b_timed = b.due_date is not None and b.due_time is not None
    if a_timed != b_timed:
        return -1 if a_timed else 1

    if a.due_date is not None and b.due_date is not None:
        return (a.due_date > b.due_date) - (a.due_date < b.due_date)

    if (a.due_date is None) != (b.due_date is None):
        return -1 if a.due_date is not None else 1

    a_created = a.created_at.timestamp()
    b_created = b.created_at.timestamp()
    return (b_created > a_created) - (b_created < a_created)


def sort_visible_tasks(tasks: list[Task]) -> list[Task]:
    """Checklist display order.

    Open tasks before completed ones, timed before untimed, then by due date
    (dated before undated), newest first among undated tasks.
    """
    return sorted(tasks, key=cmp_to_key(_compare_visible))
