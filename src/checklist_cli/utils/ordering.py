"""Per-category manual ordering of tasks.

Each category (plus the ``uncategorized`` bucket) is an independent ordered
group whose ``sort_order`` values are dense: ``0 .. len(group) - 1``. Groups are
held as explicit id lists; a move rewrites the positions of every task in the
affected group(s) so the whole range can be written in one atomic batch.

Everything here is pure: inputs are never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from checklist_cli.models.core import UNCATEGORIZED, SortUpdate, Task

Groups = dict[str, list[str]]


def group_key(category_id: str | None) -> str:
    """Group key of a category id (``None`` -> ``"uncategorized"``)."""
    return category_id or UNCATEGORIZED


def category_for_group(key: str) -> str | None:
    """Inverse of :func:`group_key`."""
    return None if key == UNCATEGORIZED else key


def _created_key(task: Task) -> float:
    if task.created_at is None:
        return float("-inf")
    return task.created_at.timestamp()


def build_groups(tasks: list[Task]) -> Groups:
    """Partition tasks into ordered groups keyed by category.

    Within a group, tasks are ordered by ``sort_order`` with ``created_at``
    (oldest first) breaking ties.
    """
    buckets: dict[str, list[Task]] = {}
    for task in tasks:
        buckets.setdefault(task.group_key, []).append(task)
    return {
        key: [t.id for t in sorted(members, key=lambda t: (t.sort_order, _created_key(t)))]
        for key, members in buckets.items()
    }


@dataclass(frozen=True)
class MoveInstruction:
    """Move *task_id* from *source_group* to *target_index* of *target_group*.

    For a same-group move *target_index* is the final index of the task
    (array-move semantics); for a cross-group move it is the insertion point
    in the target group, clamped to its length.
    """

    task_id: str
    source_group: str
    target_group: str
    target_index: int


@dataclass
class MoveResult:
    groups: Groups
    updates: list[SortUpdate] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.updates)


def array_move(items: list[str], old_index: int, new_index: int) -> list[str]:
    """Copy of *items* with the element at *old_index* moved to *new_index*."""
    result = list(items)
    item = result.pop(old_index)
    new_index = max(0, min(new_index, len(result)))
    result.insert(new_index, item)
    return result


def _group_updates(key: str, ids: list[str]) -> list[SortUpdate]:
    category_id = category_for_group(key)
    return [
        SortUpdate(id=task_id, sort_order=index, category_id=category_id)
        for index, task_id in enumerate(ids)
    ]


def compute_move(groups: Groups, instruction: MoveInstruction) -> MoveResult:
    """Apply a move to the group lists and return the dense rewrite.

    Returns the new groups (unaffected groups are shared, affected ones are new
    lists) and a ``SortUpdate`` for every task of every affected group. When the
    task is not in its source group, or the move lands where it started, the
    result carries no updates.

    Example:
        >>> groups = {"work": ["a", "b", "c"]}
        >>> result = compute_move(groups, MoveInstruction("c", "work", "work", 0))
        >>> result.groups["work"]
        ['c', 'a', 'b']
    """
    source = groups.get(instruction.source_group, [])
    if instruction.task_id not in source:
        return MoveResult(groups=dict(groups))

    old_index = source.index(instruction.task_id)
    new_groups = dict(groups)

    if instruction.source_group == instruction.target_group:
        new_index = max(0, min(instruction.target_index, len(source) - 1))
        if new_index == old_index:
            return MoveResult(groups=new_groups)
        moved = array_move(source, old_index, new_index)
        new_groups[instruction.source_group] = moved
        return MoveResult(
            groups=new_groups,
            updates=_group_updates(instruction.source_group, moved),
        )

    remaining = [task_id for task_id in source if task_id != instruction.task_id]
    target = list(groups.get(instruction.target_group, []))
    insert_at = max(0, min(instruction.target_index, len(target)))
    target.insert(insert_at, instruction.task_id)

    new_groups[instruction.source_group] = remaining
    new_groups[instruction.target_group] = target

    return MoveResult(
        groups=new_groups,
        updates=_group_updates(instruction.source_group, remaining)
        + _group_updates(instruction.target_group, target),
    )


def apply_updates(tasks: list[Task], updates: list[SortUpdate]) -> list[Task]:
    """Copies of *tasks* with each update's position and group applied."""
    by_id = {update.id: update for update in updates}
    result = []
    for task in tasks:
        update = by_id.get(task.id)
        if update is None:
            result.append(task)
        else:
            result.append(
                task.model_copy(
                    update={
                        "sort_order": update.sort_order,
                        "category_id": update.category_id,
                    }
                )
            )
    return result


def normalize_groups(tasks: list[Task]) -> list[SortUpdate]:
    """Updates that re-index every group densely, for tasks out of place."""
    by_id = {task.id: task for task in tasks}
    updates = []
    for key, ids in build_groups(tasks).items():
        for update in _group_updates(key, ids):
            if by_id[update.id].sort_order != update.sort_order:
                updates.append(update)
    return updates


def check_dense(tasks: list[Task]) -> dict[str, list[int]]:
    """Groups whose ``sort_order`` values are not exactly ``0 .. n-1``.

    Returns:
        Mapping of group key to its (sorted) positions, for offending groups only
    """
    positions: dict[str, list[int]] = {}
    for task in tasks:
        positions.setdefault(task.group_key, []).append(task.sort_order)
    return {
        key: sorted(values)
        for key, values in positions.items()
        if sorted(values) != list(range(len(values)))
    }


def next_sort_order(tasks: list[Task], category_id: str | None) -> int:
    """Append position for a new task in *category_id*'s group."""
    key = group_key(category_id)
    return sum(1 for task in tasks if task.group_key == key)
