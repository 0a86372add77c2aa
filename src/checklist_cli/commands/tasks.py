"""Task management commands."""

from datetime import date, time

import typer

from checklist_cli.exceptions import ReorderFailedError, ValidationError
from checklist_cli.models import UNCATEGORIZED, RecurrencePattern, TaskUpdate
from checklist_cli.services.category_service import get_category_service
from checklist_cli.services.config_service import get_config_service
from checklist_cli.services.maintenance_service import (
    TRIGGER_START,
    get_maintenance_service,
)
from checklist_cli.services.reorder_service import DragEnd, get_reorder_coordinator
from checklist_cli.services.task_service import get_task_service
from checklist_cli.utils.dates import parse_due_date, parse_time
from checklist_cli.utils.recurrence import WEEKDAY_NAMES, resolve_pattern
from checklist_cli.utils.typer_helpers import SuggestingGroup
from checklist_cli.utils.ui.console import get_console
from checklist_cli.utils.ui.formatters import (
    format_checklist,
    format_info,
    format_output,
    format_success,
    task_to_dict,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Task management commands")
console = get_console()

# Sentinel accepted by edit options to clear a field.
CLEAR = "none"


def _parse_due(value: str, today: date) -> date:
    parsed = parse_due_date(value, today)
    if parsed is None:
        raise ValidationError(f"Invalid date '{value}' (try YYYY-MM-DD, tomorrow or 'next friday')")
    return parsed


def _parse_clock_time(value: str, option: str) -> time:
    parsed = parse_time(value)
    if parsed is None:
        raise ValidationError(f"Invalid {option} '{value}' (use HH:MM)")
    return parsed


def _parse_pattern(value: str) -> RecurrencePattern:
    pattern = resolve_pattern(value)
    if pattern is None:
        raise ValidationError(f"Invalid repeat '{value}' (use none, daily or weekly)")
    return pattern


def _parse_weekday(value: str) -> int:
    """Weekday from 0-6 (Sunday = 0) or a day name prefix such as "wed"."""
    text = value.strip().lower()
    if text.isdigit() and 0 <= int(text) <= 6:
        return int(text)
    matches = [i for i, name in enumerate(WEEKDAY_NAMES) if text and name.lower().startswith(text)]
    if len(matches) != 1:
        raise ValidationError(f"Invalid day '{value}' (use 0-6 with Sunday = 0, or a day name)")
    return matches[0]


async def _resolve_category(name_or_id: str | None) -> str | None:
    if name_or_id is None or name_or_id.lower() in (CLEAR, UNCATEGORIZED):
        return None
    return await get_category_service().resolve_category_id(name_or_id)


@app.command("list")
@command_wrapper
async def list_tasks(
    show_all: bool = typer.Option(
        False, "--all", "-a", help="Include tasks hidden by recurrence rules"
    ),
    category: str | None = typer.Option(None, "--category", "-c", help="Category name or ID"),
    search: str | None = typer.Option(None, "--search", "-s", help="Search title and notes"),
    flat: bool = typer.Option(False, "--flat", help="Single list in display order"),
    maintenance: bool = typer.Option(
        True, "--maintenance/--no-maintenance", help="Run maintenance before listing"
    ),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
    compact: bool = typer.Option(False, "--compact", help="Compact output"),
) -> None:
    """List the checklist grouped by category."""
    config = get_config_service().config
    output = output or config.output.format
    compact = compact or config.output.compact

    if maintenance and config.maintenance.enabled:
        # Failures are logged by the service and retried on the next pass.
        await get_maintenance_service().run_maintenance(TRIGGER_START)

    task_service = get_task_service()
    category_id = await _resolve_category(category)
    if show_all:
        tasks = await task_service.list_tasks(category_id=category_id, search=search)
    else:
        tasks = await task_service.list_visible_tasks(category_id=category_id, search=search)

    if output in ("json", "yaml"):
        format_output([task_to_dict(task) for task in tasks], output)
        return

    categories = await get_category_service().list_categories()
    format_checklist(
        tasks,
        categories,
        task_service.clock.now(),
        compact=compact,
        flat=flat,
    )


@app.command("add")
@command_wrapper
async def add_task(
    title: str = typer.Argument(..., help="Task title"),
    notes: str | None = typer.Option(None, "--notes", "-n", help="Free-form notes"),
    category: str | None = typer.Option(None, "--category", "-c", help="Category name or ID"),
    due: str | None = typer.Option(None, "--due", "-d", help="Due date (YYYY-MM-DD, tomorrow, next friday, ...)"),
    due_time: str | None = typer.Option(None, "--time", "-t", help="Due time (HH:MM)"),
    start: str | None = typer.Option(None, "--start", help="Time block start (HH:MM)"),
    end: str | None = typer.Option(None, "--end", help="Time block end (HH:MM)"),
    repeat: str = typer.Option("none", "--repeat", "-r", help="none, daily or weekly"),
    day: str | None = typer.Option(None, "--day", help="Weekday for weekly tasks"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Add a task to the end of its category."""
    task_service = get_task_service()
    today = task_service.clock.now().date()

    pattern = _parse_pattern(repeat)
    weekly_day = _parse_weekday(day) if day is not None else None
    if weekly_day is not None and pattern != RecurrencePattern.WEEKLY:
        raise ValidationError("--day only applies to --repeat weekly")

    task = await task_service.add_task(
        title,
        notes=notes,
        category_id=await _resolve_category(category),
        due_date=_parse_due(due, today) if due else None,
        due_time=_parse_clock_time(due_time, "time") if due_time else None,
        start_time=_parse_clock_time(start, "start time") if start else None,
        end_time=_parse_clock_time(end, "end time") if end else None,
        pattern=pattern,
        weekly_day=weekly_day,
    )
    if output in ("json", "yaml"):
        format_output(task_to_dict(task), output)
        return
    format_success(f"Task added: {task.title} ({task.id})")


@app.command("edit")
@command_wrapper
async def edit_task(
    task_id: str = typer.Argument(..., help="Task ID or suffix"),
    title: str | None = typer.Option(None, "--title", help="New title"),
    notes: str | None = typer.Option(None, "--notes", "-n", help="New notes ('none' clears)"),
    category: str | None = typer.Option(
        None, "--category", "-c", help="Category name or ID ('none' uncategorizes)"
    ),
    due: str | None = typer.Option(None, "--due", "-d", help="Due date ('none' clears)"),
    due_time: str | None = typer.Option(None, "--time", "-t", help="Due time ('none' clears)"),
    start: str | None = typer.Option(None, "--start", help="Time block start ('none' clears)"),
    end: str | None = typer.Option(None, "--end", help="Time block end ('none' clears)"),
    repeat: str | None = typer.Option(None, "--repeat", "-r", help="none, daily or weekly"),
    day: str | None = typer.Option(None, "--day", help="Weekday for weekly tasks"),
) -> None:
    """Edit a task. Only the given fields change."""
    task_service = get_task_service()
    task_id = await task_service.resolve_task_id(task_id)
    today = task_service.clock.now().date()

    changes: dict = {}
    if title is not None:
        changes["title"] = title
    if notes is not None:
        changes["notes"] = None if notes.lower() == CLEAR else notes
    if category is not None:
        changes["category_id"] = await _resolve_category(category)
    if due is not None:
        changes["due_date"] = None if due.lower() == CLEAR else _parse_due(due, today)
    for option, field, value in (
        ("time", "due_time", due_time),
        ("start time", "start_time", start),
        ("end time", "end_time", end),
    ):
        if value is not None:
            changes[field] = None if value.lower() == CLEAR else _parse_clock_time(value, option)

    pattern = _parse_pattern(repeat) if repeat is not None else None
    weekly_day = _parse_weekday(day) if day is not None else None
    if weekly_day is not None:
        current = await task_service.get_task(task_id)
        pattern = pattern or current.pattern
        if pattern != RecurrencePattern.WEEKLY:
            raise ValidationError("--day only applies to weekly tasks")

    if not changes and pattern is None:
        raise ValidationError("No updates specified")

    try:
        updates = TaskUpdate(**changes)
    except ValueError as e:
        raise ValidationError(str(e).splitlines()[-1]) from e

    task = await task_service.update_task(task_id, updates, pattern=pattern, weekly_day=weekly_day)
    format_success(f"Task updated: {task.title} ({task.id})")


@app.command("complete")
@command_wrapper
async def complete_task(
    task_id: str = typer.Argument(..., help="Task ID or suffix"),
) -> None:
    """Mark a task as completed."""
    task_service = get_task_service()
    task_id = await task_service.resolve_task_id(task_id)
    task = await task_service.toggle_complete(task_id, True)
    format_success(f"Completed: {task.title}")


@app.command("reopen")
@command_wrapper
async def reopen_task(
    task_id: str = typer.Argument(..., help="Task ID or suffix"),
) -> None:
    """Mark a completed task as open again."""
    task_service = get_task_service()
    task_id = await task_service.resolve_task_id(task_id)
    task = await task_service.toggle_complete(task_id, False)
    format_success(f"Reopened: {task.title}")


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: str = typer.Argument(..., help="Task ID or suffix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a task."""
    task_service = get_task_service()
    task_id = await task_service.resolve_task_id(task_id)
    task = await task_service.get_task(task_id)

    if not yes and not typer.confirm(f"Delete task '{task.title}'?"):
        format_info("Cancelled")
        raise typer.Exit(0)

    await task_service.delete_task(task_id)
    format_success(f"Task deleted: {task.title}")


@app.command("move")
@command_wrapper(auth_required=True)
async def move_task(
    task_id: str = typer.Argument(..., help="Task ID or suffix"),
    onto: str | None = typer.Option(
        None, "--onto", help="Drop onto another task (ID or suffix), taking its place"
    ),
    category: str | None = typer.Option(
        None, "--category", "-c", help="Target category ('none' for uncategorized)"
    ),
    position: int | None = typer.Option(
        None, "--position", "-p", min=1, help="1-based position in the target category"
    ),
) -> None:
    """Reorder a task within or across categories."""
    if onto is None and category is None and position is None:
        raise ValidationError("Give --onto, or --category and/or --position")
    if onto is not None and (category is not None or position is not None):
        raise ValidationError("--onto cannot be combined with --category or --position")

    errors: list[str] = []
    coordinator = get_reorder_coordinator(on_error=errors.append)
    tasks = await coordinator.load()

    task_service = get_task_service()
    task_id = await task_service.resolve_task_id(task_id)

    if onto is not None:
        over_id = await task_service.resolve_task_id(onto)
        saved = await coordinator.drag_end(DragEnd(active_id=task_id, over_id=over_id))
    else:
        current = next(task for task in tasks if task.id == task_id)
        if category is None:
            target_group = current.group_key
        else:
            target_group = await _resolve_category(category) or UNCATEGORIZED
        saved = await coordinator.move(task_id, target_group, (position or 1) - 1)

    if errors:
        raise ReorderFailedError(errors[-1])
    if not saved:
        format_info("Task is already in that position")
        return

    moved = next(task for task in coordinator.tasks if task.id == task_id)
    format_success(f"Moved '{moved.title}' to position {moved.sort_order + 1}")
