"""Output formatters for different formats."""

import json
from datetime import datetime
from typing import Any

import yaml
from rich.table import Table
from rich.text import Text

from checklist_cli.models import UNCATEGORIZED, Category, Task
from checklist_cli.utils.dates import format_due, format_time_block, is_task_overdue
from checklist_cli.utils.ordering import build_groups
from checklist_cli.utils.recurrence import describe_recurrence
from checklist_cli.utils.task_helpers import calculate_unique_suffixes
from checklist_cli.utils.ui.console import get_console

console = get_console()

STATUS_ICONS = {
    "open": "⬜",
    "completed": "☑️",
}

RECURRENCE_ICON = "🔄"
UNCATEGORIZED_TITLE = "Uncategorized"


def format_output(data: Any, output_format: str = "pretty", compact: bool = False) -> None:
    """Format and display generic output (dicts/lists) based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.dump(json.loads(json.dumps(data, default=str)), default_flow_style=False, sort_keys=False))
    elif isinstance(data, list):
        format_dict_table(data)
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def format_dict_table(items: list[dict]) -> None:
    """Format a list of dictionaries as a table."""
    if not items:
        console.print("[yellow]No items found[/yellow]")
        return

    columns = list(items[0].keys())
    table = Table(show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(col.replace("_", " ").title())

    for item in items:
        table.add_row(*(_cell(item.get(col)) for col in columns))

    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        table.add_row(key.replace("_", " ").title(), _cell(value))

    console.print(table)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, dict):
        return ", ".join(f"{k}={v}" for k, v in value.items())
    if value is None:
        return "-"
    return str(value)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


# ============================================================================
# Checklist rendering
# ============================================================================


def task_to_dict(task: Task) -> dict:
    """JSON-friendly representation of a task."""
    data = task.model_dump(mode="json", exclude={"category", "recurrence"})
    data["pattern"] = task.pattern.value
    data["weekly_day"] = task.weekly_day
    data["category_name"] = task.category.name if task.category else None
    return data


def format_checklist(
    tasks: list[Task],
    categories: list[Category],
    now: datetime,
    *,
    compact: bool = False,
    flat: bool = False,
) -> None:
    """Render tasks grouped by category in manual order.

    With *flat*, tasks are printed as one list in the given order instead.
    """
    open_count = sum(1 for task in tasks if not task.is_completed)
    header = Text()
    header.append("📋 Checklist ", style="bold cyan")
    header.append(f"({open_count} open, {len(tasks) - open_count} done)", style="dim")
    console.print(header)
    console.print()

    if not tasks:
        console.print("[yellow]No tasks found[/yellow]")
        return

    suffixes = calculate_unique_suffixes([task.id for task in tasks])

    if flat:
        for task in tasks:
            format_task_item(task, now, compact=compact, indent="  ", suffix=suffixes[task.id])
        return

    by_id = {task.id: task for task in tasks}
    groups = build_groups(tasks)
    titles = {category.id: category.name for category in categories}
    order = [category.id for category in categories if category.id in groups]
    order += sorted(key for key in groups if key not in titles and key != UNCATEGORIZED)
    if UNCATEGORIZED in groups:
        order.append(UNCATEGORIZED)

    for key in order:
        members = groups[key]
        title = UNCATEGORIZED_TITLE if key == UNCATEGORIZED else titles.get(key, key)
        console.print(f"📁 {title} ({len(members)})", style="bold blue")
        for task_id in members:
            format_task_item(by_id[task_id], now, compact=compact, indent="  ", suffix=suffixes[task_id])
        console.print()


def format_task_item(
    task: Task,
    now: datetime,
    *,
    compact: bool = False,
    indent: str = "",
    suffix: str | None = None,
) -> None:
    """Format a single task line plus an optional metadata line."""
    icon = STATUS_ICONS["completed" if task.is_completed else "open"]
    line = Text(f"{indent}{icon} ")
    line.append(task.title, style="dim strike" if task.is_completed else "")

    if task.pattern.value != "none":
        line.append(f"  {RECURRENCE_ICON} {describe_recurrence(task.pattern, task.weekly_day)}", style="magenta")

    overdue = not task.is_completed and is_task_overdue(task.due_date, task.due_time, now)
    due = format_due(task.due_date, task.due_time)

    if compact:
        if due:
            line.append(f" • {due}", style="bold red" if overdue else "cyan")
        line.append(f"  #{suffix or task.id[-6:]}", style="dim")
        console.print(line)
        return

    console.print(line)

    meta: list[tuple[str, str]] = []
    if due:
        meta.append((f"Overdue: {due}" if overdue else due, "bold red" if overdue else "cyan"))
    block = format_time_block(task.start_time, task.end_time)
    if block:
        meta.append((block, "yellow"))
    if task.notes:
        meta.append((task.notes if len(task.notes) <= 40 else task.notes[:39] + "…", "white"))
    meta.append((f"#{suffix or task.id[-6:]}", "dim"))

    meta_line = Text()
    meta_line.append(f"{indent}   └─ ", style="dim")
    for i, (text, style) in enumerate(meta):
        if i > 0:
            meta_line.append(" • ", style="dim")
        meta_line.append(text, style=style)
    console.print(meta_line)


def format_categories(categories: list[Category], counts: dict[str, int]) -> None:
    """Table of categories with their task counts."""
    if not categories:
        console.print("[yellow]No categories yet[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Color")
    table.add_column("Tasks", justify="right")
    for category in categories:
        color = category.color or "-"
        name = Text(category.name, style=category.color) if category.color else Text(category.name)
        table.add_row(category.id, name, color, str(counts.get(category.id, 0)))
    console.print(table)


def format_maintenance_report(report: Any) -> None:
    """One-line summary of a maintenance pass."""
    parts = [
        f"reset {len(report.reset_ids)} daily",
        f"deleted {len(report.deleted_ids)} expired",
    ]
    stamp = report.started_at.strftime("%Y-%m-%d %H:%M:%S")
    if report.errors:
        format_warning(f"[{stamp}] Maintenance ({report.trigger}): {', '.join(parts)}; errors: {'; '.join(report.errors)}")
    else:
        format_info(f"[{stamp}] Maintenance ({report.trigger}): {', '.join(parts)}")
