"""Category management commands."""

import typer

from checklist_cli.exceptions import ValidationError
from checklist_cli.services.category_service import get_category_service
from checklist_cli.services.task_service import get_task_service
from checklist_cli.utils.typer_helpers import SuggestingGroup
from checklist_cli.utils.ui.formatters import (
    format_categories,
    format_info,
    format_output,
    format_success,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Category management commands")


@app.command("list")
@command_wrapper
async def list_categories(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """List categories with their task counts."""
    category_service = get_category_service()
    categories = await category_service.list_categories()
    tasks = await get_task_service().list_tasks(status="all")

    counts: dict[str, int] = {}
    for task in tasks:
        if task.category_id:
            counts[task.category_id] = counts.get(task.category_id, 0) + 1

    if output in ("json", "yaml"):
        format_output(
            [{**c.model_dump(mode="json"), "task_count": counts.get(c.id, 0)} for c in categories],
            output,
        )
        return
    format_categories(categories, counts)


@app.command("add")
@command_wrapper
async def add_category(
    name: str = typer.Argument(..., help="Category name"),
    color: str | None = typer.Option(None, "--color", help="Display color"),
) -> None:
    """Create a new category."""
    category = await get_category_service().create_category(name, color=color)
    format_success(f"Category created: {category.name} ({category.id})")


@app.command("update")
@command_wrapper
async def update_category(
    category_id: str = typer.Argument(..., help="Category name or ID"),
    name: str | None = typer.Option(None, "--name", help="New name"),
    color: str | None = typer.Option(None, "--color", help="New color"),
) -> None:
    """Rename or recolor a category."""
    if name is None and color is None:
        raise ValidationError("No updates specified")

    category_service = get_category_service()
    category_id = await category_service.resolve_category_id(category_id)
    category = await category_service.update_category(category_id, name=name, color=color)
    format_success(f"Category updated: {category.name}")


@app.command("delete")
@command_wrapper
async def delete_category(
    category_id: str = typer.Argument(..., help="Category name or ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a category. Its tasks become uncategorized."""
    category_service = get_category_service()
    category_id = await category_service.resolve_category_id(category_id)
    category = await category_service.get_category(category_id)

    if not yes and not typer.confirm(f"Delete category '{category.name}'? Its tasks are kept."):
        format_info("Cancelled")
        raise typer.Exit(0)

    await category_service.delete_category(category_id)
    format_success(f"Category deleted: {category.name}")
