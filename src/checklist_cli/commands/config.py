"""Configuration management commands."""

import json

import typer

from checklist_cli.exceptions import ValidationError
from checklist_cli.models.config_models import Context
from checklist_cli.services.config_service import get_config_service
from checklist_cli.utils.typer_helpers import SuggestingGroup
from checklist_cli.utils.ui.console import get_console
from checklist_cli.utils.ui.formatters import format_info, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Configuration management commands")
console = get_console()


def _parse_value(value: str):
    """JSON scalars (numbers, true/false, null) are typed; anything else is a string."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


@app.command("show")
@command_wrapper
def show_config(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Show the current configuration."""
    config_service = get_config_service()
    data = config_service.config.model_dump(exclude={"contexts"})
    data["config_path"] = str(config_service.config_path)
    format_output(data, output)


@app.command("get")
@command_wrapper
def get_value(
    key: str = typer.Argument(..., help="Configuration key (e.g., ui.timezone)"),
) -> None:
    """Get a configuration value."""
    console.print(get_config_service().get_value(key))


@app.command("set")
@command_wrapper
def set_value(
    key: str = typer.Argument(..., help="Configuration key (e.g., maintenance.interval_seconds)"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set a configuration value."""
    stored = get_config_service().set_value(key, _parse_value(value))
    format_success(f"Configuration '{key}' set to '{stored}'")


@app.command("reset")
@command_wrapper
def reset_config(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration and stored credentials to defaults."""
    if not yes and not typer.confirm("Reset the entire configuration?"):
        format_info("Cancelled")
        raise typer.Exit(0)
    get_config_service().reset_config()
    format_success("Configuration reset to defaults")


@app.command("contexts")
@command_wrapper
def list_contexts(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """List storage contexts; the active one is marked."""
    config_service = get_config_service()
    current = config_service.config.current_context_name
    rows = [
        {
            "active": ctx.name == current,
            "name": ctx.name,
            "type": ctx.type,
            "source": ctx.source,
            "description": ctx.description,
        }
        for ctx in config_service.list_contexts()
    ]
    format_output(rows, output)


@app.command("use")
@command_wrapper
def use_context(
    name: str = typer.Argument(..., help="Context name"),
) -> None:
    """Switch the active storage context."""
    context = get_config_service().use_context(name)
    format_success(f"Switched to context '{context.name}' ({context.type})")


@app.command("add-context")
@command_wrapper
def add_context(
    name: str = typer.Argument(..., help="Context name"),
    source: str = typer.Argument(..., help="SQLite file path or remote URL"),
    remote: bool = typer.Option(False, "--remote", help="Remote store instead of SQLite"),
    api_key: str | None = typer.Option(None, "--api-key", help="Public API key of the remote store"),
    description: str = typer.Option("", "--description", help="Description"),
) -> None:
    """Register a new storage context."""
    if api_key and not remote:
        raise ValidationError("--api-key only applies to --remote contexts")
    context = Context(
        name=name,
        type="remote" if remote else "local",
        source=source,
        api_key=api_key,
        description=description,
    )
    get_config_service().add_context(context)
    format_success(f"Context '{name}' added")


@app.command("remove-context")
@command_wrapper
def remove_context(
    name: str = typer.Argument(..., help="Context name"),
) -> None:
    """Remove a storage context and its credentials."""
    get_config_service().remove_context(name)
    format_success(f"Context '{name}' removed")
