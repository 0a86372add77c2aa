"""Main entry point for Checklist CLI."""

import typer

from checklist_cli import __version__
from checklist_cli.commands import auth, categories, config, maintenance, tasks
from checklist_cli.utils.typer_helpers import SuggestingGroup
from checklist_cli.utils.ui.console import get_console

app = typer.Typer(
    name="checklist",
    cls=SuggestingGroup,
    help="A categorized checklist with recurring tasks, local or remote",
    no_args_is_help=True,
)

console = get_console()

app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(categories.app, name="categories", help="Category management commands")
app.add_typer(maintenance.app, name="maintenance", help="Daily reset and cleanup")
app.add_typer(config.app, name="config", help="Configuration management")
app.add_typer(auth.app, name="auth", help="Authentication commands")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Checklist CLI[/bold] version [cyan]{__version__}[/cyan]")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
