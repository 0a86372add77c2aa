"""Authentication commands for remote contexts."""

import typer

from checklist_cli.services.auth_service import get_auth_service
from checklist_cli.utils.typer_helpers import SuggestingGroup
from checklist_cli.utils.ui.console import get_console
from checklist_cli.utils.ui.formatters import format_info, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Authentication - login, logout, status")
console = get_console()


@app.command("login")
@command_wrapper
def login(
    token: str = typer.Option(..., "--token", prompt=True, hide_input=True, help="Access token"),
    user_id: str = typer.Option(..., "--user-id", prompt="User ID", help="User ID the token belongs to"),
) -> None:
    """Store credentials for the active remote context."""
    session = get_auth_service().login(token, user_id)
    format_success(f"Logged in to '{session.context_name}' as {session.user_id}")


@app.command("logout")
@command_wrapper
def logout() -> None:
    """Forget credentials for the active context."""
    auth_service = get_auth_service()
    context_name = auth_service.config_service.config.current_context_name
    if auth_service.logout():
        format_success(f"Logged out of '{context_name}'")
    else:
        format_info(f"No stored credentials for '{context_name}'")


@app.command("status")
@command_wrapper
def status(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Show whether the active context has a session."""
    auth_service = get_auth_service()
    context = auth_service.config_service.get_current_context()
    session = auth_service.current_session()
    format_output(
        {
            "context": context.name,
            "type": context.type,
            "authenticated": session is not None,
            "user_id": session.user_id if session else None,
        },
        output,
    )
