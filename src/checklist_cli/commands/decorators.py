"""Decorators for command functions."""

import asyncio
import functools
import time
import traceback
from collections.abc import Callable

import typer

from checklist_cli.exceptions import ChecklistError
from checklist_cli.utils.logger import get_logger
from checklist_cli.utils.ui.formatters import format_error


def _require_auth() -> None:
    """Refuse to run when the active context has no session.

    Local contexts always have one.
    """
    from checklist_cli.services.auth_service import get_auth_service

    get_auth_service().require_session()


async def _run_async(func: Callable, *args, **kwargs):
    """Await *func*, then close the store opened on this event loop."""
    from checklist_cli.services.config_service import close_storage_strategy_context

    try:
        return await func(*args, **kwargs)
    finally:
        await close_storage_strategy_context()


def command_wrapper(_func: Callable | None = None, *, auth_required: bool = False):
    """Run a sync or async command and turn errors into exit codes.

    ``ChecklistError`` prints its message and exits with its ``exit_code``;
    anything else is logged with a traceback and exits 1.
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            cmd = func.__name__
            start = time.monotonic()
            logger.info("command started: %s", cmd)
            try:
                if auth_required:
                    _require_auth()

                if asyncio.iscoroutinefunction(func):
                    result = asyncio.run(_run_async(func, *args, **kwargs))
                else:
                    result = func(*args, **kwargs)

                logger.info("command completed: %s (%.3fs)", cmd, time.monotonic() - start)
                return result

            except ChecklistError as e:
                logger.error(
                    "command failed: %s (%.3fs) - %s",
                    cmd,
                    time.monotonic() - start,
                    e,
                )
                format_error(str(e))
                raise typer.Exit(code=e.exit_code) from e

            except (typer.Exit, typer.Abort):
                raise

            except Exception as e:
                logger.error(
                    "command failed: %s (%.3fs) - %s\n%s",
                    cmd,
                    time.monotonic() - start,
                    e,
                    traceback.format_exc(),
                )
                format_error(f"An unexpected error occurred: {e}")
                raise typer.Exit(code=1) from e

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)
