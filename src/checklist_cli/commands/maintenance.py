"""Maintenance commands: daily reset and purge of expired tasks."""

import asyncio
import signal

import typer

from checklist_cli.services.config_service import get_config_service
from checklist_cli.services.maintenance_service import (
    TRIGGER_MANUAL,
    MaintenanceScheduler,
    get_maintenance_service,
)
from checklist_cli.utils import exit_codes
from checklist_cli.utils.logger import get_logger
from checklist_cli.utils.typer_helpers import SuggestingGroup
from checklist_cli.utils.ui.console import get_console
from checklist_cli.utils.ui.formatters import (
    format_info,
    format_maintenance_report,
    format_output,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Background maintenance commands")
console = get_console()
logger = get_logger(__name__)

# Signals treated as "the app came back to the foreground".
FOREGROUND_SIGNALS = ("SIGUSR1", "SIGCONT")
STOP_SIGNALS = ("SIGINT", "SIGTERM")


@app.command("run")
@command_wrapper
async def run_maintenance(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Run one maintenance pass now."""
    report = await get_maintenance_service().run_maintenance(TRIGGER_MANUAL)

    if output in ("json", "yaml"):
        format_output(
            {
                "started_at": report.started_at.isoformat(),
                "trigger": report.trigger,
                "reset_ids": report.reset_ids,
                "deleted_ids": report.deleted_ids,
                "errors": report.errors,
            },
            output,
        )
    else:
        format_maintenance_report(report)

    if not report.ok:
        raise typer.Exit(exit_codes.ERROR_NETWORK)


@app.command("watch")
@command_wrapper
async def watch(
    interval: float | None = typer.Option(
        None, "--interval", "-i", min=0.1, help="Seconds between timer runs"
    ),
    duration: float | None = typer.Option(
        None, "--duration", min=0, help="Stop after this many seconds"
    ),
) -> None:
    """Run maintenance on a timer until interrupted.

    Send SIGUSR1 (or resume with SIGCONT) to trigger a foreground run.
    """
    settings = get_config_service().config.maintenance
    scheduler = MaintenanceScheduler(
        get_maintenance_service(),
        interval_seconds=interval or settings.interval_seconds,
        foreground_debounce_seconds=settings.foreground_debounce_seconds,
        on_report=format_maintenance_report,
    )

    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    installed = _install_signal_handlers(loop, scheduler, stop)

    format_info(
        f"Watching (every {scheduler.interval_seconds:g}s); press Ctrl+C to stop"
    )
    scheduler.start()
    try:
        if duration is None:
            await stop.wait()
        else:
            try:
                await asyncio.wait_for(stop.wait(), timeout=duration)
            except asyncio.TimeoutError:
                pass
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        await scheduler.stop()

    format_info(f"Stopped after {scheduler.runs_started} run(s)")


def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    scheduler: MaintenanceScheduler,
    stop: asyncio.Event,
) -> list[signal.Signals]:
    installed = []
    handlers = [(name, scheduler.notify_foreground) for name in FOREGROUND_SIGNALS]
    handlers += [(name, stop.set) for name in STOP_SIGNALS]
    for name, callback in handlers:
        sig = getattr(signal, name, None)
        if sig is None:
            continue
        try:
            loop.add_signal_handler(sig, callback)
        except (NotImplementedError, RuntimeError, ValueError):
            logger.debug("Cannot handle %s on this platform", name)
            continue
        installed.append(sig)
    return installed
