"""Background maintenance: daily reset and purge of expired one-off tasks.

``MaintenanceService.run_maintenance`` is one idempotent pass over the completed
tasks. ``MaintenanceScheduler`` feeds it from two independent producers, a
repeating timer and a foreground signal, and keeps only a "last run started"
mark to drop foreground triggers that arrive right after a run.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime

from checklist_cli.models import TaskFilters, TaskUpdate
from checklist_cli.repositories import TaskRepository
from checklist_cli.utils.clock import Clock
from checklist_cli.utils.logger import get_logger
from checklist_cli.utils.recurrence import should_auto_delete, should_reset_daily

logger = get_logger(__name__)

RefreshCallback = Callable[[], Awaitable[None]]

TRIGGER_START = "start"
TRIGGER_TIMER = "timer"
TRIGGER_FOREGROUND = "foreground"
TRIGGER_MANUAL = "manual"


@dataclass
class MaintenanceReport:
    """Outcome of one maintenance pass."""

    started_at: datetime
    trigger: str = TRIGGER_MANUAL
    reset_ids: list[str] = field(default_factory=list)
    deleted_ids: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def changed(self) -> bool:
        return bool(self.reset_ids or self.deleted_ids)


class MaintenanceService:
    """Reopen yesterday's daily tasks and delete expired one-off tasks.

    Store failures never escape: they are logged and recorded on the report,
    and the next pass retries naturally because the rules are re-evaluated.
    The reset batch and the delete batch are independent, so one failing does
    not prevent the other.

    Args:
        task_repository: Store holding the tasks
        clock: Source of "now" in the user's zone
        on_refresh: Awaited after each batch that changed something, so the
            caller can reload its view
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        clock: Clock,
        *,
        on_refresh: RefreshCallback | None = None,
    ):
        self.repository = task_repository
        self.clock = clock
        self.on_refresh = on_refresh

    async def run_maintenance(self, trigger: str = TRIGGER_MANUAL) -> MaintenanceReport:
        now = self.clock.now()
        report = MaintenanceReport(started_at=now, trigger=trigger)

        try:
            completed = await self.repository.list_all(TaskFilters(status="completed"))
        except Exception as e:
            logger.error("Maintenance (%s) could not load completed tasks: %s", trigger, e)
            report.errors.append(f"load: {e}")
            return report

        to_reset = [
            task.id
            for task in completed
            if should_reset_daily(task.completed_at, task.pattern, now)
        ]
        to_delete = [
            task.id
            for task in completed
            if should_auto_delete(task.completed_at, task.pattern, now)
        ]

        if to_reset:
            try:
                await self.repository.bulk_update(to_reset, TaskUpdate(completed_at=None))
            except Exception as e:
                logger.error("Error resetting %d daily tasks: %s", len(to_reset), e)
                report.errors.append(f"reset: {e}")
            else:
                report.reset_ids = to_reset
                logger.info("Reset %d daily recurring task(s)", len(to_reset))
                await self._refresh(report)

        if to_delete:
            try:
                await self.repository.bulk_delete(to_delete)
            except Exception as e:
                logger.error("Error deleting %d expired tasks: %s", len(to_delete), e)
                report.errors.append(f"delete: {e}")
            else:
                report.deleted_ids = to_delete
                logger.info("Deleted %d old completed task(s)", len(to_delete))
                await self._refresh(report)

        return report

    async def _refresh(self, report: MaintenanceReport) -> None:
        if self.on_refresh is None:
            return
        try:
            await self.on_refresh()
        except Exception as e:
            logger.error("Refresh after maintenance failed: %s", e)
            report.errors.append(f"refresh: {e}")


class MaintenanceScheduler:
    """Run maintenance at start, on a timer and when the app regains focus.

    Runs may overlap; each is an independent task and superseded runs are
    never cancelled. Timer ticks always run. A foreground trigger within
    ``foreground_debounce_seconds`` of the previous run start is dropped.
    """

    def __init__(
        self,
        service: MaintenanceService,
        *,
        interval_seconds: float = 300,
        foreground_debounce_seconds: float = 5,
        monotonic: Callable[[], float] = time.monotonic,
        on_report: Callable[[MaintenanceReport], None] | None = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.service = service
        self.interval_seconds = interval_seconds
        self.foreground_debounce_seconds = foreground_debounce_seconds
        self._monotonic = monotonic
        self._on_report = on_report

        self.last_run_started: float | None = None
        self.runs_started = 0
        self._timer_task: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    def start(self) -> None:
        """Run once now, then every ``interval_seconds``. Needs a running loop."""
        if self.running:
            return
        logger.info(
            "Maintenance scheduler started (every %ss, debounce %ss)",
            self.interval_seconds,
            self.foreground_debounce_seconds,
        )
        self._launch(TRIGGER_START)
        self._timer_task = asyncio.get_running_loop().create_task(self._tick())

    def notify_foreground(self) -> bool:
        """Visibility-regained trigger.

        Returns:
            True if a run was launched, False if it was debounced
        """
        now = self._monotonic()
        if (
            self.last_run_started is not None
            and now - self.last_run_started < self.foreground_debounce_seconds
        ):
            logger.debug("Foreground trigger dropped (%.1fs since last run)", now - self.last_run_started)
            return False
        self._launch(TRIGGER_FOREGROUND)
        return True

    async def stop(self) -> None:
        """Cancel the timer and wait for runs already in flight."""
        if self._timer_task is not None:
            self._timer_task.cancel()
            try:
                await self._timer_task
            except asyncio.CancelledError:
                pass
            self._timer_task = None
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        logger.info("Maintenance scheduler stopped after %d runs", self.runs_started)

    async def wait_idle(self) -> None:
        """Wait until no run is in flight."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self._launch(TRIGGER_TIMER)

    def _launch(self, trigger: str) -> asyncio.Task:
        self.last_run_started = self._monotonic()
        self.runs_started += 1
        task = asyncio.get_running_loop().create_task(self._run(trigger))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _run(self, trigger: str) -> MaintenanceReport:
        report = await self.service.run_maintenance(trigger)
        if self._on_report is not None:
            self._on_report(report)
        return report


def get_maintenance_service(on_refresh: RefreshCallback | None = None) -> MaintenanceService:
    """Factory function to get a MaintenanceService for the active context."""
    from checklist_cli.services.config_service import get_config_service

    config_service = get_config_service()
    return MaintenanceService(
        config_service.storage_strategy_context.task_repository,
        config_service.get_clock(),
        on_refresh=on_refresh,
    )
