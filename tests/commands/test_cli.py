"""End-to-end CLI tests against a local SQLite context in tmp_path."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from checklist_cli import __version__
from checklist_cli.main import app
from checklist_cli.services.maintenance_service import MaintenanceService

runner = CliRunner()


@pytest.fixture()
def cli(tmp_config):
    """Invoke the CLI with config and data isolated in tmp_path."""

    def invoke(*args: str, input: str | None = None):
        return runner.invoke(app, list(args), input=input)

    return invoke


def _add(cli, *args: str) -> dict:
    result = cli("tasks", "add", *args, "-o", "json")
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


def _list(cli, *args: str) -> list[dict]:
    result = cli("tasks", "list", "--no-maintenance", "-o", "json", *args)
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestRoot:
    def test_version(self, cli):
        result = cli("version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_typo_suggestion(self, cli):
        result = cli("taks")
        assert result.exit_code == 1
        assert "Did you mean this?" in result.output
        assert "tasks" in result.output


class TestTasks:
    def test_add_then_list(self, cli):
        first = _add(cli, "Buy milk", "--notes", "2 liters")
        second = _add(cli, "Water plants", "--repeat", "weekly", "--day", "wed")

        assert first["sort_order"] == 0
        assert second["sort_order"] == 1
        assert second["pattern"] == "weekly"
        assert second["weekly_day"] == 3

        titles = {task["title"] for task in _list(cli, "--all")}
        assert titles == {"Buy milk", "Water plants"}

    def test_pretty_list(self, cli):
        _add(cli, "Buy milk")
        result = cli("tasks", "list", "--no-maintenance")
        assert result.exit_code == 0
        assert "Buy milk" in result.output
        assert "Uncategorized" in result.output

    def test_complete_and_reopen_by_suffix(self, cli):
        task = _add(cli, "Buy milk")
        suffix = task["id"][-8:]

        result = cli("tasks", "complete", suffix)
        assert result.exit_code == 0
        assert "Completed: Buy milk" in result.output
        assert _list(cli, "--all")[0]["completed_at"] is not None

        result = cli("tasks", "reopen", suffix)
        assert result.exit_code == 0
        assert _list(cli, "--all")[0]["completed_at"] is None

    def test_edit_clears_field(self, cli):
        task = _add(cli, "Buy milk", "--due", "2030-01-01")

        result = cli("tasks", "edit", task["id"], "--due", "none", "--title", "Buy oat milk")
        assert result.exit_code == 0, result.output

        edited = _list(cli, "--all")[0]
        assert edited["title"] == "Buy oat milk"
        assert edited["due_date"] is None

    def test_edit_without_changes(self, cli):
        task = _add(cli, "Buy milk")
        result = cli("tasks", "edit", task["id"])
        assert result.exit_code == 2
        assert "No updates specified" in result.output

    def test_move_to_position(self, cli):
        a = _add(cli, "a")
        _add(cli, "b")
        c = _add(cli, "c")

        result = cli("tasks", "move", c["id"], "--position", "1")
        assert result.exit_code == 0, result.output
        assert "position 1" in result.output

        orders = {task["title"]: task["sort_order"] for task in _list(cli, "--all")}
        assert orders == {"c": 0, "a": 1, "b": 2}

        result = cli("tasks", "move", a["id"], "--onto", a["id"])
        assert result.exit_code == 0
        assert "already in that position" in result.output

    def test_move_into_category(self, cli):
        assert cli("categories", "add", "Work").exit_code == 0
        task = _add(cli, "Report")

        result = cli("tasks", "move", task["id"], "--category", "work")
        assert result.exit_code == 0, result.output

        moved = _list(cli, "--all")[0]
        assert moved["category_name"] == "Work"
        assert moved["sort_order"] == 0

    def test_delete_with_confirmation(self, cli):
        task = _add(cli, "Buy milk")

        result = cli("tasks", "delete", task["id"], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert len(_list(cli, "--all")) == 1

        result = cli("tasks", "delete", task["id"], "-y")
        assert result.exit_code == 0
        assert _list(cli, "--all") == []

    @pytest.mark.parametrize(
        "args",
        [
            ("x", "--day", "mon"),
            ("x", "--due", "whenever"),
            ("x", "--time", "25:00"),
            ("x", "--start", "10:00", "--end", "09:00"),
            ("   ",),
        ],
    )
    def test_invalid_add(self, cli, args):
        result = cli("tasks", "add", *args)
        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_unknown_task(self, cli):
        result = cli("tasks", "complete", "ghost")
        assert result.exit_code == 5
        assert "ghost" in result.output


class TestCategories:
    def test_add_list_delete(self, cli):
        assert cli("categories", "add", "Work", "--color", "blue").exit_code == 0
        _add(cli, "Loose")
        _add(cli, "Report", "--category", "Work")

        result = cli("categories", "list", "-o", "json")
        assert result.exit_code == 0
        [work] = json.loads(result.output)
        assert (work["name"], work["task_count"]) == ("Work", 1)

        result = cli("categories", "delete", "work", "-y")
        assert result.exit_code == 0
        assert "Category deleted: Work" in result.output

        tasks = {task["title"]: task for task in _list(cli, "--all")}
        assert tasks["Report"]["category_id"] is None
        assert tasks["Report"]["sort_order"] == 1

    def test_update_requires_changes(self, cli):
        cli("categories", "add", "Work")
        result = cli("categories", "update", "Work")
        assert result.exit_code == 2

    def test_unknown_category(self, cli):
        result = cli("categories", "delete", "Garden", "-y")
        assert result.exit_code == 5


@pytest.fixture()
def failing_maintenance(clock):
    """A maintenance service whose store cannot load completed tasks."""
    repo = MagicMock()
    repo.list_all = AsyncMock(side_effect=RuntimeError("database is locked"))
    return MaintenanceService(repo, clock)


class TestMaintenance:
    def test_run_reports(self, cli):
        result = cli("maintenance", "run", "-o", "json")
        assert result.exit_code == 0, result.output
        report = json.loads(result.output)
        assert report["trigger"] == "manual"
        assert report["errors"] == []

    def test_run_failure_exits_with_store_error(self, cli, failing_maintenance):
        with patch(
            "checklist_cli.commands.maintenance.get_maintenance_service",
            return_value=failing_maintenance,
        ):
            result = cli("maintenance", "run", "-o", "json")
        assert result.exit_code == 4
        assert "load: database is locked" in result.output

    @pytest.mark.parametrize("fmt", ["pretty", "json"])
    def test_list_hides_maintenance_failure(self, cli, failing_maintenance, fmt):
        _add(cli, "Buy milk")
        with patch(
            "checklist_cli.commands.tasks.get_maintenance_service",
            return_value=failing_maintenance,
        ):
            result = cli("tasks", "list", "-o", fmt)
        assert result.exit_code == 0, result.output
        assert "Buy milk" in result.output
        assert "database is locked" not in result.output
        assert "Maintenance" not in result.output
        failing_maintenance.repository.list_all.assert_awaited_once()

    def test_watch_runs_once_and_stops(self, cli):
        result = cli("maintenance", "watch", "--interval", "60", "--duration", "0.05")
        assert result.exit_code == 0, result.output
        assert "Stopped after 1 run(s)" in result.output

    def test_watch_interval_must_be_positive(self, cli):
        result = cli("maintenance", "watch", "--interval", "0")
        assert result.exit_code == 2


class TestConfigAndAuth:
    def test_set_and_get(self, cli):
        result = cli("config", "set", "maintenance.interval_seconds", "120")
        assert result.exit_code == 0, result.output

        result = cli("config", "get", "maintenance.interval_seconds")
        assert result.exit_code == 0
        assert "120" in result.output

    def test_set_unknown_key(self, cli):
        result = cli("config", "set", "nope", "1")
        assert result.exit_code == 2

    def test_local_status(self, cli):
        result = cli("auth", "status", "-o", "json")
        assert result.exit_code == 0
        status = json.loads(result.output)
        assert status["context"] == "local"
        assert status["authenticated"] is True

    def test_remote_mutation_requires_login(self, cli):
        assert cli("config", "use", "cloud").exit_code == 0

        result = cli("auth", "status", "-o", "json")
        assert json.loads(result.output)["authenticated"] is False

        result = cli("tasks", "add", "x")
        assert result.exit_code == 3
        assert "checklist auth login" in result.output

        result = cli("tasks", "move", "abc", "--position", "1")
        assert result.exit_code == 3
