"""
Tests for CLI commands.
"""

import pytest
import yaml
from typer.testing import CliRunner

from cycleshift import __version__
from cycleshift.cli.app import app
from cycleshift.cli.commands import cycle as cycle_commands
from cycleshift.exceptions import FunifierAPIError
from cycleshift.models.cycle import CycleRun, JobExecutionResult, RunStatus
from cycleshift.workflows.loader import load_default_workflow


runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run every command in an empty directory without Funifier credentials."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CYCLESHIFT_FUNIFIER__BASIC_TOKEN", raising=False)
    monkeypatch.delenv("CYCLESHIFT_CYCLE__WORKFLOW_FILE", raising=False)


@pytest.fixture
def with_token(monkeypatch):
    monkeypatch.setenv("CYCLESHIFT_FUNIFIER__BASIC_TOKEN", "Basic dGVzdA==")


def finished_run(status: RunStatus):
    steps = load_default_workflow().build_steps()
    return CycleRun(total_steps=len(steps), steps=steps, status=status)


class TestGlobalFlags:
    """Tests for global CLI flags."""

    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "cycleshift" in result.stdout
        assert __version__ in result.stdout

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Funifier cycle change orchestrator" in result.stdout

    def test_global_flags_exist(self):
        result = runner.invoke(app, ["--help"])
        assert "--quiet" in result.stdout
        assert "--debug" in result.stdout
        assert "--no-color" in result.stdout


class TestCycleCommands:
    """Tests for cycle subcommands."""

    def test_cycle_help(self):
        result = runner.invoke(app, ["cycle", "--help"])
        assert result.exit_code == 0
        assert "plan" in result.stdout
        assert "run" in result.stdout
        assert "logs" in result.stdout

    def test_plan(self):
        result = runner.invoke(app, ["cycle", "plan"])
        assert result.exit_code == 0
        assert "cycle_change" in result.stdout

    def test_plan_invalid_workflow_file(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("name: broken\nsteps: oops\n", encoding="utf-8")
        (tmp_path / "cycleshift.yaml").write_text(
            yaml.dump({"cycle": {"workflow_file": str(path)}}), encoding="utf-8"
        )

        result = runner.invoke(app, ["cycle", "plan"])

        assert result.exit_code == 1

    def test_run_requires_credentials(self):
        result = runner.invoke(app, ["cycle", "run", "--yes"])
        assert result.exit_code == 1
        assert "credentials" in result.stdout

    def test_run_asks_for_confirmation(self, with_token, monkeypatch):
        called = []

        async def fake_run(config, definition):
            called.append(True)

        monkeypatch.setattr(cycle_commands, "run_cycle_change", fake_run)

        result = runner.invoke(app, ["cycle", "run"], input="n\n")

        assert result.exit_code == 1
        assert "Start the cycle change?" in result.stdout
        assert called == []

    def test_run_completed(self, with_token, monkeypatch):
        received = {}

        async def fake_run(config, definition):
            received["config"] = config
            return finished_run(RunStatus.COMPLETED)

        monkeypatch.setattr(cycle_commands, "run_cycle_change", fake_run)

        result = runner.invoke(
            app, ["cycle", "run", "--yes", "--settle-delay", "0", "--validation-timeout", "3"]
        )

        assert result.exit_code == 0
        assert received["config"].cycle.settle_delay == 0
        assert received["config"].cycle.validation_timeout == 3

    def test_run_failed_exits_nonzero(self, with_token, monkeypatch):
        async def fake_run(config, definition):
            run = finished_run(RunStatus.FAILED)
            run.steps[0].mark_running()
            run.steps[0].job_result = JobExecutionResult(success=False, message="Scheduler not found")
            run.steps[0].mark_failed()
            return run

        monkeypatch.setattr(cycle_commands, "run_cycle_change", fake_run)

        result = runner.invoke(app, ["cycle", "run", "--yes"])

        assert result.exit_code == 1
        assert "Scheduler not found" in result.stdout

    def test_logs(self, monkeypatch):
        async def fake_fetch(config, job_id, limit):
            return [{"time": 1_700_000_000_000, "status": "OK", "message": "done"}]

        monkeypatch.setattr(cycle_commands, "fetch_job_logs", fake_fetch)

        result = runner.invoke(app, ["cycle", "logs", "job-1", "--limit", "5"])

        assert result.exit_code == 0
        assert "done" in result.stdout

    def test_logs_api_error(self, monkeypatch):
        async def fake_fetch(config, job_id, limit):
            raise FunifierAPIError("get_scheduler_logs:job-1", "Unauthorized", 401)

        monkeypatch.setattr(cycle_commands, "fetch_job_logs", fake_fetch)

        result = runner.invoke(app, ["cycle", "logs", "job-1"])

        assert result.exit_code == 1


class TestConfigCommands:
    """Tests for config subcommands."""

    def test_config_help(self):
        result = runner.invoke(app, ["config", "--help"])
        assert result.exit_code == 0
        assert "show" in result.stdout
        assert "validate" in result.stdout
        assert "env" in result.stdout
        assert "init" in result.stdout

    def test_config_show(self):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "Settle Delay" in result.stdout

    def test_config_env(self):
        result = runner.invoke(app, ["config", "env"])
        assert result.exit_code == 0
        assert "Environment Variables" in result.stdout

    def test_config_validate_without_token(self):
        result = runner.invoke(app, ["config", "validate"])
        assert result.exit_code == 1

    def test_config_validate_with_token(self, with_token):
        result = runner.invoke(app, ["config", "validate"])
        assert result.exit_code == 0

    def test_config_init(self, tmp_path):
        path = tmp_path / "cycleshift.yaml"

        result = runner.invoke(app, ["config", "init", "--output", str(path)])

        assert result.exit_code == 0
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["funifier"]["locked_item_id"] == "E6F0MJ3"
        assert "basic_token" not in data["funifier"]
        assert data["cycle"]["settle_delay"] == 5
