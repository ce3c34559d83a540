"""Integration tests for the teardown CLI commands."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from azteardown.cli import main as cli_main
from azteardown.cli.main import app
from azteardown.config import ENV_OVERRIDES
from azteardown.models.teardown_operation import OperationStatus, TeardownOperation
from azteardown.teardown.audit import AuditStorage
from tests.fixtures.cloud import PENDING_FOREVER, FakeCloud


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def audit_dir(tmp_path: Path) -> Path:
    return tmp_path / "audit-logs"


@pytest.fixture
def config_file(tmp_path: Path, audit_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Write an isolated config with fast polling."""
    for env_var in ENV_OVERRIDES:
        monkeypatch.delenv(env_var, raising=False)

    path = tmp_path / "config.yaml"
    path.write_text(f"delete_timeout: 5\npoll_interval: 0.01\naudit_dir: {audit_dir}\n")
    return path


@pytest.fixture
def cloud() -> FakeCloud:
    """Fake cloud with a managed-disk VM (no storage account cleanup)."""
    cloud = FakeCloud()
    cloud.add_vm(storage_account=None)
    return cloud


def invoke(runner: CliRunner, config_file: Path, cloud: FakeCloud, *args: str, **kwargs):
    with patch("azteardown.cli.main.create_arm_api", return_value=cloud.api) as mock_api:
        result = runner.invoke(
            app,
            ["--config", str(config_file), "--subscription", "sub-123", *args],
            **kwargs,
        )
    return result, mock_api


class TestTeardownCommand:
    """Integration tests for `azteardown teardown`."""

    def test_teardown_success(self, runner: CliRunner, config_file: Path, cloud: FakeCloud, audit_dir: Path) -> None:
        """Test a full teardown deletes everything and writes an audit log."""
        result, mock_api = invoke(runner, config_file, cloud, "teardown", "eastus/vm1", "--yes")

        assert result.exit_code == 0, result.output
        mock_api.assert_called_once_with("sub-123")
        assert cloud.deletes() == [
            ("virtual-machine", "vm1"),
            ("network-interface", "nic1"),
            ("public-ip-address", "ip1"),
            ("resource-group", "eastus"),
        ]
        assert "Teardown of eastus/vm1 complete" in result.output
        assert "was empty and has been deleted" in result.output

        operations = AuditStorage(str(audit_dir)).query_operations()
        assert len(operations) == 1
        assert operations[0]["operation"]["status"] == "completed"

    def test_teardown_absent_vm(self, runner: CliRunner, config_file: Path) -> None:
        """Test an absent VM is a successful no-op."""
        cloud = FakeCloud()

        result, _ = invoke(runner, config_file, cloud, "teardown", "eastus/vm1", "--yes")

        assert result.exit_code == 0, result.output
        assert "nothing to do" in result.output
        assert cloud.deletes() == []

    def test_teardown_confirmation_declined(self, runner: CliRunner, config_file: Path, cloud: FakeCloud) -> None:
        """Test declining the prompt aborts without deleting."""
        result, _ = invoke(runner, config_file, cloud, "teardown", "eastus/vm1", input="n\n")

        assert result.exit_code == 1
        assert "Aborted" in result.output
        assert cloud.deletes() == []

    def test_teardown_invalid_id(self, runner: CliRunner, config_file: Path, cloud: FakeCloud) -> None:
        result, mock_api = invoke(runner, config_file, cloud, "teardown", "vm1", "--yes")

        assert result.exit_code == 1
        assert "Invalid resource id" in result.output
        mock_api.assert_not_called()

    def test_teardown_requires_subscription(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "teardown", "eastus/vm1", "--yes"])

        assert result.exit_code == 1
        assert "No Azure subscription" in result.output

    def test_teardown_invalid_timeout(self, runner: CliRunner, config_file: Path, cloud: FakeCloud) -> None:
        result, _ = invoke(runner, config_file, cloud, "teardown", "eastus/vm1", "--yes", "--timeout", "0")

        assert result.exit_code == 1
        assert "--timeout must be positive" in result.output

    def test_teardown_timeout_exit_code(self, runner: CliRunner, config_file: Path, cloud: FakeCloud) -> None:
        """Test a deletion timeout exits with code 2."""
        cloud.virtual_machines.delete_results["vm1"] = PENDING_FOREVER

        result, _ = invoke(runner, config_file, cloud, "teardown", "eastus/vm1", "--yes", "--timeout", "0.05")

        assert result.exit_code == 2
        assert "Timed out" in result.output
        assert cloud.deletes() == [("virtual-machine", "vm1")]

    def test_teardown_root_failure_exit_code(self, runner: CliRunner, config_file: Path, cloud: FakeCloud) -> None:
        """Test a failed VM deletion exits with code 1 after dependent cleanup."""
        cloud.virtual_machines.delete_results["vm1"] = False

        result, _ = invoke(runner, config_file, cloud, "teardown", "eastus/vm1", "--yes")

        assert result.exit_code == 1
        assert "Deletion of virtual machine vm1 failed" in result.output

    def test_teardown_no_wait(self, runner: CliRunner, config_file: Path, cloud: FakeCloud) -> None:
        """Test --no-wait submits the VM delete without polling it."""
        result, _ = invoke(runner, config_file, cloud, "teardown", "eastus/vm1", "--yes", "--no-wait")

        assert result.exit_code == 0, result.output
        assert cloud.handles[0].poll_count == 0

    def test_teardown_no_audit(self, runner: CliRunner, config_file: Path, cloud: FakeCloud, audit_dir: Path) -> None:
        result, _ = invoke(runner, config_file, cloud, "teardown", "eastus/vm1", "--yes", "--no-audit")

        assert result.exit_code == 0, result.output
        assert not audit_dir.exists()


class TestIdCommands:
    """Integration tests for `azteardown id`."""

    def test_encode(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "id", "encode", "eastus", "vm1"])

        assert result.exit_code == 0
        assert "eastus/vm1" in result.output

    def test_decode(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "id", "decode", "eastus/group/vm1"])

        assert result.exit_code == 0
        assert "eastus" in result.output
        assert "group/vm1" in result.output

    def test_decode_invalid(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "id", "decode", "vm1"])

        assert result.exit_code == 1


class TestAuditCommands:
    """Integration tests for `azteardown audit`."""

    def test_list_empty(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "audit", "list"])

        assert result.exit_code == 0
        assert "No teardown operations recorded" in result.output

    def test_list_and_show(
        self,
        runner: CliRunner,
        config_file: Path,
        cloud: FakeCloud,
        audit_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test a recorded teardown is listed and can be shown."""
        monkeypatch.setattr(cli_main.console, "width", 200)
        invoke(runner, config_file, cloud, "teardown", "eastus/vm1", "--yes")
        operation_id = AuditStorage(str(audit_dir)).query_operations()[0]["operation"]["operation_id"]

        listed = runner.invoke(app, ["--config", str(config_file), "audit", "list"])
        shown = runner.invoke(app, ["--config", str(config_file), "audit", "show", operation_id])

        assert listed.exit_code == 0
        assert "eastus/vm1" in listed.output
        assert shown.exit_code == 0
        assert "completed" in shown.output
        assert "nic1" in shown.output

    def test_show_unknown(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "audit", "show", "op_missing"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_list_invalid_date(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "audit", "list", "--since", "yesterday"])

        assert result.exit_code == 1
        assert "Invalid --since date" in result.output

    @pytest.mark.parametrize("option", ["--until", "--since"])
    def test_list_bare_date_includes_whole_day(
        self,
        runner: CliRunner,
        config_file: Path,
        audit_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
        option: str,
    ) -> None:
        """Test a bare date covers operations logged later that same day."""
        monkeypatch.setattr(cli_main.console, "width", 200)
        started = datetime(2026, 10, 19, 15, 30, 0)
        operation = TeardownOperation(
            operation_id="op_same_day",
            resource_id="eastus/vm1",
            scope="eastus",
            started_at=started,
            root_deleted=True,
        )
        operation.finish(OperationStatus.NOOP)
        AuditStorage(str(audit_dir)).log_operation(operation)

        result = runner.invoke(app, ["--config", str(config_file), "audit", "list", option, "2026-10-19"])

        assert result.exit_code == 0, result.output
        assert "op_same_day" in result.output

    def test_list_until_excludes_later_days(self, runner: CliRunner, config_file: Path, audit_dir: Path) -> None:
        operation = TeardownOperation(
            operation_id="op_next_day",
            resource_id="eastus/vm1",
            scope="eastus",
            started_at=datetime(2026, 10, 20, 0, 0, 1),
        )
        operation.finish(OperationStatus.NOOP)
        AuditStorage(str(audit_dir)).log_operation(operation)

        result = runner.invoke(app, ["--config", str(config_file), "audit", "list", "--until", "2026-10-19"])

        assert result.exit_code == 0
        assert "No teardown operations recorded" in result.output


class TestGlobalOptions:
    """Integration tests for the global callback."""

    def test_invalid_log_level_reported_as_config_error(
        self, runner: CliRunner, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a bad log level exits 1 with a configuration message instead of a traceback."""
        monkeypatch.setenv("AZTEARDOWN_LOG_LEVEL", "verbose")

        result = runner.invoke(app, ["--config", str(config_file), "id", "encode", "eastus", "vm1"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert not isinstance(result.exception, ValueError)

    def test_no_wait_help_warns_about_attached_nics(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "teardown", "--help"])

        assert result.exit_code == 0
        assert "NicInUse" in result.output


class TestVersionCommand:
    def test_version(self, runner: CliRunner, config_file: Path) -> None:
        from azteardown import __version__

        result = runner.invoke(app, ["--config", str(config_file), "version"])

        assert result.exit_code == 0
        assert __version__ in result.output
