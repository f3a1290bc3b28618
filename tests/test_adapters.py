"""
Tests for adapters and the asset-build step that drives them.
"""

from pathlib import Path

import pytest

from civicrm_provisioner.adapters.base import ExecutionContext
from civicrm_provisioner.adapters.mock import MockAdapter
from civicrm_provisioner.adapters.shell.command import ShellCommandAdapter
from civicrm_provisioner.core.errors import SubprocessError
from civicrm_provisioner.core.models.action import Action, Receipt
from civicrm_provisioner.core.observability.progress import ProgressReporter
from civicrm_provisioner.core.services.asset_build import (
    ASSET_BUILD_ACTION,
    run_asset_build,
)

# ── Mock Adapter Tests ───────────────────────────────────────────────


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter(adapter_name="test-mock")
        ctx = ExecutionContext(action=Action(id="op-1", adapter="test-mock"))
        receipt = mock.execute(ctx)
        assert receipt.ok
        assert receipt.metadata["mock"] is True
        assert mock.call_count == 1

    def test_custom_response(self):
        mock = MockAdapter()
        mock.set_response(
            "op-1",
            Receipt.success(adapter="mock", action_id="op-1", output="custom"),
        )
        receipt = mock.execute(ExecutionContext(action=Action(id="op-1", adapter="mock")))
        assert receipt.output == "custom"

    def test_set_failure(self):
        mock = MockAdapter()
        mock.set_failure("op-fail", error="Intentional failure")
        receipt = mock.execute(ExecutionContext(action=Action(id="op-fail", adapter="mock")))
        assert receipt.failed
        assert receipt.error == "Intentional failure"

    def test_unavailable(self):
        assert not MockAdapter(available=False).is_available()

    def test_repr(self):
        assert "mock" in repr(MockAdapter())


# ── Shell Adapter Tests ──────────────────────────────────────────────


class TestShellCommandAdapter:
    def _ctx(self, command: str, cwd: Path, **params) -> ExecutionContext:
        return ExecutionContext(
            action=Action(id="cmd", adapter="shell", params={"command": command, **params}),
            working_dir=str(cwd),
        )

    def test_is_available(self):
        assert ShellCommandAdapter().is_available()

    def test_runs_in_working_dir(self, tmp_path: Path):
        receipt = ShellCommandAdapter().execute(self._ctx("pwd", tmp_path))
        assert receipt.ok
        assert Path(receipt.output).resolve() == tmp_path.resolve()

    def test_nonzero_exit(self, tmp_path: Path):
        receipt = ShellCommandAdapter().execute(self._ctx("exit 3", tmp_path))
        assert receipt.failed
        assert receipt.error == "Command exited with code 3"
        assert receipt.metadata["return_code"] == 3

    def test_stderr_is_error(self, tmp_path: Path):
        receipt = ShellCommandAdapter().execute(self._ctx("echo broken >&2; exit 1", tmp_path))
        assert receipt.error == "broken"

    def test_timeout(self, tmp_path: Path):
        receipt = ShellCommandAdapter().execute(self._ctx("sleep 5", tmp_path, timeout=0.2))
        assert receipt.failed
        assert "timed out" in receipt.error

    def test_validate(self, tmp_path: Path):
        adapter = ShellCommandAdapter()
        assert adapter.validate(self._ctx("true", tmp_path)) == (True, "")
        valid, error = adapter.validate(self._ctx("", tmp_path))
        assert not valid and "command" in error
        valid, error = adapter.validate(self._ctx("true", tmp_path / "missing"))
        assert not valid and "does not exist" in error


# ── Asset Build ──────────────────────────────────────────────────────


class TestRunAssetBuild:
    def test_runs_command_in_package(self, package_path: Path):
        mock = MockAdapter()
        receipt = run_asset_build(package_path, "bower install", adapter=mock)

        assert receipt.ok
        ctx = mock.call_log[0]
        assert ctx.action.id == ASSET_BUILD_ACTION
        assert ctx.action.params["command"] == "bower install"
        assert ctx.working_dir == str(package_path)

    def test_progress_message(self, package_path: Path):
        lines: list[str] = []
        run_asset_build(
            package_path, "bower install",
            adapter=MockAdapter(),
            reporter=ProgressReporter(write=lines.append),
        )
        assert lines == ["> [civicrm-provisioner] Running bower for CiviCRM..."]

    def test_output_shown_when_verbose(self, package_path: Path):
        lines: list[str] = []
        run_asset_build(
            package_path, "bower install",
            adapter=MockAdapter(default_output="bower ok"),
            reporter=ProgressReporter(write=lines.append, verbose=True),
        )
        assert "> [civicrm-provisioner] bower ok" in lines

    def test_failure_raises(self, package_path: Path):
        mock = MockAdapter()
        mock.set_failure(ASSET_BUILD_ACTION, error="bower: not found")
        with pytest.raises(SubprocessError, match="bower: not found"):
            run_asset_build(package_path, "bower install", adapter=mock)

    def test_missing_package_dir_raises(self, tmp_path: Path):
        with pytest.raises(SubprocessError, match="Cannot run"):
            run_asset_build(tmp_path / "missing", "bower install")

    def test_unavailable_adapter_raises(self, package_path: Path):
        mock = MockAdapter(available=False)
        with pytest.raises(SubprocessError, match="not available"):
            run_asset_build(package_path, "bower install", adapter=mock)
        assert mock.call_count == 0

    def test_empty_command_skips(self, package_path: Path):
        mock = MockAdapter()
        receipt = run_asset_build(package_path, "  ", adapter=mock)
        assert receipt.status == "skipped"
        assert mock.call_count == 0

    def test_real_shell(self, package_path: Path):
        receipt = run_asset_build(package_path, "test -f bower.json")
        assert receipt.ok

    def test_real_shell_failure(self, package_path: Path):
        with pytest.raises(SubprocessError, match="failed in"):
            run_asset_build(package_path, "test -f missing.json")
