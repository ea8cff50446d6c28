from __future__ import annotations

import logging
import re
import sys
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from unifi_provisioner.cli import app
from unifi_provisioner.config.resolver import ConfigError
from unifi_provisioner.engine.errors import DanglingDependencyError, ProvisioningCanceled
from unifi_provisioner.engine.types import NodeResult, NodeStatus, ProvisioningReport

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from unifi_provisioner.config.schema import Config

runner = CliRunner()

_IDENTITIES = [
    ("Namespace/unifi", "Namespace"),
    ("Secret/unifi-secret-v3", "Secret"),
    ("ConfigBundle/unifi-db-init", "ConfigBundle"),
    ("VolumeClaim/unifi-data", "VolumeClaim"),
    ("InitJob/unifi-db-init-job-v3", "InitJob"),
    ("Workload/unifi", "Workload"),
]

_OUTPUTS = {"namespace": "unifi", "service": "unifi"}

_OK_REPORT = ProvisioningReport(
    results=[NodeResult(identity=i, kind=k, status=NodeStatus.READY) for i, k in _IDENTITIES],
    outputs=_OUTPUTS,
)

_FAILED_REPORT = ProvisioningReport(
    results=[
        *(NodeResult(identity=i, kind=k, status=NodeStatus.READY) for i, k in _IDENTITIES[:4]),
        NodeResult(
            identity="InitJob/unifi-db-init-job-v3",
            kind="InitJob",
            status=NodeStatus.FAILED,
            error="control plane reports InitJob as failed",
        ),
        NodeResult(
            identity="Workload/unifi",
            kind="Workload",
            blocked_by=["InitJob/unifi-db-init-job-v3"],
        ),
    ],
    outputs=_OUTPUTS,
)


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


@pytest.fixture
def config_path(tmp_path: Path, make_config: Callable[..., Config]) -> str:
    make_config("config:\n  mongoPassword: hunter2\n")
    return str(tmp_path / "config.yaml")


class TestVersion:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "unifi-provisioner" in result.stdout

    def test_short_version_flag(self) -> None:
        result = runner.invoke(app, ["-V"])
        assert result.exit_code == 0
        assert "unifi-provisioner" in result.stdout


class TestPlanCommand:
    def test_shows_order(self, config_path: str) -> None:
        result = runner.invoke(app, ["plan", "--no-color", "--config", config_path])
        assert result.exit_code == 0
        lines = [line.strip() for line in result.stdout.splitlines()]
        assert "1. + Namespace/unifi" in lines
        assert any(line.startswith("6. + Workload/unifi") for line in lines)

    def test_shows_parameter_sources(self, config_path: str) -> None:
        result = runner.invoke(app, ["plan", "--no-color", "-c", config_path])
        assert result.exit_code == 0
        assert re.search(r'storageClass\s+= "truenas-hdd-mirror-nfs" \(default\)', result.stdout)
        assert re.search(r"mongoPassword\s+= \(sensitive value\) \(explicit\)", result.stdout)
        assert "hunter2" not in result.stdout

    def test_manifests_masked(self, config_path: str) -> None:
        result = runner.invoke(app, ["plan", "--no-color", "-c", config_path, "--manifests"])
        assert result.exit_code == 0
        assert "kind: PersistentVolumeClaim" in result.stdout
        assert "kind: Service" in result.stdout
        assert "hunter2" not in result.stdout

    def test_manifests_show_secrets(self, config_path: str) -> None:
        result = runner.invoke(
            app, ["plan", "--no-color", "-c", config_path, "--manifests", "--show-secrets"]
        )
        assert result.exit_code == 0
        assert "hunter2" in result.stdout

    @patch("unifi_provisioner.config.load")
    def test_config_error_exits_1(self, mock_load: MagicMock) -> None:
        mock_load.side_effect = ConfigError("bad config")

        result = runner.invoke(app, ["plan", "--no-color"])
        assert result.exit_code == 1
        assert "Configuration error: bad config" in result.output

    @patch("unifi_provisioner.config.build_graph")
    @patch("unifi_provisioner.config.load")
    def test_graph_error_exits_1(self, mock_load: MagicMock, mock_build: MagicMock) -> None:
        mock_load.return_value = MagicMock()
        mock_build.side_effect = DanglingDependencyError("Workload/unifi", ["InitJob/x"])

        result = runner.invoke(app, ["plan", "--no-color"])
        assert result.exit_code == 1
        assert "Invalid resource graph" in result.output


class TestApplyCommand:
    @patch("unifi_provisioner.config.provision")
    def test_auto_approve_skips_prompt(self, mock_provision: MagicMock, config_path: str) -> None:
        mock_provision.return_value = _OK_REPORT

        result = runner.invoke(app, ["apply", "--no-color", "--auto-approve", "-c", config_path])
        assert result.exit_code == 0
        assert "Provisioning complete!" in result.stdout
        assert "6 ready, 0 failed, 0 not submitted" in result.stdout
        assert 'service   = "unifi"' in result.stdout

    @patch("unifi_provisioner.config.provision")
    def test_confirm_yes(self, mock_provision: MagicMock, config_path: str) -> None:
        mock_provision.return_value = _OK_REPORT

        result = runner.invoke(app, ["apply", "--no-color", "-c", config_path], input="y\n")
        assert result.exit_code == 0
        mock_provision.assert_called_once()

    @patch("unifi_provisioner.config.provision")
    def test_user_decline_aborts(self, mock_provision: MagicMock, config_path: str) -> None:
        result = runner.invoke(app, ["apply", "--no-color", "-c", config_path], input="n\n")
        assert result.exit_code == 1
        assert "Apply canceled" in result.output
        mock_provision.assert_not_called()

    @patch("unifi_provisioner.config.provision")
    def test_parallelism_passed(self, mock_provision: MagicMock, config_path: str) -> None:
        mock_provision.return_value = _OK_REPORT

        result = runner.invoke(
            app, ["apply", "--no-color", "--auto-approve", "--parallelism", "3", "-c", config_path]
        )
        assert result.exit_code == 0
        assert mock_provision.call_args.kwargs["parallelism"] == 3

    def test_parallelism_must_be_positive(self, config_path: str) -> None:
        result = runner.invoke(
            app, ["apply", "--no-color", "--auto-approve", "--parallelism", "0", "-c", config_path]
        )
        assert result.exit_code == 2

    @patch("unifi_provisioner.config.provision")
    def test_failed_init_job_exits_1(self, mock_provision: MagicMock, config_path: str) -> None:
        mock_provision.return_value = _FAILED_REPORT

        result = runner.invoke(app, ["apply", "--no-color", "--auto-approve", "-c", config_path])
        assert result.exit_code == 1
        assert "Provisioning failed!" in result.stdout
        assert "blocked by InitJob/unifi-db-init-job-v3" in result.stdout
        assert "InitJob 'InitJob/unifi-db-init-job-v3' failed" in result.output
        assert "Workload/unifi skipped" in result.output

    @patch("unifi_provisioner.config.provision")
    def test_canceled_exits_1(self, mock_provision: MagicMock, config_path: str) -> None:
        mock_provision.side_effect = ProvisioningCanceled("Provisioning canceled")

        result = runner.invoke(app, ["apply", "--no-color", "--auto-approve", "-c", config_path])
        assert result.exit_code == 1
        assert "Provisioning canceled" in result.output


class TestValidateCommand:
    def test_valid_config(self, config_path: str) -> None:
        result = runner.invoke(app, ["validate", "--no-color", "-c", config_path])
        assert result.exit_code == 0
        assert "Configuration is valid." in result.stdout

    def test_unknown_parameter(self, tmp_path: Path, make_config: Callable[..., Config]) -> None:
        make_config("")
        (tmp_path / "config.yaml").write_text("config:\n  bogus: 1\n")

        result = runner.invoke(app, ["validate", "--no-color", "-c", str(tmp_path / "config.yaml")])
        assert result.exit_code == 1
        assert "Unknown parameter(s): bogus" in result.output

    def test_invalid_namespace(self, tmp_path: Path, make_config: Callable[..., Config]) -> None:
        make_config("config:\n  namespace: Bad_NS\n")

        result = runner.invoke(app, ["validate", "--no-color", "-c", str(tmp_path / "config.yaml")])
        assert result.exit_code == 1
        assert "Configuration error: Invalid parameter value (namespace='Bad_NS')" in result.output


class TestOutputsCommand:
    def test_outputs(self, config_path: str) -> None:
        result = runner.invoke(app, ["outputs", "--no-color", "-c", config_path])
        assert result.exit_code == 0
        assert 'namespace = "unifi"' in result.stdout
        assert 'service   = "unifi"' in result.stdout


class TestNoColor:
    @patch("unifi_provisioner.config.provision")
    def test_no_color_env_strips_ansi(
        self, mock_provision: MagicMock, config_path: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        mock_provision.return_value = _OK_REPORT

        result = runner.invoke(app, ["apply", "--auto-approve", "-c", config_path])
        assert result.exit_code == 0
        assert "\x1b[" not in result.stdout

    def test_color_by_default(self, config_path: str) -> None:
        result = runner.invoke(app, ["plan", "-c", config_path], color=True)
        assert result.exit_code == 0
        assert "\x1b[" in result.stdout
        assert "Provisioning order:" in _strip_ansi(result.stdout)


@pytest.fixture
def _reset_pkg_logger():
    """Reset logger levels touched by the logging tests."""
    yield
    for name in ("unifi_provisioner", "kubernetes", "urllib3"):
        logging.getLogger(name).setLevel(logging.NOTSET)


@pytest.mark.usefixtures("_reset_pkg_logger")
class TestConfigureLogging:
    """Unit-test ``_configure_logging`` by mocking ``logging.basicConfig``.

    Pytest's logging plugin installs a handler on the root logger, so the
    function is checked through the ``basicConfig`` call args and the level
    of the ``unifi_provisioner`` logger.
    """

    @patch("logging.basicConfig")
    def test_verbose_flag_configures_info(self, mock_bc: MagicMock) -> None:
        from unifi_provisioner.cli import _LOG_FORMAT, _configure_logging

        _configure_logging(1)
        mock_bc.assert_called_once_with(
            level=logging.WARNING,
            format=_LOG_FORMAT,
            stream=sys.stderr,
            force=True,
        )
        assert logging.getLogger("unifi_provisioner").level == logging.INFO

    @patch("logging.basicConfig")
    def test_double_verbose_configures_debug(self, mock_bc: MagicMock) -> None:
        from unifi_provisioner.cli import _configure_logging

        _configure_logging(2)
        mock_bc.assert_called_once()
        assert logging.getLogger("unifi_provisioner").level == logging.DEBUG

    @patch("logging.basicConfig")
    def test_triple_verbose_opens_client_loggers(self, mock_bc: MagicMock) -> None:
        from unifi_provisioner.cli import _configure_logging

        _configure_logging(3)
        mock_bc.assert_called_once()
        assert logging.getLogger("unifi_provisioner").level == logging.DEBUG
        assert logging.getLogger("kubernetes").level == logging.DEBUG
        assert logging.getLogger("urllib3").level == logging.DEBUG

    @patch("logging.basicConfig")
    def test_no_verbose_stays_unconfigured(self, mock_bc: MagicMock) -> None:
        from unifi_provisioner.cli import _configure_logging

        _configure_logging(0)
        mock_bc.assert_not_called()

    @patch("logging.basicConfig")
    def test_unifi_log_overrides_verbose(
        self, mock_bc: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from unifi_provisioner.cli import _configure_logging

        monkeypatch.setenv("UNIFI_LOG", "WARNING")
        _configure_logging(2)
        mock_bc.assert_called_once()
        assert logging.getLogger("unifi_provisioner").level == logging.WARNING

    @patch("logging.basicConfig")
    def test_invalid_unifi_log_warns_and_defaults_to_info(
        self,
        mock_bc: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        from unifi_provisioner.cli import _configure_logging

        monkeypatch.setenv("UNIFI_LOG", "BOGUS")
        _configure_logging(0)
        mock_bc.assert_called_once()
        assert logging.getLogger("unifi_provisioner").level == logging.INFO
        assert "invalid UNIFI_LOG level" in capsys.readouterr().err
