"""Tests for ``keyrules watch`` and the global CLI options."""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from keyrules.cli import main

WriteRules = Callable[[Path, str, str], Path]


class TestWatch:
    def test_prints_report_and_stops(self, etc_dir: Path, write_rules: WriteRules) -> None:
        write_rules(etc_dir, "10-a.keyrules", "[Policy]\nRules=R\n\n[R]\nResult=yes\n")
        mock_time = MagicMock()
        mock_time.sleep.side_effect = KeyboardInterrupt

        with (
            patch("keyrules.authority.authority.DirectoryWatcher") as mock_watcher,
            patch("keyrules.cli_commands.watch.time", mock_time),
        ):
            mock_watcher.return_value.watched = [etc_dir]
            runner = CliRunner()
            result = runner.invoke(main, ["watch", "--rules-dir", str(etc_dir)])

        assert result.exit_code == 0, result.output
        assert "10-a.keyrules" in result.output
        assert f"Watching {etc_dir}" in result.output
        assert "Stopped." in result.output
        mock_watcher.return_value.start.assert_called_once()
        mock_watcher.return_value.stop.assert_called_once()

    def test_reload_is_reported(self, etc_dir: Path, write_rules: WriteRules) -> None:
        mock_time = MagicMock()

        with patch("keyrules.authority.authority.DirectoryWatcher") as mock_watcher:
            mock_watcher.return_value.watched = [etc_dir]

            def _tick(_seconds: float) -> None:
                # Simulate one filesystem change, then Ctrl-C.
                write_rules(etc_dir, "10-a.keyrules", "[Policy]\n")
                on_change = mock_watcher.call_args.args[1]
                on_change(str(etc_dir / "10-a.keyrules"))
                raise KeyboardInterrupt

            mock_time.sleep.side_effect = _tick
            with patch("keyrules.cli_commands.watch.time", mock_time):
                runner = CliRunner()
                result = runner.invoke(main, ["watch", "--rules-dir", str(etc_dir)])

        assert result.exit_code == 0, result.output
        assert "Rules reloaded" in result.output
        assert "1 rule file(s) compiled" in result.output


class TestGlobalOptions:
    def test_version(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_trace_configures_telemetry(self, tmp_path: Path) -> None:
        with patch("keyrules.utils.telemetry.configure_telemetry") as mock_configure:
            runner = CliRunner()
            result = runner.invoke(
                main, ["--trace", "show", "--rules-dir", str(tmp_path)]
            )

        assert result.exit_code == 0, result.output
        mock_configure.assert_called_once_with(export_to_console=True, otlp_endpoint=None)

    def test_trace_without_sdk_is_usage_error(self, tmp_path: Path) -> None:
        with patch(
            "keyrules.utils.telemetry.configure_telemetry",
            side_effect=ImportError("opentelemetry-sdk is required"),
        ):
            runner = CliRunner()
            result = runner.invoke(main, ["--trace", "show", "--rules-dir", str(tmp_path)])

        assert result.exit_code == 2
        assert "opentelemetry-sdk" in result.output

    def test_no_trace_by_default(self, tmp_path: Path) -> None:
        with patch("keyrules.utils.telemetry.configure_telemetry") as mock_configure:
            runner = CliRunner()
            runner.invoke(main, ["show", "--rules-dir", str(tmp_path)])
        mock_configure.assert_not_called()
