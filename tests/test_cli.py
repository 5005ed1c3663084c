"""Tests for the dockerstats CLI."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import yaml
from typer.testing import CliRunner

from dockerstats.cli import app
from dockerstats.core.errors import StartupError, UnexpectedStop

runner = CliRunner()


class TestInitConfig:
    """Tests for the init-config command."""

    def test_writes_loadable_sample(self, tmp_path: Path) -> None:
        """Test that the generated file parses and round-trips through the schema."""
        output = tmp_path / "conf" / "dockerstats.yaml"

        result = runner.invoke(app, ["init-config", "--output", str(output)])

        assert result.exit_code == 0
        data = yaml.safe_load(output.read_text())
        assert data["url"] == "log://"
        assert data["resolution"] == 10


class TestRun:
    """Tests for the run command's startup paths."""

    def test_bad_url_exits(self) -> None:
        result = runner.invoke(app, ["run", "--url", "nowhere"])

        assert result.exit_code == 1

    def test_unknown_sink_exits(self) -> None:
        result = runner.invoke(app, ["run", "--url", "kafka://broker:9092"])

        assert result.exit_code == 1

    def test_missing_config_file_exits(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", "--config", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1

    @patch("dockerstats.cli.setup_logging")
    @patch("dockerstats.cli.signal.signal")
    @patch("dockerstats.cli.DockerRuntimeClient")
    @patch("dockerstats.cli.StatsCollector")
    def test_run_wires_collector(
        self,
        collector_cls: MagicMock,
        runtime_cls: MagicMock,
        signal_mock: MagicMock,
        setup_logging: MagicMock,
    ) -> None:
        """Test that options reach the collector and it is always stopped."""
        result = runner.invoke(
            app, ["run", "--url", "log://", "-r", "0", "-w", "start,die", "-w", "oom"]
        )

        assert result.exit_code == 0
        _, kwargs = collector_cls.call_args
        assert kwargs["resolution"] == 10
        assert kwargs["whitelist"] == frozenset({"start", "die", "oom"})
        collector_cls.return_value.run.assert_called_once()
        collector_cls.return_value.stop.assert_called_once()

    @patch("dockerstats.cli.setup_logging")
    @patch("dockerstats.cli.signal.signal")
    @patch("dockerstats.cli.DockerRuntimeClient")
    @patch("dockerstats.cli.StatsCollector")
    def test_unexpected_stop_exits(
        self,
        collector_cls: MagicMock,
        runtime_cls: MagicMock,
        signal_mock: MagicMock,
        setup_logging: MagicMock,
    ) -> None:
        collector_cls.return_value.run.side_effect = UnexpectedStop("unexpected stop")

        result = runner.invoke(app, ["run"])

        assert result.exit_code == 1
        collector_cls.return_value.stop.assert_called_once()

    @patch("dockerstats.cli.setup_logging")
    @patch("dockerstats.cli.DockerRuntimeClient", side_effect=StartupError("no daemon"))
    def test_daemon_unreachable_exits(
        self, runtime_cls: MagicMock, setup_logging: MagicMock
    ) -> None:
        result = runner.invoke(app, ["run"])

        assert result.exit_code == 1
