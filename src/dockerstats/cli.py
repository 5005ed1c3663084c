"""CLI for dockerstats.

Provides a command-line interface using Typer for:
- Running the collector
- Generating a sample configuration file

Every ``run`` option can also be set through the environment, which is how
the collector is usually configured when it runs as a container itself.
"""

from __future__ import annotations

import signal
from pathlib import Path
from types import FrameType

import typer
from rich.console import Console
from rich.table import Table

from dockerstats.adapters import new_adapter
from dockerstats.core.config import load_config
from dockerstats.core.errors import ConfigError, StartupError, UnexpectedStop
from dockerstats.core.schemas import CollectorConfig
from dockerstats.monitoring.runtime import DockerRuntimeClient
from dockerstats.monitoring.watcher import StatsCollector
from dockerstats.utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="dockerstats",
    help="Relay Docker container metrics and lifecycle events to a sink",
    add_completion=False,
)

# stdout belongs to the log adapter.
console = Console(stderr=True)

logger = get_logger(__name__)


@app.command()
def run(
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="Path to configuration file (YAML/JSON)"
    ),
    url: str | None = typer.Option(
        None, "--url", envvar="STAT_URL", help="Sink URL: log:// or statsd://host:port"
    ),
    template: str | None = typer.Option(
        None, "--template", envvar="STAT_TEMPLATE", help="Jinja2 metric template"
    ),
    whitelist: list[str] | None = typer.Option(
        None,
        "--whitelist",
        "-w",
        envvar="STAT_WHITELIST",
        help="Event status to handle (repeatable, or comma-separated). Replaces the default set",
    ),
    resolution: int | None = typer.Option(
        None, "--resolution", "-r", envvar="RESOLUTION", help="Sampling resolution in seconds"
    ),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="Logging level"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to the console"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
) -> None:
    """Watch containers and drain their metrics to the configured sink."""
    try:
        config = load_config(
            config_path,
            url=url,
            template=template,
            whitelist=whitelist or None,
            resolution=resolution,
            log_level=log_level,
            json_logs=json_logs or None,
        )
    except ConfigError as e:
        console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(1) from e

    setup_logging(
        level=config.log_level,
        log_file=log_file,
        json_format=config.json_logs,
        rich_console=not config.json_logs,
    )

    try:
        adapter = new_adapter(config.url, config.template)
        runtime = DockerRuntimeClient()
    except (ConfigError, StartupError) as e:
        console.print(f"[bold red]Error: {e}[/]")
        raise typer.Exit(1) from e

    _show_config_summary(config)

    collector = StatsCollector(
        runtime,
        adapter=adapter,
        resolution=config.effective_resolution,
        whitelist=config.event_whitelist,
    )

    signal.signal(signal.SIGTERM, _interrupt)

    try:
        collector.run()
    except KeyboardInterrupt:
        console.print("[bold yellow]Shutting down...[/]")
    except (StartupError, UnexpectedStop) as e:
        logger.error(f"Collector stopped: {e}")
        console.print(f"[bold red]Error: {e}[/]")
        raise typer.Exit(1) from e
    finally:
        collector.stop()


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("dockerstats.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# dockerstats configuration
# Every setting can be overridden by a CLI flag or environment variable.

# Sink URL: log:// (stdout) or statsd://host:port
url: "log://"

# Jinja2 metric template. Omit to use the sink's default.
# Available: type, name, value, container.{id,name,env}, hostname, env("KEY")
# template: "{{ type }}#{{ name }}={{ value }} source={{ container.name }}.{{ hostname }}"

# Seconds between forwarded samples per container (0 = default of 10)
resolution: 10

# Event statuses to handle. Empty = the default lifecycle set.
whitelist: []

log_level: INFO
json_logs: false
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _interrupt(signum: int, frame: FrameType | None) -> None:
    """Turn SIGTERM into the same orderly shutdown as Ctrl-C."""
    raise KeyboardInterrupt


def _show_config_summary(config: CollectorConfig) -> None:
    """Display a summary of the collector configuration."""
    table = Table(title="dockerstats")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Sink", config.url)
    table.add_row("Template", config.template or "(sink default)")
    table.add_row("Resolution", f"{config.effective_resolution}s")
    table.add_row("Events", ", ".join(sorted(config.event_whitelist)))

    console.print(table)


if __name__ == "__main__":
    app()
