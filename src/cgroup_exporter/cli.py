"""CLI for the cgroup exporter.

Provides a command-line interface using Typer for:
- Serving container metrics to Prometheus
- Running a single collection round
- Inspecting individual accounting files
- Writing a sample configuration
"""

from __future__ import annotations

import threading
from enum import Enum
from pathlib import Path

import typer
from prometheus_client import generate_latest
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from cgroup_exporter.core.config import load_config
from cgroup_exporter.core.exceptions import EnumerationError, StatParseError
from cgroup_exporter.core.schemas import ExporterConfig
from cgroup_exporter.monitoring.aggregation import memory_usage_bytes
from cgroup_exporter.monitoring.collection import RoundSnapshot
from cgroup_exporter.monitoring.exporter import build_registry, create_collector, serve as serve_http
from cgroup_exporter.monitoring.parsers import (
    format_device_table,
    format_key_value_stats,
    parse_device_table,
    parse_key_value_stats,
    parse_scalar_counter,
    read_stat_file,
)
from cgroup_exporter.utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="cgroup-exporter",
    help="Prometheus exporter for Docker container cgroup stats",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


class OutputFormat(str, Enum):
    TABLE = "table"
    PROMETHEUS = "prometheus"


class StatKind(str, Enum):
    MEMORY = "memory"
    CPU = "cpu"
    NETWORK = "network"


def _print_plain(text: str) -> None:
    console.print(text, end="", markup=False, highlight=False, soft_wrap=True)


def _load(config: Path | None, **overrides: object) -> ExporterConfig:
    try:
        return load_config(config, **overrides)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(1) from e


@app.command()
def serve(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to exporter configuration file (YAML/JSON)"
    ),
    listen_address: str | None = typer.Option(None, "--listen-address", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Listen port"),
    sys_root: Path | None = typer.Option(None, "--sys-root", help="sysfs mount point"),
    proc_root: Path | None = typer.Option(None, "--proc-root", help="procfs mount point"),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="Logging level"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to console"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
) -> None:
    """Serve container metrics on /metrics until interrupted."""
    exporter_config = _load(
        config,
        listen_address=listen_address,
        listen_port=port,
        sys_root=sys_root,
        proc_root=proc_root,
        log_level=log_level,
    )
    setup_logging(
        level=exporter_config.log_level,
        log_file=log_file,
        json_format=json_logs,
        rich_console=not json_logs,
    )

    collector = create_collector(exporter_config)
    registry = build_registry(collector)
    serve_http(exporter_config, registry)

    families = ", ".join(f.value for f in exporter_config.families)
    logger.info(f"Exporting families: {families}")

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logger.info("Shutting down")


@app.command()
def collect(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to exporter configuration file (YAML/JSON)"
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.TABLE, "--format", "-f", help="Output format: table or prometheus"
    ),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
) -> None:
    """Run one collection round and print the result."""
    setup_logging(level=log_level)
    exporter_config = _load(config)
    collector = create_collector(exporter_config)

    if output_format == OutputFormat.PROMETHEUS:
        _print_plain(generate_latest(build_registry(collector)).decode())
        return

    try:
        snapshot = collector.engine.run()
    except EnumerationError as e:
        console.print(f"[bold red]{e}[/]")
        raise typer.Exit(1) from e

    _show_snapshot(snapshot)


@app.command()
def inspect(
    path: Path = typer.Argument(..., help="Accounting file to parse"),
    kind: StatKind = typer.Option(..., "--kind", "-k", help="File format: memory, cpu or network"),
    raw: bool = typer.Option(False, "--raw", help="Print the parsed data in the file's own format"),
) -> None:
    """Parse a single accounting file and show what the exporter sees."""
    try:
        if kind == StatKind.MEMORY:
            stats = read_stat_file(path, parse_key_value_stats)
            if raw:
                _print_plain(format_key_value_stats(stats))
                return
            table = Table(title=str(path))
            table.add_column("Field", style="cyan")
            table.add_column("Value", style="white", justify="right")
            for key, value in stats.items():
                table.add_row(key, f"{value:,.0f}")
            console.print(table)
            console.print(f"Memory usage (rss + cache): [bold green]{memory_usage_bytes(stats):,.0f}[/] bytes")

        elif kind == StatKind.CPU:
            seconds = read_stat_file(path, parse_scalar_counter)
            console.print(f"CPU usage: [bold green]{seconds:.9f}[/] seconds")

        else:
            device_table = read_stat_file(path, parse_device_table)
            if raw:
                _print_plain(format_device_table(device_table))
                return
            table = Table(title=str(path))
            table.add_column("Interface", style="cyan")
            table.add_column("Topic", style="white")
            table.add_column("Receive", style="green", justify="right")
            table.add_column("Transmit", style="magenta", justify="right")
            for interface, row in device_table.items():
                for topic, direction in row.items():
                    table.add_row(interface, topic, direction.receive, direction.transmit)
            console.print(table)

    except (StatParseError, OSError, ValueError) as e:
        console.print(f"[bold red]Error:[/] {e}")
        raise typer.Exit(1) from e


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("cgroup-exporter.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# cgroup exporter configuration

# Pseudo-filesystem roots (use /host/sys and /host/proc when running in a container)
sys_root: /sys
proc_root: /proc

# Docker daemon; leave unset to use DOCKER_HOST or the local socket
# docker_url: unix:///var/run/docker.sock
docker_timeout_seconds: 10

# Metric naming
namespace: cgroup
include_id_label: false
families:
  - presence
  - memory
  - cpu
  - network

# Candidate cgroup layouts, tried in order ({id} is the container id)
memory_stat_templates:
  - fs/cgroup/memory/docker/{id}/memory.stat
  - fs/cgroup/memory/system.slice/docker-{id}.scope/memory.stat
cpu_stat_templates:
  - fs/cgroup/cpuacct/docker/{id}/cpuacct.usage
  - fs/cgroup/cpuacct/system.slice/docker-{id}.scope/cpuacct.usage
# Relative to proc_root, {id} is the container's init pid
network_stat_templates:
  - "{id}/net/dev"

# HTTP server
listen_address: 0.0.0.0
listen_port: 9104

# Per-scrape concurrency
max_workers: 1
# entity_timeout_seconds: 2.0

log_level: INFO
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _show_snapshot(snapshot: RoundSnapshot) -> None:
    """Display one round's samples."""
    table = Table(title=f"{snapshot.entity_count} containers, {snapshot.skipped_count} skipped samples")
    table.add_column("Metric", style="cyan")
    table.add_column("Labels", style="white")
    table.add_column("Value", style="green", justify="right")

    for metric, values in snapshot.samples.items():
        for labels, value in sorted(values.items()):
            table.add_row(metric, ", ".join(labels), f"{value:,.6g}")

    console.print(table)
    console.print(f"[dim]Round took {snapshot.duration_seconds:.3f}s[/]")


if __name__ == "__main__":
    app()
