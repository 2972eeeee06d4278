"""Command-line interface for Host Availability Monitor."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from host_availability_monitor import __version__
from host_availability_monitor.config import LOG_LEVELS, Settings, create_example_settings
from host_availability_monitor.digest import Digest, format_digest_text, render_digest_html
from host_availability_monitor.exceptions import ConfigurationError, FatalWriteError
from host_availability_monitor.models import NotificationState, ProbeStatus, Snapshot
from host_availability_monitor.monitor import HostMonitor, create_monitor
from host_availability_monitor.probers import PingProber
from host_availability_monitor.registry import HostRegistry, create_example_registry, save_registry
from host_availability_monitor.writer import read_snapshot

console = Console()

DEFAULT_CONFIG_PATHS = ["hamon.yaml", "hamon.yml", "config.yaml", "~/.config/hamon/config.yaml"]


def setup_logging(level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def status_color(status: ProbeStatus) -> str:
    """Get Rich color for a probe status."""
    colors = {
        ProbeStatus.ONLINE: "green",
        ProbeStatus.PARTIAL: "yellow",
        ProbeStatus.OFFLINE: "red",
    }
    return colors.get(status, "white")


def load_settings(config: Optional[str]) -> Settings:
    """Load settings from the given path or the default locations.

    Exits with status 1 when no usable configuration is found.
    """
    if config:
        path = Path(config)
    else:
        for default_path in DEFAULT_CONFIG_PATHS:
            path = Path(default_path).expanduser()
            if path.exists():
                break
        else:
            console.print("[red]No configuration file found.[/]")
            console.print("Create one with: [cyan]hamon init[/]")
            sys.exit(1)

    try:
        return Settings.from_yaml(path)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/] {e}")
        sys.exit(1)


def create_status_table(snapshot: Snapshot) -> Table:
    """Create a Rich table displaying a snapshot."""
    table = Table(title="Host Availability", show_header=True, header_style="bold")

    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("IP", no_wrap=True)
    table.add_column("Status", justify="center", no_wrap=True)
    table.add_column("Success", justify="right", no_wrap=True)
    table.add_column("Application")
    table.add_column("Environment")
    table.add_column("Type")

    for s in snapshot:
        style = status_color(s.status)
        table.add_row(
            s.host.name,
            s.host.address or "-",
            Text(s.status.value.upper(), style=style),
            Text(f"{s.success_percentage:g}%", style=style),
            s.host.application,
            s.host.environment,
            s.host.type,
        )

    return table


def create_summary_panel(snapshot: Snapshot) -> Panel:
    """Create a summary panel."""
    digest = Digest.from_snapshot(snapshot)
    summary_parts = [
        f"[bold]Hosts:[/bold] {digest.total} total, "
        f"[green]{digest.online}[/] online, "
        f"[yellow]{digest.partial}[/] partial, "
        f"[red]{digest.offline}[/] offline",
        f"[bold]Invalid IP addresses:[/bold] {digest.invalid}",
        f"[bold]Last Check:[/bold] {snapshot.taken_at.strftime('%Y-%m-%d %H:%M:%S')}",
    ]
    return Panel("\n".join(summary_parts), title="Availability Summary", border_style="cyan")


def _check_registry(hosts_file: Path) -> None:
    try:
        HostRegistry(hosts_file).load()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/] {e}")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Host Availability Monitor - ping monitoring with a daily digest."""
    pass


@main.command()
@click.option(
    "-c", "--config",
    type=click.Path(),
    help="Path to settings file",
)
@click.option(
    "-H", "--hosts",
    type=click.Path(),
    help="Path to hosts file (overrides hosts_file in settings)",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level (default: from settings)",
)
@click.option(
    "--cycles",
    default=None,
    type=click.IntRange(min=1),
    help="Stop after this many cycles (default: run forever)",
)
def run(
    config: Optional[str],
    hosts: Optional[str],
    log_level: Optional[str],
    cycles: Optional[int],
) -> None:
    """Run the monitoring loop."""
    settings = load_settings(config)
    setup_logging(log_level or settings.log_level)

    hosts_file = Path(hosts) if hosts else settings.hosts_file
    _check_registry(hosts_file)

    monitor = create_monitor(settings, hosts_file=hosts_file)
    logger = logging.getLogger(__name__)
    logger.info(
        f"Monitoring hosts from {hosts_file} every {settings.ping.interval}s "
        f"({settings.ping.count} probes per host)"
    )

    try:
        monitor.run_forever(max_cycles=cycles)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped monitoring.[/]")
    except FatalWriteError as e:
        console.print(f"[red]Fatal output error:[/] {e}")
        sys.exit(1)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/] {e}")
        sys.exit(1)


@main.command()
@click.option(
    "-c", "--config",
    type=click.Path(),
    help="Path to settings file",
)
@click.option(
    "-H", "--hosts",
    type=click.Path(),
    help="Path to hosts file (overrides hosts_file in settings)",
)
@click.option(
    "--json", "output_json",
    is_flag=True,
    help="Output in JSON format",
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level",
)
def check(
    config: Optional[str],
    hosts: Optional[str],
    output_json: bool,
    log_level: str,
) -> None:
    """Probe all hosts once and print the result.

    Nothing is written and no notification is sent.
    """
    setup_logging(log_level)
    settings = load_settings(config)

    hosts_file = Path(hosts) if hosts else settings.hosts_file
    _check_registry(hosts_file)

    monitor = HostMonitor(settings, HostRegistry(hosts_file), PingProber())
    snapshot, _ = monitor.run_cycle(NotificationState())
    if snapshot is None:
        console.print("[red]Check failed, see log output.[/]")
        sys.exit(1)

    if output_json:
        click.echo(json.dumps(snapshot.to_records(), indent=2, ensure_ascii=False))
    else:
        console.print(create_summary_panel(snapshot))
        console.print(create_status_table(snapshot))

    # Exit with error code if any host is down
    if snapshot.offline_count:
        sys.exit(1)
    elif snapshot.partial_count:
        sys.exit(2)


@main.command()
@click.argument("status_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--html",
    "html_output",
    type=click.Path(dir_okay=False),
    help="Also write the HTML digest to this file",
)
def digest(status_file: str, html_output: Optional[str]) -> None:
    """Preview the daily digest built from a status file."""
    try:
        snapshot = read_snapshot(status_file)
    except (OSError, ValueError) as e:
        console.print(f"[red]Cannot read status file:[/] {e}")
        sys.exit(1)

    result = Digest.from_snapshot(snapshot)
    click.echo(format_digest_text(result))

    if html_output:
        path = Path(html_output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_digest_html(result), encoding="utf-8")
        console.print(f"[green]HTML digest written to {path}[/]")


@main.command()
@click.option(
    "-o", "--output-dir",
    default=".",
    type=click.Path(file_okay=False),
    help="Directory for the example files",
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing files",
)
def init(output_dir: str, force: bool) -> None:
    """Create example settings and hosts files."""
    directory = Path(output_dir)
    settings_path = directory / "hamon.yaml"
    hosts_path = directory / "hosts.yaml"

    for path in (settings_path, hosts_path):
        if path.exists() and not force:
            console.print(f"[red]File already exists: {path}[/]")
            console.print("Use --force to overwrite")
            sys.exit(1)

    create_example_settings().to_yaml(settings_path)
    save_registry(create_example_registry(), hosts_path)

    console.print(f"[green]Created example configuration: {settings_path}, {hosts_path}[/]")
    console.print("Edit these files to add your hosts and notification settings.")


if __name__ == "__main__":
    main()
