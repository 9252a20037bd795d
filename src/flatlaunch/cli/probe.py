"""
flatlaunch-probe - show what the launcher knows about the host.

Asks the host probe every question it can answer, then resolves the
settings file exactly as a launch would, without launching anything.
"""

from collections.abc import Callable
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from flatlaunch.cli import setup_logging
from flatlaunch.core.errors import FlatlaunchError, ProbeError
from flatlaunch.core.host.probe import HostProbe
from flatlaunch.core.services.launch import LaunchService

from .errors import ExitCode, handle_error

console = Console()
app = typer.Typer(
    name="flatlaunch-probe",
    help="Show host facts and resolved launcher settings",
    add_completion=False,
)


def _fact_queries(probe: HostProbe) -> list[tuple[str, Callable[[], Any]]]:
    return [
        ("app_id", probe.app_id),
        ("app_exec_line", probe.app_exec),
        ("host_runtime_version", probe.host_runtime_version),
        ("sandbox_helper_available", probe.sandbox_helper_available),
        ("compositor_helper_available", probe.compositor_helper_available),
        ("expose_pids_capability_available", probe.expose_pids_available),
        ("shared_tmp_available", probe.shared_tmp_available),
    ]


def build_facts_table(probe: HostProbe) -> Table:
    """Query every host fact; a failed query is shown, not raised."""
    table = Table(title="Host Facts", border_style="cyan")
    table.add_column("Fact", style="cyan", no_wrap=True)
    table.add_column("Value")

    for name, query in _fact_queries(probe):
        try:
            value = escape(str(query()))
        except ProbeError as e:
            value = f"[red]error:[/red] {escape(str(e))}"
        table.add_row(name, value)
    return table


def build_settings_table(service: LaunchService) -> Table:
    table = Table(title="Resolved Settings", border_style="green")
    table.add_column("Group", style="green", no_wrap=True)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")

    for group, values in service.settings.model_dump(mode="json").items():
        for key, value in values.items():
            if isinstance(value, list):
                value = ", ".join(value) or "-"
            table.add_row(group, key, "-" if value is None else escape(str(value)))
    table.add_row("", "flags_file", str(service.flags_file_path))
    return table


@app.command()
def probe(
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging and full tracebacks",
    ),
) -> None:
    """
    Print host facts and the settings a launch would use.
    """
    setup_logging(debug)
    host = HostProbe()

    console.print(build_facts_table(host))

    try:
        service = LaunchService.from_config(probe=host)
    except FlatlaunchError as e:
        handle_error(e, debug=debug)
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e

    console.print()
    console.print(build_settings_table(service))


def main() -> None:
    """Console script entry point."""
    app()


__all__ = ["app", "build_facts_table", "build_settings_table", "main"]
