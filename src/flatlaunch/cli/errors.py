"""
Standardized error handling and exit codes for the flatlaunch CLI.

Everything here writes to stderr: stdout belongs to the browser once the
process has been replaced, and to the user's pipes before that.
"""

import traceback
from enum import IntEnum

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for flatlaunch."""

    SUCCESS = 0
    """Operation completed successfully (never seen when exec succeeds)."""

    GENERAL_ERROR = 1
    """Any fatal launcher error."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional action to fix it

    Example:
        >>> print_error(
        ...     "Failed to load config file: ConfigDir must be set if ExposeWidevine is enabled",
        ...     solution="Set [Application] ConfigDir in /app/etc/flatlaunch.ini",
        ... )
    """
    console.print(f"[red]Error:[/red] {escape(problem)}", highlight=False, soft_wrap=True)

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def handle_error(error: Exception, *, debug: bool = False) -> None:
    """
    Display a fatal error.

    Args:
        error: The exception that ended the run
        debug: If True, include the full traceback
    """
    print_error(str(error))

    if debug:
        console.print("\n[dim]Full traceback:[/dim]")
        console.print(traceback.format_exc(), markup=False, highlight=False)
    else:
        console.print("[dim]Run with --launcher-debug for details[/dim]")


def print_panel(title: str, body: str, *, style: str = "yellow") -> None:
    """Print a titled panel, used for policy notices."""
    console.print()
    console.print(
        Panel(
            Text(body),
            title=f"[bold {style}]{title}[/bold {style}]",
            border_style=style,
            expand=False,
        )
    )


__all__ = [
    "ExitCode",
    "console",
    "handle_error",
    "print_error",
    "print_panel",
]
