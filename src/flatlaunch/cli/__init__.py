"""
flatlaunch CLI - Main application entry point.

The ``flatlaunch`` command is a pass-through: apart from
``--launcher-debug`` every argument, known to us or not, is handed to the
browser in the order given.
"""

import logging
import sys

import typer

from flatlaunch.core.errors import FlatlaunchError
from flatlaunch.core.services.launch import LaunchService

from .argv import RAW_ARGS_KEY, PassThroughCommand, strip_launcher_flags
from .errors import ExitCode, handle_error
from .notifier import ConsoleNotifier

DEBUG_ENV = "FLATLAUNCH_DEBUG"

app = typer.Typer(
    name="flatlaunch",
    help="Launch a Chromium-based browser inside a Flatpak sandbox",
    add_completion=False,
)


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for the launcher.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.command(
    cls=PassThroughCommand,
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
    add_help_option=False,
)
def main(
    ctx: typer.Context,
    launcher_debug: bool = typer.Option(
        False,
        "--launcher-debug",
        envvar=DEBUG_ENV,
        help="Log every inference, environment override and argument",
    ),
) -> None:
    """
    Resolve settings, apply the user's flags and exec the browser.
    """
    setup_logging(launcher_debug)

    try:
        service = LaunchService.from_config(ConsoleNotifier())
        service.launch(strip_launcher_flags(ctx.meta.get(RAW_ARGS_KEY, ctx.args)))
    except FlatlaunchError as e:
        handle_error(e, debug=launcher_debug)
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e
    except KeyboardInterrupt:
        raise typer.Exit(ExitCode.SIGINT) from None


def cli_main() -> None:
    """Console script entry point."""
    app()


__all__ = ["app", "cli_main", "setup_logging"]
