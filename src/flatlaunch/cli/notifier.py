"""
Console presentation of policy decisions.
"""

import sys

import typer

from flatlaunch.core.services.notifier import PolicyDecision

from .errors import print_panel


class ConsoleNotifier:
    """
    Show policy decisions as rich panels on stderr.

    Warnings that may be suppressed ask the user whether to keep reminding
    them, but only when stdin is a terminal; otherwise the answer is "keep
    reminding".
    """

    def __init__(self, interactive: bool | None = None) -> None:
        self._interactive = sys.stdin.isatty() if interactive is None else interactive

    def notify(self, decision: PolicyDecision) -> bool:
        style = "red" if decision.blocking else "yellow"
        print_panel(decision.title, f"{decision.message}\n\n{decision.guide}", style=style)

        if not decision.can_suppress or not self._interactive:
            return False
        return typer.confirm("Don't show this message again?", default=False, err=True)


__all__ = ["ConsoleNotifier"]
