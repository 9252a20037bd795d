"""
Raw argv handling for the pass-through ``flatlaunch`` command.

Click consumes a bare ``--`` as its own end-of-options marker, so the
browser's arguments are taken from the raw argv instead of ``ctx.args``.
"""

import typer
from typer.core import TyperCommand

LAUNCHER_FLAGS = {"--launcher-debug"}
RAW_ARGS_KEY = "flatlaunch.raw_args"


def strip_launcher_flags(argv: list[str]) -> list[str]:
    """Drop launcher-only flags that appear before ``--``, keeping everything else in order.

    Example:
        >>> strip_launcher_flags(["--launcher-debug", "-x", "--", "--launcher-debug"])
        ['-x', '--', '--launcher-debug']
    """
    result: list[str] = []
    for index, token in enumerate(argv):
        if token == "--":
            result.extend(argv[index:])
            break
        if token not in LAUNCHER_FLAGS:
            result.append(token)
    return result


class PassThroughCommand(TyperCommand):
    """Command that records its raw arguments before Click parses them."""

    def parse_args(self, ctx: typer.Context, args: list[str]) -> list[str]:
        ctx.meta[RAW_ARGS_KEY] = list(args)
        return super().parse_args(ctx, args)


__all__ = ["LAUNCHER_FLAGS", "PassThroughCommand", "RAW_ARGS_KEY", "strip_launcher_flags"]
