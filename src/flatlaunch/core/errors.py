"""
Error taxonomy for the launcher.

Every error here is fatal to the run: it unwinds to the CLI, which prints it
and exits with status 1 before any exec is attempted. Each layer re-raises
with a contextual prefix so the final message reads like a breadcrumb trail,
e.g. ``Failed to infer wrapper script: Cannot find desktop file for 'org.x.Y'``.
"""


class FlatlaunchError(Exception):
    """Base exception for launcher errors."""


class ConfigParseError(FlatlaunchError):
    """The settings file is malformed or holds an invalid value."""


class ConfigInvariantError(FlatlaunchError):
    """The settings file violates a cross-field rule."""


class InferenceError(FlatlaunchError):
    """A required setting was not configured and could not be derived."""


class ProbeError(FlatlaunchError):
    """Querying the host failed for a reason other than "not found"."""


class ExecError(FlatlaunchError):
    """Replacing the process with the target application failed."""


class PolicyBlockedError(FlatlaunchError):
    """The expose-pids policy is ``required`` and the host cannot provide it."""


__all__ = [
    "ConfigInvariantError",
    "ConfigParseError",
    "ExecError",
    "FlatlaunchError",
    "InferenceError",
    "PolicyBlockedError",
    "ProbeError",
]
