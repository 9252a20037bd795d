"""
Browser launcher.

Handles argument accumulation, feature flag folding, environment setup,
and exec-based launch.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from flatlaunch.core.config.models import Settings
from flatlaunch.core.errors import ExecError

from .features import (
    DISABLE_FEATURES_FLAG_PREFIX,
    ENABLE_FEATURES_FLAG_PREFIX,
    FeatureSet,
    FeatureStatus,
)
from .flags_file import FlagsFileContents
from .models import SANDBOX_WRAPPER, LaunchPlan

logger = logging.getLogger(__name__)

ENV_TMPDIR = "TMPDIR"
ENV_CHROME_WRAPPER = "CHROME_WRAPPER"
ENV_SANDBOX_FILENAME = "ZYPAK_SANDBOX_FILENAME"
ENV_EXPOSE_WIDEVINE_PATH = "ZYPAK_EXPOSE_WIDEVINE_PATH"


class LaunchBuilder:
    """
    Accumulates arguments and feature toggles into a LaunchPlan.

    ``--enable-features=`` and ``--disable-features=`` arguments are not
    stored literally: the last one of each kind is captured and folded into
    the feature set at finalize time, after every other source, so the
    command line always has the final say.

    Example:
        >>> builder = LaunchBuilder("org.chromium.Chromium", "/app/chromium/chromium",
        ...                         "/app/bin/chromium")
        >>> builder.add_args(["--incognito", "--enable-features=Vulkan"])
        >>> plan = builder.finalize(Path("/run/user/1000"))
        >>> plan.argv
        ('/app/chromium/chromium', '--enable-features=Vulkan', '--incognito')
    """

    def __init__(self, app_id: str, entry_point: str, wrapper_script: str) -> None:
        self._app_id = app_id
        self._entry_point = entry_point
        self._wrapper_script = wrapper_script
        self._args: list[str] = []
        self._features = FeatureSet()
        self._enable_features: str | None = None
        self._disable_features: str | None = None
        self._use_sandbox = False
        self._sandbox_filename: str | None = None
        self._widevine_path: str | None = None
        self._finalized = False

    @classmethod
    def from_settings(cls, settings: Settings, app_id: str) -> LaunchBuilder:
        """
        Seed a builder from resolved settings.

        Sets the entry point, wrapper script and sandbox filename; the
        Widevine path is left to the caller since it depends on the user's
        config directory.
        """
        app = settings.application
        if app.entry_point is None or app.wrapper_script is None:
            raise ValueError("Settings must be resolved before building a launcher")

        builder = cls(app_id, app.entry_point, app.wrapper_script)
        if settings.sandbox.enabled:
            builder.enable_sandbox(settings.sandbox.sandbox_filename)
        return builder

    @property
    def features(self) -> FeatureSet:
        """The feature set owned by this builder."""
        return self._features

    @property
    def args(self) -> list[str]:
        """Literal arguments accumulated so far."""
        return list(self._args)

    @property
    def use_sandbox(self) -> bool:
        return self._use_sandbox

    def enable_sandbox(
        self, sandbox_filename: str | None = None, widevine_path: str | None = None
    ) -> None:
        """Run the entry point through the sandbox wrapper."""
        self._use_sandbox = True
        self._sandbox_filename = sandbox_filename
        if widevine_path is not None:
            self.expose_widevine(widevine_path)

    def expose_widevine(self, widevine_path: str) -> None:
        """Make the Widevine CDM directory visible inside the sandbox."""
        if not self._use_sandbox:
            raise ValueError("The sandbox wrapper must be enabled to expose Widevine")
        self._widevine_path = widevine_path

    def add_arg(self, arg: str) -> None:
        """Add one browser argument, capturing feature flags."""
        if arg.startswith(ENABLE_FEATURES_FLAG_PREFIX):
            self._enable_features = arg[len(ENABLE_FEATURES_FLAG_PREFIX) :]
        elif arg.startswith(DISABLE_FEATURES_FLAG_PREFIX):
            self._disable_features = arg[len(DISABLE_FEATURES_FLAG_PREFIX) :]
        else:
            self._args.append(arg)

    def add_args(self, args: Iterable[str]) -> None:
        for arg in args:
            self.add_arg(arg)

    def apply_flags_file(self, contents: FlagsFileContents) -> None:
        """Apply a parsed flags file: feature directives first, then its arguments."""
        for directive in contents.directives:
            self._features.set(directive.name, directive.status)
        self.add_args(contents.args)

    def _build_env(self, runtime_dir: Path) -> dict[str, str]:
        env = {
            ENV_TMPDIR: str(runtime_dir / "app" / self._app_id),
            ENV_CHROME_WRAPPER: self._wrapper_script,
        }
        if self._use_sandbox and self._sandbox_filename is not None:
            env[ENV_SANDBOX_FILENAME] = self._sandbox_filename
        if self._use_sandbox and self._widevine_path is not None:
            env[ENV_EXPOSE_WIDEVINE_PATH] = self._widevine_path
        return env

    def _build_argv(self) -> tuple[str, ...]:
        argv: list[str] = []
        if self._use_sandbox:
            argv.append(SANDBOX_WRAPPER)
        argv.append(self._entry_point)

        for status in (FeatureStatus.ENABLED, FeatureStatus.DISABLED):
            flag = self._features.as_flag(status)
            if flag is not None:
                argv.append(flag)

        argv.extend(self._args)
        return tuple(argv)

    def finalize(self, runtime_dir: Path) -> LaunchPlan:
        """
        Complete the feature merge and assemble the launch plan.

        Can only be called once.

        Args:
            runtime_dir: User runtime directory; TMPDIR is set to
                ``<runtime_dir>/app/<app id>``

        Returns:
            LaunchPlan with argv and environment overrides
        """
        if self._finalized:
            raise RuntimeError("LaunchBuilder.finalize() was already called")
        self._finalized = True

        if self._enable_features is not None:
            self._features.apply_flag_value(self._enable_features, FeatureStatus.ENABLED)
        if self._disable_features is not None:
            self._features.apply_flag_value(self._disable_features, FeatureStatus.DISABLED)

        plan = LaunchPlan(
            argv=self._build_argv(),
            env=self._build_env(runtime_dir),
            use_sandbox_wrapper=self._use_sandbox,
        )
        for variable, value in plan.env.items():
            logger.debug("setenv: %s=%s", variable, value)
        for arg in plan.argv:
            logger.debug("Arg: '%s'", arg)
        return plan


def build_exec_env(plan: LaunchPlan) -> dict[str, str]:
    """
    Build the environment for exec.

    Returns:
        A copy of the current environment with the plan's overrides applied
    """
    env = os.environ.copy()
    env.update(plan.env)
    return env


def exec_plan(plan: LaunchPlan) -> None:
    """
    Exec the planned command (replaces current process).

    This function does NOT return on success - argv[0] is looked up in PATH
    and the current process image is replaced via os.execvpe().

    Raises:
        ExecError: If exec fails or the plan cannot be passed to exec
    """
    try:
        os.execvpe(plan.executable, list(plan.argv), build_exec_env(plan))
    except OSError as e:
        raise ExecError(f"Failed to exec: {e.strerror or e}") from e
    except ValueError as e:
        # argv or env holding a NUL byte
        raise ExecError(f"Failed to exec: {e}") from e


__all__ = [
    "ENV_CHROME_WRAPPER",
    "ENV_EXPOSE_WIDEVINE_PATH",
    "ENV_SANDBOX_FILENAME",
    "ENV_TMPDIR",
    "LaunchBuilder",
    "build_exec_env",
    "exec_plan",
]
