"""
Launch service: clean API for resolving settings and launching the browser.

Orchestrates the full launcher run: load and resolve settings, enforce the
expose-pids policy, run the compositor helper, assemble the launch plan from
every argument source, and exec.

Usage:
    >>> from flatlaunch.core.services.launch import LaunchService
    >>> service = LaunchService.from_config()
    >>> service.launch(sys.argv[1:])  # Does not return, replaces process
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from flatlaunch.core.config.loader import load_settings
from flatlaunch.core.config.models import ExposePids, Settings
from flatlaunch.core.config.resolver import APP_ROOT, resolve_settings
from flatlaunch.core.errors import FlatlaunchError, PolicyBlockedError, ProbeError
from flatlaunch.core.host.probe import HostProbe
from flatlaunch.core.launch.features import FeatureStatus
from flatlaunch.core.launch.flags_file import migrate_flags_file, read_flags_file
from flatlaunch.core.launch.launcher import LaunchBuilder, exec_plan
from flatlaunch.core.launch.models import LaunchPlan
from flatlaunch.core.launch.stamps import (
    STAMP_EXPOSE_PIDS,
    STAMP_FIRST_RUN,
    stamp_path,
    touch_stamp,
)
from flatlaunch.utils.xdg import get_user_config_dir, get_user_data_dir, get_user_runtime_dir

from .notifier import LoggingNotifier, PolicyDecision, PolicyNotifier

logger = logging.getLogger(__name__)

COMPOSITOR_HELPER_COMMAND = "flextop-init"

DEFAULT_ENABLED_FEATURES: tuple[str, ...] = ()
DEFAULT_DISABLED_FEATURES: tuple[str, ...] = ("WebAssemblyTrapHandler",)


def _with_context(error: FlatlaunchError, context: str) -> FlatlaunchError:
    """Copy an error with a stage prefix, keeping its type."""
    return type(error)(f"{context}: {error}")


class LaunchService:
    """
    Service for resolving settings and launching the browser.

    Example:
        >>> service = LaunchService.from_config()
        >>> plan = service.prepare(["--incognito"])
        >>> plan.argv[0]
        'zypak-wrapper.sh'
    """

    def __init__(
        self,
        settings: Settings,
        probe: HostProbe,
        notifier: PolicyNotifier | None = None,
        *,
        config_dir: Path | None = None,
        data_dir: Path | None = None,
        runtime_dir: Path | None = None,
    ) -> None:
        """
        Initialize service with dependencies.

        Args:
            settings: Fully resolved settings
            probe: Host probe (shared with the resolver so facts are reused)
            notifier: Presents policy decisions (logs only if None)
            config_dir: User config dir (defaults to XDG_CONFIG_HOME)
            data_dir: User data dir for stamp files (defaults to XDG_DATA_HOME)
            runtime_dir: User runtime dir (defaults to XDG_RUNTIME_DIR)
        """
        if not settings.is_resolved:
            raise ValueError("LaunchService requires fully resolved settings")
        self._settings = settings
        self._probe = probe
        self._notifier = notifier or LoggingNotifier()
        self._config_dir = config_dir or get_user_config_dir()
        self._data_dir = data_dir or get_user_data_dir()
        self._runtime_dir = runtime_dir or get_user_runtime_dir()

    @classmethod
    def from_config(
        cls,
        notifier: PolicyNotifier | None = None,
        *,
        config_path: Path | None = None,
        probe: HostProbe | None = None,
        app_root: Path = APP_ROOT,
    ) -> LaunchService:
        """
        Create service by loading and resolving the settings file.

        Args:
            notifier: Presents policy decisions
            config_path: Settings file (defaults to the standard location)
            probe: Host probe (a new one if None)
            app_root: Application install root for entry point inference

        Raises:
            ConfigParseError, ConfigInvariantError: "Failed to load config file: ..."
            InferenceError, ProbeError: "Failed to fill defaults: ..."
        """
        if probe is None:
            probe = HostProbe()

        try:
            settings = load_settings(config_path)
        except FlatlaunchError as e:
            raise _with_context(e, "Failed to load config file") from e

        try:
            settings = resolve_settings(settings, probe, app_root=app_root)
        except FlatlaunchError as e:
            raise _with_context(e, "Failed to fill defaults") from e

        return cls(settings, probe, notifier)

    @property
    def settings(self) -> Settings:
        """The resolved settings."""
        return self._settings

    @property
    def probe(self) -> HostProbe:
        return self._probe

    @property
    def name(self) -> str:
        assert self._settings.application.name is not None
        return self._settings.application.name

    @property
    def flags_file_path(self) -> Path:
        """Location of the user's persisted flags file."""
        return self._config_dir / f"{self.name}-flags.conf"

    # ============================================================================
    # Pre-launch checks
    # ============================================================================

    def check_expose_pids(self) -> None:
        """
        Enforce the expose-pids policy.

        ``optional`` skips the check. Otherwise, when the portal lacks the
        capability, ``recommended`` shows a warning (until the user opts out)
        and continues, while ``required`` shows an error and refuses.

        Raises:
            ProbeError: "Failed to get expose-pids state: ..."
            PolicyBlockedError: If the policy is required and unavailable
        """
        policy = self._settings.application.expose_pids
        if policy is ExposePids.OPTIONAL:
            return

        try:
            available = self._probe.expose_pids_available()
        except ProbeError as e:
            raise ProbeError(f"Failed to get expose-pids state: {e}") from e
        if available:
            return

        assert policy is not None
        decision = PolicyDecision.for_policy(policy, self.name)
        if decision.can_suppress:
            stamp = stamp_path(self.name, STAMP_EXPOSE_PIDS, self._data_dir)
            if stamp.exists():
                logger.debug("expose-pids warning suppressed by '%s'", stamp)
                return
            if self._notifier.notify(decision):
                touch_stamp(stamp)
            return

        self._notifier.notify(decision)
        raise PolicyBlockedError(
            f"{self.name} requires expose-pids, which the Flatpak portal does not support"
        )

    def run_compositor_helper(self) -> None:
        """Run flextop-init if enabled; failures are logged, not raised."""
        if not self._settings.compositor_helper.enabled:
            return
        try:
            subprocess.run([COMPOSITOR_HELPER_COMMAND], check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            logger.warning("Failed to run %s: %s", COMPOSITOR_HELPER_COMMAND, e)

    # ============================================================================
    # Launch assembly
    # ============================================================================

    def _widevine_path(self) -> str | None:
        app = self._settings.application
        sandbox = self._settings.sandbox
        if not sandbox.expose_widevine or app.config_dir is None:
            return None
        return str(self._config_dir / app.config_dir / sandbox.widevine_path)

    def _apply_flags_file(self, builder: LaunchBuilder) -> None:
        migrate_from = self._settings.application.migrate_flags_file
        if migrate_from is not None:
            migrate_flags_file(self.flags_file_path, self._config_dir / migrate_from)

        try:
            contents = read_flags_file(self.flags_file_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read flags file '%s': %s", self.flags_file_path, e)
            return
        builder.apply_flags_file(contents)

    def _apply_first_run_urls(self, builder: LaunchBuilder) -> None:
        urls = self._settings.application.first_run_urls
        if not urls:
            return
        stamp = stamp_path(self.name, STAMP_FIRST_RUN, self._data_dir)
        if stamp.exists():
            return
        builder.add_args(urls)
        touch_stamp(stamp)

    def build_launcher(self, argv: Sequence[str]) -> LaunchBuilder:
        """
        Create a LaunchBuilder with every argument source applied.

        Feature precedence (lowest to highest): built-in defaults, the
        settings file's DefaultFeatures, the flags file, the command line.
        Arguments are ordered: flags file, first-run URLs, command line.

        Args:
            argv: Command-line arguments for the browser

        Raises:
            ProbeError: If the app ID can't be determined
        """
        try:
            app_id = self._probe.app_id()
        except ProbeError as e:
            raise ProbeError(f"Failed to get app ID: {e}") from e

        builder = LaunchBuilder.from_settings(self._settings, app_id)
        widevine_path = self._widevine_path()
        if builder.use_sandbox and widevine_path is not None:
            builder.expose_widevine(widevine_path)

        features = builder.features
        features.set_many(DEFAULT_ENABLED_FEATURES, FeatureStatus.ENABLED)
        features.set_many(DEFAULT_DISABLED_FEATURES, FeatureStatus.DISABLED)
        features.set_many(self._settings.default_features.enabled, FeatureStatus.ENABLED)
        features.set_many(self._settings.default_features.disabled, FeatureStatus.DISABLED)

        self._apply_flags_file(builder)
        self._apply_first_run_urls(builder)
        builder.add_args(argv)
        return builder

    def prepare(self, argv: Sequence[str]) -> LaunchPlan:
        """
        Run every pre-launch step and return the final plan.

        Args:
            argv: Command-line arguments for the browser

        Returns:
            Finalized LaunchPlan

        Raises:
            ProbeError: If a host query fails
            PolicyBlockedError: If the expose-pids policy forbids launching
        """
        self.check_expose_pids()
        self.run_compositor_helper()
        builder = self.build_launcher(argv)
        return builder.finalize(self._runtime_dir)

    def launch(self, argv: Sequence[str]) -> None:
        """
        Prepare and exec the browser.

        This function does NOT return on success - it replaces the current
        process with the browser process.

        Raises:
            FlatlaunchError: If any step fails (ExecError if exec itself fails)
        """
        plan = self.prepare(argv)
        exec_plan(plan)


__all__ = [
    "DEFAULT_DISABLED_FEATURES",
    "DEFAULT_ENABLED_FEATURES",
    "LaunchService",
]
