"""
Lazy, memoized host introspection.

HostProbe answers questions about the Flatpak sandbox the launcher runs in.
Every answer is computed on first use and cached for the life of the probe
(one probe per process in practice). Failures are raised as ProbeError and
never cached, so a failed question is simply asked again next time.

Example:
    >>> probe = HostProbe()
    >>> probe.app_id()
    'org.chromium.Chromium'
    >>> probe.sandbox_helper_available()
    True
"""

from __future__ import annotations

import configparser
import dataclasses
import logging
import os
from pathlib import Path

from flatlaunch.core.errors import ProbeError

from .desktop import DesktopEntryLocator
from .models import Availability, HostFacts, SemVer, shared_tmp_supported
from .portal import PortalClient

logger = logging.getLogger(__name__)

FLATPAK_INFO_PATH = Path("/.flatpak-info")
FLATPAK_INFO_APPLICATION = "Application"
FLATPAK_INFO_APPLICATION_NAME = "name"
FLATPAK_INFO_INSTANCE = "Instance"
FLATPAK_INFO_INSTANCE_FP_VERSION = "flatpak-version"

SANDBOX_HELPER_PATH = Path("/app/bin/zypak-wrapper.sh")
COMPOSITOR_HELPER_PATH = Path("/app/bin/flextop-init")


def check_for_binary(path: Path) -> bool:
    """
    Check whether an executable exists at a fixed path.

    Returns:
        True if the file exists and is executable; False if it is missing
        or not accessible to us

    Raises:
        ProbeError: For any other OS error (I/O error, loop, ...)
    """
    try:
        path.stat()
    except (FileNotFoundError, NotADirectoryError, PermissionError):
        return False
    except OSError as e:
        raise ProbeError(f"Failed to check {path} existence: {e}") from e

    return os.access(path, os.X_OK)


class HostProbe:
    """
    Memoized view of the host the launcher runs in.

    All paths and collaborators are injectable so the probe can be pointed
    at a fake host tree in tests.
    """

    def __init__(
        self,
        *,
        info_path: Path = FLATPAK_INFO_PATH,
        sandbox_helper_path: Path = SANDBOX_HELPER_PATH,
        compositor_helper_path: Path = COMPOSITOR_HELPER_PATH,
        desktop_locator: DesktopEntryLocator | None = None,
        portal: PortalClient | None = None,
    ) -> None:
        self._info_path = info_path
        self._sandbox_helper_path = sandbox_helper_path
        self._compositor_helper_path = compositor_helper_path
        self._desktop_locator = desktop_locator or DesktopEntryLocator()
        self._portal = portal or PortalClient()
        self._facts = HostFacts()

    @property
    def facts(self) -> HostFacts:
        """Snapshot of everything learned so far (unknown facts stay unknown)."""
        return dataclasses.replace(self._facts)

    # ============================================================================
    # Host manifest
    # ============================================================================

    def _read_info_key(self, group: str, key: str) -> str:
        parser = configparser.ConfigParser(interpolation=None, strict=False)
        parser.optionxform = str  # type: ignore[assignment,method-assign]
        try:
            with self._info_path.open(encoding="utf-8") as f:
                parser.read_file(f, source=str(self._info_path))
        except (configparser.Error, UnicodeDecodeError, OSError) as e:
            raise ProbeError(f"Loading Flatpak info: {e}") from e

        if not parser.has_option(group, key):
            raise ProbeError(
                f"Key '{key}' in group '{group}' not found in '{self._info_path}'"
            )
        return parser.get(group, key).strip()

    def app_id(self) -> str:
        """The Flatpak application ID, from the host manifest."""
        if self._facts.app_id is None:
            self._facts.app_id = self._read_info_key(
                FLATPAK_INFO_APPLICATION, FLATPAK_INFO_APPLICATION_NAME
            )
            logger.debug("App ID: %s", self._facts.app_id)
        return self._facts.app_id

    def app_exec(self) -> str:
        """The raw ``Exec=`` line of the application's desktop file."""
        if self._facts.app_exec_line is None:
            try:
                app_id = self.app_id()
            except ProbeError as e:
                raise ProbeError(f"Getting app ID: {e}") from e
            self._facts.app_exec_line = self._desktop_locator.get_exec(app_id)
        return self._facts.app_exec_line

    def host_runtime_version(self) -> SemVer:
        """The version of Flatpak that started this sandbox."""
        if self._facts.host_runtime_version is None:
            try:
                version_str = self._read_info_key(
                    FLATPAK_INFO_INSTANCE, FLATPAK_INFO_INSTANCE_FP_VERSION
                )
            except ProbeError as e:
                raise ProbeError(f"Getting Flatpak version: {e}") from e

            version = SemVer.parse(version_str)
            if version is None:
                raise ProbeError(f"Failed to match Flatpak version '{version_str}'")

            logger.debug("Flatpak version: %s", version)
            self._facts.host_runtime_version = version
        return self._facts.host_runtime_version

    # ============================================================================
    # Capabilities
    # ============================================================================

    def sandbox_helper_available(self) -> bool:
        """Whether the zypak sandbox wrapper is installed."""
        if not self._facts.sandbox_helper_available.is_known:
            available = check_for_binary(self._sandbox_helper_path)
            if available:
                logger.debug("Sandbox helper is available")
            else:
                logger.debug(
                    "Sandbox helper is not available (%s not found)", self._sandbox_helper_path
                )
            self._facts.sandbox_helper_available = Availability.from_bool(available)
        return bool(self._facts.sandbox_helper_available)

    def compositor_helper_available(self) -> bool:
        """Whether the flextop-init compositor helper is installed."""
        if not self._facts.compositor_helper_available.is_known:
            available = check_for_binary(self._compositor_helper_path)
            if available:
                logger.debug("Compositor helper is available")
            else:
                logger.debug(
                    "Compositor helper is not available (%s not found)",
                    self._compositor_helper_path,
                )
            self._facts.compositor_helper_available = Availability.from_bool(available)
        return bool(self._facts.compositor_helper_available)

    def expose_pids_available(self) -> bool:
        """Whether the Flatpak portal can expose sandbox PIDs to the host."""
        if not self._facts.expose_pids_capability_available.is_known:
            available = self._portal.get_capabilities().expose_pids
            logger.debug("expose-pids is %savailable", "" if available else "not ")
            self._facts.expose_pids_capability_available = Availability.from_bool(available)
        return bool(self._facts.expose_pids_capability_available)

    def shared_tmp_available(self) -> bool:
        """Whether /tmp is shared between instances of the app (Flatpak >= 1.11.1)."""
        if not self._facts.shared_tmp_available.is_known:
            version = self.host_runtime_version()
            available = shared_tmp_supported(version)
            if available:
                logger.debug("Flatpak version is >= 1.11.1, shared /tmp is available")
            else:
                logger.debug("Flatpak version is < 1.11.1, shared /tmp is not available")
            self._facts.shared_tmp_available = Availability.from_bool(available)
        return bool(self._facts.shared_tmp_available)


__all__ = [
    "COMPOSITOR_HELPER_PATH",
    "FLATPAK_INFO_PATH",
    "HostProbe",
    "SANDBOX_HELPER_PATH",
    "check_for_binary",
]
