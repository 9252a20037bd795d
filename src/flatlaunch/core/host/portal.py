"""
Flatpak portal capability queries.

The portal is reached through the ``gdbus`` command line tool that ships
with every GLib-based Flatpak runtime. Both properties are fetched with a
single ``org.freedesktop.DBus.Properties.GetAll`` call; gdbus prints the
reply as GVariant text, e.g.::

    ({'version': <uint32 6>, 'supports': <uint32 1>},)
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass

from flatlaunch.core.errors import ProbeError

logger = logging.getLogger(__name__)

PORTAL_BUS_NAME = "org.freedesktop.portal.Flatpak"
PORTAL_OBJECT_PATH = "/org/freedesktop/portal/Flatpak"
PORTAL_INTERFACE = PORTAL_BUS_NAME

PORTAL_MINIMUM_VERSION = 4
SUPPORTS_EXPOSE_PIDS = 1 << 0

GDBUS_TIMEOUT = 10

_PROPERTY_PATTERN = re.compile(
    r"'(?P<name>[\w-]+)':\s*<(?:(?P<type>[a-z0-9]+)\s+)?(?P<value>[^>]*)>"
)


@dataclass(frozen=True)
class PortalCapabilities:
    """The portal properties the launcher cares about."""

    version: int
    supports: int

    @property
    def expose_pids(self) -> bool:
        """Whether sandboxed processes can see each other's host PIDs."""
        if self.version < PORTAL_MINIMUM_VERSION:
            logger.debug(
                "Portal version too old for expose-pids (%d < %d)",
                self.version,
                PORTAL_MINIMUM_VERSION,
            )
            return False
        if not self.supports & SUPPORTS_EXPOSE_PIDS:
            logger.debug("expose-pids is not supported by the running Flatpak portal instance")
            return False
        return True


def parse_properties(output: str) -> dict[str, tuple[str | None, str]]:
    """
    Parse gdbus GetAll output into ``{name: (type, value)}``.

    The type is None when gdbus printed the value without an annotation
    (which is what it does for int32 and strings).
    """
    return {
        match.group("name"): (match.group("type"), match.group("value").strip())
        for match in _PROPERTY_PATTERN.finditer(output)
    }


def _get_uint32(properties: dict[str, tuple[str | None, str]], name: str) -> int:
    if name not in properties:
        raise ProbeError(f"Failed to read '{name}'")
    type_name, value = properties[name]
    if type_name != "uint32":
        raise ProbeError(f"Invalid type '{type_name or 'unknown'}' for '{name}'")
    try:
        return int(value)
    except ValueError as e:
        raise ProbeError(f"Invalid value '{value}' for '{name}'") from e


class PortalClient:
    """Read-only client for the Flatpak portal's D-Bus properties."""

    def __init__(self, gdbus: str = "gdbus", timeout: float = GDBUS_TIMEOUT) -> None:
        self._gdbus = gdbus
        self._timeout = timeout

    def _command(self) -> list[str]:
        return [
            self._gdbus,
            "call",
            "--session",
            "--dest",
            PORTAL_BUS_NAME,
            "--object-path",
            PORTAL_OBJECT_PATH,
            "--method",
            "org.freedesktop.DBus.Properties.GetAll",
            PORTAL_INTERFACE,
        ]

    def get_capabilities(self) -> PortalCapabilities:
        """
        Query the portal's ``version`` and ``supports`` properties.

        Returns:
            PortalCapabilities with both values

        Raises:
            ProbeError: If the call fails or a property is missing or mistyped
        """
        try:
            result = subprocess.run(
                self._command(),
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            raise ProbeError(f"Failed to get portal proxy: '{self._gdbus}' not found") from e
        except subprocess.TimeoutExpired as e:
            raise ProbeError(
                f"Failed to get portal proxy: no reply within {self._timeout}s"
            ) from e
        except OSError as e:
            raise ProbeError(f"Failed to get portal proxy: {e}") from e

        if result.returncode != 0:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise ProbeError(f"Failed to get portal proxy: {detail}")

        properties = parse_properties(result.stdout)
        version = _get_uint32(properties, "version")
        # Older portals don't have 'supports' at all
        supports = _get_uint32(properties, "supports") if version >= PORTAL_MINIMUM_VERSION else 0
        return PortalCapabilities(version=version, supports=supports)


__all__ = [
    "PORTAL_MINIMUM_VERSION",
    "PortalCapabilities",
    "PortalClient",
    "parse_properties",
]
