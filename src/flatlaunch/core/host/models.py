"""
Data models for host probing.

Each boolean fact is an explicit tri-state so "not yet asked" can never be
confused with "asked, and the answer was no".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

SEMVER_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)")


class Availability(str, Enum):
    """Cached state of a host capability."""

    UNKNOWN = "unknown"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"

    @classmethod
    def from_bool(cls, available: bool) -> Availability:
        return cls.AVAILABLE if available else cls.UNAVAILABLE

    @property
    def is_known(self) -> bool:
        return self is not Availability.UNKNOWN

    def __bool__(self) -> bool:
        return self is Availability.AVAILABLE


@dataclass(frozen=True, order=True)
class SemVer:
    """A major.minor.patch version triple."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, value: str) -> SemVer | None:
        """
        Parse the leading ``X.Y.Z`` of a version string.

        Trailing text (``1.14.4-rc1``) is ignored.

        Returns:
            SemVer, or None if the string doesn't start with X.Y.Z
        """
        match = SEMVER_PATTERN.match(value)
        if match is None:
            return None
        return cls(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def shared_tmp_supported(version: SemVer) -> bool:
    """Whether a Flatpak of this version shares /tmp between app instances (>= 1.11.1)."""
    return (
        version.major > 1
        or (version.major == 1 and version.minor > 11)
        or (version.major == 1 and version.minor == 11 and version.patch >= 1)
    )


@dataclass
class HostFacts:
    """
    Memoized host facts.

    Attributes:
        app_id: Flatpak application ID (e.g. "org.chromium.Chromium")
        app_exec_line: Raw Exec= value of the application's desktop file
        host_runtime_version: Version of the Flatpak running the sandbox
        sandbox_helper_available: Whether the zypak wrapper is installed
        compositor_helper_available: Whether flextop-init is installed
        expose_pids_capability_available: Whether the portal can expose PIDs
        shared_tmp_available: Whether /tmp is shared between instances
    """

    app_id: str | None = None
    app_exec_line: str | None = None
    host_runtime_version: SemVer | None = None
    sandbox_helper_available: Availability = field(default=Availability.UNKNOWN)
    compositor_helper_available: Availability = field(default=Availability.UNKNOWN)
    expose_pids_capability_available: Availability = field(default=Availability.UNKNOWN)
    shared_tmp_available: Availability = field(default=Availability.UNKNOWN)


__all__ = [
    "Availability",
    "HostFacts",
    "SemVer",
    "shared_tmp_supported",
]
