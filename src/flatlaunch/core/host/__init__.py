"""
Host introspection for the Flatpak sandbox.

Exposes a memoized HostProbe that answers questions about the host the
launcher runs in: app identity, desktop Exec= line, Flatpak version,
installed helper binaries, and portal capabilities.
"""

from .desktop import DesktopEntryLocator
from .models import Availability, HostFacts, SemVer, shared_tmp_supported
from .portal import PortalCapabilities, PortalClient
from .probe import HostProbe, check_for_binary

__all__ = [
    "Availability",
    "DesktopEntryLocator",
    "HostFacts",
    "HostProbe",
    "PortalCapabilities",
    "PortalClient",
    "SemVer",
    "check_for_binary",
    "shared_tmp_supported",
]
