"""
Desktop entry lookup.

Finds ``<app-id>.desktop`` in the XDG application directories and reads
keys from its ``[Desktop Entry]`` group.
"""

from __future__ import annotations

import configparser
import logging
from collections.abc import Iterable
from pathlib import Path

from flatlaunch.core.errors import ProbeError
from flatlaunch.utils.xdg import get_user_data_dir, get_user_data_dirs

logger = logging.getLogger(__name__)

DESKTOP_ENTRY_GROUP = "Desktop Entry"


class DesktopEntryLocator:
    """
    Locate and read desktop entries by application ID.

    Example:
        >>> locator = DesktopEntryLocator()
        >>> locator.get_exec("org.chromium.Chromium")
        '/app/bin/chromium %U'
    """

    def __init__(self, search_dirs: Iterable[Path] | None = None) -> None:
        """
        Args:
            search_dirs: Data directories to search, highest precedence first
                (defaults to XDG_DATA_HOME followed by XDG_DATA_DIRS)
        """
        self._search_dirs = list(search_dirs) if search_dirs is not None else None

    @property
    def search_dirs(self) -> list[Path]:
        if self._search_dirs is not None:
            return self._search_dirs
        return [get_user_data_dir(), *get_user_data_dirs()]

    def find(self, app_id: str) -> Path | None:
        """Return the first ``applications/<app_id>.desktop`` that exists."""
        filename = f"{app_id}.desktop"
        for data_dir in self.search_dirs:
            candidate = data_dir / "applications" / filename
            if candidate.is_file():
                logger.debug("Found desktop file '%s'", candidate)
                return candidate
        return None

    def get_exec(self, app_id: str) -> str:
        """
        Read the ``Exec=`` value of the application's desktop file.

        Raises:
            ProbeError: If no desktop file exists, it can't be parsed, or it
                has no Exec key
        """
        path = self.find(app_id)
        if path is None:
            raise ProbeError(f"Cannot find desktop file for '{app_id}'")

        parser = configparser.ConfigParser(interpolation=None, strict=False)
        parser.optionxform = str  # type: ignore[assignment,method-assign]
        try:
            with path.open(encoding="utf-8") as f:
                parser.read_file(f, source=str(path))
        except (configparser.Error, UnicodeDecodeError, OSError) as e:
            raise ProbeError(f"Failed to read desktop file '{path}': {e}") from e

        if not parser.has_option(DESKTOP_ENTRY_GROUP, "Exec"):
            raise ProbeError("Desktop file is missing 'Exec' key")
        return parser.get(DESKTOP_ENTRY_GROUP, "Exec")


__all__ = ["DesktopEntryLocator"]
