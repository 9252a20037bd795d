"""
Stamp files.

Empty marker files recording that a one-time action already happened, so
it isn't repeated on the next launch. They live in the user data dir and
are named ``flatpak-<name>-<purpose>-stamp``, the convention shared by the
Chromium-based Flatpaks.
"""

from __future__ import annotations

import logging
from pathlib import Path

from flatlaunch.utils.xdg import get_user_data_dir

logger = logging.getLogger(__name__)

STAMP_FIRST_RUN = "run"
# "mimic" for compatibility with stamp files written by earlier launchers
STAMP_EXPOSE_PIDS = "mimic"


def stamp_path(name: str, purpose: str, data_dir: Path | None = None) -> Path:
    """Path of the stamp file for ``purpose`` (under the user data dir by default)."""
    if data_dir is None:
        data_dir = get_user_data_dir()
    return data_dir / f"flatpak-{name}-{purpose}-stamp"


def touch_stamp(path: Path) -> bool:
    """
    Create an empty stamp file.

    Returns:
        True on success; failures are logged as warnings
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")
    except OSError as e:
        logger.warning("Failed to touch stamp file '%s': %s", path, e)
        return False
    return True


__all__ = ["STAMP_EXPOSE_PIDS", "STAMP_FIRST_RUN", "stamp_path", "touch_stamp"]
