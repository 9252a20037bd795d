"""
XDG base directory lookups.

Inside a Flatpak sandbox the XDG variables point into the per-app
``~/.var/app/<app-id>`` tree, so everything the launcher persists (flags
file, stamp files) is scoped to the application automatically.
"""

import os
from pathlib import Path

DEFAULT_DATA_DIRS = "/usr/local/share:/usr/share"


def _env_dir(variable: str) -> Path | None:
    value = os.environ.get(variable)
    if value and os.path.isabs(value):
        return Path(value)
    return None


def get_user_config_dir() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    return _env_dir("XDG_CONFIG_HOME") or Path.home() / ".config"


def get_user_data_dir() -> Path:
    """
    Get XDG data home directory.

    Returns:
        Path to data directory (defaults to ~/.local/share)
    """
    return _env_dir("XDG_DATA_HOME") or Path.home() / ".local" / "share"


def get_user_cache_dir() -> Path:
    """Get XDG cache home directory (defaults to ~/.cache)."""
    return _env_dir("XDG_CACHE_HOME") or Path.home() / ".cache"


def get_user_runtime_dir() -> Path:
    """
    Get XDG runtime directory.

    Falls back to the cache directory when XDG_RUNTIME_DIR is not set,
    which is what GLib-based applications do as well.
    """
    return _env_dir("XDG_RUNTIME_DIR") or get_user_cache_dir()


def get_user_data_dirs() -> list[Path]:
    """
    Get the system data directories from XDG_DATA_DIRS.

    Returns:
        Absolute paths in precedence order (defaults to /usr/local/share:/usr/share)
    """
    value = os.environ.get("XDG_DATA_DIRS") or DEFAULT_DATA_DIRS
    return [Path(entry) for entry in value.split(":") if entry and os.path.isabs(entry)]


def is_executable_file(path: Path) -> bool:
    """Check that a path exists and is executable by the current user."""
    return os.access(path, os.F_OK | os.X_OK)


__all__ = [
    "get_user_cache_dir",
    "get_user_config_dir",
    "get_user_data_dir",
    "get_user_data_dirs",
    "get_user_runtime_dir",
    "is_executable_file",
]
