"""Utility modules for flatlaunch."""

from .xdg import (
    get_user_config_dir,
    get_user_data_dir,
    get_user_data_dirs,
    get_user_runtime_dir,
    is_executable_file,
)

__all__ = [
    "get_user_config_dir",
    "get_user_data_dir",
    "get_user_data_dirs",
    "get_user_runtime_dir",
    "is_executable_file",
]
