"""
flatlaunch - Launcher for Chromium-based Flatpak applications.

Resolves the launcher settings file, host introspection, the user's flags
file, and the command line into a single exec of the sandboxed browser.
"""

__version__ = "0.4.0"

# Re-export core models for convenience
from flatlaunch.core.config.models import ExposePids, Settings
from flatlaunch.core.launch.models import LaunchPlan

__all__ = ["ExposePids", "LaunchPlan", "Settings", "__version__"]
