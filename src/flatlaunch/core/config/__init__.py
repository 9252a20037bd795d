"""
Configuration models, loading, and resolution.

The loader reads the launcher settings file into a partial Settings value;
the resolver completes it from host facts.
"""

from .loader import (
    CONFIG_FILE_PATH,
    CONFIG_OVERRIDE_ENV,
    check_invariants,
    get_config_path,
    load_settings,
)
from .models import (
    ApplicationConfig,
    CompositorHelperConfig,
    DefaultFeaturesConfig,
    ExposePids,
    SandboxHelperConfig,
    Settings,
)
from .resolver import resolve_settings

__all__ = [
    # Models
    "ApplicationConfig",
    "CompositorHelperConfig",
    "DefaultFeaturesConfig",
    "ExposePids",
    "SandboxHelperConfig",
    "Settings",
    # Loader functions
    "CONFIG_FILE_PATH",
    "CONFIG_OVERRIDE_ENV",
    "check_invariants",
    "get_config_path",
    "load_settings",
    # Resolver
    "resolve_settings",
]
