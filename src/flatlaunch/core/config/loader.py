"""
Settings file loading.

Reads the INI-style launcher settings file into a partially populated
:class:`Settings`. Values that are absent stay unset so the resolver can
infer them from the host; nothing here touches the host beyond reading the
settings file itself.

The settings path defaults to /app/etc/flatlaunch.ini and can be overridden
with the FLATLAUNCH_CONFIG_OVERRIDE environment variable.
"""

import configparser
import logging
import os
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import ValidationError

from flatlaunch.core.errors import ConfigInvariantError, ConfigParseError

from .models import Settings

logger = logging.getLogger(__name__)

CONFIG_OVERRIDE_ENV = "FLATLAUNCH_CONFIG_OVERRIDE"
CONFIG_FILE_PATH = Path("/app/etc/flatlaunch.ini")

# Settings file group -> (model section, {file key: model field})
CONFIG_SCHEMA: dict[str, tuple[str, dict[str, str]]] = {
    "Application": (
        "application",
        {
            "Name": "name",
            "EntryPoint": "entry_point",
            "WrapperScript": "wrapper_script",
            "ExposePids": "expose_pids",
            "ConfigDir": "config_dir",
            "FirstRunUrls": "first_run_urls",
            "MigrateFlagsFile": "migrate_flags_file",
        },
    ),
    "SandboxHelper": (
        "sandbox",
        {
            "Enabled": "enabled",
            "SandboxFilename": "sandbox_filename",
            "ExposeWidevine": "expose_widevine",
            "WidevinePath": "widevine_path",
        },
    ),
    "CompositorHelper": (
        "compositor_helper",
        {
            "Enabled": "enabled",
        },
    ),
    "DefaultFeatures": (
        "default_features",
        {
            "Enabled": "enabled",
            "Disabled": "disabled",
        },
    ),
}

# Sections whose "enabled" flag must remember whether the user set it
_EXPLICIT_ENABLED_SECTIONS = ("sandbox", "compositor_helper")


def get_config_path() -> Path:
    """
    Get path to the launcher settings file.

    Returns:
        Path from FLATLAUNCH_CONFIG_OVERRIDE, or /app/etc/flatlaunch.ini
    """
    if override := os.environ.get(CONFIG_OVERRIDE_ENV):
        return Path(override)
    return CONFIG_FILE_PATH


def read_key_file(path: Path) -> configparser.ConfigParser | None:
    """
    Parse a key file, returning None if it doesn't exist.

    Keys are case sensitive and values are taken literally (no ``%``
    interpolation), matching desktop-entry style files.

    Args:
        path: Path to the INI file

    Returns:
        Parsed ConfigParser, or None if the file is missing

    Raises:
        ConfigParseError: If the file can't be read or has invalid syntax
    """
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.optionxform = str  # type: ignore[assignment,method-assign]

    try:
        with path.open(encoding="utf-8") as f:
            parser.read_file(f, source=str(path))
    except FileNotFoundError:
        return None
    except configparser.Error as e:
        raise ConfigParseError(f"Invalid syntax in '{path}': {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigParseError(f"'{path}' is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigParseError(f"Failed to read '{path}': {e}") from e

    return parser


def key_file_to_dict(parser: configparser.ConfigParser) -> dict[str, Any]:
    """
    Map settings file groups and keys onto the Settings model layout.

    Unknown groups and keys are ignored. Only keys that are present end up
    in the result, so absent values keep their model defaults.

    Args:
        parser: Parsed settings file

    Returns:
        Nested dict suitable for ``Settings(**data)``
    """
    data: dict[str, Any] = {}
    for group, (section, keys) in CONFIG_SCHEMA.items():
        if not parser.has_section(group):
            continue
        values: dict[str, Any] = {}
        for key, field in keys.items():
            if parser.has_option(group, key):
                values[field] = parser.get(group, key).strip()
        if section in _EXPLICIT_ENABLED_SECTIONS:
            values["enabled_explicit"] = "enabled" in values
        if values:
            data[section] = values
    return data


def _is_unsafe_relative(value: str) -> bool:
    path = PurePosixPath(value)
    return path.is_absolute() or ".." in path.parts


def check_invariants(settings: Settings) -> None:
    """
    Validate static cross-field rules.

    Rules:
        - ExposeWidevine requires ConfigDir
        - ConfigDir and WidevinePath are joined under the user config
          directory, so they must be relative and free of ``..`` segments

    Raises:
        ConfigInvariantError: If a rule is violated
    """
    app = settings.application
    sandbox = settings.sandbox

    if sandbox.expose_widevine and not app.config_dir:
        raise ConfigInvariantError("ConfigDir must be set if ExposeWidevine is enabled")

    if app.config_dir is not None and _is_unsafe_relative(app.config_dir):
        raise ConfigInvariantError(
            f"ConfigDir must be a relative path without '..': {app.config_dir}"
        )

    if sandbox.expose_widevine and _is_unsafe_relative(sandbox.widevine_path):
        raise ConfigInvariantError(
            f"WidevinePath must be a relative path without '..': {sandbox.widevine_path}"
        )


def _describe_validation_error(error: ValidationError) -> str:
    details = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        details.append(f"{location}: {item['msg']}")
    return "; ".join(details)


def load_settings(path: Path | None = None) -> Settings:
    """
    Load the launcher settings file.

    A missing file is treated as empty, i.e. all values are inferred.

    Args:
        path: Settings file to read (defaults to get_config_path())

    Returns:
        Validated, possibly partial Settings instance

    Raises:
        ConfigParseError: If the file is malformed or a value is invalid
        ConfigInvariantError: If cross-field rules are violated

    Example:
        >>> settings = load_settings()
        >>> settings.application.name is None  # not set in the file
        True
    """
    if path is None:
        path = get_config_path()

    logger.debug("Loading config file '%s'", path)
    parser = read_key_file(path)
    if parser is None:
        logger.debug("Config file '%s' is missing, treating as empty", path)
        data: dict[str, Any] = {}
    else:
        data = key_file_to_dict(parser)

    try:
        settings = Settings(**data)
    except ValidationError as e:
        raise ConfigParseError(
            f"Invalid value in '{path}': {_describe_validation_error(e)}"
        ) from e

    check_invariants(settings)
    return settings


__all__ = [
    "CONFIG_FILE_PATH",
    "CONFIG_OVERRIDE_ENV",
    "check_invariants",
    "get_config_path",
    "key_file_to_dict",
    "load_settings",
    "read_key_file",
]
