"""
Configuration data models for flatlaunch.

These models define the structure of the launcher settings file
(/app/etc/flatlaunch.ini), with validation and type safety via Pydantic.

Fields left unset by the settings file stay ``None`` (or carry an
``*_explicit`` marker) until the resolver fills them from host facts.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

WIDEVINE_PATH_DEFAULT = "WidevineCdm"


class ExposePids(str, Enum):
    """How strongly the application depends on the expose-pids portal capability."""

    REQUIRED = "required"  # Refuse to launch without it
    RECOMMENDED = "recommended"  # Warn once, then launch anyway
    OPTIONAL = "optional"  # Don't check at all


# Key-file escapes; ";" only applies inside lists
KEY_FILE_ESCAPES = {
    "s": " ",
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    ";": ";",
}

KEY_FILE_TRUE = ("true", "1")
KEY_FILE_FALSE = ("false", "0")


def split_string_list(value: str) -> list[str]:
    """
    Split a desktop-file style string list.

    Items are separated by ``;`` and a trailing separator is optional.
    The key-file escapes ``\\s``, ``\\n``, ``\\t``, ``\\r``, ``\\\\`` and
    ``\\;`` are decoded; any other backslash sequence is kept as written.

    Example:
        >>> split_string_list("a;b\\\\;c;")
        ['a', 'b;c']
    """
    items: list[str] = []
    current: list[str] = []
    escaped = False
    for char in value:
        if escaped:
            if char in KEY_FILE_ESCAPES:
                current.append(KEY_FILE_ESCAPES[char])
            else:
                current.append("\\")
                current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ";":
            items.append("".join(current))
            current = []
        else:
            current.append(char)

    if escaped:
        current.append("\\")
    if current:
        items.append("".join(current))
    return [item.strip() for item in items]


def parse_key_file_bool(value: object) -> object:
    """
    Accept only the key-file spellings of a boolean.

    ``true``/``false`` and ``1``/``0`` are valid; anything else (``yes``,
    ``on``) is rejected instead of being coerced.
    """
    if isinstance(value, str):
        text = value.strip()
        if text in KEY_FILE_TRUE:
            return True
        if text in KEY_FILE_FALSE:
            return False
        raise ValueError(f"'{value}' is not a boolean (expected true, false, 1 or 0)")
    return value


class _StringListModel(BaseModel):
    """Base for groups whose list fields may arrive as raw ``a;b;c`` strings."""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def _coerce_list(cls, value: object) -> object:
        if isinstance(value, str):
            return split_string_list(value)
        return value


class ApplicationConfig(_StringListModel):
    """
    Identity and entry point of the wrapped application.

    Everything except ``config_dir``, ``first_run_urls`` and
    ``migrate_flags_file`` is filled in by the resolver when missing.
    """

    name: Optional[str] = Field(
        default=None,
        description="Short application name, used for flags and stamp file names",
    )
    entry_point: Optional[str] = Field(
        default=None,
        description="Absolute path of the browser binary to exec",
    )
    wrapper_script: Optional[str] = Field(
        default=None,
        description="Command exported as CHROME_WRAPPER (from the desktop file's Exec=)",
    )
    expose_pids: Optional[ExposePids] = Field(
        default=None,
        description="Policy when the portal cannot expose sandbox PIDs",
    )
    config_dir: Optional[str] = Field(
        default=None,
        description="Browser profile directory, relative to the user config dir",
    )
    first_run_urls: list[str] = Field(
        default_factory=list,
        description="URLs opened on the very first launch only",
    )
    migrate_flags_file: Optional[str] = Field(
        default=None,
        description="Legacy flags file name to migrate to <name>-flags.conf",
    )

    @field_validator("first_run_urls", mode="before")
    @classmethod
    def _split_urls(cls, value: object) -> object:
        return cls._coerce_list(value)


class SandboxHelperConfig(BaseModel):
    """Settings for the sandbox helper (zypak) that wraps the entry point."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(
        default=False,
        description="Run the entry point through the sandbox helper",
    )
    enabled_explicit: bool = Field(
        default=False,
        description="Whether 'enabled' came from the settings file",
    )
    sandbox_filename: Optional[str] = Field(
        default=None,
        description="Name of the SUID sandbox binary beside the entry point",
    )
    expose_widevine: bool = Field(
        default=False,
        description="Expose the Widevine CDM directory to the sandbox",
    )
    widevine_path: str = Field(
        default=WIDEVINE_PATH_DEFAULT,
        description="Widevine directory, relative to the application config dir",
    )

    @field_validator("enabled", "expose_widevine", mode="before")
    @classmethod
    def _strict_bool(cls, value: object) -> object:
        return parse_key_file_bool(value)


class CompositorHelperConfig(BaseModel):
    """Settings for the compositor helper (flextop) run before launch."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    enabled_explicit: bool = False

    @field_validator("enabled", mode="before")
    @classmethod
    def _strict_bool(cls, value: object) -> object:
        return parse_key_file_bool(value)


class DefaultFeaturesConfig(_StringListModel):
    """Browser features to enable or disable unless the user says otherwise."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)

    @field_validator("enabled", "disabled", mode="before")
    @classmethod
    def _split_features(cls, value: object) -> object:
        return cls._coerce_list(value)


class Settings(BaseModel):
    """
    Complete launcher settings.

    Produced partially by the loader and completed by the resolver. The
    model is frozen; every resolution step returns a new value.
    """

    model_config = ConfigDict(frozen=True)

    application: ApplicationConfig = Field(default_factory=ApplicationConfig)
    sandbox: SandboxHelperConfig = Field(default_factory=SandboxHelperConfig)
    compositor_helper: CompositorHelperConfig = Field(default_factory=CompositorHelperConfig)
    default_features: DefaultFeaturesConfig = Field(default_factory=DefaultFeaturesConfig)

    @property
    def is_resolved(self) -> bool:
        """Whether every field the resolver is responsible for has a value."""
        app = self.application
        if app.name is None or app.entry_point is None or app.wrapper_script is None:
            return False
        if app.expose_pids is None:
            return False
        if self.sandbox.enabled and self.sandbox.sandbox_filename is None:
            return False
        return True
