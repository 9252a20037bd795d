"""
User flags file parsing.

The flags file (``<config dir>/<name>-flags.conf``) lets users persist
browser flags across launches. The format is line oriented:

    # comments and blank lines are ignored
    --ozone-platform-hint=auto --enable-gpu-rasterization
    features+=VaapiVideoDecoder,VaapiVideoEncoder
    features-=UseChromeOSDirectVideoDecoder

``features+=``/``features-=`` tokens enable/disable features; every other
token must be a ``--flag`` and is passed to the browser verbatim.

Parsing is a pure function over text; malformed tokens become warnings
instead of errors so a typo never prevents the browser from starting.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .features import FeatureStatus

logger = logging.getLogger(__name__)

FLAG_PREFIX = "--"
ENABLE_FEATURES_FLAGFILE_PREFIX = "features+="
DISABLE_FEATURES_FLAGFILE_PREFIX = "features-="


@dataclass(frozen=True)
class FeatureDirective:
    """A ``features+=``/``features-=`` entry from a flags file."""

    name: str
    status: FeatureStatus


@dataclass
class FlagsFileContents:
    """
    Parsed flags file.

    Attributes:
        args: Literal browser arguments, in file order
        directives: Feature directives, in file order
        warnings: Human-readable descriptions of discarded tokens
    """

    args: list[str] = field(default_factory=list)
    directives: list[FeatureDirective] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def tokenize_line(line: str) -> Iterator[str]:
    """
    Yield the tokens of one flags file line.

    Blank lines and ``#`` comment lines yield nothing.
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return
    yield from line.split()


def parse_flags_text(text: str, source: str = "<flags>") -> FlagsFileContents:
    """
    Parse flags file text.

    Args:
        text: File contents
        source: Name used in warning messages

    Returns:
        FlagsFileContents with args, feature directives and warnings

    Example:
        >>> contents = parse_flags_text("--foo\\nfeatures+=bar,baz")
        >>> contents.args
        ['--foo']
        >>> [d.name for d in contents.directives]
        ['bar', 'baz']
    """
    contents = FlagsFileContents()
    for line in text.splitlines():
        for token in tokenize_line(line):
            if token.startswith(ENABLE_FEATURES_FLAGFILE_PREFIX) or token.startswith(
                DISABLE_FEATURES_FLAGFILE_PREFIX
            ):
                status = (
                    FeatureStatus.ENABLED
                    if token.startswith(ENABLE_FEATURES_FLAGFILE_PREFIX)
                    else FeatureStatus.DISABLED
                )
                names = [name for name in token.split("=", 1)[1].split(",") if name]
                if not names:
                    contents.warnings.append(
                        f"Argument in '{source}' has an empty feature: {token}"
                    )
                contents.directives.extend(FeatureDirective(name, status) for name in names)
            elif not token.startswith(FLAG_PREFIX) or token == FLAG_PREFIX:
                contents.warnings.append(
                    f"Argument in '{source}' is not a flag (must start with '--'): {token}"
                )
            else:
                contents.args.append(token)
    return contents


def read_flags_file(path: Path) -> FlagsFileContents:
    """
    Read and parse a flags file, logging any warnings.

    A missing file yields empty contents.

    Raises:
        OSError: If the file exists but can't be read
        UnicodeDecodeError: If the file isn't valid UTF-8
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("Flags file '%s' not found", path)
        return FlagsFileContents()

    contents = parse_flags_text(text, source=str(path))
    for warning in contents.warnings:
        logger.warning(warning)
    return contents


def migrate_flags_file(flags_file: Path, legacy_file: Path) -> bool:
    """
    Move a legacy flags file into place.

    Only acts when ``flags_file`` doesn't exist yet and ``legacy_file``
    does. The legacy location is left with a comment pointing at the new
    file so users editing it know where their flags went.

    Returns:
        True if a migration happened. Failures are logged, not raised.
    """
    if flags_file.exists() or not legacy_file.exists():
        return False

    try:
        shutil.move(str(legacy_file), str(flags_file))
        legacy_file.write_text(
            f"# Your flags have been migrated to '{flags_file.name}'.", encoding="utf-8"
        )
    except OSError as e:
        logger.warning("Failed to migrate '%s' to '%s' file: %s", legacy_file, flags_file, e)
        return False

    logger.debug("Migrated flags file '%s' to '%s'", legacy_file, flags_file)
    return True


__all__ = [
    "FeatureDirective",
    "FlagsFileContents",
    "migrate_flags_file",
    "parse_flags_text",
    "read_flags_file",
    "tokenize_line",
]
