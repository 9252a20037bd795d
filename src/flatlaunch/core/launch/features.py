"""
Browser feature toggles.

A FeatureSet maps feature names to enabled/disabled. Sources are merged by
simply writing them in precedence order: the last write for a name wins and
there is no conflict error.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum

ENABLE_FEATURES_FLAG_PREFIX = "--enable-features="
DISABLE_FEATURES_FLAG_PREFIX = "--disable-features="


class FeatureStatus(str, Enum):
    """Requested state of a browser feature."""

    ENABLED = "enabled"
    DISABLED = "disabled"

    @property
    def flag_prefix(self) -> str:
        if self is FeatureStatus.ENABLED:
            return ENABLE_FEATURES_FLAG_PREFIX
        return DISABLE_FEATURES_FLAG_PREFIX


class FeatureSet:
    """
    Ordered feature name -> status mapping with last-write-wins semantics.

    Example:
        >>> features = FeatureSet()
        >>> features.set("Vulkan", FeatureStatus.ENABLED)
        >>> features.set("Vulkan", FeatureStatus.DISABLED)
        >>> features.as_flag(FeatureStatus.DISABLED)
        '--disable-features=Vulkan'
    """

    def __init__(self) -> None:
        self._statuses: dict[str, FeatureStatus] = {}

    def __len__(self) -> int:
        return len(self._statuses)

    def __contains__(self, name: object) -> bool:
        return name in self._statuses

    def __iter__(self) -> Iterator[str]:
        return iter(self._statuses)

    def set(self, name: str, status: FeatureStatus) -> None:
        """Record a status, replacing any earlier one for the same name."""
        self._statuses[name] = status

    def set_many(self, names: Iterable[str], status: FeatureStatus) -> None:
        for name in names:
            self.set(name, status)

    def apply_flag_value(self, value: str, status: FeatureStatus) -> None:
        """Apply a comma-separated ``--*-features=`` value, skipping empty items."""
        self.set_many((name for name in value.split(",") if name), status)

    def status(self, name: str) -> FeatureStatus | None:
        return self._statuses.get(name)

    def names(self, status: FeatureStatus) -> list[str]:
        """Names currently set to ``status``, in first-set order."""
        return [name for name, current in self._statuses.items() if current is status]

    def as_flag(self, status: FeatureStatus) -> str | None:
        """
        Format all features with ``status`` as a browser flag.

        Returns:
            e.g. ``--enable-features=A,B``, or None when no feature has that status
        """
        names = self.names(status)
        if not names:
            return None
        return status.flag_prefix + ",".join(names)


__all__ = [
    "DISABLE_FEATURES_FLAG_PREFIX",
    "ENABLE_FEATURES_FLAG_PREFIX",
    "FeatureSet",
    "FeatureStatus",
]
