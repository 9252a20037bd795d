"""
Policy decision notifications.

When the expose-pids capability is missing the launcher has to tell the
user. How that happens (a dialog, a console panel, nothing at all) is up to
the interface; the service only hands over a PolicyDecision and gets back
whether the user asked not to be reminded again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from flatlaunch.core.config.models import ExposePids

logger = logging.getLogger(__name__)

EXPOSE_PIDS_GUIDE = (
    "Update Flatpak on the host system to a release whose portal supports "
    "expose-pids, then log out and back in so the new portal is running."
)


@dataclass(frozen=True)
class PolicyDecision:
    """
    Outcome of the expose-pids policy check, to be shown to the user.

    Attributes:
        policy: The resolved ExposePids policy
        app_name: Short application name
        title: Short heading ("Warning" or "Fatal Error")
        message: What happened and what it means for the user
        guide: How to fix it
    """

    policy: ExposePids
    app_name: str
    title: str
    message: str
    guide: str = EXPOSE_PIDS_GUIDE

    @property
    def blocking(self) -> bool:
        """Whether the launch is refused."""
        return self.policy is ExposePids.REQUIRED

    @property
    def can_suppress(self) -> bool:
        """Whether the user may opt out of seeing this again."""
        return self.policy is ExposePids.RECOMMENDED

    @classmethod
    def for_policy(cls, policy: ExposePids, app_name: str) -> PolicyDecision:
        if policy is ExposePids.REQUIRED:
            return cls(
                policy=policy,
                app_name=app_name,
                title="Fatal Error",
                message=(
                    f"{app_name} requires the expose-pids capability of the Flatpak "
                    "portal, but the running portal does not support it. "
                    f"{app_name} cannot be started."
                ),
            )
        return cls(
            policy=policy,
            app_name=app_name,
            title="Warning",
            message=(
                "The Flatpak portal does not support expose-pids. "
                f"{app_name} will run, but some features that depend on seeing "
                "sandboxed process IDs may misbehave."
            ),
        )


@runtime_checkable
class PolicyNotifier(Protocol):
    """Interface for presenting a policy decision to the user."""

    def notify(self, decision: PolicyDecision) -> bool:
        """
        Present the decision.

        Returns:
            True if the user asked not to be reminded again (only
            meaningful when ``decision.can_suppress``)
        """
        ...


class LoggingNotifier:
    """Notifier that only logs; used when no interface is attached."""

    def notify(self, decision: PolicyDecision) -> bool:
        log = logger.error if decision.blocking else logger.warning
        log("%s: %s", decision.title, decision.message)
        return False


__all__ = [
    "EXPOSE_PIDS_GUIDE",
    "LoggingNotifier",
    "PolicyDecision",
    "PolicyNotifier",
]
