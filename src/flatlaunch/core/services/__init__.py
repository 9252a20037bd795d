"""
Service layer for flatlaunch.

Services compose the core packages into the operations an interface needs.
No Rich, no sys.exit, no print statements; presentation is the caller's job.

Modules:
    launch: LaunchService resolves settings and launches the browser.
    notifier: PolicyDecision and the PolicyNotifier interface.
"""

from flatlaunch.core.services.launch import LaunchService
from flatlaunch.core.services.notifier import (
    LoggingNotifier,
    PolicyDecision,
    PolicyNotifier,
)

__all__ = [
    "LaunchService",
    "LoggingNotifier",
    "PolicyDecision",
    "PolicyNotifier",
]
