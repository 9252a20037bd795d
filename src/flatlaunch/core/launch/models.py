"""
Data models for launching.

Defines the finalized launch plan handed to exec.
"""

from __future__ import annotations

from dataclasses import dataclass, field

SANDBOX_WRAPPER = "zypak-wrapper.sh"


@dataclass(frozen=True)
class LaunchPlan:
    """
    Fully assembled process invocation.

    Attributes:
        argv: Complete argument vector; argv[0] is resolved through PATH
        env: Environment variables to set on top of the current environment
        use_sandbox_wrapper: Whether argv[0] is the sandbox wrapper
    """

    argv: tuple[str, ...]
    env: dict[str, str] = field(default_factory=dict)
    use_sandbox_wrapper: bool = False

    @property
    def executable(self) -> str:
        return self.argv[0]


__all__ = ["LaunchPlan", "SANDBOX_WRAPPER"]
