"""
Settings resolution.

Turns the partial Settings from the loader into fully resolved Settings by
running a fixed chain of inference steps. Later steps depend on earlier
ones (the sandbox filename needs the entry point, the expose-pids default
needs the sandbox decision), so the order of RESOLVE_STEPS matters.

Each step only fills a value that is missing, which makes resolution
idempotent: resolving already-resolved settings returns them unchanged.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from flatlaunch.core.errors import InferenceError, ProbeError
from flatlaunch.core.host.probe import HostProbe
from flatlaunch.utils.xdg import is_executable_file

from .models import ExposePids, Settings

logger = logging.getLogger(__name__)

APP_ROOT = Path("/app")


@dataclass(frozen=True)
class ResolveContext:
    """
    Inputs available to every resolution step.

    Attributes:
        probe: Host probe consulted for facts
        app_root: Root of the application install (normally /app)
    """

    probe: HostProbe
    app_root: Path = APP_ROOT


ResolveStep = Callable[[Settings, ResolveContext], Settings]


def _update_application(settings: Settings, **changes: object) -> Settings:
    return settings.model_copy(
        update={"application": settings.application.model_copy(update=changes)}
    )


def _update_sandbox(settings: Settings, **changes: object) -> Settings:
    return settings.model_copy(update={"sandbox": settings.sandbox.model_copy(update=changes)})


# ============================================================================
# Inference helpers
# ============================================================================


def infer_application_name(app_id: str) -> str:
    """
    Derive the short application name from an app ID.

    Example:
        >>> infer_application_name("org.chromium.Chromium")
        'chromium'

    Raises:
        InferenceError: If the app ID has no non-empty trailing segment
    """
    _, dot, last = app_id.rpartition(".")
    if not dot or not last:
        raise InferenceError(f"Invalid application ID: {app_id}")
    return last.lower()


def infer_entry_point(name: str, app_root: Path = APP_ROOT) -> str:
    """
    Locate the browser binary under the app root.

    Looks for ``<root>/<name>/<name>`` and then ``<root>/extra/<name>``
    (the latter for apps repackaged from upstream binaries at install time).
    """
    candidates = [app_root / name / name, app_root / "extra" / name]
    for candidate in candidates:
        if is_executable_file(candidate):
            return str(candidate)

    raise InferenceError(
        "Could not locate default entry point "
        f"(looked for {candidates[0]} and {candidates[1]})"
    )


def infer_wrapper_script(exec_line: str) -> str:
    """Return the command of a desktop file's Exec= line."""
    logger.debug("Exec= line is: %s", exec_line)
    try:
        argv = shlex.split(exec_line)
    except ValueError as e:
        raise InferenceError(f"Parsing Exec= value: {e}") from e
    if not argv:
        raise InferenceError("Parsing Exec= value: empty command")
    return argv[0]


def infer_sandbox_filename(name: str, entry_point: str) -> str:
    """
    Find the SUID sandbox binary shipped beside the entry point.

    Tries, in order: ``chrome-sandbox``, ``<name>-sandbox``, and
    ``<entry point basename>-sandbox``.

    Returns:
        The bare filename of the first candidate that exists and is executable
    """
    entry = Path(entry_point)
    entry_dir = entry.parent
    candidates = ["chrome-sandbox", f"{name}-sandbox", f"{entry.name}-sandbox"]
    for filename in candidates:
        if is_executable_file(entry_dir / filename):
            return filename

    looked_for = ", ".join(f"'{entry_dir / filename}'" for filename in candidates)
    raise InferenceError(f"Could not locate sandbox file (looked for {looked_for})")


# ============================================================================
# Resolution steps
# ============================================================================


def resolve_name(settings: Settings, ctx: ResolveContext) -> Settings:
    if settings.application.name is not None:
        return settings
    try:
        app_id = ctx.probe.app_id()
    except ProbeError as e:
        raise ProbeError(f"Failed to infer name: Failed to find app ID: {e}") from e
    try:
        name = infer_application_name(app_id)
    except InferenceError as e:
        raise InferenceError(f"Failed to infer name: {e}") from e

    logger.debug("Inferred application name '%s'", name)
    return _update_application(settings, name=name)


def resolve_entry_point(settings: Settings, ctx: ResolveContext) -> Settings:
    if settings.application.entry_point is not None:
        return settings
    assert settings.application.name is not None
    try:
        entry_point = infer_entry_point(settings.application.name, ctx.app_root)
    except InferenceError as e:
        raise InferenceError(f"Failed to infer entry point: {e}") from e

    logger.debug("Inferred entry point '%s'", entry_point)
    return _update_application(settings, entry_point=entry_point)


def resolve_wrapper_script(settings: Settings, ctx: ResolveContext) -> Settings:
    if settings.application.wrapper_script is not None:
        return settings
    try:
        exec_line = ctx.probe.app_exec()
    except ProbeError as e:
        raise ProbeError(
            f"Failed to infer wrapper script: Failed to get Exec= value: {e}"
        ) from e
    try:
        wrapper_script = infer_wrapper_script(exec_line)
    except InferenceError as e:
        raise InferenceError(f"Failed to infer wrapper script: {e}") from e

    logger.debug("Inferred wrapper script '%s'", wrapper_script)
    return _update_application(settings, wrapper_script=wrapper_script)


def resolve_sandbox_enabled(settings: Settings, ctx: ResolveContext) -> Settings:
    if settings.sandbox.enabled_explicit:
        return settings
    try:
        enabled = ctx.probe.sandbox_helper_available()
    except ProbeError as e:
        raise ProbeError(f"Failed to get sandbox helper status: {e}") from e
    return _update_sandbox(settings, enabled=enabled)


def resolve_expose_pids(settings: Settings, ctx: ResolveContext) -> Settings:
    if settings.application.expose_pids is not None:
        return settings
    if settings.sandbox.enabled:
        logger.debug("Inferred ExposePids as 'recommended' because the sandbox helper is used")
        return _update_application(settings, expose_pids=ExposePids.RECOMMENDED)

    logger.debug("Inferred ExposePids as 'required' because the sandbox helper is not used")
    return _update_application(settings, expose_pids=ExposePids.REQUIRED)


def resolve_compositor_helper(settings: Settings, ctx: ResolveContext) -> Settings:
    if settings.compositor_helper.enabled_explicit:
        return settings
    try:
        enabled = ctx.probe.compositor_helper_available()
    except ProbeError as e:
        raise ProbeError(f"Failed to get compositor helper status: {e}") from e
    compositor_helper = settings.compositor_helper.model_copy(update={"enabled": enabled})
    return settings.model_copy(update={"compositor_helper": compositor_helper})


def resolve_sandbox_filename(settings: Settings, ctx: ResolveContext) -> Settings:
    if not settings.sandbox.enabled or settings.sandbox.sandbox_filename is not None:
        return settings
    app = settings.application
    assert app.name is not None and app.entry_point is not None
    try:
        sandbox_filename = infer_sandbox_filename(app.name, app.entry_point)
    except InferenceError as e:
        raise InferenceError(f"Failed to infer sandbox filename: {e}") from e

    logger.debug("Inferred sandbox filename '%s'", sandbox_filename)
    return _update_sandbox(settings, sandbox_filename=sandbox_filename)


RESOLVE_STEPS: tuple[ResolveStep, ...] = (
    resolve_name,
    resolve_entry_point,
    resolve_wrapper_script,
    # Must run before resolve_expose_pids, which defaults on the sandbox decision
    resolve_sandbox_enabled,
    resolve_expose_pids,
    resolve_compositor_helper,
    resolve_sandbox_filename,
)


def resolve_settings(
    settings: Settings,
    probe: HostProbe,
    *,
    app_root: Path = APP_ROOT,
) -> Settings:
    """
    Fill every missing setting from host facts.

    Args:
        settings: Partial settings from load_settings()
        probe: Host probe to consult
        app_root: Application install root (defaults to /app)

    Returns:
        Fully resolved Settings

    Raises:
        InferenceError: If a required value can't be derived
        ProbeError: If querying the host fails

    Example:
        >>> settings = resolve_settings(load_settings(), HostProbe())
        >>> settings.application.entry_point
        '/app/chromium/chromium'
    """
    ctx = ResolveContext(probe=probe, app_root=app_root)
    for step in RESOLVE_STEPS:
        settings = step(settings, ctx)
    return settings


__all__ = [
    "APP_ROOT",
    "RESOLVE_STEPS",
    "ResolveContext",
    "infer_application_name",
    "infer_entry_point",
    "infer_sandbox_filename",
    "infer_wrapper_script",
    "resolve_settings",
]
