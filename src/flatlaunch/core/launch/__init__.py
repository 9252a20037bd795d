"""
Launch assembly.

This package turns resolved settings into an exec of the browser:
merging feature toggles, reading the user's flags file, and building the
final argument vector and environment.

Modules:
    features: FeatureSet with last-write-wins merging
    flags_file: Flags file tokenizer, parser and migration
    launcher: LaunchBuilder and exec-based launch
    models: LaunchPlan
    stamps: One-time action marker files

Example Usage:
    >>> from flatlaunch.core.launch import LaunchBuilder, exec_plan
    >>>
    >>> builder = LaunchBuilder.from_settings(settings, app_id)
    >>> builder.add_args(sys.argv[1:])
    >>> exec_plan(builder.finalize(get_user_runtime_dir()))  # Does not return
"""

from flatlaunch.core.launch.features import FeatureSet, FeatureStatus
from flatlaunch.core.launch.flags_file import (
    FeatureDirective,
    FlagsFileContents,
    migrate_flags_file,
    parse_flags_text,
    read_flags_file,
    tokenize_line,
)
from flatlaunch.core.launch.launcher import LaunchBuilder, build_exec_env, exec_plan
from flatlaunch.core.launch.models import SANDBOX_WRAPPER, LaunchPlan
from flatlaunch.core.launch.stamps import (
    STAMP_EXPOSE_PIDS,
    STAMP_FIRST_RUN,
    stamp_path,
    touch_stamp,
)

__all__ = [
    # Features
    "FeatureSet",
    "FeatureStatus",
    # Flags file
    "FeatureDirective",
    "FlagsFileContents",
    "migrate_flags_file",
    "parse_flags_text",
    "read_flags_file",
    "tokenize_line",
    # Launcher
    "LaunchBuilder",
    "build_exec_env",
    "exec_plan",
    # Models
    "LaunchPlan",
    "SANDBOX_WRAPPER",
    # Stamps
    "STAMP_EXPOSE_PIDS",
    "STAMP_FIRST_RUN",
    "stamp_path",
    "touch_stamp",
]
