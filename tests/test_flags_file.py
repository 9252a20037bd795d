"""
Tests for flags file parsing and migration.
"""

import logging
from unittest.mock import patch

from flatlaunch.core.launch.features import FeatureStatus
from flatlaunch.core.launch.flags_file import (
    FeatureDirective,
    migrate_flags_file,
    parse_flags_text,
    read_flags_file,
    tokenize_line,
)

# ============================================================================
# Parsing Tests
# ============================================================================


class TestTokenizeLine:
    def test_comment_and_blank(self) -> None:
        assert list(tokenize_line("# --not-a-flag")) == []
        assert list(tokenize_line("   ")) == []
        assert list(tokenize_line("  # indented comment")) == []

    def test_whitespace_split(self) -> None:
        assert list(tokenize_line("  --a   --b\t--c ")) == ["--a", "--b", "--c"]


class TestParseFlagsText:
    def test_mixed_content(self) -> None:
        contents = parse_flags_text("--foo\n# comment\n\nfeatures+=bar,baz\n--weird")

        assert contents.args == ["--foo", "--weird"]
        assert contents.directives == [
            FeatureDirective("bar", FeatureStatus.ENABLED),
            FeatureDirective("baz", FeatureStatus.ENABLED),
        ]
        assert contents.warnings == []

    def test_disable_directive(self) -> None:
        contents = parse_flags_text("features-=Vulkan")
        assert contents.directives == [FeatureDirective("Vulkan", FeatureStatus.DISABLED)]

    def test_directives_keep_file_order(self) -> None:
        contents = parse_flags_text("features+=A\nfeatures-=A\nfeatures+=B")
        assert [(d.name, d.status) for d in contents.directives] == [
            ("A", FeatureStatus.ENABLED),
            ("A", FeatureStatus.DISABLED),
            ("B", FeatureStatus.ENABLED),
        ]

    def test_flag_values_are_kept_verbatim(self) -> None:
        contents = parse_flags_text("--ozone-platform-hint=auto --user-agent=x,y")
        assert contents.args == ["--ozone-platform-hint=auto", "--user-agent=x,y"]

    def test_non_flag_token_warns(self) -> None:
        contents = parse_flags_text("--ok stray -x", source="flags.conf")

        assert contents.args == ["--ok"]
        assert contents.warnings == [
            "Argument in 'flags.conf' is not a flag (must start with '--'): stray",
            "Argument in 'flags.conf' is not a flag (must start with '--'): -x",
        ]

    def test_bare_double_dash_warns(self) -> None:
        contents = parse_flags_text("--")
        assert contents.args == []
        assert len(contents.warnings) == 1
        assert "is not a flag" in contents.warnings[0]

    def test_empty_feature_directive_warns(self) -> None:
        contents = parse_flags_text("features+= features-=,")
        assert contents.directives == []
        assert len(contents.warnings) == 2
        assert all("has an empty feature" in warning for warning in contents.warnings)


# ============================================================================
# File Tests
# ============================================================================


class TestReadFlagsFile:
    def test_missing_file(self, tmp_path) -> None:
        contents = read_flags_file(tmp_path / "app-flags.conf")
        assert contents.args == []
        assert contents.directives == []

    def test_warnings_are_logged(self, tmp_path, caplog) -> None:
        path = tmp_path / "app-flags.conf"
        path.write_text("--good\nbad\n")

        with caplog.at_level(logging.WARNING):
            contents = read_flags_file(path)

        assert contents.args == ["--good"]
        assert "is not a flag" in caplog.text
        assert str(path) in caplog.text


class TestMigrateFlagsFile:
    def test_migrates_legacy_file(self, tmp_path) -> None:
        legacy = tmp_path / "chromium-flags.conf.old"
        target = tmp_path / "chromium-flags.conf"
        legacy.write_text("--legacy-flag\n")

        assert migrate_flags_file(target, legacy) is True
        assert target.read_text() == "--legacy-flag\n"
        assert legacy.read_text() == "# Your flags have been migrated to 'chromium-flags.conf'."

    def test_existing_target_is_left_alone(self, tmp_path) -> None:
        legacy = tmp_path / "old.conf"
        target = tmp_path / "new.conf"
        legacy.write_text("--legacy\n")
        target.write_text("--current\n")

        assert migrate_flags_file(target, legacy) is False
        assert target.read_text() == "--current\n"
        assert legacy.read_text() == "--legacy\n"

    def test_nothing_to_migrate(self, tmp_path) -> None:
        assert migrate_flags_file(tmp_path / "new.conf", tmp_path / "old.conf") is False
        assert not (tmp_path / "new.conf").exists()

    def test_failure_is_logged(self, tmp_path, caplog) -> None:
        legacy = tmp_path / "old.conf"
        legacy.write_text("--legacy\n")

        with patch("shutil.move", side_effect=PermissionError("denied")):
            with caplog.at_level(logging.WARNING):
                assert migrate_flags_file(tmp_path / "new.conf", legacy) is False

        assert "Failed to migrate" in caplog.text
        assert legacy.read_text() == "--legacy\n"
