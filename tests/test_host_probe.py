"""
Tests for host introspection: HostProbe, desktop entries and the portal client.
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from conftest import write_desktop_entry, write_flatpak_info
from flatlaunch.core.errors import ProbeError
from flatlaunch.core.host.desktop import DesktopEntryLocator
from flatlaunch.core.host.models import Availability, SemVer, shared_tmp_supported
from flatlaunch.core.host.portal import (
    PortalCapabilities,
    PortalClient,
    parse_properties,
)
from flatlaunch.core.host.probe import check_for_binary

# ============================================================================
# Model Tests
# ============================================================================


class TestSemVer:
    def test_parse(self) -> None:
        assert SemVer.parse("1.14.4") == SemVer(1, 14, 4)

    def test_trailing_text_is_ignored(self) -> None:
        assert SemVer.parse("1.15.0-rc1") == SemVer(1, 15, 0)

    @pytest.mark.parametrize("value", ["", "1.14", "v1.14.4", "one.two.three"])
    def test_invalid(self, value: str) -> None:
        assert SemVer.parse(value) is None

    def test_str(self) -> None:
        assert str(SemVer(1, 11, 1)) == "1.11.1"


class TestSharedTmpSupported:
    @pytest.mark.parametrize(
        "version,expected",
        [
            ("1.10.9", False),
            ("1.11.0", False),
            ("1.11.1", True),
            ("1.12.0", True),
            ("2.0.0", True),
            ("0.99.99", False),
        ],
    )
    def test_threshold(self, version: str, expected: bool) -> None:
        parsed = SemVer.parse(version)
        assert parsed is not None
        assert shared_tmp_supported(parsed) is expected


class TestAvailability:
    def test_unknown_is_falsy_and_not_known(self) -> None:
        assert not Availability.UNKNOWN
        assert not Availability.UNKNOWN.is_known

    def test_from_bool(self) -> None:
        assert Availability.from_bool(True) is Availability.AVAILABLE
        assert Availability.from_bool(False) is Availability.UNAVAILABLE
        assert Availability.AVAILABLE
        assert not Availability.UNAVAILABLE


# ============================================================================
# Binary Check Tests
# ============================================================================


class TestCheckForBinary:
    def test_missing(self, tmp_path) -> None:
        assert check_for_binary(tmp_path / "missing") is False

    def test_parent_is_a_file(self, tmp_path) -> None:
        (tmp_path / "file").write_text("")
        assert check_for_binary(tmp_path / "file" / "child") is False

    def test_executable(self, fake_host) -> None:
        assert check_for_binary(fake_host.install_sandbox_helper()) is True

    def test_other_os_error_is_raised(self, tmp_path) -> None:
        with patch("pathlib.Path.stat", side_effect=OSError(5, "Input/output error")):
            with pytest.raises(ProbeError, match="Failed to check"):
                check_for_binary(tmp_path / "zypak-wrapper.sh")


# ============================================================================
# HostProbe Tests
# ============================================================================


class TestHostProbe:
    def test_app_id(self, probe) -> None:
        assert probe.app_id() == "org.example.App"

    def test_app_exec(self, probe) -> None:
        assert probe.app_exec() == "/app/bin/app %U"

    def test_host_runtime_version(self, probe) -> None:
        assert probe.host_runtime_version() == SemVer(1, 14, 4)

    def test_shared_tmp(self, probe) -> None:
        assert probe.shared_tmp_available() is True

    def test_shared_tmp_old_flatpak(self, fake_host) -> None:
        write_flatpak_info(fake_host.info_path, flatpak_version="1.10.2")
        assert fake_host.probe().shared_tmp_available() is False

    def test_missing_flatpak_version(self, fake_host) -> None:
        write_flatpak_info(fake_host.info_path, flatpak_version=None)
        with pytest.raises(ProbeError, match="Getting Flatpak version"):
            fake_host.probe().host_runtime_version()

    def test_unparseable_flatpak_version(self, fake_host) -> None:
        write_flatpak_info(fake_host.info_path, flatpak_version="unknown")
        with pytest.raises(ProbeError, match="Failed to match Flatpak version 'unknown'"):
            fake_host.probe().host_runtime_version()

    def test_helpers_absent(self, probe) -> None:
        assert probe.sandbox_helper_available() is False
        assert probe.compositor_helper_available() is False

    def test_helpers_present(self, fake_host) -> None:
        fake_host.install_sandbox_helper()
        fake_host.install_compositor_helper()
        probe = fake_host.probe()
        assert probe.sandbox_helper_available() is True
        assert probe.compositor_helper_available() is True

    def test_facts_start_unknown(self, probe) -> None:
        facts = probe.facts
        assert facts.app_id is None
        assert facts.host_runtime_version is None
        assert facts.sandbox_helper_available is Availability.UNKNOWN
        assert facts.expose_pids_capability_available is Availability.UNKNOWN

    def test_facts_are_memoized(self, fake_host, probe) -> None:
        """Answers are computed once; later host changes are not seen."""
        assert probe.app_id() == "org.example.App"
        assert probe.sandbox_helper_available() is False

        write_flatpak_info(fake_host.info_path, app_id="org.other.Thing")
        fake_host.install_sandbox_helper()

        assert probe.app_id() == "org.example.App"
        assert probe.sandbox_helper_available() is False
        assert probe.facts.sandbox_helper_available is Availability.UNAVAILABLE

    def test_portal_queried_once(self, fake_host, probe) -> None:
        assert probe.expose_pids_available() is True
        assert probe.expose_pids_available() is True
        fake_host.portal.get_capabilities.assert_called_once()

    def test_failures_are_not_cached(self, fake_host) -> None:
        fake_host.info_path.unlink()
        probe = fake_host.probe()

        with pytest.raises(ProbeError, match="Loading Flatpak info"):
            probe.app_id()
        assert probe.facts.app_id is None

        write_flatpak_info(fake_host.info_path)
        assert probe.app_id() == "org.example.App"

    def test_portal_failure_is_not_cached(self, fake_host) -> None:
        fake_host.portal.get_capabilities.side_effect = [
            ProbeError("Failed to get portal proxy: no bus"),
            PortalCapabilities(version=3, supports=0),
        ]
        probe = fake_host.probe()

        with pytest.raises(ProbeError, match="no bus"):
            probe.expose_pids_available()
        assert probe.facts.expose_pids_capability_available is Availability.UNKNOWN
        assert probe.expose_pids_available() is False

    def test_facts_snapshot_is_a_copy(self, probe) -> None:
        snapshot = probe.facts
        snapshot.app_id = "tampered"
        assert probe.app_id() == "org.example.App"

    def test_app_exec_without_app_id(self, fake_host) -> None:
        fake_host.info_path.unlink()
        with pytest.raises(ProbeError, match="Getting app ID"):
            fake_host.probe().app_exec()


class TestDesktopEntryLocator:
    def test_first_directory_wins(self, tmp_path) -> None:
        user = tmp_path / "user"
        system = tmp_path / "system"
        write_desktop_entry(user, exec_line="/app/bin/user")
        write_desktop_entry(system, exec_line="/app/bin/system")

        locator = DesktopEntryLocator([user, system])
        assert locator.get_exec("org.example.App") == "/app/bin/user"

    def test_falls_back_to_later_directory(self, tmp_path) -> None:
        system = tmp_path / "system"
        write_desktop_entry(system, exec_line="/app/bin/system")

        locator = DesktopEntryLocator([tmp_path / "user", system])
        assert locator.find("org.example.App") == (
            system / "applications" / "org.example.App.desktop"
        )

    def test_default_search_dirs_follow_xdg(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "home-data"))
        monkeypatch.setenv("XDG_DATA_DIRS", f"{tmp_path}/a:relative/ignored:{tmp_path}/b")

        assert DesktopEntryLocator().search_dirs == [
            tmp_path / "home-data",
            tmp_path / "a",
            tmp_path / "b",
        ]

    def test_exec_keeps_percent_codes(self, tmp_path) -> None:
        write_desktop_entry(tmp_path, exec_line="/app/bin/app --x=%u")
        assert DesktopEntryLocator([tmp_path]).get_exec("org.example.App") == "/app/bin/app --x=%u"


# ============================================================================
# Portal Tests
# ============================================================================


def _completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> MagicMock:
    result = MagicMock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


class TestParseProperties:
    def test_typed_values(self) -> None:
        output = "({'supports': <uint32 1>, 'version': <uint32 6>},)\n"
        assert parse_properties(output) == {
            "supports": ("uint32", "1"),
            "version": ("uint32", "6"),
        }

    def test_untyped_value(self) -> None:
        assert parse_properties("({'version': <5>},)") == {"version": (None, "5")}


class TestPortalCapabilities:
    @pytest.mark.parametrize(
        "version,supports,expected",
        [
            (4, 1, True),
            (6, 3, True),
            (3, 1, False),
            (6, 0, False),
            (6, 2, False),
        ],
    )
    def test_expose_pids(self, version: int, supports: int, expected: bool) -> None:
        assert PortalCapabilities(version=version, supports=supports).expose_pids is expected


class TestPortalClient:
    def test_get_capabilities(self) -> None:
        output = "({'supports': <uint32 1>, 'version': <uint32 6>},)\n"
        with patch("subprocess.run", return_value=_completed(output)) as mock_run:
            caps = PortalClient().get_capabilities()

        assert caps == PortalCapabilities(version=6, supports=1)
        cmd = mock_run.call_args[0][0]
        assert cmd[:2] == ["gdbus", "call"]
        assert "org.freedesktop.DBus.Properties.GetAll" in cmd
        assert cmd[-1] == "org.freedesktop.portal.Flatpak"
        assert mock_run.call_args.kwargs["timeout"] == 10

    def test_old_portal_without_supports(self) -> None:
        with patch("subprocess.run", return_value=_completed("({'version': <uint32 3>},)")):
            caps = PortalClient().get_capabilities()
        assert caps == PortalCapabilities(version=3, supports=0)
        assert not caps.expose_pids

    def test_missing_supports_on_new_portal(self) -> None:
        with patch("subprocess.run", return_value=_completed("({'version': <uint32 5>},)")):
            with pytest.raises(ProbeError, match="Failed to read 'supports'"):
                PortalClient().get_capabilities()

    def test_missing_version(self) -> None:
        with patch("subprocess.run", return_value=_completed("(@a{sv} {},)")):
            with pytest.raises(ProbeError, match="Failed to read 'version'"):
                PortalClient().get_capabilities()

    def test_wrong_type(self) -> None:
        with patch("subprocess.run", return_value=_completed("({'version': <'six'>},)")):
            with pytest.raises(ProbeError, match="Invalid type 'unknown' for 'version'"):
                PortalClient().get_capabilities()

    def test_nonzero_exit(self) -> None:
        result = _completed(returncode=1, stderr="Error: No such interface")
        with patch("subprocess.run", return_value=result):
            with pytest.raises(ProbeError, match="Failed to get portal proxy: Error: No such"):
                PortalClient().get_capabilities()

    def test_gdbus_not_installed(self) -> None:
        with patch("subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(ProbeError, match="'gdbus' not found"):
                PortalClient().get_capabilities()

    def test_timeout(self) -> None:
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("gdbus", 10)):
            with pytest.raises(ProbeError, match="no reply within 10s"):
                PortalClient().get_capabilities()
