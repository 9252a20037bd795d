"""
Pytest configuration and shared fixtures.

Provides a fake Flatpak host tree (manifest, desktop entry, app install
root, helper binaries), isolated XDG directories, and a stub portal so no
test touches the real /app, /.flatpak-info, D-Bus or exec.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from unittest.mock import Mock

import pytest

from flatlaunch.core.host.desktop import DesktopEntryLocator
from flatlaunch.core.host.portal import PortalCapabilities, PortalClient
from flatlaunch.core.host.probe import HostProbe

APP_ID = "org.example.App"
APP_NAME = "app"


def make_executable(path: Path, content: str = "#!/bin/sh\n") -> Path:
    """Create an executable file, including its parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(0o755)
    return path


def write_flatpak_info(
    path: Path, app_id: str = APP_ID, flatpak_version: str | None = "1.14.4"
) -> Path:
    lines = ["[Application]", f"name={app_id}", "runtime=runtime/org.freedesktop.Platform"]
    if flatpak_version is not None:
        lines += ["", "[Instance]", f"flatpak-version={flatpak_version}"]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n")
    return path


def write_desktop_entry(data_dir: Path, app_id: str = APP_ID, exec_line: str | None = None) -> Path:
    entry = data_dir / "applications" / f"{app_id}.desktop"
    entry.parent.mkdir(parents=True, exist_ok=True)
    lines = ["[Desktop Entry]", "Type=Application", "Name=Example"]
    if exec_line is not None:
        lines.append(f"Exec={exec_line}")
    entry.write_text("\n".join(lines) + "\n")
    return entry


@dataclass
class FakeHost:
    """Paths of a fake Flatpak host laid out under tmp_path."""

    root: Path
    info_path: Path
    app_root: Path
    sandbox_helper_path: Path
    compositor_helper_path: Path
    data_dir: Path
    portal: Mock

    def probe(self) -> HostProbe:
        return HostProbe(
            info_path=self.info_path,
            sandbox_helper_path=self.sandbox_helper_path,
            compositor_helper_path=self.compositor_helper_path,
            desktop_locator=DesktopEntryLocator([self.data_dir]),
            portal=self.portal,
        )

    def install_entry_point(self, name: str = APP_NAME) -> Path:
        return make_executable(self.app_root / name / name)

    def install_sandbox_helper(self) -> Path:
        return make_executable(self.sandbox_helper_path)

    def install_compositor_helper(self) -> Path:
        return make_executable(self.compositor_helper_path)


def portal_mock(version: int = 6, supports: int = 1) -> Mock:
    portal = Mock(spec=PortalClient)
    portal.get_capabilities.return_value = PortalCapabilities(version=version, supports=supports)
    return portal


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point every XDG directory and the settings override into tmp_path."""
    home = tmp_path / "home"
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    monkeypatch.setenv("XDG_RUNTIME_DIR", str(tmp_path / "run"))
    monkeypatch.setenv("XDG_DATA_DIRS", str(tmp_path / "usr" / "share"))
    monkeypatch.setenv("FLATLAUNCH_CONFIG_OVERRIDE", str(tmp_path / "etc" / "flatlaunch.ini"))
    monkeypatch.delenv("FLATLAUNCH_DEBUG", raising=False)
    return home


@pytest.fixture
def config_file(tmp_path) -> Callable[[str], Path]:
    """Write the settings file the override points at."""

    def _write(text: str) -> Path:
        path = tmp_path / "etc" / "flatlaunch.ini"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    return _write


# ==============================================================================
# Host Fixtures
# ==============================================================================


@pytest.fixture
def fake_host(tmp_path) -> FakeHost:
    """
    Provide a fake host for ``org.example.App``.

    Creates:
    - .flatpak-info with app ID and Flatpak 1.14.4
    - applications/org.example.App.desktop with Exec=/app/bin/app %U
    The entry point and helper binaries are not installed.
    """
    root = tmp_path / "host"
    data_dir = root / "share"
    write_desktop_entry(data_dir, exec_line="/app/bin/app %U")
    return FakeHost(
        root=root,
        info_path=write_flatpak_info(root / ".flatpak-info"),
        app_root=root / "app",
        sandbox_helper_path=root / "app" / "bin" / "zypak-wrapper.sh",
        compositor_helper_path=root / "app" / "bin" / "flextop-init",
        data_dir=data_dir,
        portal=portal_mock(),
    )


@pytest.fixture
def probe(fake_host) -> HostProbe:
    return fake_host.probe()
