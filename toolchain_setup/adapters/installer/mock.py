"""
Mock installer — test double for the toolchain hub.

Used in mock mode to exercise the setup flow without installing
anything.  Optionally creates the toolchain directories so the post
phase has something real to cache.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from toolchain_setup.adapters.installer.base import Installer
from toolchain_setup.core.errors import InstallationError
from toolchain_setup.core.models.install import InstalledToolchain


class MockInstaller(Installer):
    """Universal mock installer.

    By default every call succeeds.  ``fail_on`` names versions whose
    install raises InstallationError.
    """

    def __init__(
        self,
        install_path: str = "/tmp/toolchain-setup-mock",
        hub_path: str = "/usr/local/bin/toolchain-hub",
        create_dirs: bool = False,
        fail_on: Sequence[str] = (),
    ):
        self._install_path = install_path
        self._hub_path = hub_path
        self._create_dirs = create_dirs
        self._fail_on = set(fail_on)
        self.hub_calls: list[tuple[bool, str | None]] = []
        self.install_calls: list[tuple[str, tuple[str, ...]]] = []

    @property
    def name(self) -> str:
        return "mock"

    def prepare_hub(self, auto_update: bool, hub_version: str | None) -> str:
        self.hub_calls.append((auto_update, hub_version))
        return self._hub_path

    def set_install_path(self, path: str) -> None:
        self._install_path = path

    def get_install_path(self) -> str:
        return self._install_path

    def install(
        self,
        versions: Sequence[str],
        modules: Sequence[str],
    ) -> list[InstalledToolchain]:
        installed: list[InstalledToolchain] = []
        for version in versions:
            self.install_calls.append((version, tuple(modules)))
            if version in self._fail_on:
                raise InstallationError(f"[mock] install failed for {version}")

            path = Path(self._install_path) / version
            if self._create_dirs:
                path.mkdir(parents=True, exist_ok=True)
            installed.append(InstalledToolchain(version=version, path=str(path)))
        return installed
