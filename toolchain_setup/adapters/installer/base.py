"""
Installer protocol — the contract between setup and the toolchain hub.

Installers put toolchains on disk.  They are outside the caching core:
the coordinator only needs the install path, and the main phase needs
one InstalledToolchain per requested version.

Any failure raises InstallationError.  It is fatal to the run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from toolchain_setup.core.models.install import InstalledToolchain


class Installer(ABC):
    """Abstract base class for toolchain installers.

    To create a new installer:
        1. Subclass Installer
        2. Implement name, prepare_hub, set_install_path,
           get_install_path, install
        3. Return it from ``build_installer`` in the CLI
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The installer identifier (e.g., 'command', 'mock')."""

    @abstractmethod
    def prepare_hub(self, auto_update: bool, hub_version: str | None) -> str:
        """Install or locate the toolchain hub.

        Returns:
            Path to the hub executable, or "" if it could not be found.
        """

    @abstractmethod
    def set_install_path(self, path: str) -> None:
        """Point the hub at a custom install location."""

    @abstractmethod
    def get_install_path(self) -> str:
        """Where toolchains are installed.  This is what gets cached."""

    @abstractmethod
    def install(
        self,
        versions: Sequence[str],
        modules: Sequence[str],
    ) -> list[InstalledToolchain]:
        """Install each version with the given modules, one at a time.

        Returns:
            One entry per version, in request order.

        Raises:
            InstallationError: On any failure.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
