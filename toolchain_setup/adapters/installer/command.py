"""
Command installer — drive the toolchain hub through shell commands.

The hub's own CLI does the real work.  This adapter formats the
configured command templates, runs them one version at a time, and
turns any failure into InstallationError.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from collections.abc import Sequence

from toolchain_setup.adapters.installer.base import Installer
from toolchain_setup.core.errors import InstallationError
from toolchain_setup.core.models.install import InstalledToolchain, InstallerConfig

logger = logging.getLogger(__name__)


class CommandInstaller(Installer):
    """Install toolchains by running configured shell commands.

    Config fields:
        install_command: Run once per version (required for ``install``).
        hub_command: Run by ``prepare_hub``; last stdout line is the hub path.
        hub_path: Used when no hub_command is configured.
        install_path: Where toolchains go (``~`` is expanded).
        editor_path: Template for each installed toolchain's path.
        timeout: Per-command timeout in seconds.
    """

    def __init__(self, config: InstallerConfig):
        self._config = config
        self._install_path = os.path.expanduser(config.install_path)

    @property
    def name(self) -> str:
        return "command"

    def prepare_hub(self, auto_update: bool, hub_version: str | None) -> str:
        if not self._config.hub_command:
            return os.path.expanduser(self._config.hub_path or "")

        command = self._format(
            self._config.hub_command,
            hub_version=hub_version or "",
            auto_update="true" if auto_update else "false",
        )
        output = self._run(command, what="toolchain hub setup")
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        return lines[-1] if lines else ""

    def set_install_path(self, path: str) -> None:
        self._install_path = os.path.expanduser(path)

    def get_install_path(self) -> str:
        return self._install_path

    def install(
        self,
        versions: Sequence[str],
        modules: Sequence[str],
    ) -> list[InstalledToolchain]:
        if not self._config.install_command:
            raise InstallationError("No install command configured")

        installed: list[InstalledToolchain] = []
        for version in versions:
            command = self._format(
                self._config.install_command,
                version=version,
                modules=" ".join(shlex.quote(m) for m in modules),
            )
            logger.info("Installing toolchain %s", version)
            self._run(command, what=f"install of {version}")

            path = self._config.editor_path.format(
                install_path=self._install_path,
                version=version,
            )
            installed.append(InstalledToolchain(version=version, path=path))
        return installed

    # ── Helpers ─────────────────────────────────────────────────

    def _format(self, template: str, **fields: str) -> str:
        values = {
            "install_path": shlex.quote(self._install_path),
            "version": "",
            "modules": "",
            "hub_version": "",
            "auto_update": "false",
        }
        for key, value in fields.items():
            # modules arrives pre-quoted, one word per module
            values[key] = value if key == "modules" else shlex.quote(value) if value else ""
        return template.format(**values)

    def _run(self, command: str, what: str) -> str:
        logger.debug("Executing: %s", command)
        start = time.monotonic()

        try:
            result = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=self._config.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise InstallationError(
                f"{what} timed out after {self._config.timeout}s"
            ) from e
        except OSError as e:
            raise InstallationError(f"{what} could not start: {e}") from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise InstallationError(
                f"{what} failed (exit {result.returncode}): "
                f"{stderr or 'no error output'}"
            )

        logger.debug("%s finished in %dms", what, elapsed_ms)
        return result.stdout
