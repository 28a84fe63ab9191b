"""
Setup use cases — the main and post phases of one CI run.

Main phase: prepare the hub, restore the cache, install every requested
version in order, publish outputs, flag the next invocation as post.

Post phase: save the installation to the cache when the main phase
missed, then discard the run's state.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Literal

from toolchain_setup.adapters.actions.outputs import OutputSink
from toolchain_setup.adapters.cache.base import CacheService
from toolchain_setup.adapters.installer.base import Installer
from toolchain_setup.core.errors import InstallationError
from toolchain_setup.core.models.install import InstalledToolchain, SetupInputs
from toolchain_setup.core.persistence.state_store import StateStore
from toolchain_setup.core.services.cache_coordinator import (
    CacheCoordinator,
    RestoreOutcome,
    SaveOutcome,
)

logger = logging.getLogger(__name__)


@dataclass
class PhaseResult:
    """Result of one phase invocation."""

    phase: Literal["main", "post"]
    ok: bool = True
    hub_path: str | None = None
    installed: list[InstalledToolchain] = field(default_factory=list)
    restore: RestoreOutcome | None = None
    save: SaveOutcome | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {"phase": self.phase, "ok": self.ok}
        if self.error:
            result["error"] = self.error
        if self.hub_path:
            result["hub_path"] = self.hub_path
        if self.installed:
            result["installed"] = [i.model_dump() for i in self.installed]
        if self.restore:
            result["restore"] = self.restore.to_dict()
        if self.save:
            result["save"] = self.save.to_dict()
        return result


def resolve_hub_auto_update(auto_update: bool, hub_version: str | None) -> bool:
    """An explicit hub version always wins over auto-update."""
    if hub_version:
        if auto_update:
            logger.info("Hub version %s requested, auto-update disabled", hub_version)
        return False
    return auto_update


def run_main_phase(
    inputs: SetupInputs,
    store: StateStore,
    installer: Installer,
    cache: CacheService,
    outputs: OutputSink,
    platform: str | None = None,
) -> PhaseResult:
    """Install the requested toolchains, restoring from cache when possible.

    Raises:
        InstallationError: If the hub or any version cannot be installed.
            Nothing is written to the cache after this.
    """
    result = PhaseResult(phase="main")
    coordinator = CacheCoordinator(store, cache, platform=platform)

    # State from an earlier, unfinished run must not reach this run's post
    store.clear()

    if inputs.project_path:
        logger.info("TOOLCHAIN_PROJECT_PATH:\n  > %s", inputs.project_path)
        outputs.export_variable("TOOLCHAIN_PROJECT_PATH", inputs.project_path)
        outputs.set_output("project-path", inputs.project_path)

    auto_update = resolve_hub_auto_update(inputs.auto_update_hub, inputs.hub_version)
    hub_path = installer.prepare_hub(auto_update, inputs.hub_version)
    if not hub_path:
        raise InstallationError("Failed to install or locate the toolchain hub!")

    result.hub_path = hub_path
    logger.info("TOOLCHAIN_HUB_PATH:\n  > %s", hub_path)
    outputs.export_variable("TOOLCHAIN_HUB_PATH", hub_path)
    outputs.set_output("hub-path", hub_path)

    if inputs.install_path:
        installer.set_install_path(inputs.install_path)

    if inputs.cache_installation:
        result.restore = coordinator.restore(
            installer.get_install_path(),
            inputs.versions,
            inputs.modules,
        )

    installed: list[InstalledToolchain] = []
    for version in inputs.versions:
        # One version at a time, in request order
        for toolchain in installer.install([version], inputs.modules):
            logger.info("TOOLCHAIN_EDITOR_PATH:\n  > %s", toolchain.path)
            # Always the most recently installed editor
            outputs.export_variable("TOOLCHAIN_EDITOR_PATH", toolchain.path)
            outputs.set_output("editor-path", toolchain.path)
            installed.append(toolchain)

    if len(installed) != len(inputs.versions):
        raise InstallationError(
            f"Expected to install {len(inputs.versions)} toolchain versions, "
            f"but installed {len(installed)}."
        )

    editors = json.dumps([t.model_dump() for t in installed])
    outputs.export_variable("TOOLCHAIN_EDITORS", editors)
    outputs.set_output("editors", editors)

    result.installed = installed
    logger.info("Toolchain setup complete!")
    coordinator.mark_main_complete()
    return result


def run_post_phase(
    store: StateStore,
    installer: Installer,
    cache: CacheService,
) -> PhaseResult:
    """Save the installation if the main phase asked for it."""
    coordinator = CacheCoordinator(store, cache)
    outcome = coordinator.save(installer)
    store.clear()
    return PhaseResult(phase="post", save=outcome)
