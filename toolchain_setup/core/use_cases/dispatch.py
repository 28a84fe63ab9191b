"""
Phase dispatcher — pick main or post from the persisted flag.

The same command runs twice per CI job.  The first invocation finds
no ``isPost`` flag and runs the main phase; the main phase sets the
flag on success, so the second invocation runs the post phase.

Inputs and the installer are both read from configuration, so they
are loaded inside each phase's error handling, never before it.

Error policy:
    - main: InstallationError / ConfigError fail the run (ok=False)
    - post: never fails the run; any error becomes a warning
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from toolchain_setup.adapters.actions.outputs import OutputSink
from toolchain_setup.adapters.cache.base import CacheService
from toolchain_setup.adapters.installer.base import Installer
from toolchain_setup.core.config.loader import ConfigError
from toolchain_setup.core.errors import ToolchainSetupError
from toolchain_setup.core.models.install import SetupInputs
from toolchain_setup.core.persistence.state_store import IS_POST_KEY, StateStore, decode_bool
from toolchain_setup.core.use_cases.setup import PhaseResult, run_main_phase, run_post_phase

logger = logging.getLogger(__name__)


def is_post_phase(store: StateStore) -> bool:
    """True once a main phase has completed in this run."""
    return decode_bool(store.get(IS_POST_KEY))


def main_phase(
    load_inputs: Callable[[], SetupInputs],
    store: StateStore,
    load_installer: Callable[[], Installer],
    cache: CacheService,
    outputs: OutputSink,
    platform: str | None = None,
) -> PhaseResult:
    """Run the main phase, turning fatal errors into a failed result.

    Inputs are loaded lazily so a post invocation never parses them.
    """
    try:
        inputs = load_inputs()
        installer = load_installer()
        return run_main_phase(inputs, store, installer, cache, outputs, platform=platform)
    except (ConfigError, ToolchainSetupError) as e:
        logger.error("%s", e)
        return PhaseResult(phase="main", ok=False, error=str(e))


def post_phase(
    store: StateStore,
    load_installer: Callable[[], Installer],
    cache: CacheService,
) -> PhaseResult:
    """Run the post phase.  Best-effort: it never fails the job."""
    try:
        return run_post_phase(store, load_installer(), cache)
    except Exception as e:
        logger.warning("Post step failed, continuing: %s", e)
        return PhaseResult(phase="post", ok=True, error=str(e))


def dispatch(
    load_inputs: Callable[[], SetupInputs],
    store: StateStore,
    load_installer: Callable[[], Installer],
    cache: CacheService,
    outputs: OutputSink,
    platform: str | None = None,
) -> PhaseResult:
    """Run whichever phase the persisted flag selects."""
    if is_post_phase(store):
        logger.debug("isPost set, running post phase")
        return post_phase(store, load_installer, cache)

    logger.debug("isPost unset, running main phase")
    return main_phase(load_inputs, store, load_installer, cache, outputs, platform=platform)
