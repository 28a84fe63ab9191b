"""
Cache coordinator — restore-or-install in main, save-or-skip in post.

The two phases run in different processes.  Everything the post phase
needs is written to the state store by the main phase:

    cache-key   primary key to save under (written before restoring)
    cache-hit   "true" if restore matched the primary key exactly
    isPost      "true" once the main phase finished successfully;
                post saves nothing without it

Caching is an optimisation.  Cache failures never fail a run: a failed
restore is a miss, a failed save is a warning.  At most one cache
operation happens per phase.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from toolchain_setup.adapters.cache.base import CacheService
from toolchain_setup.adapters.installer.base import Installer
from toolchain_setup.core.errors import CacheRestoreError, CacheSaveError
from toolchain_setup.core.models.cache import CacheKeySet
from toolchain_setup.core.persistence.state_store import (
    CACHE_HIT_KEY,
    CACHE_KEY_KEY,
    IS_POST_KEY,
    StateStore,
    encode_bool,
    load_persisted_state,
)
from toolchain_setup.core.services.cache_keys import build_cache_keys
from toolchain_setup.core.services.install_validation import is_installation_path_valid

logger = logging.getLogger(__name__)

SaveStatus = Literal[
    "saved",
    "skipped_no_key",
    "skipped_main_incomplete",
    "skipped_hit",
    "skipped_invalid_path",
    "save_failed",
]


@dataclass
class RestoreOutcome:
    """What the main phase learned from the cache."""

    keys: CacheKeySet
    install_path: str
    matched_key: str | None = None
    cache_hit: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "primary_key": self.keys.primary_key,
            "restore_keys": list(self.keys.restore_keys),
            "install_path": self.install_path,
            "matched_key": self.matched_key,
            "cache_hit": self.cache_hit,
            "error": self.error,
        }


@dataclass
class SaveOutcome:
    """What the post phase did about saving."""

    status: SaveStatus
    cache_key: str | None = None
    install_path: str | None = None
    error: str | None = None

    @property
    def saved(self) -> bool:
        return self.status == "saved"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "cache_key": self.cache_key,
            "install_path": self.install_path,
            "error": self.error,
        }


class CacheCoordinator:
    """Decides restore/install and save/skip across the two phases."""

    def __init__(
        self,
        store: StateStore,
        cache: CacheService,
        platform: str | None = None,
    ):
        self._store = store
        self._cache = cache
        self._platform = platform

    # ── Main phase ──────────────────────────────────────────────

    def restore(
        self,
        install_path: str,
        versions: Sequence[str],
        modules: Sequence[str],
    ) -> RestoreOutcome:
        """Try to restore a previous installation into ``install_path``."""
        keys = build_cache_keys(versions, modules, platform=self._platform)

        # Written before restoring so post can act on it regardless
        self._store.set(CACHE_KEY_KEY, keys.primary_key)
        logger.info("Toolchain installation cache key: %s", keys.primary_key)

        outcome = RestoreOutcome(keys=keys, install_path=install_path)
        try:
            outcome.matched_key = self._cache.restore(
                [install_path], keys.primary_key, keys.restore_keys
            )
        except CacheRestoreError as e:
            logger.warning("Cache restore failed, treating as a miss: %s", e)
            outcome.error = str(e)

        outcome.cache_hit = outcome.matched_key == keys.primary_key
        if not outcome.cache_hit:
            logger.info(
                "No toolchain installation cache found. "
                "Installation will be saved in the post step."
            )

        self._store.set(CACHE_HIT_KEY, encode_bool(outcome.cache_hit))
        return outcome

    def mark_main_complete(self) -> None:
        """Flag the next invocation as the post phase."""
        self._store.set(IS_POST_KEY, encode_bool(True))

    # ── Post phase ──────────────────────────────────────────────

    def save(self, installer: Installer) -> SaveOutcome:
        """Save the installation unless the main phase says not to."""
        state = load_persisted_state(self._store)

        if not state.cache_key:
            logger.info("No cache key found, skipping cache save.")
            return SaveOutcome(status="skipped_no_key")

        if not state.is_post:
            logger.info("Main step did not finish, skipping cache save.")
            return SaveOutcome(status="skipped_main_incomplete", cache_key=state.cache_key)

        if state.cache_hit:
            logger.info("Cache hit for %s, skipping cache save.", state.cache_key)
            return SaveOutcome(status="skipped_hit", cache_key=state.cache_key)

        logger.info("Saving toolchain installation cache...")
        install_path = installer.get_install_path()

        if not is_installation_path_valid(install_path):
            logger.warning(
                'Toolchain installation path "%s" is invalid, skipping cache save.',
                install_path,
            )
            return SaveOutcome(
                status="skipped_invalid_path",
                cache_key=state.cache_key,
                install_path=install_path,
            )

        try:
            self._cache.save([install_path], state.cache_key)
        except CacheSaveError as e:
            logger.warning("Failed to save toolchain installation cache: %s", e)
            return SaveOutcome(
                status="save_failed",
                cache_key=state.cache_key,
                install_path=install_path,
                error=str(e),
            )

        logger.info("Toolchain installation cache saved with key: %s", state.cache_key)
        return SaveOutcome(status="saved", cache_key=state.cache_key, install_path=install_path)
