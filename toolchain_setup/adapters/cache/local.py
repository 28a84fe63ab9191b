"""
Local directory cache — tar.gz archives under a cache root.

Suits self-hosted runners with a persistent volume, or any runner
with a mounted tool cache.  Layout::

    <cache_dir>/
        <slug>.tar.gz   archive, one member per cached path ("0", "1", ...)
        <slug>.json     manifest: key, created_at, original paths

Matching follows the usual CI cache rules: an exact match on the
primary key first, then each restore key in the order given as a
prefix, newest entry first.  Entries are immutable.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
import tarfile
import tempfile
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field

from toolchain_setup.adapters.cache.base import CacheService
from toolchain_setup.core.errors import CacheRestoreError, CacheSaveError

logger = logging.getLogger(__name__)

_DEFAULT_CACHE_DIR = Path.home() / ".cache" / "toolchain-setup" / "installations"


def get_cache_dir(environ: dict[str, str] | None = None) -> Path:
    """Return the cache root from TCS_CACHE_DIR, or the default."""
    env = os.environ if environ is None else environ
    return Path(env.get("TCS_CACHE_DIR") or _DEFAULT_CACHE_DIR)


class CacheEntry(BaseModel):
    """Manifest written beside each archive."""

    key: str
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    paths: list[str] = Field(default_factory=list)
    size_bytes: int = 0


def _slug(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]


class LocalDirectoryCache(CacheService):
    """Cache service backed by a local directory."""

    def __init__(self, cache_dir: Path | None = None):
        self._cache_dir = cache_dir or get_cache_dir()

    @property
    def name(self) -> str:
        return "local"

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    # ── Lookup ──────────────────────────────────────────────────

    def entries(self) -> list[CacheEntry]:
        """All readable entries, newest first."""
        if not self._cache_dir.is_dir():
            return []

        found: list[CacheEntry] = []
        for manifest in self._cache_dir.glob("*.json"):
            try:
                entry = CacheEntry.model_validate_json(manifest.read_text(encoding="utf-8"))
            except Exception as e:
                logger.warning("Skipping unreadable cache manifest %s: %s", manifest, e)
                continue
            if self._archive_path(entry.key).is_file():
                found.append(entry)

        found.sort(key=lambda e: e.created_at, reverse=True)
        return found

    def find(self, primary_key: str, restore_keys: Sequence[str] = ()) -> CacheEntry | None:
        """Resolve the entry a restore would use, without restoring it."""
        entries = self.entries()

        for entry in entries:
            if entry.key == primary_key:
                return entry

        for prefix in restore_keys:
            for entry in entries:
                if entry.key.startswith(prefix):
                    return entry

        return None

    # ── Restore ─────────────────────────────────────────────────

    def restore(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str] = (),
    ) -> str | None:
        entry = self.find(primary_key, restore_keys)
        if entry is None:
            logger.info("Cache not found for key: %s", primary_key)
            return None

        archive = self._archive_path(entry.key)
        logger.info("Restoring cache entry %s", entry.key)

        try:
            with tempfile.TemporaryDirectory(prefix="tcs-restore-") as tmp:
                with tarfile.open(archive, "r:gz") as tar:
                    tar.extractall(tmp, filter="data")

                for index, dest in enumerate(paths):
                    src = Path(tmp) / str(index)
                    if not src.exists():
                        logger.warning("Cache entry %s has no content for %s", entry.key, dest)
                        continue
                    self._place(src, Path(dest))
        except (OSError, tarfile.TarError) as e:
            raise CacheRestoreError(f"Failed to restore cache entry {entry.key}: {e}") from e

        return entry.key

    @staticmethod
    def _place(src: Path, dest: Path) -> None:
        if src.is_dir():
            shutil.copytree(src, dest, symlinks=True, dirs_exist_ok=True)
        else:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dest)

    # ── Save ────────────────────────────────────────────────────

    def save(self, paths: Sequence[str], key: str) -> None:
        if not key:
            raise CacheSaveError("Cache key must not be empty")

        archive = self._archive_path(key)
        if archive.is_file() and self._manifest_path(key).is_file():
            raise CacheSaveError(f"Cache entry already exists for key: {key}")

        missing = [p for p in paths if not Path(p).exists()]
        if missing:
            raise CacheSaveError(f"Cannot cache missing path(s): {', '.join(missing)}")

        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._cache_dir, prefix=".entry_", suffix=".tmp")
            os.close(fd)
            tmp = Path(tmp_name)
            try:
                with tarfile.open(tmp, "w:gz") as tar:
                    for index, path in enumerate(paths):
                        tar.add(path, arcname=str(index))
                tmp.replace(archive)
            except Exception:
                tmp.unlink(missing_ok=True)
                raise

            entry = CacheEntry(
                key=key,
                paths=[str(p) for p in paths],
                size_bytes=archive.stat().st_size,
            )
            try:
                self._manifest_path(key).write_text(
                    json.dumps(entry.model_dump(mode="json"), indent=2) + "\n",
                    encoding="utf-8",
                )
            except OSError:
                # An archive without a manifest would block this key for good
                archive.unlink(missing_ok=True)
                raise
        except (OSError, tarfile.TarError) as e:
            raise CacheSaveError(f"Failed to save cache entry {key}: {e}") from e

        logger.info("Cache saved: %s (%d bytes)", key, entry.size_bytes)

    # ── Paths ───────────────────────────────────────────────────

    def _archive_path(self, key: str) -> Path:
        return self._cache_dir / f"{_slug(key)}.tar.gz"

    def _manifest_path(self, key: str) -> Path:
        return self._cache_dir / f"{_slug(key)}.json"
