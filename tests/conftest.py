"""
Shared test fixtures and configuration.
"""

from collections.abc import Sequence
from pathlib import Path

import pytest

from toolchain_setup.adapters.actions.outputs import MemoryOutputs
from toolchain_setup.adapters.cache.base import CacheService
from toolchain_setup.adapters.installer.mock import MockInstaller
from toolchain_setup.core.persistence.state_store import MemoryStateStore


class RecordingCache(CacheService):
    """Cache double that records every call.

    ``restore_result`` is returned from restore; set ``restore_error`` or
    ``save_error`` to an exception instance to make that call raise.
    """

    def __init__(self, restore_result: str | None = None):
        self.restore_result = restore_result
        self.restore_error: Exception | None = None
        self.save_error: Exception | None = None
        self.restore_calls: list[tuple[list[str], str, list[str]]] = []
        self.save_calls: list[tuple[list[str], str]] = []

    @property
    def name(self) -> str:
        return "recording"

    @property
    def call_count(self) -> int:
        return len(self.restore_calls) + len(self.save_calls)

    def restore(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str] = (),
    ) -> str | None:
        self.restore_calls.append((list(paths), primary_key, list(restore_keys)))
        if self.restore_error is not None:
            raise self.restore_error
        return self.restore_result

    def save(self, paths: Sequence[str], key: str) -> None:
        self.save_calls.append((list(paths), key))
        if self.save_error is not None:
            raise self.save_error


@pytest.fixture
def store() -> MemoryStateStore:
    """An empty in-memory state store."""
    return MemoryStateStore()


@pytest.fixture
def cache() -> RecordingCache:
    """A cache double that misses by default."""
    return RecordingCache()


@pytest.fixture
def outputs() -> MemoryOutputs:
    return MemoryOutputs()


@pytest.fixture
def install_dir(tmp_path: Path) -> Path:
    """An existing, readable install directory."""
    path = tmp_path / "installs"
    path.mkdir()
    return path


@pytest.fixture
def installer(install_dir: Path) -> MockInstaller:
    """A mock installer pointed at ``install_dir``."""
    return MockInstaller(install_path=str(install_dir), create_dirs=True)
