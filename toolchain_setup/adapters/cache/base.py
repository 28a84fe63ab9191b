"""
Cache service protocol — the remote cache the coordinator talks to.

Unlike installers, cache services raise on failure.  The coordinator
decides what a failure means: a failed restore is a miss and a
failed save is a warning.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence


class CacheService(ABC):
    """Save and restore directory trees under string keys."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The backend identifier (e.g., 'local')."""

    @abstractmethod
    def restore(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str] = (),
    ) -> str | None:
        """Restore ``paths`` from the best matching entry.

        Returns:
            The key of the entry that was restored, or None on a miss.

        Raises:
            CacheRestoreError: If the service or the archive fails.
        """

    @abstractmethod
    def save(self, paths: Sequence[str], key: str) -> None:
        """Save ``paths`` under ``key``.

        Raises:
            CacheSaveError: If the entry cannot be written.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
