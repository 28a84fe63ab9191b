"""
Error taxonomy for toolchain setup.

Only InstallationError fails a run.  Cache errors are raised by cache
services and degrade at the coordinator: a failed restore counts as a
miss and a failed save becomes a warning.
"""

from __future__ import annotations


class ToolchainSetupError(Exception):
    """Base class for all toolchain setup errors."""


class InstallationError(ToolchainSetupError):
    """The installer could not provide the requested toolchain."""


class CacheServiceError(ToolchainSetupError):
    """A remote cache operation failed."""


class CacheRestoreError(CacheServiceError):
    """Restoring a cache entry failed (network, service, corrupt archive)."""


class CacheSaveError(CacheServiceError):
    """Saving a cache entry failed (quota, existing entry, I/O)."""
