"""
Cache key builder — deterministic keys for a toolchain installation.

The primary key is a pure function of (platform, versions, modules).
Restore keys are every intermediate key on the way to the primary key,
least specific first, so the last restore key is the primary key itself.

    >>> build_cache_keys(["2021.3.10f1"], ["android"], platform="linux").primary_key
    'toolchain-setup-linux-2021.3.10f1-android'
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from toolchain_setup.core.models.cache import CacheKeySet

KEY_PREFIX = "toolchain-setup"


def build_cache_keys(
    versions: Sequence[str],
    modules: Sequence[str],
    platform: str | None = None,
) -> CacheKeySet:
    """Build the cache key set for an install request.

    Order matters: callers control precedence through the order of
    ``versions`` and ``modules``, so neither list is sorted.

    Args:
        versions: Requested toolchain versions, in request order.
        modules: Requested modules, in request order.
        platform: Platform tag (default: ``sys.platform``).

    Returns:
        CacheKeySet with ``len(versions) + len(modules)`` restore keys.
    """
    key = f"{KEY_PREFIX}-{platform or sys.platform}"
    restore_keys: list[str] = []

    for part in (*versions, *modules):
        key += f"-{part}"
        restore_keys.append(key)

    return CacheKeySet(primary_key=key, restore_keys=restore_keys)
