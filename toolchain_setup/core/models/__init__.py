"""
Domain models — Pydantic types for toolchain setup.

All models are re-exported here for convenient access:

    from toolchain_setup.core.models import CacheKeySet, SetupInputs
"""

from toolchain_setup.core.models.cache import CacheKeySet, PersistedState
from toolchain_setup.core.models.install import InstalledToolchain, InstallerConfig, SetupInputs

__all__ = [
    # cache.py
    "CacheKeySet",
    # install.py
    "InstalledToolchain",
    "InstallerConfig",
    "PersistedState",
    "SetupInputs",
]
