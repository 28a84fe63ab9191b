"""
Cache models — key sets and the cross-phase state view.

CacheKeySet is computed fresh on every main-phase invocation.
PersistedState is a typed reading of the string-keyed state store;
it never owns the store, it only decodes the three named fields.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CacheKeySet(BaseModel):
    """Primary cache key plus its ordered fallback keys.

    ``restore_keys`` runs from least to most specific.  Each entry
    extends the previous one and the last equals ``primary_key``.
    """

    model_config = ConfigDict(frozen=True)

    primary_key: str
    restore_keys: list[str] = Field(default_factory=list)


class PersistedState(BaseModel):
    """What the main phase left behind for the post phase."""

    is_post: bool = False
    cache_key: str | None = None
    cache_hit: bool | None = None
