"""FastAPI dependency injection: the session asset store."""

from __future__ import annotations

from functools import lru_cache

from caption_studio.store.asset_store import AssetStore


@lru_cache(maxsize=1)
def get_asset_store() -> AssetStore:
    """Return the process-wide asset store, created empty on first use."""
    return AssetStore()
