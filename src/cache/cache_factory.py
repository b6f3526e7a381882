# src/cache/cache_factory.py — v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from breedlens.cache.base_cache_store import BaseCacheStore
from breedlens.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to JSON backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "json" if settings is None else settings.cache_backend

    if backend == "json":
        from breedlens.cache.json_store import DEFAULT_METADATA_FILENAME, JsonCacheStore

        if settings is None:
            return JsonCacheStore(cache_root="~/.breedlens/breeds")
        return JsonCacheStore(
            cache_root=settings.cache_dir,
            metadata_filename=settings.cache_metadata_filename or DEFAULT_METADATA_FILENAME,
        )

    raise ValueError(f"Unsupported cache backend: {backend!r}")
