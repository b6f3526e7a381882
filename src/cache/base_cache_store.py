# src/cache/base_cache_store.py — v2
"""Abstract cache store interface: image files plus one metadata map."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable

from breedlens.cache.models import CacheEntry

EntryMap = dict[str, CacheEntry]


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    @property
    @abstractmethod
    def root(self) -> Path:
        """Directory holding the cached image files."""

    @abstractmethod
    async def get(self, filename: str) -> CacheEntry | None:
        """Retrieve the metadata entry for an image file."""

    @abstractmethod
    async def put(self, entry: CacheEntry) -> None:
        """Store (or overwrite) one metadata entry."""

    @abstractmethod
    async def delete(self, filename: str) -> bool:
        """Remove the image file and its entry. True if anything was removed."""

    @abstractmethod
    async def update(
        self, filename: str, fn: Callable[[CacheEntry], CacheEntry | None]
    ) -> CacheEntry | None:
        """Atomically replace one entry with fn(entry); None from fn drops it."""

    @abstractmethod
    async def mutate(self, fn: Callable[[EntryMap], None]) -> EntryMap:
        """Atomically apply fn to the whole map (in place) and persist it."""

    @abstractmethod
    async def list_entries(self) -> list[CacheEntry]:
        """List all metadata entries."""

    @abstractmethod
    async def list_files(self) -> list[str]:
        """List image filenames present in the cache directory."""

    @abstractmethod
    async def write_image(self, filename: str, data: bytes) -> Path:
        """Write image bytes; the file appears complete or not at all."""

    @abstractmethod
    async def read_image(self, filename: str) -> bytes | None:
        """Image bytes, or None if the file does not exist."""

    @abstractmethod
    async def image_exists(self, filename: str) -> bool:
        """Whether the image file exists."""
