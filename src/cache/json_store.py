# src/cache/json_store.py — v2
"""JSON file-based cache store (default CACHE_BACKEND=json).

Image files live directly under CACHE_ROOT next to a single metadata map
(`.cache-metadata.json`, filename -> entry). Every metadata change is one
read-modify-write of the full map under an asyncio.Lock, and every write
goes to a temp file that is then os.replace()d over the target, so readers
never observe a half-written file.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import uuid
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from breedlens.cache.base_cache_store import BaseCacheStore, EntryMap
from breedlens.cache.models import CacheEntry
from breedlens.cache.naming import IMAGE_EXTENSION
from breedlens.core.errors import CacheWriteFailed

logger = logging.getLogger(__name__)

DEFAULT_METADATA_FILENAME = ".cache-metadata.json"


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using one JSON metadata map."""

    def __init__(
        self,
        cache_root: Path | str,
        metadata_filename: str = DEFAULT_METADATA_FILENAME,
    ) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._metadata_path = self._root / metadata_filename
        self._lock = asyncio.Lock()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def metadata_path(self) -> Path:
        return self._metadata_path

    # --- Metadata ---

    async def get(self, filename: str) -> CacheEntry | None:
        """Retrieve cache entry by image filename."""
        return self._load().get(filename)

    async def put(self, entry: CacheEntry) -> None:
        """Store a cache entry."""

        def _put(entries: EntryMap) -> None:
            entries[entry.filename] = entry

        await self.mutate(_put)

    async def delete(self, filename: str) -> bool:
        """Remove the image file and its entry."""
        removed = False
        path = self.image_path(filename)
        try:
            if path.exists():
                path.unlink()
                removed = True
        except OSError as e:
            raise CacheWriteFailed(filename, f"cannot delete image: {e}") from e

        def _drop(entries: EntryMap) -> None:
            nonlocal removed
            if entries.pop(filename, None) is not None:
                removed = True

        await self.mutate(_drop)
        return removed

    async def update(
        self, filename: str, fn: Callable[[CacheEntry], CacheEntry | None]
    ) -> CacheEntry | None:
        """Atomic read-modify-write of one entry. Missing entries are left alone."""
        result: CacheEntry | None = None

        def _apply(entries: EntryMap) -> None:
            nonlocal result
            current = entries.get(filename)
            if current is None:
                return
            result = fn(current)
            if result is None:
                del entries[filename]
            else:
                entries[filename] = result

        await self.mutate(_apply)
        return result

    async def mutate(self, fn: Callable[[EntryMap], None]) -> EntryMap:
        """Read the full map, apply fn, write the full map back."""
        async with self._lock:
            entries = self._load()
            fn(entries)
            self._save(entries)
            return dict(entries)

    async def list_entries(self) -> list[CacheEntry]:
        """List all cached entries."""
        return list(self._load().values())

    # --- Image files ---

    def image_path(self, filename: str) -> Path:
        return self._root / Path(filename).name

    async def list_files(self) -> list[str]:
        """Image files in the cache directory (dotfiles excluded)."""
        if not self._root.is_dir():
            return []
        return sorted(
            p.name
            for p in self._root.iterdir()
            if p.is_file()
            and not p.name.startswith(".")
            and p.suffix.lower() == IMAGE_EXTENSION
        )

    async def write_image(self, filename: str, data: bytes) -> Path:
        """Write image bytes via temp file + replace."""
        path = self.image_path(filename)
        try:
            _atomic_write(path, data)
        except OSError as e:
            raise CacheWriteFailed(filename, str(e)) from e
        return path

    async def read_image(self, filename: str) -> bytes | None:
        path = self.image_path(filename)
        if not path.is_file():
            return None
        return path.read_bytes()

    async def image_exists(self, filename: str) -> bool:
        return self.image_path(filename).is_file()

    # --- Internals ---

    def _load(self) -> EntryMap:
        """Load the metadata map. Missing or unreadable metadata is empty."""
        if not self._metadata_path.exists():
            return {}
        try:
            raw = json.loads(self._metadata_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load cache metadata %s: %s", self._metadata_path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Cache metadata %s is not a JSON object, ignoring", self._metadata_path)
            return {}

        entries: EntryMap = {}
        for filename, data in raw.items():
            if not isinstance(data, dict):
                continue
            try:
                entries[filename] = CacheEntry.model_validate({**data, "filename": filename})
            except ValidationError as e:
                logger.warning("Skipping invalid cache entry %s: %s", filename, e.error_count())
        return entries

    def _save(self, entries: EntryMap) -> None:
        payload = {name: entry.to_metadata() for name, entry in sorted(entries.items())}
        try:
            _atomic_write(
                self._metadata_path,
                json.dumps(payload, indent=2).encode("utf-8"),
            )
        except OSError as e:
            raise CacheWriteFailed(self._metadata_path.name, str(e)) from e


def _atomic_write(path: Path, data: bytes) -> None:
    tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    finally:
        if tmp.exists():
            tmp.unlink()
