# src/api/asset_shim.py — v1
"""Serve cached images written after deployment.

The filename token is validated against a strict pattern before any
filesystem access, so path traversal and arbitrary file reads are
impossible.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from breedlens.core.errors import ImageNotFound, InvalidFilenameToken

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=604800, immutable"  # 7 days

_MEDIA_TYPES = {".jpg": "image/jpeg", ".jpeg": "image/jpeg", ".png": "image/png"}


@dataclass(frozen=True)
class AssetPayload:
    data: bytes
    media_type: str
    headers: dict[str, str] = field(default_factory=dict)


class DynamicAssetShim:
    """Read-only view over the cache directory for one file extension."""

    def __init__(self, root: Path | str, extension: str = ".jpg") -> None:
        self._root = Path(root).expanduser()
        self._extension = extension.lower()
        self._media_type = _MEDIA_TYPES.get(self._extension, "application/octet-stream")
        self._pattern = re.compile(
            rf"^[A-Za-z0-9-]+{re.escape(self._extension)}$"
        )

    @property
    def root(self) -> Path:
        return self._root

    def validate(self, token: str | None) -> str:
        """Return the token if it is a safe filename.

        Raises:
            InvalidFilenameToken: Empty, wrong charset or wrong extension.
        """
        if not token or not self._pattern.fullmatch(token):
            raise InvalidFilenameToken(f"Invalid filename: {token!r}")
        return token

    async def serve(self, token: str | None) -> AssetPayload:
        """Bytes and caching headers for one cached image.

        Raises:
            InvalidFilenameToken: Token rejected before touching the disk.
            ImageNotFound: Valid token, no such file.
        """
        filename = self.validate(token)
        path = self._root / filename
        if not path.is_file():
            raise ImageNotFound(f"Image not found: {filename}")

        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            # Swept between the check and the read.
            raise ImageNotFound(f"Image not found: {filename}") from e

        return AssetPayload(
            data=data,
            media_type=self._media_type,
            headers={
                "Content-Type": self._media_type,
                "Cache-Control": CACHE_CONTROL,
            },
        )
