# src/sources/base_source.py — v2
"""Abstract image source interfaces.

Every source turns a BreedQuery into raw image bytes or raises
SourceFetchFailed. The waterfall iterates implementations and never
branches on a concrete source. HttpImageSource carries the shared httpx
client and download checks for sources that talk to plain HTTP APIs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx

from breedlens.core.errors import SourceFetchFailed
from breedlens.core.models import BreedQuery, Species
from breedlens.sources.directory import SourceDirectory
from breedlens.sources.models import SourceCandidate, SourceKind

USER_AGENT = "breedlens/0.3"

# Refuse anything bigger; real breed photos are well under this.
MAX_DOWNLOAD_BYTES = 15 * 1024 * 1024


class BaseImageSource(ABC):
    """Unified interface for all image sources."""

    name: str = "base"
    kind: SourceKind = "catalog"

    @property
    def is_configured(self) -> bool:
        """Whether this source has what it needs (API key etc.) to run."""
        return True

    def supports(self, species: Species) -> bool:
        return True

    @abstractmethod
    async def fetch(self, query: BreedQuery, directory: SourceDirectory) -> SourceCandidate:
        """Produce image bytes for the breed.

        Raises:
            SourceFetchFailed: On any transport, status or payload problem.
        """


class HttpImageSource(BaseImageSource):
    """Source backed by one short-lived httpx client per fetch."""

    def __init__(
        self,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._transport = transport

    async def fetch(self, query: BreedQuery, directory: SourceDirectory) -> SourceCandidate:
        try:
            async with self._client() as client:
                return await self._fetch(client, query, directory)
        except SourceFetchFailed:
            raise
        except httpx.HTTPStatusError as e:
            raise SourceFetchFailed(self.name, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise SourceFetchFailed(self.name, f"{type(e).__name__}: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise SourceFetchFailed(self.name, f"unexpected payload: {e}") from e

    @abstractmethod
    async def _fetch(
        self,
        client: httpx.AsyncClient,
        query: BreedQuery,
        directory: SourceDirectory,
    ) -> SourceCandidate:
        """Source-specific lookup and download."""

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout_s,
            transport=self._transport,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    async def _download(
        self,
        client: httpx.AsyncClient,
        url: str,
        match_confidence: int | None = None,
    ) -> SourceCandidate:
        """GET an image URL, rejecting non-image or empty bodies."""
        response = await client.get(url)
        response.raise_for_status()

        media_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if not media_type.startswith("image/"):
            raise SourceFetchFailed(self.name, f"not an image: {media_type or 'no content-type'}")
        data = response.content
        if not data:
            raise SourceFetchFailed(self.name, "empty image body")
        if len(data) > MAX_DOWNLOAD_BYTES:
            raise SourceFetchFailed(self.name, f"image too large ({len(data)} bytes)")

        return SourceCandidate(
            source_name=self.name,
            data=data,
            origin_url=str(response.url),
            media_type=media_type,
            match_confidence=match_confidence,
        )
