# src/sources/stock_photo.py — v1
"""Stock-photo search sources: Unsplash and Pexels. Both need an API key."""

from __future__ import annotations

import httpx

from breedlens.core.errors import SourceFetchFailed
from breedlens.core.models import BreedQuery
from breedlens.sources.base_source import HttpImageSource
from breedlens.sources.directory import SourceDirectory
from breedlens.sources.models import SourceCandidate

UNSPLASH_API = "https://api.unsplash.com"
PEXELS_API = "https://api.pexels.com/v1"


def search_terms(query: BreedQuery) -> str:
    return f"{query.display_name} {query.species}"


class UnsplashSource(HttpImageSource):
    name = "unsplash"
    kind = "stock"

    def __init__(self, access_key: str = "", base_url: str = UNSPLASH_API, **kwargs) -> None:
        super().__init__(**kwargs)
        self._access_key = access_key
        self._base_url = base_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self._access_key)

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        query: BreedQuery,
        directory: SourceDirectory,
    ) -> SourceCandidate:
        response = await client.get(
            f"{self._base_url}/search/photos",
            params={
                "query": search_terms(query),
                "per_page": 1,
                "orientation": "squarish",
                "content_filter": "high",
            },
            headers={"Authorization": f"Client-ID {self._access_key}", "Accept-Version": "v1"},
        )
        response.raise_for_status()
        results = response.json().get("results") or []
        if not results:
            raise SourceFetchFailed(self.name, f"no results for {search_terms(query)!r}")
        return await self._download(client, results[0]["urls"]["regular"])


class PexelsSource(HttpImageSource):
    name = "pexels"
    kind = "stock"

    def __init__(self, api_key: str = "", base_url: str = PEXELS_API, **kwargs) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        query: BreedQuery,
        directory: SourceDirectory,
    ) -> SourceCandidate:
        response = await client.get(
            f"{self._base_url}/search",
            params={"query": search_terms(query), "per_page": 1, "orientation": "square"},
            headers={"Authorization": self._api_key},
        )
        response.raise_for_status()
        photos = response.json().get("photos") or []
        if not photos:
            raise SourceFetchFailed(self.name, f"no results for {search_terms(query)!r}")
        return await self._download(client, photos[0]["src"]["large"])
