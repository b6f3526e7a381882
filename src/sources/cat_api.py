# src/sources/cat_api.py — v1
"""TheCatAPI catalog source. Works keyless; an API key lifts rate limits."""

from __future__ import annotations

import httpx

from breedlens.core.errors import SourceFetchFailed
from breedlens.core.models import BreedQuery, Species
from breedlens.sources.base_source import HttpImageSource
from breedlens.sources.directory import SourceDirectory
from breedlens.sources.models import SourceCandidate

THECATAPI_API = "https://api.thecatapi.com/v1"


class TheCatApiSource(HttpImageSource):
    name = "thecatapi"
    kind = "catalog"

    def __init__(self, api_key: str = "", base_url: str = THECATAPI_API, **kwargs) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    def supports(self, species: Species) -> bool:
        return species == "cat"

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        query: BreedQuery,
        directory: SourceDirectory,
    ) -> SourceCandidate:
        match = directory.match(query, self.name)
        if match is None:
            raise SourceFetchFailed(self.name, f"no catalog key for {query.display_name!r}")

        headers = {"x-api-key": self._api_key} if self._api_key else {}
        response = await client.get(
            f"{self._base_url}/images/search",
            params={"breed_ids": match.key, "limit": 1},
            headers=headers,
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, list) or not data or not data[0].get("url"):
            raise SourceFetchFailed(self.name, f"no image for breed id {match.key!r}")

        return await self._download(client, data[0]["url"], match.confidence)
