# src/sources/dog_ceo.py — v1
"""Dog CEO catalog source (https://dog.ceo/dog-api/). Keyless, dogs only."""

from __future__ import annotations

import httpx

from breedlens.core.errors import SourceFetchFailed
from breedlens.core.models import BreedQuery, Species
from breedlens.sources.base_source import HttpImageSource
from breedlens.sources.directory import SourceDirectory
from breedlens.sources.models import SourceCandidate

DOG_CEO_API = "https://dog.ceo/api"


class DogCeoSource(HttpImageSource):
    """Random image of the matched breed key."""

    name = "dog_ceo"
    kind = "catalog"

    def __init__(self, base_url: str = DOG_CEO_API, **kwargs) -> None:
        super().__init__(**kwargs)
        self._base_url = base_url.rstrip("/")

    def supports(self, species: Species) -> bool:
        return species == "dog"

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        query: BreedQuery,
        directory: SourceDirectory,
    ) -> SourceCandidate:
        match = directory.match(query, self.name)
        if match is None:
            raise SourceFetchFailed(self.name, f"no catalog key for {query.display_name!r}")

        response = await client.get(f"{self._base_url}/breed/{match.key}/images/random")
        response.raise_for_status()
        data = response.json()
        if data.get("status") != "success" or not data.get("message"):
            raise SourceFetchFailed(self.name, f"no image for key {match.key!r}")

        return await self._download(client, data["message"], match.confidence)
