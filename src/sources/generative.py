# src/sources/generative.py — v1
"""Generative image sources: last resort for breeds no catalog or stock
search knows about. Each produces a fresh picture of the named breed."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any
from urllib.parse import quote

import httpx

from breedlens.core.errors import SourceFetchFailed
from breedlens.core.models import BreedQuery
from breedlens.sources.base_source import BaseImageSource, HttpImageSource
from breedlens.sources.directory import SourceDirectory
from breedlens.sources.models import SourceCandidate

logger = logging.getLogger(__name__)

POLLINATIONS_API = "https://image.pollinations.ai"


def generation_prompt(query: BreedQuery) -> str:
    return (
        f"A realistic photograph of a purebred {query.display_name} {query.species}, "
        "full body, natural light, plain background, high detail"
    )


class PollinationsSource(HttpImageSource):
    """Keyless text-to-image endpoint; the prompt is part of the URL."""

    name = "pollinations"
    kind = "generative"

    def __init__(
        self,
        base_url: str = POLLINATIONS_API,
        size: int = 800,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._base_url = base_url.rstrip("/")
        self._size = size

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        query: BreedQuery,
        directory: SourceDirectory,
    ) -> SourceCandidate:
        url = (
            f"{self._base_url}/prompt/{quote(generation_prompt(query), safe='')}"
            f"?width={self._size}&height={self._size}&nologo=true"
        )
        return await self._download(client, url)


class OpenAIImageSource(BaseImageSource):
    """Image generation through the openai SDK (base64 payload)."""

    name = "openai_images"
    kind = "generative"

    def __init__(
        self,
        api_key: str = "",
        model: str = "dall-e-3",
        size: str = "1024x1024",
        timeout_s: float = 60.0,
    ) -> None:
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._model = model
        self._size = size
        self.__client = None  # Lazy initialization

    @property
    def _openai(self):
        """Lazy-init AsyncOpenAI client (only on first API call)."""
        if self.__client is None:
            import openai

            self.__client = openai.AsyncOpenAI(
                api_key=self._api_key, timeout=self._timeout_s, max_retries=0
            )
        return self.__client

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def fetch(self, query: BreedQuery, directory: SourceDirectory) -> SourceCandidate:
        import openai

        try:
            result = await self._openai.images.generate(
                model=self._model,
                prompt=generation_prompt(query),
                size=self._size,
                n=1,
                response_format="b64_json",
            )
        except openai.OpenAIError as e:
            raise SourceFetchFailed(self.name, f"{type(e).__name__}: {e}") from e

        if not result.data or not result.data[0].b64_json:
            raise SourceFetchFailed(self.name, "no image in generation response")
        try:
            data = base64.b64decode(result.data[0].b64_json)
        except (binascii.Error, ValueError) as e:
            raise SourceFetchFailed(self.name, f"bad base64 payload: {e}") from e

        logger.info("Generated image for %s (%s)", query.display_name, self._model)
        return SourceCandidate(source_name=self.name, data=data, media_type="image/png")
