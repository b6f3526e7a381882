# tests/unit/sources/test_search_sources.py — v1
"""Tests for stock-photo and generative sources."""

from __future__ import annotations

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from breedlens.core.errors import SourceFetchFailed
from breedlens.core.models import BreedQuery
from breedlens.sources.base_source import BaseImageSource, HttpImageSource
from breedlens.sources.directory import SourceDirectory
from breedlens.sources.generative import OpenAIImageSource, PollinationsSource, generation_prompt
from breedlens.sources.stock_photo import PexelsSource, UnsplashSource, search_terms

OBSCURE = BreedQuery(breed_id="kooikerhondje", species="dog", name="Kooikerhondje")


@pytest.fixture(scope="module")
def directory() -> SourceDirectory:
    return SourceDirectory.default()


def _image_response(jpeg: bytes) -> httpx.Response:
    return httpx.Response(200, content=jpeg, headers={"content-type": "image/jpeg"})


class TestStockPhotoSources:
    def test_search_terms(self):
        assert search_terms(OBSCURE) == "Kooikerhondje dog"

    def test_unconfigured_without_key(self):
        assert UnsplashSource().is_configured is False
        assert PexelsSource().is_configured is False

    @pytest.mark.asyncio
    async def test_unsplash(self, directory, jpeg_bytes):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.path == "/search/photos":
                return httpx.Response(
                    200, json={"results": [{"urls": {"regular": "https://images.unsplash.com/p1"}}]}
                )
            return _image_response(jpeg_bytes)

        source = UnsplashSource(access_key="u-key", transport=httpx.MockTransport(handler))
        candidate = await source.fetch(OBSCURE, directory)
        assert seen[0].headers["authorization"] == "Client-ID u-key"
        assert seen[0].url.params["query"] == "Kooikerhondje dog"
        assert candidate.origin_url == "https://images.unsplash.com/p1"

    @pytest.mark.asyncio
    async def test_pexels_no_results(self, directory):
        source = PexelsSource(
            api_key="p-key",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"photos": []})),
        )
        with pytest.raises(SourceFetchFailed, match="no results"):
            await source.fetch(OBSCURE, directory)


class TestPollinationsSource:
    @pytest.mark.asyncio
    async def test_prompt_in_url(self, directory, jpeg_bytes):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _image_response(jpeg_bytes)

        source = PollinationsSource(size=512, transport=httpx.MockTransport(handler))
        candidate = await source.fetch(OBSCURE, directory)
        assert candidate.source_name == "pollinations"
        assert "Kooikerhondje" in seen[0].url.path
        assert seen[0].url.params["width"] == "512"
        assert source.kind == "generative"

    def test_prompt_names_breed_and_species(self):
        assert "purebred Kooikerhondje dog" in generation_prompt(OBSCURE)


class TestOpenAIImageSource:
    @pytest.mark.asyncio
    async def test_decodes_base64(self, directory, png_bytes):
        source = OpenAIImageSource(api_key="sk")
        sdk = MagicMock()
        sdk.images.generate = AsyncMock(
            return_value=SimpleNamespace(
                data=[SimpleNamespace(b64_json=base64.b64encode(png_bytes).decode())]
            )
        )
        source._OpenAIImageSource__client = sdk

        candidate = await source.fetch(OBSCURE, directory)
        assert candidate.data == png_bytes
        assert candidate.media_type == "image/png"
        assert sdk.images.generate.call_args.kwargs["response_format"] == "b64_json"

    @pytest.mark.asyncio
    async def test_sdk_error(self, directory):
        import openai

        source = OpenAIImageSource(api_key="sk")
        sdk = MagicMock()
        sdk.images.generate = AsyncMock(side_effect=openai.OpenAIError("quota exceeded"))
        source._OpenAIImageSource__client = sdk
        with pytest.raises(SourceFetchFailed, match="quota"):
            await source.fetch(OBSCURE, directory)

    @pytest.mark.asyncio
    async def test_empty_response(self, directory):
        source = OpenAIImageSource(api_key="sk")
        sdk = MagicMock()
        sdk.images.generate = AsyncMock(return_value=SimpleNamespace(data=[]))
        source._OpenAIImageSource__client = sdk
        with pytest.raises(SourceFetchFailed, match="no image"):
            await source.fetch(OBSCURE, directory)

    def test_needs_key(self):
        assert OpenAIImageSource().is_configured is False

    def test_does_not_carry_http_machinery(self):
        source = OpenAIImageSource(api_key="sk", timeout_s=30.0)
        assert isinstance(source, BaseImageSource)
        assert not isinstance(source, HttpImageSource)
        assert not hasattr(source, "_fetch")
        assert source._timeout_s == 30.0


class TestSourceInterface:
    def test_fetch_is_the_only_abstract_method(self):
        assert BaseImageSource.__abstractmethods__ == frozenset({"fetch"})
        assert HttpImageSource.__abstractmethods__ == frozenset({"_fetch"})

    def test_http_sources_share_the_client_path(self):
        for source in (UnsplashSource(), PexelsSource(), PollinationsSource()):
            assert isinstance(source, HttpImageSource)
