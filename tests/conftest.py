# tests/conftest.py — v2
"""Shared test fixtures for all unit tests.

Provides settings bound to a temp cache root, fake LLM clients, fake image
sources and tiny Pillow-made images. No network: every backend and every
source is faked or served by httpx.MockTransport.
"""

from __future__ import annotations

import asyncio
import io
import logging
from typing import Any, Callable

import pytest
from PIL import Image

from breedlens.cache.json_store import JsonCacheStore
from breedlens.config.providers import PROVIDER_DEFAULTS
from breedlens.config.settings import Settings
from breedlens.core.errors import SourceFetchFailed
from breedlens.core.models import BreedQuery, Species
from breedlens.llm.base_client import BaseLLMClient
from breedlens.llm.models import ImageInput, LLMResponse, Message
from breedlens.llm.registry import ProviderDescriptor, ProviderRegistry
from breedlens.logging.context import clear_context
from breedlens.sources.base_source import BaseImageSource
from breedlens.sources.directory import SourceDirectory
from breedlens.sources.models import SourceCandidate, SourceKind

_ENV_VARS = [
    str(d["credential"]).upper() for d in PROVIDER_DEFAULTS.values()
] + [
    "LLM_PROVIDER_ORDER", "LLM_TIMEOUTS", "LLM_MODELS", "IMAGE_SOURCE_ORDER",
    "THECATAPI_API_KEY", "UNSPLASH_ACCESS_KEY", "PEXELS_API_KEY", "CACHE_ROOT",
    "IMAGE_GENERATION_ENABLED", "VERIFICATION_ENABLED", "LOG_LEVEL", "LOG_FORMAT",
    "LOG_FILE",
]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """No developer credentials or overrides leak into tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_context()
    yield
    clear_context()
    root = logging.getLogger("breedlens")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


# === FIXTURES: Images ===


def _encode(fmt: str, size: tuple[int, int], color: tuple[int, int, int]) -> bytes:
    out = io.BytesIO()
    Image.new("RGB", size, color).save(out, format=fmt)
    return out.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    """Small valid JPEG."""
    return _encode("JPEG", (32, 24), (200, 160, 90))


@pytest.fixture
def png_bytes() -> bytes:
    """Larger PNG, wider than tall."""
    return _encode("PNG", (1200, 600), (20, 120, 200))


# === FIXTURES: Settings and cache ===


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with no LLM credentials and a temp cache root."""
    return Settings(_env_file=None, cache_root=tmp_path / "breeds")


@pytest.fixture
def store(settings) -> JsonCacheStore:
    return JsonCacheStore(settings.cache_dir)


@pytest.fixture
def dog_query() -> BreedQuery:
    return BreedQuery(breed_id="goldenretriever", species="dog", name="Golden Retriever")


# === FIXTURES: LLM fakes ===


class FakeLLMClient(BaseLLMClient):
    """Scripted client: each call pops the next answer or raises it."""

    def __init__(
        self,
        name: str,
        answers: list[str | BaseException] | None = None,
        vision: bool = False,
        delay_s: float = 0.0,
    ) -> None:
        self._name = name
        self._answers = list(answers or [f"answer from {name}"])
        self._vision = vision
        self._delay_s = delay_s
        self.calls: list[dict[str, Any]] = []

    async def _next(self, **call: Any) -> LLMResponse:
        self.calls.append(call)
        if self._delay_s:
            await asyncio.sleep(self._delay_s)
        answer = self._answers.pop(0) if len(self._answers) > 1 else self._answers[0]
        if isinstance(answer, BaseException):
            raise answer
        return LLMResponse(
            content=answer, model=f"{self._name}-model", provider=self._name, latency_ms=1,
        )

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 256,
        temperature: float = 0.7,
        response_format=None,
    ) -> LLMResponse:
        return await self._next(messages=messages, system=system, vision=False)

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 256,
    ) -> LLMResponse:
        return await self._next(messages=messages, system=system, images=images, vision=True)

    @property
    def supports_vision(self) -> bool:
        return self._vision

    @property
    def provider_name(self) -> str:
        return self._name


def _descriptor(
    name: str,
    rank: int,
    configured: bool = True,
    vision: bool = False,
    timeout_ms: int = 1000,
) -> ProviderDescriptor:
    return ProviderDescriptor(
        name=name,
        credential_present=configured,
        supports_vision=vision,
        base_endpoint=f"https://{name}.invalid/v1",
        model_id=f"{name}-model",
        vision_model_id=f"{name}-vision" if vision else None,
        timeout_ms=timeout_ms,
        priority_rank=rank,
    )


@pytest.fixture
def make_registry() -> Callable[..., ProviderRegistry]:
    """Build a registry from (name, configured, vision) tuples in rank order."""

    def _make(*specs: tuple[str, bool, bool], timeout_ms: int = 1000) -> ProviderRegistry:
        return ProviderRegistry(
            [
                _descriptor(name, rank, configured, vision, timeout_ms)
                for rank, (name, configured, vision) in enumerate(specs, start=1)
            ]
        )

    return _make


@pytest.fixture
def fake_client() -> type[FakeLLMClient]:
    return FakeLLMClient


# === FIXTURES: Image source fakes ===


class FakeSource(BaseImageSource):
    """Scripted image source: each fetch pops the next bytes or failure."""

    def __init__(
        self,
        name: str,
        kind: SourceKind = "catalog",
        results: list[bytes | Exception] | None = None,
        species: Species | None = None,
        configured: bool = True,
    ) -> None:
        self.name = name
        self.kind = kind
        self._results = list(results or [])
        self._species = species
        self._configured = configured
        self.queries: list[BreedQuery] = []

    @property
    def is_configured(self) -> bool:
        return self._configured

    def supports(self, species: Species) -> bool:
        return self._species is None or species == self._species

    async def fetch(self, query: BreedQuery, directory: SourceDirectory) -> SourceCandidate:
        self.queries.append(query)
        if not self._results:
            raise SourceFetchFailed(self.name, "no result scripted")
        result = self._results.pop(0) if len(self._results) > 1 else self._results[0]
        if isinstance(result, Exception):
            raise result
        return SourceCandidate(
            source_name=self.name,
            data=result,
            origin_url=f"https://{self.name}.invalid/{query.breed_id}.jpg",
        )


@pytest.fixture
def fake_source() -> type[FakeSource]:
    return FakeSource
