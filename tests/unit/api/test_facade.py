# tests/unit/api/test_facade.py — v2
"""Tests for api/facade.py - service wiring, ask, resolve_image, health."""

from __future__ import annotations

import pytest

from breedlens.api.facade import (
    DEGRADED_ALL_FAILED,
    DEGRADED_NO_PROVIDERS,
    _image_input,
    ask,
    build_services,
    health,
    resolve_image,
)
from breedlens.llm.router import CompletionRouter
from breedlens.sources.waterfall import FetchWaterfall


@pytest.fixture
def services_for(settings, store, make_registry, fake_client, fake_source, jpeg_bytes):
    """Services over fake backends; clients maps provider name -> FakeLLMClient."""

    def _build(*specs, clients=None, sources=None):
        router = CompletionRouter(make_registry(*specs), clients=clients or {})
        waterfall = FetchWaterfall(
            sources if sources is not None else [fake_source("dog_ceo", "catalog", [jpeg_bytes])]
        )
        return build_services(settings, router=router, store=store, waterfall=waterfall)

    return _build


class TestBuildServices:
    def test_wires_injected_components(self, services_for, store):
        services = services_for(("groq", True, False))
        assert services.store is store
        assert services.registry is services.router.registry
        assert services.pipeline.store is store
        assert services.shim.root == store.root
        assert services.verifier.threshold == 70

    def test_builds_from_settings(self, settings):
        services = build_services(settings)
        assert services.registry.names(eligible_only=True) == []
        assert services.store.root == settings.cache_dir
        assert len(services.waterfall) > 0


class TestAsk:
    @pytest.mark.asyncio
    async def test_answer_from_first_provider(self, services_for, fake_client):
        groq = fake_client("groq", ["Beagles weigh about 10 kg."])
        services = services_for(("groq", True, False), clients={"groq": groq})
        resp = await ask(services, "How heavy?", breed_name="Beagle", species="dog")
        assert resp.answer == "Beagles weigh about 10 kg."
        assert resp.provider_used == "groq"
        assert resp.attempted_chain == ["groq"]
        assert resp.degraded is False
        assert groq.calls[0]["system"] == services.settings.llm_system_prompt

    @pytest.mark.asyncio
    async def test_misspelt_breed_name_is_corrected(self, services_for, fake_client):
        groq = fake_client("groq", ["Yes, very friendly."])
        services = services_for(("groq", True, False), clients={"groq": groq})
        await ask(services, "Friendly?", breed_name="Goldn Retriever", species="dog")
        prompt = groq.calls[0]["messages"][0].content
        assert "Golden Retriever" in prompt
        assert "Goldn" not in prompt

    @pytest.mark.asyncio
    async def test_unknown_breed_name_is_kept(self, services_for, fake_client):
        groq = fake_client("groq", ["No idea."])
        services = services_for(("groq", True, False), clients={"groq": groq})
        await ask(services, "Friendly?", breed_name="Kooikerhondje", species="dog")
        assert "Kooikerhondje" in groq.calls[0]["messages"][0].content

    @pytest.mark.asyncio
    async def test_no_providers_is_degraded(self, services_for):
        services = services_for(("groq", False, False))
        resp = await ask(services, "How heavy?")
        assert resp.degraded is True
        assert resp.answer == DEGRADED_NO_PROVIDERS
        assert resp.provider_used is None

    @pytest.mark.asyncio
    async def test_all_failed_is_degraded(self, services_for, fake_client):
        clients = {
            "groq": fake_client("groq", [TimeoutError("groq timed out")]),
            "cohere": fake_client("cohere", [RuntimeError("boom")]),
        }
        services = services_for(("groq", True, False), ("cohere", True, False), clients=clients)
        resp = await ask(services, "How heavy?")
        assert resp.degraded is True
        assert resp.answer == DEGRADED_ALL_FAILED
        assert resp.attempted_chain == ["groq", "cohere"]

    @pytest.mark.asyncio
    async def test_vision_question_sends_cached_image(self, services_for, fake_client, store, jpeg_bytes):
        await store.write_image("beagle-dog.jpg", jpeg_bytes)
        seeing = fake_client("seeing", ["That is a beagle."], vision=True)
        services = services_for(("seeing", True, True), clients={"seeing": seeing})
        resp = await ask(
            services, "What breed?", image_url="/api/breed-images/beagle-dog.jpg", use_vision=True
        )
        assert resp.answer == "That is a beagle."
        assert seeing.calls[0]["vision"] is True
        assert seeing.calls[0]["images"][0].data == jpeg_bytes

    @pytest.mark.asyncio
    async def test_vision_without_vision_provider_is_degraded(self, services_for, fake_client):
        services = services_for(("groq", True, False), clients={"groq": fake_client("groq")})
        resp = await ask(services, "What breed?", image_url="https://x.invalid/a.jpg", use_vision=True)
        assert resp.degraded is True


class TestImageInput:
    @pytest.mark.asyncio
    async def test_external_url_passed_through(self, services_for):
        image = await _image_input(services_for(), "https://images.invalid/cat.jpg")
        assert image.url == "https://images.invalid/cat.jpg"
        assert image.data is None

    @pytest.mark.asyncio
    async def test_missing_cached_file_falls_back_to_url(self, services_for):
        image = await _image_input(services_for(), "/api/breed-images/ghost-dog.jpg")
        assert image.url == "/api/breed-images/ghost-dog.jpg"


class TestResolveImage:
    @pytest.mark.asyncio
    async def test_resolves_and_caches(self, services_for):
        services = services_for()
        resp = await resolve_image(services, "beagle", "dog", name="Beagle")
        assert resp.image_url == "/api/breed-images/beagle-dog.jpg"
        assert resp.filename == "beagle-dog.jpg"
        assert resp.source == "dog_ceo"
        assert resp.is_placeholder is False

        again = await resolve_image(services, "beagle", "dog", name="Beagle")
        assert again.from_cache is True

    @pytest.mark.asyncio
    async def test_nothing_found_gives_placeholder(self, services_for):
        services = services_for(sources=[])
        resp = await resolve_image(services, "sdfkjh", "cat")
        assert resp.is_placeholder is True
        assert resp.image_url == "/breeds/placeholder_cat.jpg"


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, services_for):
        services = services_for(("groq", True, False), ("seeing", True, True))
        result = await health(services)
        assert result.status == "healthy"
        assert result.llm_providers.providers == ["groq", "seeing"]
        assert result.llm_providers.vision_providers == ["seeing"]
        assert result.cache_directory.writable is True
        assert result.image_sources == ["dog_ceo"]

    @pytest.mark.asyncio
    async def test_degraded_without_providers(self, services_for):
        result = await health(services_for(("groq", False, False)))
        assert result.status == "degraded"
        assert result.llm_providers.configured is False

    @pytest.mark.asyncio
    async def test_unhealthy_without_cache_directory(self, services_for, store):
        services = services_for(("groq", True, False))
        store.root.rmdir()
        result = await health(services)
        assert result.status == "unhealthy"
        assert result.cache_directory.exists is False
        assert result.cache_directory.error
