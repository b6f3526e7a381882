# tests/unit/llm/test_client_factory.py — v1
"""Tests for llm/client_factory.py - adapter selection and wiring."""

from __future__ import annotations

from dataclasses import replace

import pytest

from breedlens.config.settings import Settings
from breedlens.llm import client_factory
from breedlens.llm.adapters.anthropic_adapter import AnthropicAdapter
from breedlens.llm.adapters.cohere_adapter import CohereAdapter
from breedlens.llm.adapters.huggingface_adapter import HuggingFaceAdapter
from breedlens.llm.adapters.ollama_adapter import OllamaAdapter
from breedlens.llm.adapters.openai_adapter import OpenAIAdapter
from breedlens.llm.client_factory import (
    UnsupportedProviderError,
    create_llm_client,
    register_provider,
)
from breedlens.llm.registry import ProviderRegistry


@pytest.fixture
def full_settings() -> Settings:
    return Settings(
        _env_file=None,
        llm_provider_order="groq,openrouter,huggingface,cohere,anthropic,ollama",
        groq_api_key="gsk",
        openrouter_api_key="sk-or",
        huggingface_api_key="hf",
        cohere_api_key="co",
        anthropic_api_key="sk-ant",
        ollama_base_url="http://localhost:11434",
    )


@pytest.fixture
def registry(full_settings) -> ProviderRegistry:
    return ProviderRegistry.from_settings(full_settings)


class TestCreateLLMClient:
    def test_openai_compatible(self, registry, full_settings):
        client = create_llm_client(registry.get("groq"), full_settings)
        assert isinstance(client, OpenAIAdapter)
        assert client.provider_name == "groq"
        assert client._api_key == "gsk"
        assert client._base_url == "https://api.groq.com/openai/v1"
        assert client.supports_vision is False

    def test_openrouter_headers(self, registry, full_settings):
        client = create_llm_client(registry.get("openrouter"), full_settings)
        assert client._default_headers == {
            "HTTP-Referer": full_settings.openrouter_referer,
            "X-Title": full_settings.openrouter_title,
        }
        assert client.supports_vision is True

    def test_huggingface(self, registry, full_settings):
        client = create_llm_client(registry.get("huggingface"), full_settings)
        assert isinstance(client, HuggingFaceAdapter)
        assert client._api_key == "hf"

    def test_cohere(self, registry, full_settings):
        assert isinstance(create_llm_client(registry.get("cohere"), full_settings), CohereAdapter)

    def test_anthropic(self, registry, full_settings):
        client = create_llm_client(registry.get("anthropic"), full_settings)
        assert isinstance(client, AnthropicAdapter)
        assert client._timeout_s == 20.0

    def test_ollama_uses_host(self, registry, full_settings):
        client = create_llm_client(registry.get("ollama"), full_settings)
        assert isinstance(client, OllamaAdapter)
        assert client._host == "http://localhost:11434"
        assert client.supports_vision is True

    def test_unknown_adapter(self, registry):
        descriptor = replace(registry.get("groq"), adapter="carrier_pigeon")
        with pytest.raises(UnsupportedProviderError, match="carrier_pigeon"):
            create_llm_client(descriptor)

    def test_register_provider(self, registry, monkeypatch):
        monkeypatch.setattr(client_factory, "_ADAPTER_REGISTRY", dict(client_factory._ADAPTER_REGISTRY))
        register_provider("custom", "breedlens.llm.adapters.cohere_adapter.CohereAdapter")
        descriptor = replace(registry.get("groq"), adapter="custom")
        assert isinstance(create_llm_client(descriptor), CohereAdapter)
