# tests/unit/llm/test_registry.py — v1
"""Tests for llm/registry.py - provider descriptors and registry."""

from __future__ import annotations

import logging

import pytest

from breedlens.config.settings import Settings
from breedlens.llm.registry import ProviderDescriptor, ProviderRegistry


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestProviderDescriptor:
    def test_timeout_seconds(self):
        d = ProviderDescriptor(
            name="groq", credential_present=True, supports_vision=False,
            base_endpoint=None, model_id="m", vision_model_id=None,
            timeout_ms=2500, priority_rank=1,
        )
        assert d.timeout_s == 2.5

    def test_eligibility(self):
        d = ProviderDescriptor(
            name="groq", credential_present=True, supports_vision=False,
            base_endpoint=None, model_id="m", vision_model_id=None,
            timeout_ms=1000, priority_rank=1,
        )
        assert d.is_eligible() is True
        assert d.is_eligible(requires_vision=True) is False

    def test_frozen(self):
        d = ProviderDescriptor(
            name="groq", credential_present=False, supports_vision=False,
            base_endpoint=None, model_id="m", vision_model_id=None,
            timeout_ms=1000, priority_rank=1,
        )
        with pytest.raises(AttributeError):
            d.credential_present = True  # type: ignore[misc]


class TestProviderRegistry:
    def test_sorted_by_rank(self, make_registry):
        registry = make_registry(("a", True, False), ("b", True, False))
        reordered = ProviderRegistry(list(reversed(registry.descriptors)))
        assert reordered.names() == ["a", "b"]

    def test_duplicate_names_rejected(self, make_registry):
        registry = make_registry(("a", True, False))
        with pytest.raises(ValueError, match="Duplicate"):
            ProviderRegistry([registry.descriptors[0], registry.descriptors[0]])

    def test_eligible_filters_credentials_and_vision(self, make_registry):
        registry = make_registry(
            ("groq", True, False), ("together", False, True), ("openai", True, True),
        )
        assert [d.name for d in registry.eligible()] == ["groq", "openai"]
        assert [d.name for d in registry.eligible(requires_vision=True)] == ["openai"]

    def test_get(self, make_registry):
        registry = make_registry(("groq", True, False))
        assert registry.get("groq").model_id == "groq-model"
        assert registry.get("cohere") is None

    def test_stats(self, make_registry):
        registry = make_registry(("groq", True, False), ("openai", False, True))
        assert registry.stats()[1] == {
            "name": "openai", "configured": False, "priority": 2,
            "vision": True, "timeout_ms": 1000,
        }

    def test_len_and_iter(self, make_registry):
        registry = make_registry(("a", True, False), ("b", False, False))
        assert len(registry) == 2
        assert [d.name for d in registry] == ["a", "b"]


class TestFromSettings:
    def test_follows_configured_order(self):
        registry = ProviderRegistry.from_settings(
            _settings(llm_provider_order="cohere,groq", groq_api_key="k1")
        )
        assert registry.names() == ["cohere", "groq"]
        assert registry.names(eligible_only=True) == ["groq"]
        assert registry.get("cohere").priority_rank == 1

    def test_defaults_and_overrides(self):
        registry = ProviderRegistry.from_settings(
            _settings(
                llm_provider_order="groq,together",
                groq_api_key="k1",
                together_api_key="k2",
                llm_timeouts="groq:8000",
                llm_models="together:custom-model",
            )
        )
        groq, together = registry.descriptors
        assert groq.timeout_ms == 8000
        assert groq.supports_vision is False
        assert groq.base_endpoint == "https://api.groq.com/openai/v1"
        assert together.model_id == "custom-model"
        assert together.supports_vision is True
        assert together.timeout_ms == 20_000

    def test_ollama_endpoint_is_its_credential(self):
        registry = ProviderRegistry.from_settings(
            _settings(llm_provider_order="ollama", ollama_base_url="http://gpu-box:11434")
        )
        ollama = registry.get("ollama")
        assert ollama.credential_present is True
        assert ollama.base_endpoint == "http://gpu-box:11434"
        assert ollama.adapter == "ollama"

    def test_whitespace_key_is_not_a_credential(self):
        registry = ProviderRegistry.from_settings(
            _settings(llm_provider_order="groq", groq_api_key="   ")
        )
        assert registry.eligible() == []

    def test_warns_when_nothing_configured(self, caplog):
        with caplog.at_level(logging.WARNING, logger="breedlens.llm.registry"):
            ProviderRegistry.from_settings(_settings())
        assert "No LLM providers configured" in caplog.text
