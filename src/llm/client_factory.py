# src/llm/client_factory.py — v3
"""Factory: instantiate an LLM client from a provider descriptor.

Called lazily by the completion router the first time a backend is tried,
so an ineligible or never-reached backend never constructs a client.
"""

from __future__ import annotations

import importlib
import logging

from breedlens.config.settings import Settings
from breedlens.llm.base_client import BaseLLMClient
from breedlens.llm.registry import ProviderDescriptor

logger = logging.getLogger(__name__)

# Registry of adapter kind → adapter class path (lazy import).
_ADAPTER_REGISTRY: dict[str, str] = {
    "openai_compatible": "breedlens.llm.adapters.openai_adapter.OpenAIAdapter",
    "anthropic": "breedlens.llm.adapters.anthropic_adapter.AnthropicAdapter",
    "ollama": "breedlens.llm.adapters.ollama_adapter.OllamaAdapter",
    "huggingface": "breedlens.llm.adapters.huggingface_adapter.HuggingFaceAdapter",
    "cohere": "breedlens.llm.adapters.cohere_adapter.CohereAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a descriptor names an adapter that is not registered."""


def create_llm_client(
    descriptor: ProviderDescriptor,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the correct adapter for a descriptor.

    Args:
        descriptor: Registry entry (adapter kind, endpoint, models, timeout).
        settings: Application settings (for API keys and extra headers).
        **kwargs: Additional adapter-specific arguments.

    Returns:
        Configured BaseLLMClient instance.

    Raises:
        UnsupportedProviderError: If the adapter kind is not registered.
    """
    if descriptor.adapter not in _ADAPTER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM adapter: {descriptor.adapter!r}. "
            f"Available: {', '.join(sorted(_ADAPTER_REGISTRY))}"
        )

    adapter_cls = _import_class(_ADAPTER_REGISTRY[descriptor.adapter])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = descriptor.model_id
    init_kwargs["timeout_s"] = descriptor.timeout_s

    if descriptor.adapter == "ollama":
        init_kwargs.setdefault("host", descriptor.base_endpoint)
        init_kwargs.setdefault("vision_model", descriptor.vision_model_id)
    else:
        if settings is not None:
            init_kwargs.setdefault(
                "api_key", getattr(settings, f"{descriptor.name}_api_key", "")
            )
        if descriptor.adapter in ("openai_compatible", "huggingface", "cohere"):
            init_kwargs.setdefault("base_url", descriptor.base_endpoint)
        if descriptor.adapter in ("openai_compatible", "anthropic"):
            init_kwargs.setdefault("vision_model", descriptor.vision_model_id)
        if descriptor.adapter == "openai_compatible":
            init_kwargs.setdefault("provider", descriptor.name)

    if descriptor.name == "openrouter" and settings is not None:
        init_kwargs.setdefault(
            "default_headers",
            {
                "HTTP-Referer": settings.openrouter_referer,  # Required by OpenRouter
                "X-Title": settings.openrouter_title,
            },
        )

    logger.debug(
        "Creating LLM client: provider=%s, adapter=%s, model=%s",
        descriptor.name, descriptor.adapter, descriptor.model_id,
    )
    return adapter_cls(**init_kwargs)


def register_provider(kind: str, class_path: str) -> None:
    """Register a custom adapter class for a new backend kind.

    Args:
        kind: Adapter identifier referenced by ProviderDescriptor.adapter.
        class_path: Fully qualified class path implementing BaseLLMClient.
    """
    _ADAPTER_REGISTRY[kind] = class_path
    logger.info("Registered LLM adapter: %s → %s", kind, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
