# src/config/providers.py — v1
"""Declarative backend and image-source configuration.

Built-in defaults for every completion backend the registry knows about,
and the canonical names of the image sources the waterfall can use.
"""

from __future__ import annotations

# Per-backend defaults. The "adapter" field selects the client class in
# llm/client_factory.py; "credential" names the Settings field whose
# presence makes the backend eligible.
PROVIDER_DEFAULTS: dict[str, dict[str, object]] = {
    "groq": {
        "adapter": "openai_compatible",
        "credential": "groq_api_key",
        "base_endpoint": "https://api.groq.com/openai/v1",
        "model_id": "llama-3.3-70b-versatile",
        "vision_model_id": None,
        "timeout_ms": 10_000,
    },
    "together": {
        "adapter": "openai_compatible",
        "credential": "together_api_key",
        "base_endpoint": "https://api.together.xyz/v1",
        "model_id": "meta-llama/Meta-Llama-3.1-8B-Instruct-Turbo",
        "vision_model_id": "meta-llama/Llama-3.2-11B-Vision-Instruct-Turbo",
        "timeout_ms": 20_000,
    },
    "huggingface": {
        "adapter": "huggingface",
        "credential": "huggingface_api_key",
        "base_endpoint": "https://api-inference.huggingface.co/models",
        "model_id": "meta-llama/Llama-3.2-3B-Instruct",
        "vision_model_id": None,
        "timeout_ms": 20_000,
    },
    "cohere": {
        "adapter": "cohere",
        "credential": "cohere_api_key",
        "base_endpoint": "https://api.cohere.com/v2",
        "model_id": "command-r-plus",
        "vision_model_id": None,
        "timeout_ms": 10_000,
    },
    "openrouter": {
        "adapter": "openai_compatible",
        "credential": "openrouter_api_key",
        "base_endpoint": "https://openrouter.ai/api/v1",
        "model_id": "openai/gpt-3.5-turbo",
        "vision_model_id": "openai/gpt-4o-mini",
        "timeout_ms": 10_000,
    },
    "openai": {
        "adapter": "openai_compatible",
        "credential": "openai_api_key",
        "base_endpoint": "https://api.openai.com/v1",
        "model_id": "gpt-4o-mini",
        "vision_model_id": "gpt-4o-mini",
        "timeout_ms": 20_000,
    },
    "anthropic": {
        "adapter": "anthropic",
        "credential": "anthropic_api_key",
        "base_endpoint": "https://api.anthropic.com",
        "model_id": "claude-3-5-haiku-latest",
        "vision_model_id": "claude-3-5-haiku-latest",
        "timeout_ms": 20_000,
    },
    "ollama": {
        "adapter": "ollama",
        "credential": "ollama_base_url",
        "base_endpoint": None,  # taken from the credential field itself
        "model_id": "llama3",
        "vision_model_id": "llava",
        "timeout_ms": 30_000,
    },
}

DEFAULT_PROVIDER_ORDER = "groq,together,huggingface,cohere,openrouter"

# Image sources in their fixed waterfall tiers.
CATALOG_SOURCES: tuple[str, ...] = ("dog_ceo", "thecatapi")
STOCK_SOURCES: tuple[str, ...] = ("unsplash", "pexels")
GENERATIVE_SOURCES: tuple[str, ...] = ("pollinations", "openai_images")
KNOWN_SOURCES: tuple[str, ...] = CATALOG_SOURCES + STOCK_SOURCES + GENERATIVE_SOURCES

DEFAULT_SOURCE_ORDER = ",".join(KNOWN_SOURCES)

# Popular breeds resolved by the pre-warm sweep.
DEFAULT_PREWARM_DOGS = (
    "labrador,goldenretriever,germanshepherd,bulldog,beagle,"
    "poodle,rottweiler,yorkie,boxer,dachshund,"
    "shihtzu,pomeranian,husky,greatdane,doberman,"
    "bordercollie,australianshepherd,miniatureschnauzer,cavalier,shiba"
)
DEFAULT_PREWARM_CATS = (
    "persian,mainecoon,siamese,ragdoll,bengal,"
    "abyssinian,birman,orientalshorthair,sphynx,devon,"
    "britishshorthair,americanshorthair,scottishfold,burmese,tonkinese,"
    "russianblue,norwegianforest,cornishrex,chartreux,balinese"
)
