# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: backend
credentials and ordering, image sources, cache layout, verification and
logging. A missing credential is never an error, it only makes that backend
ineligible.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from breedlens.config.providers import (
    DEFAULT_PREWARM_CATS,
    DEFAULT_PREWARM_DOGS,
    DEFAULT_PROVIDER_ORDER,
    DEFAULT_SOURCE_ORDER,
    KNOWN_SOURCES,
    PROVIDER_DEFAULTS,
)


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDERS ===
    llm_provider_order: str = DEFAULT_PROVIDER_ORDER
    llm_timeouts: str = ""  # "groq:8000,together:25000"
    llm_models: str = ""  # "groq:llama-3.1-8b-instant"
    llm_max_tokens: int = 256
    llm_temperature: float = 0.7
    llm_system_prompt: str = (
        "You are a helpful assistant for pet breed information. "
        "Answer concisely and accurately."
    )

    # Provider credentials
    groq_api_key: str = ""
    together_api_key: str = ""
    huggingface_api_key: str = ""
    cohere_api_key: str = ""
    openrouter_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    ollama_base_url: str = ""

    openrouter_referer: str = "https://breedlens.local"
    openrouter_title: str = "BreedLens"

    # === Image sources ===
    image_source_order: str = DEFAULT_SOURCE_ORDER
    thecatapi_api_key: str = ""
    unsplash_access_key: str = ""
    pexels_api_key: str = ""
    image_generation_enabled: bool = True
    openai_image_model: str = "dall-e-3"
    source_timeout_ms: int = 10_000
    generation_timeout_ms: int = 60_000

    # === Cache ===
    cache_backend: Literal["json"] = "json"
    cache_root: Path = Path("~/.breedlens/breeds")
    cache_ttl_days: int = 7
    cache_metadata_filename: str = ".cache-metadata.json"
    image_max_dimension: int = 800
    image_jpeg_quality: int = 85

    # === Verification ===
    verification_enabled: bool = True
    verification_rejection_threshold: int = 70

    # === Serving ===
    public_image_path: str = "/api/breed-images"
    placeholder_dog_url: str = "/breeds/placeholder_dog.jpg"
    placeholder_cat_url: str = "/breeds/placeholder_cat.jpg"
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    # === Pre-warm ===
    prewarm_dogs: str = DEFAULT_PREWARM_DOGS
    prewarm_cats: str = DEFAULT_PREWARM_CATS

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cache_ttl_days")
    @classmethod
    def validate_ttl(cls, v: int) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError("cache_ttl_days must be > 0")
        return v

    @field_validator("verification_rejection_threshold")
    @classmethod
    def validate_threshold(cls, v: int) -> int:  # noqa: N805
        if not 0 <= v <= 100:
            raise ValueError("verification_rejection_threshold must be in [0, 100]")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        unknown_providers = [
            p for p in self.provider_order_list if p not in PROVIDER_DEFAULTS
        ]
        if unknown_providers:
            errors.append(
                f"LLM_PROVIDER_ORDER names unknown providers: {', '.join(unknown_providers)}"
            )

        unknown_sources = [s for s in self.source_order_list if s not in KNOWN_SOURCES]
        if unknown_sources:
            errors.append(
                f"IMAGE_SOURCE_ORDER names unknown sources: {', '.join(unknown_sources)}"
            )

        if not 1 <= self.image_jpeg_quality <= 95:
            errors.append("IMAGE_JPEG_QUALITY must be in [1, 95]")

        if self.image_max_dimension <= 0:
            errors.append("IMAGE_MAX_DIMENSION must be > 0")

        for raw in (self.llm_timeouts, self.llm_models):
            for item in _split_csv(raw):
                if ":" not in item:
                    errors.append(f"Expected 'provider:value', got {item!r}")

        for name, value in _parse_pairs(self.llm_timeouts).items():
            if not value.isdigit():
                errors.append(f"LLM_TIMEOUTS value for {name!r} must be milliseconds")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def provider_order_list(self) -> list[str]:
        """Parse comma-separated provider order (lower-cased, de-duplicated)."""
        seen: list[str] = []
        for name in _split_csv(self.llm_provider_order):
            name = name.lower()
            if name not in seen:
                seen.append(name)
        return seen

    @property
    def source_order_list(self) -> list[str]:
        """Parse comma-separated image source order."""
        seen: list[str] = []
        for name in _split_csv(self.image_source_order):
            name = name.lower()
            if name not in seen:
                seen.append(name)
        return seen

    @property
    def provider_timeouts(self) -> dict[str, int]:
        """Parse per-provider timeout overrides in milliseconds."""
        return {k: int(v) for k, v in _parse_pairs(self.llm_timeouts).items()}

    @property
    def provider_models(self) -> dict[str, str]:
        """Parse per-provider model overrides."""
        return _parse_pairs(self.llm_models)

    @property
    def prewarm_dogs_list(self) -> list[str]:
        return _split_csv(self.prewarm_dogs)

    @property
    def prewarm_cats_list(self) -> list[str]:
        return _split_csv(self.prewarm_cats)

    @property
    def cache_dir(self) -> Path:
        """Expanded cache root."""
        return Path(self.cache_root).expanduser()


def _split_csv(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def _parse_pairs(value: str) -> dict[str, str]:
    """Parse 'key:value,key:value'. Items without a colon are ignored."""
    pairs: dict[str, str] = {}
    for item in _split_csv(value):
        if ":" not in item:
            continue
        key, val = item.split(":", 1)
        pairs[key.strip().lower()] = val.strip()
    return pairs


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
