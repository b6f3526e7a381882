# src/api/models.py — v2
"""API-level request and response models for the HTTP surface and CLI."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from breedlens.core.models import Species


class _CamelModel(BaseModel):
    """Accepts and emits camelCase keys (breedName, petType, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AskRequest(_CamelModel):
    question: str = Field(min_length=1)
    breed_id: str | None = None
    breed_name: str | None = None
    species: Species | None = Field(default=None, alias="petType")
    image_url: str | None = None
    use_vision: bool = False


class AskResponse(_CamelModel):
    answer: str
    provider_used: str | None = None
    attempted_chain: list[str] = Field(default_factory=list)
    degraded: bool = False
    error: str | None = None
    elapsed_ms: int = 0


class BreedImageResponse(_CamelModel):
    image_url: str
    filename: str | None = None
    source: str | None = None
    verified: bool | None = None
    verification_score: int | None = None
    from_cache: bool = False
    is_placeholder: bool = False


class VerifyCacheRequest(_CamelModel):
    force_recheck: bool = False


class ProviderHealth(_CamelModel):
    configured: bool
    count: int
    providers: list[str]
    vision_providers: list[str] = Field(default_factory=list)
    details: list[dict[str, Any]] = Field(default_factory=list)


class CacheDirectoryHealth(_CamelModel):
    path: str
    exists: bool
    writable: bool
    files: int = 0
    error: str | None = None


class HealthResponse(_CamelModel):
    status: str
    timestamp: datetime
    uptime_s: float
    version: str
    llm_providers: ProviderHealth
    cache_directory: CacheDirectoryHealth
    image_sources: list[str] = Field(default_factory=list)
