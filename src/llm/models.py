# src/llm/models.py — v2
"""LLM-specific types: Message, ImageInput, LLMResponse, request and result."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from breedlens.core.models import Species


class Message(BaseModel):
    """Single message in a conversation."""

    role: Literal["user", "assistant", "system"]
    content: str


class ImageInput(BaseModel):
    """Image reference for vision-enabled completions: inline bytes or a URL."""

    data: bytes | None = None
    url: str | None = None
    media_type: str = "image/jpeg"
    source_id: str | None = None

    @model_validator(mode="after")
    def require_reference(self) -> ImageInput:
        if not self.data and not self.url:
            raise ValueError("ImageInput needs data or url")
        return self

    def as_data_url(self) -> str:
        """Return a URL usable by OpenAI-style image_url content parts."""
        if self.data:
            import base64

            b64 = base64.b64encode(self.data).decode("ascii")
            return f"data:{self.media_type};base64,{b64}"
        return self.url or ""


class LLMResponse(BaseModel):
    """Normalized response from any LLM provider."""

    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str
    provider: str
    latency_ms: int
    raw_response: Any = None


class CompletionRequest(BaseModel):
    """One logical completion call routed across backends."""

    prompt: str
    system_prompt: str | None = None
    image: ImageInput | None = None
    requires_vision: bool = False
    breed_name: str | None = None
    species: Species | None = None
    max_tokens: int = 256
    temperature: float = 0.7

    @model_validator(mode="after")
    def vision_needs_image(self) -> CompletionRequest:
        if self.requires_vision and self.image is None:
            raise ValueError("requires_vision=True needs an image")
        return self

    def user_text(self) -> str:
        """User prompt with breed context folded in."""
        if self.breed_name:
            species = f" ({self.species})" if self.species else ""
            return f"Question about {self.breed_name}{species}: {self.prompt}"
        return self.prompt


class ProviderAttempt(BaseModel):
    """Outcome of one backend attempt within a routed call."""

    provider: str
    success: bool
    error_type: str | None = None
    error: str | None = None
    latency_ms: int | None = None


class CompletionResult(BaseModel):
    """Successful routed completion."""

    answer: str
    provider_used: str
    model: str = ""
    attempted_chain: list[str] = Field(default_factory=list)
    attempts: list[ProviderAttempt] = Field(default_factory=list)
    elapsed_ms: int = 0
