# src/llm/base_client.py — v2
"""Abstract LLM client interface.

Every completion backend implements this capability interface; the router
iterates implementations and never branches on a concrete backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from breedlens.llm.models import ImageInput, LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 256,
        temperature: float = 0.7,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        """Text completion."""

    @abstractmethod
    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 256,
    ) -> LLMResponse:
        """Vision-enabled completion (images + text)."""

    @property
    def supports_text(self) -> bool:
        """Whether this provider answers plain text prompts."""
        return True

    @property
    @abstractmethod
    def supports_vision(self) -> bool:
        """Whether this provider/model supports image inputs."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (groq, together, anthropic, ...)."""
