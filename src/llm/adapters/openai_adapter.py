# src/llm/adapters/openai_adapter.py — v2
"""OpenAI-compatible chat adapter implementing BaseLLMClient.

Uses the official openai SDK pointed at any chat-completions endpoint
(OpenAI, Groq, Together AI, OpenRouter). Vision is available when a vision
model is configured for the backend.
"""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel

from breedlens.core.errors import MalformedResponseError
from breedlens.llm.base_client import BaseLLMClient
from breedlens.llm.models import ImageInput, LLMResponse, Message


class OpenAIAdapter(BaseLLMClient):
    """Adapter for OpenAI and OpenAI-compatible chat APIs."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: str = "",
        base_url: str | None = None,
        vision_model: str | None = None,
        provider: str = "openai",
        timeout_s: float = 20.0,
        default_headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        self._model = model
        self._vision_model = vision_model
        self._api_key = api_key
        self._base_url = base_url
        self._provider = provider
        self._timeout_s = timeout_s
        self._default_headers = default_headers or {}
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init AsyncOpenAI client (only on first API call)."""
        if self.__client is None:
            import openai

            # Fallback across backends is the router's job, not the SDK's.
            self.__client = openai.AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout_s,
                max_retries=0,
                default_headers=self._default_headers or None,
            )
        return self.__client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 256,
        temperature: float = 0.7,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        oai_messages: list[dict[str, Any]] = []
        if system:
            oai_messages.append({"role": "system", "content": system})
        for m in messages:
            oai_messages.append({"role": m.role, "content": m.content})

        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": oai_messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if response_format is not None:
            schema = response_format.model_json_schema()
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": response_format.__name__, "schema": schema},
            }

        t0 = time.monotonic()
        resp = await self._client.chat.completions.create(**kwargs)
        latency = int((time.monotonic() - t0) * 1000)
        return self._to_response(resp, self._model, latency)

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 256,
    ) -> LLMResponse:
        if not self._vision_model:
            raise NotImplementedError(f"{self._provider} has no vision model configured")

        oai_messages: list[dict[str, Any]] = []
        if system:
            oai_messages.append({"role": "system", "content": system})

        # Build multimodal content
        content_parts: list[dict[str, Any]] = []
        for m in messages:
            content_parts.append({"type": "text", "text": m.content})
        for img in images:
            content_parts.append({
                "type": "image_url",
                "image_url": {"url": img.as_data_url()},
            })
        oai_messages.append({"role": "user", "content": content_parts})

        t0 = time.monotonic()
        resp = await self._client.chat.completions.create(
            model=self._vision_model, messages=oai_messages, max_tokens=max_tokens,
        )
        latency = int((time.monotonic() - t0) * 1000)
        return self._to_response(resp, self._vision_model, latency)

    @property
    def supports_vision(self) -> bool:
        return bool(self._vision_model)

    @property
    def provider_name(self) -> str:
        return self._provider

    def _to_response(self, resp: Any, model: str, latency: int) -> LLMResponse:
        if not getattr(resp, "choices", None):
            raise MalformedResponseError(f"{self._provider}: response has no choices")
        content = resp.choices[0].message.content or ""
        if not content.strip():
            raise MalformedResponseError(f"{self._provider}: empty completion")
        usage = resp.usage
        return LLMResponse(
            content=content,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=model,
            provider=self._provider,
            latency_ms=latency,
            raw_response=resp,
        )
