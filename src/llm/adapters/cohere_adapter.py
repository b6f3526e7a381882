# src/llm/adapters/cohere_adapter.py — v1
"""Cohere v2 chat adapter implementing BaseLLMClient (httpx, text only)."""

from __future__ import annotations

import time
from typing import Any

import httpx
from pydantic import BaseModel

from breedlens.core.errors import MalformedResponseError
from breedlens.llm.base_client import BaseLLMClient
from breedlens.llm.models import ImageInput, LLMResponse, Message


class CohereAdapter(BaseLLMClient):
    """Cohere Command models."""

    def __init__(
        self,
        model: str = "command-r-plus",
        api_key: str = "",
        base_url: str = "https://api.cohere.com/v2",
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._transport = transport

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 256,
        temperature: float = 0.7,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        chat: list[dict[str, str]] = []
        if system:
            chat.append({"role": "system", "content": system})
        chat.extend({"role": m.role, "content": m.content} for m in messages)

        payload: dict[str, Any] = {
            "model": self._model,
            "messages": chat,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if response_format is not None:
            payload["response_format"] = {"type": "json_object"}

        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=self._timeout_s, transport=self._transport) as client:
            response = await client.post(
                f"{self._base_url}/chat",
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        latency = int((time.monotonic() - t0) * 1000)

        content = _extract_text(data)
        if not content.strip():
            raise MalformedResponseError("cohere: no text in response")

        usage = (data.get("usage") or {}).get("tokens") or {}
        return LLMResponse(
            content=content,
            input_tokens=int(usage.get("input_tokens", 0) or 0),
            output_tokens=int(usage.get("output_tokens", 0) or 0),
            model=self._model,
            provider="cohere",
            latency_ms=latency,
            raw_response=data,
        )

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 256,
    ) -> LLMResponse:
        raise NotImplementedError("cohere adapter is text-only")

    @property
    def supports_vision(self) -> bool:
        return False

    @property
    def provider_name(self) -> str:
        return "cohere"


def _extract_text(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    message = data.get("message") or {}
    for part in message.get("content") or []:
        if isinstance(part, dict) and part.get("type", "text") == "text" and part.get("text"):
            return str(part["text"])
    # v1-style payloads
    return str(data.get("text") or "")
