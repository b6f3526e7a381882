# src/llm/adapters/huggingface_adapter.py — v1
"""Hugging Face Inference API adapter implementing BaseLLMClient.

Plain HTTP via httpx. Text only; the hosted chat models behind the free
inference endpoint do not accept images.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
from pydantic import BaseModel

from breedlens.core.errors import MalformedResponseError
from breedlens.llm.base_client import BaseLLMClient
from breedlens.llm.models import ImageInput, LLMResponse, Message


class HuggingFaceAdapter(BaseLLMClient):
    """Client for the Hugging Face serverless Inference API."""

    def __init__(
        self,
        model: str = "meta-llama/Llama-3.2-3B-Instruct",
        api_key: str = "",
        base_url: str = "https://api-inference.huggingface.co/models",
        timeout_s: float = 20.0,
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

        payload = {
            "inputs": {"messages": chat},
            "parameters": {"max_new_tokens": max_tokens, "temperature": temperature},
        }

        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=self._timeout_s, transport=self._transport) as client:
            response = await client.post(
                f"{self._base_url}/{self._model}",
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        latency = int((time.monotonic() - t0) * 1000)

        content = _extract_generated_text(data).strip()
        if not content:
            raise MalformedResponseError("huggingface: no generated_text in response")

        return LLMResponse(
            content=content,
            model=self._model,
            provider="huggingface",
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
        raise NotImplementedError("huggingface adapter is text-only")

    @property
    def supports_vision(self) -> bool:
        return False

    @property
    def provider_name(self) -> str:
        return "huggingface"


def _extract_generated_text(data: Any) -> str:
    """Handle the several response shapes the inference API returns."""
    if isinstance(data, list) and data:
        first = data[0]
        if isinstance(first, dict):
            return str(first.get("generated_text") or first.get("text") or "")
        return ""
    if isinstance(data, dict):
        if "error" in data:
            raise MalformedResponseError(f"huggingface: {data['error']}")
        return str(data.get("generated_text") or "")
    return ""
