# src/llm/adapters/ollama_adapter.py — v2
"""Ollama local LLM adapter implementing BaseLLMClient.

Uses the ollama Python SDK. Vision support is model-dependent and needs
inline image bytes.
"""

from __future__ import annotations

import base64
import time
from typing import Any

from pydantic import BaseModel

from breedlens.core.errors import MalformedResponseError
from breedlens.llm.base_client import BaseLLMClient
from breedlens.llm.models import ImageInput, LLMResponse, Message

# Models known to support vision
_VISION_MODELS = {"llava", "bakllava", "llava-llama3", "moondream", "llama3.2-vision"}


class OllamaAdapter(BaseLLMClient):
    """Ollama local inference adapter."""

    def __init__(
        self,
        model: str = "llama3",
        host: str = "http://localhost:11434",
        vision_model: str | None = None,
        timeout_s: float = 30.0,
        **kwargs: Any,
    ):
        self._model = model
        self._vision_model = vision_model
        self._host = host
        self._timeout_s = timeout_s

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 256,
        temperature: float = 0.7,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        import ollama

        client = ollama.AsyncClient(host=self._host, timeout=self._timeout_s)
        msgs: list[dict[str, str]] = []
        if system:
            msgs.append({"role": "system", "content": system})
        for m in messages:
            msgs.append({"role": m.role, "content": m.content})

        options: dict[str, Any] = {
            "num_predict": max_tokens,
            "temperature": temperature,
        }
        kwargs: dict[str, Any] = {"model": self._model, "messages": msgs, "options": options}
        if response_format is not None:
            kwargs["format"] = "json"

        t0 = time.monotonic()
        resp = await client.chat(**kwargs)
        latency = int((time.monotonic() - t0) * 1000)
        return self._to_response(resp, self._model, latency)

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 256,
    ) -> LLMResponse:
        import ollama

        if not self.supports_vision:
            raise NotImplementedError(f"ollama model {self._model!r} has no vision")
        if any(img.data is None for img in images):
            raise ValueError("ollama vision needs inline image bytes, not URLs")

        client = ollama.AsyncClient(host=self._host, timeout=self._timeout_s)
        msgs: list[dict[str, Any]] = []
        if system:
            msgs.append({"role": "system", "content": system})

        # Combine text + images into single user message
        text = " ".join(m.content for m in messages)
        img_data = [base64.b64encode(img.data).decode() for img in images]  # type: ignore[arg-type]
        msgs.append({"role": "user", "content": text, "images": img_data})

        model = self._vision_model or self._model
        t0 = time.monotonic()
        resp = await client.chat(
            model=model, messages=msgs,
            options={"num_predict": max_tokens},
        )
        latency = int((time.monotonic() - t0) * 1000)
        return self._to_response(resp, model, latency)

    @property
    def supports_vision(self) -> bool:
        model = (self._vision_model or self._model).lower()
        return any(v in model for v in _VISION_MODELS)

    @property
    def provider_name(self) -> str:
        return "ollama"

    @staticmethod
    def _to_response(resp: Any, model: str, latency: int) -> LLMResponse:
        try:
            content = resp["message"]["content"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(f"ollama: unexpected response shape: {e}") from e
        if not content or not content.strip():
            raise MalformedResponseError("ollama: empty completion")
        return LLMResponse(
            content=content,
            input_tokens=resp.get("prompt_eval_count", 0) or 0,
            output_tokens=resp.get("eval_count", 0) or 0,
            model=model,
            provider="ollama",
            latency_ms=latency,
            raw_response=resp,
        )
