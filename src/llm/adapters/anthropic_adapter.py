# src/llm/adapters/anthropic_adapter.py — v3
"""Anthropic Claude adapter implementing BaseLLMClient.

Uses the official anthropic SDK. Supports vision (inline base64 or URL image
sources) and structured outputs via a forced tool call.
"""

from __future__ import annotations

import base64
import json
import logging
import time
from typing import Any

from pydantic import BaseModel

from breedlens.core.errors import MalformedResponseError
from breedlens.llm.base_client import BaseLLMClient
from breedlens.llm.models import ImageInput, LLMResponse, Message

logger = logging.getLogger(__name__)


class AnthropicAdapter(BaseLLMClient):
    """Adapter for Anthropic Claude models."""

    def __init__(
        self,
        model: str = "claude-3-5-haiku-latest",
        api_key: str | None = None,
        vision_model: str | None = None,
        timeout_s: float = 20.0,
        **kwargs: Any,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._vision_model = vision_model or model
        self._timeout_s = timeout_s
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init Anthropic client (only on first API call)."""
        if self.__client is None:
            try:
                import anthropic
            except ImportError as e:
                raise ImportError(
                    "anthropic package required: pip install anthropic"
                ) from e
            self.__client = anthropic.AsyncAnthropic(
                api_key=self._api_key or "",
                timeout=self._timeout_s,
                max_retries=0,
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
        """Text completion via Anthropic Messages API."""
        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [self._to_api_message(m) for m in messages],
        }
        if system:
            kwargs["system"] = system

        # Use tool_use with forced tool for guaranteed JSON schema compliance
        if response_format is not None:
            kwargs["tools"] = [
                {
                    "name": "structured_output",
                    "description": "Return structured data matching the schema",
                    "input_schema": response_format.model_json_schema(),
                }
            ]
            kwargs["tool_choice"] = {"type": "tool", "name": "structured_output"}

        start = time.monotonic()
        response = await self._client.messages.create(**kwargs)
        latency_ms = int((time.monotonic() - start) * 1000)

        return self._to_response(
            response, latency_ms, structured=response_format is not None
        )

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 256,
    ) -> LLMResponse:
        """Vision-enabled completion with images."""
        content_blocks: list[dict[str, Any]] = [self._image_block(img) for img in images]

        # Append text from the last user message
        user_text = ""
        non_user_messages: list[Message] = []
        for m in messages:
            if m.role == "user":
                user_text = m.content
            else:
                non_user_messages.append(m)

        content_blocks.append({"type": "text", "text": user_text})

        api_messages = [self._to_api_message(m) for m in non_user_messages]
        api_messages.append({"role": "user", "content": content_blocks})

        params: dict[str, Any] = {
            "model": self._vision_model,
            "max_tokens": max_tokens,
            "messages": api_messages,
        }
        if system:
            params["system"] = system

        start = time.monotonic()
        response = await self._client.messages.create(**params)
        latency_ms = int((time.monotonic() - start) * 1000)

        return self._to_response(response, latency_ms, structured=False)

    @property
    def supports_vision(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "anthropic"

    # --- Internal helpers ---

    @staticmethod
    def _image_block(img: ImageInput) -> dict[str, Any]:
        if img.data:
            return {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": img.media_type,
                    "data": base64.b64encode(img.data).decode("ascii"),
                },
            }
        return {"type": "image", "source": {"type": "url", "url": img.url}}

    @staticmethod
    def _to_api_message(m: Message) -> dict[str, Any]:
        return {"role": m.role, "content": m.content}

    def _to_response(self, response: Any, latency_ms: int, structured: bool) -> LLMResponse:
        content = self._extract_content(response, structured)
        if not content.strip():
            raise MalformedResponseError("anthropic: no text content in response")
        return LLMResponse(
            content=content,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=response.model,
            provider="anthropic",
            latency_ms=latency_ms,
            raw_response=response,
        )

    @staticmethod
    def _extract_content(response: Any, structured: bool) -> str:
        """Extract text from Anthropic response content blocks."""
        for block in response.content:
            if structured and getattr(block, "type", None) == "tool_use":
                return json.dumps(block.input)
            if getattr(block, "type", None) == "text":
                return block.text
        return ""
