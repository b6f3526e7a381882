# tests/unit/llm/test_router.py — v1
"""Tests for llm/router.py - ordered fallback across completion backends."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from breedlens.core.errors import (
    AllProvidersFailed,
    CancelledRequestError,
    MalformedResponseError,
    NoProvidersConfigured,
)
from breedlens.llm.models import CompletionRequest, ImageInput
from breedlens.llm.router import CompletionRouter, classify_error


def _request(**kwargs) -> CompletionRequest:
    return CompletionRequest(prompt="How much exercise does it need?", **kwargs)


def _status_error(code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.invalid/chat")
    return httpx.HTTPStatusError(
        f"HTTP {code}", request=request, response=httpx.Response(code, request=request)
    )


class TestClassifyError:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (asyncio.TimeoutError(), "timeout"),
            (MalformedResponseError("empty"), "parse_error"),
            (_status_error(429), "rate_limit"),
            (_status_error(503), "server_error"),
            (_status_error(401), "client_error"),
            (RuntimeError("Request timed out"), "timeout"),
            (RuntimeError("Rate limit reached"), "rate_limit"),
            (ValueError("JSON decode error"), "parse_error"),
            (RuntimeError("something odd"), "unknown"),
        ],
    )
    def test_classification(self, error, expected):
        assert classify_error(error) == expected


class TestCompletionRouter:
    @pytest.mark.asyncio
    async def test_first_provider_answers(self, make_registry, fake_client):
        a, b = fake_client("a", ["from a"]), fake_client("b")
        router = CompletionRouter(
            make_registry(("a", True, False), ("b", True, False)), clients={"a": a, "b": b}
        )
        result = await router.complete(_request())
        assert result.answer == "from a"
        assert result.provider_used == "a"
        assert result.attempted_chain == ["a"]
        assert b.calls == []

    @pytest.mark.asyncio
    async def test_falls_back_in_priority_order(self, make_registry, fake_client):
        a = fake_client("a", [RuntimeError("503 Service Unavailable")])
        b = fake_client("b", ["from b"])
        c = fake_client("c")
        router = CompletionRouter(
            make_registry(("a", True, False), ("b", True, False), ("c", True, False)),
            clients={"a": a, "b": b, "c": c},
        )
        result = await router.complete(_request())
        assert result.provider_used == "b"
        assert result.attempted_chain == ["a", "b"]
        assert result.attempts[0].error_type == "server_error"
        assert result.attempts[1].success is True
        assert c.calls == []

    @pytest.mark.asyncio
    async def test_skips_unconfigured(self, make_registry, fake_client):
        a, b = fake_client("a"), fake_client("b", ["from b"])
        router = CompletionRouter(
            make_registry(("a", False, False), ("b", True, False)), clients={"a": a, "b": b}
        )
        result = await router.complete(_request())
        assert result.attempted_chain == ["b"]
        assert a.calls == []

    @pytest.mark.asyncio
    async def test_no_providers_makes_no_calls(self, make_registry, fake_client):
        a = fake_client("a")
        router = CompletionRouter(make_registry(("a", False, False)), clients={"a": a})
        with pytest.raises(NoProvidersConfigured):
            await router.complete(_request())
        assert a.calls == []

    @pytest.mark.asyncio
    async def test_all_fail(self, make_registry, fake_client):
        router = CompletionRouter(
            make_registry(("a", True, False), ("b", True, False)),
            clients={
                "a": fake_client("a", [RuntimeError("boom")]),
                "b": fake_client("b", [_status_error(429)]),
            },
        )
        with pytest.raises(AllProvidersFailed) as exc_info:
            await router.complete(_request())
        assert [a.provider for a in exc_info.value.attempts] == ["a", "b"]
        assert exc_info.value.attempts[1].error_type == "rate_limit"

    @pytest.mark.asyncio
    async def test_empty_answer_falls_through(self, make_registry, fake_client):
        router = CompletionRouter(
            make_registry(("a", True, False), ("b", True, False)),
            clients={"a": fake_client("a", ["   "]), "b": fake_client("b", ["ok"])},
        )
        result = await router.complete(_request())
        assert result.provider_used == "b"
        assert result.attempts[0].error_type == "parse_error"

    @pytest.mark.asyncio
    async def test_timeout_falls_through(self, make_registry, fake_client):
        router = CompletionRouter(
            make_registry(("slow", True, False), ("fast", True, False), timeout_ms=50),
            clients={
                "slow": fake_client("slow", delay_s=1.0),
                "fast": fake_client("fast", ["quick"]),
            },
        )
        result = await router.complete(_request())
        assert result.provider_used == "fast"
        assert result.attempts[0].error_type == "timeout"

    @pytest.mark.asyncio
    async def test_vision_uses_only_vision_providers(self, make_registry, fake_client, jpeg_bytes):
        text_only = fake_client("text")
        seeing = fake_client("seeing", ["a beagle"], vision=True)
        router = CompletionRouter(
            make_registry(("text", True, False), ("seeing", True, True)),
            clients={"text": text_only, "seeing": seeing},
        )
        result = await router.complete(
            _request(image=ImageInput(data=jpeg_bytes), requires_vision=True)
        )
        assert result.provider_used == "seeing"
        assert seeing.calls[0]["vision"] is True
        assert seeing.calls[0]["images"][0].data == jpeg_bytes
        assert text_only.calls == []

    @pytest.mark.asyncio
    async def test_image_without_vision_flag_goes_as_text(self, make_registry, fake_client, jpeg_bytes):
        text_only = fake_client("text")
        router = CompletionRouter(make_registry(("text", True, False)), clients={"text": text_only})
        await router.complete(_request(image=ImageInput(data=jpeg_bytes)))
        assert text_only.calls[0]["vision"] is False
        assert "images" not in text_only.calls[0]

    @pytest.mark.asyncio
    async def test_vision_without_vision_providers(self, make_registry, fake_client, jpeg_bytes):
        router = CompletionRouter(
            make_registry(("text", True, False)), clients={"text": fake_client("text")}
        )
        with pytest.raises(NoProvidersConfigured) as exc_info:
            await router.complete(_request(image=ImageInput(data=jpeg_bytes), requires_vision=True))
        assert exc_info.value.requires_vision is True

    @pytest.mark.asyncio
    async def test_cancel_between_attempts(self, make_registry, fake_client):
        cancel = asyncio.Event()

        class CancellingFailure(RuntimeError):
            pass

        a = fake_client("a", [CancellingFailure("down")])
        b = fake_client("b")
        original = a._next

        async def fail_and_cancel(**call):
            cancel.set()
            return await original(**call)

        a._next = fail_and_cancel
        router = CompletionRouter(
            make_registry(("a", True, False), ("b", True, False)), clients={"a": a, "b": b}
        )
        with pytest.raises(CancelledRequestError):
            await router.complete(_request(), cancel_event=cancel)
        assert b.calls == []

    @pytest.mark.asyncio
    async def test_breed_context_and_system_prompt(self, make_registry, fake_client, settings):
        a = fake_client("a")
        router = CompletionRouter(make_registry(("a", True, False)), clients={"a": a}, settings=settings)
        await router.complete(_request(breed_name="Beagle", species="dog"))
        call = a.calls[0]
        assert call["messages"][0].content.startswith("Question about Beagle (dog):")
        assert call["system"] == settings.llm_system_prompt

    @pytest.mark.asyncio
    async def test_task_cancellation_propagates(self, make_registry, fake_client):
        router = CompletionRouter(
            make_registry(("a", True, False), timeout_ms=10_000),
            clients={"a": fake_client("a", delay_s=5.0)},
        )
        task = asyncio.create_task(router.complete(_request()))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    def test_monitoring_helpers(self, make_registry):
        router = CompletionRouter(make_registry(("a", True, False), ("b", True, True)))
        assert router.configured_providers() == ["a", "b"]
        assert router.configured_providers(requires_vision=True) == ["b"]
        assert router.has_providers(requires_vision=True) is True
        assert [row["name"] for row in router.provider_stats()] == ["a", "b"]
