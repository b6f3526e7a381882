# src/llm/router.py — v1
"""Completion router: try configured backends in priority order.

Each eligible backend is attempted at most once, strictly sequentially,
under its own timeout. The first non-empty answer wins; every failure is
logged, classified and folded into the next backend.
"""

from __future__ import annotations

import asyncio
import logging
import time

from breedlens.config.settings import Settings
from breedlens.core.errors import (
    AllProvidersFailed,
    CancelledRequestError,
    MalformedResponseError,
    NoProvidersConfigured,
)
from breedlens.llm.base_client import BaseLLMClient
from breedlens.llm.client_factory import create_llm_client
from breedlens.llm.models import (
    CompletionRequest,
    CompletionResult,
    LLMResponse,
    Message,
    ProviderAttempt,
)
from breedlens.llm.registry import ProviderDescriptor, ProviderRegistry
from breedlens.logging.context import set_stage_context

logger = logging.getLogger(__name__)


def classify_error(error: BaseException) -> str:
    """Classify a backend failure for logging and attempt records."""
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return "timeout"
    if isinstance(error, MalformedResponseError):
        return "parse_error"

    status = getattr(error, "status_code", None)
    response = getattr(error, "response", None)
    if status is None and response is not None:
        status = getattr(response, "status_code", None)
    if isinstance(status, int):
        if status == 429:
            return "rate_limit"
        if status >= 500:
            return "server_error"
        if status >= 400:
            return "client_error"

    msg = str(error).lower()
    name = type(error).__name__.lower()
    if "timeout" in name or "timed out" in msg:
        return "timeout"
    if "429" in msg or "rate limit" in msg:
        return "rate_limit"
    if any(c in msg for c in ("500", "502", "503", "504")):
        return "server_error"
    if "json" in msg or "decode" in msg:
        return "parse_error"
    return "unknown"


class CompletionRouter:
    """Route one completion request across the provider registry."""

    def __init__(
        self,
        registry: ProviderRegistry,
        clients: dict[str, BaseLLMClient] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings
        # Clients are built on first use and reused afterwards.
        self._clients: dict[str, BaseLLMClient] = dict(clients or {})

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    async def complete(
        self,
        request: CompletionRequest,
        cancel_event: asyncio.Event | None = None,
    ) -> CompletionResult:
        """Return the first successful answer.

        Raises:
            NoProvidersConfigured: No eligible backend; nothing was called.
            AllProvidersFailed: Every eligible backend failed.
            CancelledRequestError: cancel_event was set between attempts.
        """
        eligible = self._registry.eligible(request.requires_vision)
        if not eligible:
            logger.error(
                "No %sLLM providers configured",
                "vision-capable " if request.requires_vision else "",
            )
            raise NoProvidersConfigured(requires_vision=request.requires_vision)

        t0 = time.monotonic()
        attempts: list[ProviderAttempt] = []

        for descriptor in eligible:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(
                    "Request cancelled after %d attempt(s)", len(attempts)
                )
                raise CancelledRequestError(
                    f"cancelled before trying {descriptor.name}"
                )

            set_stage_context("completion", provider=descriptor.name)
            started = time.monotonic()
            try:
                response = await asyncio.wait_for(
                    self._dispatch(descriptor, request),
                    timeout=descriptor.timeout_s,
                )
                answer = response.content.strip()
                if not answer:
                    raise MalformedResponseError(f"{descriptor.name}: empty answer")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                latency = int((time.monotonic() - started) * 1000)
                error_type = classify_error(e)
                reason = str(e) or type(e).__name__
                attempts.append(
                    ProviderAttempt(
                        provider=descriptor.name,
                        success=False,
                        error_type=error_type,
                        error=reason,
                        latency_ms=latency,
                    )
                )
                logger.warning(
                    "%s failed (%s): %s", descriptor.name, error_type, reason
                )
                continue
            finally:
                set_stage_context(None)

            latency = int((time.monotonic() - started) * 1000)
            attempts.append(
                ProviderAttempt(provider=descriptor.name, success=True, latency_ms=latency)
            )
            logger.info("%s succeeded in %dms", descriptor.name, latency)
            return CompletionResult(
                answer=answer,
                provider_used=descriptor.name,
                model=response.model,
                attempted_chain=[a.provider for a in attempts],
                attempts=attempts,
                elapsed_ms=int((time.monotonic() - t0) * 1000),
            )

        logger.error("All %d LLM providers failed", len(attempts))
        raise AllProvidersFailed(attempts)

    async def _dispatch(
        self, descriptor: ProviderDescriptor, request: CompletionRequest
    ) -> LLMResponse:
        client = self._client_for(descriptor)
        messages = [Message(role="user", content=request.user_text())]
        system = request.system_prompt
        if system is None and self._settings is not None:
            system = self._settings.llm_system_prompt

        image = request.image if request.requires_vision else None
        if image is not None:
            return await client.complete_with_vision(
                messages,
                [image],
                system=system,
                max_tokens=request.max_tokens,
            )
        return await client.complete(
            messages,
            system=system,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )

    def _client_for(self, descriptor: ProviderDescriptor) -> BaseLLMClient:
        client = self._clients.get(descriptor.name)
        if client is None:
            client = create_llm_client(descriptor, self._settings)
            self._clients[descriptor.name] = client
        return client

    # --- Monitoring helpers ---

    def configured_providers(self, requires_vision: bool = False) -> list[str]:
        """Names of eligible providers in priority order."""
        return [d.name for d in self._registry.eligible(requires_vision)]

    def has_providers(self, requires_vision: bool = False) -> bool:
        return bool(self._registry.eligible(requires_vision))

    def provider_stats(self) -> list[dict[str, object]]:
        return self._registry.stats()
