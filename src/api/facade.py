# src/api/facade.py — v2
"""Public API facade: the operations behind every HTTP route and CLI command.

Usage:
    from breedlens.api.facade import build_services, ask, resolve_image
    services = build_services(settings)
    answer = await ask(services, "How big do they get?", breed_name="Beagle", species="dog")
    image = await resolve_image(services, "beagle", "dog")
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from breedlens.api.asset_shim import DynamicAssetShim
from breedlens.api.models import (
    AskResponse,
    BreedImageResponse,
    CacheDirectoryHealth,
    HealthResponse,
    ProviderHealth,
)
from breedlens.cache.base_cache_store import BaseCacheStore
from breedlens.cache.cache_factory import create_cache_store
from breedlens.config.settings import Settings
from breedlens.core.errors import AllProvidersFailed, CancelledRequestError, NoProvidersConfigured
from breedlens.core.models import BreedQuery, Species
from breedlens.llm.models import CompletionRequest, ImageInput
from breedlens.llm.registry import ProviderRegistry
from breedlens.llm.router import CompletionRouter
from breedlens.logging.context import set_request_context
from breedlens.pipeline.image_pipeline import ImagePipeline
from breedlens.pipeline.verifier import ImageVerifier
from breedlens.sources.source_factory import create_waterfall
from breedlens.sources.waterfall import FetchWaterfall
from breedlens.version import __version__

logger = logging.getLogger(__name__)

DEGRADED_NO_PROVIDERS = (
    "No AI providers are configured right now, so I can't answer that. "
    "Please try again later."
)
DEGRADED_ALL_FAILED = (
    "Sorry, all AI providers are currently unavailable. Please try again in a moment."
)


@dataclass
class BreedLensServices:
    """Everything one process needs, built once at startup."""

    settings: Settings
    registry: ProviderRegistry
    router: CompletionRouter
    store: BaseCacheStore
    waterfall: FetchWaterfall
    verifier: ImageVerifier
    pipeline: ImagePipeline
    shim: DynamicAssetShim
    started_at: float = field(default_factory=time.monotonic)


def build_services(
    settings: Settings | None = None,
    router: CompletionRouter | None = None,
    store: BaseCacheStore | None = None,
    waterfall: FetchWaterfall | None = None,
) -> BreedLensServices:
    """Wire registry, router, cache, sources, verifier and pipeline.

    Any component may be injected (tests pass fakes); the rest come from
    settings.
    """
    settings = settings or Settings()
    registry = router.registry if router is not None else ProviderRegistry.from_settings(settings)
    router = router or CompletionRouter(registry, settings=settings)
    store = store or create_cache_store(settings)
    waterfall = waterfall or create_waterfall(settings)
    verifier = ImageVerifier(router, threshold=settings.verification_rejection_threshold)
    pipeline = ImagePipeline(waterfall, store, verifier, settings)
    shim = DynamicAssetShim(store.root)
    return BreedLensServices(
        settings=settings,
        registry=registry,
        router=router,
        store=store,
        waterfall=waterfall,
        verifier=verifier,
        pipeline=pipeline,
        shim=shim,
    )


async def ask(
    services: BreedLensServices,
    question: str,
    breed_name: str | None = None,
    species: Species | None = None,
    image_url: str | None = None,
    use_vision: bool = False,
    cancel_event: asyncio.Event | None = None,
) -> AskResponse:
    """Answer a breed question. Terminal router failures become a degraded answer."""
    if breed_name:
        corrected = services.waterfall.directory.correct_name(breed_name, species)
        if corrected and corrected != breed_name:
            logger.info("Breed name %r corrected to %r", breed_name, corrected)
            breed_name = corrected
    set_request_context(_request_id(), breed=breed_name, species=species)
    settings = services.settings

    image: ImageInput | None = None
    if use_vision and image_url:
        image = await _image_input(services, image_url)

    request = CompletionRequest(
        prompt=question,
        system_prompt=settings.llm_system_prompt,
        image=image,
        requires_vision=image is not None,
        breed_name=breed_name,
        species=species,
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
    )

    t0 = time.monotonic()
    try:
        result = await services.router.complete(request, cancel_event=cancel_event)
    except NoProvidersConfigured as e:
        return AskResponse(answer=DEGRADED_NO_PROVIDERS, degraded=True, error=str(e))
    except AllProvidersFailed as e:
        return AskResponse(
            answer=DEGRADED_ALL_FAILED,
            attempted_chain=[a.provider for a in e.attempts],
            degraded=True,
            error=str(e),
            elapsed_ms=int((time.monotonic() - t0) * 1000),
        )
    except CancelledRequestError as e:
        return AskResponse(answer="Request cancelled.", degraded=True, error=str(e))

    return AskResponse(
        answer=result.answer,
        provider_used=result.provider_used,
        attempted_chain=result.attempted_chain,
        elapsed_ms=result.elapsed_ms,
    )


async def resolve_image(
    services: BreedLensServices,
    breed_id: str,
    species: Species,
    name: str = "",
    cancel_event: asyncio.Event | None = None,
) -> BreedImageResponse:
    """Resolve a breed image URL. Always returns something displayable."""
    query = BreedQuery(breed_id=breed_id, species=species, name=name)
    set_request_context(_request_id(), breed=query.display_name, species=species)
    result = await services.pipeline.resolve(query, cancel_event=cancel_event)
    return BreedImageResponse(
        image_url=result.image_url,
        filename=result.filename,
        source=result.source_name,
        verified=result.verified,
        verification_score=result.verification_score,
        from_cache=result.from_cache,
        is_placeholder=result.is_placeholder,
    )


async def health(services: BreedLensServices) -> HealthResponse:
    """Provider configuration plus a cache directory write check."""
    registry = services.registry
    configured = registry.names(eligible_only=True)
    providers = ProviderHealth(
        configured=bool(configured),
        count=len(configured),
        providers=configured,
        vision_providers=[d.name for d in registry.eligible(requires_vision=True)],
        details=registry.stats(),
    )
    cache_dir = _check_cache_directory(services)
    status = "healthy" if cache_dir.writable else "unhealthy"
    if status == "healthy" and not providers.configured:
        status = "degraded"

    return HealthResponse(
        status=status,
        timestamp=datetime.now(timezone.utc),
        uptime_s=round(time.monotonic() - services.started_at, 3),
        version=__version__,
        llm_providers=providers,
        cache_directory=cache_dir,
        image_sources=[
            s.name for s in services.waterfall.sources if s.is_configured
        ],
    )


# --- Helpers ---


def _request_id() -> str:
    return uuid.uuid4().hex[:12]


async def _image_input(services: BreedLensServices, image_url: str) -> ImageInput:
    """Inline bytes for our own cached images, plain URL otherwise."""
    prefix = services.settings.public_image_path.rstrip("/") + "/"
    if image_url.startswith(prefix):
        filename = image_url[len(prefix):].split("?", 1)[0]
        data = await services.store.read_image(filename)
        if data is not None:
            return ImageInput(data=data, source_id=filename)
    return ImageInput(url=image_url)


def _check_cache_directory(services: BreedLensServices) -> CacheDirectoryHealth:
    root = services.store.root
    info: dict[str, Any] = {"path": str(root), "exists": root.is_dir(), "writable": False}
    if not info["exists"]:
        info["error"] = "cache directory does not exist"
        return CacheDirectoryHealth(**info)

    probe = root / f".health-{uuid.uuid4().hex}"
    try:
        probe.write_bytes(b"ok")
        probe.unlink()
        info["writable"] = True
    except OSError as e:
        info["error"] = str(e)
    info["files"] = sum(1 for _ in os.scandir(root))
    return CacheDirectoryHealth(**info)
