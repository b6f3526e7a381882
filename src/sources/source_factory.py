# src/sources/source_factory.py — v1
"""Factory: build the configured image sources and the fetch waterfall."""

from __future__ import annotations

import importlib
import logging
from typing import Any

from breedlens.config.providers import GENERATIVE_SOURCES
from breedlens.config.settings import Settings
from breedlens.sources.base_source import BaseImageSource
from breedlens.sources.directory import SourceDirectory
from breedlens.sources.waterfall import FetchWaterfall

logger = logging.getLogger(__name__)

# Registry of source name → source class path (lazy import).
_SOURCE_REGISTRY: dict[str, str] = {
    "dog_ceo": "breedlens.sources.dog_ceo.DogCeoSource",
    "thecatapi": "breedlens.sources.cat_api.TheCatApiSource",
    "unsplash": "breedlens.sources.stock_photo.UnsplashSource",
    "pexels": "breedlens.sources.stock_photo.PexelsSource",
    "pollinations": "breedlens.sources.generative.PollinationsSource",
    "openai_images": "breedlens.sources.generative.OpenAIImageSource",
}


def _source_kwargs(name: str, settings: Settings) -> dict[str, Any]:
    """Credentials and timeouts for one source."""
    if name in GENERATIVE_SOURCES:
        kwargs: dict[str, Any] = {"timeout_s": settings.generation_timeout_ms / 1000.0}
    else:
        kwargs = {"timeout_s": settings.source_timeout_ms / 1000.0}

    if name == "thecatapi":
        kwargs["api_key"] = settings.thecatapi_api_key
    elif name == "unsplash":
        kwargs["access_key"] = settings.unsplash_access_key
    elif name == "pexels":
        kwargs["api_key"] = settings.pexels_api_key
    elif name == "pollinations":
        kwargs["size"] = settings.image_max_dimension
    elif name == "openai_images":
        kwargs["api_key"] = settings.openai_api_key
        kwargs["model"] = settings.openai_image_model
    return kwargs


def create_sources(settings: Settings) -> list[BaseImageSource]:
    """Instantiate sources in IMAGE_SOURCE_ORDER order.

    Generative sources are left out when IMAGE_GENERATION_ENABLED is false.
    """
    sources: list[BaseImageSource] = []
    for name in settings.source_order_list:
        if name in GENERATIVE_SOURCES and not settings.image_generation_enabled:
            logger.debug("Image generation disabled, skipping %s", name)
            continue
        cls = _import_class(_SOURCE_REGISTRY[name])
        sources.append(cls(**_source_kwargs(name, settings)))
    return sources


def create_waterfall(
    settings: Settings, directory: SourceDirectory | None = None
) -> FetchWaterfall:
    sources = create_sources(settings)
    waterfall = FetchWaterfall(sources, directory=directory)
    logger.info(
        "Image waterfall: %s",
        " -> ".join(f"{s.name}{'' if s.is_configured else ' (unconfigured)'}" for s in waterfall.sources),
    )
    return waterfall


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
