# src/sources/waterfall.py — v1
"""Fetch waterfall: try image sources in tier order until one yields bytes.

Tiers are fixed (catalog, then stock, then generative); the configured
source order only decides the order inside a tier. A failing source is
logged and the next one is tried.
"""

from __future__ import annotations

import asyncio
import logging

from breedlens.core.errors import SourceFetchFailed
from breedlens.core.models import BreedQuery
from breedlens.logging.context import set_stage_context
from breedlens.sources.base_source import BaseImageSource
from breedlens.sources.directory import SourceDirectory
from breedlens.sources.models import SourceCandidate

logger = logging.getLogger(__name__)

_TIER_RANK = {"catalog": 0, "stock": 1, "generative": 2}


class FetchWaterfall:
    """Ordered, read-only chain of image sources."""

    def __init__(
        self,
        sources: list[BaseImageSource],
        directory: SourceDirectory | None = None,
    ) -> None:
        # sorted() is stable: configured order survives inside each tier.
        self._sources: tuple[BaseImageSource, ...] = tuple(
            sorted(sources, key=lambda s: _TIER_RANK[s.kind])
        )
        self._directory = directory or SourceDirectory.default()

    @property
    def sources(self) -> tuple[BaseImageSource, ...]:
        return self._sources

    @property
    def directory(self) -> SourceDirectory:
        return self._directory

    def __len__(self) -> int:
        return len(self._sources)

    async def fetch(
        self,
        query: BreedQuery,
        start_index: int = 0,
        cancel_event: asyncio.Event | None = None,
    ) -> tuple[SourceCandidate, int] | None:
        """First successful candidate at or after start_index.

        Returns:
            (candidate, index of the source that produced it), or None once
            every remaining source has been tried or the request was cancelled.
        """
        for index in range(max(start_index, 0), len(self._sources)):
            source = self._sources[index]
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Image fetch cancelled before %s", source.name)
                return None
            if not source.supports(query.species):
                continue
            if not source.is_configured:
                logger.debug("Skipping %s: not configured", source.name)
                continue

            set_stage_context("fetching", provider=source.name)
            try:
                candidate = await source.fetch(query, self._directory)
            except SourceFetchFailed as e:
                logger.warning("Source %s failed for %s: %s", source.name, query.display_name, e.reason)
                continue
            finally:
                set_stage_context(None)

            logger.info(
                "Fetched %s (%s) from %s (%d bytes)",
                query.display_name, query.species, source.name, len(candidate.data),
            )
            return candidate, index

        logger.warning("No source produced an image for %s (%s)", query.display_name, query.species)
        return None
