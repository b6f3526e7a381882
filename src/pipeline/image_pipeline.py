# src/pipeline/image_pipeline.py — v2
"""Image resolution pipeline: cache check, fetch, persist, verify.

Walks an explicit state machine per request:

    CACHE_CHECK -> FETCHING -> PERSISTING -> VERIFYING -> ACCEPTED -> DONE
                      |                          |
                      v                          v
                  PLACEHOLDER         REJECTED_RETRY_ONCE -> FETCHING
                                                         -> PLACEHOLDER

resolve() always returns a displayable ImageResolution. Source, decode,
cache-write and verification failures are folded into the next state;
only task cancellation propagates.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from breedlens.cache.base_cache_store import BaseCacheStore
from breedlens.cache.models import CacheEntry, utcnow
from breedlens.cache.naming import cache_filename
from breedlens.config.settings import Settings
from breedlens.core.errors import (
    CacheWriteFailed,
    ImageProcessingError,
    VerificationUnavailable,
)
from breedlens.core.models import BreedQuery, ImageResolution, Species, VerificationOutcome
from breedlens.logging.context import set_stage_context
from breedlens.pipeline.image_processing import normalize_image
from breedlens.pipeline.verifier import ImageVerifier
from breedlens.sources.models import SourceCandidate
from breedlens.sources.waterfall import FetchWaterfall

logger = logging.getLogger(__name__)

MAX_REJECTIONS = 2


class ResolveState(str, Enum):
    CACHE_CHECK = "cache_check"
    FETCHING = "fetching"
    PERSISTING = "persisting"
    VERIFYING = "verifying"
    ACCEPTED = "accepted"
    REJECTED_RETRY_ONCE = "rejected_retry_once"
    PLACEHOLDER = "placeholder"
    DONE = "done"


@dataclass
class ResolveRun:
    """Mutable state of one resolve() call."""

    query: BreedQuery
    filename: str
    cancel_event: asyncio.Event | None = None
    next_index: int = 0
    candidate: SourceCandidate | None = None
    jpeg: bytes | None = None
    entry: CacheEntry | None = None
    rejections: int = 0
    result: ImageResolution | None = None
    trace: list[ResolveState] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def fetched(self) -> tuple[SourceCandidate, bytes]:
        """Candidate and normalized JPEG; set once FETCHING has succeeded."""
        if self.candidate is None or self.jpeg is None:
            raise ImageProcessingError(f"no fetched image for {self.filename}")
        return self.candidate, self.jpeg


class ImagePipeline:
    """Resolve a breed to a cached, optionally verified image."""

    def __init__(
        self,
        waterfall: FetchWaterfall,
        store: BaseCacheStore,
        verifier: ImageVerifier | None,
        settings: Settings,
    ) -> None:
        self._waterfall = waterfall
        self._store = store
        self._verifier = verifier
        self._settings = settings
        self._inflight: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}
        self._handlers = {
            ResolveState.CACHE_CHECK: self._cache_check,
            ResolveState.FETCHING: self._fetching,
            ResolveState.PERSISTING: self._persisting,
            ResolveState.VERIFYING: self._verifying,
            ResolveState.ACCEPTED: self._accepted,
            ResolveState.REJECTED_RETRY_ONCE: self._rejected,
            ResolveState.PLACEHOLDER: self._placeholder,
        }
        self.last_trace: list[ResolveState] = []

    @property
    def store(self) -> BaseCacheStore:
        return self._store

    @property
    def waterfall(self) -> FetchWaterfall:
        return self._waterfall

    def public_url(self, filename: str) -> str:
        return f"{self._settings.public_image_path.rstrip('/')}/{filename}"

    def placeholder_url(self, species: Species) -> str:
        if species == "dog":
            return self._settings.placeholder_dog_url
        return self._settings.placeholder_cat_url

    async def resolve(
        self, query: BreedQuery, cancel_event: asyncio.Event | None = None
    ) -> ImageResolution:
        """Resolve one breed image. Never raises except on task cancellation."""
        t0 = time.monotonic()
        run = ResolveRun(
            query=query,
            filename=cache_filename(query.breed_id or query.name, query.species),
            cancel_event=cancel_event,
        )

        # Concurrent requests for one breed share a single fetch.
        lock = self._inflight.setdefault(run.filename, asyncio.Lock())
        self._waiters[run.filename] = self._waiters.get(run.filename, 0) + 1
        try:
            async with lock:
                await self._run(run)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Image pipeline failed for %s, using placeholder", query.display_name)
            run.result = self._placeholder_result(query)
        finally:
            set_stage_context(None)
            self._waiters[run.filename] -= 1
            if not self._waiters[run.filename]:
                del self._waiters[run.filename]
                self._inflight.pop(run.filename, None)

        self.last_trace = run.trace
        result = run.result or self._placeholder_result(query)
        logger.info(
            "Resolved %s (%s) -> %s in %dms [%s]",
            query.display_name, query.species, result.image_url,
            int((time.monotonic() - t0) * 1000),
            " > ".join(s.value for s in run.trace),
        )
        return result

    async def _run(self, run: ResolveRun) -> None:
        state = ResolveState.CACHE_CHECK
        while state is not ResolveState.DONE:
            run.trace.append(state)
            set_stage_context(state.value)
            state = await self._handlers[state](run)

    # --- States ---

    async def _cache_check(self, run: ResolveRun) -> ResolveState:
        entry = await self._store.get(run.filename)
        if entry is None:
            return ResolveState.FETCHING
        if entry.is_expired():
            logger.debug("Cache entry %s expired at %s", run.filename, entry.expires_at)
            return ResolveState.FETCHING
        if entry.verified is False:
            return ResolveState.FETCHING
        if not await self._store.image_exists(run.filename):
            logger.debug("Cache entry %s has no image file", run.filename)
            return ResolveState.FETCHING

        run.result = ImageResolution(
            image_url=self.public_url(run.filename),
            filename=run.filename,
            source_name=entry.source_name,
            verified=entry.verified,
            verification_score=entry.verification_score,
            from_cache=True,
        )
        return ResolveState.DONE

    async def _fetching(self, run: ResolveRun) -> ResolveState:
        if run.cancelled:
            return ResolveState.PLACEHOLDER

        fetched = await self._waterfall.fetch(run.query, run.next_index, run.cancel_event)
        if fetched is None:
            return ResolveState.PLACEHOLDER

        candidate, index = fetched
        run.next_index = index + 1
        try:
            run.jpeg = normalize_image(
                candidate.data,
                max_dimension=self._settings.image_max_dimension,
                quality=self._settings.image_jpeg_quality,
            )
        except ImageProcessingError as e:
            logger.warning("Discarding image from %s: %s", candidate.source_name, e)
            return ResolveState.FETCHING

        run.candidate = candidate
        return ResolveState.PERSISTING

    async def _persisting(self, run: ResolveRun) -> ResolveState:
        candidate, jpeg = run.fetched()
        query = run.query
        entry = CacheEntry.create(
            filename=run.filename,
            breed_id=query.breed_id,
            breed_name=query.display_name,
            species=query.species,
            source_name=candidate.source_name,
            source_url=candidate.origin_url,
            ttl_days=self._settings.cache_ttl_days,
        )
        try:
            await self._store.write_image(run.filename, jpeg)
            await self._store.put(entry)
        except CacheWriteFailed as e:
            logger.error("Cache write failed, serving %s uncached: %s", run.filename, e.reason)
            run.result = ImageResolution(
                image_url=candidate.origin_url or _data_uri(jpeg),
                source_name=candidate.source_name,
                retried=run.rejections > 0,
            )
            return ResolveState.DONE

        run.entry = entry
        if self._verifier is None or not self._settings.verification_enabled:
            return ResolveState.ACCEPTED
        return ResolveState.VERIFYING

    async def _verifying(self, run: ResolveRun) -> ResolveState:
        candidate, jpeg = run.fetched()
        if self._verifier is None:
            return ResolveState.ACCEPTED
        try:
            outcome = await self._verifier.verify(
                jpeg, run.query.display_name, run.query.species
            )
        except VerificationUnavailable as e:
            logger.info("Verification unavailable for %s: %s", run.filename, e)
            return ResolveState.ACCEPTED

        if self._verifier.should_reject(outcome):
            logger.warning(
                "Rejected %s from %s (%d%%): %s",
                run.filename,
                candidate.source_name,
                outcome.confidence,
                outcome.reasoning,
            )
            return ResolveState.REJECTED_RETRY_ONCE

        updated = await self._record_outcome(run.filename, outcome)
        if updated is not None:
            run.entry = updated
        return ResolveState.ACCEPTED

    async def _accepted(self, run: ResolveRun) -> ResolveState:
        entry = run.entry
        run.result = ImageResolution(
            image_url=self.public_url(run.filename),
            filename=run.filename,
            source_name=run.candidate.source_name if run.candidate else None,
            verified=entry.verified if entry else None,
            verification_score=entry.verification_score if entry else None,
            retried=run.rejections > 0,
        )
        return ResolveState.DONE

    async def _rejected(self, run: ResolveRun) -> ResolveState:
        try:
            await self._store.delete(run.filename)
        except CacheWriteFailed as e:
            logger.error("Could not remove rejected image %s: %s", run.filename, e.reason)
        run.entry = None
        run.candidate = None
        run.jpeg = None
        run.rejections += 1
        if run.rejections >= MAX_REJECTIONS:
            return ResolveState.PLACEHOLDER
        return ResolveState.FETCHING

    async def _placeholder(self, run: ResolveRun) -> ResolveState:
        logger.warning(
            "No image found for %s (%s), using placeholder",
            run.query.display_name, run.query.species,
        )
        run.result = self._placeholder_result(run.query, retried=run.rejections > 0)
        return ResolveState.DONE

    # --- Helpers ---

    async def _record_outcome(
        self, filename: str, outcome: VerificationOutcome
    ) -> CacheEntry | None:
        verified_at = utcnow()
        try:
            return await self._store.update(
                filename, lambda entry: entry.with_outcome(outcome, verified_at)
            )
        except CacheWriteFailed as e:
            logger.error("Could not record verification for %s: %s", filename, e.reason)
            return None

    def _placeholder_result(self, query: BreedQuery, retried: bool = False) -> ImageResolution:
        return ImageResolution(
            image_url=self.placeholder_url(query.species),
            is_placeholder=True,
            retried=retried,
        )


def _data_uri(jpeg: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(jpeg).decode("ascii")
