# src/cache/maintenance.py — v2
"""Offline cache maintenance: expiry sweep, pre-warm, re-verification, status.

None of these run on the request path. The sweep and re-verification only
ever change the metadata map through the store's atomic mutate/update, so
they are safe to run next to a live server.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from breedlens.cache.base_cache_store import BaseCacheStore, EntryMap
from breedlens.cache.models import (
    CacheEntry,
    CacheStatus,
    CacheStatusRow,
    PrewarmReport,
    SweepReport,
    VerifyReport,
    VerifyResult,
    utcnow,
)
from breedlens.config.settings import Settings
from breedlens.core.errors import CacheWriteFailed, VerificationUnavailable
from breedlens.core.models import BreedQuery

if TYPE_CHECKING:
    from breedlens.pipeline.image_pipeline import ImagePipeline
    from breedlens.pipeline.verifier import ImageVerifier

logger = logging.getLogger(__name__)

PROTECTED_PREFIX = "placeholder"
ORPHAN_GRACE = timedelta(seconds=60)


def _is_protected(filename: str) -> bool:
    return filename.startswith(PROTECTED_PREFIX) or filename.startswith(".")


async def sweep_cache(
    store: BaseCacheStore,
    now: datetime | None = None,
    dry_run: bool = False,
    force: bool = False,
) -> SweepReport:
    """Delete expired images, orphan files and dangling entries.

    Every keep/delete decision is taken inside the store's metadata lock,
    against the entry as it is at that moment, so a resolve that refreshes
    a breed while the sweep runs keeps its new file and entry. Files
    modified within ORPHAN_GRACE of `now` are never deleted: the pipeline
    writes the image before its entry.

    Args:
        store: Cache store to sweep.
        now: Reference time (defaults to the current UTC time).
        dry_run: Only report what would be deleted.
        force: Delete every cached image regardless of expiry.

    Returns:
        SweepReport with per-file outcome and byte totals.
    """
    now = now or utcnow()
    report = SweepReport(dry_run=dry_run)
    files = [f for f in await store.list_files() if not _is_protected(f)]
    report.scanned = len(files)

    def _sweep(entries: EntryMap) -> None:
        for filename in files:
            path = store.root / filename
            stat = _stat(path)
            if stat is None:
                continue
            size, modified_at = stat
            report.total_bytes += size

            reason = _deletion_reason(entries.get(filename), modified_at, now, force)
            if reason is None:
                report.kept.append(filename)
                continue

            logger.info("%s %s - %s", "Would delete" if dry_run else "Deleting", filename, reason)
            if not dry_run:
                try:
                    path.unlink(missing_ok=True)
                except OSError as e:
                    raise CacheWriteFailed(filename, f"cannot delete image: {e}") from e
                entries.pop(filename, None)
            report.deleted.append(filename)
            report.freed_bytes += size

        report.dangling_entries = sorted(
            name for name in entries
            if not _is_protected(name) and not (store.root / name).exists()
        )
        if not dry_run:
            for name in report.dangling_entries:
                del entries[name]

    if dry_run:
        _sweep({e.filename: e for e in await store.list_entries()})
    else:
        await store.mutate(_sweep)

    logger.info(
        "Cache sweep: scanned=%d deleted=%d kept=%d dangling=%d freed=%.2fMB",
        report.scanned, report.deleted_count, report.kept_count,
        len(report.dangling_entries), report.freed_bytes / 1024 / 1024,
    )
    return report


def _stat(path: Path) -> tuple[int, datetime] | None:
    """(size, mtime) of a cached file, None once it is gone."""
    try:
        st = path.stat()
    except FileNotFoundError:
        return None
    return st.st_size, datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)


def _deletion_reason(
    entry: CacheEntry | None,
    modified_at: datetime,
    now: datetime,
    force: bool,
) -> str | None:
    if force:
        return "forced"
    if now - modified_at < ORPHAN_GRACE:
        return None
    if entry is None:
        return "orphaned file (no metadata)"
    if entry.is_expired(now):
        return f"expired {(now - entry.expires_at).days} day(s) ago"
    return None


def default_prewarm_queries(settings: Settings) -> list[BreedQuery]:
    """Popular dog and cat breeds from PREWARM_DOGS / PREWARM_CATS."""
    queries = [BreedQuery(breed_id=b, species="dog") for b in settings.prewarm_dogs_list]
    queries += [BreedQuery(breed_id=b, species="cat") for b in settings.prewarm_cats_list]
    return queries


async def prewarm(pipeline: ImagePipeline, queries: list[BreedQuery]) -> PrewarmReport:
    """Resolve each query sequentially through the normal pipeline."""
    report = PrewarmReport(requested=len(queries))
    for query in queries:
        result = await pipeline.resolve(query)
        label = f"{query.display_name} ({query.species})"
        if result.is_placeholder:
            report.placeholders.append(label)
        else:
            report.cached.append(label)

    logger.info(
        "Pre-warm: %d cached, %d placeholder of %d",
        len(report.cached), len(report.placeholders), report.requested,
    )
    return report


async def verify_cache(
    store: BaseCacheStore,
    verifier: ImageVerifier,
    force_recheck: bool = False,
) -> VerifyReport:
    """Re-judge cached images that are still unverified (or all of them).

    Confidently wrong images are deleted together with their entry.
    """
    report = VerifyReport()
    entries = [
        e for e in await store.list_entries()
        if not _is_protected(e.filename) and (force_recheck or e.verified_at is None)
    ]
    logger.info("Found %d cached images to verify", len(entries))

    for entry in entries:
        breed_name = entry.breed_name or entry.breed_id or entry.filename
        species = entry.species
        data = await store.read_image(entry.filename)
        if data is None or species is None:
            report.results.append(
                VerifyResult(
                    filename=entry.filename,
                    breed_name=breed_name,
                    species=species,
                    reasoning="image file missing" if data is None else "unknown species",
                    status="skipped",
                )
            )
            continue

        try:
            outcome = await verifier.verify(data, breed_name, species)
        except VerificationUnavailable as e:
            report.results.append(
                VerifyResult(
                    filename=entry.filename,
                    breed_name=breed_name,
                    species=species,
                    reasoning=str(e),
                    status="skipped",
                )
            )
            continue

        deleted = False
        if verifier.should_reject(outcome):
            deleted = await store.delete(entry.filename)
            logger.warning("Deleted incorrect image: %s", entry.filename)
        else:
            verified_at = utcnow()
            await store.update(
                entry.filename,
                lambda current: current.with_outcome(outcome, verified_at),
            )

        report.results.append(
            VerifyResult(
                filename=entry.filename,
                breed_name=breed_name,
                species=species,
                verified=outcome.is_correct,
                confidence=outcome.confidence,
                reasoning=outcome.reasoning,
                status="verified" if outcome.is_correct else "failed",
                deleted=deleted,
            )
        )

    logger.info("Verification complete: %s", report.summary())
    return report


async def cache_status(store: BaseCacheStore, now: datetime | None = None) -> CacheStatus:
    """Verification totals plus one row per cached entry."""
    now = now or utcnow()
    rows = [
        CacheStatusRow(
            filename=e.filename,
            breed_name=e.breed_name,
            species=e.species,
            verified=e.verified,
            verified_at=e.verified_at,
            confidence=e.verification_score,
            source_url=e.source_url,
            expires_at=e.expires_at,
            expired=e.is_expired(now),
        )
        for e in sorted(await store.list_entries(), key=lambda e: e.filename)
    ]
    return CacheStatus(
        total=len(rows),
        verified=sum(1 for r in rows if r.verified is True),
        unverified=sum(1 for r in rows if r.verified is False),
        pending=sum(1 for r in rows if r.verified is None),
        images=rows,
    )
