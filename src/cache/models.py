# src/cache/models.py — v2
"""Cache domain models: CacheEntry and the maintenance reports.

CacheEntry is persisted in the metadata map with camelCase keys
(fetchedAt, sourceUrl, expiresAt, ...) so existing metadata files stay
readable.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from breedlens.core.models import Species, VerificationOutcome

DEFAULT_TTL_DAYS = 7


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheEntry(BaseModel):
    """Metadata for one cached breed image."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    filename: str
    breed_id: str = ""
    breed_name: str = ""
    species: Species | None = None
    fetched_at: datetime
    source_name: str | None = None
    source_url: str | None = None
    expires_at: datetime
    verified: bool | None = None
    verification_score: int | None = None
    verification_reasoning: str | None = None
    verified_at: datetime | None = None

    @classmethod
    def create(
        cls,
        filename: str,
        breed_id: str,
        breed_name: str,
        species: Species,
        source_name: str | None = None,
        source_url: str | None = None,
        ttl_days: int = DEFAULT_TTL_DAYS,
        now: datetime | None = None,
    ) -> CacheEntry:
        """New, not-yet-verified entry expiring ttl_days after fetch."""
        fetched_at = now or utcnow()
        return cls(
            filename=filename,
            breed_id=breed_id,
            breed_name=breed_name,
            species=species,
            fetched_at=fetched_at,
            source_name=source_name,
            source_url=source_url,
            expires_at=fetched_at + timedelta(days=ttl_days),
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        """True once now reaches expires_at (boundary inclusive)."""
        return (now or utcnow()) >= self.expires_at

    def with_outcome(self, outcome: VerificationOutcome, at: datetime | None = None) -> CacheEntry:
        """Copy with an accepted judgment folded in.

        Only a "correct" judgment marks the entry verified. An "incorrect"
        judgment that was not confident enough to reject leaves it unknown,
        keeping the score and reasoning.
        """
        return self.model_copy(
            update={
                "verified": True if outcome.is_correct else None,
                "verification_score": outcome.confidence,
                "verification_reasoning": outcome.reasoning or None,
                "verified_at": at or utcnow(),
            }
        )

    def to_metadata(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SweepReport(BaseModel):
    """Outcome of one expiry/orphan sweep."""

    dry_run: bool = False
    scanned: int = 0
    deleted: list[str] = Field(default_factory=list)
    kept: list[str] = Field(default_factory=list)
    dangling_entries: list[str] = Field(default_factory=list)
    total_bytes: int = 0
    freed_bytes: int = 0

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)

    @property
    def kept_count(self) -> int:
        return len(self.kept)


class PrewarmReport(BaseModel):
    requested: int = 0
    cached: list[str] = Field(default_factory=list)
    placeholders: list[str] = Field(default_factory=list)


class VerifyResult(BaseModel):
    filename: str
    breed_name: str
    species: Species | None = None
    verified: bool | None = None
    confidence: int = 0
    reasoning: str = ""
    status: Literal["verified", "failed", "skipped"]
    deleted: bool = False


class VerifyReport(BaseModel):
    results: list[VerifyResult] = Field(default_factory=list)

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.results),
            "verified": sum(1 for r in self.results if r.status == "verified"),
            "failed": sum(1 for r in self.results if r.status == "failed"),
            "skipped": sum(1 for r in self.results if r.status == "skipped"),
        }


class CacheStatusRow(BaseModel):
    filename: str
    breed_name: str = ""
    species: Species | None = None
    verified: bool | None = None
    verified_at: datetime | None = None
    confidence: int | None = None
    source_url: str | None = None
    expires_at: datetime
    expired: bool = False


class CacheStatus(BaseModel):
    total: int = 0
    verified: int = 0
    unverified: int = 0
    pending: int = 0
    images: list[CacheStatusRow] = Field(default_factory=list)
