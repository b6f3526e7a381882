# src/sources/models.py — v1
"""Types shared by the source directory, image sources and the waterfall."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SourceKind = Literal["catalog", "stock", "generative"]


class SourceKeyMatch(BaseModel):
    """Best lookup key for one breed on one external source."""

    model_config = ConfigDict(frozen=True)

    source: str
    key: str
    confidence: int = Field(ge=0, le=100)
    specific: bool = False  # True for a "main/sub" variety key


class SourceCandidate(BaseModel):
    """Raw image bytes produced by one source, not yet normalized."""

    model_config = ConfigDict(frozen=True)

    source_name: str
    data: bytes
    origin_url: str | None = None
    media_type: str = "image/jpeg"
    match_confidence: int | None = None
