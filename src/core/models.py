# src/core/models.py — v2
"""Shared Pydantic domain models used across modules."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Species = Literal["dog", "cat"]


class BreedQuery(BaseModel):
    """Input to the image pipeline: which breed to illustrate."""

    model_config = ConfigDict(frozen=True)

    breed_id: str
    species: Species
    name: str = ""

    @property
    def display_name(self) -> str:
        """Human-readable name, falling back to the identity token."""
        return self.name.strip() or self.breed_id.strip()


class VerificationOutcome(BaseModel):
    """Vision judgment of whether an image depicts the named breed.

    Accepts the camelCase keys the verification prompt asks for.
    """

    model_config = ConfigDict(populate_by_name=True)

    is_correct: bool = Field(alias="isCorrect")
    confidence: int = Field(ge=0, le=100)
    reasoning: str = ""

    @field_validator("confidence", mode="before")
    @classmethod
    def coerce_confidence(cls, v: object) -> object:  # noqa: N805
        # Models regularly answer "85" or 85.0; fractions (0.85) mean percent.
        if isinstance(v, str):
            v = float(v.strip().rstrip("%"))
        if isinstance(v, float):
            if 0.0 < v < 1.0:
                v = v * 100
            v = round(v)
        return v


class ImageResolution(BaseModel):
    """Result of resolving a breed image. Always displayable."""

    image_url: str
    filename: str | None = None
    source_name: str | None = None
    verified: bool | None = None
    verification_score: int | None = None
    from_cache: bool = False
    is_placeholder: bool = False
    retried: bool = False
