# src/core/errors.py — v1
"""Error taxonomy shared by the completion router and the image pipeline.

Provider- and source-level failures are caught and folded into the next
fallback step; only the terminal router failures and the asset-shim errors
ever cross a public boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from breedlens.llm.models import ProviderAttempt


class BreedLensError(Exception):
    """Base class for all domain errors."""


# --- Completion router ---


class NoProvidersConfigured(BreedLensError):
    """No eligible backend exists for the request. No network call was made."""

    def __init__(self, requires_vision: bool = False) -> None:
        self.requires_vision = requires_vision
        kind = "vision-capable " if requires_vision else ""
        super().__init__(
            f"No {kind}LLM providers configured. Add API keys to your .env file."
        )


class AllProvidersFailed(BreedLensError):
    """Every eligible backend was attempted and failed."""

    def __init__(self, attempts: list[ProviderAttempt]) -> None:
        self.attempts = list(attempts)
        summary = ", ".join(f"{a.provider}: {a.error_type}" for a in self.attempts)
        super().__init__(f"All LLM providers failed ({summary})")

    @property
    def reasons(self) -> list[tuple[str, str]]:
        """(provider, reason) pairs in attempt order."""
        return [(a.provider, a.error or a.error_type or "unknown") for a in self.attempts]


class CancelledRequestError(BreedLensError):
    """The caller cancelled the request between fallback attempts."""


class MalformedResponseError(BreedLensError):
    """A backend answered with a body that could not be used."""


# --- Image pipeline ---


class SourceFetchFailed(BreedLensError):
    """One image source could not produce bytes for a breed."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class ImageProcessingError(BreedLensError):
    """Fetched bytes could not be decoded or re-encoded as an image."""


class VerificationUnavailable(BreedLensError):
    """No usable vision judgment. Non-fatal: verification stays unknown."""


class CacheWriteFailed(BreedLensError):
    """Writing an image or its metadata failed. Non-fatal."""

    def __init__(self, filename: str, reason: str) -> None:
        self.filename = filename
        self.reason = reason
        super().__init__(f"Cache write failed for {filename}: {reason}")


# --- Dynamic asset shim ---


class InvalidFilenameToken(BreedLensError):
    """Filename token outside the allowed charset or extension."""


class ImageNotFound(BreedLensError):
    """Valid filename token with no file behind it."""
