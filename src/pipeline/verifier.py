# src/pipeline/verifier.py — v1
"""Vision verification: does a cached image actually show the named breed?

The judgment comes from a vision-capable backend through the completion
router. The answer must contain a JSON object with isCorrect, confidence
and reasoning; anything else means no usable judgment.
"""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from breedlens.core.errors import (
    AllProvidersFailed,
    CancelledRequestError,
    NoProvidersConfigured,
    VerificationUnavailable,
)
from breedlens.core.models import Species, VerificationOutcome
from breedlens.llm.models import CompletionRequest, ImageInput
from breedlens.llm.router import CompletionRouter

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_THRESHOLD = 70

VERIFICATION_PROMPT = """You are an expert pet breed identifier. Analyze this image and determine if it shows a {breed} {species}.

Respond with ONLY a JSON object in this exact format:
{{
  "isCorrect": true or false,
  "confidence": 0-100,
  "reasoning": "brief explanation"
}}

Be strict - only return true if you're confident this is actually a {breed}."""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def parse_judgment(answer: str) -> VerificationOutcome:
    """Extract and validate the JSON judgment embedded in a model answer.

    Raises:
        VerificationUnavailable: No JSON object, or invalid fields.
    """
    match = _JSON_OBJECT.search(answer or "")
    if not match:
        raise VerificationUnavailable("no JSON object in verification answer")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise VerificationUnavailable(f"invalid verification JSON: {e}") from e
    if not isinstance(data, dict):
        raise VerificationUnavailable("verification JSON is not an object")
    try:
        return VerificationOutcome.model_validate(data)
    except (ValidationError, ValueError) as e:
        raise VerificationUnavailable(f"invalid verification fields: {e}") from e


class ImageVerifier:
    """Ask a vision backend to confirm an image's breed."""

    def __init__(
        self,
        router: CompletionRouter,
        threshold: int = DEFAULT_REJECTION_THRESHOLD,
        max_tokens: int = 256,
    ) -> None:
        self._router = router
        self._threshold = threshold
        self._max_tokens = max_tokens

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def available(self) -> bool:
        """Whether any vision-capable backend is configured."""
        return self._router.has_providers(requires_vision=True)

    async def verify(
        self, image: bytes, breed_name: str, species: Species
    ) -> VerificationOutcome:
        """Judge one image.

        Raises:
            VerificationUnavailable: No vision backend answered usefully.
        """
        request = CompletionRequest(
            prompt=VERIFICATION_PROMPT.format(breed=breed_name, species=species),
            system_prompt="You verify pet breed photos and answer in JSON.",
            image=ImageInput(data=image, media_type="image/jpeg"),
            requires_vision=True,
            max_tokens=self._max_tokens,
            temperature=0.0,
        )
        try:
            result = await self._router.complete(request)
        except (NoProvidersConfigured, AllProvidersFailed, CancelledRequestError) as e:
            raise VerificationUnavailable(str(e)) from e

        outcome = parse_judgment(result.answer)
        logger.info(
            "Verification for %s (%s) via %s: %s (%d%%)",
            breed_name, species, result.provider_used,
            "correct" if outcome.is_correct else "incorrect", outcome.confidence,
        )
        return outcome

    def should_reject(self, outcome: VerificationOutcome) -> bool:
        """Confidently wrong: not correct and confidence above the threshold."""
        return not outcome.is_correct and outcome.confidence > self._threshold
