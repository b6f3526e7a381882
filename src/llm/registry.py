# src/llm/registry.py — v1
"""Provider registry: the ordered, read-only list of completion backends.

Built once from Settings at startup. Descriptors are frozen and stored in a
tuple; neither the router nor the image pipeline ever writes to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from breedlens.config.providers import PROVIDER_DEFAULTS
from breedlens.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static description of one completion backend."""

    name: str
    credential_present: bool
    supports_vision: bool
    base_endpoint: str | None
    model_id: str
    vision_model_id: str | None
    timeout_ms: int
    priority_rank: int
    adapter: str = "openai_compatible"

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    def is_eligible(self, requires_vision: bool = False) -> bool:
        """Credential present and, for vision requests, vision-capable."""
        if not self.credential_present:
            return False
        return self.supports_vision or not requires_vision


class ProviderRegistry:
    """Immutable, priority-ordered collection of provider descriptors."""

    def __init__(self, descriptors: list[ProviderDescriptor] | tuple[ProviderDescriptor, ...]) -> None:
        ordered = sorted(descriptors, key=lambda d: d.priority_rank)
        names = [d.name for d in ordered]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate provider names in registry: {names}")
        self._descriptors: tuple[ProviderDescriptor, ...] = tuple(ordered)

    @classmethod
    def from_settings(cls, settings: Settings) -> ProviderRegistry:
        """Build the registry in LLM_PROVIDER_ORDER order.

        Backends without a credential are kept (for stats) but ineligible.
        """
        timeouts = settings.provider_timeouts
        models = settings.provider_models
        descriptors: list[ProviderDescriptor] = []

        for rank, name in enumerate(settings.provider_order_list, start=1):
            defaults = PROVIDER_DEFAULTS[name]
            credential = str(getattr(settings, str(defaults["credential"]), "") or "")
            base_endpoint = defaults["base_endpoint"] or credential or None
            vision_model = defaults["vision_model_id"]
            descriptors.append(
                ProviderDescriptor(
                    name=name,
                    credential_present=bool(credential.strip()),
                    supports_vision=vision_model is not None,
                    base_endpoint=str(base_endpoint) if base_endpoint else None,
                    model_id=models.get(name, str(defaults["model_id"])),
                    vision_model_id=str(vision_model) if vision_model else None,
                    timeout_ms=timeouts.get(name, int(defaults["timeout_ms"])),  # type: ignore[arg-type]
                    priority_rank=rank,
                    adapter=str(defaults["adapter"]),
                )
            )

        registry = cls(descriptors)
        configured = registry.names(eligible_only=True)
        if not configured:
            logger.warning("No LLM providers configured! Add API keys to .env")
        else:
            logger.info(
                "Provider registry loaded %d/%d configured providers: %s",
                len(configured), len(descriptors), ", ".join(configured),
            )
        return registry

    @property
    def descriptors(self) -> tuple[ProviderDescriptor, ...]:
        return self._descriptors

    def get(self, name: str) -> ProviderDescriptor | None:
        for d in self._descriptors:
            if d.name == name:
                return d
        return None

    def eligible(self, requires_vision: bool = False) -> list[ProviderDescriptor]:
        """Eligible descriptors in ascending priority_rank."""
        return [d for d in self._descriptors if d.is_eligible(requires_vision)]

    def names(self, eligible_only: bool = False) -> list[str]:
        if eligible_only:
            return [d.name for d in self.eligible()]
        return [d.name for d in self._descriptors]

    def stats(self) -> list[dict[str, object]]:
        """Per-provider summary for health and monitoring."""
        return [
            {
                "name": d.name,
                "configured": d.credential_present,
                "priority": d.priority_rank,
                "vision": d.supports_vision,
                "timeout_ms": d.timeout_ms,
            }
            for d in self._descriptors
        ]

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self):
        return iter(self._descriptors)
