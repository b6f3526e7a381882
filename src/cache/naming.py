# src/cache/naming.py — v1
"""Deterministic cache filenames for (breed, species).

The same breed always maps to the same file, different breeds never share
one, and every name passes the asset shim's token check.
"""

from __future__ import annotations

import hashlib
import re

from breedlens.core.models import Species

IMAGE_EXTENSION = ".jpg"
MAX_SLUG_LENGTH = 64

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lower-case, separators collapsed to single hyphens, [a-z0-9-] only."""
    return _NON_SLUG.sub("-", text.strip().lower()).strip("-")


def cache_filename(breed_id: str, species: Species) -> str:
    """Return '<slug>-<species>.jpg'.

    Empty or over-long slugs (non-Latin names, pasted paragraphs) fall back
    to a short hash of the raw identity so distinct breeds stay distinct.
    """
    slug = slugify(breed_id)
    if not slug or len(slug) > MAX_SLUG_LENGTH:
        digest = hashlib.sha256(breed_id.strip().lower().encode("utf-8")).hexdigest()[:16]
        prefix = slug[:32].rstrip("-")
        slug = f"{prefix}-{digest}" if prefix else f"breed-{digest}"
    return f"{slug}-{species}{IMAGE_EXTENSION}"
