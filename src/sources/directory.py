# src/sources/directory.py — v2
"""Source directory: map a breed to its lookup key on each catalog source.

Matching runs in three passes, strongest first:
  1. explicit alias on the breed id or name        (confidence 100)
  2. compact equality, separators removed           (confidence 95)
  3. word-level agreement: every significant token of the breed name must
     appear in the candidate key; ranked by coverage, then by sub-key
     specificity, then by key text                  (confidence 50-90)
  4. spelling tolerance: closest catalog name by token-sorted edit
     similarity, only at FUZZY_CUTOFF or above      (confidence 40-45)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace

from rapidfuzz import fuzz, process

from breedlens.core.models import BreedQuery
from breedlens.sources.catalog import (
    DOG_CEO_ALIASES,
    DOG_CEO_BREEDS,
    THECATAPI_ALIASES,
    THECATAPI_BREEDS,
)
from breedlens.sources.models import SourceKeyMatch

logger = logging.getLogger(__name__)

# Words that never discriminate between breeds.
GENERIC_WORDS = frozenset({"dog", "cat", "breed"})

# Minimum token_sort_ratio for a misspelt name to count as a catalog breed.
FUZZY_CUTOFF = 88.0

SPECIES_SOURCES = {"dog": "dog_ceo", "cat": "thecatapi"}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_text(text: str) -> str:
    """Lower-case, collapse every separator run to one space."""
    return _NON_ALNUM.sub(" ", text.lower()).strip()


def significant_tokens(text: str) -> list[str]:
    return [t for t in normalize_text(text).split() if t not in GENERIC_WORDS]


def compact(text: str) -> str:
    """Significant tokens joined without separators."""
    return "".join(significant_tokens(text))


@dataclass(frozen=True)
class _Candidate:
    key: str
    tokens: frozenset[str]
    compacts: frozenset[str]
    specific: bool
    label: str = ""
    display: str = ""


def _candidate(
    key: str, words: list[str], specific: bool = False, display: str = ""
) -> _Candidate:
    words = [w for w in words if w and w not in GENERIC_WORDS]
    forms = {"".join(words), "".join(reversed(words))}
    return _Candidate(
        key=key,
        tokens=frozenset(words),
        compacts=frozenset(f for f in forms if f),
        specific=specific,
        label=" ".join(words),
        display=display or " ".join(reversed(words)).title(),
    )


class SourceDirectory:
    """Read-only breed-to-key lookup for every catalog source."""

    def __init__(
        self,
        catalogs: dict[str, list[_Candidate]],
        aliases: dict[str, dict[str, str]] | None = None,
    ) -> None:
        self._catalogs = {name: tuple(cands) for name, cands in catalogs.items()}
        self._aliases = {
            name: {normalize_text(k): v for k, v in table.items()}
            for name, table in (aliases or {}).items()
        }

    @classmethod
    def default(cls, with_aliases: bool = True) -> SourceDirectory:
        """Directory over the bundled Dog CEO and TheCatAPI catalogs."""
        dog: list[_Candidate] = []
        for main, subs in DOG_CEO_BREEDS.items():
            dog.append(_candidate(main, [main]))
            for sub in subs:
                dog.append(_candidate(f"{main}/{sub}", [main, sub], specific=True))

        cat: list[_Candidate] = []
        for breed_id, name in THECATAPI_BREEDS.items():
            cand = _candidate(breed_id, significant_tokens(name), display=name)
            cat.append(replace(cand, compacts=cand.compacts | {breed_id}))

        aliases = (
            {"dog_ceo": DOG_CEO_ALIASES, "thecatapi": THECATAPI_ALIASES}
            if with_aliases
            else {}
        )
        return cls({"dog_ceo": dog, "thecatapi": cat}, aliases)

    def sources(self) -> list[str]:
        return list(self._catalogs)

    def keys(self, source: str) -> list[str]:
        return [c.key for c in self._catalogs.get(source, ())]

    def match(self, query: BreedQuery, source: str) -> SourceKeyMatch | None:
        """Best key for the breed on one source, or None if nothing agrees."""
        candidates = self._catalogs.get(source)
        if not candidates:
            return None

        texts = [t for t in dict.fromkeys([query.breed_id, query.name]) if t and t.strip()]

        # 1. aliases
        aliases = self._aliases.get(source, {})
        for text in texts:
            for form in (normalize_text(text), compact(text)):
                if form in aliases:
                    key = aliases[form]
                    return SourceKeyMatch(
                        source=source, key=key, confidence=100, specific="/" in key
                    )

        # 2. compact equality
        for text in texts:
            form = compact(text)
            if not form:
                continue
            hits = [c for c in candidates if form in c.compacts]
            if hits:
                best = min(hits, key=lambda c: (not c.specific, c.key))
                return SourceKeyMatch(
                    source=source, key=best.key, confidence=95, specific=best.specific
                )

        # 3. word-level agreement on the human-readable name
        words = significant_tokens(query.name) or significant_tokens(query.breed_id)
        wanted = set(words)
        if not wanted:
            return None

        scored: list[tuple[float, _Candidate]] = []
        for cand in candidates:
            if cand.tokens and wanted <= cand.tokens:
                scored.append((len(wanted) / len(cand.tokens), cand))
        if scored:
            coverage, best = min(scored, key=lambda s: (-s[0], not s[1].specific, s[1].key))
            return SourceKeyMatch(
                source=source,
                key=best.key,
                confidence=50 + round(40 * coverage),
                specific=best.specific,
            )

        # 4. spelling tolerance
        closest = self._closest(" ".join(words), source)
        if closest is None:
            logger.debug("No %s key for %r", source, query.display_name)
            return None
        score, best = closest
        logger.debug(
            "Fuzzy %s match %r -> %s (score %.0f)", source, query.display_name, best.key, score
        )
        return SourceKeyMatch(
            source=source,
            key=best.key,
            confidence=round(score * 0.45),
            specific=best.specific,
        )

    def correct_name(self, text: str, species: str | None = None) -> str | None:
        """Catalog spelling of a possibly misspelt breed name.

        Searches the catalog of the given species, or every catalog when the
        species is unknown. Returns None when nothing is close enough.
        """
        words = significant_tokens(text)
        if not words:
            return None
        sources = [SPECIES_SOURCES[species]] if species in SPECIES_SOURCES else self.sources()

        best: tuple[float, _Candidate] | None = None
        for source in sources:
            closest = self._closest(" ".join(words), source)
            if closest is not None and (best is None or closest[0] > best[0]):
                best = closest
        return best[1].display if best else None

    def _closest(self, text: str, source: str) -> tuple[float, _Candidate] | None:
        candidates = self._catalogs.get(source, ())
        if not text or not candidates:
            return None
        found = process.extractOne(
            text,
            [c.label for c in candidates],
            scorer=fuzz.token_sort_ratio,
            score_cutoff=FUZZY_CUTOFF,
        )
        if found is None:
            return None
        _, score, index = found
        return score, candidates[index]
