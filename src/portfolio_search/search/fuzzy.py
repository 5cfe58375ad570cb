"""Fuzzy matching for typo-tolerant search.

Each weighted field is aligned against the query with
``rapidfuzz.fuzz.partial_ratio_alignment``, which finds the best matching
window of the field. The window is then narrowed to the longest run of
characters it shares verbatim with the query (the longest ``equal`` block of
the Levenshtein edit script). A field's distance is
``1 - similarity`` (0 is a perfect match). Fields within the threshold
participate in the document score, which combines them as a weighted
product so that agreement across several fields pulls a document closer.

A raw hit is then accepted only when:
- its best field (the longest contiguous matched span) is at least
  ``max(3, ceil(0.6 * len(query)))`` characters long, and
- the combined document score is at most ``max_score``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math
import sys

from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from portfolio_search.domain.model import Document


FIELD_WEIGHTS: tuple[tuple[str, float], ...] = (("title", 0.6), ("text", 0.4), ("keywords", 0.3))
DEFAULT_THRESHOLD = 0.28
DEFAULT_MAX_SCORE = 0.4
MIN_QUERY_LENGTH = 4

_EPSILON = sys.float_info.epsilon
_TOTAL_WEIGHT = sum(weight for _, weight in FIELD_WEIGHTS)


@dataclass(frozen=True)
class FieldAlignment:
    """Longest run shared with the query inside one field (``end`` is exclusive).

    ``distance`` scores the whole aligned window; ``start``/``end`` cover only
    the contiguous run, so ``span`` is its length.
    """

    field: str
    distance: float
    start: int
    end: int

    @property
    def span(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class FuzzyMatch:
    document: Document
    score: float
    best: FieldAlignment


def min_contiguous_span(query: str) -> int:
    return max(3, math.ceil(0.6 * len(query)))


def longest_equal_run(query: str, window: str) -> tuple[int, int]:
    """``(start, length)`` of the longest block of ``window`` copied unchanged from ``query``."""
    start, length = 0, 0
    for opcode in Levenshtein.opcodes(query, window):
        if opcode.tag == "equal" and opcode.dest_end - opcode.dest_start > length:
            start, length = opcode.dest_start, opcode.dest_end - opcode.dest_start
    return start, length


def align(query: str, value: str, field: str) -> FieldAlignment | None:
    """Align a lower-cased query inside ``value``; ``None`` when either side is empty."""
    if not query or not value:
        return None
    lowered = value.lower()
    result = fuzz.partial_ratio_alignment(query, lowered)
    if result is None:
        return None
    run_start, run_length = longest_equal_run(query, lowered[result.dest_start : result.dest_end])
    start = result.dest_start + run_start
    return FieldAlignment(
        field=field,
        distance=1.0 - result.score / 100.0,
        start=start,
        end=start + run_length,
    )


def align_keywords(query: str, keywords: Sequence[str]) -> FieldAlignment | None:
    """Best keyword alignment, with offsets into the space-joined keyword string."""
    best: FieldAlignment | None = None
    offset = 0
    for keyword in keywords:
        candidate = align(query, keyword, "keywords")
        if candidate is not None and (best is None or candidate.distance < best.distance):
            best = FieldAlignment(
                field="keywords",
                distance=candidate.distance,
                start=candidate.start + offset,
                end=candidate.end + offset,
            )
        offset += len(keyword) + 1
    return best


def score_document(
    query: str,
    document: Document,
    *,
    threshold: float = DEFAULT_THRESHOLD,
) -> tuple[float, list[FieldAlignment]] | None:
    """Return ``(score, participating_fields)`` or ``None`` when no field is within ``threshold``."""
    needle = query.lower()
    alignments: list[FieldAlignment] = []
    for field, _weight in FIELD_WEIGHTS:
        if field == "keywords":
            candidate = align_keywords(needle, document.keywords)
        else:
            candidate = align(needle, getattr(document, field, "") or "", field)
        if candidate is not None and candidate.distance <= threshold:
            alignments.append(candidate)

    if not alignments:
        return None

    weights = dict(FIELD_WEIGHTS)
    score = 1.0
    for alignment in alignments:
        score *= max(alignment.distance, _EPSILON) ** (weights[alignment.field] / _TOTAL_WEIGHT)
    return score, alignments


def best_alignment(alignments: Sequence[FieldAlignment]) -> FieldAlignment:
    """Longest span wins; ties keep field order (title, text, keywords)."""
    best = alignments[0]
    for alignment in alignments[1:]:
        if alignment.span > best.span:
            best = alignment
    return best


def find_fuzzy_matches(
    query: str,
    documents: Sequence[Document],
    *,
    threshold: float = DEFAULT_THRESHOLD,
    max_score: float = DEFAULT_MAX_SCORE,
    min_query_length: int = MIN_QUERY_LENGTH,
) -> list[FuzzyMatch]:
    """Accepted fuzzy matches, best (lowest) score first; index order breaks ties."""
    if len(query) < min_query_length:
        return []

    floor = min_contiguous_span(query)
    matches: list[FuzzyMatch] = []
    for document in documents:
        scored = score_document(query, document, threshold=threshold)
        if scored is None:
            continue
        score, alignments = scored
        best = best_alignment(alignments)
        if best.span >= floor and score <= max_score:
            matches.append(FuzzyMatch(document=document, score=score, best=best))

    matches.sort(key=lambda match: match.score)
    return matches
