"""The three independent match stages run for every query.

Each stage scans the whole index and returns its own list of
:class:`StageHit` values; nothing is shared between stages; combining them
is the job of :mod:`portfolio_search.search.ranking`.

- exact: whole-word, plural-aware, flat score 100
- substr: case-insensitive literal substring, ``70 - index * 0.01``
- fuzzy: similarity search for queries of 4+ characters, ``50 - index * 0.01``
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
import re

from portfolio_search.domain.model import Document
from portfolio_search.search import fuzzy


EXACT = "exact"
SUBSTRING = "substr"
FUZZY = "fuzzy"

EXACT_SCORE = 100.0
SUBSTRING_BASE_SCORE = 70.0
FUZZY_BASE_SCORE = 50.0
INDEX_NUDGE = 0.01

# Stems shorter than this are never derived from a plural query ("us" stays "us").
_MIN_SINGULAR_LENGTH = 3

# "es" is a plural suffix only after these; "notes" is "note", not "not".
_SIBILANT_ENDINGS = ("s", "x", "z", "ch", "sh")


@dataclass(frozen=True)
class MatchDetail:
    """Where a stage matched: the field name and a ``[start, end)`` span within it."""

    field: str
    start: int
    end: int


@dataclass(frozen=True)
class StageHit:
    identity: str
    document: Document
    stage: str
    score: float
    detail: MatchDetail | None = None


def document_identity(document: Document) -> str:
    return document.identity


def singular_form(query: str) -> str | None:
    """Strip one plural suffix: ``es`` after a sibilant, otherwise ``s``."""
    lowered = query.lower()
    if lowered.endswith("es") and lowered[:-2].endswith(_SIBILANT_ENDINGS):
        stem = query[:-2]
    elif lowered.endswith("s") and not lowered.endswith("ss"):
        stem = query[:-1]
    else:
        return None
    return stem if len(stem) >= _MIN_SINGULAR_LENGTH else None


def query_variants(query: str) -> list[str]:
    """The query plus its singular form when it ends in a plural suffix, longest first."""
    singular = singular_form(query)
    return [query] if singular is None else [query, singular]


def build_exact_pattern(query: str) -> re.Pattern[str]:
    """Whole-word pattern accepting an optional ``s``/``es`` suffix.

    ``print`` matches ``print`` and ``prints`` but not ``printer``;
    ``prints`` also matches ``print``.
    """
    alternatives = "|".join(re.escape(variant) for variant in query_variants(query))
    return re.compile(rf"\b(?:{alternatives})(?:s|es)?\b", re.IGNORECASE)


def build_highlight_pattern(query: str) -> re.Pattern[str]:
    """Like :func:`build_exact_pattern` without word boundaries, for marking matches."""
    alternatives = "|".join(re.escape(variant) for variant in query_variants(query))
    return re.compile(rf"(?:{alternatives})(?:s|es)?", re.IGNORECASE)


def searchable_fields(document: Document) -> Iterator[tuple[str, str]]:
    """Fields every stage inspects, in fixed order; keywords are space-joined."""
    yield "title", document.title or ""
    yield "description", document.description or ""
    yield "text", document.text or ""
    yield "keywords", " ".join(document.keywords)


def _first_exact_detail(pattern: re.Pattern[str], document: Document) -> MatchDetail | None:
    for field, value in searchable_fields(document):
        if field == "keywords":
            offset = 0
            for keyword in document.keywords:
                match = pattern.search(keyword)
                if match:
                    return MatchDetail(field, offset + match.start(), offset + match.end())
                offset += len(keyword) + 1
            continue
        match = pattern.search(value)
        if match:
            return MatchDetail(field, match.start(), match.end())
    return None


def exact_stage(query: str, documents: Sequence[Document]) -> list[StageHit]:
    """Whole-word hits in title, description, text or any single keyword."""
    pattern = build_exact_pattern(query)
    hits: list[StageHit] = []
    for document in documents:
        detail = _first_exact_detail(pattern, document)
        if detail is not None:
            hits.append(StageHit(document_identity(document), document, EXACT, EXACT_SCORE, detail))
    return hits


def substring_stage(query: str, documents: Sequence[Document]) -> list[StageHit]:
    """Literal, case-insensitive containment; earlier index positions score marginally higher."""
    needle = query.lower()
    hits: list[StageHit] = []
    for document in documents:
        for field, value in searchable_fields(document):
            position = value.lower().find(needle)
            if position >= 0:
                score = SUBSTRING_BASE_SCORE - len(hits) * INDEX_NUDGE
                detail = MatchDetail(field, position, position + len(query))
                hits.append(StageHit(document_identity(document), document, SUBSTRING, score, detail))
                break
    return hits


def fuzzy_stage(
    query: str,
    documents: Sequence[Document],
    *,
    threshold: float = fuzzy.DEFAULT_THRESHOLD,
    max_score: float = fuzzy.DEFAULT_MAX_SCORE,
    min_query_length: int = fuzzy.MIN_QUERY_LENGTH,
) -> list[StageHit]:
    """Similarity hits for queries of at least ``min_query_length`` characters."""
    matches = fuzzy.find_fuzzy_matches(
        query,
        documents,
        threshold=threshold,
        max_score=max_score,
        min_query_length=min_query_length,
    )
    return [
        StageHit(
            document_identity(match.document),
            match.document,
            FUZZY,
            FUZZY_BASE_SCORE - index * INDEX_NUDGE,
            MatchDetail(match.best.field, match.best.start, match.best.end),
        )
        for index, match in enumerate(matches)
    ]
