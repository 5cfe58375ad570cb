"""Score fusion and final ordering of stage hits.

Stage outputs are combined with a pure fold keyed on document identity:
the contributing stage tags are unioned, the best score is kept, and the
match detail of the most precise stage wins (exact, then substr, then
fuzzy). The fused list is then ordered by tier, year, score and title.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from portfolio_search.domain.model import Document
from portfolio_search.search.matchers import EXACT, FUZZY, SUBSTRING, MatchDetail, StageHit


STAGE_PRECEDENCE: tuple[str, ...] = (EXACT, SUBSTRING, FUZZY)
_UNRANKED = len(STAGE_PRECEDENCE)


def stage_rank(stage: str) -> int:
    try:
        return STAGE_PRECEDENCE.index(stage)
    except ValueError:
        return _UNRANKED


@dataclass(frozen=True)
class RankedHit:
    """One document after fusion."""

    document: Document
    sources: frozenset[str]
    score: float
    detail: MatchDetail | None = None
    detail_stage: str | None = None

    @property
    def tier(self) -> int:
        """0 when exact matched, 1 for substring without exact, 2 for fuzzy only."""
        return min((stage_rank(source) for source in self.sources), default=_UNRANKED)

    @property
    def sorted_sources(self) -> list[str]:
        return sorted(self.sources, key=stage_rank)


def merge_hit(current: RankedHit | None, hit: StageHit) -> RankedHit:
    """Fold one stage hit into the fused record for its document."""
    if current is None:
        return RankedHit(
            document=hit.document,
            sources=frozenset({hit.stage}),
            score=hit.score,
            detail=hit.detail,
            detail_stage=hit.stage if hit.detail is not None else None,
        )

    detail, detail_stage = current.detail, current.detail_stage
    if hit.detail is not None and (detail is None or stage_rank(hit.stage) < stage_rank(detail_stage or "")):
        detail, detail_stage = hit.detail, hit.stage

    return replace(
        current,
        sources=current.sources | {hit.stage},
        score=max(current.score, hit.score),
        detail=detail,
        detail_stage=detail_stage,
    )


def fuse(stage_results: Iterable[Sequence[StageHit]]) -> list[RankedHit]:
    """Merge every stage's hits by identity, keeping first-seen order of identities."""
    fused: dict[str, RankedHit] = {}
    for hits in stage_results:
        for hit in hits:
            fused[hit.identity] = merge_hit(fused.get(hit.identity), hit)
    return list(fused.values())


def sort_key(hit: RankedHit) -> tuple[int, int, float, str]:
    return (hit.tier, -hit.document.parsed_year(), -hit.score, (hit.document.title or "").lower())


def rank(hits: Iterable[RankedHit]) -> list[RankedHit]:
    """Tier ascending, year descending, score descending, title ascending (stable)."""
    return sorted(hits, key=sort_key)


def fuse_and_rank(stage_results: Iterable[Sequence[StageHit]]) -> list[RankedHit]:
    return rank(fuse(stage_results))
