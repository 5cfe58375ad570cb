"""Result partitioning (text vs. image) and image pagination."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math
from typing import Any, Generic, TypeVar
from urllib.parse import urlencode

from portfolio_search.domain.model import is_image
from portfolio_search.domain.search import PagerLink, PagerState
from portfolio_search.search.ranking import RankedHit


DEFAULT_PER_PAGE = 48
MAX_PER_PAGE = 96
SEARCH_PATH = "/search"

T = TypeVar("T")


def partition(results: Sequence[RankedHit]) -> tuple[list[RankedHit], list[RankedHit]]:
    """Split ranked results into ``(textual, images)``, preserving order."""
    textual: list[RankedHit] = []
    images: list[RankedHit] = []
    for hit in results:
        (images if is_image(hit.document) else textual).append(hit)
    return textual, images


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def clamp_per_page(value: Any, *, default: int = DEFAULT_PER_PAGE, maximum: int = MAX_PER_PAGE) -> int:
    """Coerce a ``per`` parameter into ``[1, maximum]``; unparseable values use ``default``."""
    parsed = _as_int(value)
    if parsed is None:
        parsed = default
    return max(1, min(maximum, parsed))


def clamp_page(value: Any) -> int:
    """Coerce a ``page`` parameter to an integer >= 1."""
    parsed = _as_int(value)
    return max(1, parsed if parsed is not None else 1)


@dataclass(frozen=True)
class PageSlice(Generic[T]):
    items: list[T]
    page: int
    per: int
    total_items: int
    total_pages: int
    start: int
    end: int

    @property
    def beyond_last(self) -> bool:
        return self.page > self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def paginate(items: Sequence[T], page: int, per: int) -> PageSlice[T]:
    """Slice ``[(page-1)*per, min(page*per, count))``; pages past the end are empty, not errors."""
    page = max(1, page)
    per = max(1, per)
    count = len(items)
    total_pages = max(1, math.ceil(count / per))
    start = (page - 1) * per
    end = min(page * per, count)
    return PageSlice(
        items=list(items[start:end]) if start < end else [],
        page=page,
        per=per,
        total_items=count,
        total_pages=total_pages,
        start=start,
        end=end,
    )


def pager_href(query: str, page: int, per: int, *, path: str = SEARCH_PATH) -> str:
    return f"{path}?{urlencode({'q': query, 'page': str(page), 'per': str(per)})}"


def build_pager(page_slice: PageSlice[Any], query: str, *, path: str = SEARCH_PATH) -> PagerState:
    """Navigation state; inert links point at ``#``."""
    prev_disabled = not page_slice.has_previous
    next_disabled = not page_slice.has_next
    return PagerState(
        page=page_slice.page,
        per=page_slice.per,
        total_items=page_slice.total_items,
        total_pages=page_slice.total_pages,
        start=page_slice.start,
        end=page_slice.end,
        beyond_last=page_slice.beyond_last,
        visible=page_slice.total_pages > 1,
        info=f"Page {page_slice.page} of {page_slice.total_pages}",
        prev=PagerLink(
            label="« Prev",
            href="#" if prev_disabled else pager_href(query, page_slice.page - 1, page_slice.per, path=path),
            disabled=prev_disabled,
        ),
        next=PagerLink(
            label="Next »",
            href="#" if next_disabled else pager_href(query, page_slice.page + 1, page_slice.per, path=path),
            disabled=next_disabled,
        ),
    )
