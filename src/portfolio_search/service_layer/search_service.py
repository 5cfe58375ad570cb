"""Search service orchestration layer.

Runs one query end to end: load an index snapshot, run the three match
stages, fuse and rank, then partition, paginate and render. Nothing is
cached between calls and no state is shared, so concurrent queries are
independent; a caller that supersedes a query simply drops its result.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from portfolio_search.adapters.index_loader import AbstractIndexLoader
from portfolio_search.config import Settings
from portfolio_search.domain.search import SearchResponse
from portfolio_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_LOAD_FAILURES,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    STAGE_HITS,
    track_latency,
)
from portfolio_search.observability.tracing import create_span
from portfolio_search.search import fuzzy
from portfolio_search.search.matchers import EXACT, FUZZY, SUBSTRING, StageHit, exact_stage, fuzzy_stage, substring_stage
from portfolio_search.search.pagination import (
    DEFAULT_PER_PAGE,
    MAX_PER_PAGE,
    build_pager,
    clamp_page,
    clamp_per_page,
    paginate,
    partition,
)
from portfolio_search.search.ranking import RankedHit, fuse_and_rank
from portfolio_search.search.render import (
    NO_IMAGES_HTML,
    RenderOptions,
    render_image_grid,
    render_page_hit,
    result_meta,
)
from portfolio_search.search.store import IndexLoadError, IndexStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryEngineOptions:
    """Tunables of the match pipeline."""

    fuzzy_min_query_length: int = fuzzy.MIN_QUERY_LENGTH
    fuzzy_threshold: float = fuzzy.DEFAULT_THRESHOLD
    fuzzy_max_score: float = fuzzy.DEFAULT_MAX_SCORE
    default_per_page: int = DEFAULT_PER_PAGE
    max_per_page: int = MAX_PER_PAGE

    @classmethod
    def from_settings(cls, settings: Settings) -> QueryEngineOptions:
        return cls(
            fuzzy_min_query_length=settings.fuzzy_min_query_length,
            fuzzy_threshold=settings.fuzzy_threshold,
            fuzzy_max_score=settings.fuzzy_max_score,
            default_per_page=settings.default_per_page,
            max_per_page=settings.max_per_page,
        )


def run_match_stages(query: str, index: IndexStore, options: QueryEngineOptions = QueryEngineOptions()) -> list[RankedHit]:
    """All three stages over the same snapshot, fused into the final order."""
    documents = index.documents
    stage_results: list[list[StageHit]] = []
    stages = (
        (EXACT, lambda: exact_stage(query, documents)),
        (SUBSTRING, lambda: substring_stage(query, documents)),
        (
            FUZZY,
            lambda: fuzzy_stage(
                query,
                documents,
                threshold=options.fuzzy_threshold,
                max_score=options.fuzzy_max_score,
                min_query_length=options.fuzzy_min_query_length,
            ),
        ),
    )
    for name, run in stages:
        with create_span(f"search.stage.{name}", attributes={"search.stage": name}), track_latency(
            SEARCH_LATENCY, phase=name
        ):
            hits = run()
        STAGE_HITS.labels(stage=name).inc(len(hits))
        logger.debug("Stage %s produced %d hits", name, len(hits))
        stage_results.append(hits)

    with track_latency(SEARCH_LATENCY, phase="rank"):
        return fuse_and_rank(stage_results)


class SearchService:
    """High-level query API used by the HTTP layer."""

    def __init__(
        self,
        index_loader: AbstractIndexLoader,
        *,
        options: QueryEngineOptions | None = None,
        render_options: RenderOptions | None = None,
    ) -> None:
        self.index_loader = index_loader
        self.options = options or QueryEngineOptions()
        self.render_options = render_options or RenderOptions()

    @classmethod
    def from_settings(cls, index_loader: AbstractIndexLoader, settings: Settings) -> SearchService:
        return cls(
            index_loader,
            options=QueryEngineOptions.from_settings(settings),
            render_options=RenderOptions(
                primary_route=settings.primary_route,
                archive_marker=settings.archive_marker,
                thumbs_base=settings.thumbs_base,
                snippet_margin=settings.snippet_margin,
            ),
        )

    async def load_index(self) -> tuple[IndexStore, bool]:
        """Return ``(snapshot, failed)``; a failed load degrades to an empty index."""
        with create_span("search.index.load", attributes={"index.source": self.index_loader.source}):
            try:
                with track_latency(SEARCH_LATENCY, phase="load"):
                    index = await self.index_loader.load()
            except IndexLoadError as exc:
                logger.warning("Search index unavailable, serving zero results: %s", exc)
                INDEX_LOAD_FAILURES.labels(source=self.index_loader.source).inc()
                return IndexStore.empty(), True

        INDEX_DOC_COUNT.labels(type="text").set(len(index.text_documents))
        INDEX_DOC_COUNT.labels(type="image").set(len(index.image_documents))
        return index, False

    async def search(self, raw_query: str | None, page: Any = None, per: Any = None) -> SearchResponse:
        """Execute a query and return a render-ready response.

        Args:
            raw_query: Free-text query; surrounding whitespace is ignored
            page: Requested image page (coerced to >= 1)
            per: Images per page (coerced into [1, max_per_page])
        """
        query = (raw_query or "").strip()
        if not query:
            SEARCH_REQUESTS.labels(outcome="empty").inc()
            return SearchResponse(query="", empty=True)

        page_number = clamp_page(page)
        per_page = clamp_per_page(per, default=self.options.default_per_page, maximum=self.options.max_per_page)

        index, failed = await self.load_index()
        with track_latency(SEARCH_LATENCY, phase="total"):
            ranked = run_match_stages(query, index, self.options)
            textual, images = partition(ranked)
            page_slice = paginate(images, page_number, per_page)

            rendered_pages = [render_page_hit(hit, query, self.render_options) for hit in textual]
            rendered_images = render_image_grid(page_slice.items, query, self.render_options)

        if failed:
            outcome = "index_error"
        else:
            outcome = "hit" if ranked else "miss"
        SEARCH_REQUESTS.labels(outcome=outcome).inc()
        logger.debug(
            "Query matched %d documents (%d text, %d images); page %d/%d",
            len(ranked),
            len(textual),
            len(images),
            page_slice.page,
            page_slice.total_pages,
        )

        if rendered_images:
            images_html = "\n".join(card.html for card in rendered_images)
        else:
            images_html = NO_IMAGES_HTML if not images else ""

        return SearchResponse(
            query=query,
            empty=False,
            meta=result_meta(len(ranked), query),
            total=len(ranked),
            pages=rendered_pages,
            images=rendered_images,
            images_html=images_html,
            pager=build_pager(page_slice, query),
            index_error=failed,
        )
