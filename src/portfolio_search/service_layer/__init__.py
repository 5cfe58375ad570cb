"""Service layer - query orchestration over the search core."""

from .search_service import QueryEngineOptions, SearchService, run_match_stages


__all__ = [
    "QueryEngineOptions",
    "SearchService",
    "run_match_stages",
]
