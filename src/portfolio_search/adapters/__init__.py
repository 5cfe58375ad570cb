"""Adapters between the search core and the outside world (filesystem sources, published index)."""

from portfolio_search.adapters.index_loader import (
    AbstractIndexLoader,
    FileIndexLoader,
    HttpIndexLoader,
    InMemoryIndexLoader,
    create_index_loader,
)
from portfolio_search.adapters.sources import DocumentLoadError, SourceBundle, discover_sources


__all__ = [
    "AbstractIndexLoader",
    "DocumentLoadError",
    "FileIndexLoader",
    "HttpIndexLoader",
    "InMemoryIndexLoader",
    "SourceBundle",
    "create_index_loader",
    "discover_sources",
]
