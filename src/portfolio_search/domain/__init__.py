"""Domain layer - pure data shapes with no infrastructure dependencies.

- model: the searchable documents (textual and image) stored in the index
- search: the render-ready response returned for a query
"""

from portfolio_search.domain.model import (
    IMAGE_DOCUMENT_TYPE,
    TEXT_DOCUMENT_TYPES,
    Document,
    DocumentListAdapter,
    ImageDocument,
    TextDocument,
    is_image,
)
from portfolio_search.domain.search import (
    PagerLink,
    PagerState,
    RenderedImageHit,
    RenderedPageHit,
    SearchResponse,
)


__all__ = [
    "IMAGE_DOCUMENT_TYPE",
    "TEXT_DOCUMENT_TYPES",
    "Document",
    "DocumentListAdapter",
    "ImageDocument",
    "PagerLink",
    "PagerState",
    "RenderedImageHit",
    "RenderedPageHit",
    "SearchResponse",
    "TextDocument",
    "is_image",
]
