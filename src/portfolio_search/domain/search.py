"""Domain models for a rendered search response.

Following Cosmic Python principles:
- Value Objects are immutable (frozen=True)
- No infrastructure dependencies

These are the presentation-ready shapes produced for every query. They carry
no identity and are rebuilt from the index on each request.
"""

from pydantic import BaseModel, ConfigDict, Field


class RenderedPageHit(BaseModel):
    """A textual hit: a link plus an optional highlighted snippet."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    title_html: str
    snippet_html: str = ""
    sources: list[str] = Field(default_factory=list)
    html: str


class RenderedImageHit(BaseModel):
    """An image hit rendered as a gallery card."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    href: str
    appears_on: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    html: str


class PagerLink(BaseModel):
    """One navigation link; ``disabled`` links point at ``#``."""

    model_config = ConfigDict(frozen=True)

    label: str
    href: str
    disabled: bool


class PagerState(BaseModel):
    """Pagination state for the image subset."""

    model_config = ConfigDict(frozen=True)

    page: int
    per: int
    total_items: int
    total_pages: int
    start: int
    end: int
    beyond_last: bool
    visible: bool
    info: str
    prev: PagerLink
    next: PagerLink


class SearchResponse(BaseModel):
    """Complete render-ready result of a single query."""

    model_config = ConfigDict(frozen=True)

    query: str
    empty: bool
    meta: str = ""
    total: int = 0
    pages: list[RenderedPageHit] = Field(default_factory=list)
    images: list[RenderedImageHit] = Field(default_factory=list)
    images_html: str = ""
    pager: PagerState | None = None
    index_error: bool = False
