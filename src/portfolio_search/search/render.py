"""HTML fragments for ranked hits.

Text hits render as a list item (link + snippet). Image hits render as a
gallery card: a responsive ``<picture>`` over the generated thumbnail
variants, data attributes for the lightbox, and an "Appears on" list.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from html import escape

from portfolio_search.domain.model import ImageDocument
from portfolio_search.domain.search import RenderedImageHit, RenderedPageHit
from portfolio_search.search.ranking import RankedHit
from portfolio_search.search.snippet import DEFAULT_MARGIN, highlight_title, make_snippet


THUMB_WIDTHS: tuple[int, ...] = (320, 480, 720, 960)
FALLBACK_WIDTH = 480
THUMB_SIZES = ", ".join(
    (
        "(max-width: 520px) calc(100vw - 2.5rem)",
        "(max-width: 900px) calc((100vw - 2.5rem - 10px) / 2)",
        "(max-width: 1151px) calc((min(100vw, 1200px) - 2.5rem - 3*10px) / 4)",
        "(max-width: 1200px) calc((min(100vw, 1200px) - 2.5rem - 4*10px) / 5)",
        "calc((min(100vw, 1200px) - 2.5rem - 4*10px) / 5)",
    )
)
DEFAULT_ASPECT_RATIO = 0.75
NO_IMAGES_HTML = "<p>No images matched your query.</p>"


@dataclass(frozen=True)
class RenderOptions:
    primary_route: str = "/paintings"
    archive_marker: str = "/archive"
    thumbs_base: str = "/thumbs"
    widths: tuple[int, ...] = field(default=THUMB_WIDTHS)
    snippet_margin: int = DEFAULT_MARGIN


def appears_priority(route: str, options: RenderOptions = RenderOptions()) -> int:
    lowered = (route or "").lower()
    if options.archive_marker.lower() in lowered:
        return 99
    if lowered.startswith(options.primary_route.lower()):
        return 0
    return 10


def sort_appears_on(routes: Iterable[str], options: RenderOptions = RenderOptions()) -> list[str]:
    """Primary section first, archive-like routes last, everything else in between (stable)."""
    unique = list(dict.fromkeys(routes))
    return sorted(unique, key=lambda route: appears_priority(route, options))


def result_meta(count: int, query: str) -> str:
    return f"{count} result{'' if count == 1 else 's'} for “{query}”"


def _stem_for(document: ImageDocument) -> str:
    return document.stem or document.slug or ""


def srcset(document: ImageDocument, ext: str, options: RenderOptions = RenderOptions()) -> str:
    base = f"{options.thumbs_base}/{document.section}/{_stem_for(document)}"
    return ", ".join(f"{base}-w{width}.{ext} {width}w" for width in options.widths)


def picture_html(document: ImageDocument, *, priority: bool, options: RenderOptions = RenderOptions()) -> str:
    fallback = f"{options.thumbs_base}/{document.section}/{_stem_for(document)}-w{FALLBACK_WIDTH}.jpg"
    size_attrs = ""
    if document.width:
        size_attrs += f' width="{document.width}"'
    if document.height:
        size_attrs += f' height="{document.height}"'
    return (
        "<picture>"
        f'<source type="image/avif" srcset="{escape(srcset(document, "avif", options))}" sizes="{THUMB_SIZES}">'
        f'<source type="image/webp" srcset="{escape(srcset(document, "webp", options))}" sizes="{THUMB_SIZES}">'
        f'<img src="{escape(fallback)}" srcset="{escape(srcset(document, "jpg", options))}" sizes="{THUMB_SIZES}"'
        f' alt="{escape(document.title)}"{size_attrs}'
        f' loading="{"eager" if priority else "lazy"}"'
        f' fetchpriority="{"high" if priority else "auto"}" decoding="async">'
        "</picture>"
    )


def render_page_hit(hit: RankedHit, query: str, options: RenderOptions = RenderOptions()) -> RenderedPageHit:
    document = hit.document
    title_html = highlight_title(document.title or "", query)
    snippet_html = make_snippet(document, query, hit.detail, margin=options.snippet_margin)
    snippet_block = f'<p class="snippet">{snippet_html}</p>' if snippet_html else ""
    return RenderedPageHit(
        url=document.url,
        title=document.title,
        title_html=title_html,
        snippet_html=snippet_html,
        sources=hit.sorted_sources,
        html=(
            '<li class="page-item">'
            f'<a class="page-link" href="{escape(document.url)}">{title_html}</a>'
            f"{snippet_block}</li>"
        ),
    )


def render_image_hit(
    hit: RankedHit,
    query: str,
    index: int,
    options: RenderOptions = RenderOptions(),
) -> RenderedImageHit:
    document = hit.document
    if not isinstance(document, ImageDocument):
        raise TypeError(f"Expected an image document, got {document.type!r}")

    appears = sort_appears_on(document.appears_on, options)
    landing = (appears[0] if appears else f"/{document.section}").lstrip("/")
    stem = _stem_for(document)
    href = f"/{landing}#{stem}"
    ar = document.ar if document.ar is not None else DEFAULT_ASPECT_RATIO
    rows = max(1, document.rows or 1)
    year = "" if document.year is None else str(document.year)

    title_html = highlight_title(document.title or "", query)
    snippet_html = make_snippet(document, query, hit.detail, margin=options.snippet_margin)
    chips = f'<span class="chip">{escape(document.artist)}</span>' if document.artist else ""
    snippet_block = f'<p class="snippet">{snippet_html}</p>' if snippet_html else ""
    also_block = ""
    if appears:
        links = ", ".join(f'<span class="also-link"><a href="{escape(r)}">{escape(r)}</a></span>' for r in appears)
        also_block = f'<p class="also-on">Appears on: {links}</p>'
    overlay_year = f'<div class="sub">{escape(year)}</div>' if year else ""

    card = (
        '<div class="card-wrap">'
        f'<a id="{escape(stem)}" class="card" style="grid-row-end: span {rows}; --ar:{ar};"'
        f' data-index="{index}" data-ar="{ar}" href="{escape(href)}" rel="noopener"'
        f' data-title="{escape(document.title)}" data-year="{escape(year)}"'
        f' data-artist="{escape(document.artist)}" data-desc="{escape(document.description)}"'
        f' data-sale="{escape(document.sale or "PRIVATE")}" data-section="{escape(landing)}"'
        f' data-stem="{escape(stem)}">'
        f"{picture_html(document, priority=index == 0, options=options)}"
        '<div class="overlay" aria-hidden="true"><div>'
        f'<div class="title">{escape(document.title)}</div>{overlay_year}'
        "</div></div></a>"
        '<div class="card-body">'
        f'<a class="title" href="{escape(href)}">{title_html}</a>'
        f'<div class="chips">{chips}</div>{snippet_block}{also_block}'
        "</div></div>"
    )
    return RenderedImageHit(
        url=document.url,
        title=document.title,
        href=href,
        appears_on=appears,
        sources=hit.sorted_sources,
        html=card,
    )


def render_image_grid(hits: Sequence[RankedHit], query: str, options: RenderOptions = RenderOptions()) -> list[RenderedImageHit]:
    return [render_image_hit(hit, query, index, options) for index, hit in enumerate(hits)]
