"""Document normalization for the portfolio search index.

Turns the three collaborator shapes (content entries, routed markdown pages
and image listings) into the uniform documents stored in the index. Text
sources map one-to-one onto documents. Image records are grouped by their
identity key so an image listed on several routes (its section, a themed
collection, the archive) becomes one document whose ``appearsOn`` names
every route it was seen on.

Building is deterministic: the same inputs in the same order always yield
byte-identical output. Listing order matters only for the insertion order
of ``appearsOn`` and for which record wins a first-seen field, so callers
must feed listings in a fixed order (see :meth:`IndexBuilder.add_sources`).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
import logging
from typing import Any

from portfolio_search.domain.model import ImageDocument, TextDocument
from portfolio_search.search.markup import (
    infer_title,
    listing_basename,
    listing_path_to_route,
    page_path_to_route,
    route_label,
    strip_markup,
)
from portfolio_search.search.store import IndexStore


logger = logging.getLogger(__name__)

DEFAULT_TEXT_MAX_LENGTH = 8000
DEFAULT_IGNORE_PAGE_PATHS = ("/search",)
SALE_TAGS = frozenset({"A", "W"})


@dataclass(frozen=True)
class ContentEntry:
    """A content-collection entry (``projects`` or ``sections``)."""

    kind: str
    slug: str
    body: str = ""
    title: str | None = None
    description: str = ""
    keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class RoutedPage:
    """A markdown/MDX file that is served as its own route."""

    path: str
    raw: str


@dataclass(frozen=True)
class Listing:
    """One listing file: the image records rendered on a single route."""

    path: str
    records: Sequence[Mapping[str, Any]]

    @property
    def route(self) -> str:
        return listing_path_to_route(self.path)

    @property
    def basename(self) -> str:
        return listing_basename(self.path)

    @classmethod
    def from_payload(cls, path: str, payload: Any) -> Listing:
        """Accept either a bare array of records or an ``{"items": [...]}`` object."""
        if isinstance(payload, list):
            records = payload
        elif isinstance(payload, Mapping):
            records = payload.get("items") or []
        else:
            records = []
        return cls(path=path, records=[record for record in records if isinstance(record, Mapping)])


@dataclass(frozen=True)
class BuildStats:
    """Counters describing one index build."""

    text_documents: int
    image_documents: int
    image_records: int
    records_skipped: int
    listings_ignored: int
    pages_ignored: int


def image_identity(record: Mapping[str, Any]) -> str:
    """Case-folded slug, falling back to the filename stem; empty when neither exists."""
    return str(record.get("slug") or record.get("stem") or "").lower()


def canonical_image_url(record: Mapping[str, Any]) -> str:
    """Explicit ``url``, else ``/<section>/<slug|stem>`` when both parts are known."""
    explicit = record.get("url")
    if explicit:
        return str(explicit)
    section = record.get("section")
    name = record.get("slug") or record.get("stem")
    if section and name:
        return f"/{section}/{name}"
    return ""


@dataclass
class _ImageAccumulator:
    """Mutable build-time state for one image identity."""

    key: str
    title: str
    url: str
    text: str
    keywords: list[str]
    year: str | int | None
    artist: str
    section: str
    description: str
    slug: str | None
    stem: str | None
    thumb: str | None
    sale: str
    width: int | None
    height: int | None
    ar: float | None
    rows: int | None
    appears_on: list[str] = field(default_factory=list)

    @classmethod
    def from_record(cls, key: str, record: Mapping[str, Any], route: str, text_max_length: int) -> _ImageAccumulator:
        exif = record.get("exif")
        if not isinstance(exif, Mapping):
            exif = {}
        artist = _as_text(exif.get("artist"))
        description = _as_text(exif.get("description"))
        raw_keywords = exif.get("keywords")
        keywords = [str(k) for k in raw_keywords if k is not None] if isinstance(raw_keywords, list) else []
        year = _coerce_year(record.get("year"))
        section = _as_text(record.get("section"))
        raw_title = _as_text(record.get("title"))

        blob_parts = [raw_title, description, artist, " ".join(keywords), "" if year is None else str(year), section]
        text = " ".join(part for part in blob_parts if part)[:text_max_length]

        sale = _as_text(record.get("sale")).upper()
        return cls(
            key=key,
            title=raw_title or _as_text(record.get("stem")) or key,
            url=canonical_image_url(record),
            text=text,
            keywords=keywords,
            year=year,
            artist=artist,
            section=section,
            description=description,
            slug=_as_optional_text(record.get("slug")),
            stem=_as_optional_text(record.get("stem")),
            thumb=_as_optional_text(record.get("src")),
            sale=sale if sale in SALE_TAGS else "PRIVATE",
            width=_coerce_int(record.get("width")),
            height=_coerce_int(record.get("height")),
            ar=_coerce_float(record.get("ar")),
            rows=_coerce_int(record.get("rows")),
            appears_on=[route],
        )

    def absorb(self, record: Mapping[str, Any], route: str) -> None:
        """Backfill empty fields from a later record and remember its route."""
        if not self.thumb and record.get("src"):
            self.thumb = str(record["src"])
        if not self.url:
            self.url = canonical_image_url(record)
        if not self.section and record.get("section"):
            self.section = str(record["section"])
        if not self.title and record.get("title"):
            self.title = str(record["title"])
        if route not in self.appears_on:
            self.appears_on.append(route)

    def freeze(self) -> ImageDocument:
        return ImageDocument(
            title=self.title,
            url=self.url,
            text=self.text,
            keywords=list(self.keywords),
            year=self.year,
            artist=self.artist,
            section=self.section,
            description=self.description,
            slug=self.slug,
            stem=self.stem,
            thumb=self.thumb,
            sale=self.sale,
            width=self.width,
            height=self.height,
            ar=self.ar,
            rows=self.rows,
            appears_on=list(self.appears_on),
        )


class IndexBuilder:
    """Accumulate documents from every source, then freeze them into an :class:`IndexStore`."""

    def __init__(
        self,
        *,
        text_max_length: int = DEFAULT_TEXT_MAX_LENGTH,
        ignore_page_paths: Iterable[str] = DEFAULT_IGNORE_PAGE_PATHS,
        ignore_listings: Iterable[str] = (),
    ) -> None:
        self.text_max_length = text_max_length
        self.ignore_page_paths = frozenset(ignore_page_paths)
        self.ignore_listings = frozenset(ignore_listings)
        self._texts: list[TextDocument] = []
        self._images: dict[str, _ImageAccumulator] = {}
        self._image_records = 0
        self._records_skipped = 0
        self._listings_ignored = 0
        self._pages_ignored = 0

    def add_content_entries(self, entries: Iterable[ContentEntry]) -> None:
        for entry in entries:
            self._texts.append(
                TextDocument(
                    type=entry.kind,
                    title=entry.title or entry.slug,
                    url=f"/{entry.slug}",
                    text=strip_markup(entry.body),
                    keywords=list(entry.keywords),
                    description=entry.description or "",
                )
            )

    def add_routed_pages(self, pages: Iterable[RoutedPage]) -> None:
        for page in pages:
            url = page_path_to_route(page.path)
            if url in self.ignore_page_paths:
                self._pages_ignored += 1
                continue
            self._texts.append(
                TextDocument(
                    type="pages",
                    title=infer_title(page.raw, route_label(url)),
                    url=url,
                    text=strip_markup(page.raw),
                )
            )

    def add_listing(self, listing: Listing) -> None:
        if listing.basename in self.ignore_listings:
            self._listings_ignored += 1
            logger.debug("Ignoring listing %s", listing.path)
            return

        route = listing.route
        for record in listing.records:
            key = image_identity(record)
            if not key:
                self._records_skipped += 1
                logger.debug("Skipping image record without slug or stem in %s", listing.path)
                continue

            self._image_records += 1
            existing = self._images.get(key)
            if existing is None:
                self._images[key] = _ImageAccumulator.from_record(key, record, route, self.text_max_length)
            else:
                existing.absorb(record, route)

    def add_listings(self, listings: Iterable[Listing]) -> None:
        for listing in listings:
            self.add_listing(listing)

    def add_sources(
        self,
        *,
        content_entries: Iterable[ContentEntry] = (),
        routed_pages: Iterable[RoutedPage] = (),
        section_listings: Iterable[Listing] = (),
        collection_listings: Iterable[Listing] = (),
    ) -> None:
        """Add every source in the fixed order: sections before collections, each sorted by path."""
        self.add_content_entries(content_entries)
        self.add_routed_pages(routed_pages)
        self.add_listings(sorted(section_listings, key=lambda listing: listing.path))
        self.add_listings(sorted(collection_listings, key=lambda listing: listing.path))

    def stats(self) -> BuildStats:
        return BuildStats(
            text_documents=len(self._texts),
            image_documents=len(self._images),
            image_records=self._image_records,
            records_skipped=self._records_skipped,
            listings_ignored=self._listings_ignored,
            pages_ignored=self._pages_ignored,
        )

    def build(self) -> IndexStore:
        """Freeze the accumulated documents: textual first, then images in first-seen order."""
        documents = [*self._texts, *(image.freeze() for image in self._images.values())]
        stats = self.stats()
        logger.info(
            "Built search index: %d text documents, %d images from %d records (%d skipped)",
            stats.text_documents,
            stats.image_documents,
            stats.image_records,
            stats.records_skipped,
        )
        return IndexStore(documents=tuple(documents))


def build_index(
    *,
    content_entries: Iterable[ContentEntry] = (),
    routed_pages: Iterable[RoutedPage] = (),
    section_listings: Iterable[Listing] = (),
    collection_listings: Iterable[Listing] = (),
    text_max_length: int = DEFAULT_TEXT_MAX_LENGTH,
    ignore_page_paths: Iterable[str] = DEFAULT_IGNORE_PAGE_PATHS,
    ignore_listings: Iterable[str] = (),
) -> IndexStore:
    """Build an index from already discovered sources in one call."""
    builder = IndexBuilder(
        text_max_length=text_max_length,
        ignore_page_paths=ignore_page_paths,
        ignore_listings=ignore_listings,
    )
    builder.add_sources(
        content_entries=content_entries,
        routed_pages=routed_pages,
        section_listings=section_listings,
        collection_listings=collection_listings,
    )
    return builder.build()


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_optional_text(value: Any) -> str | None:
    text = _as_text(value)
    return text or None


def _coerce_year(value: Any) -> str | int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return text or None


def _coerce_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _coerce_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
