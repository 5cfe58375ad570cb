"""Filesystem collaborators feeding the index build.

Site layout under the data root::

    content/projects/*.md(x)          -> "projects" entries
    content/sections/*.md(x)          -> "sections" entries
    pages/**/*.md(x)                  -> routed pages
    data/sections/<section>.json      -> section listings
    data/collections/<section>/*.json -> themed collection listings

Unreadable or unparseable files are logged and skipped; the build carries on
with whatever it could load.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
import logging
from pathlib import Path

import orjson

from portfolio_search.search.normalizer import ContentEntry, Listing, RoutedPage
from portfolio_search.utils.front_matter import coerce_keywords, parse_front_matter


logger = logging.getLogger(__name__)

CONTENT_COLLECTIONS = ("projects", "sections")
MARKDOWN_SUFFIXES = (".md", ".mdx")


class DocumentLoadError(RuntimeError):
    """Raised when a source file cannot be read or decoded."""


@dataclass
class SourceBundle:
    """Everything the normalizer consumes, plus the files that failed to load."""

    content_entries: list[ContentEntry] = field(default_factory=list)
    routed_pages: list[RoutedPage] = field(default_factory=list)
    section_listings: list[Listing] = field(default_factory=list)
    collection_listings: list[Listing] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _markdown_files(root: Path) -> Iterator[Path]:
    if not root.is_dir():
        return iter(())
    return iter(sorted(path for path in root.rglob("*") if path.is_file() and path.suffix.lower() in MARKDOWN_SUFFIXES))


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentLoadError(f"Unable to read {path}: {exc}") from exc


def _entry_slug(path: Path, collection_root: Path) -> str:
    relative = path.relative_to(collection_root).with_suffix("")
    if relative.name == "index" and relative.parent != Path("."):
        relative = relative.parent
    return relative.as_posix()


def load_content_entry(path: Path, collection_root: Path, kind: str) -> ContentEntry:
    raw = _read_text(path)
    metadata, body = parse_front_matter(raw)
    title = metadata.get("title")
    description = metadata.get("description")
    return ContentEntry(
        kind=kind,
        slug=_entry_slug(path, collection_root),
        body=body,
        title=str(title) if title else None,
        description=str(description) if description else "",
        keywords=tuple(coerce_keywords(metadata.get("keywords"))),
    )


def load_listing(path: Path, root: Path) -> Listing:
    try:
        payload = orjson.loads(path.read_bytes())
    except OSError as exc:
        raise DocumentLoadError(f"Unable to read {path}: {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise DocumentLoadError(f"Invalid JSON in {path}: {exc}") from exc
    return Listing.from_payload(path.relative_to(root).as_posix(), payload)


def discover_sources(root: Path) -> SourceBundle:
    """Load every collaborator source under ``root`` in a deterministic order."""
    bundle = SourceBundle()
    if not root.is_dir():
        bundle.errors.append(f"Data directory missing: {root}")
        logger.warning("Data directory missing: %s", root)
        return bundle

    for kind in CONTENT_COLLECTIONS:
        collection_root = root / "content" / kind
        for path in _markdown_files(collection_root):
            try:
                bundle.content_entries.append(load_content_entry(path, collection_root, kind))
            except DocumentLoadError as exc:
                logger.warning("Skipping %s: %s", path, exc)
                bundle.errors.append(str(exc))

    for path in _markdown_files(root / "pages"):
        try:
            raw = _read_text(path)
        except DocumentLoadError as exc:
            logger.warning("Skipping %s: %s", path, exc)
            bundle.errors.append(str(exc))
            continue
        bundle.routed_pages.append(RoutedPage(path=path.relative_to(root).as_posix(), raw=raw))

    listing_globs = (
        (bundle.section_listings, root / "data" / "sections", "*.json"),
        (bundle.collection_listings, root / "data" / "collections", "*/*.json"),
    )
    for target, directory, pattern in listing_globs:
        if not directory.is_dir():
            continue
        for path in sorted(directory.glob(pattern)):
            if path.name == "index.json":
                continue
            try:
                target.append(load_listing(path, root))
            except DocumentLoadError as exc:
                logger.warning("Skipping %s: %s", path, exc)
                bundle.errors.append(str(exc))

    logger.debug(
        "Discovered %d content entries, %d pages, %d section listings, %d collection listings",
        len(bundle.content_entries),
        len(bundle.routed_pages),
        len(bundle.section_listings),
        len(bundle.collection_listings),
    )
    return bundle
