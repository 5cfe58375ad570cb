"""Plain-text extraction and route derivation for indexed sources."""

from __future__ import annotations

from pathlib import PurePosixPath
import re


_FRONT_MATTER = re.compile(r"^---[\s\S]*?---\s*", re.MULTILINE)
_MDX_IMPORT = re.compile(r"^\s*import\s+[^;\n]+;?\s*$", re.MULTILINE)
_MDX_EXPORT = re.compile(r"^\s*export\s+[^;\n]+;?\s*$", re.MULTILINE)
_CODE_FENCE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE = re.compile(r"`[^`]*`")
_HTML_TAG = re.compile(r"<[^>]+>")
_MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_WHITESPACE = re.compile(r"\s+")

_TITLE_LINE = re.compile(r"""^\s*title:\s*["']?(.+?)["']?\s*$""", re.MULTILINE)
_H1_LINE = re.compile(r"^\s*#\s+(.+?)\s*$", re.MULTILINE)

_PAGE_SUFFIX = re.compile(r"\.mdx?$", re.IGNORECASE)
_INDEX_PAGE = re.compile(r"/index\.mdx?$", re.IGNORECASE)


def strip_markup(markdown: str | None) -> str:
    """Reduce markdown/MDX/HTML source to a single line of searchable text.

    Removes the frontmatter block, MDX import/export lines, fenced and
    inline code and HTML tags, keeps the text of markdown links, then
    collapses whitespace.
    """
    if not markdown:
        return ""
    text = _FRONT_MATTER.sub(" ", markdown, count=1)
    text = _MDX_IMPORT.sub(" ", text)
    text = _MDX_EXPORT.sub(" ", text)
    text = _CODE_FENCE.sub(" ", text)
    text = _INLINE_CODE.sub(" ", text)
    text = _HTML_TAG.sub(" ", text)
    text = _MARKDOWN_LINK.sub(r"\1", text)
    return _WHITESPACE.sub(" ", text).strip()


def infer_title(raw: str, fallback: str) -> str:
    """Frontmatter ``title:``, else the first ``# `` heading, else ``fallback``."""
    match = _TITLE_LINE.search(raw)
    if match and match.group(1).strip():
        return match.group(1).strip()
    match = _H1_LINE.search(raw)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return fallback


def page_path_to_route(path: str) -> str:
    """Map a routed page file to its URL.

    ``pages/about.mdx`` -> ``/about``, ``pages/docs/index.md`` -> ``/docs``,
    ``pages/index.md`` -> ``/``.
    """
    normalized = "/" + path.replace("\\", "/").lstrip("/")
    relative = "/" + re.sub(r"^.*/pages/", "", normalized, count=1).lstrip("/")
    if _INDEX_PAGE.search(relative):
        return _INDEX_PAGE.sub("", relative) or "/"
    return _PAGE_SUFFIX.sub("", relative)


def route_label(route: str) -> str:
    """Human fallback title for a route (``/privacy-policy`` -> ``privacy-policy``)."""
    return route.replace("/", " ").strip() or "Page"


def listing_path_to_route(path: str) -> str:
    """Map a listing JSON file to the route that renders it.

    ``data/sections/prints.json`` -> ``/prints``;
    ``data/collections/prints/systems.json`` -> ``/prints/systems``.
    """
    normalized = "/" + path.replace("\\", "/").lstrip("/")
    for marker in ("/sections/", "/collections/"):
        if marker in normalized:
            tail = normalized.split(marker, 1)[1]
            return "/" + re.sub(r"\.json$", "", tail, flags=re.IGNORECASE)
    return "/"


def listing_basename(path: str) -> str:
    return PurePosixPath(path.replace("\\", "/")).name
