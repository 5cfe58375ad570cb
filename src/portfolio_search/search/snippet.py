"""Snippet extraction with query highlighting.

A snippet is a short window of a document's text around the first match,
with matches wrapped in ``<mark>``. Candidate fields are tried in order
(text, description, title) and three strategies are attempted in turn:

1. the whole-word, plural-aware pattern used by the exact stage
2. a plain case-insensitive substring
3. the span recorded by the fuzzy stage

The window keeps ``margin`` characters before the match start and
``margin + len(query)`` after it, with an ellipsis on each truncated side.
Output is HTML: everything outside the markers is escaped.
"""

from __future__ import annotations

from collections.abc import Iterator
import html
import re

from portfolio_search.domain.model import Document
from portfolio_search.search.matchers import MatchDetail, build_exact_pattern, build_highlight_pattern


ELLIPSIS = "…"
DEFAULT_MARGIN = 60
SNIPPET_FIELDS = ("text", "description", "title")


def mark(text: str, pattern: re.Pattern[str]) -> str:
    """Escape ``text`` and wrap every non-empty ``pattern`` match in ``<mark>``."""
    parts: list[str] = []
    cursor = 0
    for match in pattern.finditer(text):
        if match.start() == match.end():
            continue
        parts.append(html.escape(text[cursor : match.start()]))
        parts.append(f"<mark>{html.escape(match.group(0))}</mark>")
        cursor = match.end()
    parts.append(html.escape(text[cursor:]))
    return "".join(parts)


def highlight_title(title: str, query: str) -> str:
    """Mark every case-insensitive occurrence of the query (plus plural suffix) in a title."""
    if not title:
        return ""
    if not query:
        return html.escape(title)
    return mark(title, build_highlight_pattern(query))


def window_bounds(length: int, start: int, match_length: int, margin: int = DEFAULT_MARGIN) -> tuple[int, int]:
    return max(0, start - margin), min(length, start + match_length + margin)


def _framed(value: str, start: int, end: int, body: str) -> str:
    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(value) else ""
    return f"{prefix}{body}{suffix}"


def _field_values(document: Document) -> dict[str, str]:
    return {
        "title": document.title or "",
        "description": document.description or "",
        "text": document.text or "",
        "keywords": " ".join(document.keywords),
    }


def _candidates(values: dict[str, str]) -> Iterator[str]:
    for field in SNIPPET_FIELDS:
        value = values[field]
        if value:
            yield value


def make_snippet(
    document: Document,
    query: str,
    detail: MatchDetail | None = None,
    *,
    margin: int = DEFAULT_MARGIN,
) -> str:
    """Highlighted excerpt for ``document``, or ``""`` when nothing can be located."""
    if not query:
        return ""
    values = _field_values(document)

    exact = build_exact_pattern(query)
    highlight = build_highlight_pattern(query)
    for value in _candidates(values):
        found = exact.search(value)
        if found:
            start, end = window_bounds(len(value), found.start(), len(query), margin)
            return _framed(value, start, end, mark(value[start:end], highlight))

    needle = query.lower()
    literal = re.compile(re.escape(query), re.IGNORECASE)
    for value in _candidates(values):
        position = value.lower().find(needle)
        if position >= 0:
            start, end = window_bounds(len(value), position, len(query), margin)
            return _framed(value, start, end, mark(value[start:end], literal))

    if detail is not None:
        value = values.get(detail.field, "")
        if value and 0 <= detail.start < detail.end <= len(value):
            start = max(0, detail.start - margin)
            end = min(len(value), detail.end + margin)
            body = (
                html.escape(value[start : detail.start])
                + f"<mark>{html.escape(value[detail.start : detail.end])}</mark>"
                + html.escape(value[detail.end : end])
            )
            return _framed(value, start, end, body)

    return ""
