"""Shared test fixtures and configuration."""

from pathlib import Path
import sys

import orjson
import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from portfolio_search.domain.model import ImageDocument, TextDocument  # noqa: E402
from portfolio_search.search.store import IndexStore  # noqa: E402


# Pin every setting tests rely on so a developer's .env cannot leak in
TEST_ENV = {
    "DATA_DIR": "src",
    "INDEX_PATH": "dist/search-index.json",
    "INDEX_URL": "",
    "TEXT_MAX_LENGTH": "8000",
    "IGNORE_PAGE_PATHS": "/search",
    "IGNORE_LISTINGS": "",
    "DEFAULT_PER_PAGE": "48",
    "MAX_PER_PAGE": "96",
    "FUZZY_MIN_QUERY_LENGTH": "4",
    "LOG_LEVEL": "info",
    "JSON_LOGS": "true",
}


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def make_image():
    """Factory for image documents; the stem defaults to the slugged title."""

    def _make(**overrides) -> ImageDocument:
        fields = {
            "title": "Untitled",
            "section": "paintings",
            "appears_on": ["/paintings"],
        }
        fields.update(overrides)
        if not fields.get("slug") and not fields.get("stem"):
            fields["stem"] = fields["title"].lower().replace(" ", "-")
        return ImageDocument(**fields)

    return _make


@pytest.fixture
def make_page():
    def _make(title: str, url: str, text: str = "", **overrides) -> TextDocument:
        return TextDocument(type=overrides.pop("type", "pages"), title=title, url=url, text=text, **overrides)

    return _make


@pytest.fixture
def raven_index(make_image, make_page) -> IndexStore:
    """One document per match tier for the query ``raven``, plus noise."""
    return IndexStore(
        documents=(
            make_image(title="Ravel", stem="ravel", text="Ravel 2021 prints", keywords=["ravel"], year=2021),
            make_page("Appetite", "/appetite", "A ravenous appetite for colour."),
            make_page("Sky Study", "/sky-study", "Clouds over the harbour at dusk."),
            make_page("Raven", "/raven", "A poem about a bird."),
        )
    )


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """A small site tree with content, pages and listings."""
    content = tmp_path / "content"
    (content / "projects").mkdir(parents=True)
    (content / "sections").mkdir(parents=True)
    (content / "projects" / "exolith.md").write_text(
        "---\ntitle: Exolith Series\ndescription: Screen prints\nkeywords: [print, screenprint]\n---\n"
        "# Exolith\n\nThe series began with `code` and [a link](https://example.com).\n",
        encoding="utf-8",
    )
    (content / "sections" / "paintings.mdx").write_text(
        "---\ntitle: Paintings\n---\nimport Gallery from '../Gallery.astro';\n\nOil on canvas.\n",
        encoding="utf-8",
    )

    pages = tmp_path / "pages"
    (pages / "docs").mkdir(parents=True)
    (pages / "about.md").write_text("# About the studio\n\nWe paint ravens.\n", encoding="utf-8")
    (pages / "docs" / "index.md").write_text("---\ntitle: Docs\n---\nSetup notes.\n", encoding="utf-8")
    (pages / "search.md").write_text("# Search\n", encoding="utf-8")

    sections = tmp_path / "data" / "sections"
    sections.mkdir(parents=True)
    (sections / "paintings.json").write_bytes(
        orjson.dumps(
            [
                {
                    "slug": "raven-at-dusk",
                    "title": "Raven at Dusk",
                    "section": "paintings",
                    "year": 2022,
                    "src": "/thumbs/paintings/raven-at-dusk-w480.jpg",
                    "exif": {"artist": "A. Painter", "keywords": ["bird", "dusk"]},
                },
                {"title": "No identity"},
            ]
        )
    )
    (sections / "archive.json").write_bytes(orjson.dumps({"items": [{"slug": "Raven-At-Dusk", "section": "paintings"}]}))
    (sections / "index.json").write_bytes(b"[]")
    (sections / "broken.json").write_bytes(b"{not json")

    collections = tmp_path / "data" / "collections" / "paintings"
    collections.mkdir(parents=True)
    (collections / "birds.json").write_bytes(orjson.dumps([{"stem": "raven-at-dusk"}]))
    return tmp_path


@pytest.fixture
def clean_context():
    """Give the test a fresh request context and restore the previous one afterwards."""
    from portfolio_search.observability.context import request_context

    token = request_context.set(None)
    yield
    request_context.reset(token)
