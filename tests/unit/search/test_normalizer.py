"""Unit tests for index assembly from content entries, pages and listings."""

import pytest

from portfolio_search.domain.model import ImageDocument, TextDocument
from portfolio_search.search.normalizer import (
    ContentEntry,
    IndexBuilder,
    Listing,
    RoutedPage,
    build_index,
    canonical_image_url,
    image_identity,
)


pytestmark = pytest.mark.unit


def _only_image(index) -> ImageDocument:
    images = index.image_documents
    assert len(images) == 1
    return images[0]


class TestImageIdentity:
    def test_slug_is_case_folded(self):
        assert image_identity({"slug": "Raven-At-Dusk", "stem": "other"}) == "raven-at-dusk"

    def test_falls_back_to_stem(self):
        assert image_identity({"stem": "IMG_001"}) == "img_001"

    def test_missing_identity(self):
        assert image_identity({"title": "Nameless"}) == ""

    def test_canonical_url(self):
        assert canonical_image_url({"url": "/x"}) == "/x"
        assert canonical_image_url({"section": "prints", "stem": "p1"}) == "/prints/p1"
        assert canonical_image_url({"stem": "p1"}) == ""


class TestImageMerge:
    def test_same_image_on_many_routes_becomes_one_document(self):
        record = {"slug": "raven", "title": "Raven", "section": "paintings"}
        index = build_index(
            section_listings=[
                Listing("data/sections/paintings.json", [record, record]),
                Listing("data/sections/archive.json", [{"slug": "RAVEN"}]),
            ],
            collection_listings=[Listing("data/collections/paintings/birds.json", [{"stem": "raven"}])],
        )

        image = _only_image(index)
        assert image.appears_on == ["/archive", "/paintings", "/paintings/birds"]
        assert len(image.appears_on) == len(set(image.appears_on))

    def test_first_seen_wins_and_empty_fields_are_backfilled(self):
        builder = IndexBuilder()
        builder.add_listing(Listing("data/sections/paintings.json", [{"slug": "raven", "title": "Raven"}]))
        builder.add_listing(
            Listing(
                "data/sections/prints.json",
                [{"slug": "raven", "title": "Raven (print)", "src": "/thumbs/prints/raven-w480.jpg", "section": "prints"}],
            )
        )

        image = _only_image(builder.build())
        assert image.title == "Raven"
        assert image.thumb == "/thumbs/prints/raven-w480.jpg"
        assert image.section == "prints"
        assert image.url == "/prints/raven"
        assert image.appears_on == ["/paintings", "/prints"]

    def test_records_without_identity_are_skipped(self):
        builder = IndexBuilder()
        builder.add_listing(Listing("data/sections/paintings.json", [{"title": "Nameless"}, {"stem": "kept"}]))

        stats = builder.stats()
        assert stats.records_skipped == 1
        assert stats.image_records == 1
        assert [doc.stem for doc in builder.build().image_documents] == ["kept"]

    def test_ignored_listing_contributes_nothing(self):
        index = build_index(
            section_listings=[
                Listing("data/sections/archive.json", [{"slug": "only-in-archive"}]),
                Listing("data/sections/paintings.json", [{"slug": "raven"}]),
            ],
            ignore_listings=["archive.json"],
        )

        image = _only_image(index)
        assert image.slug == "raven"
        assert image.appears_on == ["/paintings"]


class TestImageFields:
    def test_text_blob_collects_metadata(self):
        record = {
            "slug": "raven",
            "title": "Raven",
            "section": "paintings",
            "year": "2019-2020",
            "exif": {"artist": "A. Painter", "description": "Oil on linen", "keywords": ["bird", None, "night"]},
        }
        image = _only_image(build_index(section_listings=[Listing("data/sections/paintings.json", [record])]))

        assert image.text == "Raven Oil on linen A. Painter bird night 2019-2020 paintings"
        assert image.keywords == ["bird", "night"]
        assert image.artist == "A. Painter"
        assert image.description == "Oil on linen"
        assert image.parsed_year() == 2019

    def test_text_blob_is_truncated(self):
        record = {"slug": "long", "title": "x" * 50}
        index = build_index(section_listings=[Listing("data/sections/a.json", [record])], text_max_length=10)

        assert _only_image(index).text == "x" * 10

    def test_title_falls_back_to_stem(self):
        image = _only_image(build_index(section_listings=[Listing("data/sections/a.json", [{"stem": "IMG_7"}])]))
        assert image.title == "IMG_7"

    @pytest.mark.parametrize(("raw", "expected"), [("a", "A"), ("W", "W"), ("sold", "PRIVATE"), (None, "PRIVATE")])
    def test_sale_tag(self, raw, expected):
        record = {"slug": "s", "sale": raw}
        image = _only_image(build_index(section_listings=[Listing("data/sections/a.json", [record])]))
        assert image.sale == expected

    def test_numeric_fields_are_coerced(self):
        record = {"slug": "s", "width": "1200", "height": 900, "ar": "0.75", "rows": "bad"}
        image = _only_image(build_index(section_listings=[Listing("data/sections/a.json", [record])]))
        assert (image.width, image.height, image.ar, image.rows) == (1200, 900, 0.75, None)


class TestTextDocuments:
    def test_content_entries(self):
        index = build_index(
            content_entries=[
                ContentEntry(kind="projects", slug="exolith", body="# Exolith\n\nScreen `code` prints", title="Exolith"),
                ContentEntry(kind="sections", slug="paintings", keywords=("oil",)),
            ]
        )

        first, second = index.text_documents
        assert first == TextDocument(type="projects", title="Exolith", url="/exolith", text="# Exolith Screen prints")
        assert second.title == "paintings"
        assert second.keywords == ["oil"]

    def test_routed_pages_skip_ignored_routes(self):
        builder = IndexBuilder()
        builder.add_routed_pages(
            [
                RoutedPage("pages/about.md", "# About\n\nHello"),
                RoutedPage("pages/search.md", "# Search"),
                RoutedPage("pages/privacy-policy.md", "No heading here"),
            ]
        )

        index = builder.build()
        assert [(doc.url, doc.title) for doc in index] == [("/about", "About"), ("/privacy-policy", "privacy-policy")]
        assert builder.stats().pages_ignored == 1

    def test_text_documents_precede_images(self):
        index = build_index(
            content_entries=[ContentEntry(kind="projects", slug="p")],
            section_listings=[Listing("data/sections/a.json", [{"slug": "img"}])],
        )
        assert [doc.type for doc in index] == ["projects", "image"]


class TestDeterminism:
    def test_listing_order_is_fixed_by_path(self):
        first = build_index(
            section_listings=[
                Listing("data/sections/b.json", [{"slug": "x", "title": "From B"}]),
                Listing("data/sections/a.json", [{"slug": "x", "title": "From A"}]),
            ]
        )
        second = build_index(
            section_listings=[
                Listing("data/sections/a.json", [{"slug": "x", "title": "From A"}]),
                Listing("data/sections/b.json", [{"slug": "x", "title": "From B"}]),
            ]
        )

        assert first.to_json() == second.to_json()
        assert _only_image(first).title == "From A"

    def test_sections_are_added_before_collections(self):
        builder = IndexBuilder()
        builder.add_sources(
            collection_listings=[Listing("data/collections/paintings/birds.json", [{"slug": "x"}])],
            section_listings=[
                Listing("data/sections/paintings.json", [{"slug": "x"}]),
                Listing("data/sections/archive.json", [{"slug": "x"}]),
            ],
        )

        assert _only_image(builder.build()).appears_on == ["/archive", "/paintings", "/paintings/birds"]
        assert builder.stats().image_records == 3

    def test_listing_payload_shapes(self):
        assert len(Listing.from_payload("a.json", [{"slug": "a"}, "junk"]).records) == 1
        assert len(Listing.from_payload("a.json", {"items": [{"slug": "a"}]}).records) == 1
        assert Listing.from_payload("a.json", "nope").records == []
