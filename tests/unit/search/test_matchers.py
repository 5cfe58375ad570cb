"""Unit tests for the exact, substring and fuzzy match stages."""

import pytest

from portfolio_search.search.matchers import (
    EXACT,
    FUZZY,
    SUBSTRING,
    MatchDetail,
    build_exact_pattern,
    exact_stage,
    fuzzy_stage,
    query_variants,
    substring_stage,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def print_docs(make_page):
    return [
        make_page("Editions", "/editions", "Limited edition prints"),
        make_page("Supplies", "/supplies", "A printer cartridge"),
        make_page("Single", "/single", "One single print on paper"),
    ]


class TestQueryVariants:
    @pytest.mark.parametrize(
        ("query", "variants"),
        [
            ("glasses", ["glasses", "glass"]),
            ("boxes", ["boxes", "box"]),
            ("brushes", ["brushes", "brush"]),
            ("notes", ["notes", "note"]),
            ("tones", ["tones", "tone"]),
            ("Ravens", ["Ravens", "Raven"]),
        ],
    )
    def test_plural_suffix_adds_singular_form(self, query, variants):
        assert query_variants(query) == variants

    def test_double_s_is_not_a_plural(self):
        assert query_variants("glass") == ["glass"]

    def test_short_stems_are_not_derived(self):
        assert query_variants("us") == ["us"]
        assert query_variants("bus") == ["bus"]

    def test_singular_query_is_unchanged(self):
        assert query_variants("raven") == ["raven"]


class TestExactStage:
    def test_singular_query_matches_plural_but_not_longer_words(self, print_docs):
        hits = exact_stage("print", print_docs)
        assert [hit.identity for hit in hits] == ["/editions", "/single"]
        assert all(hit.stage == EXACT and hit.score == 100.0 for hit in hits)

    def test_plural_query_matches_singular(self, print_docs):
        hits = exact_stage("prints", print_docs)
        assert [hit.identity for hit in hits] == ["/editions", "/single"]

    def test_plural_query_does_not_match_shorter_stem(self, make_page):
        docs = [
            make_page("Studio", "/studio", "This is not a studio page."),
            make_page("Sketchbook", "/sketchbook", "A page of notes and one note more."),
        ]

        hits = exact_stage("notes", docs)

        assert [hit.identity for hit in hits] == ["/sketchbook"]
        assert hits[0].detail == MatchDetail("text", 10, 15)

    def test_pattern_is_case_insensitive_whole_word(self):
        pattern = build_exact_pattern("Raven")
        assert pattern.search("the RAVENS flew")
        assert not pattern.search("ravenous")

    def test_detail_points_into_first_matching_field(self, raven_index):
        hits = exact_stage("raven", raven_index.documents)

        assert [hit.identity for hit in hits] == ["/raven"]
        assert hits[0].detail == MatchDetail("title", 0, 5)

    def test_keyword_detail_uses_joined_offsets(self, make_page):
        doc = make_page("Untitled", "/u", keywords=["oil", "raven"])
        assert exact_stage("raven", [doc])[0].detail == MatchDetail("keywords", 4, 9)


class TestSubstringStage:
    def test_scores_decrease_with_position(self, raven_index):
        hits = substring_stage("raven", raven_index.documents)

        assert [hit.identity for hit in hits] == ["/appetite", "/raven"]
        assert hits[0].score == pytest.approx(70.0)
        assert hits[1].score == pytest.approx(69.99)
        assert all(hit.stage == SUBSTRING for hit in hits)

    def test_detail_spans_the_literal_match(self, raven_index):
        hit = substring_stage("RAVEN", raven_index.documents)[0]
        assert hit.detail == MatchDetail("text", 2, 7)


class TestFuzzyStage:
    def test_short_queries_never_run(self, make_page):
        doc = make_page("Skye", "/skye", "Skye at dawn", keywords=["skye"])
        assert fuzzy_stage("sky", [doc]) == []

    def test_typo_finds_document(self, make_page):
        doc = make_page("Raven", "/raven", "Raven in snow", keywords=["raven"])
        hits = fuzzy_stage("ravn", [doc])

        assert [hit.identity for hit in hits] == ["/raven"]
        assert hits[0].stage == FUZZY
        assert hits[0].score == pytest.approx(50.0)
        assert hits[0].detail is not None

    def test_unrelated_documents_are_rejected(self, raven_index):
        identities = [hit.identity for hit in fuzzy_stage("raven", raven_index.documents)]
        assert "/sky-study" not in identities
        assert "ravel" in identities
