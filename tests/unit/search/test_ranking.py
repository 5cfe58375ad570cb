"""Unit tests for stage fusion and result ordering."""

import pytest

from portfolio_search.search.matchers import EXACT, FUZZY, SUBSTRING, MatchDetail, StageHit
from portfolio_search.search.ranking import fuse, fuse_and_rank, merge_hit, rank
from portfolio_search.service_layer.search_service import run_match_stages


pytestmark = pytest.mark.unit


class TestFusion:
    def test_hits_for_one_document_are_merged(self, make_page):
        doc = make_page("Raven", "/raven")
        fused = fuse(
            [
                [StageHit("/raven", doc, EXACT, 100.0, MatchDetail("title", 0, 5))],
                [StageHit("/raven", doc, SUBSTRING, 70.0, MatchDetail("text", 3, 8))],
                [StageHit("/raven", doc, FUZZY, 50.0, MatchDetail("text", 3, 8))],
            ]
        )

        assert len(fused) == 1
        assert fused[0].sources == frozenset({EXACT, SUBSTRING, FUZZY})
        assert fused[0].sorted_sources == [EXACT, SUBSTRING, FUZZY]
        assert fused[0].score == 100.0
        assert fused[0].detail == MatchDetail("title", 0, 5)

    def test_more_precise_detail_replaces_earlier_one(self, make_page):
        doc = make_page("Raven", "/raven")
        fuzzy_first = merge_hit(None, StageHit("/raven", doc, FUZZY, 50.0, MatchDetail("text", 9, 12)))
        merged = merge_hit(fuzzy_first, StageHit("/raven", doc, SUBSTRING, 70.0, MatchDetail("title", 0, 5)))

        assert merged.detail == MatchDetail("title", 0, 5)
        assert merged.detail_stage == SUBSTRING
        assert fuzzy_first.sources == frozenset({FUZZY})

    def test_less_precise_detail_does_not_override(self, make_page):
        doc = make_page("Raven", "/raven")
        exact = merge_hit(None, StageHit("/raven", doc, EXACT, 100.0, MatchDetail("title", 0, 5)))
        merged = merge_hit(exact, StageHit("/raven", doc, FUZZY, 50.0, MatchDetail("text", 9, 12)))

        assert merged.detail_stage == EXACT
        assert merged.tier == 0


class TestOrdering:
    def test_tiers_dominate(self, raven_index):
        ranked = run_match_stages("raven", raven_index)

        assert [hit.document.title for hit in ranked] == ["Raven", "Appetite", "Ravel"]
        assert [hit.tier for hit in ranked] == [0, 1, 2]

    def test_newer_years_first_within_a_tier(self, make_image):
        documents = [
            make_image(title="Raven undated"),
            make_image(title="Raven old", year="2019 (reworked 2021)"),
            make_image(title="Raven new", year=2023),
        ]
        hits = [StageHit(doc.identity, doc, EXACT, 100.0) for doc in documents]

        assert [hit.document.title for hit in fuse_and_rank([hits])] == ["Raven new", "Raven old", "Raven undated"]

    def test_score_then_title_break_ties(self, make_page):
        zulu = make_page("Zulu", "/zulu")
        alpha = make_page("alpha", "/alpha")
        bravo = make_page("Bravo", "/bravo")
        hits = [
            StageHit("/zulu", zulu, SUBSTRING, 70.0),
            StageHit("/bravo", bravo, SUBSTRING, 69.98),
            StageHit("/alpha", alpha, SUBSTRING, 69.98),
        ]

        assert [hit.document.title for hit in rank(fuse([hits]))] == ["Zulu", "alpha", "Bravo"]
