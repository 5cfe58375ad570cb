"""Unit tests for end-to-end query execution."""

import httpx
import pytest

from portfolio_search.adapters.index_loader import HttpIndexLoader, InMemoryIndexLoader
from portfolio_search.config import Settings
from portfolio_search.search.render import NO_IMAGES_HTML
from portfolio_search.search.store import IndexStore
from portfolio_search.service_layer.search_service import QueryEngineOptions, SearchService


pytestmark = pytest.mark.unit


@pytest.fixture
def service(raven_index) -> SearchService:
    return SearchService(InMemoryIndexLoader(raven_index))


class TestSearch:
    @pytest.mark.asyncio
    async def test_results_are_partitioned_and_rendered(self, service):
        response = await service.search("  raven ")

        assert response.query == "raven"
        assert not response.empty
        assert response.total == 3
        assert response.meta == "3 results for “raven”"
        assert [page.url for page in response.pages] == ["/raven", "/appetite"]
        assert response.pages[0].sources == ["exact", "substr", "fuzzy"]
        assert [image.title for image in response.images] == ["Ravel"]
        assert response.images_html == response.images[0].html
        assert response.pager.info == "Page 1 of 1"
        assert not response.index_error

    @pytest.mark.asyncio
    async def test_blank_query_is_empty_state(self, service):
        response = await service.search("   ")

        assert response.empty
        assert response.total == 0
        assert response.pager is None

    @pytest.mark.asyncio
    async def test_no_images_message(self, make_page):
        service = SearchService(InMemoryIndexLoader(IndexStore(documents=(make_page("Raven", "/raven"),))))

        response = await service.search("raven")

        assert response.total == 1
        assert response.images == []
        assert response.images_html == NO_IMAGES_HTML

    @pytest.mark.asyncio
    async def test_page_past_the_end(self, service):
        response = await service.search("raven", page="5", per="500")

        assert response.images == []
        assert response.images_html == ""
        assert response.pager.beyond_last
        assert response.pager.per == 96
        assert response.total == 3

    @pytest.mark.asyncio
    async def test_short_query_skips_fuzzy(self, make_page):
        service = SearchService(InMemoryIndexLoader(IndexStore(documents=(make_page("Skye", "/skye", "Isle of Skye"),))))

        response = await service.search("skx")

        assert response.total == 0

    @pytest.mark.asyncio
    async def test_unavailable_index_degrades_to_no_results(self):
        loader = HttpIndexLoader(
            "https://portfolio.example/search-index.json",
            transport=httpx.MockTransport(lambda request: httpx.Response(503)),
        )
        service = SearchService(loader)

        response = await service.search("raven")

        assert response.index_error
        assert response.total == 0
        assert response.meta == "0 results for “raven”"
        assert response.images_html == NO_IMAGES_HTML


class TestOptions:
    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("FUZZY_MIN_QUERY_LENGTH", "6")
        monkeypatch.setenv("DEFAULT_PER_PAGE", "24")

        options = QueryEngineOptions.from_settings(Settings())

        assert options.fuzzy_min_query_length == 6
        assert options.default_per_page == 24
        assert options.max_per_page == 96

    @pytest.mark.asyncio
    async def test_service_honours_per_page_default(self, monkeypatch, make_image):
        monkeypatch.setenv("DEFAULT_PER_PAGE", "2")
        store = IndexStore(documents=tuple(make_image(title=f"Raven {n}") for n in range(5)))
        service = SearchService.from_settings(InMemoryIndexLoader(store), Settings())

        response = await service.search("raven")

        assert len(response.images) == 2
        assert response.pager.total_pages == 3
        assert response.pager.next.href == "/search?q=raven&page=2&per=2"
