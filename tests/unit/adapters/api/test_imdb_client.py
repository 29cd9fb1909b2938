"""
Tests unitaires pour IMDbClient et l'analyse de la page de resultats.
"""

import httpx
import pytest
import respx

from kinosync.adapters.api.cache import APICache
from kinosync.adapters.api.imdb_client import IMDbClient, parse_search_results
from kinosync.core.entities import IdKind
from tests.fixtures.imdb_html import IMDB_FIND_EMPTY_HTML, IMDB_FIND_HTML

FIND_URL = "https://www.imdb.com/find"


class TestParseSearchResults:
    """Tests pour parse_search_results()."""

    def test_titles_years_and_ids(self) -> None:
        records = parse_search_results(IMDB_FIND_HTML)

        assert [r.identity.external_id for r in records] == ["tt0118767", "tt2396135"]
        brat, kitchen = records
        assert brat.title == "Brat"
        assert brat.year == "1997"
        assert brat.identity.id_kind is IdKind.IMDB
        assert not brat.is_series
        assert brat.canonical_url == "https://www.imdb.com/title/tt0118767"
        assert kitchen.year == "2012"
        assert kitchen.is_series

    def test_poster_from_srcset(self) -> None:
        brat = parse_search_results(IMDB_FIND_HTML)[0]
        assert brat.poster_url == "https://m.media-amazon.com/images/M/brat_UX45.jpg"

    def test_empty_page(self) -> None:
        assert parse_search_results(IMDB_FIND_EMPTY_HTML) == []


class TestFindCandidates:
    """Tests pour IMDbClient.find_candidates()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_single_page_of_results(self, api_cache: APICache) -> None:
        route = respx.get(FIND_URL).mock(return_value=httpx.Response(200, text=IMDB_FIND_HTML))
        client = IMDbClient(cache=api_cache)

        page = await client.find_candidates("Brat", "1997", 1)
        await client.close()

        assert page.total_pages == 1
        assert len(page.candidates) == 2
        params = route.calls.last.request.url.params
        assert params["q"] == "Brat"
        assert params["s"] == "tt"
        assert params["year"] == "1997"

    @pytest.mark.asyncio
    @respx.mock
    async def test_second_page_is_empty(self, api_cache: APICache) -> None:
        route = respx.get(FIND_URL).mock(return_value=httpx.Response(200, text=IMDB_FIND_HTML))
        client = IMDbClient(cache=api_cache)

        page = await client.find_candidates("Brat", "1997", 2)

        assert page.candidates == []
        assert route.call_count == 0
