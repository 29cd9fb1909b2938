"""
Tests unitaires pour la lecture des sujets rutracker.
"""

import httpx
import pytest
import respx

from kinosync.adapters.api.cache import APICache
from kinosync.adapters.torrents.rutracker import (
    RutrackerClient,
    extract_title_and_year,
    parse_topic_id,
    parse_topic_page,
)
from kinosync.core.errors import TrackerParseError

TOPIC_URL = "https://rutracker.org/forum/viewtopic.php"

TOPIC_HTML = """
<html><head><title>rutracker.org</title></head><body>
<h1 class="maintitle"><a id="topic-title" href="viewtopic.php?t=1">Брат / Brat (Алексей Балабанов) [1997, драма, криминал, DVDRip]</a></h1>
<div class="post_body">
  <a href="https://www.imdb.com/title/tt0118767/" class="postLink">IMDb</a>
</div>
</body></html>
"""


class TestParsing:
    """Tests des fonctions d'analyse."""

    def test_parse_topic_id(self) -> None:
        assert parse_topic_id("https://rutracker.org/forum/viewtopic.php?t=4211371") == "4211371"
        assert parse_topic_id("https://example.org/?t=1") is None

    def test_extract_title_and_year(self) -> None:
        title, year = extract_title_and_year(
            "Брат / Brat (Алексей Балабанов) [1997, драма, криминал, DVDRip]"
        )
        assert (title, year) == ("Brat", "1997")

    def test_extract_single_title(self) -> None:
        assert extract_title_and_year("Кухня [2012, комедия, WEB-DL]") == ("Кухня", "2012")

    def test_extract_without_year_raises(self) -> None:
        with pytest.raises(TrackerParseError):
            extract_title_and_year("Сборник фильмов")

    def test_parse_topic_page(self) -> None:
        page = parse_topic_page(TOPIC_HTML)
        assert page["title"].startswith("Брат / Brat")
        assert page["imdb_id"] == "tt0118767"


class TestLoadTopic:
    """Tests pour RutrackerClient.load_topic()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_page_decoded_from_cp1251(self, api_cache: APICache) -> None:
        route = respx.get(TOPIC_URL).mock(
            return_value=httpx.Response(200, content=TOPIC_HTML.encode("cp1251"))
        )
        client = RutrackerClient(cache=api_cache)

        topic = await client.load_topic("https://rutracker.org/forum/viewtopic.php?t=1")
        await client.close()

        assert topic.title == "Brat"
        assert topic.year == "1997"
        assert topic.imdb_id == "tt0118767"
        assert route.calls.last.request.url.params["t"] == "1"

    @pytest.mark.asyncio
    async def test_unsupported_url(self, api_cache: APICache) -> None:
        client = RutrackerClient(cache=api_cache)

        assert not client.supports("https://nnmclub.to/forum/viewtopic.php?t=1")
        with pytest.raises(TrackerParseError):
            await client.load_topic("https://nnmclub.to/forum/viewtopic.php?t=1")
