"""
Recherche IMDb par la page HTML de resultats (BeautifulSoup).

IMDb ne propose pas d'API publique de recherche : la page /find est analysee
et une seule page de resultats est exploitee. Les fiches obtenues ne portent
qu'un titre, une annee et l'identifiant tt ; la cascade les complete ensuite
via TMDB (/find).
"""

import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from kinosync.adapters.api.cache import APICache
from kinosync.adapters.api.retry import fetch_text
from kinosync.core.entities import IdKind, MediaIdentity, MediaRecord, SearchPage
from kinosync.core.ports import IMetadataProvider
from kinosync.utils.helpers import clean_title

IMDB_ID_RE = re.compile(r"/title/(tt\d+)/?")
YEAR_RE = re.compile(r"(?:19|20)\d\d")
SERIES_LABELS = frozenset({"TV Series", "TV Mini Series"})
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)


def parse_search_results(html: str) -> list[MediaRecord]:
    """
    Extrait les fiches d'une page de resultats IMDb.

    Les resultats dont le lien ne contient pas d'identifiant tt sont ignores.
    """
    soup = BeautifulSoup(html, "html.parser")
    records = []
    for item in soup.select(".find-result-item"):
        link = item.select_one("a.ipc-metadata-list-summary-item__t")
        if link is None:
            continue
        match = IMDB_ID_RE.search(link.get("href", ""))
        if not match:
            logger.debug(f"IMDb : identifiant introuvable pour '{link.get_text(strip=True)}'")
            continue

        imdb_id = match.group(1)
        year = ""
        first_info = item.select_one("li.ipc-inline-list__item")
        if first_info is not None:
            year_match = YEAR_RE.search(first_info.get_text())
            year = year_match.group(0) if year_match else ""

        labels = {
            node.get_text(strip=True)
            for node in item.select("span.ipc-metadata-list-summary-item__li, li.ipc-inline-list__item")
        }

        poster_url = ""
        image = item.find("img")
        if image is not None:
            srcset = image.get("srcset", "")
            poster_url = srcset.split(",")[0].split(" ")[0] if srcset else image.get("src", "")

        records.append(
            MediaRecord(
                identity=MediaIdentity(imdb_id, IdKind.IMDB),
                title=clean_title(link.get_text()),
                year=year,
                is_series=bool(labels & SERIES_LABELS),
                canonical_url=f"https://www.imdb.com/title/{imdb_id}",
                poster_url=poster_url,
            )
        )
    return records


class IMDbClient(IMetadataProvider):
    """
    Recherche de titres sur imdb.com.

    Example:
        client = IMDbClient(cache=cache)
        page = await client.find_candidates("The Matrix", "1999", 1)
    """

    IMDB_BASE_URL = "https://www.imdb.com"

    def __init__(self, cache: APICache) -> None:
        self._cache = cache
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.IMDB_BASE_URL,
                headers={"User-Agent": USER_AGENT, "Accept-Language": "ru-RU,ru;q=0.9"},
                timeout=30.0,
                follow_redirects=True,
            )
        return self._client

    @property
    def name(self) -> str:
        return "imdb"

    async def find_candidates(self, title: str, year: str, page: int) -> SearchPage:
        """Une seule page de resultats est disponible (total_pages = 1)."""
        if page > 1:
            return SearchPage(candidates=[], total_pages=1)

        query = title.replace("'", "")
        params = {"q": query, "s": "tt"}
        if year:
            params["year"] = year

        async def fetch() -> str:
            logger.debug(f"IMDb : recherche '{query}'")
            return await fetch_text(self._get_client(), self.name, "/find", params=params)

        html = await self._cache.cached(f"imdb:search:{query}:{year}", self._cache.SEARCH_TTL, fetch)
        return SearchPage(candidates=parse_search_results(html), total_pages=1)

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
