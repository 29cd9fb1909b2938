"""
Client Kinopoisk (api.kinopoisk.dev v1.4).

Recherche paginee par titre. L'identite d'un resultat privilegie l'identifiant
TMDB, puis l'identifiant IMDb, puis l'identifiant Kinopoisk, afin que les
resultats des differentes sources convergent vers la meme cle.
"""

from typing import Any, Optional

import httpx
from loguru import logger

from kinosync.adapters.api.cache import APICache
from kinosync.adapters.api.retry import fetch_json
from kinosync.core.entities import IdKind, MediaIdentity, MediaRecord, SearchPage
from kinosync.core.errors import ProviderUnavailableError
from kinosync.core.ports import IMetadataProvider
from kinosync.utils.constants import KINOPOISK_MOVIE_TYPES, KINOPOISK_SERIES_TYPES
from kinosync.utils.helpers import clean_title, coalesce


def select_titles(movie: dict[str, Any]) -> tuple[str, str, str]:
    """
    Choisit (titre, titre original, titre alternatif) d'un resultat Kinopoisk.

    Le titre russe (name) est prefere ; le titre original est alternativeName
    ou, a defaut, enName. La liste names fournit un titre de secours et un
    titre alternatif.
    """
    name = clean_title(movie.get("name"))
    en_name = clean_title(movie.get("enName"))
    alternative = clean_title(movie.get("alternativeName"))

    title = coalesce(name, en_name, alternative)
    original = alternative
    if title == original and en_name and en_name != name:
        original = en_name

    other = ""
    for entry in movie.get("names") or []:
        candidate = clean_title(entry.get("name"))
        if not candidate:
            continue
        if title == original and candidate != title:
            title = candidate
        elif candidate != title and candidate != alternative:
            other = candidate
    return title, original, other


class KinopoiskClient(IMetadataProvider):
    """
    Client de recherche Kinopoisk.

    Attributes:
        KINOPOISK_BASE_URL: URL de base de l'API
        PAGE_SIZE: Nombre de resultats par page
        series_only: Si True, seules les series sont retenues

    Example:
        client = KinopoiskClient(api_key="xxx", cache=cache)
        page = await client.find_candidates("Кухня", "", 1)
    """

    KINOPOISK_BASE_URL = "https://api.kinopoisk.dev/v1.4"
    PAGE_SIZE = 20

    def __init__(self, api_key: str, cache: APICache, series_only: bool = False) -> None:
        self._api_key = api_key
        self._cache = cache
        self._client: Optional[httpx.AsyncClient] = None
        self.series_only = series_only

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.KINOPOISK_BASE_URL,
                headers={"Accept": "application/json", "X-API-KEY": self._api_key},
                timeout=30.0,
            )
        return self._client

    @property
    def name(self) -> str:
        return "kinopoisk"

    async def find_candidates(self, title: str, year: str, page: int) -> SearchPage:
        """
        Recherche une page de resultats Kinopoisk.

        L'annee n'est pas transmise : elle n'intervient que dans le scoring.
        """
        params = {"page": page, "limit": self.PAGE_SIZE, "query": title}

        async def fetch() -> Any:
            if not self._api_key:
                raise ProviderUnavailableError(self.name, "cle API absente")
            logger.debug(f"Kinopoisk : recherche '{title}' page {page}")
            return await fetch_json(self._get_client(), self.name, "/movie/search", params=params)

        data = await self._cache.cached(
            f"kinopoisk:search:{title}:{page}", self._cache.SEARCH_TTL, fetch
        )

        allowed = KINOPOISK_SERIES_TYPES if self.series_only else KINOPOISK_MOVIE_TYPES | KINOPOISK_SERIES_TYPES
        candidates = []
        for movie in data.get("docs", []):
            if movie.get("type") not in allowed:
                continue
            if self.series_only and not movie.get("isSeries"):
                continue
            candidates.append(self._parse_record(movie))

        return SearchPage(candidates=candidates, total_pages=int(data.get("pages") or 0))

    @staticmethod
    def _parse_record(movie: dict[str, Any]) -> MediaRecord:
        is_series = bool(movie.get("isSeries"))
        external = movie.get("externalId") or {}

        if external.get("tmdb"):
            identity = MediaIdentity(str(external["tmdb"]), IdKind.TMDB)
            if is_series:
                url = f"https://www.themoviedb.org/tv/{identity.external_id}"
            else:
                url = f"https://themoviedb.org/movie/{identity.external_id}/"
        elif external.get("imdb"):
            identity = MediaIdentity(external["imdb"], IdKind.IMDB)
            url = f"https://www.imdb.com/title/{identity.external_id}"
        else:
            identity = MediaIdentity(str(movie["id"]), IdKind.KINOPOISK)
            section = "series" if is_series else "film"
            url = f"https://www.kinopoisk.ru/{section}/{identity.external_id}/"

        title, original, alternative = select_titles(movie)
        year = movie.get("year") or 0

        return MediaRecord(
            identity=identity,
            title=title,
            original_title=original,
            alternative_title=alternative,
            year=str(year) if year > 1900 else "",
            description=movie.get("description") or "",
            is_series=is_series,
            canonical_url=url,
            poster_url=(movie.get("poster") or {}).get("url") or "",
            backdrop_url=(movie.get("backdrop") or {}).get("url") or "",
            genres=tuple(
                genre["name"] for genre in movie.get("genres") or [] if genre.get("name")
            ),
        )

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
