"""
Client TMDB : recherche paginee, details, recherche par identifiant IMDb et
table canonique des episodes.

Implemente IMetadataProvider, IDetailsProvider, IExternalIdLookup et
ISeriesProvider. Utilise le cache persistant (cache-first) et la relance sur
rate limiting.

Usage:
    cache = APICache()
    client = TMDBClient(api_key="your_key", cache=cache)
    page = await client.find_candidates("Матрица", "1999", 1)
    episodes = await client.load_canonical_episodes(identity)
    await client.close()
"""

from typing import Any, Optional

import httpx
from loguru import logger

from kinosync.adapters.api.cache import APICache
from kinosync.adapters.api.retry import fetch_json
from kinosync.core.entities import (
    Episode,
    IdKind,
    MediaIdentity,
    MediaRecord,
    SearchPage,
)
from kinosync.core.errors import ProviderUnavailableError
from kinosync.core.ports import (
    IDetailsProvider,
    IExternalIdLookup,
    IMetadataProvider,
    ISeriesProvider,
)
from kinosync.services.transliteration import contains_cyrillic
from kinosync.utils.constants import TMDB_GENRE_MAPPING, TMDB_TV_GENRE_MAPPING
from kinosync.utils.helpers import clean_title, coalesce


class TMDBClient(IMetadataProvider, IDetailsProvider, IExternalIdLookup, ISeriesProvider):
    """
    Client API TMDB pour les films et series.

    Implemente:
    - Recherche multi (films puis series) ou series seules (series_only)
    - Rechargement des details en russe
    - Recherche par identifiant IMDb (/find), series preferees
    - Chargement des episodes saison par saison
    - Cache persistant (24h recherches, 7j details)

    Attributes:
        TMDB_BASE_URL: URL de base de l'API TMDB v3
        TMDB_IMAGE_BASE_URL: URL de base des images (taille originale)
        LIBRARY_LANGUAGE: Langue des fiches de la bibliotheque

    Example:
        client = TMDBClient(api_key="xxx", cache=cache)
        page = await client.find_candidates("Inception", "2010", 1)
        await client.close()
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/original"
    LIBRARY_LANGUAGE = "ru-RU"

    def __init__(self, api_key: str, cache: APICache, series_only: bool = False) -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API TMDB (v3) ou Read Access Token (v4)
            cache: Instance APICache pour le caching des reponses
            series_only: Si True, la recherche ne porte que sur les series
        """
        self._api_key = api_key
        self._cache = cache
        self._client: Optional[httpx.AsyncClient] = None
        self.series_only = series_only

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, le cree si necessaire (lazy init).

        Supporte les deux modes d'authentification TMDB:
        - API Key v3 (32 caracteres hex) : parametre api_key
        - Read Access Token v4 (long JWT) : header Bearer
        """
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            params = {}
            if len(self._api_key) > 40:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=self.TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=30.0,
            )
        return self._client

    @property
    def name(self) -> str:
        return "tmdb"

    async def _get(self, path: str, params: dict[str, Any], cache_key: str, ttl: int) -> Any:
        async def fetch() -> Any:
            if not self._api_key:
                raise ProviderUnavailableError(self.name, "cle API absente")
            logger.debug(f"TMDB GET {path} {params}")
            return await fetch_json(self._get_client(), self.name, path, params=params)

        return await self._cache.cached(cache_key, ttl, fetch)

    async def find_candidates(self, title: str, year: str, page: int) -> SearchPage:
        """
        Recherche une page de films et series.

        Les apostrophes sont retirees de la requete. En mode series, seul
        /search/tv est interroge (en russe, sans filtre d'annee) ; sinon
        /search/multi dans la langue de la requete, films en premier.
        """
        query = title.replace("'", "")
        if self.series_only:
            path = "/search/tv"
            params = {"query": query, "page": page, "language": self.LIBRARY_LANGUAGE}
        else:
            path = "/search/multi"
            language = "ru-RU" if contains_cyrillic(query) else "en-US"
            params = {"query": query, "page": page, "language": language, "include_adult": "false"}
            if year:
                params["year"] = year

        cache_key = f"tmdb:search:{path}:{params['language']}:{query}:{year}:{page}"
        data = await self._get(path, params, cache_key, self._cache.SEARCH_TTL)

        movies: list[MediaRecord] = []
        series: list[MediaRecord] = []
        for item in data.get("results", []):
            media_type = item.get("media_type", "tv" if self.series_only else "")
            if media_type == "movie":
                movies.append(self._parse_record(item, is_series=False))
            elif media_type == "tv":
                series.append(self._parse_record(item, is_series=True))

        return SearchPage(candidates=movies + series, total_pages=int(data.get("total_pages") or 0))

    async def load_details(self, record: MediaRecord) -> Optional[MediaRecord]:
        """
        Recharge la fiche TMDB en russe (titre, resume, genres).

        Returns:
            La fiche rechargee, ou None si l'identite n'est pas TMDB ou inconnue
        """
        if record.identity.id_kind is not IdKind.TMDB:
            return None

        kind = "tv" if record.is_series else "movie"
        tmdb_id = record.identity.external_id
        data = await self._get(
            f"/{kind}/{tmdb_id}",
            {"language": self.LIBRARY_LANGUAGE},
            f"tmdb:details:{kind}:{tmdb_id}",
            self._cache.DETAILS_TTL,
        )
        if not data:
            return None
        return self._parse_record(data, is_series=record.is_series)

    async def find_by_imdb_id(self, imdb_id: str) -> Optional[MediaRecord]:
        """
        Recherche une fiche via son identifiant IMDb (/find).

        Les resultats series sont preferes aux films.
        """
        data = await self._get(
            f"/find/{imdb_id}",
            {"external_source": "imdb_id", "language": self.LIBRARY_LANGUAGE},
            f"tmdb:find:{imdb_id}",
            self._cache.DETAILS_TTL,
        )
        tv_results = data.get("tv_results") or []
        if tv_results:
            return self._parse_record(tv_results[0], is_series=True)
        movie_results = data.get("movie_results") or []
        if movie_results:
            return self._parse_record(movie_results[0], is_series=False)
        logger.debug(f"TMDB : aucune fiche pour {imdb_id}")
        return None

    async def load_canonical_episodes(self, identity: MediaIdentity) -> list[Episode]:
        """
        Charge les episodes d'une serie TMDB, saison par saison.

        Une identite IMDb est d'abord convertie via /find ; les identites
        Kinopoisk ne sont pas gerees (liste vide).
        """
        if identity.id_kind is IdKind.IMDB:
            record = await self.find_by_imdb_id(identity.external_id)
            if record is None:
                return []
            identity = record.identity
        if identity.id_kind is not IdKind.TMDB:
            return []

        tmdb_id = identity.external_id
        show = await self._get(
            f"/tv/{tmdb_id}",
            {"language": self.LIBRARY_LANGUAGE},
            f"tmdb:details:tv:{tmdb_id}",
            self._cache.DETAILS_TTL,
        )
        season_count = int(show.get("number_of_seasons") or 0)

        episodes: list[Episode] = []
        for season_number in range(1, season_count + 1):
            season = await self._get(
                f"/tv/{tmdb_id}/season/{season_number}",
                {"language": self.LIBRARY_LANGUAGE},
                f"tmdb:season:{tmdb_id}:{season_number}",
                self._cache.DETAILS_TTL,
            )
            for item in season.get("episodes", []):
                episodes.append(
                    Episode(
                        season=int(item.get("season_number") or season_number),
                        episode_number=int(item.get("episode_number") or 0),
                        provider_episode_id=str(item.get("id", "")),
                        name=clean_title(item.get("name")),
                        air_date=item.get("air_date") or "",
                    )
                )
        logger.debug(f"TMDB : {len(episodes)} episode(s) pour {identity}")
        return episodes

    def _parse_record(self, item: dict[str, Any], is_series: bool) -> MediaRecord:
        """Convertit un resultat TMDB (recherche, details ou /find) en MediaRecord."""
        tmdb_id = str(item["id"])
        release = coalesce(item.get("release_date"), item.get("first_air_date"))

        if "genres" in item:
            genres = tuple(genre["name"] for genre in item["genres"] if genre.get("name"))
        else:
            mapping = TMDB_TV_GENRE_MAPPING if is_series else TMDB_GENRE_MAPPING
            genres = tuple(
                mapping[genre_id] for genre_id in item.get("genre_ids", []) if genre_id in mapping
            )

        poster_path = item.get("poster_path")
        backdrop_path = item.get("backdrop_path")
        if is_series:
            url = f"https://www.themoviedb.org/tv/{tmdb_id}"
        else:
            url = f"https://themoviedb.org/movie/{tmdb_id}/"

        return MediaRecord(
            identity=MediaIdentity(tmdb_id, IdKind.TMDB),
            title=clean_title(coalesce(item.get("name"), item.get("title"))),
            original_title=clean_title(
                coalesce(item.get("original_name"), item.get("original_title"))
            ),
            year=release[:4] if len(release) >= 4 else "",
            description=item.get("overview") or "",
            is_series=is_series,
            canonical_url=url,
            poster_url=f"{self.TMDB_IMAGE_BASE_URL}{poster_path}" if poster_path else "",
            backdrop_url=f"{self.TMDB_IMAGE_BASE_URL}{backdrop_path}" if backdrop_path else "",
            genres=genres,
        )

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
