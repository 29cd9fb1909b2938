"""
Cache persistant des reponses des fournisseurs, avec TTL differencies.

Le cache repose sur diskcache : les reponses survivent aux redemarrages, et
une passe peut etre rejouee hors ligne (offline=True) a partir des seules
reponses deja enregistrees.

TTL par defaut:
- Recherches (SEARCH_TTL): 24 heures
- Details et episodes (DETAILS_TTL): 7 jours
- Reponses de l'assistant IA et pages du tracker (LONG_TTL): 30 jours
"""

import asyncio
from functools import partial
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from diskcache import Cache
from loguru import logger

from kinosync.core.errors import ProviderUnavailableError


class APICache:
    """
    Cache asynchrone avec TTL pour les appels aux fournisseurs.

    Utilise diskcache pour la persistence et run_in_executor pour
    ne pas bloquer la boucle d'evenements.

    Attributes:
        offline: Mode rejeu, un defaut de cache devient une indisponibilite

    Example:
        cache = APICache(cache_dir=".cache/api")
        data = await cache.cached("tmdb:search:ru:inception:1", cache.SEARCH_TTL, fetch)
    """

    SEARCH_TTL = 24 * 60 * 60
    DETAILS_TTL = 7 * 24 * 60 * 60
    LONG_TTL = 30 * 24 * 60 * 60

    def __init__(self, cache_dir: str | Path = ".cache/api", offline: bool = False) -> None:
        """
        Initialise le cache avec un repertoire de stockage.

        Args:
            cache_dir: Chemin vers le repertoire du cache (cree si inexistant)
            offline: Si True, aucune requete reseau n'est autorisee
        """
        self._cache = Cache(str(cache_dir))
        self.offline = offline

    async def get(self, key: str) -> Optional[Any]:
        """Valeur stockee, ou None si absente ou expiree."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """
        Stocke une valeur avec un TTL.

        Args:
            key: Cle unique identifiant la donnee
            value: Valeur a stocker (doit etre serializable)
            ttl: Duree de vie en secondes
        """
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, partial(self._cache.set, key, value, expire=ttl)
        )

    async def cached(
        self, key: str, ttl: int, fetch: Callable[[], Awaitable[Any]]
    ) -> Any:
        """
        Retourne la valeur en cache ou l'obtient via fetch puis la stocke.

        Raises:
            ProviderUnavailableError: En mode hors ligne si la cle est absente
        """
        value = await self.get(key)
        if value is not None:
            logger.debug(f"Cache : {key}")
            return value
        if self.offline:
            raise ProviderUnavailableError("cache", f"absent du cache hors ligne : {key}")
        value = await fetch()
        await self.set(key, value, ttl)
        return value

    async def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._cache.clear)

    def close(self) -> None:
        """Ferme le cache (a appeler en fin de passe)."""
        self._cache.close()
