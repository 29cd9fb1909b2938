"""
Relance avec backoff exponentiel pour les appels HTTP des fournisseurs.

Les reponses 429 (rate limiting) sont relancees avec un delai croissant et du
jitter aleatoire. Les autres erreurs de transport ou HTTP sont converties en
ProviderUnavailableError par fetch_json, que la cascade sait absorber.

Usage:
    response = await request_with_retry(client, "GET", url)
    data = await fetch_json(client, "tmdb", "/search/multi", params=params)
    html = await fetch_text(client, "rutracker", url, encoding="cp1251")
"""

from typing import Any, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from kinosync.core.errors import ProviderUnavailableError


class RateLimitError(Exception):
    """
    Exception levee quand l'API retourne 429 Too Many Requests.

    Attributes:
        retry_after: Secondes a attendre (header Retry-After), ou None
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s")


def with_retry(max_attempts: int = 5, max_wait: int = 60):
    """
    Decorateur qui relance sur RateLimitError avec backoff exponentiel.

    Args:
        max_attempts: Nombre maximum de tentatives
        max_wait: Delai maximum entre deux tentatives, en secondes
    """
    return retry(
        retry=retry_if_exception_type(RateLimitError),
        wait=wait_random_exponential(multiplier=1, min=1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    )


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 5,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec relance automatique sur 429.

    Raises:
        RateLimitError: Si 429 apres epuisement des tentatives
        httpx.HTTPStatusError: Pour les autres erreurs HTTP
    """

    @with_retry(max_attempts=max_attempts)
    async def _do_request() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code == 429:
            retry_after_header = response.headers.get("Retry-After")
            retry_after = int(retry_after_header) if retry_after_header else None
            raise RateLimitError(retry_after)
        response.raise_for_status()
        return response

    return await _do_request()


async def fetch_json(
    client: httpx.AsyncClient,
    provider: str,
    url: str,
    max_attempts: int = 5,
    **kwargs,
) -> Any:
    """
    GET avec relance, retourne le corps JSON.

    Une reponse 404 donne un dictionnaire vide.

    Raises:
        ProviderUnavailableError: Transport en echec, erreur HTTP ou JSON invalide
    """
    try:
        response = await request_with_retry(
            client, "GET", url, max_attempts=max_attempts, **kwargs
        )
        return response.json()
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code == 404:
            return {}
        raise ProviderUnavailableError(provider, f"HTTP {exc.response.status_code}") from exc
    except (httpx.HTTPError, RateLimitError, ValueError) as exc:
        raise ProviderUnavailableError(provider, str(exc) or type(exc).__name__) from exc


async def fetch_text(
    client: httpx.AsyncClient,
    provider: str,
    url: str,
    encoding: Optional[str] = None,
    **kwargs,
) -> str:
    """
    GET avec relance, retourne le corps decode (encodage force si fourni).

    Raises:
        ProviderUnavailableError: Transport en echec ou erreur HTTP
    """
    try:
        response = await request_with_retry(client, "GET", url, **kwargs)
    except httpx.HTTPStatusError as exc:
        raise ProviderUnavailableError(provider, f"HTTP {exc.response.status_code}") from exc
    except (httpx.HTTPError, RateLimitError) as exc:
        raise ProviderUnavailableError(provider, str(exc) or type(exc).__name__) from exc
    if encoding:
        return response.content.decode(encoding, errors="replace")
    return response.text
