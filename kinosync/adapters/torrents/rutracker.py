"""
Lecture des sujets rutracker.org.

L'intitule d'un sujet a la forme "Titre russe / Titre original (Realisateur)
[1999, genres, ...]" : le dernier titre avant la parenthese et l'annee entre
crochets sont retenus. La page est encodee en windows-1251.
"""

import re
from typing import Any, Optional

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from kinosync.adapters.api.cache import APICache
from kinosync.adapters.api.retry import fetch_text
from kinosync.core.errors import TrackerParseError
from kinosync.core.ports import ITrackerClient, TrackerTopic

TOPIC_URL_RE = re.compile(r"https://rutracker\.org/forum/viewtopic\.php\?t=(\d+)")
TOPIC_TITLE_RE = re.compile(r"([^(]+)\s+\(?.*\[((?:19\d\d|20\d\d)).*")
IMDB_LINK_RE = re.compile(r"imdb\.com/title/(tt\d+)")


def parse_topic_id(comment: str) -> Optional[str]:
    match = TOPIC_URL_RE.search(comment)
    return match.group(1) if match else None


def extract_title_and_year(topic_title: str) -> tuple[str, str]:
    """
    Extrait (titre original, annee) d'un intitule de sujet.

    Raises:
        TrackerParseError: Si l'intitule ne contient pas d'annee entre crochets
    """
    match = TOPIC_TITLE_RE.search(topic_title)
    if not match:
        raise TrackerParseError(f"intitule sans titre/annee : '{topic_title}'")
    parts = [part.strip() for part in match.group(1).split("/")]
    return parts[-1], match.group(2)


def parse_topic_page(html: str) -> dict[str, Any]:
    """Intitule et identifiant IMDb d'une page de sujet."""
    soup = BeautifulSoup(html, "html.parser")
    heading = soup.select_one("#topic-title") or soup.select_one("h1.maintitle")
    if heading is not None:
        title = heading.get_text(" ", strip=True)
    elif soup.title is not None:
        title = soup.title.get_text(strip=True)
    else:
        title = ""

    imdb_id = None
    for link in soup.find_all("a", href=True):
        match = IMDB_LINK_RE.search(link["href"])
        if match:
            imdb_id = match.group(1)
            break
    return {"title": title, "imdb_id": imdb_id}


class RutrackerClient(ITrackerClient):
    """
    Lecteur des pages de sujet rutracker.

    Example:
        client = RutrackerClient(cache=cache)
        topic = await client.load_topic("https://rutracker.org/forum/viewtopic.php?t=1")
    """

    def __init__(self, cache: APICache) -> None:
        self._cache = cache
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=30.0, follow_redirects=True)
        return self._client

    def supports(self, url: str) -> bool:
        return parse_topic_id(url) is not None

    async def load_topic(self, url: str) -> TrackerTopic:
        topic_id = parse_topic_id(url)
        if topic_id is None:
            raise TrackerParseError(f"pas de sujet rutracker dans '{url}'")

        async def fetch() -> dict[str, Any]:
            logger.debug(f"Rutracker : chargement du sujet {topic_id}")
            html = await fetch_text(
                self._get_client(),
                "rutracker",
                f"https://rutracker.org/forum/viewtopic.php?t={topic_id}",
                encoding="cp1251",
            )
            return parse_topic_page(html)

        page = await self._cache.cached(f"rutracker:topic:{topic_id}", self._cache.LONG_TTL, fetch)
        title, year = extract_title_and_year(page["title"])
        logger.debug(f"Rutracker : '{page['title']}' -> '{title}' ({year})")
        return TrackerTopic(title=title, year=year, imdb_id=page.get("imdb_id"))

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
