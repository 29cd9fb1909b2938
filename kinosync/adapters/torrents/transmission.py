"""
Client RPC Transmission (JSON-RPC sur httpx).

La liste des torrents est chargee une seule fois par passe et indexee par
chemin racine (downloadDir/name) en minuscules. Transmission exige un jeton de
session : la premiere requete recoit une reponse 409 portant l'en-tete
X-Transmission-Session-Id, a renvoyer avec la requete suivante.
"""

from pathlib import Path
from typing import Any, Optional

import httpx
from loguru import logger

from kinosync.core.errors import ProviderUnavailableError
from kinosync.core.ports import ITorrentSource

SESSION_HEADER = "X-Transmission-Session-Id"
TORRENT_FIELDS = ["id", "downloadDir", "name", "comment"]


def torrent_key(path: str | Path) -> str:
    return str(path).rstrip("/\\").lower()


class TransmissionSource(ITorrentSource):
    """
    Index des torrents Transmission par chemin.

    Example:
        source = TransmissionSource("http://localhost:9091/transmission/rpc")
        comment = await source.comment_for(Path("/downloads/Brat.1997"))
    """

    def __init__(self, rpc_url: str) -> None:
        self._rpc_url = rpc_url
        self._session_id: Optional[str] = None
        self._client: Optional[httpx.AsyncClient] = None
        self._torrents: Optional[dict[str, dict[str, Any]]] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=30.0)
        return self._client

    async def comment_for(self, path: Path) -> Optional[str]:
        torrents = await self._load_torrents()
        torrent = torrents.get(torrent_key(path))
        if torrent is None:
            return None
        return torrent.get("comment") or None

    async def _load_torrents(self) -> dict[str, dict[str, Any]]:
        if self._torrents is not None:
            return self._torrents

        # Un echec n'est signale qu'une fois par passe
        self._torrents = {}
        result = await self.call("torrent-get", {"fields": TORRENT_FIELDS})
        for torrent in result.get("torrents", []):
            key = torrent_key(Path(torrent.get("downloadDir", "")) / torrent.get("name", ""))
            self._torrents[key] = torrent
        logger.info(f"Transmission : {len(self._torrents)} torrent(s) charge(s)")
        return self._torrents

    async def call(self, method: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """
        Execute une methode RPC, en renegociant le jeton de session si besoin.

        Raises:
            ProviderUnavailableError: Transport en echec ou resultat en erreur
        """
        payload = {"method": method, "arguments": arguments}
        client = self._get_client()
        try:
            response = await client.post(self._rpc_url, json=payload, headers=self._headers())
            if response.status_code == 409:
                self._session_id = response.headers.get(SESSION_HEADER)
                response = await client.post(self._rpc_url, json=payload, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderUnavailableError("transmission", str(exc) or type(exc).__name__) from exc

        if data.get("result") != "success":
            raise ProviderUnavailableError("transmission", str(data.get("result")))
        return data.get("arguments", {})

    def _headers(self) -> dict[str, str]:
        return {SESSION_HEADER: self._session_id} if self._session_id else {}

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
