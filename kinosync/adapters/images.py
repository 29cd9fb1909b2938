"""
Telechargement des affiches et fonds d'ecran.
"""

from pathlib import Path
from typing import Optional

import httpx
from loguru import logger

from kinosync.adapters.api.retry import RateLimitError, request_with_retry
from kinosync.core.ports import IImageDownloader


class ImageDownloader(IImageDownloader):
    """
    Telechargeur d'images sur httpx.

    L'image est ecrite dans un fichier temporaire puis renommee, pour ne
    jamais laisser de fichier partiel que la passe suivante prendrait pour
    une image valide.
    """

    def __init__(self) -> None:
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=60.0, follow_redirects=True)
        return self._client

    async def download(self, url: str, path: Path) -> bool:
        try:
            response = await request_with_retry(self._get_client(), "GET", url)
        except (httpx.HTTPError, RateLimitError) as exc:
            logger.warning(f"Image {url} non telechargee : {exc}")
            return False

        partial = path.with_name(path.name + ".part")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            partial.write_bytes(response.content)
            partial.replace(path)
        except OSError as exc:
            logger.warning(f"Image {path} non ecrite : {exc}")
            partial.unlink(missing_ok=True)
            return False
        logger.debug(f"Image ecrite : {path}")
        return True

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
