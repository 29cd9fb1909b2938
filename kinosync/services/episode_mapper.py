"""
Association des fichiers video aux episodes canoniques d'une serie.

Un EpisodeMapper est cree pour une serie lors d'une passe de synchronisation.
La table canonique (saison, episode) est chargee paresseusement au premier
besoin, une seule fois. Si le numero extrait du nom de fichier n'existe pas
dans la table, le fichier est rapproche de l'episode dont le titre lui
ressemble le plus.
"""

from pathlib import Path
from typing import Optional

import httpx
from loguru import logger

from kinosync.core.entities import EpisodeTable, MediaIdentity
from kinosync.core.errors import ProviderUnavailableError
from kinosync.core.ports import ISeriesProvider
from kinosync.services.episode_extractor import extract_season_episode
from kinosync.services.matcher import compute_similarity_score
from kinosync.services.title_normalizer import clean_media_filename


class EpisodeMapper:
    """
    Attribue (saison, episode) aux fichiers d'une serie.

    Attributes:
        identity: Identite de la serie, None si inconnue (pas de table canonique)
    """

    def __init__(
        self,
        identity: Optional[MediaIdentity],
        series_provider: Optional[ISeriesProvider] = None,
    ) -> None:
        self.identity = identity
        self._series_provider = series_provider
        self._table: Optional[EpisodeTable] = None

    async def table(self) -> EpisodeTable:
        """
        Table canonique de la serie, chargee une seule fois.

        Un echec de chargement est journalise et produit une table vide :
        les numeros issus des noms de fichiers sont alors utilises tels quels.
        """
        if self._table is not None:
            return self._table

        self._table = EpisodeTable()
        if self.identity is None or self._series_provider is None:
            return self._table

        try:
            episodes = await self._series_provider.load_canonical_episodes(self.identity)
        except (ProviderUnavailableError, httpx.HTTPError) as exc:
            logger.warning(f"Episodes de {self.identity} non charges : {exc}")
            return self._table

        self._table = EpisodeTable(episodes)
        logger.info(f"{len(self._table)} episodes charges pour {self.identity}")
        return self._table

    async def map_file(self, file: Path, siblings: list[Path]) -> tuple[int, int]:
        """
        Determine la saison et l'episode d'un fichier de la serie.

        Args:
            file: Fichier video a placer
            siblings: Tous les fichiers video de la serie

        Returns:
            Tuple (saison, episode)
        """
        season, episode = extract_season_episode(file, siblings)
        table = await self.table()
        if table.is_empty or (season, episode) in table:
            return season, episode

        name = clean_media_filename(file.name).title
        best_score = 0
        best: tuple[int, int] = (season, episode)
        for canonical in table:
            if not canonical.name:
                continue
            score = compute_similarity_score(canonical.name, name)
            if score > best_score:
                best_score = score
                best = (canonical.season, canonical.episode_number)

        if best_score == 0:
            logger.warning(f"S{season:02d}E{episode:02d} {file.name} : episode introuvable")
        else:
            logger.debug(
                f"{file.name} rapproche de S{best[0]:02d}E{best[1]:02d} (score {best_score})"
            )
        return best
