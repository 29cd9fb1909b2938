"""
Identification d'un element de bibliotheque.

Classe chaque element source avant de lancer la cascade :

- indice torrent : si le client torrent connait l'element et que son
  commentaire designe un sujet de tracker, le titre/annee (ou l'identifiant
  IMDb) de la page remplacent l'analyse du nom de fichier ;
- un seul fichier video : cascade film (seuil general) ;
- plusieurs fichiers avec un motif S01E02 : cascade series directement ;
- exactement deux fichiers tres ressemblants : film en deux parties, resolu
  une seule fois pour la paire (seuil multi-fichiers) ;
- sinon cascade series ;
- une cascade series sans resultat decoupe le dossier en elements
  independants, avec ou sans motif S01E02.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import httpx
from loguru import logger

from kinosync.core.entities import LibraryItem, MediaRecord
from kinosync.core.errors import ProviderUnavailableError, TrackerParseError
from kinosync.core.ports import IExternalIdLookup, ITorrentSource, ITrackerClient
from kinosync.core.value_objects import ParsedTitle
from kinosync.services.cascade import CascadeResolver, NotFound, Resolved
from kinosync.services.episode_extractor import has_season_episode_marker
from kinosync.services.matcher import compute_similarity_score
from kinosync.services.title_normalizer import clean_media_filename


@dataclass(frozen=True)
class AmbiguousSplit:
    """Dossier multi-fichiers a traiter fichier par fichier."""

    video_files: list[Path] = field(default_factory=list)


@dataclass(frozen=True)
class Failed:
    """Element non identifie, avec le meilleur resultat observe."""

    reason: str
    best_record: Optional[MediaRecord] = None
    best_score: int = 0


IdentifyOutcome = Union[Resolved, AmbiguousSplit, Failed]


@dataclass(frozen=True)
class TorrentHint:
    """Indice tire de la page du tracker d'un torrent."""

    parsed: Optional[ParsedTitle] = None
    imdb_id: Optional[str] = None


class ItemIdentifier:
    """
    Determine l'identite d'un LibraryItem.

    Example:
        identifier = ItemIdentifier(resolver)
        outcome = await identifier.identify(item)
        if isinstance(outcome, AmbiguousSplit):
            ...
    """

    def __init__(
        self,
        resolver: CascadeResolver,
        torrent_source: Optional[ITorrentSource] = None,
        tracker_client: Optional[ITrackerClient] = None,
        id_lookup: Optional[IExternalIdLookup] = None,
    ) -> None:
        self._resolver = resolver
        self._torrent_source = torrent_source
        self._tracker_client = tracker_client
        self._id_lookup = id_lookup

    async def identify(self, item: LibraryItem) -> IdentifyOutcome:
        """
        Identifie un element source.

        Args:
            item: Element avec ses fichiers video (au moins un)

        Returns:
            Resolved, AmbiguousSplit ou Failed
        """
        hint = await self.torrent_hint(item.source_path)
        if hint.imdb_id:
            resolved = await self._resolve_imdb_id(hint.imdb_id)
            if resolved is not None:
                return resolved

        parsed = hint.parsed or clean_media_filename(item.name)
        logger.debug(f"{item.name} : recherche de '{parsed}'")

        if not item.is_multi_file:
            outcome = await self._resolver.resolve(
                parsed.title, parsed.year, raw_name=item.name
            )
            return self._failed_if_not_found(outcome, item)

        if has_season_episode_marker(item.video_files[0].name):
            logger.debug(f"{item.name} : motif saison/episode, recherche d'une serie")
        elif self.is_two_part_movie(item.video_files):
            logger.debug(f"{item.name} : film en deux parties")
            outcome = await self._resolver.resolve(
                parsed.title, parsed.year, ambiguous=True, raw_name=item.name
            )
            if isinstance(outcome, Resolved):
                return outcome

        outcome = await self._resolver.resolve_series(parsed.title, parsed.year)
        if isinstance(outcome, Resolved):
            return outcome

        logger.info(
            f"{item.name} : {len(item.video_files)} films independants, "
            f"traitement fichier par fichier"
        )
        return AmbiguousSplit(video_files=list(item.video_files))

    def is_two_part_movie(self, video_files: list[Path]) -> bool:
        """Deux fichiers dont les chemins sont quasiment identiques."""
        if len(video_files) != 2:
            return False
        first, second = video_files
        score = compute_similarity_score(str(first), str(second))
        return score > self._resolver.thresholds.two_part_similarity

    async def torrent_hint(self, path: Path) -> TorrentHint:
        """
        Cherche un titre/annee/identifiant IMDb via le torrent d'origine.

        Toute panne (client torrent, tracker, page illisible) est journalisee
        et produit un indice vide.
        """
        if self._torrent_source is None or self._tracker_client is None:
            return TorrentHint()

        try:
            comment = await self._torrent_source.comment_for(path)
            if not comment or not self._tracker_client.supports(comment):
                return TorrentHint()
            topic = await self._tracker_client.load_topic(comment)
        except (ProviderUnavailableError, TrackerParseError, httpx.HTTPError) as exc:
            logger.warning(f"Donnees du torrent indisponibles pour {path.name} : {exc}")
            return TorrentHint()

        logger.info(f"{path.name} : indice du tracker '{topic.title}' ({topic.year})")
        parsed = ParsedTitle(title=topic.title, year=topic.year) if topic.title else None
        return TorrentHint(parsed=parsed, imdb_id=topic.imdb_id)

    async def _resolve_imdb_id(self, imdb_id: str) -> Optional[Resolved]:
        if self._id_lookup is None:
            return None
        try:
            record = await self._id_lookup.find_by_imdb_id(imdb_id)
        except (ProviderUnavailableError, httpx.HTTPError) as exc:
            logger.warning(f"Recherche de {imdb_id} en echec : {exc}")
            return None
        if record is None:
            return None
        record = await self._resolver.finalize(record)
        logger.info(f"Identifie par le tracker : {record.display_name} [{record.identity}]")
        return Resolved(record=record, score=100, source="tracker")

    @staticmethod
    def _failed_if_not_found(
        outcome: Union[Resolved, NotFound], item: LibraryItem
    ) -> IdentifyOutcome:
        if isinstance(outcome, Resolved):
            return outcome
        if outcome.exhausted:
            reason = f"aucune source ne connait '{item.name}'"
        else:
            reason = f"meilleur score insuffisant ({outcome.best_score})"
        return Failed(reason=reason, best_record=outcome.best_record, best_score=outcome.best_score)
