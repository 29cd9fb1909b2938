"""
Synchronisation complete de la bibliotheque.

Une passe parcourt les entrees de premier niveau de chaque repertoire source,
identifie chaque element puis cree ses entrees de sortie. Les chemins produits
sont fusionnes puis transmis au nettoyage des orphelins, execute une seule fois
en fin de passe.

Cycle de vie d'un element (ItemState) :

    UNSCANNED -> SKIPPED            aucune video
    UNSCANNED -> ALREADY_SYNCED     destination deja presente
    UNSCANNED -> RESOLVING -> LINKED | AMBIGUOUS_SPLIT | FAILED
    SYNC_ERROR                      echec du systeme de fichiers (element seul)
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from loguru import logger

from kinosync.core.entities import LibraryItem, MediaRecord
from kinosync.core.errors import SynchronizationError
from kinosync.services.cascade import Resolved
from kinosync.services.identifier import AmbiguousSplit, Failed, IdentifyOutcome, ItemIdentifier
from kinosync.services.linker import LibraryLinker
from kinosync.services.orphan_sweep import OrphanSweeper, SweepReport
from kinosync.utils.helpers import list_entries, list_video_files


class ItemState(str, Enum):
    """Etat d'un element source pendant une passe."""

    UNSCANNED = "unscanned"
    SKIPPED = "skipped"
    ALREADY_SYNCED = "already_synced"
    RESOLVING = "resolving"
    LINKED = "linked"
    AMBIGUOUS_SPLIT = "ambiguous_split"
    FAILED = "failed"
    SYNC_ERROR = "sync_error"


@dataclass
class ItemResult:
    """
    Resultat du traitement d'un element source.

    Attributs:
        source_path: Element source traite
        state: Etat final de l'element
        record: Fiche retenue (LINKED)
        score: Score de la fiche retenue, ou meilleur score observe (FAILED)
        matched: Entrees de sortie de premier niveau a conserver
        links_created: Nombre de liens crees pendant la passe
        error: Motif de l'echec (FAILED, SYNC_ERROR)
    """

    source_path: Path
    state: ItemState = ItemState.UNSCANNED
    record: Optional[MediaRecord] = None
    score: int = 0
    matched: list[Path] = field(default_factory=list)
    links_created: int = 0
    error: Optional[str] = None


@dataclass
class SyncReport:
    """Bilan d'une passe de synchronisation."""

    items: list[ItemResult] = field(default_factory=list)
    sweep: Optional[SweepReport] = None

    def count(self, state: ItemState) -> int:
        return sum(1 for item in self.items if item.state == state)

    @property
    def links_created(self) -> int:
        return sum(item.links_created for item in self.items)

    @property
    def removed(self) -> int:
        return len(self.sweep.removed) if self.sweep else 0

    @property
    def matched(self) -> set[Path]:
        return {path for item in self.items for path in item.matched}


class LibrarySynchronizer:
    """
    Orchestre une passe : identification, liens, puis nettoyage.

    Example:
        synchronizer = container.library_synchronizer()
        report = await synchronizer.run()
        print(report.count(ItemState.LINKED))
    """

    def __init__(
        self,
        identifier: ItemIdentifier,
        linker: LibraryLinker,
        sweeper: OrphanSweeper,
        source_roots: list[Path],
        max_parallel_directories: int = 1,
    ) -> None:
        self._identifier = identifier
        self._linker = linker
        self._sweeper = sweeper
        self.source_roots = source_roots
        self.max_parallel_directories = max(1, max_parallel_directories)

    async def run(self) -> SyncReport:
        """
        Execute une passe complete.

        Les repertoires sources sont traites l'un apres l'autre, ou en
        parallele (max_parallel_directories > 1). Le nettoyage ne demarre
        qu'une fois tous les repertoires termines.
        """
        roots = []
        for root in self.source_roots:
            if root.is_dir():
                roots.append(root)
            else:
                logger.warning(f"Repertoire source indisponible : {root}")

        if self.max_parallel_directories > 1 and len(roots) > 1:
            semaphore = asyncio.Semaphore(self.max_parallel_directories)

            async def bounded(root: Path) -> list[ItemResult]:
                async with semaphore:
                    return await self.sync_directory(root)

            per_directory = await asyncio.gather(*(bounded(root) for root in roots))
        else:
            per_directory = [await self.sync_directory(root) for root in roots]

        report = SyncReport(items=[item for results in per_directory for item in results])

        try:
            report.sweep = self._sweeper.sweep(report.matched)
        except SynchronizationError as exc:
            logger.error(f"Nettoyage interrompu : {exc}")

        logger.info(
            f"Passe terminee : {report.count(ItemState.LINKED)} lie(s), "
            f"{report.count(ItemState.ALREADY_SYNCED)} deja synchronise(s), "
            f"{report.count(ItemState.FAILED)} echec(s), "
            f"{report.count(ItemState.SYNC_ERROR)} erreur(s), "
            f"{report.links_created} lien(s) cree(s), {report.removed} suppression(s)"
        )
        return report

    async def sync_directory(self, root: Path) -> list[ItemResult]:
        """Traite les elements de premier niveau d'un repertoire source."""
        logger.info(f"Analyse de {root}")
        try:
            entries = list_entries(root)
        except OSError as exc:
            logger.error(f"Lecture impossible de {root} : {exc}")
            return []

        results: list[ItemResult] = []
        for entry in entries:
            results.extend(await self.process_item(entry))
        return results

    async def process_item(self, source: Path) -> list[ItemResult]:
        """
        Traite un element source en isolant ses erreurs de fichiers.

        Returns:
            Un resultat par element traite (plusieurs pour un dossier decoupe)
        """
        try:
            return await self._process(source)
        except (SynchronizationError, OSError) as exc:
            logger.error(f"{source.name} : erreur de synchronisation ({exc})")
            return [ItemResult(source, ItemState.SYNC_ERROR, error=str(exc))]

    async def identify_only(self, source: Path) -> IdentifyOutcome:
        """Identifie un element sans rien creer dans la bibliotheque."""
        videos = list_video_files(source)
        if not videos:
            return Failed(reason=f"aucune video dans '{source.name}'")
        return await self._identifier.identify(LibraryItem(source, videos))

    async def _process(self, source: Path) -> list[ItemResult]:
        videos = list_video_files(source)
        if not videos:
            logger.debug(f"{source.name} : aucune video, ignore")
            return [ItemResult(source, ItemState.SKIPPED)]

        destination = self._linker.existing_destination(source)
        if destination is not None:
            matched = await self._linker.refresh_existing(source, destination)
            return [ItemResult(source, ItemState.ALREADY_SYNCED, matched=matched)]

        item = LibraryItem(source, videos)
        result = ItemResult(source, ItemState.RESOLVING)
        logger.debug(f"{item.name} : identification ({len(videos)} video(s))")
        outcome = await self._identifier.identify(item)

        if isinstance(outcome, Failed):
            logger.error(f"{item.name} : non identifie, {outcome.reason}")
            result.state = ItemState.FAILED
            result.record = outcome.best_record
            result.score = outcome.best_score
            result.error = outcome.reason
            return [result]

        if isinstance(outcome, AmbiguousSplit):
            results: list[ItemResult] = []
            for video in outcome.video_files:
                results.extend(await self.process_item(video))
            result.state = ItemState.AMBIGUOUS_SPLIT
            result.matched = [self._linker.mark_ambiguous(source)]
            results.append(result)
            return results

        if isinstance(outcome, Resolved):
            item.resolved = outcome.record
            if outcome.record.is_series:
                entry = await self._linker.link_series(source, videos, outcome.record)
            else:
                entry = await self._linker.link_movie(source, videos, outcome.record)

            result.state = ItemState.LINKED
            result.record = outcome.record
            result.score = outcome.score
            result.matched = [entry.primary]
            result.links_created = len(entry.links)
        return [result]
