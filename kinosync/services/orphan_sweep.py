"""
Nettoyage des entrees orphelines de la bibliotheque de sortie.

Execute une fois par passe, apres l'identification et la fusion de tous les
chemins produits. Pour chaque entree de premier niveau d'une racine de sortie
absente de l'ensemble des chemins produits :

- le lien video associe (l'entree elle-meme, la premiere video d'un dossier,
  ou le lien voisin d'un fichier annexe) pointe vers une cible existante :
  l'entree est conservee ;
- la cible se trouve sous une racine source actuellement indisponible
  (disque demonte) : l'entree et ses fichiers annexes sont conserves ;
- sinon l'entree et ses fichiers annexes (.nfo, -poster.jpg, -fanart.jpg)
  sont supprimes.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from kinosync.core.errors import SynchronizationError
from kinosync.core.ports import ISymlinkManager
from kinosync.utils.constants import SIDECAR_SUFFIXES, VIDEO_EXTENSIONS
from kinosync.utils.helpers import list_entries, list_video_files, strip_video_extension


class SweepDecision(Enum):
    """Decision prise pour une entree hors de l'ensemble produit.

    Valeurs:
        KEEP_LIVE: La cible du lien existe toujours
        KEEP_UNAVAILABLE: La cible est sur une source indisponible
        REMOVE: Aucune cible valide, l'entree est supprimee
    """

    KEEP_LIVE = "keep_live"
    KEEP_UNAVAILABLE = "keep_unavailable"
    REMOVE = "remove"


@dataclass
class SweepReport:
    """Resultat d'un nettoyage."""

    kept: list[Path] = field(default_factory=list)
    unavailable: list[Path] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)


def sidecar_keys(path: Path) -> set[str]:
    """Chemin et fichiers annexes associes, en minuscules."""
    base = path.parent / strip_video_extension(path.name)
    keys = {str(path).lower()}
    keys.update(f"{base}{suffix}".lower() for suffix in SIDECAR_SUFFIXES)
    return keys


def strip_sidecar_suffix(name: str) -> str:
    for suffix in SIDECAR_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


class OrphanSweeper:
    """
    Supprime les entrees de sortie qui ne sont plus adossees a une source.

    Attributes:
        output_roots: Racines de sortie parcourues (films et series)
        source_roots: Racines sources configurees
        dry_run: Si True, journalise les suppressions sans les effectuer
    """

    def __init__(
        self,
        symlinks: ISymlinkManager,
        output_roots: list[Path],
        source_roots: list[Path],
        dry_run: bool = False,
    ) -> None:
        self._symlinks = symlinks
        self.output_roots = output_roots
        self.source_roots = source_roots
        self.dry_run = dry_run

    def sweep(self, matched: Iterable[Path]) -> SweepReport:
        """
        Parcourt les racines de sortie et supprime les orphelins.

        Args:
            matched: Chemins de premier niveau produits pendant la passe

        Returns:
            SweepReport detaillant les entrees conservees et supprimees
        """
        keep: set[str] = set()
        for path in matched:
            keep.update(sidecar_keys(path))

        report = SweepReport()
        for root in self.output_roots:
            if not root.is_dir():
                logger.warning(f"Racine de sortie absente : {root}")
                continue
            try:
                entries = list_entries(root)
            except OSError as exc:
                raise SynchronizationError(f"Lecture impossible ({exc})", root) from exc

            for entry in entries:
                if str(entry).lower() in keep:
                    continue
                try:
                    self._sweep_entry(entry, keep, report)
                except SynchronizationError as exc:
                    logger.error(f"{entry.name} : nettoyage impossible ({exc})")
                    report.failed.append(entry)

        if report.removed:
            logger.info(f"{len(report.removed)} entree(s) orpheline(s) supprimee(s)")
        if report.failed:
            logger.warning(f"{len(report.failed)} entree(s) orpheline(s) non supprimee(s)")
        return report

    def _sweep_entry(self, entry: Path, keep: set[str], report: SweepReport) -> None:
        decision = self.decide(entry)
        if decision is SweepDecision.KEEP_LIVE:
            report.kept.append(entry)
        elif decision is SweepDecision.KEEP_UNAVAILABLE:
            logger.info(f"Source indisponible, conserve : {entry}")
            keep.update(sidecar_keys(entry))
            report.unavailable.append(entry)
        elif os.path.lexists(entry):
            self._remove_with_sidecars(entry, keep, report)

    def decide(self, entry: Path) -> SweepDecision:
        """Decision pour une entree absente de l'ensemble produit."""
        video_link = self.find_related_video_symlink(entry)
        if video_link is None:
            return SweepDecision.REMOVE

        if video_link.exists():
            return SweepDecision.KEEP_LIVE

        target = self._symlinks.read_link(video_link)
        if target is not None:
            source_root = self.source_root_for(target)
            if source_root is not None and not source_root.exists():
                return SweepDecision.KEEP_UNAVAILABLE
        return SweepDecision.REMOVE

    def find_related_video_symlink(self, entry: Path) -> Optional[Path]:
        """
        Lien video qui justifie l'existence d'une entree.

        - un lien : l'entree elle-meme ;
        - un dossier : sa premiere video liee ;
        - un fichier annexe : le lien video voisin de meme nom.
        """
        if self._symlinks.is_symlink(entry):
            return entry
        if entry.is_dir():
            for video in list_video_files(entry):
                if self._symlinks.is_symlink(video):
                    return video
            return None

        base = strip_sidecar_suffix(entry.name)
        for extension in sorted(VIDEO_EXTENSIONS):
            for candidate_ext in (extension, extension.upper()):
                candidate = entry.parent / f"{base}.{candidate_ext}"
                if self._symlinks.is_symlink(candidate):
                    return candidate
        return None

    def source_root_for(self, target: Path) -> Optional[Path]:
        """Racine source configuree contenant la cible d'un lien."""
        target_key = str(target).lower()
        for root in self.source_roots:
            prefix = str(root).rstrip(os.sep).lower() + os.sep
            if target_key.startswith(prefix):
                return root
        return None

    def _remove_with_sidecars(self, entry: Path, keep: set[str], report: SweepReport) -> None:
        base = entry.parent / strip_sidecar_suffix(strip_video_extension(entry.name))
        targets = [entry] + [
            Path(f"{base}{suffix}")
            for suffix in SIDECAR_SUFFIXES
            if Path(f"{base}{suffix}") != entry
        ]
        for target in targets:
            if str(target).lower() in keep or not os.path.lexists(target):
                continue
            if self.dry_run:
                logger.info(f"[dry-run] suppression de {target}")
            else:
                logger.info(f"Suppression de l'entree orpheline {target}")
                self._symlinks.remove_entry(target)
            report.removed.append(target)
