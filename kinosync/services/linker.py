"""
Construction de la bibliotheque de sortie (liens symboliques + fichiers annexes).

Films :
    <racine films>/<element>                      lien (element = fichier) ou
    <racine films>/<element>/<nom>.<ext>          liens (element = dossier)
    <nom>.nfo, <nom>-poster.jpg, <nom>-fanart.jpg a cote des liens
    <nom>.part<N>.<ext> pour un film en plusieurs parties

Series :
    <racine series>/<element>/tvshow.nfo, poster.jpg, fanart.jpg
    <racine series>/<element>/S01E02 <nom original>.<ext>

Chaque creation est conditionnee a l'absence de la destination : une seconde
passe sur un arbre source inchange ne cree rien.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

from kinosync.core.entities import MediaRecord
from kinosync.core.errors import SynchronizationError
from kinosync.core.ports import IImageDownloader, ISeriesProvider, ISidecarWriter, ISymlinkManager
from kinosync.services.episode_mapper import EpisodeMapper
from kinosync.utils.constants import (
    FANART_SUFFIX,
    NFO_SUFFIX,
    POSTER_SUFFIX,
    SERIES_FANART,
    SERIES_POSTER,
    TMDB_IMAGE_HOST,
    TVSHOW_NFO,
)
from kinosync.utils.helpers import common_prefix, is_video_file, list_entries, list_video_files

PART_SUFFIX_RE = re.compile(r"\s*[_.,-]?(?:part|pt)\s*$", re.IGNORECASE)
LEADING_PART_RE = re.compile(r"^(\d\d?)")
TRAILING_PART_RE = re.compile(r"\D+(\d\d?)\D*$")
EPISODE_PREFIX_LENGTH = len("S01E01 ")


@dataclass
class SyncedEntry:
    """
    Chemins de sortie produits pour un element source.

    Attributes:
        primary: Entree de premier niveau dans la racine de sortie
        links: Liens symboliques crees pendant cette passe
        sidecars: Fichiers annexes ecrits pendant cette passe
    """

    primary: Path
    links: list[Path] = field(default_factory=list)
    sidecars: list[Path] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.links or self.sidecars)


def same_volume_root(source: Path, roots: list[Path]) -> Optional[Path]:
    """
    Racine de sortie situee sur le meme volume que la source.

    Compare les peripheriques (st_dev) ; a defaut, compare les lecteurs
    (Windows), ce qui revient a prendre la premiere racine sous POSIX.
    """
    try:
        source_device = source.lstat().st_dev
    except OSError:
        source_device = None

    if source_device is not None:
        for root in roots:
            try:
                if root.stat().st_dev == source_device:
                    return root
            except OSError:
                continue

    for root in roots:
        if root.drive == source.drive:
            return root
    return None


def movie_base_name(video_files: list[Path]) -> str:
    """
    Nom de base des liens d'un film.

    Un fichier : son nom sans extension. Plusieurs fichiers : leur prefixe
    commun sans le suffixe "part"/"pt", ou le nom du dossier parent.
    """
    if len(video_files) == 1:
        return video_files[0].stem if not video_files[0].is_dir() else video_files[0].name

    prefix = video_files[0].name
    for video in video_files[1:]:
        prefix = common_prefix(prefix, video.name)
    name = PART_SUFFIX_RE.sub("", prefix)
    if not name.strip(" ._-"):
        return video_files[0].parent.name
    return name


def part_number(video: Path, index: int) -> int:
    """Numero de partie lu dans le nom du fichier, ou sa position (1-indexee)."""
    match = LEADING_PART_RE.match(video.stem) or TRAILING_PART_RE.search(video.stem)
    return int(match.group(1)) if match else index + 1


def index_of_episode(existing_names: list[str], file_name: str) -> int:
    """
    Position d'un episode deja lie, en ignorant un eventuel prefixe "S01E01 ".

    Returns:
        Index dans existing_names, -1 si absent
    """
    wanted = file_name.lower()
    for index, name in enumerate(existing_names):
        name = name.lower()
        if name == wanted or name[EPISODE_PREFIX_LENGTH:] == wanted:
            return index
    return -1


class LibraryLinker:
    """
    Cree les entrees de la bibliotheque pour les elements identifies.

    Attributes:
        movies_roots: Racines de sortie des films
        series_roots: Racines de sortie des series
        dry_run: Si True, journalise les operations sans les effectuer
    """

    def __init__(
        self,
        symlinks: ISymlinkManager,
        sidecars: ISidecarWriter,
        movies_roots: list[Path],
        series_roots: list[Path],
        images: Optional[IImageDownloader] = None,
        series_provider: Optional[ISeriesProvider] = None,
        dry_run: bool = False,
    ) -> None:
        self._symlinks = symlinks
        self._sidecars = sidecars
        self._images = images
        self._series_provider = series_provider
        self.movies_roots = movies_roots
        self.series_roots = series_roots
        self.dry_run = dry_run

    def movies_root_for(self, source: Path) -> Path:
        root = same_volume_root(source, self.movies_roots)
        if root is None:
            raise SynchronizationError("Aucune racine films sur le meme volume", source)
        return root

    def series_root_for(self, source: Path) -> Path:
        root = same_volume_root(source, self.series_roots)
        if root is None:
            raise SynchronizationError("Aucune racine series sur le meme volume", source)
        return root

    def existing_destination(self, source: Path) -> Optional[Path]:
        """Entree de sortie deja presente pour cet element (films puis series)."""
        for roots in (self.movies_roots, self.series_roots):
            root = same_volume_root(source, roots)
            if root is None:
                continue
            candidate = root / source.name
            if os.path.lexists(candidate):
                return candidate
        return None

    async def link_movie(
        self, source: Path, video_files: list[Path], record: MediaRecord
    ) -> SyncedEntry:
        """
        Cree les liens et fichiers annexes d'un film.

        Un dossier source donne un dossier de sortie ; un fichier source est
        lie directement dans la racine des films.
        """
        root = self.movies_root_for(source)
        entry = SyncedEntry(primary=root / source.name)
        base_name = movie_base_name(video_files)

        output_dir = root
        if source.is_dir() and not is_video_file(source):
            output_dir = root / source.name
            self._make_directory(output_dir)

        for url, suffix in ((record.poster_url, POSTER_SUFFIX), (record.backdrop_url, FANART_SUFFIX)):
            if url and TMDB_IMAGE_HOST not in url:
                await self._download(url, output_dir / f"{base_name}{suffix}", entry)

        nfo_path = output_dir / f"{base_name}{NFO_SUFFIX}"
        if not nfo_path.exists():
            self._write(lambda: self._sidecars.write_movie_nfo(record, nfo_path), nfo_path)
            entry.sidecars.append(nfo_path)

        multipart = len(video_files) > 1
        for index, video in enumerate(video_files):
            part = part_number(video, index) if multipart else None
            entry.links.extend(self.link_video_and_related(video, output_dir, base_name, part))

        if entry.changed:
            logger.info(f"Film lie : {record.display_name} -> {entry.primary}")
        return entry

    async def link_series(
        self,
        source: Path,
        video_files: list[Path],
        record: Optional[MediaRecord],
    ) -> SyncedEntry:
        """
        Cree (une fois) le dossier de la serie et lie les episodes manquants.

        Sans fiche (element deja synchronise), l'identite est relue dans
        tvshow.nfo pour charger la table des episodes.
        """
        root = self.series_root_for(source)
        output_dir = root / source.name
        entry = SyncedEntry(primary=output_dir)
        nfo_path = output_dir / TVSHOW_NFO

        identity = record.identity if record is not None else self._sidecars.read_identity(nfo_path)
        if not video_files:
            video_files = list_video_files(source)

        if not output_dir.exists():
            self._make_directory(output_dir)

        if record is not None:
            if not nfo_path.exists():
                self._write(lambda: self._sidecars.write_tvshow_nfo(record, nfo_path), nfo_path)
                entry.sidecars.append(nfo_path)
            for url, name in ((record.poster_url, SERIES_POSTER), (record.backdrop_url, SERIES_FANART)):
                if url:
                    await self._download(url, output_dir / name, entry)

        existing = [path.name for path in list_video_files(output_dir)] if output_dir.exists() else []
        mapper = EpisodeMapper(identity, self._series_provider)
        for video in video_files:
            if index_of_episode(existing, video.name) != -1:
                continue
            season, episode = await mapper.map_file(video, video_files)
            marker = f"S{season:02d}E{episode:02d}"
            target = video.stem if marker in video.stem.upper() else f"{marker} {video.stem}"
            entry.links.extend(self.link_video_and_related(video, output_dir, target, None))

        if entry.links:
            logger.info(f"{len(entry.links)} fichier(s) d'episodes lies dans {output_dir}")
        return entry

    def mark_ambiguous(self, source: Path) -> Path:
        """Cree le dossier vide qui signale un dossier traite fichier par fichier."""
        marker = self.movies_root_for(source) / source.name
        if not os.path.lexists(marker):
            self._make_directory(marker)
        return marker

    async def refresh_existing(self, source: Path, destination: Path) -> list[Path]:
        """
        Element deja present dans la sortie.

        - Serie : lie les nouveaux episodes arrives depuis la derniere passe.
        - Dossier vide (marqueur de decoupage) : les films voisins issus de
          chaque fichier du dossier sont conserves.

        Returns:
            Chemins de premier niveau a conserver lors du nettoyage
        """
        matched = [destination]
        series_root = same_volume_root(source, self.series_roots)
        if series_root is not None and destination.parent == series_root:
            await self.link_series(source, [], None)
        elif destination.is_dir() and not destination.is_symlink():
            try:
                is_marker = not any(destination.iterdir())
            except OSError as exc:
                raise SynchronizationError(f"Lecture impossible ({exc})", destination) from exc
            if is_marker:
                movies_root = self.movies_root_for(source)
                matched.extend(movies_root / video.name for video in list_video_files(source))
        return matched

    def link_video_and_related(
        self, video: Path, output_dir: Path, target_name: str, part: Optional[int]
    ) -> list[Path]:
        """
        Lie une video et ses fichiers associes (sous-titres, pistes audio).

        Les fichiers associes sont les voisins dont le nom commence par le nom
        de la video suivi d'un point ; leur suffixe est conserve.

        Returns:
            Liens crees (les destinations existantes sont ignorees)
        """
        if video.is_dir():
            link = output_dir / target_name
            return [link] if self._link(video, link) else []

        stem = video.stem.lower()
        try:
            siblings = list_entries(video.parent)
        except OSError as exc:
            raise SynchronizationError(f"Lecture impossible ({exc})", video.parent) from exc

        created: list[Path] = []
        for sibling in siblings:
            if not sibling.name.lower().startswith(stem + "."):
                continue
            extension = sibling.name[len(stem) + 1:]
            if part is not None:
                extension = f"part{part}.{extension}"
            link = output_dir / f"{target_name}.{extension}"
            if self._link(sibling, link):
                created.append(link)
        return created

    def _link(self, target: Path, link: Path) -> bool:
        if os.path.lexists(link):
            return False
        if self.dry_run:
            logger.info(f"[dry-run] lien {link} -> {target}")
            return True
        return self._symlinks.create_symlink(target, link)

    def _make_directory(self, path: Path) -> None:
        if self.dry_run:
            logger.info(f"[dry-run] dossier {path}")
            return
        self._symlinks.make_directory(path)

    def _write(self, writer, path: Path) -> None:
        if self.dry_run:
            logger.info(f"[dry-run] fiche {path}")
            return
        try:
            writer()
        except OSError as exc:
            raise SynchronizationError(f"Ecriture impossible ({exc})", path) from exc

    async def _download(self, url: str, path: Path, entry: SyncedEntry) -> None:
        if self._images is None or path.exists():
            return
        if self.dry_run:
            logger.info(f"[dry-run] image {url} -> {path}")
            return
        if await self._images.download(url, path):
            entry.sidecars.append(path)
        else:
            logger.warning(f"Image non telechargee : {url}")
