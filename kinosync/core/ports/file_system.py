"""
Interfaces ports pour le système de fichiers.

Interfaces abstraites (ports) définissant les contrats pour les opérations qui
modifient la bibliothèque de sortie : création de répertoires et de liens
symboliques, suppression d'entrées orphelines, écriture des fichiers annexes
(.nfo, affiches).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from kinosync.core.entities import MediaIdentity, MediaRecord


class ISymlinkManager(ABC):
    """
    Interface de gestion des liens symboliques de la bibliothèque.

    Les créations tolèrent une entrée déjà existante (succès sans effet), car
    deux éléments traités en parallèle peuvent viser le même répertoire parent.
    Les échecs réels lèvent SynchronizationError.
    """

    @abstractmethod
    def create_symlink(self, target: Path, link: Path) -> bool:
        """
        Crée un lien symbolique.

        Args :
            target : Chemin vers lequel le lien pointe (le fichier réel)
            link : Chemin où le lien symbolique sera créé

        Retourne :
            True si le lien a été créé, False s'il existait déjà
        """
        ...

    @abstractmethod
    def make_directory(self, path: Path) -> bool:
        """
        Crée un répertoire (et ses parents).

        Retourne :
            True si le répertoire a été créé, False s'il existait déjà
        """
        ...

    @abstractmethod
    def remove_entry(self, path: Path) -> bool:
        """
        Supprime une entrée de la bibliothèque (lien, fichier ou répertoire).

        Retourne :
            True si supprimée, False si elle n'existait pas
        """
        ...

    @abstractmethod
    def is_symlink(self, path: Path) -> bool:
        """Vérifie si un chemin est un lien symbolique."""
        ...

    @abstractmethod
    def read_link(self, link: Path) -> Optional[Path]:
        """
        Lit la cible brute d'un lien symbolique, sans la résoudre.

        Retourne :
            Chemin cible absolu, ou None si ce n'est pas un lien
        """
        ...


class ISidecarWriter(ABC):
    """Interface d'écriture et de relecture des fichiers .nfo."""

    @abstractmethod
    def write_movie_nfo(self, record: MediaRecord, path: Path) -> None:
        """Écrit la fiche <movie> d'un film."""
        ...

    @abstractmethod
    def write_tvshow_nfo(self, record: MediaRecord, path: Path) -> None:
        """Écrit la fiche <tvshow> d'une série."""
        ...

    @abstractmethod
    def read_identity(self, path: Path) -> Optional[MediaIdentity]:
        """
        Relit l'identité externe enregistrée dans une fiche existante.

        Retourne :
            L'identité, ou None si la fiche est absente ou illisible
        """
        ...


class IImageDownloader(ABC):
    """Interface de téléchargement des affiches et fonds d'écran."""

    @abstractmethod
    async def download(self, url: str, path: Path) -> bool:
        """
        Télécharge une image vers `path`.

        Retourne :
            True si l'image a été écrite, False en cas d'échec
        """
        ...
