"""
Adaptateur systeme de fichiers pour la bibliotheque de liens.

Implementation concrete de ISymlinkManager. Les creations tolerent une
destination deja presente ; les echecs reels sont convertis en
SynchronizationError pour n'interrompre que l'element courant.
"""

import os
import shutil
from pathlib import Path
from typing import Optional

from loguru import logger

from kinosync.core.errors import SynchronizationError
from kinosync.core.ports import ISymlinkManager


class FileSystemAdapter(ISymlinkManager):
    """Implementation de ISymlinkManager sur le systeme de fichiers reel."""

    def create_symlink(self, target: Path, link: Path) -> bool:
        """
        Cree un lien symbolique absolu vers target.

        Les repertoires parents sont crees si necessaire.
        """
        if os.path.lexists(link):
            return False
        try:
            link.parent.mkdir(parents=True, exist_ok=True)
            link.symlink_to(target, target_is_directory=target.is_dir())
        except FileExistsError:
            return False
        except OSError as exc:
            raise SynchronizationError(f"Creation du lien impossible ({exc})", link) from exc
        logger.debug(f"Lien cree : {link} -> {target}")
        return True

    def make_directory(self, path: Path) -> bool:
        if path.is_dir():
            return False
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SynchronizationError(f"Creation du dossier impossible ({exc})", path) from exc
        return True

    def remove_entry(self, path: Path) -> bool:
        """Supprime un lien, un fichier ou un repertoire (recursivement)."""
        if not os.path.lexists(path):
            return False
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise SynchronizationError(f"Suppression impossible ({exc})", path) from exc
        return True

    def is_symlink(self, path: Path) -> bool:
        return path.is_symlink()

    def read_link(self, link: Path) -> Optional[Path]:
        """
        Cible brute d'un lien, rendue absolue par rapport au dossier du lien.

        Retourne None si ce n'est pas un lien.
        """
        try:
            target = Path(os.readlink(link))
        except OSError:
            return None
        if not target.is_absolute():
            target = link.parent / target
        return target
