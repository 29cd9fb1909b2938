"""
Fonctions utilitaires partagees dans le projet KinoSync.

Ce module centralise les fonctions reutilisees a travers le codebase :
- strip_invisible_chars / clean_title : nettoyage des titres venant des APIs
- collapse_non_alnum : normalisation NFC et reduction des separateurs
- common_prefix / coalesce : manipulations de chaines
- list_entries / list_video_files / is_video_file : lecture des repertoires
"""

import re
import unicodedata
from pathlib import Path

from kinosync.utils.constants import DVD_DIRECTORY, VIDEO_EXTENSIONS

_NON_ALNUM_RE = re.compile(r"[\W_]+")


def strip_invisible_chars(text: str) -> str:
    """
    Retire les caractères Unicode invisibles d'une chaîne.

    Supprime les caractères de contrôle et les marques directionnelles
    qui peuvent provenir des APIs (LRM, RLM, BOM, etc.).
    """
    return "".join(
        char for char in text if unicodedata.category(char) not in ("Cf", "Cc")
    )


def clean_title(title: str | None) -> str:
    """Nettoie un titre : retire les caractères invisibles et les espaces superflus."""
    if not title:
        return ""
    return strip_invisible_chars(title).strip()


def collapse_non_alnum(text: str) -> str:
    """
    Normalise en NFC puis remplace chaque suite de caracteres qui ne sont ni
    lettres ni chiffres par un espace unique.

    Ex: "Alien³:_Resurrection!!" -> "Alien³ Resurrection"
    """
    text = unicodedata.normalize("NFC", text)
    return _NON_ALNUM_RE.sub(" ", text).strip()


def common_prefix(first: str, second: str) -> str:
    """Plus long prefixe commun de deux chaines."""
    length = 0
    for a, b in zip(first, second):
        if a != b:
            break
        length += 1
    return first[:length]


def coalesce(*values: str | None) -> str:
    """Premiere valeur non vide, ou chaine vide."""
    for value in values:
        if value:
            return value
    return ""


def is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def is_video_file(path: Path) -> bool:
    """
    Indique si un chemin designe une video.

    Un repertoire contenant VIDEO_TS (DVD) compte comme une video.
    Les liens symboliques casses sont juges sur leur nom.
    """
    if is_hidden(path):
        return False
    if path.is_dir():
        return (path / DVD_DIRECTORY).is_dir()
    return path.suffix.lstrip(".").lower() in VIDEO_EXTENSIONS


def list_entries(directory: Path) -> list[Path]:
    """
    Liste les entrees non cachees d'un repertoire, triees par nom.

    Raises:
        OSError: Si le repertoire ne peut pas etre lu
    """
    return sorted(
        (entry for entry in directory.iterdir() if not is_hidden(entry)),
        key=lambda entry: entry.name,
    )


def list_video_files(path: Path) -> list[Path]:
    """
    Retourne les videos d'un element source, triees par chemin.

    Un fichier video renvoie une liste d'un element ; un repertoire est
    parcouru recursivement (sans descendre dans les DVD ni les elements caches).
    """
    if is_video_file(path):
        return [path]
    if not path.is_dir():
        return []

    videos: list[Path] = []
    try:
        entries = list_entries(path)
    except OSError:
        return []
    for entry in entries:
        if is_video_file(entry):
            videos.append(entry)
        elif entry.is_dir() and not entry.is_symlink():
            videos.extend(list_video_files(entry))
    return sorted(videos)


def strip_video_extension(name: str) -> str:
    """Retire l'extension d'un nom de fichier si c'est une extension video."""
    stem, dot, extension = name.rpartition(".")
    if dot and stem and extension.lower() in VIDEO_EXTENSIONS:
        return stem
    return name
