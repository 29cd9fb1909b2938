"""
Extraction des numeros de saison et d'episode d'un fichier video.

Ordre des indices essayes :
1. motif explicite S01E02 / Season 1 Episode 2 dans le nom du fichier
2. motif de saison seul dans le nom du fichier
3. motif de saison dans le nom du repertoire parent (s2, season 2, сезон 2),
   saison 1 par defaut
4. nombre en tete du nom de fichier ("03 Le retour.mkv") comme episode
5. motif E<ddd> n'importe ou dans le nom
6. rang (1-indexe) du fichier parmi ses voisins tries
"""

import re
from pathlib import Path

SEASON_EPISODE_RE = re.compile(
    r"(?<![^\W\d_])[Ss](?:eason)?[\s\W_]*(\d{1,2})[\s\W_]*[Ee](?:pisode)?\s*(\d{1,3})"
)
SEASON_RE = re.compile(r"(?<![^\W\d_])[Ss](?:eason)?[\s\W_]*(\d{1,2})(?!\d)")
FOLDER_SEASON_RE = re.compile(
    r"(?:[^0-9]|^)(?:s(?:eason)?|сезон)[\s\W_]*(\d{1,2})\b", re.IGNORECASE
)
LEADING_EPISODE_RE = re.compile(r"^(\d{1,3})(?:\D|$)")
EPISODE_RE = re.compile(r"(?<![^\W\d_])[Ee](?:pisode|p)?[\s._-]*(\d{1,3})(?!\d)")

DEFAULT_SEASON = 1


def extract_season_episode(file: Path, siblings: list[Path]) -> tuple[int, int]:
    """
    Determine la saison et l'episode d'un fichier video.

    Args:
        file: Fichier video de la serie
        siblings: Tous les fichiers video de la serie (file inclus)

    Returns:
        Tuple (saison, episode), tous deux >= 1
    """
    name = file.stem

    match = SEASON_EPISODE_RE.search(name)
    if match:
        return int(match.group(1)), int(match.group(2))

    season = _season_from_name(name)
    if season is None:
        season = _season_from_folder(file.parent.name)

    episode = _episode_from_name(name)
    if episode is None:
        episode = _rank_among(file, siblings)
    return season, episode


def has_season_episode_marker(name: str) -> bool:
    """Indique si un nom contient un motif S01E02 explicite."""
    return SEASON_EPISODE_RE.search(name) is not None


def _season_from_name(name: str) -> int | None:
    match = SEASON_RE.search(name)
    return int(match.group(1)) if match else None


def _season_from_folder(folder: str) -> int:
    match = FOLDER_SEASON_RE.search(folder)
    return int(match.group(1)) if match else DEFAULT_SEASON


def _episode_from_name(name: str) -> int | None:
    match = LEADING_EPISODE_RE.match(name)
    if match:
        return int(match.group(1))
    match = EPISODE_RE.search(name)
    if match:
        return int(match.group(1))
    return None


def _rank_among(file: Path, siblings: list[Path]) -> int:
    ordered = sorted({str(path) for path in siblings} | {str(file)})
    return ordered.index(str(file)) + 1
