"""
Normalisation des noms de fichiers et de repertoires.

Extrait d'un nom brut ("Brat.2.2000.BDRip.1080p.mkv", "BBC Planet Earth (2006)")
un titre candidat et une annee. Le traitement est volontairement destructif :
la precision perdue ici est recuperee par la tolerance du scoring et par la
cascade de fournisseurs.

Etapes (la premiere correspondance l'emporte a chaque etape) :
1. annee 19xx/20xx : tout ce qui precede devient le titre de travail
2. marqueur de saison final (S01, Season 2, сезон 3) retire
3. premier marqueur technique (BDRip, WEB, HDR, 1080p...) et la suite retires
4. texte avant la premiere parenthese/crochet/accolade
5. prefixe de diffuseur "BBC" retire
6. sans annee a l'etape 1 : annee cherchee en fin de titre
7. normalisation NFC, separateurs reduits a un espace

Des qu'une etape viderait le titre, le nom sans extension est utilise.
"""

import re

from loguru import logger

from kinosync.core.value_objects import ParsedTitle
from kinosync.utils.helpers import collapse_non_alnum, strip_video_extension

YEAR_RE = re.compile(r"\b((?:19|20)\d\d)\b")
TRAILING_YEAR_RE = re.compile(r"^.*\D((?:19|20)\d\d)$")
SEASON_MARKER_RE = re.compile(
    r"(?:\b[Ss](?:eason)?|\bсезон|\bСезон)\s*\d{1,2}\b|\b[Ss]\d{1,2}(?=[Ee]\d)"
)
MEDIA_INFO_RE = re.compile(
    r"[^a-z0-9](?:[a-z]+rip|ts|avc|hevc|x26[45]|h26[45]|hdr|sdr|uhd|dvd|mvo|"
    r"matroska|web|dub|\d{3,4}p|сериал)(?:[^a-z0-9]|$)",
    re.IGNORECASE,
)
BRACKET_RE = re.compile(r"^([^(\[{]*?)\s*[(\[{].+")
BROADCASTER_PREFIX = "bbc"


def clean_media_filename(name: str) -> ParsedTitle:
    """
    Extrait le titre candidat et l'annee d'un nom de fichier ou de repertoire.

    Ne leve jamais d'exception. En cas d'ambiguite totale, retourne le nom
    sans extension et une annee vide.

    Args:
        name: Dernier composant d'un chemin (fichier ou repertoire)

    Returns:
        ParsedTitle avec un titre jamais vide
    """
    fallback = strip_video_extension(name)
    working = fallback

    year = ""
    year_match = YEAR_RE.search(working)
    if year_match:
        year = year_match.group(1)
        working = working[:year_match.start()]

    season_match = SEASON_MARKER_RE.search(working)
    if season_match:
        working = working[:season_match.start()]
    if not working.strip():
        working = fallback

    media_match = MEDIA_INFO_RE.search(working)
    if media_match:
        working = working[:media_match.start()]
    if not working.strip():
        working = fallback

    bracket_match = BRACKET_RE.match(working)
    if bracket_match and bracket_match.group(1).strip():
        working = bracket_match.group(1)

    if working.lower().startswith(BROADCASTER_PREFIX) and len(working) > len(BROADCASTER_PREFIX) + 1:
        working = working[len(BROADCASTER_PREFIX):]

    if not year:
        trailing = TRAILING_YEAR_RE.match(working.rstrip())
        if trailing:
            year = trailing.group(1)
            working = working.rstrip()[: -len(year)]

    title = collapse_non_alnum(working)
    if not title:
        title = collapse_non_alnum(fallback) or fallback

    logger.debug(f"Nom normalise : '{name}' -> '{title}' ({year or '-'})")
    return ParsedTitle(title=title, year=year)
