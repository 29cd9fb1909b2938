"""
Ecriture et relecture des fiches .nfo (format Kodi/Jellyfin).

    <movie>                       ou <tvshow>
        <title>...</title>
        <uniqueid type="tmdb" default="true">603</uniqueid>
        <originaltitle>...</originaltitle>
        <plot>...</plot>
        <year>1999</year>
        <genre>...</genre>
        <tmdburl>https://themoviedb.org/movie/603/</tmdburl>
    </movie>
"""

from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from loguru import logger

from kinosync.core.entities import IdKind, MediaIdentity, MediaRecord
from kinosync.core.ports import ISidecarWriter

# Ordre de preference des identites a la relecture
IDENTITY_PREFERENCE = (IdKind.TMDB, IdKind.KINOPOISK, IdKind.IMDB)


def build_nfo(record: MediaRecord, root_tag: str) -> ET.Element:
    root = ET.Element(root_tag)
    ET.SubElement(root, "title").text = record.title or record.original_title
    uniqueid = ET.SubElement(
        root,
        "uniqueid",
        {"type": record.identity.id_kind.uniqueid_type, "default": "true"},
    )
    uniqueid.text = record.identity.external_id

    if record.original_title:
        ET.SubElement(root, "originaltitle").text = record.original_title
    if record.description:
        ET.SubElement(root, "plot").text = record.description
    if record.year:
        ET.SubElement(root, "year").text = record.year
    for genre in record.genres:
        ET.SubElement(root, "genre").text = genre
    ET.SubElement(root, record.identity.id_kind.url_tag).text = record.canonical_url
    return root


class NfoWriter(ISidecarWriter):
    """Implementation de ISidecarWriter sur xml.etree."""

    def write_movie_nfo(self, record: MediaRecord, path: Path) -> None:
        self._write(build_nfo(record, "movie"), path)

    def write_tvshow_nfo(self, record: MediaRecord, path: Path) -> None:
        self._write(build_nfo(record, "tvshow"), path)

    def read_identity(self, path: Path) -> Optional[MediaIdentity]:
        """
        Relit l'identite d'une fiche : tmdb, puis kinopoisk, puis imdb.

        Retourne None si la fiche est absente, illisible ou sans uniqueid.
        """
        try:
            root = ET.parse(path).getroot()
        except (OSError, ET.ParseError) as exc:
            logger.warning(f"Fiche illisible {path} : {exc}")
            return None

        found: dict[str, str] = {}
        for element in root.iter("uniqueid"):
            kind = (element.get("type") or "").lower()
            value = (element.text or "").strip()
            if kind and value and kind not in found:
                found[kind] = value

        for kind in IDENTITY_PREFERENCE:
            if kind.uniqueid_type in found:
                return MediaIdentity(found[kind.uniqueid_type], kind)
        return None

    @staticmethod
    def _write(root: ET.Element, path: Path) -> None:
        tree = ET.ElementTree(root)
        ET.indent(tree, space="    ")
        path.parent.mkdir(parents=True, exist_ok=True)
        tree.write(path, encoding="utf-8", xml_declaration=True)
        logger.debug(f"Fiche ecrite : {path}")
