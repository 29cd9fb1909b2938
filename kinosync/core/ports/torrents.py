"""
Interfaces ports pour les indices issus des telechargements.

Un client torrent peut connaitre le sujet de tracker d'ou provient un element
de la bibliotheque ; la page de ce sujet donne souvent un titre, une annee et
un identifiant IMDb plus fiables que le nom de fichier.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class TrackerTopic:
    """
    Informations extraites d'une page de tracker.

    Attributs:
        title: Titre original extrait de l'intitule du sujet
        year: Annee sur 4 chiffres
        imdb_id: Identifiant IMDb (tt...) si la page en contient un
    """

    title: str
    year: str = ""
    imdb_id: Optional[str] = None


class ITorrentSource(ABC):
    """Interface d'un client torrent interrogeable par chemin."""

    @abstractmethod
    async def comment_for(self, path: Path) -> Optional[str]:
        """
        Retourne le commentaire du torrent dont la racine est `path`.

        Args:
            path: Element de premier niveau d'un repertoire source

        Returns:
            Commentaire (generalement l'URL du sujet), ou None si inconnu
        """
        ...


class ITrackerClient(ABC):
    """Interface d'un lecteur de pages de tracker."""

    @abstractmethod
    def supports(self, url: str) -> bool:
        """Indique si l'URL designe un sujet de ce tracker."""
        ...

    @abstractmethod
    async def load_topic(self, url: str) -> TrackerTopic:
        """
        Charge et analyse la page d'un sujet.

        Raises:
            TrackerParseError: Si le titre ne contient pas d'annee exploitable
            ProviderUnavailableError: Si la page ne peut pas etre chargee
        """
        ...
