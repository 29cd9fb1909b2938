"""
Interfaces ports pour les fournisseurs de metadonnees.

Interfaces abstraites (ports) definissant les contrats des sources externes :
recherche paginee de films/series, table canonique des episodes, rafraichissement
des details, recherche par identifiant IMDb et assistant IA de correction.
Chaque implementation gere son transport, son authentification et son cache.
"""

from abc import ABC, abstractmethod
from typing import Optional

from kinosync.core.entities import Episode, MediaIdentity, MediaRecord, SearchPage
from kinosync.core.value_objects import ParsedTitle


class IMetadataProvider(ABC):
    """
    Interface d'une source de metadonnees interrogeable par titre.

    La cascade ne depend que de cette interface ; TMDB, IMDb et Kinopoisk
    en fournissent chacun une implementation.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifiant court du fournisseur (ex: 'tmdb', 'kinopoisk')."""
        ...

    @abstractmethod
    async def find_candidates(self, title: str, year: str, page: int) -> SearchPage:
        """
        Recherche une page de candidats pour un titre.

        Args:
            title: Titre normalise a rechercher
            year: Annee (4 chiffres) ou chaine vide
            page: Numero de page (1-indexe)

        Returns:
            SearchPage avec les candidats et le nombre total de pages

        Raises:
            ProviderUnavailableError: Si le fournisseur ne repond pas
        """
        ...


class ISeriesProvider(ABC):
    """Extension des fournisseurs capables de lister les episodes d'une serie."""

    @abstractmethod
    async def load_canonical_episodes(self, identity: MediaIdentity) -> list[Episode]:
        """
        Charge tous les episodes connus d'une serie, saison par saison.

        Args:
            identity: Identite de la serie

        Returns:
            Liste des episodes (vide si l'identite n'est pas geree par ce fournisseur)

        Raises:
            ProviderUnavailableError: Si le fournisseur ne repond pas
        """
        ...


class IDetailsProvider(ABC):
    """Fournisseur capable de recharger la fiche complete d'un resultat."""

    @abstractmethod
    async def load_details(self, record: MediaRecord) -> Optional[MediaRecord]:
        """
        Recharge la fiche d'un media dans la langue de la bibliotheque.

        Returns:
            La fiche rafraichie, ou None si le media est inconnu
        """
        ...


class IExternalIdLookup(ABC):
    """Recherche d'une fiche complete a partir d'un identifiant IMDb."""

    @abstractmethod
    async def find_by_imdb_id(self, imdb_id: str) -> Optional[MediaRecord]:
        """
        Retourne la fiche correspondant a un identifiant IMDb (tt...).

        Les series sont preferees aux films quand les deux existent.
        """
        ...


class IAIAssistant(ABC):
    """
    Assistant IA utilise en dernier recours par la cascade.

    Les reponses sont mises en cache par l'implementation, avec comme cle
    l'entree brute.
    """

    @abstractmethod
    async def propose_title_year(self, raw_name: str) -> ParsedTitle:
        """
        Propose un titre et une annee pour un nom de fichier brut.

        Raises:
            AIAssistError: Si l'assistant ne peut pas repondre
        """
        ...

    @abstractmethod
    async def propose_script_correction(self, title: str) -> str:
        """
        Corrige l'orthographe d'un titre cyrillique (e -> ё).

        Raises:
            AIAssistError: Si l'assistant ne peut pas repondre
        """
        ...
