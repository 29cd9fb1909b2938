"""
Exceptions du domaine KinoSync.

Les issues NotFound et AmbiguousSplit ne sont pas des exceptions : ce sont
des resultats types renvoyes par la cascade (voir services.cascade et
services.identifier). Seules les pannes reelles sont levees :

- ProviderUnavailableError : panne d'un fournisseur (transport, HTTP, cache
  hors ligne). Capturee par la cascade, qui passe au fournisseur suivant.
- AIAssistError : l'assistant IA n'a pas pu proposer de correction.
- SynchronizationError : echec d'une operation sur le systeme de fichiers
  pendant la creation des liens ou le nettoyage. Interrompt l'element courant.
"""

from pathlib import Path
from typing import Optional


class KinoSyncError(Exception):
    """Classe de base des erreurs de l'application."""


class ProviderUnavailableError(KinoSyncError):
    """
    Un fournisseur de metadonnees n'a pas pu repondre.

    Attributes:
        provider: Nom du fournisseur (tmdb, imdb, kinopoisk...)
    """

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        super().__init__(f"{provider} indisponible : {reason}")


class AIAssistError(KinoSyncError):
    """L'assistant IA a echoue ou a refuse de proposer un titre."""


class SynchronizationError(KinoSyncError):
    """
    Echec d'une operation fichier pendant la synchronisation.

    Attributes:
        path: Chemin concerne par l'operation
    """

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.path = path
        super().__init__(f"{message}: {path}" if path else message)


class TrackerParseError(KinoSyncError):
    """La page du tracker ne contient pas de titre/annee exploitables."""
