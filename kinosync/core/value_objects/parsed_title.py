"""
Objets valeur pour le resultat de la normalisation des noms de fichiers.

Objets valeur immutables representant le titre candidat et l'annee extraits
d'un nom de fichier ou de repertoire, ainsi que le script d'ecriture detecte.
"""

from dataclasses import dataclass
from enum import Enum


class Script(Enum):
    """Script d'ecriture dominant d'un titre.

    Valeurs:
        LATIN: Alphabet latin
        CYRILLIC: Alphabet cyrillique
    """

    LATIN = "latin"
    CYRILLIC = "cyrillic"

    @property
    def other(self) -> "Script":
        return Script.LATIN if self is Script.CYRILLIC else Script.CYRILLIC


@dataclass(frozen=True)
class ParsedTitle:
    """
    Titre candidat extrait d'un nom brut.

    Attributs:
        title: Titre nettoye (jamais vide)
        year: Annee sur 4 chiffres, chaine vide si inconnue
    """

    title: str
    year: str = ""

    @property
    def has_year(self) -> bool:
        return bool(self.year)

    def __str__(self) -> str:
        return f"{self.title} ({self.year})" if self.year else self.title
