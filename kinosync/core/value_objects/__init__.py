"""
Objets valeur immutables du domaine.

Exports:
- ParsedTitle: Titre et annee extraits d'un nom de fichier
- Script: Script d'ecriture (latin, cyrillique)
"""

from kinosync.core.value_objects.parsed_title import ParsedTitle, Script

__all__ = ["ParsedTitle", "Script"]
