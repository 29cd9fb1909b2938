"""
KinoSync - Synchronisation de vidéothèque personnelle.

Ce package identifie les films et séries d'une collection de fichiers vidéo
auprès de sources de métadonnées (TMDB, IMDb, Kinopoisk, assistant IA) et
maintient une bibliothèque miroir faite de liens symboliques et de fichiers .nfo.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, objets valeur, erreurs)
- services/ : Couche application (normalisation, scoring, cascade, synchronisation)
- adapters/ : Couche infrastructure (CLI, clients API, torrents, système de fichiers)
"""

__version__ = "0.1.0"
