"""
Adaptateurs (implementations concretes des ports).

- api : fournisseurs de metadonnees (TMDB, IMDb, Kinopoisk), assistant IA,
  cache et relance HTTP
- torrents : client Transmission et lecteur de sujets rutracker
- file_system, nfo_writer, images : ecriture de la bibliotheque
- cli : interface en ligne de commande
"""
