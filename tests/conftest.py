"""
Fixtures pytest partagees pour les tests KinoSync.

Ce module contient les fixtures communes utilisees dans les tests:
- Arborescence temporaire (sources, racines films et series)
- Cache API sur disque dans un repertoire temporaire
- Adaptateurs reels du systeme de fichiers et des fiches .nfo
- Settings de test avec chemins temporaires
"""

from pathlib import Path
from typing import Iterator

import pytest

from kinosync.adapters.api.cache import APICache
from kinosync.adapters.file_system import FileSystemAdapter
from kinosync.adapters.nfo_writer import NfoWriter
from kinosync.config import Settings
from tests.fixtures.library import LibraryLayout


@pytest.fixture
def layout(tmp_path: Path) -> LibraryLayout:
    """
    Arborescence source/films/series isolee pour chaque test.

    Utilise tmp_path de pytest : les trois racines sont sur le meme volume.
    """
    source = tmp_path / "source"
    movies = tmp_path / "movies"
    series = tmp_path / "series"
    for directory in (source, movies, series):
        directory.mkdir(parents=True)
    return LibraryLayout(source=source, movies=movies, series=series)


@pytest.fixture
def api_cache(tmp_path: Path) -> Iterator[APICache]:
    """Cache diskcache dans un repertoire temporaire."""
    cache = APICache(cache_dir=tmp_path / "cache")
    yield cache
    cache.close()


@pytest.fixture
def file_system() -> FileSystemAdapter:
    return FileSystemAdapter()


@pytest.fixture
def nfo_writer() -> NfoWriter:
    return NfoWriter()


@pytest.fixture
def test_settings(tmp_path: Path, layout: LibraryLayout) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Aucune cle API : tous les fournisseurs optionnels sont desactives.
    """
    return Settings(
        _env_file=None,
        directories=[layout.source],
        movies_output=[layout.movies],
        series_output=[layout.series],
        cache_dir=tmp_path / "cache",
        log_file=tmp_path / "test.log",
    )
