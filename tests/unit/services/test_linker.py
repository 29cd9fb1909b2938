"""
Tests unitaires pour LibraryLinker.

Ces tests utilisent le vrai systeme de fichiers (tmp_path) et verifient:
- Liens d'un film (fichier seul, dossier, film en plusieurs parties)
- Fichiers associes (sous-titres) et fiche .nfo
- Dossier d'une serie et nommage S01E02 des episodes
- Idempotence : une seconde passe ne cree rien
- Mode simulation (dry-run)
"""

from dataclasses import replace
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from kinosync.adapters.file_system import FileSystemAdapter
from kinosync.adapters.nfo_writer import NfoWriter
from kinosync.core.ports import IImageDownloader
from kinosync.services.linker import (
    LibraryLinker,
    index_of_episode,
    movie_base_name,
    part_number,
)
from tests.fixtures.library import LibraryLayout
from tests.fixtures.providers import make_record

MOVIE = make_record("20992", "Брат", "1997", original_title="Brat")
SHOW = make_record("1396", "Во все тяжкие", "2008", original_title="Breaking Bad", is_series=True)


@pytest.fixture
def images() -> MagicMock:
    mock = MagicMock(spec=IImageDownloader)
    mock.download = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def linker(
    layout: LibraryLayout,
    file_system: FileSystemAdapter,
    nfo_writer: NfoWriter,
    images: MagicMock,
) -> LibraryLinker:
    return LibraryLinker(
        symlinks=file_system,
        sidecars=nfo_writer,
        movies_roots=[layout.movies],
        series_roots=[layout.series],
        images=images,
    )


class TestNamingHelpers:
    """Tests des fonctions de nommage."""

    def test_base_name_single_file(self) -> None:
        assert movie_base_name([Path("/s/Brat.1997.mkv")]) == "Brat.1997"

    def test_base_name_multipart_strips_part_suffix(self) -> None:
        files = [Path("/s/Movie/Movie.Part1.mkv"), Path("/s/Movie/Movie.Part2.mkv")]
        assert movie_base_name(files) == "Movie"

    def test_base_name_without_common_prefix_uses_folder(self) -> None:
        files = [Path("/s/Movie/cd1.avi"), Path("/s/Movie/disc2.avi")]
        assert movie_base_name(files) == "Movie"

    @pytest.mark.parametrize(
        "name,index,expected",
        [
            ("Movie.Part1.mkv", 0, 1),
            ("Movie.Part2.mkv", 0, 2),
            ("02 Movie.mkv", 0, 2),
            ("Movie.mkv", 2, 3),
        ],
    )
    def test_part_number(self, name: str, index: int, expected: int) -> None:
        assert part_number(Path("/s") / name, index) == expected

    def test_index_of_episode_ignores_marker_prefix(self) -> None:
        existing = ["S01E01 pilot.mkv", "other.mkv"]
        assert index_of_episode(existing, "pilot.mkv") == 0
        assert index_of_episode(existing, "OTHER.mkv") == 1
        assert index_of_episode(existing, "missing.mkv") == -1


class TestLinkMovie:
    """Tests de link_movie()."""

    @pytest.mark.asyncio
    async def test_single_file_movie(self, linker: LibraryLinker, layout: LibraryLayout) -> None:
        video = layout.add_file("Brat.1997.mkv")
        subtitles = layout.add_file("Brat.1997.srt")

        entry = await linker.link_movie(video, [video], MOVIE)

        link = layout.movies / "Brat.1997.mkv"
        assert entry.primary == link
        assert link.is_symlink()
        assert link.resolve() == video.resolve()
        assert (layout.movies / "Brat.1997.srt").resolve() == subtitles.resolve()
        assert (layout.movies / "Brat.1997.nfo").is_file()
        assert sorted(entry.links) == sorted([link, layout.movies / "Brat.1997.srt"])

    @pytest.mark.asyncio
    async def test_multipart_movie_in_folder(self, linker: LibraryLinker, layout: LibraryLayout) -> None:
        """Chaque partie est liee avec son numero, la fiche porte le nom de base."""
        first = layout.add_file("Movie/Movie.Part1.mkv")
        second = layout.add_file("Movie/Movie.Part2.mkv")
        layout.add_file("Movie/Movie.Part2.srt")

        entry = await linker.link_movie(first.parent, [first, second], MOVIE)

        output = layout.movies / "Movie"
        assert entry.primary == output
        assert (output / "Movie.part1.mkv").resolve() == first.resolve()
        assert (output / "Movie.part2.mkv").resolve() == second.resolve()
        assert (output / "Movie.part2.srt").is_symlink()
        assert (output / "Movie.nfo").is_file()

    @pytest.mark.asyncio
    async def test_second_pass_creates_nothing(self, linker: LibraryLinker, layout: LibraryLayout) -> None:
        video = layout.add_file("Brat.1997.mkv")
        await linker.link_movie(video, [video], MOVIE)

        entry = await linker.link_movie(video, [video], MOVIE)

        assert entry.links == []
        assert entry.sidecars == []
        assert not entry.changed

    @pytest.mark.asyncio
    async def test_images_downloaded_except_tmdb(
        self, linker: LibraryLinker, layout: LibraryLayout, images: MagicMock
    ) -> None:
        """Les images TMDB sont laissees au centre multimedia."""
        video = layout.add_file("Brat.1997.mkv")
        record = replace(
            MOVIE,
            poster_url="https://st.kp.yandex.net/images/film_big/41519.jpg",
            backdrop_url="https://image.tmdb.org/t/p/original/backdrop.jpg",
        )

        await linker.link_movie(video, [video], record)

        images.download.assert_awaited_once_with(
            "https://st.kp.yandex.net/images/film_big/41519.jpg",
            layout.movies / "Brat.1997-poster.jpg",
        )

    @pytest.mark.asyncio
    async def test_dry_run_creates_nothing(
        self, file_system: FileSystemAdapter, nfo_writer: NfoWriter, layout: LibraryLayout
    ) -> None:
        linker = LibraryLinker(
            file_system, nfo_writer, [layout.movies], [layout.series], dry_run=True
        )
        video = layout.add_file("Brat.1997.mkv")

        entry = await linker.link_movie(video, [video], MOVIE)

        assert entry.links == [layout.movies / "Brat.1997.mkv"]
        assert list(layout.movies.iterdir()) == []


class TestLinkSeries:
    """Tests de link_series()."""

    @pytest.mark.asyncio
    async def test_series_folder_and_episode_names(
        self, linker: LibraryLinker, layout: LibraryLayout
    ) -> None:
        first = layout.add_file("Breaking Bad/S01E01 Pilot.mkv")
        second = layout.add_file("Breaking Bad/e2.mkv")

        entry = await linker.link_series(first.parent, [first, second], SHOW)

        output = layout.series / "Breaking Bad"
        assert entry.primary == output
        assert (output / "tvshow.nfo").is_file()
        assert (output / "S01E01 Pilot.mkv").resolve() == first.resolve()
        assert (output / "S01E02 e2.mkv").resolve() == second.resolve()

    @pytest.mark.asyncio
    async def test_new_episode_linked_on_refresh(
        self, linker: LibraryLinker, layout: LibraryLayout
    ) -> None:
        """Un episode arrive apres la premiere passe est lie lors du rafraichissement."""
        first = layout.add_file("Breaking Bad/S01E01 Pilot.mkv")
        await linker.link_series(first.parent, [first], SHOW)
        layout.add_file("Breaking Bad/S01E02 Cat.mkv")

        destination = linker.existing_destination(first.parent)
        matched = await linker.refresh_existing(first.parent, destination)

        output = layout.series / "Breaking Bad"
        assert matched == [output]
        assert (output / "S01E02 Cat.mkv").is_symlink()

    @pytest.mark.asyncio
    async def test_second_pass_links_nothing(self, linker: LibraryLinker, layout: LibraryLayout) -> None:
        first = layout.add_file("Breaking Bad/S01E01 Pilot.mkv")
        await linker.link_series(first.parent, [first], SHOW)

        entry = await linker.link_series(first.parent, [first], SHOW)

        assert entry.links == []


class TestAmbiguousMarker:
    """Tests du dossier marqueur d'un decoupage."""

    @pytest.mark.asyncio
    async def test_marker_keeps_split_movies(self, linker: LibraryLinker, layout: LibraryLayout) -> None:
        brat = layout.add_file("Mix/Brat.1997.avi")
        stalker = layout.add_file("Mix/Stalker.1979.mkv")

        marker = linker.mark_ambiguous(brat.parent)
        matched = await linker.refresh_existing(brat.parent, marker)

        assert marker == layout.movies / "Mix"
        assert marker.is_dir()
        assert set(matched) == {
            marker,
            layout.movies / brat.name,
            layout.movies / stalker.name,
        }

    def test_existing_destination(self, linker: LibraryLinker, layout: LibraryLayout) -> None:
        source = layout.add_file("Brat.1997.mkv")
        assert linker.existing_destination(source) is None

        (layout.movies / "Brat.1997.mkv").symlink_to(source)

        assert linker.existing_destination(source) == layout.movies / "Brat.1997.mkv"
