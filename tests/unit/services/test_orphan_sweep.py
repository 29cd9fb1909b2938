"""
Tests unitaires pour OrphanSweeper.

Ces tests verifient:
- Suppression d'un lien casse et de ses fichiers annexes
- Une entree dont la cible existe n'est jamais supprimee
- Les entrees produites pendant la passe sont conservees
- Une cible sur une source indisponible (disque demonte) est conservee
- Mode simulation et racines de sortie absentes
"""

from pathlib import Path

import pytest

from kinosync.adapters.file_system import FileSystemAdapter
from kinosync.core.errors import SynchronizationError
from kinosync.services.orphan_sweep import (
    OrphanSweeper,
    SweepDecision,
    sidecar_keys,
    strip_sidecar_suffix,
)
from tests.fixtures.library import LibraryLayout


class RefusingFileSystem(FileSystemAdapter):
    """Adaptateur qui refuse de supprimer les entrees portant un nom donne."""

    def __init__(self, refused_name: str) -> None:
        self.refused_name = refused_name

    def remove_entry(self, path: Path) -> bool:
        if path.name == self.refused_name:
            raise SynchronizationError("Suppression impossible (permission refusee)", path)
        return super().remove_entry(path)


def add_sidecars(directory: Path, base: str) -> list[Path]:
    paths = [directory / f"{base}.nfo", directory / f"{base}-poster.jpg", directory / f"{base}-fanart.jpg"]
    for path in paths:
        path.write_text("sidecar")
    return paths


@pytest.fixture
def sweeper(layout: LibraryLayout, file_system: FileSystemAdapter) -> OrphanSweeper:
    return OrphanSweeper(
        symlinks=file_system,
        output_roots=[layout.movies, layout.series],
        source_roots=[layout.source],
    )


class TestHelpers:
    """Tests des fonctions de nommage des fichiers annexes."""

    def test_sidecar_keys(self) -> None:
        keys = sidecar_keys(Path("/movies/Brat.1997.mkv"))
        assert keys == {
            "/movies/brat.1997.mkv",
            "/movies/brat.1997.nfo",
            "/movies/brat.1997-poster.jpg",
            "/movies/brat.1997-fanart.jpg",
        }

    def test_strip_sidecar_suffix(self) -> None:
        assert strip_sidecar_suffix("Brat-poster.jpg") == "Brat"
        assert strip_sidecar_suffix("Brat.nfo") == "Brat"
        assert strip_sidecar_suffix("Brat.mkv") == "Brat.mkv"


class TestSweep:
    """Tests de OrphanSweeper.sweep()."""

    def test_broken_link_removed_with_sidecars(
        self, sweeper: OrphanSweeper, layout: LibraryLayout
    ) -> None:
        """Un lien dont la source a disparu est supprime avec sa fiche et ses images."""
        link = layout.movies / "Gone.mkv"
        link.symlink_to(layout.source / "Gone.mkv")
        sidecars = add_sidecars(layout.movies, "Gone")

        report = sweeper.sweep([])

        assert not link.is_symlink()
        assert not any(path.exists() for path in sidecars)
        assert set(report.removed) == {link, *sidecars}

    def test_live_link_never_removed(
        self, sweeper: OrphanSweeper, layout: LibraryLayout
    ) -> None:
        """Une entree absente de la passe mais dont la cible existe est conservee."""
        video = layout.add_file("Brat.1997.mkv")
        link = layout.movies / "Brat.1997.mkv"
        link.symlink_to(video)
        sidecars = add_sidecars(layout.movies, "Brat.1997")

        report = sweeper.sweep([])

        assert link.is_symlink()
        assert all(path.exists() for path in sidecars)
        assert report.removed == []
        assert link in report.kept

    def test_matched_entries_kept(self, sweeper: OrphanSweeper, layout: LibraryLayout) -> None:
        link = layout.movies / "Gone.mkv"
        link.symlink_to(layout.source / "Gone.mkv")
        sidecars = add_sidecars(layout.movies, "Gone")

        report = sweeper.sweep([link])

        assert link.is_symlink()
        assert all(path.exists() for path in sidecars)
        assert report.removed == []

    def test_unavailable_source_root_kept(
        self, layout: LibraryLayout, file_system: FileSystemAdapter, tmp_path: Path
    ) -> None:
        """Une cible sur une racine source demontee ne declenche aucune suppression."""
        unmounted = tmp_path / "unmounted"
        sweeper = OrphanSweeper(
            file_system, [layout.movies], [layout.source, unmounted]
        )
        link = layout.movies / "Archive.mkv"
        link.symlink_to(unmounted / "Archive.mkv")
        sidecars = add_sidecars(layout.movies, "Archive")

        report = sweeper.sweep([])

        assert link.is_symlink()
        assert all(path.exists() for path in sidecars)
        assert link in report.unavailable
        assert report.removed == []

    def test_target_outside_source_roots_removed(
        self, sweeper: OrphanSweeper, layout: LibraryLayout, tmp_path: Path
    ) -> None:
        link = layout.movies / "Elsewhere.mkv"
        link.symlink_to(tmp_path / "elsewhere" / "Elsewhere.mkv")

        report = sweeper.sweep([])

        assert report.removed == [link]

    def test_folder_with_broken_video_removed(
        self, sweeper: OrphanSweeper, layout: LibraryLayout
    ) -> None:
        folder = layout.series / "Gone Show"
        folder.mkdir()
        (folder / "S01E01 Pilot.mkv").symlink_to(layout.source / "Gone Show" / "S01E01 Pilot.mkv")
        (folder / "tvshow.nfo").write_text("<tvshow/>")

        report = sweeper.sweep([])

        assert not folder.exists()
        assert folder in report.removed

    def test_folder_with_live_video_kept(
        self, sweeper: OrphanSweeper, layout: LibraryLayout
    ) -> None:
        video = layout.add_file("Show/S01E01 Pilot.mkv")
        folder = layout.series / "Show"
        folder.mkdir()
        (folder / "S01E01 Pilot.mkv").symlink_to(video)

        sweeper.sweep([])

        assert folder.is_dir()

    def test_dry_run_reports_without_removing(
        self, layout: LibraryLayout, file_system: FileSystemAdapter
    ) -> None:
        sweeper = OrphanSweeper(file_system, [layout.movies], [layout.source], dry_run=True)
        link = layout.movies / "Gone.mkv"
        link.symlink_to(layout.source / "Gone.mkv")

        report = sweeper.sweep([])

        assert link.is_symlink()
        assert report.removed == [link]

    def test_failed_removal_does_not_stop_the_sweep(self, layout: LibraryLayout) -> None:
        """Une suppression refusee est journalisee, les autres orphelins sont traites."""
        sweeper = OrphanSweeper(
            RefusingFileSystem("A first.mkv"), [layout.movies, layout.series], [layout.source]
        )
        first = layout.movies / "A first.mkv"
        second = layout.movies / "B second.mkv"
        first.symlink_to(layout.source / "A first.mkv")
        second.symlink_to(layout.source / "B second.mkv")
        show = layout.series / "Gone Show"
        show.mkdir()
        (show / "S01E01.mkv").symlink_to(layout.source / "Gone Show" / "S01E01.mkv")

        report = sweeper.sweep([])

        assert first.is_symlink()
        assert not second.is_symlink()
        assert not show.exists()
        assert report.failed == [first]
        assert set(report.removed) == {second, show}

    def test_missing_output_root_skipped(
        self, layout: LibraryLayout, file_system: FileSystemAdapter, tmp_path: Path
    ) -> None:
        sweeper = OrphanSweeper(file_system, [tmp_path / "absent"], [layout.source])

        report = sweeper.sweep([])

        assert report.removed == []
        assert report.kept == []


class TestDecide:
    """Tests de OrphanSweeper.decide()."""

    def test_sidecar_follows_its_video(self, sweeper: OrphanSweeper, layout: LibraryLayout) -> None:
        video = layout.add_file("Brat.1997.MKV")
        (layout.movies / "Brat.1997.MKV").symlink_to(video)
        nfo = layout.movies / "Brat.1997.nfo"
        nfo.write_text("<movie/>")

        assert sweeper.decide(nfo) is SweepDecision.KEEP_LIVE

    def test_lone_sidecar_removed(self, sweeper: OrphanSweeper, layout: LibraryLayout) -> None:
        nfo = layout.movies / "Lonely.nfo"
        nfo.write_text("<movie/>")

        assert sweeper.decide(nfo) is SweepDecision.REMOVE
