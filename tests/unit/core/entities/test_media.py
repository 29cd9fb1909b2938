"""
Tests for the media entities (MediaRecord, Candidate, EpisodeTable, LibraryItem).
"""

from pathlib import Path

from kinosync.core.entities import (
    Candidate,
    Episode,
    EpisodeTable,
    IdKind,
    LibraryItem,
    MediaIdentity,
    MediaRecord,
)

IDENTITY = MediaIdentity("20992", IdKind.TMDB)


class TestIdKind:
    """Tests for the NFO attributes of IdKind."""

    def test_uniqueid_type(self):
        assert IdKind.TMDB.uniqueid_type == "tmdb"
        assert IdKind.IMDB.uniqueid_type == "imdb"
        assert IdKind.KINOPOISK_HD.uniqueid_type == "kinopoisk"

    def test_url_tag(self):
        assert IdKind.KINOPOISK.url_tag == "kpurl"
        assert IdKind.KINOPOISK_HD.url_tag == "url"


class TestMediaRecord:
    """Tests for MediaRecord."""

    def test_titles_are_distinct_and_ordered(self):
        record = MediaRecord(IDENTITY, title="Брат", original_title="Brat", alternative_title="Brat")
        assert record.titles() == ["Брат", "Brat"]

    def test_display_name(self):
        assert MediaRecord(IDENTITY, title="Брат", original_title="Brat", year="1997").display_name == (
            "Брат / Brat (1997)"
        )
        assert MediaRecord(IDENTITY, original_title="Brat").display_name == "Brat"

    def test_identity_equality(self):
        assert MediaIdentity("20992", IdKind.TMDB) == IDENTITY
        assert MediaIdentity("20992", IdKind.KINOPOISK) != IDENTITY
        assert str(IDENTITY) == "tmdb:20992"


def test_candidate_score_clamped():
    record = MediaRecord(IDENTITY)
    assert Candidate(record, 130).score == 100
    assert Candidate(record, -20).score == 0


class TestEpisodeTable:
    """Tests for EpisodeTable."""

    def test_lookup_and_order(self):
        table = EpisodeTable([Episode(1, 2, name="b"), Episode(1, 1, name="a")])

        assert (1, 1) in table
        assert (2, 1) not in table
        assert [e.name for e in table] == ["b", "a"]
        assert len(table) == 2

    def test_empty(self):
        assert EpisodeTable().is_empty


def test_library_item():
    source = Path("/media/films/Movie")
    item = LibraryItem(source, [source / "a.mkv", source / "b.mkv"])

    assert item.name == "Movie"
    assert item.is_multi_file
    assert item.resolved is None
