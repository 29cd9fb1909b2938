"""
Media metadata entities.

Entities representing movies and TV shows as returned by the metadata
providers (TMDB, IMDb, Kinopoisk), their episodes, and the library items
discovered while scanning source directories.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional


class IdKind(str, Enum):
    """
    Kind of external identifier carried by a MediaIdentity.

    Values:
        IMDB: IMDb title id (tt0133093)
        TMDB: The Movie Database numeric id
        KINOPOISK: Kinopoisk numeric id
        KINOPOISK_HD: Kinopoisk HD content id
    """

    IMDB = "imdb"
    TMDB = "tmdb"
    KINOPOISK = "kinopoisk"
    KINOPOISK_HD = "kinopoisk_hd"

    @property
    def uniqueid_type(self) -> str:
        """Value of the NFO uniqueid@type attribute."""
        if self in (IdKind.IMDB, IdKind.TMDB):
            return self.value
        return "kinopoisk"

    @property
    def url_tag(self) -> str:
        """Name of the provider-specific URL element in NFO files."""
        return {
            IdKind.IMDB: "imdburl",
            IdKind.TMDB: "tmdburl",
            IdKind.KINOPOISK: "kpurl",
            IdKind.KINOPOISK_HD: "url",
        }[self]


@dataclass(frozen=True)
class MediaIdentity:
    """
    Stable external identity of a movie or series.

    Two resolutions of the same source must produce equal identities:
    this is the key the synchronizer relies on to stay idempotent.
    """

    external_id: str
    id_kind: IdKind

    def __str__(self) -> str:
        return f"{self.id_kind.value}:{self.external_id}"


@dataclass(frozen=True)
class MediaRecord:
    """
    Movie or series metadata produced by a provider.

    Attributes:
        identity: External identity (provider id)
        title: Localized title
        original_title: Original language title
        alternative_title: Any other known title (Kinopoisk alternativeName)
        year: Release year as a string, empty when unknown
        description: Plot summary
        is_series: True for TV shows
        canonical_url: Page of the record on the provider website
        poster_url: Poster image URL
        backdrop_url: Fanart image URL
        genres: Genre names, in provider order
    """

    identity: MediaIdentity
    title: str = ""
    original_title: str = ""
    alternative_title: str = ""
    year: str = ""
    description: str = ""
    is_series: bool = False
    canonical_url: str = ""
    poster_url: str = ""
    backdrop_url: str = ""
    genres: tuple[str, ...] = ()

    def titles(self) -> list[str]:
        """Distinct non-empty titles, localized title first."""
        seen: list[str] = []
        for title in (self.title, self.original_title, self.alternative_title):
            if title and title not in seen:
                seen.append(title)
        return seen

    @property
    def display_name(self) -> str:
        name = self.title or self.original_title
        if self.original_title and self.original_title != name:
            name = f"{name} / {self.original_title}"
        return f"{name} ({self.year})" if self.year else name


@dataclass(frozen=True)
class Candidate:
    """A record with the confidence score it obtained against a query."""

    record: MediaRecord
    score: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "score", max(0, min(100, int(self.score))))


@dataclass
class SearchPage:
    """One page of a provider's paginated search results."""

    candidates: list[MediaRecord] = field(default_factory=list)
    total_pages: int = 0


@dataclass(frozen=True)
class Episode:
    """
    Canonical episode of a TV series.

    Attributes:
        season: Season number (1-indexed)
        episode_number: Episode number within season (1-indexed)
        provider_episode_id: Episode id at the provider
        name: Episode title
        air_date: First air date (YYYY-MM-DD) or empty
    """

    season: int
    episode_number: int
    provider_episode_id: str = ""
    name: str = ""
    air_date: str = ""


class EpisodeTable:
    """
    Canonical episode table of one series keyed by (season, episode).

    Insertion order is preserved so that similarity re-ranking picks the
    first canonical episode on ties.
    """

    def __init__(self, episodes: Optional[list[Episode]] = None) -> None:
        self._episodes: dict[tuple[int, int], Episode] = {}
        for episode in episodes or []:
            self.add(episode)

    def add(self, episode: Episode) -> None:
        self._episodes[(episode.season, episode.episode_number)] = episode

    def __contains__(self, key: tuple[int, int]) -> bool:
        return key in self._episodes

    def __iter__(self) -> Iterator[Episode]:
        return iter(self._episodes.values())

    def __len__(self) -> int:
        return len(self._episodes)

    @property
    def is_empty(self) -> bool:
        return not self._episodes


@dataclass
class LibraryItem:
    """
    Top-level entry of a source directory, processed once per scan pass.

    Attributes:
        source_path: File or folder in a source directory
        video_files: Video files found in the item (sorted)
        resolved: Record chosen by the cascade, None until resolved
    """

    source_path: Path
    video_files: list[Path] = field(default_factory=list)
    resolved: Optional[MediaRecord] = None

    @property
    def name(self) -> str:
        return self.source_path.name

    @property
    def is_multi_file(self) -> bool:
        return len(self.video_files) > 1
