"""
Business entities representing core domain concepts.

Exports:
- IdKind, MediaIdentity: External identity of a movie or series
- MediaRecord: Movie/series metadata from a provider
- Candidate, SearchPage: Intermediate search results
- Episode, EpisodeTable: Canonical episodes of a series
- LibraryItem: Entry of a source directory being synchronized
"""

from kinosync.core.entities.media import (
    Candidate,
    Episode,
    EpisodeTable,
    IdKind,
    LibraryItem,
    MediaIdentity,
    MediaRecord,
    SearchPage,
)

__all__ = [
    "Candidate",
    "Episode",
    "EpisodeTable",
    "IdKind",
    "LibraryItem",
    "MediaIdentity",
    "MediaRecord",
    "SearchPage",
]
