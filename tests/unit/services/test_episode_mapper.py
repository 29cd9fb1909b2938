"""
Tests unitaires pour EpisodeMapper.

Ces tests verifient:
- Chargement paresseux et unique de la table canonique
- Numeros extraits conserves quand ils existent dans la table
- Rapprochement par titre quand le numero extrait est inconnu
- Table vide (serie inconnue ou panne) : numeros extraits utilises tels quels
"""

from pathlib import Path

import pytest

from kinosync.core.entities import Episode, IdKind, MediaIdentity
from kinosync.services.episode_mapper import EpisodeMapper
from tests.fixtures.providers import FakeSeriesProvider

SHOW = Path("/library/Breaking Bad")
IDENTITY = MediaIdentity("1396", IdKind.TMDB)
EPISODES = [
    Episode(season=1, episode_number=1, provider_episode_id="62085", name="Pilot"),
    Episode(season=1, episode_number=2, provider_episode_id="62086", name="The Cat's in the Bag"),
    Episode(season=1, episode_number=3, provider_episode_id="62087", name="And the Bag's in the River"),
]


class TestEpisodeMapper:
    """Tests pour EpisodeMapper.map_file()."""

    @pytest.mark.asyncio
    async def test_known_numbers_kept(self) -> None:
        provider = FakeSeriesProvider(EPISODES)
        mapper = EpisodeMapper(IDENTITY, provider)
        video = SHOW / "S01E03.mkv"

        assert await mapper.map_file(video, [video]) == (1, 3)

    @pytest.mark.asyncio
    async def test_table_loaded_once(self) -> None:
        """La table canonique n'est chargee qu'une fois par serie."""
        provider = FakeSeriesProvider(EPISODES)
        mapper = EpisodeMapper(IDENTITY, provider)
        files = [SHOW / "S01E01.mkv", SHOW / "S01E02.mkv"]

        for video in files:
            await mapper.map_file(video, files)

        assert provider.load_count == 1

    @pytest.mark.asyncio
    async def test_unknown_number_matched_by_title(self) -> None:
        """Un numero absent de la table est remplace par l'episode le plus ressemblant."""
        provider = FakeSeriesProvider(EPISODES)
        mapper = EpisodeMapper(IDENTITY, provider)
        video = SHOW / "S01E09 The Cats in the Bag.mkv"

        assert await mapper.map_file(video, [video]) == (1, 2)

    @pytest.mark.asyncio
    async def test_provider_failure_keeps_extracted_numbers(self) -> None:
        provider = FakeSeriesProvider(EPISODES, fail=True)
        mapper = EpisodeMapper(IDENTITY, provider)
        video = SHOW / "S02E05.mkv"

        assert await mapper.map_file(video, [video]) == (2, 5)
        assert (await mapper.table()).is_empty

    @pytest.mark.asyncio
    async def test_without_identity_provider_not_called(self) -> None:
        provider = FakeSeriesProvider(EPISODES)
        mapper = EpisodeMapper(None, provider)
        video = SHOW / "S05E01.mkv"

        assert await mapper.map_file(video, [video]) == (5, 1)
        assert provider.load_count == 0
