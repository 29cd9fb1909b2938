"""
Tests unitaires pour APICache.

Ces tests verifient:
- Stockage et recuperation de valeurs
- TTL differencies (recherche 24h, details 7j, IA et tracker 30j)
- cached() : un seul appel au fournisseur par cle
- Mode hors ligne : un defaut de cache devient une indisponibilite
"""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from kinosync.adapters.api.cache import APICache
from kinosync.core.errors import ProviderUnavailableError


class TestAPICache:
    """Tests pour la classe APICache."""

    @pytest.mark.asyncio
    async def test_get_returns_none_for_missing_key(self, api_cache: APICache) -> None:
        assert await api_cache.get("tmdb:search:ru-RU:брат:1") is None

    @pytest.mark.asyncio
    async def test_set_and_get_round_trip(self, api_cache: APICache) -> None:
        value = {"results": [{"id": 20992, "title": "Брат"}], "total_pages": 1}

        await api_cache.set("tmdb:search:ru-RU:брат:1", value, ttl=3600)

        assert await api_cache.get("tmdb:search:ru-RU:брат:1") == value

    def test_ttl_values(self) -> None:
        assert APICache.SEARCH_TTL == 86400
        assert APICache.DETAILS_TTL == 604800
        assert APICache.LONG_TTL == 30 * 86400

    @pytest.mark.asyncio
    async def test_clear_removes_all_entries(self, api_cache: APICache) -> None:
        await api_cache.set("key1", "value1", ttl=3600)
        await api_cache.set("key2", "value2", ttl=3600)

        await api_cache.clear()

        assert await api_cache.get("key1") is None
        assert await api_cache.get("key2") is None

    @pytest.mark.asyncio
    async def test_parallel_operations(self, api_cache: APICache) -> None:
        keys = [f"key_{i}" for i in range(10)]
        values = [f"value_{i}" for i in range(10)]

        await asyncio.gather(*[api_cache.set(k, v, ttl=3600) for k, v in zip(keys, values)])
        results = await asyncio.gather(*[api_cache.get(k) for k in keys])

        assert results == values


class TestCached:
    """Tests pour APICache.cached()."""

    @pytest.mark.asyncio
    async def test_fetch_called_once_per_key(self, api_cache: APICache) -> None:
        fetch = AsyncMock(return_value={"id": 1396})

        first = await api_cache.cached("tmdb:tv:1396", APICache.DETAILS_TTL, fetch)
        second = await api_cache.cached("tmdb:tv:1396", APICache.DETAILS_TTL, fetch)

        assert first == second == {"id": 1396}
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_offline_miss_raises(self, tmp_path: Path) -> None:
        """Hors ligne, une cle absente ne declenche aucune requete."""
        cache = APICache(cache_dir=tmp_path / "offline", offline=True)
        fetch = AsyncMock(return_value={})
        try:
            with pytest.raises(ProviderUnavailableError):
                await cache.cached("tmdb:tv:1396", APICache.DETAILS_TTL, fetch)
        finally:
            cache.close()

        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_offline_replays_stored_answers(self, tmp_path: Path) -> None:
        online = APICache(cache_dir=tmp_path / "replay")
        await online.set("tmdb:tv:1396", {"id": 1396}, ttl=3600)
        online.close()

        offline = APICache(cache_dir=tmp_path / "replay", offline=True)
        try:
            value = await offline.cached("tmdb:tv:1396", APICache.DETAILS_TTL, AsyncMock())
        finally:
            offline.close()

        assert value == {"id": 1396}
