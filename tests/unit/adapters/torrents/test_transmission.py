"""
Tests unitaires pour TransmissionSource (RPC simule avec respx).
"""

from pathlib import Path

import httpx
import pytest
import respx

from kinosync.adapters.torrents.transmission import SESSION_HEADER, TransmissionSource, torrent_key
from kinosync.core.errors import ProviderUnavailableError

RPC_URL = "http://localhost:9091/transmission/rpc"

TORRENTS = {
    "result": "success",
    "arguments": {
        "torrents": [
            {
                "id": 1,
                "downloadDir": "/downloads",
                "name": "Brat.1997.DVDRip",
                "comment": "https://rutracker.org/forum/viewtopic.php?t=1",
            },
            {"id": 2, "downloadDir": "/downloads", "name": "Stalker.1979", "comment": ""},
        ]
    },
}


def test_torrent_key() -> None:
    assert torrent_key("/Downloads/Brat/") == "/downloads/brat"


class TestCommentFor:
    """Tests pour TransmissionSource.comment_for()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_session_handshake(self) -> None:
        """Une reponse 409 fournit le jeton de session a renvoyer."""
        route = respx.post(RPC_URL).mock(
            side_effect=[
                httpx.Response(409, headers={SESSION_HEADER: "token-1"}),
                httpx.Response(200, json=TORRENTS),
            ]
        )
        source = TransmissionSource(RPC_URL)

        comment = await source.comment_for(Path("/downloads/Brat.1997.DVDRip"))
        await source.close()

        assert comment == "https://rutracker.org/forum/viewtopic.php?t=1"
        assert route.call_count == 2
        assert route.calls.last.request.headers[SESSION_HEADER] == "token-1"

    @pytest.mark.asyncio
    @respx.mock
    async def test_torrents_loaded_once(self) -> None:
        route = respx.post(RPC_URL).mock(return_value=httpx.Response(200, json=TORRENTS))
        source = TransmissionSource(RPC_URL)

        assert await source.comment_for(Path("/downloads/brat.1997.dvdrip")) is not None
        assert await source.comment_for(Path("/downloads/Stalker.1979")) is None
        assert await source.comment_for(Path("/downloads/Unknown")) is None

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_failure_reported_once(self) -> None:
        route = respx.post(RPC_URL).mock(side_effect=httpx.ConnectError("refus"))
        source = TransmissionSource(RPC_URL)

        with pytest.raises(ProviderUnavailableError):
            await source.comment_for(Path("/downloads/Brat.1997.DVDRip"))
        assert await source.comment_for(Path("/downloads/Brat.1997.DVDRip")) is None

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_rpc_error_result(self) -> None:
        respx.post(RPC_URL).mock(
            return_value=httpx.Response(200, json={"result": "method name not recognized"})
        )
        source = TransmissionSource(RPC_URL)

        with pytest.raises(ProviderUnavailableError):
            await source.call("torrent-get", {"fields": ["id"]})
