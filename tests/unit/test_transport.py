"""
Unit tests for the aiohttp transport.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from documentdb.transport import AiohttpTransport, HttpResponse, TransportError


def mock_session(response=None, error=None):
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    if error is not None:
        session.request = MagicMock(side_effect=error)
    else:
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=response)
        context.__aexit__ = AsyncMock(return_value=False)
        session.request = MagicMock(return_value=context)
    return session


class TestHttpResponse:
    """Tests for HttpResponse helpers."""

    def test_header_lookup_is_case_insensitive(self):
        """Test header access regardless of case."""
        response = HttpResponse(200, {"X-MS-Session-Token": "0:1"}, b"")
        assert response.header("x-ms-session-token") == "0:1"
        assert response.header("missing") is None

    def test_text(self):
        """Test body decoding."""
        assert HttpResponse(200, {}, "héllo".encode()).text == "héllo"


class TestAiohttpTransport:
    """Tests for AiohttpTransport."""

    @pytest.mark.asyncio
    async def test_send_returns_response(self):
        """Test a successful exchange."""
        raw = MagicMock()
        raw.status = 201
        raw.headers = {"x-ms-request-charge": "2.5"}
        raw.read = AsyncMock(return_value=b'{"id": "d1"}')

        transport = AiohttpTransport()
        transport._session = mock_session(response=raw)

        response = await transport.send("POST", "https://acct/dbs", {"a": "b"}, b"{}")

        assert response.status == 201
        assert response.header("x-ms-request-charge") == "2.5"
        assert response.body == b'{"id": "d1"}'
        transport._session.request.assert_called_once_with(
            "POST", "https://acct/dbs", headers={"a": "b"}, data=b"{}"
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        aiohttp.ClientConnectionError("connection refused"),
        asyncio.TimeoutError(),
    ])
    async def test_failures_become_transport_errors(self, error):
        """Test that connection failures and timeouts are wrapped."""
        transport = AiohttpTransport()
        transport._session = mock_session(error=error)

        with pytest.raises(TransportError):
            await transport.send("GET", "https://acct/dbs", {})

    @pytest.mark.asyncio
    async def test_close(self):
        """Test that close releases the session once."""
        transport = AiohttpTransport()
        session = mock_session()
        transport._session = session

        async with transport:
            pass

        session.close.assert_awaited_once()
