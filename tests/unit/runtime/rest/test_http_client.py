"""Unit tests for HTTPClient."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from metraweather.lightning.core import LightningError, NetworkError, ParseError
from metraweather.lightning.runtime.rest import HTTPClient, RawResponse


def fake_response(status=200, reason="OK", text="", links=None):
    response = MagicMock()
    response.status = status
    response.reason = reason
    response.text = AsyncMock(return_value=text)
    response.links = links or {}
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    return context


def client_with_session(session: MagicMock) -> HTTPClient:
    client = HTTPClient()
    session.closed = False
    client._session = session
    return client


class TestHTTPClientSessionManagement:
    """Test HTTPClient session management."""

    def test_init(self):
        """Test HTTPClient initialization."""
        client = HTTPClient(timeout=10.0)
        assert client.timeout.total == 10.0
        assert client._session is None

    @pytest.mark.asyncio
    async def test_session_property_creates_session(self):
        """Test session property creates session when needed."""
        client = HTTPClient()
        session = client.session
        assert isinstance(session, aiohttp.ClientSession)
        assert client._session is session
        await client.close()

    @pytest.mark.asyncio
    async def test_session_property_recreates_closed_session(self):
        """Test session property recreates closed session."""
        client = HTTPClient()
        session1 = client.session
        await session1.close()

        session2 = client.session
        assert session1 is not session2
        assert not session2.closed
        await client.close()

    @pytest.mark.asyncio
    async def test_close_idempotent(self):
        """Test close() can be called multiple times."""
        client = HTTPClient()
        await client.close()
        await client.close()

    @pytest.mark.asyncio
    async def test_context_manager(self):
        """Test HTTPClient as async context manager."""
        async with HTTPClient() as client:
            assert client.session is not None
        assert client._session is None or client._session.closed


class TestHTTPClientRequests:
    """Test request handling."""

    @pytest.mark.asyncio
    async def test_get_returns_raw_response(self):
        """Test GET returns status, body and links."""
        session = MagicMock()
        session.request.return_value = fake_response(
            text="[]",
            links={"next": {"url": "https://lightning.api.metraweather.com/v4/strikes?offset=10"}},
        )
        client = client_with_session(session)

        response = await client.get("https://example.com/strikes", headers={"Accept": "text/csv"})

        assert response == RawResponse(
            status=200,
            reason="OK",
            text="[]",
            links={"next": "https://lightning.api.metraweather.com/v4/strikes?offset=10"},
        )
        assert response.ok
        session.request.assert_called_once_with(
            "GET", "https://example.com/strikes", headers={"Accept": "text/csv"}
        )

    @pytest.mark.asyncio
    async def test_non_2xx_is_returned_not_raised(self):
        """Test HTTP error statuses are left to the caller."""
        session = MagicMock()
        session.request.return_value = fake_response(status=503, reason="Service Unavailable", text="busy")
        client = client_with_session(session)

        response = await client.get("https://example.com")
        assert response.status == 503
        assert not response.ok

    @pytest.mark.asyncio
    async def test_base_url_prefix(self):
        """Test relative URLs are joined to the base URL."""
        session = MagicMock()
        session.request.return_value = fake_response()
        client = client_with_session(session)
        client.base_url = "https://api.example.com"

        await client.post("/oauth/token", data={"grant_type": "client_credentials"})
        session.request.assert_called_once_with(
            "POST",
            "https://api.example.com/oauth/token",
            data={"grant_type": "client_credentials"},
            headers=None,
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()],
    )
    async def test_transport_errors_become_network_errors(self, error):
        """Test connection failures and timeouts raise NetworkError."""
        session = MagicMock()
        session.request.side_effect = error
        client = client_with_session(session)

        with pytest.raises(NetworkError):
            await client.get("https://example.com")

    @pytest.mark.asyncio
    async def test_undecodable_body_raises_parse_error(self):
        """Test a body that is not valid in its charset raises ParseError."""
        session = MagicMock()
        context = fake_response()
        context.__aenter__.return_value.text = AsyncMock(
            side_effect=UnicodeDecodeError("utf-8", b"lon,lat\n1,\xff", 10, 11, "invalid start byte")
        )
        session.request.return_value = context
        client = client_with_session(session)

        with pytest.raises(ParseError) as exc_info:
            await client.get("https://example.com/strikes")
        assert isinstance(exc_info.value, LightningError)
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
