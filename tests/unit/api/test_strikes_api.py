"""Unit tests for the StrikesAPI facade."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from metraweather.lightning import (
    BoundingBox,
    Credentials,
    LightningDataNetworkProvider,
    NotYetFinalisedError,
    StrikeFormat,
    StrikesAPI,
    TimerState,
)
from metraweather.lightning.runtime.rest import RawResponse

START = datetime(2020, 2, 1, tzinfo=UTC)
LINK = {"next": "https://lightning.api.metraweather.com/v4/strikes?offset=1"}


def make_http(*responses: RawResponse) -> MagicMock:
    http = MagicMock()
    http.get = AsyncMock(side_effect=list(responses))
    http.close = AsyncMock()
    return http


async def never_returns(seconds: float) -> None:
    await asyncio.Event().wait()


class TestBuildQuery:
    """Test query construction."""

    def test_uses_default_credentials(self):
        """Test the API's credentials fill in missing ones."""
        api = StrikesAPI(credentials=Credentials.api_key("default"), http=make_http())
        query = api.build_query(bbox=(174, -42, 176, -40), start="2020-02-01T00:00:00Z", end=START + timedelta(hours=1))
        assert query.credentials.token == "default"
        assert query.bbox == BoundingBox.from_sequence([174, -42, 176, -40])
        assert query.end == START + timedelta(hours=1)

    def test_explicit_credentials_and_filters(self):
        """Test per-query credentials and provider filters."""
        api = StrikesAPI(http=make_http())
        query = api.build_query(
            bbox=BoundingBox.world(),
            start=START,
            credentials=Credentials.jwt("t"),
            limit=100,
            providers=[LightningDataNetworkProvider.TOA],
        )
        assert query.credentials.token == "t"
        assert query.limit == 100
        assert query.providers == (LightningDataNetworkProvider.TOA,)
        assert query.time.is_open_ended

    def test_missing_credentials(self):
        """Test a query cannot be built without credentials."""
        with pytest.raises(ValueError):
            StrikesAPI(http=make_http()).build_query(bbox=BoundingBox.world(), start=START)


class TestStrikesAPIFetching:
    """Test fetching through the facade."""

    @pytest.mark.asyncio
    async def test_fetch_all_merges_pages(self):
        """Test pages are followed and merged."""
        http = make_http(
            RawResponse(200, "OK", '[{"id":"a"}]', LINK),
            RawResponse(200, "OK", '[{"id":"b"}]'),
        )
        api = StrikesAPI(credentials=Credentials.api_key("key"), http=http)
        query = api.build_query(bbox=BoundingBox.world(), start=START, end=START + timedelta(minutes=30), limit=1)

        collection = await api.fetch_all(StrikeFormat.BLITZEN_V3, query)

        assert await collection.resolve() == [{"id": "a"}, {"id": "b"}]
        urls = [c.args[0] for c in http.get.await_args_list]
        assert urls[0].endswith("&limit=1&offset=0")
        assert urls[1].endswith("&limit=1&offset=1")

    @pytest.mark.asyncio
    async def test_fetch_chunked_checks_finalisation(self):
        """Test chunked fetching uses the API clock."""
        api = StrikesAPI(
            credentials=Credentials.api_key("key"),
            http=make_http(),
            clock=lambda: START + timedelta(minutes=35),
        )
        query = api.build_query(bbox=BoundingBox.world(), start=START, end=START + timedelta(minutes=30))
        with pytest.raises(NotYetFinalisedError):
            await api.fetch_chunked(StrikeFormat.CSV, "PT15M", query)

    @pytest.mark.asyncio
    async def test_fetch_chunked_returns_chunks(self):
        """Test each chunk gets its own request."""
        http = make_http(*(RawResponse(200, "OK", "[]") for _ in range(2)))
        api = StrikesAPI(credentials=Credentials.api_key("key"), http=http)
        query = api.build_query(bbox=BoundingBox.world(), start=START, end=START + timedelta(minutes=30))

        results = await api.fetch_chunked(StrikeFormat.BLITZEN_V3, "PT15M", query, max_parallel=1)

        assert [(r.start, r.end) for r in results] == [
            (START, START + timedelta(minutes=15)),
            (START + timedelta(minutes=15), START + timedelta(minutes=30)),
        ]
        assert http.get.await_count == 2


class TestStrikesAPILifecycle:
    """Test timers and cleanup."""

    @pytest.mark.asyncio
    async def test_close_stops_timers(self):
        """Test closing the API stops running timers."""
        http = make_http()
        api = StrikesAPI(credentials=Credentials.api_key("key"), http=http, sleep=never_returns)
        query = api.build_query(bbox=BoundingBox.world(), start=START)

        timer = api.fetch_when_finalised(StrikeFormat.BLITZEN_V3, "PT15M", query, AsyncMock())
        await asyncio.sleep(0)
        assert timer.state is TimerState.WAITING

        await api.close()
        assert timer.state is TimerState.STOPPED
        http.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_injected_http_not_closed(self):
        """Test a caller-owned HTTP client stays open."""
        http = make_http()
        async with StrikesAPI(http=http):
            pass
        http.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close_idempotent(self):
        """Test close() can be called multiple times."""
        api = StrikesAPI()
        await api.close()
        await api.close()

    @pytest.mark.asyncio
    async def test_persist(self, tmp_path):
        """Test persisting through the facade."""
        http = make_http(RawResponse(200, "OK", "[]"))
        api = StrikesAPI(credentials=Credentials.api_key("key"), http=http)
        query = api.build_query(bbox=BoundingBox.world(), start=START, end=START + timedelta(minutes=30))

        collection = await api.fetch_all(StrikeFormat.BLITZEN_V3, query)
        path = await api.persist(collection, tmp_path, "strikes.json")

        assert path.read_text(encoding="utf-8") == "[]"
