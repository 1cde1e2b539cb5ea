"""Unit tests for StrikePaginator."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, call

import pytest

from metraweather.lightning.core import PaginationLimitError, StrikeFormat
from metraweather.lightning.formats import StrikeCollection
from metraweather.lightning.models import Credentials, StrikePage, StrikeQuery
from metraweather.lightning.runtime.rest import StrikePaginator


def make_query(limit: int = 10) -> StrikeQuery:
    return StrikeQuery(
        credentials=Credentials.api_key("key"),
        bbox=[-180, -90, 180, 90],
        time=("2020-02-01T00:00:00Z", "2020-02-01T00:30:00Z"),
        limit=limit,
    )


def blitzen_page(ids: list[str], has_more: bool) -> StrikePage:
    strikes = [{"id": strike_id} for strike_id in ids]
    return StrikePage(StrikeCollection.from_value(StrikeFormat.BLITZEN_V3, strikes), has_more)


def make_fetcher(*pages: StrikePage) -> MagicMock:
    fetcher = MagicMock()
    fetcher.fetch_page_with_retry = AsyncMock(side_effect=list(pages))
    return fetcher


class TestStrikePaginator:
    """Test exhaustive pagination."""

    @pytest.mark.asyncio
    async def test_single_page(self):
        """Test a page without a next link is the whole result."""
        fetcher = make_fetcher(blitzen_page(["a"], has_more=False))
        query = make_query()

        collection = await StrikePaginator(fetcher).fetch_all(StrikeFormat.BLITZEN_V3, query)

        assert await collection.resolve() == [{"id": "a"}]
        fetcher.fetch_page_with_retry.assert_awaited_once_with(StrikeFormat.BLITZEN_V3, query, 0)

    @pytest.mark.asyncio
    async def test_offsets_advance_by_limit(self):
        """Test four pages are requested at offsets 0, 10, 20 and 30."""
        fetcher = make_fetcher(
            blitzen_page(["a"], has_more=True),
            blitzen_page(["b"], has_more=True),
            blitzen_page(["c"], has_more=True),
            blitzen_page(["d"], has_more=False),
        )
        query = make_query(limit=10)

        collection = await StrikePaginator(fetcher).fetch_all(StrikeFormat.BLITZEN_V3, query)

        assert fetcher.fetch_page_with_retry.await_args_list == [
            call(StrikeFormat.BLITZEN_V3, query, 0),
            call(StrikeFormat.BLITZEN_V3, query, 10),
            call(StrikeFormat.BLITZEN_V3, query, 20),
            call(StrikeFormat.BLITZEN_V3, query, 30),
        ]
        assert [strike["id"] for strike in await collection.resolve()] == ["a", "b", "c", "d"]

    @pytest.mark.asyncio
    async def test_empty_first_page(self):
        """Test an empty response yields an empty collection."""
        fetcher = make_fetcher(blitzen_page([], has_more=False))
        collection = await StrikePaginator(fetcher).fetch_all(StrikeFormat.BLITZEN_V3, make_query())
        assert await collection.count() == 0

    @pytest.mark.asyncio
    async def test_page_cap_raises(self):
        """Test more pages beyond the cap raise PaginationLimitError."""
        fetcher = make_fetcher(
            blitzen_page(["a"], has_more=True),
            blitzen_page(["b"], has_more=True),
            blitzen_page(["c"], has_more=False),
        )

        with pytest.raises(PaginationLimitError):
            await StrikePaginator(fetcher, max_pages=2).fetch_all(StrikeFormat.BLITZEN_V3, make_query())
        assert fetcher.fetch_page_with_retry.await_count == 2

    @pytest.mark.asyncio
    async def test_cap_reached_exactly_is_fine(self):
        """Test the last allowed page may end the query."""
        fetcher = make_fetcher(
            blitzen_page(["a"], has_more=True),
            blitzen_page(["b"], has_more=False),
        )
        collection = await StrikePaginator(fetcher).fetch_all(
            StrikeFormat.BLITZEN_V3, make_query(), max_pages=2
        )
        assert await collection.count() == 2

    def test_invalid_cap(self):
        """Test the cap must be positive."""
        with pytest.raises(ValueError):
            StrikePaginator(MagicMock(), max_pages=0)
