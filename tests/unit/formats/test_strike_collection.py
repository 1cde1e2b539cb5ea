"""Unit tests for StrikeCollection."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from metraweather.lightning.core import MergeShapeMismatchError, ParseError, StrikeFormat
from metraweather.lightning.formats import StrikeCollection

BLITZEN_A = '[{"id":1}]'
BLITZEN_B = '[{"id":2},{"id":3}]'
CSV_A = "lon,lat,time\n1,2,t1\n"
KML_A = (
    '<?xml version="1.0" encoding="UTF-8"?><kml xmlns="http://www.opengis.net/kml/2.2">'
    '<Document><Placemark id="a"/></Document></kml>'
)


class TestStrikeCollectionConstruction:
    """Test collection construction and lazy parsing."""

    def test_requires_loader_or_value(self):
        """Test a collection needs something to resolve."""
        with pytest.raises(ValueError):
            StrikeCollection(StrikeFormat.CSV)

    def test_accepts_mime_string(self):
        """Test the format may be given as its MIME type."""
        collection = StrikeCollection.from_text("text/csv", CSV_A)
        assert collection.format is StrikeFormat.CSV

    @pytest.mark.asyncio
    async def test_from_text_parses_lazily(self):
        """Test malformed text only fails once resolved."""
        collection = StrikeCollection.from_text(StrikeFormat.BLITZEN_V3, "{broken")
        assert "pending" in repr(collection)
        with pytest.raises(ParseError):
            await collection.resolve()

    @pytest.mark.asyncio
    async def test_failure_is_sticky(self):
        """Test every later call re-raises the same parse error."""
        collection = StrikeCollection.from_text(StrikeFormat.BLITZEN_V3, "{broken")
        with pytest.raises(ParseError) as first:
            await collection.resolve()
        with pytest.raises(ParseError) as second:
            await collection.to_string()
        assert first.value is second.value
        with pytest.raises(ParseError):
            await collection.merge_collection(StrikeCollection.empty(StrikeFormat.BLITZEN_V3))

    @pytest.mark.asyncio
    async def test_from_response_reads_body_once(self):
        """Test the response body is read on first resolve only."""
        response = MagicMock()
        response.text = AsyncMock(return_value=BLITZEN_B)
        collection = StrikeCollection.from_response(StrikeFormat.BLITZEN_V2, response)

        response.text.assert_not_awaited()
        assert await collection.count() == 2
        assert await collection.resolve() == [{"id": 2}, {"id": 3}]
        response.text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_concurrent_resolves_parse_once(self):
        """Test concurrent resolves share one load."""
        response = MagicMock()
        response.text = AsyncMock(return_value=BLITZEN_A)
        collection = StrikeCollection.from_response(StrikeFormat.BLITZEN_V3, response)

        values = await asyncio.gather(*(collection.resolve() for _ in range(5)))
        assert all(v is values[0] for v in values)
        response.text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_from_value_is_resolved(self):
        """Test a wrapped value is returned as is."""
        value = [{"id": 9}]
        collection = StrikeCollection.from_value(StrikeFormat.BLITZEN_V1, value)
        assert "resolved" in repr(collection)
        assert await collection.resolve() is value

    @pytest.mark.asyncio
    async def test_round_trip_kml(self):
        """Test a KML response serializes back unchanged."""
        collection = StrikeCollection.from_text(StrikeFormat.KML, KML_A)
        assert await collection.to_string() == KML_A


class TestStrikeCollectionMerge:
    """Test merging collections."""

    @pytest.mark.asyncio
    async def test_merge_replaces_own_value(self):
        """Test merge returns the merged value and stores it."""
        base = StrikeCollection.from_text(StrikeFormat.BLITZEN_V3, BLITZEN_A)
        other = StrikeCollection.from_text(StrikeFormat.BLITZEN_V3, BLITZEN_B)

        merged = await base.merge_collection(other)

        assert merged == [{"id": 1}, {"id": 2}, {"id": 3}]
        assert await base.resolve() == merged
        assert await other.resolve() == [{"id": 2}, {"id": 3}]

    @pytest.mark.asyncio
    async def test_merge_collections_folds_left(self):
        """Test merging several collections keeps argument order."""
        base = StrikeCollection.from_text(StrikeFormat.BLITZEN_V3, BLITZEN_A)
        others = [
            StrikeCollection.from_text(StrikeFormat.BLITZEN_V3, BLITZEN_B),
            StrikeCollection.from_value(StrikeFormat.BLITZEN_V3, [{"id": 4}]),
        ]
        result = await base.merge_collections(*others)
        assert result is base
        assert await base.to_string() == '[{"id":1},{"id":2},{"id":3},{"id":4}]'

    @pytest.mark.asyncio
    async def test_merge_with_empty_keeps_content(self):
        """Test merging an empty collection changes nothing."""
        base = StrikeCollection.from_text(StrikeFormat.CSV, CSV_A)
        await base.merge_collection(StrikeCollection.empty(StrikeFormat.CSV))
        assert await base.to_string() == CSV_A

    @pytest.mark.asyncio
    async def test_alias_and_versioned_format_merge(self):
        """Test an alias merges with the format it stands for."""
        base = StrikeCollection.from_text(StrikeFormat.BLITZEN, BLITZEN_A)
        other = StrikeCollection.from_text(StrikeFormat.BLITZEN_V3, BLITZEN_B)
        assert len(await base.merge_collection(other)) == 3

    @pytest.mark.asyncio
    async def test_mismatched_formats_raise(self):
        """Test collections of different formats cannot be merged."""
        base = StrikeCollection.from_text(StrikeFormat.BLITZEN_V3, BLITZEN_A)
        with pytest.raises(MergeShapeMismatchError):
            await base.merge_collection(StrikeCollection.from_text(StrikeFormat.CSV, CSV_A))
        with pytest.raises(MergeShapeMismatchError):
            await base.merge_collection(StrikeCollection.from_text(StrikeFormat.BLITZEN_V2, BLITZEN_B))

    @pytest.mark.asyncio
    async def test_concurrent_merges_are_serialized(self):
        """Test concurrent merges into one collection all land."""
        base = StrikeCollection.empty(StrikeFormat.BLITZEN_V3)
        others = [StrikeCollection.from_value(StrikeFormat.BLITZEN_V3, [{"id": i}]) for i in range(10)]
        await asyncio.gather(*(base.merge_collection(o) for o in others))
        assert sorted(s["id"] for s in await base.resolve()) == list(range(10))
