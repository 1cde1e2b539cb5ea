"""GeoJSON (v2/v3) codec."""

from __future__ import annotations

from typing import Any

from ..core.exceptions import ParseError
from .base import JsonCodec

FeatureCollection = dict[str, Any]


class GeoJsonCodec(JsonCodec[FeatureCollection]):
    """Lightning ``FeatureCollection`` documents.

    Feature ids are derived server-side from time, amplitude, type and
    location; they are passed through untouched.
    """

    name = "GeoJSON"

    def validate_shape(self, value: Any) -> None:
        if not isinstance(value, dict) or not isinstance(value.get("features"), list):
            raise ParseError(
                "Failed to parse GeoJSON. Expected an object with a 'features' array",
                self.strike_format.value,
            )

    def merge(self, base: FeatureCollection, incoming: FeatureCollection) -> FeatureCollection:
        # Every other top-level member comes from the base collection
        return {**base, "features": [*base["features"], *incoming["features"]]}

    def empty(self) -> FeatureCollection:
        return {"type": "FeatureCollection", "features": []}

    def count(self, value: FeatureCollection) -> int:
        return len(value["features"])
