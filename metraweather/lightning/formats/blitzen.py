"""Blitzen (v1/v2/v3) codec.

A Blitzen body is a flat JSON array of strike records, so merging is plain
concatenation.
"""

from __future__ import annotations

from typing import Any

from ..core.exceptions import ParseError
from .base import JsonCodec

BlitzenCollection = list[dict[str, Any]]


class BlitzenCodec(JsonCodec[BlitzenCollection]):
    name = "Blitzen"

    def validate_shape(self, value: Any) -> None:
        if not isinstance(value, list):
            raise ParseError("Failed to parse Blitzen. Expected an array of strikes", self.strike_format.value)

    def merge(self, base: BlitzenCollection, incoming: BlitzenCollection) -> BlitzenCollection:
        return [*base, *incoming]

    def empty(self) -> BlitzenCollection:
        return []
