"""Format tag -> codec lookup."""

from __future__ import annotations

from typing import Any

from ..core.enums import StrikeFormat
from .base import FormatCodec
from .blitzen import BlitzenCodec
from .delimited import CSVCodec
from .geojson import GeoJsonCodec
from .kml import KMLCodec

_CODECS: dict[StrikeFormat, FormatCodec[Any]] = {
    StrikeFormat.KML: KMLCodec(),
    StrikeFormat.CSV: CSVCodec(),
    StrikeFormat.GEOJSON_V3: GeoJsonCodec(StrikeFormat.GEOJSON_V3),
    StrikeFormat.GEOJSON_V2: GeoJsonCodec(StrikeFormat.GEOJSON_V2),
    StrikeFormat.BLITZEN_V3: BlitzenCodec(StrikeFormat.BLITZEN_V3),
    StrikeFormat.BLITZEN_V2: BlitzenCodec(StrikeFormat.BLITZEN_V2),
    StrikeFormat.BLITZEN_V1: BlitzenCodec(StrikeFormat.BLITZEN_V1),
}


def get_codec(strike_format: StrikeFormat | str) -> FormatCodec[Any]:
    """Codec for a format identifier.

    Raises:
        UnsupportedFormatError: If the identifier is unknown
    """
    return _CODECS[StrikeFormat.parse(strike_format).canonical]


def supported_formats() -> list[StrikeFormat]:
    return list(StrikeFormat)
