"""Wire format codecs and the strike collection wrapper."""

from .base import FormatCodec, JsonCodec
from .blitzen import BlitzenCodec
from .collection import StrikeCollection
from .delimited import CSVCodec, CSVTable
from .geojson import GeoJsonCodec
from .kml import EMPTY_KML, KML_NAMESPACE, KMLCodec, KMLDocument
from .registry import get_codec, supported_formats

__all__ = [
    "FormatCodec",
    "JsonCodec",
    "BlitzenCodec",
    "CSVCodec",
    "CSVTable",
    "GeoJsonCodec",
    "KMLCodec",
    "KMLDocument",
    "EMPTY_KML",
    "KML_NAMESPACE",
    "StrikeCollection",
    "get_codec",
    "supported_formats",
]
