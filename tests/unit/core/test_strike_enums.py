"""Unit tests for core enums."""

import pytest

from metraweather.lightning.core import (
    CredentialType,
    LightningDataNetworkProvider,
    LightningStrikeDirection,
    StrikeFormat,
    UnsupportedFormatError,
)


def test_strike_format_values_are_mime_types():
    assert StrikeFormat.KML.mime_type == "application/vnd.google-earth.kml+xml"
    assert StrikeFormat.CSV.value == "text/csv"
    assert StrikeFormat.GEOJSON_V3.value == "application/vnd.metraweather.lightning.geo+json.v3"
    assert StrikeFormat.BLITZEN_V1.value == "application/vnd.metraweather.blitzen.v1"


def test_strike_format_parse_accepts_member_mime_and_name():
    assert StrikeFormat.parse(StrikeFormat.CSV) is StrikeFormat.CSV
    assert StrikeFormat.parse("application/vnd.metraweather.blitzen.v2") is StrikeFormat.BLITZEN_V2
    assert StrikeFormat.parse("geojson_v2") is StrikeFormat.GEOJSON_V2


@pytest.mark.parametrize("value", ["application/octet-stream", "application/x-protobuf", "", "tiles"])
def test_strike_format_parse_rejects_unknown(value):
    with pytest.raises(UnsupportedFormatError) as exc_info:
        StrikeFormat.parse(value)
    assert exc_info.value.strike_format == value


def test_canonical_resolves_aliases():
    assert StrikeFormat.GEOJSON.canonical is StrikeFormat.GEOJSON_V3
    assert StrikeFormat.BLITZEN.canonical is StrikeFormat.BLITZEN_V3
    assert StrikeFormat.BLITZEN_V2.canonical is StrikeFormat.BLITZEN_V2
    assert StrikeFormat.KML.canonical is StrikeFormat.KML


def test_format_families():
    assert StrikeFormat.GEOJSON.is_geojson
    assert StrikeFormat.GEOJSON_V2.is_geojson
    assert not StrikeFormat.CSV.is_geojson
    assert StrikeFormat.BLITZEN.is_blitzen
    assert not StrikeFormat.KML.is_blitzen


def test_authorization_schemes():
    assert CredentialType.API_KEY.authorization_scheme == "ApiKey"
    assert CredentialType.JWT.authorization_scheme == "Bearer"
    assert CredentialType.CLIENT_CREDENTIALS.authorization_scheme == "Bearer"


def test_filter_enum_values():
    assert [p.value for p in LightningDataNetworkProvider] == ["toa", "transpower", "mock"]
    assert [d.value for d in LightningStrikeDirection] == ["CLOUD", "GROUND"]
