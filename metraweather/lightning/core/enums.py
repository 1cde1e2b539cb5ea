"""Core enumerations for the lightning strike API.

Architecture:
    This module defines the standardized identifiers used throughout the
    library. Every strike collection carries a ``StrikeFormat`` tag and every
    codec is selected by it, so the enum is the single source of truth for
    which wire formats exist.

Design Decisions:
    - String enums: values are the exact strings sent to the API (MIME types,
      provider names, directions) so they serialize without translation
    - Aliases as members: ``GEOJSON`` and ``BLITZEN`` are unversioned MIME
      types the API resolves to the latest version; ``canonical`` maps them
      to the versioned member so merge compatibility is decided on one value
    - Fail fast: ``StrikeFormat.parse`` raises instead of defaulting

See Also:
    - formats.registry: Maps canonical formats to codecs
    - models.query: Uses these enums in query values
"""

from __future__ import annotations

from enum import Enum

from .exceptions import UnsupportedFormatError


class StrikeFormat(str, Enum):
    """Wire formats the strikes endpoint can respond with.

    NOTE: Vector tiles are lossy and GeoBufs are not decoded, so neither is
    offered here.
    """

    KML = "application/vnd.google-earth.kml+xml"
    CSV = "text/csv"
    GEOJSON = "application/vnd.geo+json"
    GEOJSON_V3 = "application/vnd.metraweather.lightning.geo+json.v3"
    GEOJSON_V2 = "application/vnd.metraweather.lightning.geo+json.v2"
    BLITZEN = "application/vnd.metraweather.blitzen"
    BLITZEN_V3 = "application/vnd.metraweather.blitzen.v3"
    BLITZEN_V2 = "application/vnd.metraweather.blitzen.v2"
    BLITZEN_V1 = "application/vnd.metraweather.blitzen.v1"

    @property
    def mime_type(self) -> str:
        """Value for the ``Accept`` header."""
        return self.value

    @property
    def canonical(self) -> StrikeFormat:
        """Versioned format an unversioned alias resolves to."""
        return _ALIASES.get(self, self)

    @property
    def is_geojson(self) -> bool:
        return self.canonical in (StrikeFormat.GEOJSON_V3, StrikeFormat.GEOJSON_V2)

    @property
    def is_blitzen(self) -> bool:
        return self.canonical in (
            StrikeFormat.BLITZEN_V3,
            StrikeFormat.BLITZEN_V2,
            StrikeFormat.BLITZEN_V1,
        )

    @classmethod
    def parse(cls, value: StrikeFormat | str) -> StrikeFormat:
        """Resolve a member or MIME string to a format.

        Raises:
            UnsupportedFormatError: If the identifier is not a known format
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            pass
        if isinstance(value, str) and value.upper() in cls.__members__:
            return cls[value.upper()]
        raise UnsupportedFormatError(str(value))


_ALIASES = {
    StrikeFormat.GEOJSON: StrikeFormat.GEOJSON_V3,
    StrikeFormat.BLITZEN: StrikeFormat.BLITZEN_V3,
}


class ApiVersion(str, Enum):
    """Supported API versions."""

    V4 = "v4"


class CredentialType(str, Enum):
    """How a caller authenticates against the API.

    ``CLIENT_CREDENTIALS`` is exchanged for a JWT before any strike request.
    """

    JWT = "jwt"
    API_KEY = "apiKey"
    CLIENT_CREDENTIALS = "clientCredentials"

    @property
    def authorization_scheme(self) -> str:
        """Scheme prefix for the ``Authorization`` header."""
        if self is CredentialType.API_KEY:
            return "ApiKey"
        return "Bearer"


class LightningDataNetworkProvider(str, Enum):
    """Lightning detection networks the API aggregates."""

    TOA = "toa"
    TRANSPOWER = "transpower"
    MOCK = "mock"


class LightningStrikeDirection(str, Enum):
    """Strike direction filter."""

    CLOUD = "CLOUD"
    GROUND = "GROUND"
