"""Strike query value models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..constants import MAXIMUM_PAGE_LIMIT
from ..core.enums import (
    ApiVersion,
    CredentialType,
    LightningDataNetworkProvider,
    LightningStrikeDirection,
)
from ..core.times import to_utc


class Credentials(BaseModel):
    """Credentials for the API.

    API keys and JWTs carry a ``token``; client credentials carry a
    ``client_id``/``client_secret`` pair that is exchanged for a JWT.
    """

    type: CredentialType
    token: str | None = None
    client_id: str | None = None
    client_secret: str | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_fields_for_type(self) -> Credentials:
        if self.type is CredentialType.CLIENT_CREDENTIALS:
            if not self.client_id or not self.client_secret:
                raise ValueError("client credentials require client_id and client_secret")
        elif self.token is None:
            raise ValueError(f"{self.type.value} credentials require a token")
        return self

    @classmethod
    def api_key(cls, token: str) -> Credentials:
        return cls(type=CredentialType.API_KEY, token=token)

    @classmethod
    def jwt(cls, token: str) -> Credentials:
        return cls(type=CredentialType.JWT, token=token)

    @classmethod
    def client_credentials(cls, client_id: str, client_secret: str) -> Credentials:
        return cls(
            type=CredentialType.CLIENT_CREDENTIALS,
            client_id=client_id,
            client_secret=client_secret,
        )


def _format_coordinate(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class BoundingBox(BaseModel):
    """Geographic area as lower-left and upper-right corners.

    Longitude may exceed +/-180 to describe boxes crossing the antimeridian.
    """

    lower_left_lon: float
    lower_left_lat: float = Field(..., ge=-90, le=90)
    upper_right_lon: float
    upper_right_lat: float = Field(..., ge=-90, le=90)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_corners(self) -> BoundingBox:
        if self.upper_right_lat < self.lower_left_lat:
            raise ValueError("upper right latitude must be >= lower left latitude")
        if self.upper_right_lon < self.lower_left_lon:
            raise ValueError("upper right longitude must be >= lower left longitude")
        return self

    @classmethod
    def from_sequence(cls, values: tuple[float, float, float, float] | list[float]) -> BoundingBox:
        if len(values) != 4:
            raise ValueError("bbox must have exactly 4 values")
        ll_lon, ll_lat, ur_lon, ur_lat = values
        return cls(
            lower_left_lon=ll_lon,
            lower_left_lat=ll_lat,
            upper_right_lon=ur_lon,
            upper_right_lat=ur_lat,
        )

    @classmethod
    def world(cls) -> BoundingBox:
        return cls.from_sequence((-180, -90, 180, 90))

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (
            self.lower_left_lon,
            self.lower_left_lat,
            self.upper_right_lon,
            self.upper_right_lat,
        )

    def to_param(self) -> str:
        """Comma-separated form used in the ``bbox`` query parameter."""
        return ",".join(_format_coordinate(v) for v in self.as_tuple())


class TimeWindow(BaseModel):
    """Time interval of a query. ``end=None`` means open-ended."""

    start: datetime
    end: datetime | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("start", "end", mode="before")
    @classmethod
    def coerce_utc(cls, v):
        if v is None:
            return v
        return to_utc(v)

    @model_validator(mode="after")
    def validate_order(self) -> TimeWindow:
        if self.end is not None and self.end < self.start:
            raise ValueError("end must be >= start")
        return self

    @property
    def is_open_ended(self) -> bool:
        return self.end is None


class StrikeQuery(BaseModel):
    """Immutable description of a strike request.

    Supplied fully validated by callers; the core never prompts or parses
    arguments.
    """

    credentials: Credentials
    bbox: BoundingBox
    time: TimeWindow
    api_version: ApiVersion = ApiVersion.V4
    limit: int = Field(MAXIMUM_PAGE_LIMIT, gt=0, le=MAXIMUM_PAGE_LIMIT)
    providers: tuple[LightningDataNetworkProvider, ...] | None = None
    directions: tuple[LightningStrikeDirection, ...] | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("bbox", mode="before")
    @classmethod
    def coerce_bbox(cls, v):
        if isinstance(v, (list, tuple)):
            return BoundingBox.from_sequence(v)
        return v

    @field_validator("time", mode="before")
    @classmethod
    def coerce_time(cls, v):
        if isinstance(v, (list, tuple)):
            start, end = v
            return {"start": start, "end": end}
        return v

    @property
    def start(self) -> datetime:
        return self.time.start

    @property
    def end(self) -> datetime | None:
        return self.time.end

    def with_window(self, start: datetime, end: datetime) -> StrikeQuery:
        """Copy of this query restricted to ``[start, end)``."""
        return self.model_copy(update={"time": TimeWindow(start=start, end=end)})
