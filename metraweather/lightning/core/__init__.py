"""Core enums, exceptions and time helpers."""

from .enums import (
    ApiVersion,
    CredentialType,
    LightningDataNetworkProvider,
    LightningStrikeDirection,
    StrikeFormat,
)
from .exceptions import (
    CredentialExchangeError,
    HttpError,
    LightningError,
    MergeShapeMismatchError,
    NetworkError,
    NotYetFinalisedError,
    PaginationLimitError,
    ParseError,
    TooManyParallelQueriesError,
    UnsupportedFormatError,
)
from .times import DateTimeValue, TimeDuration, format_instant, to_timedelta, to_utc, utc_now

__all__ = [
    "ApiVersion",
    "CredentialType",
    "LightningDataNetworkProvider",
    "LightningStrikeDirection",
    "StrikeFormat",
    "LightningError",
    "ParseError",
    "UnsupportedFormatError",
    "HttpError",
    "CredentialExchangeError",
    "NetworkError",
    "NotYetFinalisedError",
    "TooManyParallelQueriesError",
    "MergeShapeMismatchError",
    "PaginationLimitError",
    "DateTimeValue",
    "TimeDuration",
    "format_instant",
    "to_timedelta",
    "to_utc",
    "utc_now",
]
