"""MetraWeather Lightning - async client for the lightning strikes API."""

from .api import StrikesAPI
from .constants import (
    API_HOST,
    DEFAULT_QUERIES_AT_ONCE,
    FINALISED_HISTORY_TIME,
    MAXIMUM_PAGE_LIMIT,
    MAXIMUM_QUERIES_AT_ONCE,
)
from .core import (
    ApiVersion,
    CredentialExchangeError,
    CredentialType,
    HttpError,
    LightningDataNetworkProvider,
    LightningError,
    LightningStrikeDirection,
    MergeShapeMismatchError,
    NetworkError,
    NotYetFinalisedError,
    PaginationLimitError,
    ParseError,
    StrikeFormat,
    TooManyParallelQueriesError,
    UnsupportedFormatError,
)
from .formats import StrikeCollection, get_codec, supported_formats
from .io import persist_strikes_to_file
from .models import BoundingBox, Credentials, StrikeChunkResult, StrikePage, StrikeQuery, TimeWindow
from .runtime import (
    ChunkExecutor,
    ChunkPolicy,
    ClientCredentialsExchanger,
    FinalisationTimer,
    HTTPClient,
    RescheduleMode,
    RetryPolicy,
    StaticCredentialResolver,
    StrikeFetcher,
    StrikePaginator,
    TimeChunk,
    TimerState,
    split_interval,
)

__version__ = "0.1.0"

__all__ = [
    # API
    "StrikesAPI",
    # Constants
    "API_HOST",
    "DEFAULT_QUERIES_AT_ONCE",
    "FINALISED_HISTORY_TIME",
    "MAXIMUM_PAGE_LIMIT",
    "MAXIMUM_QUERIES_AT_ONCE",
    # Enums
    "ApiVersion",
    "CredentialType",
    "LightningDataNetworkProvider",
    "LightningStrikeDirection",
    "StrikeFormat",
    # Exceptions
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
    # Formats
    "StrikeCollection",
    "get_codec",
    "supported_formats",
    # Models
    "BoundingBox",
    "Credentials",
    "StrikeQuery",
    "TimeWindow",
    "StrikePage",
    "StrikeChunkResult",
    # Runtime
    "HTTPClient",
    "StaticCredentialResolver",
    "ClientCredentialsExchanger",
    "RetryPolicy",
    "StrikeFetcher",
    "StrikePaginator",
    "ChunkExecutor",
    "ChunkPolicy",
    "TimeChunk",
    "split_interval",
    "FinalisationTimer",
    "RescheduleMode",
    "TimerState",
    # IO
    "persist_strikes_to_file",
]
