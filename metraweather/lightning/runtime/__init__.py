"""Runtime layer: transport, pagination, chunking and the finalisation timer."""

from .chunking import ChunkExecutor, ChunkPlanner, ChunkPolicy, TimeChunk, split_interval
from .finalisation import FinalisationTimer, RescheduleMode, TimerState
from .rest import (
    ClientCredentialsExchanger,
    CredentialResolver,
    HTTPClient,
    RawResponse,
    RetryPolicy,
    StaticCredentialResolver,
    StrikeFetcher,
    StrikePaginator,
    build_strikes_url,
)

__all__ = [
    "HTTPClient",
    "RawResponse",
    "CredentialResolver",
    "StaticCredentialResolver",
    "ClientCredentialsExchanger",
    "RetryPolicy",
    "StrikeFetcher",
    "StrikePaginator",
    "build_strikes_url",
    "ChunkExecutor",
    "ChunkPlanner",
    "ChunkPolicy",
    "TimeChunk",
    "split_interval",
    "FinalisationTimer",
    "RescheduleMode",
    "TimerState",
]
