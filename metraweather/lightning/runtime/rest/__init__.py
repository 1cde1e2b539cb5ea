"""REST transport: HTTP client, credentials, page fetching and pagination."""

from .auth import (
    ClientCredentialsExchanger,
    CredentialResolver,
    ResolvedToken,
    StaticCredentialResolver,
    authorization_header,
)
from .fetcher import RetryPolicy, StrikeFetcher, build_strikes_url, call_with_retry
from .http import HTTPClient, RawResponse
from .paginator import StrikePaginator

__all__ = [
    "HTTPClient",
    "RawResponse",
    "CredentialResolver",
    "StaticCredentialResolver",
    "ClientCredentialsExchanger",
    "ResolvedToken",
    "authorization_header",
    "RetryPolicy",
    "StrikeFetcher",
    "build_strikes_url",
    "call_with_retry",
    "StrikePaginator",
]
