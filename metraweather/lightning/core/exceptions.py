"""Custom exception hierarchy."""

from __future__ import annotations

from datetime import datetime


class LightningError(Exception):
    """Base exception for all library errors."""

    pass


class ParseError(LightningError):
    """Response body is not well-formed for its declared format.

    Never retried: the payload will not change on a second request.
    """

    def __init__(self, message: str, strike_format: str | None = None) -> None:
        super().__init__(message)
        self.strike_format = strike_format


class UnsupportedFormatError(LightningError):
    """Format identifier does not name a supported wire format."""

    def __init__(self, strike_format: str) -> None:
        super().__init__(f"Format '{strike_format}' is not supported")
        self.strike_format = strike_format


class HttpError(LightningError):
    """API answered with a non-2xx status."""

    def __init__(self, status: int, status_text: str = "", body: str = "") -> None:
        message = f"Request failed with {status} {status_text}".rstrip()
        if body:
            message = f"{message}: {body}"
        super().__init__(message)
        self.status = status
        self.status_text = status_text
        self.body = body


class CredentialExchangeError(HttpError):
    """Client credentials could not be exchanged for a JWT."""

    pass


class NetworkError(LightningError):
    """Transport-level failure (connection, DNS, timeout). Retryable."""

    pass


class NotYetFinalisedError(LightningError):
    """Requested window ends inside the finalisation grace period.

    Strikes may still arrive late for such a window, so it cannot be fetched
    as a complete, closed period.
    """

    def __init__(self, message: str, end: datetime | None = None, horizon: datetime | None = None) -> None:
        super().__init__(message)
        self.end = end
        self.horizon = horizon


class TooManyParallelQueriesError(LightningError):
    """Requested parallelism exceeds the allowed ceiling."""

    def __init__(self, requested: int, maximum: int) -> None:
        super().__init__(f"You cannot make more than {maximum} queries at once (requested {requested})")
        self.requested = requested
        self.maximum = maximum


class MergeShapeMismatchError(LightningError):
    """Two collections cannot be merged because their shapes differ."""

    pass


class PaginationLimitError(LightningError):
    """Pagination kept reporting more pages after the configured cap."""

    def __init__(self, max_pages: int) -> None:
        super().__init__(f"API still reported more strikes after {max_pages} pages")
        self.max_pages = max_pages
