"""Single page strike fetching with retry.

Architecture:
    ``StrikeFetcher.fetch_page`` performs one GET against the strikes
    endpoint and wraps the body in a lazily parsed ``StrikeCollection``.
    Whether more pages follow is read from the ``Link`` response header:
    a ``rel="next"`` entry means the offset can be advanced.
    ``fetch_page_with_retry`` repeats failed requests under a ``RetryPolicy``.

Design Decisions:
    - Only transport and HTTP failures are retried; a malformed payload or
      an unknown format fails immediately
    - Linear backoff: the wait before attempt ``n + 1`` is ``n`` backoff units
    - The last failure is re-raised as is, never wrapped
    - Query parameters are rendered in a fixed order so URLs are stable

See Also:
    - runtime.rest.paginator: Walks pages until the API reports no more
    - runtime.rest.auth: Supplies the Authorization header
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from ...constants import API_HOST, MAXIMUM_NUMBER_OF_ATTEMPTS, RETRY_BACKOFF_SECONDS, STRIKES_PATH
from ...core.enums import StrikeFormat
from ...core.exceptions import HttpError, NetworkError, ParseError
from ...core.times import format_instant
from ...formats.collection import StrikeCollection
from ...models.query import StrikeQuery
from ...models.results import StrikePage
from .auth import CredentialResolver, StaticCredentialResolver, authorization_header
from .http import HTTPClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS: tuple[type[Exception], ...] = (NetworkError, HttpError)


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently a failed request is repeated.

    Attributes:
        max_attempts: Total attempts including the first one
        backoff_unit: Seconds added to the wait for every failed attempt
    """

    max_attempts: int = MAXIMUM_NUMBER_OF_ATTEMPTS
    backoff_unit: float = RETRY_BACKOFF_SECONDS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_unit < 0:
            raise ValueError("backoff_unit cannot be negative")

    def delay_after(self, failed_attempts: int) -> float:
        """Seconds to wait after ``failed_attempts`` consecutive failures."""
        return failed_attempts * self.backoff_unit


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    description: str = "request",
) -> T:
    """Run ``operation`` until it succeeds or the policy is exhausted.

    Raises:
        NetworkError | HttpError: The last failure once attempts run out
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except RETRYABLE_ERRORS as e:
            if attempt >= policy.max_attempts:
                logger.error(f"{description} failed after {attempt} attempts: {e}")
                raise
            delay = policy.delay_after(attempt)
            logger.info(
                "fetch_retry",
                extra={
                    "description": description,
                    "attempt": attempt,
                    "max_attempts": policy.max_attempts,
                    "delay_seconds": delay,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            await sleep(delay)
    raise AssertionError("unreachable")


def build_strikes_url(query: StrikeQuery, offset: int, host: str = API_HOST) -> str:
    """URL of one page of strikes for ``query``.

    Raises:
        ValueError: If the query has no end time
    """
    if query.end is None:
        raise ValueError("A strike page needs a closed time window")
    params = [
        ("time", f"{format_instant(query.start)}--{format_instant(query.end)}"),
        ("bbox", query.bbox.to_param()),
        ("limit", str(query.limit)),
        ("offset", str(offset)),
    ]
    if query.providers:
        params.append(("provider", ",".join(p.value for p in query.providers)))
    if query.directions:
        params.append(("direction", ",".join(d.value for d in query.directions)))
    query_string = "&".join(f"{key}={value}" for key, value in params)
    return f"{host.rstrip('/')}/{query.api_version.value}/{STRIKES_PATH}?{query_string}"


class StrikeFetcher:
    """Fetches single pages of strikes."""

    def __init__(
        self,
        http: HTTPClient | None = None,
        credential_resolver: CredentialResolver | None = None,
        *,
        host: str = API_HOST,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._http = http or HTTPClient()
        self._owns_http = http is None
        self._resolver = credential_resolver or StaticCredentialResolver()
        self._host = host
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    async def fetch_page(
        self,
        strike_format: StrikeFormat | str,
        query: StrikeQuery,
        offset: int = 0,
    ) -> StrikePage:
        """Fetch one page without retrying.

        Args:
            strike_format: Response format, sent as the ``Accept`` header
            query: Strike query with a closed time window
            offset: Number of strikes to skip

        Returns:
            The page's collection (parsed on first use) and whether more follow

        Raises:
            UnsupportedFormatError: If ``strike_format`` is unknown
            HttpError: On a non-2xx response
            NetworkError: On transport failures
            ParseError: If the body cannot be decoded
        """
        fmt = StrikeFormat.parse(strike_format)
        url = build_strikes_url(query, offset, self._host)
        token = await self._resolver.resolve(query.credentials)
        headers = {"Accept": fmt.mime_type, **authorization_header(token)}

        try:
            response = await self._http.get(url, headers=headers)
        except ParseError as e:
            raise ParseError(str(e), fmt.value) from e
        if not response.ok:
            raise HttpError(response.status, response.reason, response.text)

        has_more = "next" in response.links
        logger.info(
            "page_fetched",
            extra={
                "format": fmt.name,
                "offset": offset,
                "limit": query.limit,
                "has_more": has_more,
                "start": format_instant(query.start),
                "end": format_instant(query.end) if query.end else None,
            },
        )
        return StrikePage(collection=StrikeCollection.from_text(fmt, response.text), has_more=has_more)

    async def fetch_page_with_retry(
        self,
        strike_format: StrikeFormat | str,
        query: StrikeQuery,
        offset: int = 0,
    ) -> StrikePage:
        """``fetch_page`` repeated under the retry policy."""
        return await call_with_retry(
            lambda: self.fetch_page(strike_format, query, offset),
            self._retry_policy,
            sleep=self._sleep,
            description=f"strike page at offset {offset}",
        )

    async def close(self) -> None:
        if self._owns_http:
            await self._http.close()
