"""Ergonomic StrikesAPI facade over the lightning strikes endpoint.

Architecture:
    This module implements the Facade pattern to give callers one object
    that owns the HTTP session and wires the layers together:
    - StrikeFetcher: single pages, with retry
    - StrikePaginator: every page of a closed window
    - ChunkExecutor: long finalised windows in parallel chunks
    - FinalisationTimer: recurring fetch of newly finalised chunks
    - persist_strikes_to_file: writing results out

Design Decisions:
    - Default credentials are optional; every query carries its own, and
      ``build_query`` fills them in when omitted
    - Collaborator injection (HTTP client, credential resolver, clock,
      sleep) allows testing without the network
    - Context manager pattern ensures the session and any running timers
      are cleaned up

See Also:
    - runtime.rest: Transport and pagination
    - runtime.chunking: Chunk planning and execution
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from ..constants import API_HOST, MAXIMUM_PAGE_LIMIT
from ..core.enums import (
    ApiVersion,
    LightningDataNetworkProvider,
    LightningStrikeDirection,
    StrikeFormat,
)
from ..core.times import DateTimeValue, TimeDuration, utc_now
from ..formats.collection import StrikeCollection
from ..io.persistence import persist_strikes_to_file
from ..models.query import BoundingBox, Credentials, StrikeQuery, TimeWindow
from ..models.results import StrikeChunkResult, StrikePage
from ..runtime.chunking import ChunkExecutor, ChunkPolicy
from ..runtime.finalisation import ChunkCallback, FinalisationTimer
from ..runtime.rest import (
    CredentialResolver,
    HTTPClient,
    RetryPolicy,
    StrikeFetcher,
    StrikePaginator,
)

logger = logging.getLogger(__name__)


class StrikesAPI:
    """High-level entry point for fetching lightning strikes.

    Example:
        >>> async with StrikesAPI(credentials=Credentials.api_key("...")) as api:
        ...     query = api.build_query(
        ...         bbox=(174.0, -42.0, 176.0, -40.0),
        ...         start="2020-02-01T00:00:00Z",
        ...         end="2020-02-01T01:00:00Z",
        ...     )
        ...     collection = await api.fetch_all(StrikeFormat.GEOJSON_V3, query)
        ...     print(await collection.to_string())
    """

    def __init__(
        self,
        *,
        credentials: Credentials | None = None,
        http: HTTPClient | None = None,
        credential_resolver: CredentialResolver | None = None,
        host: str = API_HOST,
        retry_policy: RetryPolicy | None = None,
        chunk_policy: ChunkPolicy | None = None,
        max_pages: int | None = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the API.

        Args:
            credentials: Default credentials for ``build_query``
            http: Optional HTTPClient (a new one is created and owned otherwise)
            credential_resolver: Turns credentials into tokens (API keys and JWTs by default)
            host: API base URL
            retry_policy: Retry settings for every page request
            chunk_policy: Parallelism and grace period for chunked fetching
            max_pages: Default pagination cap per window (None = unbounded)
            clock: Source of the current UTC time
            sleep: Coroutine used for retry backoff and timer waits
        """
        self._default_credentials = credentials
        self._owns_http = http is None
        self._http = http or HTTPClient()
        self._chunk_policy = chunk_policy or ChunkPolicy()
        self._clock = clock
        self._sleep = sleep
        self._fetcher = StrikeFetcher(
            self._http,
            credential_resolver,
            host=host,
            retry_policy=retry_policy,
            sleep=sleep,
        )
        self._paginator = StrikePaginator(self._fetcher, max_pages=max_pages)
        self._executor = ChunkExecutor(self._paginator, self._chunk_policy, clock=clock)
        self._timers: list[FinalisationTimer] = []
        self._closed = False

    def build_query(
        self,
        *,
        bbox: BoundingBox | Sequence[float],
        start: DateTimeValue,
        end: DateTimeValue | None = None,
        credentials: Credentials | None = None,
        limit: int = MAXIMUM_PAGE_LIMIT,
        providers: Sequence[LightningDataNetworkProvider] | None = None,
        directions: Sequence[LightningStrikeDirection] | None = None,
        api_version: ApiVersion = ApiVersion.V4,
    ) -> StrikeQuery:
        """Build a validated query, falling back to the default credentials.

        Raises:
            ValueError: If no credentials are given and none are configured
            pydantic.ValidationError: If a value is out of range
        """
        resolved = credentials or self._default_credentials
        if resolved is None:
            raise ValueError("credentials must be provided (no default set)")
        bbox_value = bbox if isinstance(bbox, BoundingBox) else BoundingBox.from_sequence(list(bbox))
        return StrikeQuery(
            credentials=resolved,
            bbox=bbox_value,
            time=TimeWindow(start=start, end=end),
            api_version=api_version,
            limit=limit,
            providers=tuple(providers) if providers else None,
            directions=tuple(directions) if directions else None,
        )

    # --- REST / Historical Methods -------------------------------------------

    async def fetch_page(
        self,
        strike_format: StrikeFormat | str,
        query: StrikeQuery,
        offset: int = 0,
    ) -> StrikePage:
        """Fetch one page (retried on network and HTTP failures)."""
        return await self._fetcher.fetch_page_with_retry(strike_format, query, offset)

    async def fetch_all(
        self,
        strike_format: StrikeFormat | str,
        query: StrikeQuery,
        *,
        max_pages: int | None = None,
    ) -> StrikeCollection[Any]:
        """Fetch every strike of a closed window into one collection.

        Strikes newer than the grace period may still be incomplete; use
        ``fetch_chunked`` for windows that must be final.
        """
        logger.debug(
            "Fetching all strikes",
            extra={"format": StrikeFormat.parse(strike_format).name, "start": query.start, "end": query.end},
        )
        return await self._paginator.fetch_all(strike_format, query, max_pages=max_pages)

    async def fetch_chunked(
        self,
        strike_format: StrikeFormat | str,
        chunk_duration: TimeDuration,
        query: StrikeQuery,
        *,
        max_parallel: int | None = None,
    ) -> list[StrikeChunkResult]:
        """Fetch a finalised closed window in chunks.

        Raises:
            NotYetFinalisedError: If the window ends inside the grace period
            TooManyParallelQueriesError: If ``max_parallel`` exceeds the ceiling
        """
        return await self._executor.fetch_chunked(strike_format, chunk_duration, query, max_parallel)

    async def fetch_latest_chunked(
        self,
        strike_format: StrikeFormat | str,
        chunk_duration: TimeDuration,
        query: StrikeQuery,
        *,
        max_parallel: int | None = None,
    ) -> list[StrikeChunkResult]:
        """Fetch every chunk finalised since the query's start."""
        return await self._executor.fetch_latest_chunked(strike_format, chunk_duration, query, max_parallel)

    # --- Long-running ---------------------------------------------------------

    def fetch_when_finalised(
        self,
        strike_format: StrikeFormat | str,
        chunk_duration: TimeDuration,
        query: StrikeQuery,
        callback: ChunkCallback,
        **timer_options: Any,
    ) -> FinalisationTimer:
        """Start a timer that delivers each chunk once it has finalised.

        ``timer_options`` are passed to ``FinalisationTimer`` (``await_callback``,
        ``on_error``, ``reschedule``). The timer runs until cancelled or until
        the API is closed. Must be called from a running event loop.
        """
        timer_options.setdefault("grace_period", self._chunk_policy.grace_period)
        timer_options.setdefault("clock", self._clock)
        timer_options.setdefault("sleep", self._sleep)
        timer = FinalisationTimer(
            self._paginator,
            strike_format,
            chunk_duration,
            query,
            callback,
            **timer_options,
        )
        timer.start()
        self._timers.append(timer)
        return timer

    async def persist(
        self,
        collection: StrikeCollection[Any],
        directory: str | Path,
        file_name: str,
    ) -> Path:
        """Write a collection to disk, overwriting any existing file."""
        return await persist_strikes_to_file(collection, directory, file_name)

    # --- Lifecycle -----------------------------------------------------------

    async def close(self) -> None:
        """Stop running timers and close the HTTP session."""
        if self._closed:
            return
        self._closed = True
        logger.debug("Closing StrikesAPI")
        for timer in self._timers:
            await timer.stop()
        self._timers.clear()
        if self._owns_http:
            await self._http.close()

    async def __aenter__(self) -> StrikesAPI:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
