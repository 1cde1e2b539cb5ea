"""Chunk execution: batched concurrent fetching of finalised windows.

This module provides the ChunkExecutor class that splits a closed query
window into chunks and fetches each chunk exhaustively, a bounded number of
chunks at a time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from time import perf_counter
from typing import Any

from ...core.enums import StrikeFormat
from ...core.exceptions import TooManyParallelQueriesError
from ...core.times import TimeDuration, to_timedelta, utc_now
from ...models.query import StrikeQuery
from ...models.results import StrikeChunkResult
from ..rest.paginator import StrikePaginator
from .definitions import ChunkPolicy, TimeChunk
from .planners import ChunkPlanner, split_interval
from .telemetry import log_batch_completed, log_batch_started, log_chunk_error, log_chunk_plan

logger = logging.getLogger(__name__)


class ChunkExecutor:
    """Fetches finalised windows chunk by chunk.

    Chunks are processed in batches of ``max_parallel``: every chunk of a
    batch is fetched concurrently and the whole batch completes before the
    next one starts. Results keep chunk order.
    """

    def __init__(
        self,
        paginator: StrikePaginator,
        policy: ChunkPolicy | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize chunk executor.

        Args:
            paginator: Fetches every page of a single chunk
            policy: Parallelism and grace period settings
            clock: Source of the current UTC time
        """
        self._paginator = paginator
        self._policy = policy or ChunkPolicy()
        self._planner = ChunkPlanner(self._policy.grace_period)
        self._clock = clock

    @property
    def planner(self) -> ChunkPlanner:
        return self._planner

    async def fetch_chunked(
        self,
        strike_format: StrikeFormat | str,
        chunk_duration: TimeDuration,
        query: StrikeQuery,
        max_parallel: int | None = None,
    ) -> list[StrikeChunkResult]:
        """Fetch a closed, finalised window split into chunks.

        Args:
            strike_format: Response format
            chunk_duration: Chunk length (timedelta, ISO-8601 duration or ms)
            query: Query with a closed time window
            max_parallel: Chunks per batch (defaults to the policy's)

        Returns:
            One result per chunk in chronological order

        Raises:
            NotYetFinalisedError: If the window ends inside the grace period
            TooManyParallelQueriesError: If ``max_parallel`` exceeds the ceiling
        """
        if query.end is None:
            raise ValueError("Chunked fetching needs a closed time window")
        parallel = self._policy.max_parallel if max_parallel is None else max_parallel

        self._planner.ensure_finalised(query.end, self._clock())
        if parallel > self._policy.max_parallel_ceiling:
            raise TooManyParallelQueriesError(parallel, self._policy.max_parallel_ceiling)
        if parallel < 1:
            raise ValueError("max_parallel must be at least 1")

        chunks = split_interval(query.start, query.end, chunk_duration)
        log_chunk_plan(
            total_chunks=len(chunks),
            chunk_duration_seconds=to_timedelta(chunk_duration).total_seconds(),
            start_time=query.start,
            end_time=query.end,
            max_parallel=parallel,
        )

        results: list[StrikeChunkResult] = []
        for batch_index, offset in enumerate(range(0, len(chunks), parallel)):
            batch = chunks[offset : offset + parallel]
            results.extend(await self._fetch_batch(strike_format, query, batch, batch_index))
        return results

    async def fetch_latest_chunked(
        self,
        strike_format: StrikeFormat | str,
        chunk_duration: TimeDuration,
        query: StrikeQuery,
        max_parallel: int | None = None,
    ) -> list[StrikeChunkResult]:
        """Fetch every finalised chunk from the query's start until now.

        The query's end is ignored; chunk boundaries are counted from its start
        and the window ends at the last boundary that has finalised.
        """
        end = self._planner.latest_finalised_end(query.start, chunk_duration, self._clock())
        if end <= query.start:
            logger.info(f"No finalised chunk since {query.start.isoformat()} yet")
            return []
        return await self.fetch_chunked(
            strike_format,
            chunk_duration,
            query.with_window(query.start, end),
            max_parallel,
        )

    async def fetch_chunk(
        self,
        strike_format: StrikeFormat | str,
        query: StrikeQuery,
        chunk: TimeChunk,
    ) -> StrikeChunkResult:
        """Fetch all pages of a single chunk."""
        collection = await self._paginator.fetch_all(strike_format, query.with_window(chunk.start, chunk.end))
        return StrikeChunkResult(collection=collection, start=chunk.start, end=chunk.end)

    async def _fetch_batch(
        self,
        strike_format: StrikeFormat | str,
        query: StrikeQuery,
        batch: list[TimeChunk],
        batch_index: int,
    ) -> list[StrikeChunkResult]:
        log_batch_started(batch_index=batch_index, chunks=batch)
        batch_start = perf_counter()

        outcomes: list[Any] = await asyncio.gather(
            *(self.fetch_chunk(strike_format, query, chunk) for chunk in batch),
            return_exceptions=True,
        )

        first_error: BaseException | None = None
        for chunk, outcome in zip(batch, outcomes):
            if isinstance(outcome, BaseException):
                log_chunk_error(chunk=chunk, error_type=type(outcome).__name__, error_message=str(outcome))
                first_error = first_error or outcome
        if first_error is not None:
            raise first_error

        log_batch_completed(
            batch_index=batch_index,
            batch_size=len(batch),
            latency_ms=(perf_counter() - batch_start) * 1000.0,
        )
        return list(outcomes)
