"""Recurring fetch of chunks as soon as they are finalised.

Architecture:
    ``FinalisationTimer`` is a long-running loop over an open-ended query.
    On start it walks chunk boundaries from the query's start to the first
    chunk that is not finalised yet, sleeps until that chunk's end plus the
    grace period, fetches it exhaustively and hands the result to a callback.
    Then it moves on to the following chunk, forever, until cancelled.

    States: IDLE -> WAITING -> FETCHING -> WAITING -> ... -> STOPPED

Design Decisions:
    - Explicit loop in a single task: exactly one fetch is pending at a
      time and cancellation is a plain ``task.cancel()``
    - Rescheduling: ``FIXED`` sleeps ``chunk + grace`` after each fetch,
      ``ALIGNED`` sleeps until the next chunk's end plus grace. ``FIXED``
      drifts later by the fetch duration on every cycle
    - Callbacks run fire-and-forget by default so a slow consumer never
      delays the next fetch; ``await_callback=True`` serializes them
    - A failed iteration is logged and the loop continues on schedule;
      ``on_error="raise"`` stops the timer and propagates instead
    - Clock and sleep are injectable for deterministic tests

See Also:
    - runtime.chunking.planners.ChunkPlanner: Boundary arithmetic
    - runtime.rest.paginator.StrikePaginator: Fetches each chunk
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import Enum
from typing import Any

from ..constants import FINALISED_HISTORY_TIME
from ..core.enums import StrikeFormat
from ..core.times import TimeDuration, to_timedelta, utc_now
from ..models.query import StrikeQuery
from ..models.results import StrikeChunkResult
from .chunking.definitions import TimeChunk
from .chunking.planners import ChunkPlanner
from .chunking.telemetry import log_finalisation_scheduled
from .rest.paginator import StrikePaginator

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[StrikeChunkResult], Awaitable[None]] | Callable[[StrikeChunkResult], None]


class RescheduleMode(str, Enum):
    """How the wait after each fetch is computed."""

    FIXED = "fixed"
    ALIGNED = "aligned"


class TimerState(str, Enum):
    IDLE = "idle"
    WAITING = "waiting"
    FETCHING = "fetching"
    STOPPED = "stopped"


class FinalisationTimer:
    """Fetches each chunk of an open-ended query once it has finalised."""

    def __init__(
        self,
        paginator: StrikePaginator,
        strike_format: StrikeFormat | str,
        chunk_duration: TimeDuration,
        query: StrikeQuery,
        callback: ChunkCallback,
        *,
        grace_period: TimeDuration = FINALISED_HISTORY_TIME,
        await_callback: bool = False,
        on_error: str = "log",
        reschedule: RescheduleMode = RescheduleMode.FIXED,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the timer.

        Args:
            paginator: Fetches every page of a chunk
            strike_format: Response format
            chunk_duration: Chunk length (timedelta, ISO-8601 duration or ms)
            query: Query whose start anchors the chunk boundaries; its end is ignored
            callback: Receives each finalised chunk (sync or async)
            grace_period: Age after which a chunk counts as finalised
            await_callback: Wait for the callback before scheduling the next fetch
            on_error: "log" to keep going after a failed iteration, "raise" to stop
            reschedule: FIXED or ALIGNED rescheduling
            clock: Source of the current UTC time
            sleep: Coroutine used to wait between fetches
        """
        if on_error not in ("log", "raise"):
            raise ValueError(f"on_error must be 'log' or 'raise', got {on_error!r}")
        self._paginator = paginator
        self._format = StrikeFormat.parse(strike_format)
        self._chunk_duration = to_timedelta(chunk_duration)
        self._query = query
        self._callback = callback
        self._planner = ChunkPlanner(to_timedelta(grace_period))
        self._await_callback = await_callback
        self._on_error = on_error
        self._reschedule = RescheduleMode(reschedule)
        self._clock = clock
        self._sleep = sleep

        self._state = TimerState.IDLE
        self._running = False
        self._task: asyncio.Task | None = None
        self._next_fetch_at: datetime | None = None
        self._pending: TimeChunk | None = None
        self._callback_tasks: set[asyncio.Future] = set()

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def next_fetch_at(self) -> datetime | None:
        """When the pending chunk will be fetched (None unless waiting)."""
        return self._next_fetch_at

    @property
    def pending_chunk(self) -> TimeChunk | None:
        return self._pending

    # ----------------------
    # Lifecycle
    # ----------------------
    def start(self) -> asyncio.Task:
        """Run the timer in a background task. Idempotent while running."""
        if self._task is not None and not self._task.done():
            return self._task
        self._task = asyncio.create_task(self.run())
        return self._task

    def cancel(self) -> None:
        """Stop after the current step; cancels a pending wait or fetch."""
        self._running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def stop(self) -> None:
        """Cancel and wait for the background task to finish."""
        self.cancel()
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        if self._callback_tasks:
            await asyncio.gather(*self._callback_tasks, return_exceptions=True)
        self._state = TimerState.STOPPED

    async def __aenter__(self) -> FinalisationTimer:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    # ----------------------
    # Loop
    # ----------------------
    async def run(self) -> None:
        """Fetch finalised chunks until cancelled.

        Raises:
            Exception: The first iteration failure when ``on_error="raise"``
        """
        self._running = True
        now = self._clock()
        chunk = self._planner.pending_chunk(self._query.start, self._chunk_duration, now)
        fetch_at = self._planner.finalised_at(chunk)

        try:
            while self._running:
                delay = max(0.0, (fetch_at - self._clock()).total_seconds())
                self._pending = chunk
                self._next_fetch_at = fetch_at
                self._state = TimerState.WAITING
                log_finalisation_scheduled(chunk=chunk, fetch_at=fetch_at, delay_seconds=delay)
                await self._sleep(delay)
                if not self._running:
                    break

                self._state = TimerState.FETCHING
                self._next_fetch_at = None
                await self._run_iteration(chunk)

                chunk = TimeChunk(start=chunk.end, end=chunk.end + self._chunk_duration, index=chunk.index + 1)
                if self._reschedule is RescheduleMode.ALIGNED:
                    fetch_at = self._planner.finalised_at(chunk)
                else:
                    fetch_at = self._clock() + self._chunk_duration + self._planner.grace_period
        finally:
            self._running = False
            self._pending = None
            self._next_fetch_at = None
            self._state = TimerState.STOPPED

    async def _run_iteration(self, chunk: TimeChunk) -> None:
        try:
            collection = await self._paginator.fetch_all(
                self._format, self._query.with_window(chunk.start, chunk.end)
            )
            result = StrikeChunkResult(collection=collection, start=chunk.start, end=chunk.end)
            await self._dispatch(result)
        except asyncio.CancelledError:
            raise
        except Exception:
            if self._on_error == "raise":
                raise
            logger.exception(
                f"Fetching finalised chunk {chunk.start.isoformat()} - {chunk.end.isoformat()} failed"
            )

    async def _dispatch(self, result: StrikeChunkResult) -> None:
        cb = self._callback
        if self._await_callback:
            if inspect.iscoroutinefunction(cb):
                await cb(result)
            else:
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, cb, result)
            return

        # Fire callbacks (don't block the schedule)
        if inspect.iscoroutinefunction(cb):
            future: asyncio.Future = asyncio.ensure_future(cb(result))
        else:
            # run sync cb in default loop executor to avoid blocking
            loop = asyncio.get_running_loop()
            future = loop.run_in_executor(None, cb, result)
        self._callback_tasks.add(future)
        future.add_done_callback(self._callback_done)

    def _callback_done(self, future: asyncio.Future) -> None:
        self._callback_tasks.discard(future)
        if not future.cancelled() and future.exception() is not None:
            logger.error(f"Finalised chunk callback failed: {future.exception()!r}")
