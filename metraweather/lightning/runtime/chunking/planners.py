"""Chunk planning: splitting windows and locating finalised boundaries.

All instants are aware UTC datetimes. A chunk boundary is always
``start + n * chunk_duration`` for the query's own start, so plans made
at different times line up with each other.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from ...core.exceptions import NotYetFinalisedError
from ...core.times import DateTimeValue, TimeDuration, format_instant, to_timedelta, to_utc
from .definitions import TimeChunk


def split_interval(start: DateTimeValue, end: DateTimeValue, duration: TimeDuration) -> list[TimeChunk]:
    """Split ``[start, end)`` into consecutive chunks of ``duration``.

    The last chunk is truncated to end exactly at ``end``. A zero-length
    interval has no chunks.

    Raises:
        ValueError: If ``duration`` is not positive or ``end`` precedes ``start``
    """
    step = to_timedelta(duration)
    cursor = to_utc(start)
    stop = to_utc(end)
    if stop < cursor:
        raise ValueError("end must be >= start")

    chunks: list[TimeChunk] = []
    while cursor < stop:
        chunk_end = min(cursor + step, stop)
        chunks.append(TimeChunk(start=cursor, end=chunk_end, index=len(chunks)))
        cursor = chunk_end
    return chunks


class ChunkPlanner:
    """Finalisation-aware chunk arithmetic.

    The planner answers three questions for a grace period:
    whether a window is finalised, where the next not-yet-finalised chunk
    boundary lies, and which finalised window can be fetched right now.
    """

    def __init__(self, grace_period: timedelta) -> None:
        self._grace_period = grace_period

    @property
    def grace_period(self) -> timedelta:
        return self._grace_period

    def horizon(self, now: datetime) -> datetime:
        """Most recent instant considered finalised at ``now``."""
        return to_utc(now) - self._grace_period

    def ensure_finalised(self, end: datetime, now: datetime) -> None:
        """Reject windows ending inside the grace period.

        Raises:
            NotYetFinalisedError: If ``end`` is not strictly older than the horizon
        """
        horizon = self.horizon(now)
        if to_utc(end) >= horizon:
            raise NotYetFinalisedError(
                f"Windows ending after {format_instant(horizon)} are not finalised yet; "
                f"strikes newer than {self._grace_period} may still arrive late",
                end=to_utc(end),
                horizon=horizon,
            )

    def next_boundary(self, start: DateTimeValue, duration: TimeDuration, now: datetime) -> datetime:
        """First chunk boundary at or after the horizon.

        Walks ``start + n * duration`` forward until it reaches
        ``now - grace_period``.
        """
        step = to_timedelta(duration)
        horizon = self.horizon(now)
        boundary = to_utc(start)
        while boundary < horizon:
            boundary += step
        return boundary

    def latest_finalised_end(self, start: DateTimeValue, duration: TimeDuration, now: datetime) -> datetime:
        """End of the last whole chunk that is already finalised.

        May precede ``start`` when no chunk has finalised yet.
        """
        return self.next_boundary(start, duration, now) - to_timedelta(duration)

    def pending_chunk(self, start: DateTimeValue, duration: TimeDuration, now: datetime) -> TimeChunk:
        """Chunk that will finalise next."""
        end = self.next_boundary(start, duration, now)
        return TimeChunk(start=end - to_timedelta(duration), end=end)

    def finalised_at(self, chunk: TimeChunk) -> datetime:
        """Instant at which ``chunk`` becomes finalised."""
        return chunk.end + self._grace_period
