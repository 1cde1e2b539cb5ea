"""Chunking data structures and policy.

This module defines the data structures used to describe how a long query
window is split into chunks and how many chunks may be fetched at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ...constants import DEFAULT_QUERIES_AT_ONCE, FINALISED_HISTORY_TIME, MAXIMUM_QUERIES_AT_ONCE


@dataclass(frozen=True)
class TimeChunk:
    """One sub-interval ``[start, end)`` of a query window.

    Attributes:
        start: Inclusive start instant (UTC)
        end: Exclusive end instant (UTC)
        index: Zero-based position of the chunk in its plan
    """

    start: datetime
    end: datetime
    index: int = 0

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class ChunkPolicy:
    """Limits applied to chunked fetching.

    Attributes:
        max_parallel: Chunks fetched concurrently per batch
        max_parallel_ceiling: Highest ``max_parallel`` a caller may request
        grace_period: Age a window's end must exceed to count as finalised
    """

    max_parallel: int = DEFAULT_QUERIES_AT_ONCE
    max_parallel_ceiling: int = MAXIMUM_QUERIES_AT_ONCE
    grace_period: timedelta = FINALISED_HISTORY_TIME

    def __post_init__(self) -> None:
        if self.max_parallel < 1:
            raise ValueError("max_parallel must be at least 1")
        if self.grace_period < timedelta(0):
            raise ValueError("grace_period cannot be negative")
