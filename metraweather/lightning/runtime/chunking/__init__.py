"""Chunked fetching of long, finalised time windows.

Architecture:
    The chunking layer consists of:
    - definitions.py: Chunk structures (TimeChunk, ChunkPolicy)
    - planners.py: Interval splitting and finalisation boundaries
    - executors.py: Batched concurrent chunk fetching
    - telemetry.py: Structured logging

Usage:
    ``ChunkExecutor.fetch_chunked`` fetches a closed window that ended more
    than the grace period ago; ``fetch_latest_chunked`` fetches every chunk
    that has finalised since an open-ended start.
"""

from __future__ import annotations

from .definitions import ChunkPolicy, TimeChunk
from .executors import ChunkExecutor
from .planners import ChunkPlanner, split_interval

__all__ = [
    "ChunkPolicy",
    "TimeChunk",
    "ChunkPlanner",
    "ChunkExecutor",
    "split_interval",
]
