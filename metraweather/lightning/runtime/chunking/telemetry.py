"""Structured logging for chunked fetching.

This module provides telemetry hooks for chunk plans, batches and the
finalisation timer, emitting structured logs for observability.
"""

from __future__ import annotations

import logging
from datetime import datetime

from .definitions import TimeChunk

logger = logging.getLogger(__name__)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def log_chunk_plan(
    *,
    total_chunks: int,
    chunk_duration_seconds: float,
    start_time: datetime,
    end_time: datetime,
    max_parallel: int,
) -> None:
    """Log chunk plan creation.

    Args:
        total_chunks: Number of chunks the window was split into
        chunk_duration_seconds: Nominal chunk length
        start_time: Start of the whole window
        end_time: End of the whole window
        max_parallel: Batch size
    """
    logger.info(
        "chunk_plan_created",
        extra={
            "total_chunks": total_chunks,
            "chunk_duration_seconds": chunk_duration_seconds,
            "start_time": _iso(start_time),
            "end_time": _iso(end_time),
            "max_parallel": max_parallel,
        },
    )


def log_batch_started(*, batch_index: int, chunks: list[TimeChunk]) -> None:
    """Log the start of a batch of concurrent chunk fetches."""
    logger.info(
        "chunk_batch_started",
        extra={
            "batch_index": batch_index,
            "batch_size": len(chunks),
            "start_time": _iso(chunks[0].start) if chunks else None,
            "end_time": _iso(chunks[-1].end) if chunks else None,
        },
    )


def log_batch_completed(
    *,
    batch_index: int,
    batch_size: int,
    latency_ms: float | None = None,
) -> None:
    """Log completion of a batch.

    Args:
        batch_index: Zero-based index of the batch
        batch_size: Number of chunks fetched in the batch
        latency_ms: Wall time of the batch in milliseconds (optional)
    """
    logger.info(
        "chunk_batch_completed",
        extra={
            "batch_index": batch_index,
            "batch_size": batch_size,
            "latency_ms": latency_ms,
        },
    )


def log_chunk_error(
    *,
    chunk: TimeChunk,
    error_type: str,
    error_message: str,
) -> None:
    """Log a failed chunk fetch.

    Args:
        chunk: The chunk whose fetch failed
        error_type: Type of error (e.g., "NetworkError", "HttpError")
        error_message: Error message
    """
    logger.error(
        "chunk_error",
        extra={
            "chunk_index": chunk.index,
            "start_time": _iso(chunk.start),
            "end_time": _iso(chunk.end),
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_finalisation_scheduled(
    *,
    chunk: TimeChunk,
    fetch_at: datetime,
    delay_seconds: float,
) -> None:
    """Log the arming of the finalisation timer for a chunk."""
    logger.info(
        "finalisation_scheduled",
        extra={
            "start_time": _iso(chunk.start),
            "end_time": _iso(chunk.end),
            "fetch_at": _iso(fetch_at),
            "delay_seconds": delay_seconds,
        },
    )
