"""Data models for strike queries and fetch results.

Architecture:
    Query values are immutable Pydantic v2 models validated at construction;
    fetch results are frozen dataclasses wrapping strike collections.
"""

from .query import BoundingBox, Credentials, StrikeQuery, TimeWindow
from .results import StrikeChunkResult, StrikePage

__all__ = [
    "BoundingBox",
    "Credentials",
    "StrikeQuery",
    "TimeWindow",
    "StrikeChunkResult",
    "StrikePage",
]
